"""Line/column lookup and the text layout of error reports."""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from pegstate.variants import PosLineCol, SpanLineCol

LineCol = Union[PosLineCol, SpanLineCol]


def visualize_whitespace(text: str) -> str:
    """Replace carriage returns and line feeds with visible symbols."""
    return text.replace("\r", "\u240d").replace("\n", "\u240a")


def _check_pos(input: str, pos: int) -> None:
    if not 0 <= pos <= len(input):
        raise ValueError(f"position {pos} is outside an input of length {len(input)}")


def line_col(input: str, pos: int) -> Tuple[int, int]:
    """Return the 1-based line and column of ``pos`` in ``input``."""
    _check_pos(input, pos)
    line, col = 1, 1
    chars = iter(input[:pos])
    pending: Optional[str] = next(chars, None)
    while pending is not None:
        following = next(chars, None)
        if pending == "\r" and following == "\n":
            line, col = line + 1, 1
            following = next(chars, None)
        elif pending == "\n":
            line, col = line + 1, 1
        else:
            col += 1
        pending = following
    return line, col


def _line_start(input: str, pos: int) -> int:
    return input.rfind("\n", 0, pos) + 1


def _line_end(input: str, pos: int) -> int:
    if not input:
        return 0
    if pos == len(input) - 1:
        return len(input)
    newline = input.find("\n", pos)
    return newline + 1 if newline != -1 else len(input)


def line_of(input: str, pos: int) -> str:
    """Return the whole line holding ``pos``, with its line ending."""
    _check_pos(input, pos)
    if not input:
        return ""
    return input[_line_start(input, pos) : _line_end(input, pos)]


def span_lines(input: str, start: int, end: int) -> List[str]:
    """Return every line the span from ``start`` to ``end`` touches."""
    _check_pos(input, start)
    _check_pos(input, end)
    lines = []
    pos = start
    while pos <= end and pos < len(input):
        first = _line_start(input, pos)
        pos = _line_end(input, pos)
        lines.append(input[first:pos])
    return lines


def underline(line: str, line_col: LineCol) -> str:
    """Build the marker line drawn under the offending text."""
    start = line_col.start[1]
    end: Optional[int] = None
    if isinstance(line_col, SpanLineCol):
        end = line_col.end[1]
        if start > end:
            start, end = end - 1, start + 1
    offset = max(start - 1, 0)
    marks = "".join("\t" if c == "\t" else " " for c in line[:offset])
    if end is None:
        return marks + "^---"
    marks += "^"
    if end - start > 1:
        marks += "-" * (end - start - 2) + "^"
    return marks


def render(
    path: Optional[str],
    line_col: LineCol,
    line: str,
    continued_line: Optional[str],
    message: str,
) -> str:
    """Lay out a full error report."""
    start_line, start_col = line_col.start
    if isinstance(line_col, SpanLineCol):
        widest = max(start_line, line_col.end[0])
    else:
        widest = line_col.line
    spacing = " " * len(str(widest))
    prefix = f"{path}:" if path is not None else ""

    lines = [f"{spacing}--> {prefix}{start_line}:{start_col}", f"{spacing} |"]
    if isinstance(line_col, SpanLineCol) and continued_line is not None:
        width = len(spacing)
        end_line = line_col.end[0]
        lines.append(f"{start_line:>{width}} | {line}")
        if end_line - start_line > 1:
            lines.append(f"{spacing} | ...")
        lines.append(f"{end_line:>{width}} | {continued_line}")
    else:
        lines.append(f"{start_line} | {line}")
    lines.append(f"{spacing} | {underline(line, line_col)}")
    lines.append(f"{spacing} |")
    lines.append(f"{spacing} = {message}")
    return "\n".join(lines)