"""The exception raised when input fails to parse."""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

from pegstate.report import (
    line_col,
    line_of,
    render,
    span_lines,
    visualize_whitespace,
)
from pegstate.variants import (
    CustomErrorVariant,
    ParsingErrorVariant,
    PosLineCol,
    PosLocation,
    SpanLineCol,
    SpanLocation,
    parsing_error_message,
)

Variant = Union[ParsingErrorVariant, CustomErrorVariant]
Location = Union[PosLocation, SpanLocation]
LineCol = Union[PosLineCol, SpanLineCol]


def _strip_breaks(text: str) -> str:
    return text.replace("\r", "").replace("\n", "")


class ParseError(Exception):
    """A parsing failure with its location and the input line it happened on."""

    def __init__(
        self,
        variant: Variant,
        location: Location,
        line_col: LineCol,
        line: str,
        continued_line: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        super().__init__(variant.message())
        self.variant = variant
        self.location = location
        self.line_col = line_col
        self._line = line
        self._continued_line = continued_line
        self._path = path

    @classmethod
    def from_pos(cls, variant: Variant, input: str, pos: int) -> "ParseError":
        """Create an error pointing at a single position of ``input``."""
        if not 0 <= pos <= len(input):
            raise ValueError(f"position {pos} is outside an input of length {len(input)}")
        here = input[pos : pos + 1]
        text = line_of(input, pos)
        line = visualize_whitespace(text) if here in ("\n", "\r") else _strip_breaks(text)
        return cls(
            variant,
            PosLocation(pos),
            PosLineCol(*line_col(input, pos)),
            line,
        )

    @classmethod
    def from_span(cls, variant: Variant, input: str, start: int, end: int) -> "ParseError":
        """Create an error covering ``input[start:end]``."""
        if not 0 <= start <= end <= len(input):
            raise ValueError(f"span {start}..{end} is invalid for an input of length {len(input)}")
        end_line_col = line_col(input, end)
        # An end just after a line feed points at the visible line-feed symbol.
        if end_line_col[1] == 1:
            line, col = line_col(input, max(end - 1, 0))
            end_line_col = (line, col + 1)

        lines = span_lines(input, start, end)
        first = lines[0] if lines else ""
        text = input[start:end]
        visualize = bool(text) and (text[0] in "\r\n" or text[-1] in "\r\n")
        start_line = visualize_whitespace(first) if visualize else _strip_breaks(first)
        last = lines[-1] if len(lines) > 1 else None
        if last is None:
            continued = None
        elif visualize:
            continued = last
        else:
            continued = visualize_whitespace(last)

        return cls(
            variant,
            SpanLocation(start, end),
            SpanLineCol(line_col(input, start), end_line_col),
            start_line,
            continued,
        )

    def _copy(self, variant: Variant, path: Optional[str]) -> "ParseError":
        return ParseError(
            variant,
            self.location,
            self.line_col,
            self._line,
            self._continued_line,
            path,
        )

    def with_path(self, path: str) -> "ParseError":
        """Return this error with a path shown in its report."""
        return self._copy(self.variant, path)

    def path(self) -> Optional[str]:
        """Return the path set by :meth:`with_path`, if any."""
        return self._path

    def line(self) -> str:
        """Return the input line the error is on."""
        return self._line

    def renamed_rules(self, f: Callable[[Any], str]) -> "ParseError":
        """Return this error with rules named by ``f``; custom errors are unchanged."""
        variant = self.variant
        if isinstance(variant, ParsingErrorVariant):
            variant = CustomErrorVariant(
                parsing_error_message(variant.positives, variant.negatives, f)
            )
        return self._copy(variant, self._path)

    def _key(self) -> tuple:
        return (
            self.variant,
            self.location,
            self.line_col,
            self._path,
            self._line,
            self._continued_line,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return render(
            self._path,
            self.line_col,
            self._line,
            self._continued_line,
            self.variant.message(),
        )