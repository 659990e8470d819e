"""Matched rule pairs and the iterators that walk over them."""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence

from pegstate.tokens import QueueableToken, QueueEnd, QueueStart, Tokens, end_index_of, input_pos_of


def _name(rule: Any) -> str:
    if isinstance(rule, enum.Enum):
        return rule.name
    return str(rule)


def _quoted(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True)
class _Span:
    """A slice of the input between two offsets."""

    input: str
    start: int
    end: int

    def as_str(self) -> str:
        return self.input[self.start : self.end]

    def __repr__(self) -> str:
        return f"Span {{ str: {_quoted(self.as_str())}, start: {self.start}, end: {self.end} }}"


class Pair:
    """A matched start/end token pair and everything between them."""

    def __init__(self, queue: Sequence[QueueableToken], input: str, start: int) -> None:
        self._queue = queue
        self._input = input
        self._start = start

    def _end_index(self) -> int:
        return end_index_of(self._queue, self._start)

    def as_rule(self) -> Any:
        """Return the rule this pair was matched by."""
        closing = self._queue[self._end_index()]
        if not isinstance(closing, QueueEnd):
            raise ValueError("pair is not closed by an end entry")
        return closing.rule

    def as_str(self) -> str:
        """Return the input text the pair covers."""
        start = input_pos_of(self._queue, self._start)
        end = input_pos_of(self._queue, self._end_index())
        return self._input[start:end]

    def as_span(self) -> _Span:
        """Return the span of input the pair covers."""
        start = input_pos_of(self._queue, self._start)
        end = input_pos_of(self._queue, self._end_index())
        return _Span(self._input, start, end)

    def into_inner(self) -> "Pairs":
        """Return the pairs nested directly inside this one."""
        return Pairs(self._queue, self._input, self._start + 1, self._end_index())

    def tokens(self) -> Tokens:
        """Return the tokens of this pair, its own start and end included."""
        return Tokens(self._queue, self._input, self._start, self._end_index() + 1)

    def __str__(self) -> str:
        rule = _name(self.as_rule())
        start = input_pos_of(self._queue, self._start)
        end = input_pos_of(self._queue, self._end_index())
        inner = [str(pair) for pair in self.into_inner()]
        if not inner:
            return f"{rule}({start}, {end})"
        return f"{rule}({start}, {end}, [{', '.join(inner)}])"

    def __repr__(self) -> str:
        inner = ", ".join(repr(pair) for pair in self.into_inner())
        return (
            f"Pair {{ rule: {_name(self.as_rule())}, span: {self.as_span()!r}, "
            f"inner: [{inner}] }}"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pair):
            return NotImplemented
        return (
            self._queue is other._queue
            and self._input == other._input
            and self._start == other._start
        )

    def __hash__(self) -> int:
        return hash((id(self._queue), self._input, self._start))


class Pairs:
    """A double-ended iterator over sibling pairs."""

    def __init__(
        self, queue: Sequence[QueueableToken], input: str, start: int, end: int
    ) -> None:
        self._queue = queue
        self._input = input
        self._start = start
        self._end = end

    @classmethod
    def single(cls, pair: Pair) -> "Pairs":
        """Return pairs holding just ``pair``."""
        return cls(pair._queue, pair._input, pair._start, pair._end_index() + 1)

    def as_str(self) -> str:
        """Return the input from the first pair's start to the last pair's end."""
        if self._start < self._end:
            start = input_pos_of(self._queue, self._start)
            end = input_pos_of(self._queue, self._end - 1)
            return self._input[start:end]
        return ""

    def concat(self) -> str:
        """Join the texts of the remaining pairs, leaving out what lies between them."""
        return "".join(pair.as_str() for pair in copy.copy(self))

    def flatten(self) -> "FlatPairs":
        """Return an iterator over these pairs and all pairs nested in them."""
        return FlatPairs(self._queue, self._input, self._start, self._end)

    def tokens(self) -> Tokens:
        """Return the tokens of the remaining pairs."""
        return Tokens(self._queue, self._input, self._start, self._end)

    def peek(self) -> Optional[Pair]:
        """Return the next pair without advancing, or None when none are left."""
        if self._start < self._end:
            return Pair(self._queue, self._input, self._start)
        return None

    def __iter__(self) -> "Pairs":
        return self

    def __next__(self) -> Pair:
        pair = self.peek()
        if pair is None:
            raise StopIteration
        self._start = end_index_of(self._queue, self._start) + 1
        return pair

    def next_back(self) -> Optional[Pair]:
        """Take the last remaining pair, or return None when none are left."""
        if self._end <= self._start:
            return None
        closing = self._queue[self._end - 1]
        if not isinstance(closing, QueueEnd):
            raise ValueError("pairs do not end on an end entry")
        self._end = closing.start_token_index
        return Pair(self._queue, self._input, self._end)

    def __reversed__(self) -> Iterator[Pair]:
        while (pair := self.next_back()) is not None:
            yield pair

    def __str__(self) -> str:
        return "[" + ", ".join(str(pair) for pair in copy.copy(self)) + "]"

    def __repr__(self) -> str:
        return "[" + ", ".join(repr(pair) for pair in copy.copy(self)) + "]"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pairs):
            return NotImplemented
        return (
            self._queue is other._queue
            and self._input == other._input
            and self._start == other._start
            and self._end == other._end
        )

    def __hash__(self) -> int:
        return hash((id(self._queue), self._input, self._start, self._end))


class FlatPairs:
    """A double-ended iterator over pairs and every pair nested within them."""

    def __init__(
        self, queue: Sequence[QueueableToken], input: str, start: int, end: int
    ) -> None:
        self._queue = queue
        self._input = input
        self._start = start
        self._end = end

    def tokens(self) -> Tokens:
        """Return the tokens of the remaining range."""
        return Tokens(self._queue, self._input, self._start, self._end)

    def _is_start(self, index: int) -> bool:
        return isinstance(self._queue[index], QueueStart)

    def __iter__(self) -> "FlatPairs":
        return self

    def __next__(self) -> Pair:
        if self._start >= self._end:
            raise StopIteration
        pair = Pair(self._queue, self._input, self._start)
        self._start += 1
        while self._start < self._end and not self._is_start(self._start):
            self._start += 1
        return pair

    def next_back(self) -> Optional[Pair]:
        """Take the last remaining pair, or return None when none are left."""
        if self._end <= self._start:
            return None
        self._end -= 1
        while self._end >= self._start and not self._is_start(self._end):
            self._end -= 1
        return Pair(self._queue, self._input, self._end)

    def __reversed__(self) -> Iterator[Pair]:
        while (pair := self.next_back()) is not None:
            yield pair

    def __repr__(self) -> str:
        pairs: List[Pair] = list(copy.copy(self))
        return "FlatPairs { pairs: [" + ", ".join(repr(p) for p in pairs) + "] }"