"""Token queue entries and the iterator that turns them into tokens."""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence, Union


@dataclass
class QueueStart:
    """Opening entry of a matched rule; points at its closing entry."""

    end_token_index: int
    input_pos: int


@dataclass
class QueueEnd:
    """Closing entry of a matched rule; carries the rule and points back at its start."""

    start_token_index: int
    rule: Any
    input_pos: int


QueueableToken = Union[QueueStart, QueueEnd]


class TokenKind(enum.Enum):
    """Whether a token opens or closes a rule."""

    START = "Start"
    END = "End"


@dataclass(frozen=True)
class Token:
    """A rule boundary at a position of the input."""

    kind: TokenKind
    rule: Any
    pos: int


def end_index_of(queue: Sequence[QueueableToken], index: int) -> int:
    """Return the index of the closing entry paired with the start entry at ``index``."""
    token = queue[index]
    if not isinstance(token, QueueStart):
        raise ValueError(f"queue entry {index} is not a start entry")
    return token.end_token_index


def input_pos_of(queue: Sequence[QueueableToken], index: int) -> int:
    """Return the input position recorded by the queue entry at ``index``."""
    return queue[index].input_pos


class Tokens:
    """A double-ended iterator over the tokens of a slice of the queue."""

    def __init__(
        self,
        queue: Sequence[QueueableToken],
        input: str,
        start: int,
        end: int,
    ) -> None:
        limit = len(input)
        for entry in queue:
            if not 0 <= entry.input_pos <= limit:
                raise ValueError(
                    f"queue entry position {entry.input_pos} lies outside the input"
                )
        self._queue = queue
        self._input = input
        self._start = start
        self._end = end

    def _create_token(self, index: int) -> Token:
        entry = self._queue[index]
        if isinstance(entry, QueueStart):
            closing = self._queue[entry.end_token_index]
            if not isinstance(closing, QueueEnd):
                raise ValueError(f"start entry {index} is not paired with an end entry")
            return Token(TokenKind.START, closing.rule, entry.input_pos)
        return Token(TokenKind.END, entry.rule, entry.input_pos)

    def __iter__(self) -> "Tokens":
        return self

    def __next__(self) -> Token:
        if self._start >= self._end:
            raise StopIteration
        token = self._create_token(self._start)
        self._start += 1
        return token

    def next_back(self) -> Optional[Token]:
        """Take the last remaining token, or return None when none are left."""
        if self._end <= self._start:
            return None
        token = self._create_token(self._end - 1)
        self._end -= 1
        return token

    def __reversed__(self) -> Iterator[Token]:
        while (token := self.next_back()) is not None:
            yield token

    def __repr__(self) -> str:
        return repr(list(copy.copy(self)))