"""Kinds of parsing failures, their locations and their messages."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence, Tuple


def _rule_name(rule: Any) -> str:
    if isinstance(rule, enum.Enum):
        return rule.name
    return str(rule)


def enumerate_rules(rules: Iterable[Any], f: Callable[[Any], str]) -> str:
    """Join rule names as ``a``, ``a or b`` or ``a, b, or c``."""
    rules = list(rules)
    if not rules:
        raise ValueError("cannot enumerate an empty list of rules")
    if len(rules) == 1:
        return f(rules[0])
    if len(rules) == 2:
        return f"{f(rules[0])} or {f(rules[1])}"
    last = f(rules[-1])
    separated = ", ".join(f(rule) for rule in rules[:-1])
    return f"{separated}, or {last}"


def parsing_error_message(
    positives: Sequence[Any], negatives: Sequence[Any], f: Callable[[Any], str]
) -> str:
    """Describe the expected and unexpected rules of a parsing failure."""
    if negatives and positives:
        return (
            f"unexpected {enumerate_rules(negatives, f)}; "
            f"expected {enumerate_rules(positives, f)}"
        )
    if negatives:
        return f"unexpected {enumerate_rules(negatives, f)}"
    if positives:
        return f"expected {enumerate_rules(positives, f)}"
    return "unknown parsing error"


@dataclass(frozen=True)
class ParsingErrorVariant:
    """A failure listing the rules that were expected and those that were not."""

    positives: Tuple[Any, ...] = ()
    negatives: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "positives", tuple(self.positives))
        object.__setattr__(self, "negatives", tuple(self.negatives))

    def message(self) -> str:
        return parsing_error_message(self.positives, self.negatives, _rule_name)

    def __str__(self) -> str:
        return f"parsing error: {self.message()}"


@dataclass(frozen=True)
class CustomErrorVariant:
    """A failure with a free-form explanation."""

    text: str

    def message(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.message()


@dataclass(frozen=True)
class PosLocation:
    """An error located at a single input offset."""

    pos: int


@dataclass(frozen=True)
class SpanLocation:
    """An error covering the input offsets ``start`` to ``end``."""

    start: int
    end: int


@dataclass(frozen=True)
class PosLineCol:
    """Line and column of an error at a single position."""

    line: int
    col: int

    @property
    def start(self) -> Tuple[int, int]:
        return (self.line, self.col)


@dataclass(frozen=True)
class SpanLineCol:
    """Line/column pairs of the start and end of an error span."""

    start: Tuple[int, int]
    end: Tuple[int, int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", tuple(self.start))
        object.__setattr__(self, "end", tuple(self.end))