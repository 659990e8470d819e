"""Parser-state modes, the call limit, and stack index handling."""

from __future__ import annotations

import enum
from typing import Optional, Tuple


class Lookahead(enum.Enum):
    """The lookahead status of a parser state."""

    POSITIVE = "positive"
    """Match the inner expression without consuming input."""
    NEGATIVE = "negative"
    """Succeed only if the inner expression fails; consume no input."""
    NONE = "none"
    """No lookahead: input is consumed."""


class Atomicity(enum.Enum):
    """How implicit whitespace and inner tokens are handled."""

    ATOMIC = "atomic"
    """No implicit whitespace; rules called from here produce no tokens."""
    COMPOUND_ATOMIC = "compound_atomic"
    """No implicit whitespace, but inner tokens are produced as normal."""
    NON_ATOMIC = "non_atomic"
    """Implicit whitespace is enabled."""


class MatchDir(enum.Enum):
    """Direction in which a slice of the stack is matched."""

    BOTTOM_TO_TOP = "bottom_to_top"
    TOP_TO_BOTTOM = "top_to_bottom"


_call_limit = 0


def set_call_limit(limit: Optional[int]) -> None:
    """Set the maximum number of nested calls a new parser state may make.

    ``None`` removes the limit. The limit applies to states created afterwards.
    """
    global _call_limit
    if limit is None:
        _call_limit = 0
        return
    if limit <= 0:
        raise ValueError(f"call limit must be a positive integer, got {limit}")
    _call_limit = limit


class CallLimitTracker:
    """Counts calls against the limit in force when the tracker was created."""

    def __init__(self) -> None:
        self.current_call_limit: Optional[Tuple[int, int]] = (
            (0, _call_limit) if _call_limit > 0 else None
        )

    def limit_reached(self) -> bool:
        """Return True once the number of calls has reached the limit."""
        if self.current_call_limit is None:
            return False
        current, limit = self.current_call_limit
        return current >= limit

    def increment_depth(self) -> None:
        """Count one more call, if a limit is being tracked."""
        if self.current_call_limit is not None:
            current, limit = self.current_call_limit
            self.current_call_limit = (current + 1, limit)


def normalize_index(i: int, length: int) -> Optional[int]:
    """Turn a possibly negative index into an offset, or None if out of bounds."""
    if i > length:
        return None
    if i >= 0:
        return i
    real = length + i
    return real if real >= 0 else None


def constrain_indices(start: int, end: Optional[int], length: int) -> Optional[range]:
    """Normalize a slice of a sequence of ``length``; None if either bound is out of bounds.

    A missing ``end`` means the end of the sequence. The result may be empty.
    """
    start_norm = normalize_index(start, length)
    if start_norm is None:
        return None
    if end is None:
        end_norm: Optional[int] = length
    else:
        end_norm = normalize_index(end, length)
    if end_norm is None:
        return None
    return range(start_norm, end_norm)