"""The mutable state a hand-written or generated parser threads through its rules.

Every matching method returns ``True`` when it matched and ``False`` when it did
not, so matchers compose with ``and`` (sequencing) and ``or`` (choice). Closures
passed to the combinators take the state and return such a boolean.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from pegstate.control import Atomicity, CallLimitTracker, Lookahead, MatchDir, constrain_indices
from pegstate.errors import ParseError
from pegstate.pairs import Pairs
from pegstate.tokens import QueueableToken, QueueEnd, QueueStart
from pegstate.variants import CustomErrorVariant, ParsingErrorVariant

Matcher = Callable[["ParserState"], bool]

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def _rule_order(rule: Any) -> Any:
    if isinstance(rule, enum.Enum):
        return list(type(rule)).index(rule)
    return rule


def _sorted_unique(rules: Iterable[Any]) -> Tuple[Any, ...]:
    return tuple(sorted(dict.fromkeys(rules), key=_rule_order))


class _SpanStack:
    """A stack of input spans that can be snapshotted and rolled back."""

    def __init__(self) -> None:
        self._items: List[Tuple[int, int]] = []
        self._snapshots: List[List[Tuple[int, int]]] = []

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: slice) -> List[Tuple[int, int]]:
        return self._items[index]

    def push(self, span: Tuple[int, int]) -> None:
        self._items.append(span)

    def peek(self) -> Optional[Tuple[int, int]]:
        return self._items[-1] if self._items else None

    def pop(self) -> Optional[Tuple[int, int]]:
        return self._items.pop() if self._items else None

    def snapshot(self) -> None:
        self._snapshots.append(list(self._items))

    def clear_snapshot(self) -> None:
        if self._snapshots:
            self._snapshots.pop()

    def restore(self) -> None:
        if self._snapshots:
            self._items = self._snapshots.pop()
        else:
            self._items.clear()


class ParserState:
    """Position, token queue, attempt tracking and stack of a running parse."""

    def __init__(self, input: str) -> None:
        self._input = input
        self._pos = 0
        self._queue: List[QueueableToken] = []
        self._lookahead = Lookahead.NONE
        self._pos_attempts: List[Any] = []
        self._neg_attempts: List[Any] = []
        self._attempt_pos = 0
        self._atomicity = Atomicity.NON_ATOMIC
        self._stack = _SpanStack()
        self._call_tracker = CallLimitTracker()

    def position(self) -> int:
        """Return the current offset into the input."""
        return self._pos

    def atomicity(self) -> Atomicity:
        """Return the current atomicity."""
        return self._atomicity

    # -- call limit -----------------------------------------------------

    def _inc_call_check_limit(self) -> bool:
        if self._call_tracker.limit_reached():
            return False
        self._call_tracker.increment_depth()
        return True

    def _reached_call_limit(self) -> bool:
        return self._call_tracker.limit_reached()

    # -- rules and attempts ---------------------------------------------

    def rule(self, rule: Any, f: Matcher) -> bool:
        """Match ``f`` as ``rule``, producing a token pair when tokens are being recorded."""
        if not self._inc_call_check_limit():
            return False
        actual_pos = self._pos
        index = len(self._queue)

        if actual_pos == self._attempt_pos:
            pos_index, neg_index = len(self._pos_attempts), len(self._neg_attempts)
        else:
            pos_index, neg_index = 0, 0

        records = self._lookahead is Lookahead.NONE and self._atomicity is not Atomicity.ATOMIC
        if records:
            self._queue.append(QueueStart(end_token_index=0, input_pos=actual_pos))

        attempts = self._attempts_at(actual_pos)

        if f(self):
            if self._lookahead is Lookahead.NEGATIVE:
                self._track(rule, actual_pos, pos_index, neg_index, attempts)
            if self._lookahead is Lookahead.NONE and self._atomicity is not Atomicity.ATOMIC:
                start = self._queue[index]
                if not isinstance(start, QueueStart):
                    raise RuntimeError("token queue lost the start entry of a rule")
                start.end_token_index = len(self._queue)
                self._queue.append(
                    QueueEnd(start_token_index=index, rule=rule, input_pos=self._pos)
                )
            return True

        if self._lookahead is not Lookahead.NEGATIVE:
            self._track(rule, actual_pos, pos_index, neg_index, attempts)
        if self._lookahead is Lookahead.NONE and self._atomicity is not Atomicity.ATOMIC:
            del self._queue[index:]
        return False

    def _attempts_at(self, pos: int) -> int:
        if self._attempt_pos == pos:
            return len(self._pos_attempts) + len(self._neg_attempts)
        return 0

    def _track(
        self,
        rule: Any,
        pos: int,
        pos_attempts_index: int,
        neg_attempts_index: int,
        prev_attempts: int,
    ) -> None:
        if self._atomicity is Atomicity.ATOMIC:
            return
        # Nested rules that made no progress are only reported when exactly one was tried.
        curr_attempts = self._attempts_at(pos)
        if curr_attempts > prev_attempts and curr_attempts - prev_attempts == 1:
            return
        if pos == self._attempt_pos:
            del self._pos_attempts[pos_attempts_index:]
            del self._neg_attempts[neg_attempts_index:]
        if pos > self._attempt_pos:
            self._pos_attempts.clear()
            self._neg_attempts.clear()
            self._attempt_pos = pos
        attempts = (
            self._pos_attempts
            if self._lookahead is not Lookahead.NEGATIVE
            else self._neg_attempts
        )
        if pos == self._attempt_pos:
            attempts.append(rule)

    # -- combinators ----------------------------------------------------

    def sequence(self, f: Matcher) -> bool:
        """Run ``f``; on failure, rewind the position and drop tokens it produced."""
        if not self._inc_call_check_limit():
            return False
        token_index = len(self._queue)
        initial_pos = self._pos
        if f(self):
            return True
        self._pos = initial_pos
        del self._queue[token_index:]
        return False

    def repeat(self, f: Matcher) -> bool:
        """Apply ``f`` until it fails; always succeeds unless the call limit is hit."""
        if not self._inc_call_check_limit():
            return False
        while f(self):
            pass
        return True

    def optional(self, f: Matcher) -> bool:
        """Apply ``f`` once; succeeds whether or not ``f`` matched."""
        if not self._inc_call_check_limit():
            return False
        f(self)
        return True

    def lookahead(self, is_positive: bool, f: Matcher) -> bool:
        """Match ``f`` without consuming input; negated when ``is_positive`` is false."""
        if not self._inc_call_check_limit():
            return False
        initial_lookahead = self._lookahead
        if is_positive:
            self._lookahead = (
                Lookahead.NEGATIVE
                if initial_lookahead is Lookahead.NEGATIVE
                else Lookahead.POSITIVE
            )
        else:
            self._lookahead = (
                Lookahead.POSITIVE
                if initial_lookahead is Lookahead.NEGATIVE
                else Lookahead.NEGATIVE
            )
        initial_pos = self._pos

        self._stack.snapshot()
        matched = bool(f(self))
        self._pos = initial_pos
        self._lookahead = initial_lookahead
        self._stack.restore()

        return matched if is_positive else not matched

    def atomic(self, atomicity: Atomicity, f: Matcher) -> bool:
        """Run ``f`` with the given atomicity, restoring the previous one afterwards."""
        if not self._inc_call_check_limit():
            return False
        initial = self._atomicity
        self._atomicity = atomicity
        try:
            return bool(f(self))
        finally:
            self._atomicity = initial

    # -- terminals ------------------------------------------------------

    def match_char_by(self, f: Callable[[str], bool]) -> bool:
        """Match one character accepted by ``f``."""
        if self._pos < len(self._input) and f(self._input[self._pos]):
            self._pos += 1
            return True
        return False

    def _match_at(self, pos: int, string: str) -> bool:
        return self._input.startswith(string, pos)

    def match_string(self, string: str) -> bool:
        """Match ``string`` exactly."""
        if self._match_at(self._pos, string):
            self._pos += len(string)
            return True
        return False

    def match_insensitive(self, string: str) -> bool:
        """Match ``string`` ignoring ASCII case."""
        segment = self._input[self._pos : self._pos + len(string)]
        if len(segment) == len(string) and segment.translate(_ASCII_LOWER) == string.translate(
            _ASCII_LOWER
        ):
            self._pos += len(string)
            return True
        return False

    def match_range(self, low: str, high: str) -> bool:
        """Match one character between ``low`` and ``high``, both included."""
        return self.match_char_by(lambda c: low <= c <= high)

    def skip(self, n: int) -> bool:
        """Move forward ``n`` characters if that many remain."""
        if self._pos + n <= len(self._input):
            self._pos += n
            return True
        return False

    def skip_until(self, strings: Sequence[str]) -> bool:
        """Move to the nearest occurrence of any of ``strings``, or to the end; always succeeds."""
        found = [
            index
            for index in (self._input.find(s, self._pos) for s in strings)
            if index != -1
        ]
        self._pos = min(found) if found else len(self._input)
        return True

    def start_of_input(self) -> bool:
        """Succeed only at the start of the input."""
        return self._pos == 0

    def end_of_input(self) -> bool:
        """Succeed only at the end of the input."""
        return self._pos == len(self._input)

    # -- stack ----------------------------------------------------------

    def _span_text(self, span: Tuple[int, int]) -> str:
        return self._input[span[0] : span[1]]

    def stack_push(self, f: Matcher) -> bool:
        """Run ``f`` and, if it matched, push the text it consumed onto the stack."""
        if not self._inc_call_check_limit():
            return False
        start = self._pos
        if f(self):
            self._stack.push((start, self._pos))
            return True
        return False

    def stack_peek(self) -> bool:
        """Match the text on top of the stack, leaving the stack unchanged."""
        span = self._stack.peek()
        if span is None:
            raise IndexError("peek was called on empty stack")
        return self.match_string(self._span_text(span))

    def stack_pop(self) -> bool:
        """Pop the top of the stack and match its text."""
        span = self._stack.pop()
        if span is None:
            raise IndexError("pop was called on empty stack")
        return self.match_string(self._span_text(span))

    def stack_match_peek_slice(
        self, start: int, end: Optional[int], match_dir: MatchDir
    ) -> bool:
        """Match a slice of the stack in the given direction; an empty slice matches."""
        bounds = constrain_indices(start, end, len(self._stack))
        if bounds is None:
            return False
        if bounds.stop <= bounds.start:
            return True
        spans = self._stack[bounds.start : bounds.stop]
        if match_dir is MatchDir.TOP_TO_BOTTOM:
            spans = spans[::-1]
        pos = self._pos
        for span in spans:
            text = self._span_text(span)
            if not self._match_at(pos, text):
                return False
            pos += len(text)
        self._pos = pos
        return True

    def stack_match_peek(self) -> bool:
        """Match the whole stack from top to bottom without changing it."""
        return self.stack_match_peek_slice(0, None, MatchDir.TOP_TO_BOTTOM)

    def stack_match_pop(self) -> bool:
        """Pop the whole stack, matching each text from top to bottom."""
        pos = self._pos
        matched = True
        while (span := self._stack.pop()) is not None:
            text = self._span_text(span)
            matched = self._match_at(pos, text)
            if not matched:
                break
            pos += len(text)
        if matched:
            self._pos = pos
        return matched

    def stack_drop(self) -> bool:
        """Drop the top of the stack; fails if the stack is empty."""
        return self._stack.pop() is not None

    def restore_on_err(self, f: Matcher) -> bool:
        """Run ``f``; if it fails, put the stack back as it was before."""
        self._stack.snapshot()
        if f(self):
            self._stack.clear_snapshot()
            return True
        self._stack.restore()
        return False


def state(input: str, f: Matcher) -> Pairs:
    """Run ``f`` over a fresh state for ``input`` and return the pairs it produced.

    Raises :class:`ParseError` when ``f`` does not match.
    """
    parser_state = ParserState(input)
    if f(parser_state):
        queue = parser_state._queue
        return Pairs(queue, input, 0, len(queue))

    if parser_state._reached_call_limit():
        variant: Any = CustomErrorVariant("call limit reached")
    else:
        variant = ParsingErrorVariant(
            _sorted_unique(parser_state._pos_attempts),
            _sorted_unique(parser_state._neg_attempts),
        )
    raise ParseError.from_pos(variant, input, parser_state._attempt_pos)