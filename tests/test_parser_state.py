import enum

import pytest

from pegstate.control import Atomicity, MatchDir, set_call_limit
from pegstate.errors import ParseError
from pegstate.parser_state import ParserState, state
from pegstate.tokens import Token, TokenKind
from pegstate.variants import CustomErrorVariant, ParsingErrorVariant, PosLocation


class Rule(enum.Enum):
    a = 1
    b = 2
    c = 3


def parse_abc(input):
    return state(
        input,
        lambda s: s.rule(
            Rule.a,
            lambda s: s.skip(1) and s.rule(Rule.b, lambda s: s.skip(1)) and s.skip(1),
        )
        and s.skip(1)
        and s.rule(Rule.c, lambda s: s.match_string("e")),
    )


@pytest.fixture
def call_limit():
    yield set_call_limit
    set_call_limit(None)


def test_state_empty_input_produces_no_pairs():
    assert list(state("", lambda s: True)) == []


def test_rule_produces_one_pair():
    pairs = list(state("a", lambda s: s.rule(Rule.a, lambda s: True)))
    assert len(pairs) == 1
    assert pairs[0].as_rule() is Rule.a


def test_abc_display():
    assert str(parse_abc("abcde")) == "[a(0, 3, [b(1, 2)]), c(4, 5)]"


def test_abc_tokens():
    tokens = list(parse_abc("abcde").tokens())
    assert tokens == [
        Token(TokenKind.START, Rule.a, 0),
        Token(TokenKind.START, Rule.b, 1),
        Token(TokenKind.END, Rule.b, 2),
        Token(TokenKind.END, Rule.a, 3),
        Token(TokenKind.START, Rule.c, 4),
        Token(TokenKind.END, Rule.c, 5),
    ]


def test_abc_failure_reports_expected_rule():
    with pytest.raises(ParseError) as info:
        parse_abc("abcdf")
    error = info.value
    assert error.variant == ParsingErrorVariant((Rule.c,), ())
    assert error.location == PosLocation(4)
    assert str(error) == "\n".join(
        [
            " --> 1:5",
            "  |",
            "1 | abcdf",
            "  |     ^---",
            "  |",
            "  = expected c",
        ]
    )


def test_failure_positives_are_sorted():
    with pytest.raises(ParseError) as info:
        state(
            "x",
            lambda s: s.rule(Rule.c, lambda s: s.match_string("c"))
            or s.rule(Rule.a, lambda s: s.match_string("a")),
        )
    assert info.value.variant == ParsingErrorVariant((Rule.a, Rule.c), ())
    assert info.value.variant.message() == "expected a or c"


def test_negative_lookahead_failure_reports_negatives():
    with pytest.raises(ParseError) as info:
        state(
            "a",
            lambda s: s.lookahead(False, lambda s: s.rule(Rule.a, lambda s: s.match_string("a"))),
        )
    assert info.value.variant == ParsingErrorVariant((), (Rule.a,))


def test_sequence_failure_drops_tokens():
    pairs = state(
        "a",
        lambda s: s.sequence(
            lambda s: s.rule(Rule.a, lambda s: True) and s.match_string("b")
        )
        or True,
    )
    assert list(pairs) == []


def test_sequence_failure_restores_position():
    s = ParserState("ab")
    assert s.sequence(lambda s: s.match_string("a") and s.match_string("c")) is False
    assert s.position() == 0


def test_repeat():
    s = ParserState("aab")
    assert s.repeat(lambda s: s.match_string("a")) is True
    assert s.position() == 2
    s = ParserState("aab")
    assert s.repeat(lambda s: s.match_string("b")) is True
    assert s.position() == 0


def test_optional():
    s = ParserState("ab")
    assert s.optional(lambda s: s.match_string("ab")) is True
    assert s.position() == 2
    s = ParserState("ab")
    assert s.optional(lambda s: s.match_string("ac")) is True
    assert s.position() == 0


def test_match_char_by():
    s = ParserState("ab")
    assert s.match_char_by(str.isascii) is True
    assert s.position() == 1
    s = ParserState("\u2764")
    assert s.match_char_by(str.isascii) is False
    assert s.position() == 0


def test_match_string():
    s = ParserState("ab")
    assert s.match_string("ab") is True
    assert s.position() == 2
    s = ParserState("ab")
    assert s.match_string("ac") is False
    assert s.position() == 0


def test_match_insensitive():
    s = ParserState("ab")
    assert s.match_insensitive("AB") is True
    assert s.position() == 2
    s = ParserState("ab")
    assert s.match_insensitive("AC") is False
    assert s.position() == 0


def test_match_range():
    s = ParserState("ab")
    assert s.match_range("a", "z") is True
    assert s.position() == 1
    s = ParserState("ab")
    assert s.match_range("A", "Z") is False
    assert s.position() == 0


def test_skip():
    s = ParserState("ab")
    assert s.skip(1) is True
    assert s.position() == 1
    s = ParserState("ab")
    assert s.skip(3) is False
    assert s.position() == 0


def test_skip_until():
    s = ParserState("abcd")
    assert s.skip_until(["c", "d"]) is True
    assert s.position() == 2


def test_skip_until_not_found_moves_to_end():
    s = ParserState("abcd")
    assert s.skip_until(["x"]) is True
    assert s.position() == 4


def test_start_and_end_of_input():
    s = ParserState("ab")
    assert s.start_of_input() is True
    assert s.end_of_input() is False
    assert s.match_string("ab") is True
    assert s.start_of_input() is False
    assert s.end_of_input() is True


def test_positive_lookahead_produces_no_pairs():
    pairs = state("a", lambda s: s.lookahead(True, lambda s: s.rule(Rule.a, lambda s: True)))
    assert list(pairs) == []


def test_negative_lookahead_consumes_nothing():
    s = ParserState("a")
    assert s.lookahead(False, lambda s: s.match_string("b")) is True
    assert s.position() == 0
    assert s.lookahead(False, lambda s: s.match_string("a")) is False
    assert s.position() == 0


def test_atomic_produces_no_pairs():
    pairs = state("a", lambda s: s.atomic(Atomicity.ATOMIC, lambda s: s.rule(Rule.a, lambda s: True)))
    assert list(pairs) == []


def test_atomicity_is_restored():
    s = ParserState("ab")
    assert s.atomicity() is Atomicity.NON_ATOMIC
    seen = []
    assert s.atomic(Atomicity.COMPOUND_ATOMIC, lambda s: seen.append(s.atomicity()) or True)
    assert seen == [Atomicity.COMPOUND_ATOMIC]
    assert s.atomicity() is Atomicity.NON_ATOMIC


def test_stack_push():
    s = ParserState("ab")
    assert s.stack_push(lambda s: s.match_string("a")) is True
    assert s.position() == 1


def test_stack_peek():
    s = ParserState("aa")
    assert s.stack_push(lambda s: s.match_string("a")) and s.stack_peek()
    assert s.position() == 2
    assert s.stack_drop() is True


def test_stack_pop():
    s = ParserState("aa")
    assert s.stack_push(lambda s: s.match_string("a")) and s.stack_pop()
    assert s.position() == 2
    assert s.stack_drop() is False


def test_stack_peek_on_empty_stack_raises():
    with pytest.raises(IndexError, match="peek was called on empty stack"):
        ParserState("a").stack_peek()


def test_stack_match_peek_slice():
    s = ParserState("abcd cd cb")
    result = (
        s.stack_push(lambda s: s.match_string("a"))
        and s.stack_push(lambda s: s.match_string("b"))
        and s.stack_push(lambda s: s.match_string("c"))
        and s.stack_push(lambda s: s.match_string("d"))
        and s.match_string(" ")
        and s.stack_match_peek_slice(2, None, MatchDir.BOTTOM_TO_TOP)
        and s.match_string(" ")
        and s.stack_match_peek_slice(1, -1, MatchDir.TOP_TO_BOTTOM)
    )
    assert result is True
    assert s.position() == 10


def test_stack_match_peek_slice_out_of_bounds_fails():
    s = ParserState("a")
    assert s.stack_match_peek_slice(2, None, MatchDir.BOTTOM_TO_TOP) is False
    assert s.stack_match_peek_slice(0, None, MatchDir.BOTTOM_TO_TOP) is True


def test_stack_match_peek():
    s = ParserState("abba")
    result = (
        s.stack_push(lambda s: s.match_string("a"))
        and s.stack_push(lambda s: s.match_string("b"))
        and s.stack_match_peek()
    )
    assert result is True
    assert s.position() == 4


def test_stack_match_pop_empties_stack():
    s = ParserState("abba")
    result = (
        s.stack_push(lambda s: s.match_string("a"))
        and s.stack_push(lambda s: s.match_string("b"))
        and s.stack_match_pop()
    )
    assert result is True
    assert s.position() == 4
    assert s.stack_drop() is False


def test_stack_drop():
    s = ParserState("aa")
    assert s.stack_push(lambda s: s.match_string("a")) and s.stack_drop()
    assert s.position() == 1


def test_restore_on_err_removes_pushed_text():
    s = ParserState("ab")
    result = s.restore_on_err(
        lambda s: s.stack_push(lambda s: s.match_string("a")) and s.match_string("a")
    )
    assert result is False
    with pytest.raises(IndexError, match="pop was called on empty stack"):
        s.stack_pop()


def test_restore_on_err_keeps_stack_on_success():
    s = ParserState("ab")
    assert s.restore_on_err(lambda s: s.stack_push(lambda s: s.match_string("a"))) is True
    assert s.stack_drop() is True


def test_call_limit_reached(call_limit):
    call_limit(2)
    with pytest.raises(ParseError) as info:
        state(
            "",
            lambda s: s.sequence(
                lambda s: s.sequence(lambda s: s.sequence(lambda s: True))
            ),
        )
    assert info.value.variant == CustomErrorVariant("call limit reached")


def test_call_limit_not_reached(call_limit):
    call_limit(5)
    pairs = state("", lambda s: s.sequence(lambda s: s.sequence(lambda s: True)))
    assert list(pairs) == []