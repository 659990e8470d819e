import pytest

from pegstate.errors import ParseError
from pegstate.variants import (
    CustomErrorVariant,
    ParsingErrorVariant,
    PosLocation,
    SpanLocation,
)

INPUT = "ab\ncd\nef"


def lines(*parts):
    return "\n".join(parts)


def head(message, where="2:2"):
    return lines(f" --> {where}", "  |", "2 | cd", "  |  ^---", "  |", f"  = {message}")


@pytest.mark.parametrize(
    "positives, negatives, message",
    [
        ((1, 2, 3), (4, 5, 6), "unexpected 4, 5, or 6; expected 1, 2, or 3"),
        ((1, 2), (), "expected 1 or 2"),
        ((), (4, 5, 6), "unexpected 4, 5, or 6"),
        ((), (), "unknown parsing error"),
    ],
)
def test_display_parsing_error(positives, negatives, message):
    error = ParseError.from_pos(ParsingErrorVariant(positives, negatives), INPUT, 4)
    assert str(error) == head(message)


def test_display_custom_pos():
    error = ParseError.from_pos(CustomErrorVariant("error: big one"), INPUT, 4)
    assert str(error) == head("error: big one")
    assert error.location == PosLocation(4)


def test_display_custom_span_two_lines():
    error = ParseError.from_span(CustomErrorVariant("error: big one"), "ab\ncd\nefgh", 4, 9)
    assert str(error) == lines(
        " --> 2:2", "  |", "2 | cd", "3 | efgh", "  |  ^^", "  |", "  = error: big one"
    )
    assert error.location == SpanLocation(4, 9)


def test_display_custom_span_three_lines():
    error = ParseError.from_span(CustomErrorVariant("error: big one"), "ab\ncd\nefgh", 1, 9)
    assert str(error) == lines(
        " --> 1:2",
        "  |",
        "1 | ab",
        "  | ...",
        "3 | efgh",
        "  |  ^^",
        "  |",
        "  = error: big one",
    )


def test_display_custom_span_two_lines_inverted_cols():
    error = ParseError.from_span(CustomErrorVariant("error: big one"), "abcdef\ngh", 5, 8)
    assert str(error) == lines(
        " --> 1:6", "  |", "1 | abcdef", "2 | gh", "  | ^----^", "  |", "  = error: big one"
    )


def test_display_custom_span_end_after_newline():
    error = ParseError.from_span(CustomErrorVariant("error: big one"), "abcdef\n", 0, 7)
    assert str(error) == lines(
        " --> 1:1", "  |", "1 | abcdef\u240a", "  | ^-----^", "  |", "  = error: big one"
    )


def test_display_custom_span_empty():
    error = ParseError.from_span(CustomErrorVariant("error: empty"), "", 0, 0)
    assert str(error) == lines(" --> 1:1", "  |", "1 | ", "  | ^", "  |", "  = error: empty")


def test_mapped_parsing_error():
    error = ParseError.from_pos(
        ParsingErrorVariant((1, 2, 3), (4, 5, 6)), INPUT, 4
    ).renamed_rules(lambda n: str(n + 1))
    assert str(error) == head("unexpected 5, 6, or 7; expected 2, 3, or 4")
    assert isinstance(error.variant, CustomErrorVariant)


def test_renamed_rules_leaves_custom_error_alone():
    error = ParseError.from_pos(CustomErrorVariant("kept"), INPUT, 4)
    assert error.renamed_rules(lambda n: "x").variant == CustomErrorVariant("kept")


def test_error_with_path():
    error = ParseError.from_pos(
        ParsingErrorVariant((1, 2, 3), (4, 5, 6)), INPUT, 4
    ).with_path("file.rs")
    assert error.path() == "file.rs"
    assert str(error) == head("unexpected 4, 5, or 6; expected 1, 2, or 3", "file.rs:2:2")


def test_underline_with_tabs():
    error = ParseError.from_pos(
        ParsingErrorVariant((1, 2, 3), (4, 5, 6)), "a\txbc", 2
    ).with_path("file.rs")
    assert str(error) == lines(
        " --> file.rs:1:3",
        "  |",
        "1 | a\txbc",
        "  |  \t^---",
        "  |",
        "  = unexpected 4, 5, or 6; expected 1, 2, or 3",
    )


def test_line_and_default_path():
    error = ParseError.from_pos(CustomErrorVariant("x"), INPUT, 4)
    assert error.line() == "cd"
    assert error.path() is None


def test_position_at_newline_is_visualized():
    error = ParseError.from_pos(CustomErrorVariant("x"), INPUT, 2)
    assert error.line() == "ab\u240a"


def test_out_of_bounds_position_raises():
    with pytest.raises(ValueError):
        ParseError.from_pos(CustomErrorVariant("x"), "ab", 5)


def test_invalid_span_raises():
    with pytest.raises(ValueError):
        ParseError.from_span(CustomErrorVariant("x"), "abc", 2, 1)


def test_error_is_raisable_and_comparable():
    error = ParseError.from_pos(CustomErrorVariant("x"), INPUT, 4)
    with pytest.raises(ParseError) as caught:
        raise error
    assert caught.value == ParseError.from_pos(CustomErrorVariant("x"), INPUT, 4)