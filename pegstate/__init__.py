"""Parser state, parse-tree iterators and error reports for hand-written PEG parsers."""

__version__ = "0.1.0"

__all__ = [
    "control",
    "errors",
    "pairs",
    "parser_state",
    "report",
    "tokens",
    "variants",
]