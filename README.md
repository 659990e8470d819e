# pegstate

Building blocks for writing parsing-expression-grammar (PEG) parsers by hand.

You write a parser as a function that calls methods on a `ParserState`. Every
matching method returns `True` when it matched and `False` when it did not, so
matchers combine with `and` for sequences and `or` for choices. A successful
parse gives a tree of `Pair`s that you walk as `Pairs`. A failed parse raises a
`ParseError`, and its text points at the spot in the input where the parse
failed.

## Installing

```
pip install .
```

Add the `test` extra to get the test dependencies:

```
pip install ".[test]"
```

## Example

```python
import enum

from pegstate.errors import ParseError
from pegstate.parser_state import state


class Rule(enum.Enum):
    PAIR = 1
    KEY = 2
    VALUE = 3


def parse(s):
    return s.rule(Rule.PAIR, lambda s: s.sequence(lambda s: (
        s.rule(Rule.KEY, lambda s: s.match_range("a", "z"))
        and s.match_string("=")
        and s.rule(Rule.VALUE, lambda s: s.match_range("0", "9"))
    )))


pairs = state("k=7", parse)
print(pairs)            # [PAIR(0, 3, [KEY(0, 1), VALUE(2, 3)])]

try:
    state("k=x", parse)
except ParseError as error:
    print(error)
```

The failed parse prints:

```
 --> 1:3
  |
1 | k=x
  |   ^---
  |
  = expected VALUE
```

## Overview

- `pegstate.parser_state`
  - `state(input, f)` runs `f` on a fresh `ParserState`. It returns the
    resulting `Pairs`, or raises `ParseError` with the rules that were expected
    and not expected at the furthest position reached.
  - `ParserState` has these methods:
    - rules and grouping: `rule`, `sequence`, `repeat`, `optional`;
    - terminals: `match_string`, `match_insensitive` (ASCII case only),
      `match_range(low, high)` (both bounds included), `match_char_by`, `skip`,
      `skip_until`, `start_of_input`, `end_of_input`;
    - control of matching: `lookahead(is_positive, f)` and
      `atomic(atomicity, f)`;
    - the capture stack: `stack_push`, `stack_peek`, `stack_pop`,
      `stack_match_peek_slice(start, end, match_dir)`, `stack_match_peek`,
      `stack_match_pop`, `stack_drop`, `restore_on_err`.
      `stack_peek` and `stack_pop` raise `IndexError` when the stack is empty.
  - `position()` returns the current offset and `atomicity()` returns the
    current atomicity.
- `pegstate.control`
  - `Lookahead`, `Atomicity` and `MatchDir`.
  - `set_call_limit(limit)` and `CallLimitTracker`.
  - `normalize_index` and `constrain_indices`, which resolve the
    possibly negative stack bounds.
- `pegstate.pairs`: `Pair`, `Pairs` and `FlatPairs`.
  - A `Pair` gives its rule (`as_rule`), its text (`as_str`), its span
    (`as_span`), its children (`into_inner`) and its `tokens`.
  - `Pairs` and `FlatPairs` can be iterated from either end with `reversed()`
    or `next_back()`.
  - `Pairs` also provides `peek`, `as_str`, `concat`, `flatten`, `tokens` and
    `Pairs.single(pair)`.
- `pegstate.tokens`: `Tokens`, an iterator over `Token(kind, rule, pos)`
  values, where `kind` is `TokenKind.START` or `TokenKind.END`.
- `pegstate.errors`: `ParseError`.
  - `ParseError.from_pos` and `ParseError.from_span` build an error from input
    offsets.
  - `with_path` returns a copy that shows a file path in its report.
  - `renamed_rules(f)` returns a copy whose message names the rules with `f`.
  - `path()` and `line()` return the path and the input line of the error.
  - `str()` gives the full report.
- `pegstate.variants`: `ParsingErrorVariant` and `CustomErrorVariant`,
  together with the location types `PosLocation`, `SpanLocation`, `PosLineCol`
  and `SpanLineCol`.
- `pegstate.report`: the helpers that lay out error reports:
  `line_col`, `line_of`, `span_lines`, `underline`, `render` and
  `visualize_whitespace`.

## Call limit

```python
from pegstate.control import set_call_limit

set_call_limit(10_000)
set_call_limit(None)
```

The first call caps each parse at 10,000 calls to the combinators, counted as
a running total. The cap applies to parser states created after the call. A
parse that reaches the cap fails with a `ParseError` whose message is
`call limit reached`. The second call removes the cap. A limit of zero or less
raises `ValueError`.

## What this package does not do

- It does not read grammar files or generate parsers from them. Every parser
  is a function written by hand against `ParserState`.
- It has no parser base class and no assertion helpers for testing parsers.
  Compare `str(pairs)`, the tokens or the attributes of a `ParseError`
  yourself.
- It has no command-line tool.

## Running the tests

```
pytest
```