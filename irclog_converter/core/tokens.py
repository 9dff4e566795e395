"""Whitespace tokenizer and priority-ordered shape matching for log lines.

WHY: Text log dialects are irregular. A line is recognized by a few
fixed keywords at fixed positions ("-!-", "has", "joined") followed by a
free-form tail (message body, quit reason). Splitting on whitespace
finds the keywords, but naively joining the tail back with single spaces
would destroy messages like "look:    here". The tokenizer therefore
remembers every whitespace run it removed.

HOW: tokenize() walks the line with a regex and returns a TokenizedLine
holding the non-empty tokens and, for each token, the exact whitespace
that followed it. A Shape is a tuple of positional matchers (a literal
string, ANY, or a predicate) with an optional variable-length tail. Each
dialect keeps an ordered list of shapes and takes the first one that
matches.

RULES:
- Tokens are never empty; leading whitespace on a line is dropped
- rest(i) rejoins tokens[i:] with their original separators, including
  any trailing whitespace after the last token
- A shape tail starts one character after the last fixed token, so a
  body with leading spaces keeps them; an empty tail is None
- Fixed shapes need an exact token count; tail shapes need at least the
  fixed count (plus ``min_rest`` tail tokens)
- strip_one removes exactly one matching enclosing pair, never more
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union

_TOKEN_RE = re.compile(r"(\S+)(\s*)")

_PAIRS = {"(": ")", "[": "]", "{": "}", "<": ">"}


class _Any:
    def __repr__(self) -> str:
        return "ANY"


ANY = _Any()
"""Positional matcher that accepts any token."""

Matcher = Union[str, _Any, Callable[[str], bool]]


@dataclass
class TokenizedLine:
    """A line split into tokens with the whitespace between them kept."""

    text: str
    tokens: List[str] = field(default_factory=list)
    separators: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> str:
        return self.tokens[index]

    def rest(self, start: int) -> str:
        """Rejoin ``tokens[start:]`` using the original whitespace runs."""
        parts: List[str] = []
        for token, sep in zip(self.tokens[start:], self.separators[start:]):
            parts.append(token)
            parts.append(sep)
        return "".join(parts)


def tokenize(text: str) -> TokenizedLine:
    """Split ``text`` on whitespace, recording each removed run."""
    line = TokenizedLine(text=text)
    for match in _TOKEN_RE.finditer(text):
        line.tokens.append(match.group(1))
        line.separators.append(match.group(2))
    return line


def strip_one(text: str) -> str:
    """Remove one enclosing ``()``, ``[]``, ``{}`` or ``<>`` pair.

    ``"[[x]]"`` becomes ``"[x]"``. Text without a matching pair is
    returned unchanged.
    """
    if len(text) >= 2 and _PAIRS.get(text[0]) == text[-1]:
        return text[1:-1]
    return text


@dataclass(frozen=True)
class ShapeMatch:
    """The tokens a shape matched, plus the rejoined tail (if any)."""

    shape: str
    tokens: Tuple[str, ...]
    rest: Optional[str] = None


@dataclass(frozen=True)
class Shape:
    """A token-sequence pattern recognized by one dialect.

    Attributes:
        name: Handler key, e.g. ``"join"``.
        pattern: One matcher per fixed leading position.
        rest: True when a variable-length tail follows the fixed tokens.
        min_rest: Minimum number of tail tokens (only with ``rest``).
    """

    name: str
    pattern: Tuple[Matcher, ...]
    rest: bool = False
    min_rest: int = 0

    def match(self, line: TokenizedLine) -> Optional[ShapeMatch]:
        fixed = len(self.pattern)
        if self.rest:
            if len(line) < fixed + self.min_rest:
                return None
        elif len(line) != fixed:
            return None

        for matcher, token in zip(self.pattern, line.tokens):
            if matcher is ANY:
                continue
            if isinstance(matcher, str):
                if matcher != token:
                    return None
            elif not matcher(token):
                return None

        tail: Optional[str] = None
        if self.rest and fixed:
            # The first whitespace character is the delimiter after the
            # last fixed token; the remainder of that run belongs to the tail.
            tail = line.separators[fixed - 1][1:] + line.rest(fixed)
            tail = tail or None
        return ShapeMatch(shape=self.name, tokens=tuple(line.tokens[:fixed]), rest=tail)


def match_first(shapes: List[Shape], line: TokenizedLine) -> Optional[ShapeMatch]:
    """Return the match of the first shape (in list order) that fits."""
    for shape in shapes:
        found = shape.match(line)
        if found is not None:
            return found
    return None
