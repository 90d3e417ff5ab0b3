"""
Matchers: named comparison rules that stand in for literal expected values.

Template vocabulary (inside {{ }}):
    anyString | anyInt | anyFloat | anyBool | anyValue | ignore
    regex `pattern`
    oneOf "a" "b" ...

Matchers are immutable once constructed.
"""

import json
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from docmatch.domain.errors import (
    InvalidMatcherSyntaxError,
    InvalidPatternError,
    UnknownMatcherError,
)


def is_number(value: Any) -> bool:
    """Numeric JSON value. bool is excluded even though it subclasses int."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def values_equal(a: Any, b: Any) -> bool:
    """
    Value identity for primitives.

    Booleans only equal booleans, numbers compare by numeric value
    (1 == 1.0), everything else must share type and value.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return float(a) == float(b)
    return type(a) is type(b) and a == b


class Matcher(ABC):
    """
    Base class for all matchers.

    Subclasses implement match() and describe(). describe() returns the
    canonical template text ({{anyString}}, {{regex `p`}}, ...), which is
    also what a failed match reports as the expected side.
    """

    __slots__ = ()

    @abstractmethod
    def match(self, actual: Any) -> bool:
        """True if the actual value satisfies this rule."""

    @abstractmethod
    def describe(self) -> str:
        """Canonical template text."""

    def pattern_fragment(self) -> str | None:
        """
        Regex fragment used when the matcher is embedded in a larger text
        value. None means the matcher can only stand for a whole value.
        """
        return None

    def match_text(self, text: str) -> bool:
        """
        Match a textual value (HTML attributes and text nodes).

        Embeddable matchers full-match their fragment so {{anyInt}} accepts
        "42"; the rest fall back to match().
        """
        fragment = self.pattern_fragment()
        if fragment is None:
            return self.match(text)
        return re.fullmatch(fragment, text, re.DOTALL) is not None

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matcher):
            return NotImplemented
        return type(self) is type(other) and self.describe() == other.describe()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.describe()))


# =============================================================================
# Type matchers
# =============================================================================

class AnyString(Matcher):
    __slots__ = ()

    def match(self, actual: Any) -> bool:
        return isinstance(actual, str)

    def describe(self) -> str:
        return "{{anyString}}"

    def pattern_fragment(self) -> str:
        return ".*"


class AnyInt(Matcher):
    """Any integer, including floats with no fractional part (JSON has one number type)."""

    __slots__ = ()

    def match(self, actual: Any) -> bool:
        if isinstance(actual, bool):
            return False
        if isinstance(actual, int):
            return True
        if isinstance(actual, float):
            return actual.is_integer()
        if isinstance(actual, Decimal):
            return actual.is_finite() and actual == actual.to_integral_value()
        return False

    def describe(self) -> str:
        return "{{anyInt}}"

    def pattern_fragment(self) -> str:
        return r"[-+]?\d+"


class AnyFloat(Matcher):
    """Any numeric value, integer or floating point."""

    __slots__ = ()

    def match(self, actual: Any) -> bool:
        return is_number(actual)

    def describe(self) -> str:
        return "{{anyFloat}}"

    def pattern_fragment(self) -> str:
        return r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"


class AnyBool(Matcher):
    __slots__ = ()

    def match(self, actual: Any) -> bool:
        return isinstance(actual, bool)

    def describe(self) -> str:
        return "{{anyBool}}"

    def pattern_fragment(self) -> str:
        return "(?:true|false)"


class AnyValue(Matcher):
    """Matches anything, including null and absence."""

    __slots__ = ()

    def match(self, actual: Any) -> bool:
        return True

    def describe(self) -> str:
        return "{{anyValue}}"

    def pattern_fragment(self) -> str:
        return ".*"


class Ignore(Matcher):
    """
    Matches anything when invoked directly.

    The comparators check is_ignore() first and skip the field or node
    entirely, so an ignored key missing from actual is not reported.
    """

    __slots__ = ()

    def match(self, actual: Any) -> bool:
        return True

    def describe(self) -> str:
        return "{{ignore}}"

    def pattern_fragment(self) -> str:
        return ".*"


def is_ignore(value: Any) -> bool:
    return isinstance(value, Ignore)


# =============================================================================
# Parameterised matchers
# =============================================================================

class Regex(Matcher):
    """
    String matched against a pattern with re.search.

    The pattern author controls anchoring: `^user-\\d+$` must match the whole
    value, `user-` matches anywhere.
    """

    __slots__ = ("_pattern", "_compiled")

    def __init__(self, pattern: str) -> None:
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise InvalidPatternError(
                "invalid regex pattern", pattern=pattern, cause=e
            ) from e
        self._pattern = pattern
        self._compiled = compiled

    @property
    def pattern(self) -> str:
        return self._pattern

    def match(self, actual: Any) -> bool:
        if not isinstance(actual, str):
            return False
        return self._compiled.search(actual) is not None

    def describe(self) -> str:
        return f"{{{{regex `{self._pattern}`}}}}"


class OneOf(Matcher):
    """Actual equals one of the allowed values. Order is kept for display only."""

    __slots__ = ("_values",)

    def __init__(self, *values: Any) -> None:
        if not values:
            raise InvalidMatcherSyntaxError("oneOf needs at least one value")
        self._values = tuple(values)

    @property
    def values(self) -> tuple[Any, ...]:
        return self._values

    def match(self, actual: Any) -> bool:
        return any(values_equal(actual, v) for v in self._values)

    def describe(self) -> str:
        literals = " ".join(json.dumps(v, ensure_ascii=False, default=str) for v in self._values)
        return f"{{{{oneOf {literals}}}}}"

    def pattern_fragment(self) -> str:
        return "(?:" + "|".join(re.escape(_as_text(v)) for v in self._values) + ")"


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# =============================================================================
# Embedded templates
# =============================================================================

class TemplateString(Matcher):
    """
    Literal text with embedded matchers, e.g. `btn btn-{{oneOf "primary" "secondary"}}`.

    Only produced for HTML attribute and text values. The whole actual value
    must match: literal segments exactly, matcher segments by their fragment.
    """

    __slots__ = ("_segments", "_compiled")

    def __init__(self, segments: Sequence[str | Matcher]) -> None:
        parts = []
        for segment in segments:
            if isinstance(segment, Matcher):
                fragment = segment.pattern_fragment()
                if fragment is None:
                    raise InvalidMatcherSyntaxError(
                        "matcher cannot be embedded in a larger value",
                        matcher=segment.describe(),
                    )
                parts.append(f"(?:{fragment})")
            else:
                parts.append(re.escape(segment))
        self._segments = tuple(segments)
        self._compiled = re.compile("".join(parts), re.DOTALL)

    @property
    def segments(self) -> tuple[str | Matcher, ...]:
        return self._segments

    @property
    def matchers(self) -> tuple[Matcher, ...]:
        return tuple(s for s in self._segments if isinstance(s, Matcher))

    def match(self, actual: Any) -> bool:
        if not isinstance(actual, str):
            return False
        return self._compiled.fullmatch(actual) is not None

    def match_text(self, text: str) -> bool:
        return self.match(text)

    def describe(self) -> str:
        return "".join(
            s.describe() if isinstance(s, Matcher) else s for s in self._segments
        )

    def collapse_whitespace(self) -> "TemplateString":
        """Same template with literal whitespace runs collapsed and the ends trimmed."""
        collapsed: list[str | Matcher] = [
            s if isinstance(s, Matcher) else re.sub(r"\s+", " ", s)
            for s in self._segments
        ]
        if collapsed and isinstance(collapsed[0], str):
            collapsed[0] = collapsed[0].lstrip()
        if collapsed and isinstance(collapsed[-1], str):
            collapsed[-1] = collapsed[-1].rstrip()
        return TemplateString([s for s in collapsed if s != ""])


# =============================================================================
# Expression parsing
# =============================================================================

_KEYWORDS: dict[str, type[Matcher]] = {
    "anyString": AnyString,
    "anyInt": AnyInt,
    "anyFloat": AnyFloat,
    "anyBool": AnyBool,
    "anyValue": AnyValue,
    "ignore": Ignore,
}


def parse_matcher(expr: str) -> Matcher:
    """
    Create a Matcher from a template expression (the text between {{ and }}).

    Raises:
        UnknownMatcherError: keyword not in the vocabulary
        InvalidMatcherSyntaxError: regex/oneOf with malformed arguments
        InvalidPatternError: regex pattern does not compile
    """
    expr = expr.strip()

    keyword_matcher = _KEYWORDS.get(expr)
    if keyword_matcher is not None:
        return keyword_matcher()

    parts = expr.split(None, 1)
    keyword = parts[0] if parts else ""
    args = parts[1].strip() if len(parts) > 1 else ""

    if keyword == "regex":
        return Regex(_parse_regex_args(args, expr))

    if keyword == "oneOf":
        return OneOf(*_parse_one_of_args(args, expr))

    raise UnknownMatcherError("unknown matcher", expression=expr)


def _parse_regex_args(args: str, expr: str) -> str:
    if args.startswith("`"):
        end = args.find("`", 1)
        if end > 1 and not args[end + 1:].strip():
            return args[1:end]
    elif args.startswith('"'):
        quoted = _read_quoted(args, 0)
        if quoted is not None:
            pattern, end = quoted
            if pattern and not args[end:].strip():
                return pattern
    raise InvalidMatcherSyntaxError("invalid regex syntax", expression=expr)


def _parse_one_of_args(args: str, expr: str) -> list[str]:
    # JSON-escaped form: "{{oneOf \"a\" \"b\"}}"
    if args.startswith('\\"'):
        args = args.replace('\\\\"', '"').replace('\\"', '"')

    values: list[str] = []
    pos = 0
    while pos < len(args):
        if args[pos].isspace():
            pos += 1
            continue
        quoted = _read_quoted(args, pos) if args[pos] == '"' else None
        if quoted is None:
            raise InvalidMatcherSyntaxError("invalid oneOf syntax", expression=expr)
        value, pos = quoted
        values.append(value)

    if not values:
        raise InvalidMatcherSyntaxError("invalid oneOf syntax", expression=expr)
    return values


def _read_quoted(s: str, start: int) -> tuple[str, int] | None:
    """
    Read a double-quoted literal starting at s[start].

    Returns (value, index after the closing quote), or None if unterminated.
    Escapes follow JSON string rules; an undecodable literal is taken raw.
    """
    pos = start + 1
    while pos < len(s):
        char = s[pos]
        if char == "\\":
            pos += 2
            continue
        if char == '"':
            literal = s[start:pos + 1]
            try:
                value = json.loads(literal)
            except ValueError:
                value = literal[1:-1]
            return value, pos + 1
        pos += 1
    return None
