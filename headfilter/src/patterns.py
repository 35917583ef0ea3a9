"""Pattern compilation for reference name matching.

Two pattern dialects are supported:

* **wildcard** -- a space-separated list of tokens where ``*`` matches
  any run of characters and everything else is literal. Tokens are
  alternatives, and each must match the whole name.
* **regex** -- a raw regular expression, also matched against the whole
  name. Syntax errors surface as ``InvalidPatternError`` when the pattern
  is compiled, which happens while a rule is being configured.

A wildcard pattern with no tokens (the empty string, or only spaces)
compiles to a matcher that never matches anything, not even the empty
name. Rule configuration relies on this to mean "nothing excluded".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Any

from headfilter.src.errors import InvalidPatternError

WILDCARD = "*"

_TOKEN_SEPARATOR = " "
_WILDCARD_SPLIT = re.compile(r"(\*)")


class MatcherKind(str, Enum):
    """Dialect a pattern string is written in."""

    WILDCARD = "wildcard"
    REGEX = "regex"


# ===================================================================
# Compiled matchers
# ===================================================================


@dataclass(frozen=True)
class CompiledMatcher:
    """Full-string matcher produced from a pattern string.

    Attributes:
        source: The pattern as the user wrote it.
        kind: Dialect of the source.
        expression: Regular expression text actually used for matching.
        regex: Compiled expression, or None for a matcher that never matches.
    """

    source: str
    kind: MatcherKind
    expression: str
    regex: re.Pattern[str] | None

    def matches(self, name: str) -> bool:
        """Return True when *name* matches the whole pattern."""
        if self.regex is None:
            return False
        return self.regex.fullmatch(name) is not None

    @property
    def matches_nothing(self) -> bool:
        """True for the empty wildcard matcher."""
        return self.regex is None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "source": self.source,
            "kind": self.kind.value,
            "expression": self.expression,
        }


def _split_tokens(pattern: str) -> list[str]:
    # Consecutive spaces produce empty tokens, which would otherwise add
    # an alternative matching only the empty string.
    return [token for token in pattern.split(_TOKEN_SEPARATOR) if token]


def _translate_token(token: str) -> str:
    parts: list[str] = []
    for segment in _WILDCARD_SPLIT.split(token):
        if segment == WILDCARD:
            parts.append(".*")
        elif segment:
            parts.append(re.escape(segment))
    return "".join(parts)


def wildcard_to_regex(pattern: str) -> str:
    """Translate a wildcard pattern into regular expression text.

    Args:
        pattern: Space-separated wildcard tokens.

    Returns:
        Alternation of the translated tokens, or an empty string when
        the pattern has no tokens.

    Example::

        >>> wildcard_to_regex("main release/*")
        'main|release/.*'
    """
    return "|".join(_translate_token(token) for token in _split_tokens(pattern))


def compile_wildcard(pattern: str) -> CompiledMatcher:
    """Compile a wildcard pattern. Every input string is a valid pattern.

    Args:
        pattern: Space-separated wildcard tokens.

    Returns:
        CompiledMatcher anchored to the whole candidate string.
    """
    expression = wildcard_to_regex(pattern)
    regex = re.compile(expression, re.DOTALL) if expression else None
    return CompiledMatcher(
        source=pattern,
        kind=MatcherKind.WILDCARD,
        expression=expression,
        regex=regex,
    )


def compile_regex(raw: str) -> CompiledMatcher:
    """Compile a raw regular expression as-is.

    Args:
        raw: Regular expression text.

    Returns:
        CompiledMatcher anchored to the whole candidate string.

    Raises:
        InvalidPatternError: If the expression is not valid syntax.
    """
    try:
        regex = re.compile(raw)
    except re.error as exc:
        raise InvalidPatternError(raw, str(exc)) from exc
    return CompiledMatcher(source=raw, kind=MatcherKind.REGEX, expression=raw, regex=regex)


def compile_pattern(source: str, kind: MatcherKind = MatcherKind.WILDCARD) -> CompiledMatcher:
    """Compile *source* in the given dialect."""
    if kind == MatcherKind.REGEX:
        return compile_regex(source)
    return compile_wildcard(source)


# ===================================================================
# Validation
# ===================================================================


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a raw regular expression.

    Attributes:
        ok: True when the expression compiled.
        message: Engine diagnostic when ``ok`` is False, else empty.
    """

    ok: bool
    message: str = ""

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(ok=True)

    @classmethod
    def error(cls, message: str) -> ValidationResult:
        return cls(ok=False, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"ok": self.ok, "message": self.message}


def validate_pattern(raw: str) -> ValidationResult:
    """Check raw regular expression syntax for configuration forms.

    Never raises; a rejected expression is reported through the result.

    Args:
        raw: Regular expression text entered by a user.

    Returns:
        ValidationResult.success() or ValidationResult.error(message).
    """
    try:
        compile_regex(raw)
    except InvalidPatternError as exc:
        return ValidationResult.error(exc.detail)
    return ValidationResult.success()


# ===================================================================
# Lazily compiled pattern
# ===================================================================


@dataclass(frozen=True)
class Pattern:
    """A pattern string that compiles on first use and keeps the result.

    The compiled matcher is computed at most once per instance under
    normal use. Two threads racing on the first access may both compile,
    and both produce an equivalent matcher.

    Attributes:
        source: Pattern text.
        kind: Dialect of the text.
    """

    source: str
    kind: MatcherKind = MatcherKind.WILDCARD

    @cached_property
    def matcher(self) -> CompiledMatcher:
        """The compiled matcher for this pattern."""
        return compile_pattern(self.source, self.kind)

    def matches(self, name: str) -> bool:
        """Return True when *name* fully matches this pattern."""
        return self.matcher.matches(name)
