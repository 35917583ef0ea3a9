"""Tests for wildcard and regex pattern compilation."""

from __future__ import annotations

import pytest

from headfilter.src.errors import ConfigurationError, InvalidPatternError
from headfilter.src.patterns import (
    CompiledMatcher,
    MatcherKind,
    Pattern,
    ValidationResult,
    compile_pattern,
    compile_regex,
    compile_wildcard,
    validate_pattern,
    wildcard_to_regex,
)

NAMES = [
    "",
    "main",
    "feature",
    "feature-x",
    "feature/login",
    "release/1.0",
    "release/old",
    "v1.0",
    "v1.1",
    "a",
    "b",
    "ab",
    "a b",
]

# ===================================================================
# wildcard_to_regex
# ===================================================================


class TestWildcardToRegex:
    """Translation of wildcard text into regex text."""

    def test_single_literal(self) -> None:
        assert wildcard_to_regex("main") == "main"

    def test_tokens_become_alternatives(self) -> None:
        assert wildcard_to_regex("main release/*") == "main|release/.*"

    def test_star_becomes_dot_star(self) -> None:
        assert wildcard_to_regex("*") == ".*"

    def test_literal_dots_are_escaped(self) -> None:
        assert wildcard_to_regex("v*.0") == r"v.*\.0"

    def test_empty_pattern(self) -> None:
        assert wildcard_to_regex("") == ""

    def test_only_spaces(self) -> None:
        assert wildcard_to_regex("   ") == ""

    def test_consecutive_spaces_are_skipped(self) -> None:
        assert wildcard_to_regex("a  b") == "a|b"

    def test_leading_and_trailing_spaces(self) -> None:
        assert wildcard_to_regex(" a b ") == "a|b"

    def test_repeated_stars(self) -> None:
        assert wildcard_to_regex("**") == ".*.*"


# ===================================================================
# compile_wildcard
# ===================================================================


class TestCompileWildcard:
    """Matching behaviour of compiled wildcard patterns."""

    def test_returns_compiled_matcher(self) -> None:
        matcher = compile_wildcard("main")
        assert isinstance(matcher, CompiledMatcher)
        assert matcher.kind == MatcherKind.WILDCARD
        assert matcher.source == "main"
        assert matcher.expression == "main"

    @pytest.mark.parametrize("name", NAMES)
    def test_empty_pattern_matches_nothing(self, name: str) -> None:
        assert compile_wildcard("").matches(name) is False

    @pytest.mark.parametrize("name", NAMES)
    def test_blank_pattern_matches_nothing(self, name: str) -> None:
        assert compile_wildcard("  ").matches(name) is False

    def test_empty_matcher_flag(self) -> None:
        assert compile_wildcard("").matches_nothing is True
        assert compile_wildcard("*").matches_nothing is False

    @pytest.mark.parametrize("name", NAMES)
    def test_star_matches_everything(self, name: str) -> None:
        assert compile_wildcard("*").matches(name) is True

    def test_star_matches_across_newlines(self) -> None:
        assert compile_wildcard("*").matches("a\nb") is True

    def test_full_match_only(self) -> None:
        matcher = compile_wildcard("feature")
        assert matcher.matches("feature") is True
        assert matcher.matches("feature-x") is False
        assert matcher.matches("my-feature") is False

    def test_space_separated_alternatives(self) -> None:
        matcher = compile_wildcard("a b")
        assert matcher.matches("a") is True
        assert matcher.matches("b") is True
        assert matcher.matches("ab") is False
        assert matcher.matches("a b") is False

    def test_double_space_does_not_match_empty(self) -> None:
        matcher = compile_wildcard("a  b")
        assert matcher.matches("") is False
        assert matcher.matches("a") is True
        assert matcher.matches("b") is True

    def test_star_inside_token(self) -> None:
        matcher = compile_wildcard("v*.0")
        assert matcher.matches("v1.0") is True
        assert matcher.matches("v10.0") is True
        assert matcher.matches("v.0") is True
        assert matcher.matches("v1.1") is False
        assert matcher.matches("v1x0") is False

    def test_star_prefix_and_suffix(self) -> None:
        matcher = compile_wildcard("*-hotfix release/*")
        assert matcher.matches("urgent-hotfix") is True
        assert matcher.matches("release/2.0") is True
        assert matcher.matches("release") is False

    def test_multiple_stars(self) -> None:
        matcher = compile_wildcard("feature/*/fix-*")
        assert matcher.matches("feature/auth/fix-1") is True
        assert matcher.matches("feature//fix-") is True
        assert matcher.matches("feature/auth/patch-1") is False

    @pytest.mark.parametrize(
        "literal",
        ["release-1.0+build", "(group)", "a|b", "x?y", "[abc]", "^start$", "back\\slash", "{1,2}"],
    )
    def test_regex_metacharacters_are_literal(self, literal: str) -> None:
        matcher = compile_wildcard(literal)
        assert matcher.matches(literal) is True

    def test_dot_is_not_any_character(self) -> None:
        assert compile_wildcard("a.b").matches("axb") is False

    def test_pipe_is_not_alternation(self) -> None:
        matcher = compile_wildcard("a|b")
        assert matcher.matches("a") is False
        assert matcher.matches("b") is False

    def test_question_mark_is_literal(self) -> None:
        assert compile_wildcard("v?").matches("v1") is False
        assert compile_wildcard("v?").matches("v?") is True

    @pytest.mark.parametrize("pattern", ["", "*", "main dev*", "v*.0 release/*", "a  b"])
    def test_compilation_is_deterministic(self, pattern: str) -> None:
        first = compile_wildcard(pattern)
        second = compile_wildcard(pattern)
        assert first.expression == second.expression
        for name in NAMES:
            assert first.matches(name) == second.matches(name)

    def test_to_dict(self) -> None:
        d = compile_wildcard("release/*").to_dict()
        assert d == {"source": "release/*", "kind": "wildcard", "expression": "release/.*"}


# ===================================================================
# compile_regex
# ===================================================================


class TestCompileRegex:
    """Raw regular expression compilation."""

    def test_full_match(self) -> None:
        matcher = compile_regex("feat.*")
        assert matcher.matches("feature") is True
        assert matcher.matches("xfeature") is False

    def test_value_used_as_is(self) -> None:
        matcher = compile_regex("main|release-.*")
        assert matcher.kind == MatcherKind.REGEX
        assert matcher.expression == "main|release-.*"
        assert matcher.matches("release-2") is True
        assert matcher.matches("develop") is False

    def test_alternation_is_anchored_as_a_whole(self) -> None:
        matcher = compile_regex("a|ab")
        assert matcher.matches("ab") is True

    def test_negative_lookahead_matches_nothing(self) -> None:
        matcher = compile_regex("(?!.*)")
        for name in NAMES:
            assert matcher.matches(name) is False

    def test_invalid_syntax_raises(self) -> None:
        with pytest.raises(InvalidPatternError) as info:
            compile_regex("release/(")
        assert info.value.pattern == "release/("
        assert info.value.detail
        assert "release/(" in str(info.value)

    def test_invalid_pattern_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            compile_regex("[a-z")

    def test_compile_pattern_dispatches_on_kind(self) -> None:
        assert compile_pattern("a.b", MatcherKind.REGEX).matches("axb") is True
        assert compile_pattern("a.b", MatcherKind.WILDCARD).matches("axb") is False
        assert compile_pattern("a.b").kind == MatcherKind.WILDCARD


# ===================================================================
# validate_pattern
# ===================================================================


class TestValidatePattern:
    """Regex validation for configuration forms."""

    def test_valid_expression(self) -> None:
        result = validate_pattern("release-[0-9]+")
        assert result.ok is True
        assert result.message == ""

    def test_invalid_expression(self) -> None:
        result = validate_pattern("release-[0-9")
        assert result.ok is False
        assert result.message

    def test_never_raises(self) -> None:
        for raw in ["(", ")", "*", "+", "?", "[", "\\"]:
            assert isinstance(validate_pattern(raw), ValidationResult)

    def test_result_constructors(self) -> None:
        assert ValidationResult.success() == ValidationResult(ok=True, message="")
        assert ValidationResult.error("bad").to_dict() == {"ok": False, "message": "bad"}


# ===================================================================
# Pattern
# ===================================================================


class TestPattern:
    """Compile-once pattern holder."""

    def test_matcher_is_cached(self) -> None:
        pattern = Pattern("release/*")
        assert pattern.matcher is pattern.matcher

    def test_matches_delegates(self) -> None:
        pattern = Pattern("release/*")
        assert pattern.matches("release/1") is True
        assert pattern.matches("main") is False

    def test_regex_kind(self) -> None:
        pattern = Pattern("rel.*", MatcherKind.REGEX)
        assert pattern.matches("release") is True

    def test_invalid_regex_raises_on_access(self) -> None:
        pattern = Pattern("(", MatcherKind.REGEX)
        with pytest.raises(InvalidPatternError):
            _ = pattern.matcher

    def test_equality_ignores_cache(self) -> None:
        compiled = Pattern("main")
        _ = compiled.matcher
        assert compiled == Pattern("main")
        assert hash(compiled) == hash(Pattern("main"))

    def test_default_kind_is_wildcard(self) -> None:
        assert Pattern("x").kind == MatcherKind.WILDCARD
