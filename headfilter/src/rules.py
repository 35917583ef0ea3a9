"""Filter rules: per-axis include/exclude decisions for one reference.

A ``FilterRule`` maps each axis it governs to a ``PatternPair``. Two
policies exist:

* ``regex`` -- one pattern per axis; a name that does not fully match it
  is excluded.
* ``wildcard`` -- an include and an exclude pattern per axis; a name is
  excluded when it misses the include pattern or hits the exclude one.

A rule abstains (does not exclude) on references whose axes it does not
govern, so narrow rules compose safely inside a ``FilterSet``. Blank
field defaults are applied by the configuration layer before a rule is
built; the rule matches exactly the patterns it was given.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from headfilter.src.errors import ConfigurationError
from headfilter.src.patterns import MatcherKind, Pattern
from headfilter.src.references import Axis, Reference, classify


class MatchPolicy(str, Enum):
    """How a rule decides exclusion on an axis."""

    REGEX = "regex"
    WILDCARD = "wildcard"

    @property
    def matcher_kind(self) -> MatcherKind:
        if self is MatchPolicy.REGEX:
            return MatcherKind.REGEX
        return MatcherKind.WILDCARD


# ===================================================================
# PatternPair
# ===================================================================


@dataclass(frozen=True)
class PatternPair:
    """Include/exclude patterns for one axis.

    Attributes:
        include: Names must fully match this pattern to be admitted.
        exclude: Names fully matching this pattern are excluded. None for
            single-pattern (regex) rules.
    """

    include: Pattern
    exclude: Pattern | None = None

    @classmethod
    def wildcard(cls, includes: str, excludes: str = "") -> PatternPair:
        return cls(
            include=Pattern(includes, MatcherKind.WILDCARD),
            exclude=Pattern(excludes, MatcherKind.WILDCARD),
        )

    @classmethod
    def regex(cls, regex: str) -> PatternPair:
        return cls(include=Pattern(regex, MatcherKind.REGEX))

    def exclusion_reason(self, name: str) -> str | None:
        """Explain why *name* is excluded, or return None if it is admitted."""
        if not self.include.matches(name):
            return f"{name!r} does not match {self.include.source!r}"
        if self.exclude is not None and self.exclude.matches(name):
            return f"{name!r} matches excluded {self.exclude.source!r}"
        return None

    def excludes(self, name: str) -> bool:
        """Return True when *name* is excluded by this pair."""
        return self.exclusion_reason(name) is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        data: dict[str, Any] = {"include": self.include.source}
        if self.exclude is not None:
            data["exclude"] = self.exclude.source
        return data


# ===================================================================
# FilterDecision
# ===================================================================


@dataclass(frozen=True)
class FilterDecision:
    """Outcome of evaluating one reference against a rule.

    Attributes:
        excluded: Whether the reference is excluded.
        rule: Label of the deciding rule, empty when no rule decided.
        reason: Human-readable explanation.
        axis: Axis whose pattern excluded the reference, if any.
        name: Name compared on that axis, if any.
    """

    excluded: bool
    rule: str = ""
    reason: str = ""
    axis: Axis | None = None
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "excluded": self.excluded,
            "rule": self.rule,
            "reason": self.reason,
            "axis": self.axis.value if self.axis is not None else None,
            "name": self.name,
        }


# ===================================================================
# FilterRule
# ===================================================================


@dataclass(frozen=True)
class FilterRule:
    """One configured rule, scoped to the axes in ``patterns``.

    Regex patterns are compiled during construction so syntax errors are
    reported as configuration errors. Wildcard patterns compile on first
    use; they cannot fail.

    Attributes:
        policy: Matching policy for every governed axis.
        patterns: Pattern pair per governed axis.
        name: Optional display name.

    Raises:
        ConfigurationError: If no axis is governed or a pair does not fit
            the policy.
        InvalidPatternError: If a regex pattern does not compile.

    Example::

        rule = FilterRule(
            MatchPolicy.WILDCARD,
            {Axis.TAG: PatternPair.wildcard("v*", "v0.*")},
        )
        rule.is_excluded(Reference.tag("v0.9"))  # True
        rule.is_excluded(Reference.branch("main"))  # False, abstains
    """

    policy: MatchPolicy
    patterns: Mapping[Axis, PatternPair]
    name: str = ""

    def __post_init__(self) -> None:
        if not self.patterns:
            raise ConfigurationError("A filter rule must govern at least one axis")
        try:
            object.__setattr__(self, "policy", MatchPolicy(self.policy))
        except ValueError as exc:
            raise ConfigurationError(f"Unknown policy: {self.policy!r}") from exc

        normalized: dict[Axis, PatternPair] = {}
        for axis, pair in self.patterns.items():
            try:
                key = Axis(axis)
            except ValueError as exc:
                raise ConfigurationError(f"Unknown axis: {axis!r}") from exc
            self._check_pair(key, pair)
            normalized[key] = pair
        object.__setattr__(self, "patterns", normalized)

        if self.policy is MatchPolicy.REGEX:
            for pair in normalized.values():
                # Compile now: regex syntax errors belong to configuration time.
                pair.include.matcher

    def _check_pair(self, axis: Axis, pair: PatternPair) -> None:
        kind = self.policy.matcher_kind
        if pair.include.kind != kind:
            raise ConfigurationError(
                f"{axis.value}: {self.policy.value} rule given a {pair.include.kind.value} pattern"
            )
        if self.policy is MatchPolicy.REGEX:
            if pair.exclude is not None:
                raise ConfigurationError(
                    f"{axis.value}: regex rules take a single pattern, not an exclude list"
                )
        elif pair.exclude is None or pair.exclude.kind != kind:
            raise ConfigurationError(
                f"{axis.value}: wildcard rules need a wildcard exclude pattern"
            )

    @property
    def governed_axes(self) -> frozenset[Axis]:
        return frozenset(self.patterns)

    @property
    def label(self) -> str:
        """Display name, derived from policy and axes when unnamed."""
        if self.name:
            return self.name
        axes = ",".join(axis.value for axis in Axis if axis in self.patterns)
        return f"{self.policy.value}[{axes}]"

    def evaluate(self, reference: Reference) -> FilterDecision:
        """Decide whether *reference* is excluded, with the reason.

        A change request is checked on each governed change request axis
        and is excluded if any of them excludes it. Rules governing both
        origin and destination therefore reject a change request whose
        origin branch fails even when its destination passes; the older
        combined head filters only ever consulted the destination.

        Args:
            reference: Reference to evaluate.

        Returns:
            FilterDecision describing the outcome.
        """
        classification = classify(reference)
        governed = False
        for axis, name in classification.names.items():
            pair = self.patterns.get(axis)
            if pair is None:
                continue
            governed = True
            reason = pair.exclusion_reason(name)
            if reason is not None:
                return FilterDecision(
                    excluded=True,
                    rule=self.label,
                    reason=f"{axis.value}: {reason}",
                    axis=axis,
                    name=name,
                )
        if not governed:
            return FilterDecision(
                excluded=False,
                rule=self.label,
                reason=f"abstains on {classification.category.value}",
            )
        return FilterDecision(excluded=False, rule=self.label, reason="admitted")

    def is_excluded(self, reference: Reference, source: Any = None) -> bool:
        """Return True when this rule excludes *reference*.

        Args:
            reference: Reference to evaluate.
            source: Host context, accepted for calling-convention parity
                and not used.
        """
        return self.evaluate(reference).excluded

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "policy": self.policy.value,
            "patterns": {axis.value: pair.to_dict() for axis, pair in self.patterns.items()},
        }
