"""Filter configuration: loading, default substitution, and rule building.

Configuration arrives as plain data, either structured::

    {"policy": "wildcard", "branch": {"includes": "main release/*"}}

or in the flat form of a named profile::

    {"profile": "wildcard_branch", "branchIncludes": "main release/*"}

Blank or absent fields are replaced with defaults here, before any
pattern is compiled: wildcard includes become ``*`` (admit everything),
wildcard excludes become the empty pattern (exclude nothing), and regex
fields become ``.*``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from headfilter.src.errors import ConfigurationError
from headfilter.src.filter_set import FilterSet
from headfilter.src.patterns import ValidationResult
from headfilter.src.profiles import Profile, get_profile
from headfilter.src.references import Axis
from headfilter.src.rules import FilterRule, MatchPolicy, PatternPair

logger = logging.getLogger(__name__)

INCLUDE_ALL = "*"
EXCLUDE_NONE = ""
MATCH_ALL_REGEX = "(?s).*"

_RULE_KEYS = {"name", "policy", "profile"} | {axis.value for axis in Axis}
_PROFILE_META_KEYS = {"profile", "name", "legacy"}


def _string_field(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigurationError(f"Field {key!r} must be a string, got {value!r}")
    return value


def default_if_blank(value: str | None, default: str) -> str:
    """Return *value* unless it is None or whitespace only."""
    if value is None or not value.strip():
        return default
    return value


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


# ===================================================================
# AxisPatterns
# ===================================================================


@dataclass
class AxisPatterns:
    """Raw pattern fields for one axis, before default substitution.

    Attributes:
        includes: Wildcard include list.
        excludes: Wildcard exclude list.
        regex: Single regular expression.
    """

    includes: str | None = None
    excludes: str | None = None
    regex: str | None = None

    def to_pair(self, policy: MatchPolicy) -> PatternPair:
        """Build the pattern pair for *policy* with defaults applied."""
        if policy is MatchPolicy.REGEX:
            return PatternPair.regex(default_if_blank(self.regex, MATCH_ALL_REGEX))
        return PatternPair.wildcard(
            default_if_blank(self.includes, INCLUDE_ALL),
            default_if_blank(self.excludes, EXCLUDE_NONE),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, omitting unset fields."""
        data: dict[str, Any] = {}
        for key in ("includes", "excludes", "regex"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AxisPatterns:
        """Deserialize from dictionary.

        Raises:
            ConfigurationError: On unknown keys or non-string values.
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Axis configuration must be an object, got {data!r}")
        unknown = set(data) - {"includes", "excludes", "regex"}
        if unknown:
            raise ConfigurationError(f"Unknown axis fields: {', '.join(sorted(unknown))}")
        for key, value in data.items():
            if value is not None and not isinstance(value, str):
                raise ConfigurationError(f"Field {key!r} must be a string")
        return cls(
            includes=data.get("includes"),
            excludes=data.get("excludes"),
            regex=data.get("regex"),
        )


# ===================================================================
# RuleConfig
# ===================================================================


@dataclass
class RuleConfig:
    """Configuration of one filter rule.

    Attributes:
        policy: Matching policy.
        axes: Raw pattern fields per governed axis.
        name: Optional display name.
        profile: Profile the configuration was expanded from, if any.
    """

    policy: MatchPolicy = MatchPolicy.WILDCARD
    axes: dict[Axis, AxisPatterns] = field(default_factory=dict)
    name: str = ""
    profile: str | None = None

    def validate(self) -> None:
        """Check that the fields fit the policy.

        Raises:
            ConfigurationError: If no axis is governed or an axis sets
                fields belonging to the other policy.
        """
        if not self.axes:
            raise ConfigurationError("A filter rule must govern at least one axis")
        for axis, patterns in self.axes.items():
            if self.policy is MatchPolicy.REGEX:
                if patterns.includes is not None or patterns.excludes is not None:
                    raise ConfigurationError(
                        f"{axis.value}: regex rules use 'regex', not includes/excludes"
                    )
            elif patterns.regex is not None:
                raise ConfigurationError(
                    f"{axis.value}: wildcard rules use includes/excludes, not 'regex'"
                )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the structured dictionary form."""
        data: dict[str, Any] = {"name": self.name, "policy": self.policy.value}
        if self.profile is not None:
            data["profile"] = self.profile
        for axis in Axis:
            if axis in self.axes:
                data[axis.value] = self.axes[axis].to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RuleConfig:
        """Deserialize from either the structured or the profile form.

        A dictionary is read in profile form when it has a ``profile`` key
        and none of the structured axis keys.

        Raises:
            ConfigurationError: On unknown keys, profiles or policies.
        """
        if not isinstance(data, dict):
            raise ConfigurationError(f"Rule configuration must be an object, got {data!r}")
        axis_keys = {axis.value for axis in Axis} & set(data)
        if "profile" in data and not axis_keys:
            return _from_profile_form(data)

        unknown = set(data) - _RULE_KEYS
        if unknown:
            raise ConfigurationError(f"Unknown rule fields: {', '.join(sorted(unknown))}")
        try:
            policy = MatchPolicy(data.get("policy", MatchPolicy.WILDCARD.value))
        except ValueError as exc:
            raise ConfigurationError(f"Unknown policy: {data.get('policy')!r}") from exc

        axes = {Axis(key): AxisPatterns.from_dict(data[key]) for key in sorted(axis_keys)}
        return cls(
            policy=policy,
            axes=axes,
            name=_string_field(data, "name") or "",
            profile=_string_field(data, "profile"),
        )

    @classmethod
    def from_profile(
        cls,
        profile: str | Profile,
        values: dict[str, str | None] | None = None,
        *,
        name: str = "",
        legacy: bool = False,
    ) -> RuleConfig:
        """Expand flat profile fields into a structured configuration.

        Args:
            profile: Profile or profile name/symbol.
            values: Field values keyed by the profile's field names.
            name: Optional display name of the rule.
            legacy: Fill blank fields from the profile's legacy defaults.

        Returns:
            RuleConfig governing the profile's axes.

        Raises:
            ConfigurationError: On an unknown profile or field.
        """
        prof = profile if isinstance(profile, Profile) else get_profile(profile)
        values = dict(values or {})

        unknown = set(values) - set(prof.field_names)
        if unknown:
            raise ConfigurationError(
                f"Profile {prof.name!r} has no fields: {', '.join(sorted(unknown))}"
            )

        if legacy:
            if not prof.legacy_defaults:
                raise ConfigurationError(f"Profile {prof.name!r} has no legacy defaults")
            applied = []
            for key, default in prof.legacy_defaults.items():
                if _is_blank(values.get(key)):
                    values[key] = default
                    applied.append(key)
            logger.warning(
                "Profile %s uses legacy defaults for %s",
                prof.name,
                ", ".join(applied) or "no fields",
            )

        axes: dict[Axis, AxisPatterns] = {}
        for axis, fields in prof.axes.items():
            if prof.policy is MatchPolicy.REGEX:
                axes[axis] = AxisPatterns(regex=values.get(fields.include))
            else:
                axes[axis] = AxisPatterns(
                    includes=values.get(fields.include),
                    excludes=values.get(fields.exclude) if fields.exclude else None,
                )
        return cls(policy=prof.policy, axes=axes, name=name, profile=prof.name)


def _from_profile_form(data: dict[str, Any]) -> RuleConfig:
    values = {key: value for key, value in data.items() if key not in _PROFILE_META_KEYS}
    for key, value in values.items():
        if value is not None and not isinstance(value, str):
            raise ConfigurationError(f"Field {key!r} must be a string")
    legacy = data.get("legacy", False)
    if not isinstance(legacy, bool):
        raise ConfigurationError(f"Field 'legacy' must be true or false, got {legacy!r}")
    return RuleConfig.from_profile(
        _string_field(data, "profile") or "",
        values,
        name=_string_field(data, "name") or "",
        legacy=legacy,
    )


# ===================================================================
# FilterSetConfig
# ===================================================================


@dataclass
class FilterSetConfig:
    """Ordered list of rule configurations.

    Attributes:
        rules: Rule configurations in display order.
    """

    rules: list[RuleConfig] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"rules": [r.to_dict() for r in self.rules]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilterSetConfig:
        """Deserialize from dictionary.

        Raises:
            ConfigurationError: If the data is not a rule list or a rule
                is malformed.
        """
        if not isinstance(data, dict) or not isinstance(data.get("rules", []), list):
            raise ConfigurationError("Filter configuration must be an object with a 'rules' list")
        return cls(rules=[RuleConfig.from_dict(r) for r in data.get("rules", [])])

    def save(self, path: Path) -> None:
        """Save configuration to a JSON file.

        Args:
            path: Destination file path.
        """
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> FilterSetConfig:
        """Load configuration from a JSON file.

        Args:
            path: Source file path.

        Returns:
            Deserialized FilterSetConfig.

        Raises:
            ConfigurationError: If the file is not valid JSON or not a
                valid configuration.
        """
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
        return cls.from_dict(data)


# ===================================================================
# Builders
# ===================================================================


def build_rule(config: RuleConfig) -> FilterRule:
    """Build a FilterRule from configuration, applying blank defaults.

    Raises:
        ConfigurationError: If the configuration is invalid.
        InvalidPatternError: If a regex field does not compile.
    """
    config.validate()
    patterns = {axis: fields.to_pair(config.policy) for axis, fields in config.axes.items()}
    return FilterRule(policy=config.policy, patterns=patterns, name=config.name)


def build_filter_set(config: FilterSetConfig) -> FilterSet:
    """Build a FilterSet from configuration."""
    return FilterSet([build_rule(rule) for rule in config.rules])


def load_filter_set(path: Path) -> FilterSet:
    """Load a JSON configuration file and build its FilterSet."""
    filter_set = build_filter_set(FilterSetConfig.load(path))
    logger.info("Loaded %d filter rules from %s", len(filter_set), path)
    return filter_set


def check_rule_config(data: dict[str, Any]) -> ValidationResult:
    """Validate rule configuration data without raising.

    Args:
        data: Rule configuration in either dictionary form.

    Returns:
        ValidationResult with the configuration error message, if any.
    """
    try:
        build_rule(RuleConfig.from_dict(data))
    except ConfigurationError as exc:
        return ValidationResult.error(str(exc))
    return ValidationResult.success()


def wildcard_rule(
    name: str = "",
    *,
    branch: tuple[str | None, str | None] | None = None,
    tag: tuple[str | None, str | None] | None = None,
    pr_origin: tuple[str | None, str | None] | None = None,
    pr_destination: tuple[str | None, str | None] | None = None,
) -> FilterRule:
    """Build a wildcard rule from ``(includes, excludes)`` tuples per axis.

    Axes left as None are not governed. Blank entries get the defaults.
    """
    given = {
        Axis.BRANCH: branch,
        Axis.TAG: tag,
        Axis.PR_ORIGIN: pr_origin,
        Axis.PR_DESTINATION: pr_destination,
    }
    axes = {
        axis: AxisPatterns(includes=value[0], excludes=value[1])
        for axis, value in given.items()
        if value is not None
    }
    return build_rule(RuleConfig(policy=MatchPolicy.WILDCARD, axes=axes, name=name))


def regex_rule(
    name: str = "",
    *,
    branch: str | None = None,
    tag: str | None = None,
    pr_origin: str | None = None,
    pr_destination: str | None = None,
) -> FilterRule:
    """Build a regex rule from one expression per axis.

    Axes left as None are not governed.
    """
    given = {
        Axis.BRANCH: branch,
        Axis.TAG: tag,
        Axis.PR_ORIGIN: pr_origin,
        Axis.PR_DESTINATION: pr_destination,
    }
    axes = {axis: AxisPatterns(regex=value) for axis, value in given.items() if value is not None}
    return build_rule(RuleConfig(policy=MatchPolicy.REGEX, axes=axes, name=name))
