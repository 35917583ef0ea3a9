"""Named rule profiles.

A profile says which axes a rule governs and which flat configuration
fields feed each axis. Profiles are plain data: every profile builds the
same ``FilterRule`` type. Fields may be shared between axes, e.g. the
``headWildcardFilterWithPRFromOrigin`` layout matches change request
origins with the branch include/exclude lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from headfilter.src.errors import ConfigurationError
from headfilter.src.references import Axis
from headfilter.src.rules import MatchPolicy


@dataclass(frozen=True)
class AxisFields:
    """Configuration field names feeding one axis.

    Attributes:
        include: Field holding the include (or single regex) pattern.
        exclude: Field holding the exclude pattern; None for regex rules
            and for axes configured with an include list only.
    """

    include: str
    exclude: str | None = None


@dataclass(frozen=True)
class Profile:
    """A named layout of configuration fields over axes.

    Attributes:
        name: Profile identifier used in configuration files.
        symbol: Name the layout carries in older pipeline configuration.
        policy: Matching policy of rules built from this profile.
        axes: Field names per governed axis.
        description: One-line summary for listings.
        legacy_defaults: Field values applied when a caller opts into the
            defaults of the old short-form configuration.
    """

    name: str
    symbol: str | None
    policy: MatchPolicy
    axes: dict[Axis, AxisFields]
    description: str = ""
    legacy_defaults: dict[str, str] = field(default_factory=dict)

    @property
    def field_names(self) -> list[str]:
        """All configuration fields of this profile, in declaration order."""
        names: list[str] = []
        for fields in self.axes.values():
            for name in (fields.include, fields.exclude):
                if name is not None and name not in names:
                    names.append(name)
        return names

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "policy": self.policy.value,
            "description": self.description,
            "axes": {
                axis.value: {"include": f.include, "exclude": f.exclude}
                for axis, f in self.axes.items()
            },
            "fields": self.field_names,
            "legacy_defaults": dict(self.legacy_defaults),
        }


_BRANCH = AxisFields("branchIncludes", "branchExcludes")
_TAG = AxisFields("tagIncludes", "tagExcludes")
_PR_ORIGIN = AxisFields("prOriginIncludes", "prOriginExcludes")
_PR_DESTINATION = AxisFields("prDestinationIncludes", "prDestinationExcludes")
_HEAD = AxisFields("includes", "excludes")


BUILTIN_PROFILES: tuple[Profile, ...] = (
    # -----------------------------------------------------------------
    # Wildcard include/exclude profiles
    # -----------------------------------------------------------------
    Profile(
        name="wildcard",
        symbol="WildcardSCMFilter",
        policy=MatchPolicy.WILDCARD,
        axes={
            Axis.BRANCH: _BRANCH,
            Axis.TAG: _TAG,
            Axis.PR_ORIGIN: _PR_ORIGIN,
            Axis.PR_DESTINATION: _PR_DESTINATION,
        },
        description="Branches, tags, and change request origin and destination",
    ),
    Profile(
        name="wildcard_branch",
        symbol="WildcardSCMBranchFilter",
        policy=MatchPolicy.WILDCARD,
        axes={Axis.BRANCH: _BRANCH},
        description="Branches only",
    ),
    Profile(
        name="wildcard_tag",
        symbol="WildcardSCMTagFilter",
        policy=MatchPolicy.WILDCARD,
        axes={Axis.TAG: _TAG},
        description="Tags only",
    ),
    Profile(
        name="wildcard_pr_origin",
        symbol="WildcardSCMPROriginFilter",
        policy=MatchPolicy.WILDCARD,
        axes={Axis.PR_ORIGIN: _PR_ORIGIN},
        description="Change requests by origin branch",
    ),
    Profile(
        name="wildcard_pr_destination",
        symbol="WildcardSCMPRDestinationFilter",
        policy=MatchPolicy.WILDCARD,
        axes={Axis.PR_DESTINATION: _PR_DESTINATION},
        description="Change requests by destination branch",
    ),
    Profile(
        name="wildcard_head_with_pr",
        symbol="headWildcardFilterWithPR",
        policy=MatchPolicy.WILDCARD,
        axes={
            Axis.BRANCH: _HEAD,
            Axis.TAG: _TAG,
            Axis.PR_DESTINATION: AxisFields("prDestination"),
        },
        description="Branches and tags, change requests by destination branch",
        legacy_defaults={"tagExcludes": "*", "prDestination": "development"},
    ),
    Profile(
        name="wildcard_head_with_pr_origin",
        symbol="headWildcardFilterWithPRFromOrigin",
        policy=MatchPolicy.WILDCARD,
        axes={
            Axis.BRANCH: _HEAD,
            Axis.TAG: _TAG,
            Axis.PR_ORIGIN: _HEAD,
        },
        description="Branches and tags, change requests by origin using the branch lists",
        legacy_defaults={"tagExcludes": "*"},
    ),
    # -----------------------------------------------------------------
    # Single regex profiles
    # -----------------------------------------------------------------
    Profile(
        name="regex",
        symbol="RegexSCMFilter",
        policy=MatchPolicy.REGEX,
        axes={
            Axis.BRANCH: AxisFields("branchRegex"),
            Axis.TAG: AxisFields("tagRegex"),
            Axis.PR_ORIGIN: AxisFields("prOriginRegex"),
            Axis.PR_DESTINATION: AxisFields("prDestinationRegex"),
        },
        description="Branches, tags, and change request origin and destination",
    ),
    Profile(
        name="regex_branch",
        symbol="RegexSCMBranchFilter",
        policy=MatchPolicy.REGEX,
        axes={Axis.BRANCH: AxisFields("branchRegex")},
        description="Branches only",
    ),
    Profile(
        name="regex_tag",
        symbol="RegexSCMTagFilter",
        policy=MatchPolicy.REGEX,
        axes={Axis.TAG: AxisFields("tagRegex")},
        description="Tags only",
    ),
    Profile(
        name="regex_pr_origin",
        symbol=None,
        policy=MatchPolicy.REGEX,
        axes={Axis.PR_ORIGIN: AxisFields("prOriginRegex")},
        description="Change requests by origin branch",
    ),
    Profile(
        name="regex_pr_destination",
        symbol="RegexSCMPRDestinationFilter",
        policy=MatchPolicy.REGEX,
        axes={Axis.PR_DESTINATION: AxisFields("prDestinationRegex")},
        description="Change requests by destination branch",
    ),
    Profile(
        name="regex_head_with_pr",
        symbol="headRegexFilterWithPR",
        policy=MatchPolicy.REGEX,
        axes={
            Axis.BRANCH: AxisFields("regex"),
            Axis.TAG: AxisFields("tagRegex"),
            Axis.PR_DESTINATION: AxisFields("regex"),
        },
        description="Branches and tags, change requests by destination using the branch regex",
        legacy_defaults={"tagRegex": "(?!.*)"},
    ),
)

_BY_KEY: dict[str, Profile] = {}
for _profile in BUILTIN_PROFILES:
    _BY_KEY[_profile.name.lower()] = _profile
    if _profile.symbol is not None:
        _BY_KEY[_profile.symbol.lower()] = _profile


def get_profile(name: str) -> Profile:
    """Look up a profile by name or legacy symbol (case-insensitive).

    Raises:
        ConfigurationError: If no profile has that name.
    """
    if not isinstance(name, str):
        raise ConfigurationError(f"Profile name must be a string, got {name!r}")
    try:
        return _BY_KEY[name.strip().lower()]
    except KeyError:
        known = ", ".join(p.name for p in BUILTIN_PROFILES)
        raise ConfigurationError(f"Unknown profile {name!r}. Known profiles: {known}") from None


def list_profiles() -> list[Profile]:
    """Return all built-in profiles."""
    return list(BUILTIN_PROFILES)
