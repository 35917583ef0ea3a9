"""Source-control references and their classification.

A reference is a branch, a tag, or a change request (pull/merge
request). Only change requests carry an origin and a target branch name,
and a change request's own name is never used for matching.

``classify`` decides once which name axes a reference exposes; rule
evaluation switches on those axes instead of inspecting reference types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from headfilter.src.errors import InvalidCategoryError


class ReferenceCategory(str, Enum):
    """Kind of source-control reference."""

    BRANCH = "branch"
    TAG = "tag"
    CHANGE_REQUEST = "change_request"


class Axis(str, Enum):
    """A name a rule can match against."""

    BRANCH = "branch"
    TAG = "tag"
    PR_ORIGIN = "pr_origin"
    PR_DESTINATION = "pr_destination"


# Host systems name change requests differently.
_CATEGORY_ALIASES: dict[str, ReferenceCategory] = {
    "pr": ReferenceCategory.CHANGE_REQUEST,
    "pull_request": ReferenceCategory.CHANGE_REQUEST,
    "merge_request": ReferenceCategory.CHANGE_REQUEST,
}


def parse_category(value: str) -> ReferenceCategory:
    """Resolve a category value or alias.

    Raises:
        ValueError: If *value* names no known category.
    """
    key = value.strip().lower()
    if key in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[key]
    return ReferenceCategory(key)


# ===================================================================
# Reference
# ===================================================================


@dataclass(frozen=True)
class Reference:
    """A branch, tag, or change request offered by the host for filtering.

    Use the ``branch``, ``tag`` and ``change_request`` constructors.
    ``origin_name`` and ``target_name`` are only readable on change
    requests.

    Attributes:
        name: Reference name as reported by the host.
        category: Kind of reference.
    """

    name: str
    category: ReferenceCategory = ReferenceCategory.BRANCH
    _origin_name: str | None = field(default=None, repr=False)
    _target_name: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        has_names = self._origin_name is not None or self._target_name is not None
        if self.category == ReferenceCategory.CHANGE_REQUEST:
            if self._origin_name is None or self._target_name is None:
                raise ValueError(
                    f"Change request {self.name!r} needs both an origin and a target name"
                )
        elif has_names:
            raise ValueError(
                f"Only change requests carry origin/target names, got {self.category.value}"
            )

    @classmethod
    def branch(cls, name: str) -> Reference:
        return cls(name=name, category=ReferenceCategory.BRANCH)

    @classmethod
    def tag(cls, name: str) -> Reference:
        return cls(name=name, category=ReferenceCategory.TAG)

    @classmethod
    def change_request(cls, name: str, origin_name: str, target_name: str) -> Reference:
        """Create a change request merging *origin_name* into *target_name*."""
        return cls(
            name=name,
            category=ReferenceCategory.CHANGE_REQUEST,
            _origin_name=origin_name,
            _target_name=target_name,
        )

    @property
    def is_change_request(self) -> bool:
        return self.category == ReferenceCategory.CHANGE_REQUEST

    @property
    def origin_name(self) -> str:
        """Source branch of a change request.

        Raises:
            InvalidCategoryError: If this reference is not a change request.
        """
        if self._origin_name is None:
            raise InvalidCategoryError(
                f"{self.category.value} {self.name!r} has no origin name"
            )
        return self._origin_name

    @property
    def target_name(self) -> str:
        """Destination branch of a change request.

        Raises:
            InvalidCategoryError: If this reference is not a change request.
        """
        if self._target_name is None:
            raise InvalidCategoryError(
                f"{self.category.value} {self.name!r} has no target name"
            )
        return self._target_name

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        data: dict[str, Any] = {"name": self.name, "type": self.category.value}
        if self.is_change_request:
            data["origin"] = self.origin_name
            data["target"] = self.target_name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reference:
        """Deserialize from dictionary.

        Args:
            data: Mapping with ``name``, optional ``type`` (defaults to
                  branch) and, for change requests, ``origin`` and
                  ``target``.

        Returns:
            Reference instance.

        Raises:
            ValueError: On an unknown type or missing change request names.
        """
        category = parse_category(data.get("type", ReferenceCategory.BRANCH.value))
        if category == ReferenceCategory.CHANGE_REQUEST:
            return cls.change_request(
                name=data["name"],
                origin_name=data.get("origin"),  # type: ignore[arg-type]
                target_name=data.get("target"),  # type: ignore[arg-type]
            )
        return cls(name=data["name"], category=category)


# ===================================================================
# Classification
# ===================================================================


@dataclass(frozen=True)
class Classification:
    """Which axes a reference exposes and the name on each.

    Attributes:
        category: Kind of the classified reference.
        names: Name to compare, keyed by axis.
    """

    category: ReferenceCategory
    names: dict[Axis, str]

    def name_for(self, axis: Axis) -> str | None:
        """Return the name exposed on *axis*, or None if not exposed."""
        return self.names.get(axis)


def classify(reference: Reference) -> Classification:
    """Determine the category of *reference* and the names to match.

    Change requests expose their origin and target names; tags expose
    the tag name; anything else is treated as a branch.

    Args:
        reference: Reference to inspect.

    Returns:
        Classification for the reference.
    """
    if reference.is_change_request:
        return Classification(
            category=ReferenceCategory.CHANGE_REQUEST,
            names={
                Axis.PR_ORIGIN: reference.origin_name,
                Axis.PR_DESTINATION: reference.target_name,
            },
        )
    if reference.category == ReferenceCategory.TAG:
        return Classification(category=ReferenceCategory.TAG, names={Axis.TAG: reference.name})
    return Classification(category=ReferenceCategory.BRANCH, names={Axis.BRANCH: reference.name})
