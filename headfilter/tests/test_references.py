"""Tests for the reference model and classifier."""

from __future__ import annotations

import pytest

from headfilter.src.errors import InvalidCategoryError
from headfilter.src.references import (
    Axis,
    Classification,
    Reference,
    ReferenceCategory,
    classify,
    parse_category,
)

# ===================================================================
# Enums
# ===================================================================


class TestEnums:
    """Enum value and membership tests."""

    def test_category_values(self):
        assert ReferenceCategory.BRANCH.value == "branch"
        assert ReferenceCategory.TAG.value == "tag"
        assert ReferenceCategory.CHANGE_REQUEST.value == "change_request"

    def test_axis_values(self):
        assert [a.value for a in Axis] == ["branch", "tag", "pr_origin", "pr_destination"]

    def test_string_enum(self):
        assert Axis.TAG == "tag"
        assert isinstance(ReferenceCategory.BRANCH, str)


class TestParseCategory:
    """Category names and host aliases."""

    @pytest.mark.parametrize("alias", ["pr", "PR", "pull_request", "merge_request", " pr "])
    def test_change_request_aliases(self, alias):
        assert parse_category(alias) == ReferenceCategory.CHANGE_REQUEST

    def test_canonical_values(self):
        assert parse_category("tag") == ReferenceCategory.TAG
        assert parse_category("Branch") == ReferenceCategory.BRANCH

    def test_unknown(self):
        with pytest.raises(ValueError):
            parse_category("commit")


# ===================================================================
# Reference
# ===================================================================


class TestReference:
    """Reference construction and invariants."""

    def test_branch(self):
        ref = Reference.branch("main")
        assert ref.name == "main"
        assert ref.category == ReferenceCategory.BRANCH
        assert ref.is_change_request is False

    def test_tag(self):
        ref = Reference.tag("v1.0")
        assert ref.category == ReferenceCategory.TAG

    def test_change_request(self, change_request):
        assert change_request.is_change_request is True
        assert change_request.origin_name == "feature/x"
        assert change_request.target_name == "main"

    def test_default_category_is_branch(self):
        assert Reference("main").category == ReferenceCategory.BRANCH

    def test_branch_has_no_origin(self):
        with pytest.raises(InvalidCategoryError):
            _ = Reference.branch("main").origin_name

    def test_tag_has_no_target(self):
        with pytest.raises(InvalidCategoryError):
            _ = Reference.tag("v1").target_name

    def test_change_request_requires_both_names(self):
        with pytest.raises(ValueError):
            Reference("PR-1", ReferenceCategory.CHANGE_REQUEST, _origin_name="feature/x")

    def test_branch_rejects_origin(self):
        with pytest.raises(ValueError):
            Reference("main", ReferenceCategory.BRANCH, _origin_name="feature/x")

    def test_is_hashable_and_comparable(self):
        a = Reference.change_request("PR-1", "f", "main")
        b = Reference.change_request("PR-1", "f", "main")
        assert a == b
        assert len({a, b}) == 1

    def test_repr_hides_private_fields(self, change_request):
        assert "_origin_name" not in repr(change_request)


class TestReferenceSerialization:
    """to_dict / from_dict host adapter."""

    def test_branch_to_dict(self):
        assert Reference.branch("main").to_dict() == {"name": "main", "type": "branch"}

    def test_change_request_to_dict(self, change_request):
        assert change_request.to_dict() == {
            "name": "PR-42",
            "type": "change_request",
            "origin": "feature/x",
            "target": "main",
        }

    def test_roundtrip(self, sample_references):
        for ref in sample_references:
            assert Reference.from_dict(ref.to_dict()) == ref

    def test_from_dict_defaults_to_branch(self):
        assert Reference.from_dict({"name": "main"}) == Reference.branch("main")

    def test_from_dict_alias(self):
        ref = Reference.from_dict(
            {"name": "!12", "type": "merge_request", "origin": "fix/a", "target": "main"}
        )
        assert ref.origin_name == "fix/a"

    def test_from_dict_change_request_missing_target(self):
        with pytest.raises(ValueError):
            Reference.from_dict({"name": "PR-1", "type": "pr", "origin": "f"})

    def test_from_dict_unknown_type(self):
        with pytest.raises(ValueError):
            Reference.from_dict({"name": "x", "type": "commit"})


# ===================================================================
# classify
# ===================================================================


class TestClassify:
    """Category and name exposure per reference kind."""

    def test_branch(self):
        result = classify(Reference.branch("main"))
        assert result == Classification(ReferenceCategory.BRANCH, {Axis.BRANCH: "main"})

    def test_tag(self):
        result = classify(Reference.tag("v1.0"))
        assert result.category == ReferenceCategory.TAG
        assert result.names == {Axis.TAG: "v1.0"}

    def test_change_request_exposes_origin_and_target(self, change_request):
        result = classify(change_request)
        assert result.category == ReferenceCategory.CHANGE_REQUEST
        assert result.names == {Axis.PR_ORIGIN: "feature/x", Axis.PR_DESTINATION: "main"}

    def test_change_request_name_never_exposed(self, change_request):
        result = classify(change_request)
        assert "PR-42" not in result.names.values()
        assert result.name_for(Axis.BRANCH) is None

    def test_name_for(self):
        result = classify(Reference.tag("v2"))
        assert result.name_for(Axis.TAG) == "v2"
        assert result.name_for(Axis.PR_ORIGIN) is None

    def test_exactly_one_category(self, sample_references):
        for ref in sample_references:
            result = classify(ref)
            assert result.category == ref.category
            assert result.names
