"""Shared fixtures for reference filter tests."""

from __future__ import annotations

import pytest

from headfilter.src.references import Reference


@pytest.fixture
def sample_references() -> list[Reference]:
    """A mixed batch of branches, tags, and change requests."""
    return [
        Reference.branch("main"),
        Reference.branch("develop"),
        Reference.branch("release/1.0"),
        Reference.branch("release/old"),
        Reference.branch("feature/login"),
        Reference.tag("v1.0"),
        Reference.tag("v1.1"),
        Reference.tag("nightly-2024"),
        Reference.change_request("PR-1", "feature/x", "main"),
        Reference.change_request("PR-2", "hotfix/y", "release/1.0"),
        Reference.change_request("PR-3", "feature/z", "develop"),
    ]


@pytest.fixture
def change_request() -> Reference:
    """A change request merging feature/x into main."""
    return Reference.change_request("PR-42", origin_name="feature/x", target_name="main")
