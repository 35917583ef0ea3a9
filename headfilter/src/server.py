"""FastAPI router for the reference filter.

Exposes regex form validation, the profile catalogue, and a configured
filter set that discovery workers can query in batches. Mounted by the
application at ``/api/headfilter/``.

Configuration problems are reported as HTTP 400 with the configuration
error message; evaluation itself never fails for well-formed references.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from headfilter.src.config import (
    FilterSetConfig,
    build_filter_set,
    check_rule_config,
)
from headfilter.src.errors import ConfigurationError
from headfilter.src.filter_set import FilterSet
from headfilter.src.patterns import validate_pattern
from headfilter.src.profiles import list_profiles
from headfilter.src.references import Reference

logger = logging.getLogger(__name__)

router = APIRouter()

# ===================================================================
# In-memory state
# ===================================================================

_state: dict[str, Any] = {
    "config": None,
    "filter_set": None,
}


def install_filter_set(config: FilterSetConfig) -> FilterSet:
    """Build *config* and make it the active filter set.

    The previous filter set stays active when building fails.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    filter_set = build_filter_set(config)
    _state["config"] = config
    _state["filter_set"] = filter_set
    logger.info("Installed filter set with %d rules", len(filter_set))
    return filter_set


# ===================================================================
# Pydantic request/response models
# ===================================================================


class CheckRegexRequest(BaseModel):
    """Request body for POST /check-regex."""

    value: str


class ValidationResponse(BaseModel):
    """Response for validation endpoints."""

    ok: bool
    message: str = ""


class FilterConfigRequest(BaseModel):
    """Request body for PUT /filters and POST /rules/check."""

    rules: list[dict[str, Any]] = Field(default_factory=list)


class ReferenceRequest(BaseModel):
    """A reference to evaluate."""

    name: str
    type: str = "branch"
    origin: str | None = None
    target: str | None = None


class EvaluateRequest(BaseModel):
    """Request body for POST /filters/evaluate."""

    references: list[ReferenceRequest]


# ===================================================================
# Endpoints
# ===================================================================


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Return service health status.

    Returns:
        Dict with status, service name, and version.
    """
    return {
        "status": "ok",
        "service": "headfilter",
        "version": "0.1.0",
    }


@router.get("/profiles")
async def get_profiles() -> dict[str, Any]:
    """List the built-in rule profiles."""
    return {"profiles": [p.to_dict() for p in list_profiles()]}


@router.post("/check-regex", response_model=ValidationResponse)
async def check_regex(request: CheckRegexRequest) -> dict[str, Any]:
    """Validate regular expression syntax for a configuration form.

    Args:
        request: Expression to check.

    Returns:
        Dict with ``ok`` and the engine's message on failure.
    """
    return validate_pattern(request.value).to_dict()


@router.post("/rules/check", response_model=ValidationResponse)
async def check_rules(request: FilterConfigRequest) -> dict[str, Any]:
    """Validate rule configurations without installing them.

    Returns the first failure, prefixed with the rule's position.
    """
    for index, rule in enumerate(request.rules):
        result = check_rule_config(rule)
        if not result.ok:
            return {"ok": False, "message": f"rule {index}: {result.message}"}
    return {"ok": True, "message": ""}


@router.put("/filters")
async def put_filters(request: FilterConfigRequest) -> dict[str, Any]:
    """Replace the configured filter set.

    Args:
        request: Rule configurations in display order.

    Returns:
        Dict with the normalized configuration and rule count.

    Raises:
        HTTPException: 400 when the configuration is invalid.
    """
    try:
        config = FilterSetConfig.from_dict({"rules": request.rules})
        filter_set = install_filter_set(config)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {"rule_count": len(filter_set), "config": config.to_dict()}


@router.get("/filters")
async def get_filters() -> dict[str, Any]:
    """Return the configured filter set.

    Raises:
        HTTPException: 404 when nothing is configured.
    """
    if _state["config"] is None:
        raise HTTPException(status_code=404, detail="No filter set configured")
    return {
        "rule_count": len(_state["filter_set"]),
        "config": _state["config"].to_dict(),
    }


@router.delete("/filters")
async def delete_filters() -> dict[str, Any]:
    """Remove the configured filter set."""
    removed = _state["config"] is not None
    _state["config"] = None
    _state["filter_set"] = None
    return {"removed": removed}


@router.post("/filters/evaluate")
async def evaluate_references(request: EvaluateRequest) -> dict[str, Any]:
    """Decide, for each reference, whether the filter set excludes it.

    Args:
        request: References offered by a discovery worker.

    Returns:
        Dict with one decision per reference plus the batch report.

    Raises:
        HTTPException: 409 when no filter set is configured, 400 on a
            malformed reference.
    """
    filter_set = _state["filter_set"]
    if filter_set is None:
        raise HTTPException(status_code=409, detail="No filter set configured")

    try:
        references = [Reference.from_dict(r.model_dump()) for r in request.references]
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    report = filter_set.filter(references)
    excluded_by = {id(ref): d for ref, d in zip(report.excluded, report.decisions)}
    decisions = []
    for ref in references:
        decision = excluded_by.get(id(ref))
        decisions.append(
            {
                "reference": ref.to_dict(),
                "excluded": decision is not None,
                "reason": decision.reason if decision is not None else "",
                "rule": decision.rule if decision is not None else "",
            }
        )
    return {
        "decisions": decisions,
        "total": report.total,
        "admitted_count": len(report.admitted),
        "excluded_count": len(report.excluded),
    }
