"""Filter set: the ordered collection of configured rules.

A reference is excluded when any rule excludes it. Rules abstain on
axes they do not govern, so the result does not depend on rule order;
the order is kept for display only.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from headfilter.src.references import Reference
from headfilter.src.rules import FilterDecision, FilterRule

logger = logging.getLogger(__name__)


def is_excluded(reference: Reference, rules: Iterable[FilterRule], source: Any = None) -> bool:
    """Return True when any of *rules* excludes *reference*.

    Stops at the first excluding rule.

    Args:
        reference: Reference offered by the host.
        rules: Rules to consult.
        source: Host context, passed through and unused.
    """
    return any(rule.is_excluded(reference, source) for rule in rules)


# ===================================================================
# FilterReport
# ===================================================================


@dataclass
class FilterReport:
    """Result of running a filter set over a batch of references.

    Attributes:
        admitted: References no rule excluded, in input order.
        excluded: References some rule excluded, in input order.
        decisions: Excluding decision per excluded reference.
    """

    admitted: list[Reference] = field(default_factory=list)
    excluded: list[Reference] = field(default_factory=list)
    decisions: list[FilterDecision] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.admitted) + len(self.excluded)

    @property
    def exclusion_ratio(self) -> float:
        """Fraction of references excluded (0.0-1.0)."""
        if self.total == 0:
            return 0.0
        return len(self.excluded) / self.total

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "total": self.total,
            "admitted_count": len(self.admitted),
            "excluded_count": len(self.excluded),
            "exclusion_ratio": self.exclusion_ratio,
            "admitted": [r.to_dict() for r in self.admitted],
            "excluded": [
                {"reference": r.to_dict(), "decision": d.to_dict()}
                for r, d in zip(self.excluded, self.decisions)
            ],
        }


# ===================================================================
# FilterSet
# ===================================================================


class FilterSet:
    """Ordered rules combined by OR of exclusions.

    Args:
        rules: Configured rules, in display order.

    Example::

        filters = FilterSet([tag_rule, branch_rule])
        if not filters.is_excluded(reference):
            build(reference)
    """

    def __init__(self, rules: Sequence[FilterRule] | None = None) -> None:
        self._rules: tuple[FilterRule, ...] = tuple(rules or ())

    @property
    def rules(self) -> tuple[FilterRule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[FilterRule]:
        return iter(self._rules)

    def is_excluded(self, reference: Reference, source: Any = None) -> bool:
        """Return True when any rule excludes *reference*.

        Args:
            reference: Reference offered by the host.
            source: Host context, passed through and unused.
        """
        return is_excluded(reference, self._rules, source)

    def evaluate(self, reference: Reference) -> FilterDecision:
        """Return the first excluding decision, or an admitting one.

        Args:
            reference: Reference to evaluate.

        Returns:
            FilterDecision from the first rule that excludes the
            reference, else a not-excluded decision.
        """
        for rule in self._rules:
            decision = rule.evaluate(reference)
            if decision.excluded:
                logger.debug(
                    "Excluded %s %r: %s",
                    reference.category.value,
                    reference.name,
                    decision.reason,
                )
                return decision
        return FilterDecision(excluded=False, reason="no rule excludes this reference")

    def filter(self, references: Iterable[Reference]) -> FilterReport:
        """Split *references* into admitted and excluded.

        Args:
            references: References offered by the host.

        Returns:
            FilterReport with both lists and the excluding decisions.
        """
        report = FilterReport()
        for reference in references:
            decision = self.evaluate(reference)
            if decision.excluded:
                report.excluded.append(reference)
                report.decisions.append(decision)
            else:
                report.admitted.append(reference)
        logger.info(
            "Filtered %d references: %d admitted, %d excluded",
            report.total,
            len(report.admitted),
            len(report.excluded),
        )
        return report

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"rules": [rule.to_dict() for rule in self._rules]}
