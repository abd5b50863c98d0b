# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Partner underwriting checks.

Each check compares one facility attribute against a partner threshold.
Failures are either blockers (the partner will not take the facility) or
advisory warnings. Checks whose facility attribute is missing are skipped.
"""

from __future__ import annotations

import logging
from typing import List, Union

from pydantic import Field

from ..core.primitives import IssueSeverityEnum, Model
from ..facility import FacilityFinancialProfile
from ..valuation.results import format_percent
from .profiles import PartnerProfile

logger = logging.getLogger(__name__)

BLOCKER_PENALTY = 15
WARNING_PENALTY = 5


class UnderwritingIssue(Model):
    """One failed underwriting check."""

    field: str
    requirement: str
    actual: Union[float, str]
    severity: IssueSeverityEnum


class UnderwritingCheckResult(Model):
    """
    Outcome of checking one facility against a partner.

    ``passes`` is true when there are no blockers; warnings only lower the
    score.
    """

    passes: bool
    score: int = Field(..., ge=0, le=100)
    issues: List[UnderwritingIssue] = Field(default_factory=list)
    warnings: List[UnderwritingIssue] = Field(default_factory=list)

    @property
    def has_blockers(self) -> bool:
        return bool(self.issues)


def underwriting_score(blockers: int, warnings: int) -> int:
    """100 less 15 per blocker and 5 per warning, floored at zero."""
    return max(0, 100 - blockers * BLOCKER_PENALTY - warnings * WARNING_PENALTY)


def _pct(value: float) -> str:
    return format_percent(value, 1)


def check_underwriting_criteria(
    partner: PartnerProfile, facility: FacilityFinancialProfile
) -> UnderwritingCheckResult:
    """
    Check a facility against the partner's underwriting and asset preferences.

    Blockers: CMS rating, occupancy, EBITDAR margin, survey deficiencies, SFF
    status, immediate jeopardy, minimum beds and excluded states. Warnings:
    agency labor, maximum beds, building age and Medicaid share.
    """
    uw = partner.underwriting
    prefs = partner.asset_preferences
    issues: List[UnderwritingIssue] = []
    warnings: List[UnderwritingIssue] = []

    def blocker(field: str, requirement: str, actual: Union[float, str]) -> None:
        issues.append(
            UnderwritingIssue(
                field=field, requirement=requirement, actual=actual,
                severity=IssueSeverityEnum.BLOCKER,
            )
        )

    def warning(field: str, requirement: str, actual: Union[float, str]) -> None:
        warnings.append(
            UnderwritingIssue(
                field=field, requirement=requirement, actual=actual,
                severity=IssueSeverityEnum.WARNING,
            )
        )

    # === QUALITY ===
    if facility.cms_rating is not None and facility.cms_rating < uw.min_cms_rating:
        blocker("cms_rating", f"Min {uw.min_cms_rating} stars", facility.cms_rating)

    # === FINANCIAL ===
    if facility.occupancy_rate is not None and facility.occupancy_rate < uw.min_occupancy_rate:
        blocker(
            "occupancy_rate",
            f"Min {format_percent(uw.min_occupancy_rate, 0)}",
            _pct(facility.occupancy_rate),
        )

    margin = facility.ebitdar_margin
    if margin is not None and margin < uw.min_ebitdar_margin:
        blocker("ebitdar_margin", f"Min {format_percent(uw.min_ebitdar_margin, 0)}", _pct(margin))

    if (
        facility.agency_labor_percent is not None
        and facility.agency_labor_percent > uw.max_agency_labor_percent
    ):
        warning(
            "agency_labor_percent",
            f"Max {format_percent(uw.max_agency_labor_percent, 0)}",
            _pct(facility.agency_labor_percent),
        )

    # === COMPLIANCE ===
    if (
        facility.survey_deficiencies is not None
        and facility.survey_deficiencies > uw.max_survey_deficiencies
    ):
        blocker(
            "survey_deficiencies",
            f"Max {uw.max_survey_deficiencies}",
            facility.survey_deficiencies,
        )

    if facility.is_sff and not uw.allows_sff:
        blocker("is_sff", "No SFF facilities", "Is SFF")

    if facility.has_immediate_jeopardy and not uw.allows_immediate_jeopardy:
        blocker("has_immediate_jeopardy", "No IJ history", "Has IJ")

    # === ASSET ===
    if facility.beds < prefs.min_beds:
        blocker("beds", f"Min {prefs.min_beds} beds", facility.beds)
    if facility.beds > prefs.max_beds:
        warning("beds", f"Max {prefs.max_beds} beds", facility.beds)

    age = facility.building_age
    if age is not None and age > prefs.max_building_age:
        warning("building_age", f"Max {prefs.max_building_age} years", f"{age} years")

    if facility.state in prefs.excluded_states:
        blocker("state", f"Not in {', '.join(prefs.excluded_states)}", facility.state)

    if (
        facility.medicaid_percent is not None
        and facility.medicaid_percent > prefs.max_medicaid_percent
    ):
        warning(
            "medicaid_percent",
            f"Max {format_percent(prefs.max_medicaid_percent, 0)}",
            _pct(facility.medicaid_percent),
        )

    score = underwriting_score(len(issues), len(warnings))
    logger.debug(
        f"Underwriting {facility.facility_id} vs {partner.partner_id}: "
        f"{len(issues)} blockers, {len(warnings)} warnings, score {score}"
    )

    return UnderwritingCheckResult(
        passes=not issues, score=score, issues=issues, warnings=warnings
    )
