# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for partner underwriting checks.
"""

import pytest

from carevalue.core.primitives import IssueSeverityEnum
from carevalue.partners import (
    check_underwriting_criteria,
    get_partner_profile,
    underwriting_score,
)


def _fields(issues):
    return [issue.field for issue in issues]


class TestScore:
    @pytest.mark.parametrize(
        "blockers, warnings, expected",
        [(0, 0, 100), (1, 0, 85), (0, 1, 95), (2, 3, 55), (7, 0, 0)],
    )
    def test_penalties(self, blockers, warnings, expected):
        assert underwriting_score(blockers, warnings) == expected


class TestUnderwritingChecks:
    def test_clean_facility_passes(self, sabra, make_facility):
        result = check_underwriting_criteria(sabra, make_facility())
        assert result.passes
        assert result.score == 100
        assert not result.has_blockers
        assert result.warnings == []

    def test_blockers(self, sabra, make_facility):
        facility = make_facility(
            cms_rating=2,
            occupancy_rate=0.70,
            ttm_ebitdar=900_000,
            survey_deficiencies=12,
            is_sff=True,
            has_immediate_jeopardy=True,
            beds=50,
        )
        result = check_underwriting_criteria(sabra, facility)

        assert not result.passes
        assert _fields(result.issues) == [
            "cms_rating",
            "occupancy_rate",
            "ebitdar_margin",
            "survey_deficiencies",
            "is_sff",
            "has_immediate_jeopardy",
            "beds",
        ]
        assert all(i.severity == IssueSeverityEnum.BLOCKER for i in result.issues)
        assert result.score == 0

    def test_warnings_do_not_fail(self, sabra, make_facility):
        facility = make_facility(
            agency_labor_percent=0.20, beds=260, year_built=1980, medicaid_percent=0.75
        )
        result = check_underwriting_criteria(sabra, facility)

        assert result.passes
        assert _fields(result.warnings) == [
            "agency_labor_percent",
            "beds",
            "building_age",
            "medicaid_percent",
        ]
        assert result.score == 80

    def test_excluded_state(self, make_facility):
        caretrust = get_partner_profile("caretrust")
        result = check_underwriting_criteria(caretrust, make_facility(state="NY"))
        assert "state" in _fields(result.issues)

    def test_permissive_partner_allows_sff(self, make_facility):
        generic = get_partner_profile("generic_pe")
        result = check_underwriting_criteria(generic, make_facility(is_sff=True))
        assert "is_sff" not in _fields(result.issues)

    def test_missing_data_skips_checks(self, sabra, make_facility):
        facility = make_facility(cms_rating=None, survey_deficiencies=None, ttm_revenue=0.0)
        result = check_underwriting_criteria(sabra, facility)
        assert result.passes
