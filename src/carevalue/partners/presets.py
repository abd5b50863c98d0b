# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Preset partner profiles.

Representative healthcare REIT, private equity and regional operator
requirements. The numbers are market conventions, not commitments of the
named firms.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List

from ..core.primitives import (
    AssetTypeEnum,
    EscalationTypeEnum,
    LeaseStructureEnum,
    LocationTypeEnum,
    PartnerTypeEnum,
    RiskToleranceEnum,
)
from .profiles import (
    AssetPreferences,
    PartnerEconomics,
    PartnerLeaseTerms,
    PartnerProfile,
    PartnerUnderwriting,
)

SNF = AssetTypeEnum.SNF
ALF = AssetTypeEnum.ALF
ILF = AssetTypeEnum.ILF

URBAN = LocationTypeEnum.URBAN
SUBURBAN = LocationTypeEnum.SUBURBAN
RURAL = LocationTypeEnum.RURAL


SABRA = PartnerProfile(
    partner_id="sabra",
    name="Sabra Health Care REIT",
    partner_type=PartnerTypeEnum.REIT,
    risk_tolerance=RiskToleranceEnum.MODERATE,
    economics=PartnerEconomics(
        min_cap_rate=0.065,
        target_cap_rate=0.0725,
        max_cap_rate=0.085,
        min_yield=0.075,
        target_yield=0.08,
        max_yield=0.09,
        target_spread=0.0075,
        min_coverage_ratio=1.30,
        target_coverage_ratio=1.40,
        warning_coverage_ratio=1.35,
    ),
    lease_terms=PartnerLeaseTerms(
        structure=LeaseStructureEnum.TRIPLE_NET,
        initial_term_years=10,
        renewal_options=2,
        renewal_term_years=5,
        escalation_type=EscalationTypeEnum.GREATER_OF,
        fixed_escalation=0.025,
        cpi_floor=0.02,
        cpi_cap=0.03,
        requires_corporate_guarantee=True,
        requires_security_deposit=True,
        security_deposit_months=6,
        has_right_of_first_offer=True,
    ),
    underwriting=PartnerUnderwriting(
        min_ebitdar_margin=0.10,
        max_agency_labor_percent=0.12,
        min_occupancy_rate=0.78,
        min_cms_rating=3,
        max_survey_deficiencies=10,
        min_facilities_in_portfolio=3,
        max_concentration_percent=0.30,
        requires_geographic_diversification=True,
        requires_audited_financials=True,
        min_historical_periods=24,
    ),
    asset_preferences=AssetPreferences(
        preferred_asset_types=[SNF, ALF],
        min_beds=60,
        max_beds=250,
        preferred_bed_range=(80, 150),
        preferred_market_types=[SUBURBAN, URBAN],
        max_building_age=35,
        min_medicare_percent=0.15,
        max_medicaid_percent=0.65,
        min_private_pay_percent=0.05,
    ),
)

CARETRUST = PartnerProfile(
    partner_id="caretrust",
    name="CareTrust REIT",
    partner_type=PartnerTypeEnum.REIT,
    risk_tolerance=RiskToleranceEnum.MODERATE,
    economics=PartnerEconomics(
        min_cap_rate=0.07,
        target_cap_rate=0.075,
        max_cap_rate=0.09,
        min_yield=0.08,
        target_yield=0.085,
        max_yield=0.095,
        target_spread=0.01,
        min_coverage_ratio=1.35,
        target_coverage_ratio=1.45,
        warning_coverage_ratio=1.40,
    ),
    lease_terms=PartnerLeaseTerms(
        structure=LeaseStructureEnum.TRIPLE_NET,
        initial_term_years=15,
        renewal_options=2,
        renewal_term_years=5,
        escalation_type=EscalationTypeEnum.FIXED,
        fixed_escalation=0.025,
        requires_corporate_guarantee=True,
        requires_security_deposit=True,
        security_deposit_months=3,
        has_right_of_first_offer=True,
        has_right_of_first_refusal=True,
    ),
    underwriting=PartnerUnderwriting(
        min_ebitdar_margin=0.12,
        max_agency_labor_percent=0.10,
        min_occupancy_rate=0.80,
        min_cms_rating=3,
        max_survey_deficiencies=8,
        min_facilities_in_portfolio=5,
        max_concentration_percent=0.20,
        requires_geographic_diversification=True,
        requires_audited_financials=True,
        min_historical_periods=36,
    ),
    asset_preferences=AssetPreferences(
        preferred_asset_types=[SNF],
        min_beds=80,
        max_beds=200,
        preferred_bed_range=(100, 150),
        excluded_states=["NY", "NJ"],
        preferred_market_types=[SUBURBAN],
        max_building_age=30,
        requires_recent_renovation=True,
        max_years_since_renovation=10,
        min_medicare_percent=0.20,
        max_medicaid_percent=0.55,
        min_private_pay_percent=0.10,
    ),
)

LTC_PROPERTIES = PartnerProfile(
    partner_id="ltc_properties",
    name="LTC Properties",
    partner_type=PartnerTypeEnum.REIT,
    risk_tolerance=RiskToleranceEnum.CONSERVATIVE,
    economics=PartnerEconomics(
        min_cap_rate=0.065,
        target_cap_rate=0.07,
        max_cap_rate=0.08,
        min_yield=0.07,
        target_yield=0.0775,
        max_yield=0.085,
        target_spread=0.0075,
        min_coverage_ratio=1.40,
        target_coverage_ratio=1.50,
        warning_coverage_ratio=1.45,
    ),
    lease_terms=PartnerLeaseTerms(
        structure=LeaseStructureEnum.TRIPLE_NET,
        initial_term_years=10,
        renewal_options=3,
        renewal_term_years=5,
        escalation_type=EscalationTypeEnum.CPI,
        fixed_escalation=0.02,
        cpi_floor=0.015,
        cpi_cap=0.025,
        requires_personal_guarantee=True,
        requires_corporate_guarantee=True,
        requires_security_deposit=True,
        security_deposit_months=6,
        has_right_of_first_refusal=True,
    ),
    underwriting=PartnerUnderwriting(
        min_ebitdar_margin=0.15,
        max_agency_labor_percent=0.08,
        min_occupancy_rate=0.85,
        min_cms_rating=4,
        max_survey_deficiencies=5,
        min_facilities_in_portfolio=3,
        max_concentration_percent=0.25,
        requires_audited_financials=True,
        min_historical_periods=36,
    ),
    asset_preferences=AssetPreferences(
        preferred_asset_types=[SNF, ALF, ILF],
        min_beds=50,
        max_beds=180,
        preferred_bed_range=(70, 120),
        preferred_states=["TX", "FL", "OH", "PA"],
        excluded_states=["CA", "NY"],
        preferred_market_types=[SUBURBAN, RURAL],
        max_building_age=25,
        requires_recent_renovation=True,
        max_years_since_renovation=7,
        min_medicare_percent=0.25,
        max_medicaid_percent=0.50,
        min_private_pay_percent=0.15,
    ),
)

GENERIC_PE = PartnerProfile(
    partner_id="generic_pe",
    name="Private Equity (Standard)",
    partner_type=PartnerTypeEnum.PRIVATE_EQUITY,
    risk_tolerance=RiskToleranceEnum.AGGRESSIVE,
    economics=PartnerEconomics(
        min_cap_rate=0.08,
        target_cap_rate=0.09,
        max_cap_rate=0.12,
        min_yield=0.09,
        target_yield=0.10,
        max_yield=0.12,
        target_spread=0.01,
        min_coverage_ratio=1.20,
        target_coverage_ratio=1.30,
        warning_coverage_ratio=1.25,
    ),
    lease_terms=PartnerLeaseTerms(
        structure=LeaseStructureEnum.TRIPLE_NET,
        initial_term_years=10,
        renewal_options=2,
        renewal_term_years=5,
        escalation_type=EscalationTypeEnum.FIXED,
        fixed_escalation=0.03,
        requires_personal_guarantee=True,
        requires_corporate_guarantee=True,
        requires_security_deposit=True,
        security_deposit_months=12,
        has_purchase_option=True,
        purchase_option_years=[5, 7],
        purchase_option_formula="FMV",
    ),
    underwriting=PartnerUnderwriting(
        min_ebitdar_margin=0.08,
        max_agency_labor_percent=0.20,
        min_occupancy_rate=0.70,
        min_cms_rating=2,
        max_survey_deficiencies=20,
        allows_sff=True,
        min_facilities_in_portfolio=1,
        max_concentration_percent=0.50,
        min_historical_periods=12,
    ),
    asset_preferences=AssetPreferences(
        preferred_asset_types=[SNF, ALF, ILF],
        min_beds=40,
        max_beds=300,
        preferred_bed_range=(60, 200),
        preferred_market_types=[URBAN, SUBURBAN, RURAL],
        max_building_age=50,
        min_medicare_percent=0.10,
        max_medicaid_percent=0.80,
        min_private_pay_percent=0.02,
    ),
)

REGIONAL_OPERATOR = PartnerProfile(
    partner_id="regional_operator",
    name="Regional Operator (Acquisition)",
    partner_type=PartnerTypeEnum.REGIONAL_OPERATOR,
    risk_tolerance=RiskToleranceEnum.MODERATE,
    economics=PartnerEconomics(
        min_cap_rate=0.07,
        target_cap_rate=0.08,
        max_cap_rate=0.10,
        min_yield=0.08,
        target_yield=0.09,
        max_yield=0.10,
        target_spread=0.01,
        min_coverage_ratio=1.25,
        target_coverage_ratio=1.35,
        warning_coverage_ratio=1.30,
    ),
    lease_terms=PartnerLeaseTerms(
        structure=LeaseStructureEnum.MODIFIED_GROSS,
        initial_term_years=10,
        renewal_options=2,
        renewal_term_years=5,
        escalation_type=EscalationTypeEnum.FIXED,
        fixed_escalation=0.025,
        requires_personal_guarantee=True,
        has_purchase_option=True,
        purchase_option_years=[10],
        purchase_option_formula="Initial + CPI",
    ),
    underwriting=PartnerUnderwriting(
        min_ebitdar_margin=0.08,
        max_agency_labor_percent=0.18,
        min_occupancy_rate=0.72,
        min_cms_rating=2,
        max_survey_deficiencies=15,
        allows_sff=True,
        min_facilities_in_portfolio=1,
        max_concentration_percent=1.0,
        min_historical_periods=12,
    ),
    asset_preferences=AssetPreferences(
        preferred_asset_types=[SNF, ALF],
        min_beds=30,
        max_beds=200,
        preferred_bed_range=(50, 120),
        preferred_market_types=[SUBURBAN, RURAL],
        max_building_age=45,
        min_medicare_percent=0.10,
        max_medicaid_percent=0.75,
        min_private_pay_percent=0.03,
    ),
)

PARTNER_PROFILES: Dict[str, PartnerProfile] = {
    profile.partner_id: profile
    for profile in (SABRA, CARETRUST, LTC_PROPERTIES, GENERIC_PE, REGIONAL_OPERATOR)
}

# sections merged key-by-key rather than replaced
_NESTED_SECTIONS = ("economics", "lease_terms", "underwriting", "asset_preferences")


def get_partner_profile(partner_id: str) -> PartnerProfile:
    """
    Look up a preset profile by id.

    Raises:
        KeyError: If no preset has that id
    """
    try:
        return PARTNER_PROFILES[partner_id]
    except KeyError:
        known = ", ".join(sorted(PARTNER_PROFILES))
        raise KeyError(f"Unknown partner profile '{partner_id}' (known: {known})") from None


def all_partner_profiles() -> List[PartnerProfile]:
    """Every preset profile: REITs first, then private equity, then regional."""
    return list(PARTNER_PROFILES.values())


def create_custom_profile(name: str, base: PartnerProfile, **overrides: Any) -> PartnerProfile:
    """
    Derive a custom profile from ``base``.

    Nested sections (``economics``, ``lease_terms``, ``underwriting``,
    ``asset_preferences``) accept partial dicts merged over the base values;
    other keyword arguments replace top-level fields. The result is
    re-validated, so inconsistent overrides raise ``pydantic.ValidationError``.

    Example:
        ```python
        custom = create_custom_profile(
            "Sabra (tight coverage)",
            get_partner_profile("sabra"),
            economics={"min_coverage_ratio": 1.35, "warning_coverage_ratio": 1.38},
        )
        ```
    """
    data = base.model_dump()
    for key, value in overrides.items():
        if key in _NESTED_SECTIONS and isinstance(value, dict):
            data[key] = {**data[key], **value}
        else:
            data[key] = value

    slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
    data["partner_id"] = f"custom_{slug}"
    data["name"] = name
    data["partner_type"] = PartnerTypeEnum.CUSTOM
    return PartnerProfile.model_validate(data)
