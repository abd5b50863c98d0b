# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capital partner profiles.

A partner profile captures what a buyer or landlord requires from a deal:
pricing economics (cap rate, yield, rent coverage), lease terms, underwriting
thresholds and asset preferences. Profiles are immutable; derive variants with
``create_custom_profile`` or ``model_copy(update=...)``.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import Field, model_validator

from ..core.primitives import (
    AssetTypeEnum,
    CapRate,
    EscalationTypeEnum,
    FloatBetween0And1,
    LeaseStructureEnum,
    LocationTypeEnum,
    Model,
    PartnerTypeEnum,
    PositiveInt,
    RiskToleranceEnum,
)

DEFAULT_CPI_ESCALATION = 0.02


class PartnerEconomics(Model):
    """
    Pricing and coverage requirements.

    Attributes:
        min_cap_rate / target_cap_rate / max_cap_rate: Purchase pricing band
        min_yield / target_yield / max_yield: Rent as a share of purchase price
        target_spread: Yield over cap rate
        min_coverage_ratio: Hard EBITDAR / rent floor
        warning_coverage_ratio: Below this coverage is critical
        target_coverage_ratio: At or above this coverage is healthy
    """

    min_cap_rate: CapRate
    target_cap_rate: CapRate
    max_cap_rate: CapRate

    min_yield: CapRate
    target_yield: CapRate
    max_yield: CapRate

    target_spread: float = Field(..., ge=0, le=0.05)

    min_coverage_ratio: float = Field(..., ge=1.0, le=2.0)
    target_coverage_ratio: float = Field(..., ge=1.0, le=2.0)
    warning_coverage_ratio: float = Field(..., ge=1.0, le=2.0)

    @model_validator(mode="after")
    def validate_bands(self) -> "PartnerEconomics":
        """Bands must be ordered low to high."""
        if not (self.min_cap_rate <= self.target_cap_rate <= self.max_cap_rate):
            raise ValueError("Cap rates must satisfy min <= target <= max")
        if not (self.min_yield <= self.target_yield <= self.max_yield):
            raise ValueError("Yields must satisfy min <= target <= max")
        if not (
            self.min_coverage_ratio <= self.warning_coverage_ratio <= self.target_coverage_ratio
        ):
            raise ValueError("Coverage ratios must satisfy min <= warning <= target")
        return self


class PartnerLeaseTerms(Model):
    """Lease structure the partner offers or requires."""

    structure: LeaseStructureEnum = LeaseStructureEnum.TRIPLE_NET

    initial_term_years: int = Field(..., gt=0)
    renewal_options: PositiveInt = 0
    renewal_term_years: PositiveInt = 0

    escalation_type: EscalationTypeEnum = EscalationTypeEnum.FIXED
    fixed_escalation: float = Field(..., ge=0, lt=1)
    cpi_floor: Optional[float] = Field(default=None, ge=0, lt=1)
    cpi_cap: Optional[float] = Field(default=None, ge=0, lt=1)

    requires_personal_guarantee: bool = False
    requires_corporate_guarantee: bool = False
    requires_security_deposit: bool = False
    security_deposit_months: Optional[int] = Field(default=None, ge=0)

    has_right_of_first_offer: bool = False
    has_right_of_first_refusal: bool = False

    has_purchase_option: bool = False
    purchase_option_years: List[int] = Field(default_factory=list)
    purchase_option_formula: Optional[str] = None

    @model_validator(mode="after")
    def validate_cpi_band(self) -> "PartnerLeaseTerms":
        if self.cpi_floor is not None and self.cpi_cap is not None:
            if self.cpi_floor > self.cpi_cap:
                raise ValueError("cpi_floor must not exceed cpi_cap")
        return self

    @property
    def total_years(self) -> int:
        """Initial term plus every renewal option."""
        return self.initial_term_years + self.renewal_options * self.renewal_term_years

    @property
    def effective_escalation(self) -> float:
        """
        Annual escalation used for projections.

        CPI leases escalate at their floor (2% when no floor is set);
        greater-of leases at the larger of the fixed rate and that floor.
        """
        floor = self.cpi_floor if self.cpi_floor is not None else DEFAULT_CPI_ESCALATION
        if self.escalation_type == EscalationTypeEnum.CPI:
            return floor
        if self.escalation_type == EscalationTypeEnum.GREATER_OF:
            return max(self.fixed_escalation, floor)
        return self.fixed_escalation

    @property
    def first_purchase_option_year(self) -> Optional[int]:
        if not self.has_purchase_option or not self.purchase_option_years:
            return None
        return min(self.purchase_option_years)


class PartnerUnderwriting(Model):
    """Facility and portfolio thresholds the partner underwrites against."""

    # Financial
    min_ebitdar_margin: float = Field(..., ge=0, le=1)
    max_agency_labor_percent: FloatBetween0And1
    min_occupancy_rate: FloatBetween0And1

    # Quality
    min_cms_rating: int = Field(..., ge=1, le=5)
    max_survey_deficiencies: PositiveInt
    allows_sff: bool = False
    allows_immediate_jeopardy: bool = False

    # Portfolio
    min_facilities_in_portfolio: int = Field(default=1, ge=1)
    max_concentration_percent: FloatBetween0And1 = 1.0
    requires_geographic_diversification: bool = False

    # Documentation
    requires_audited_financials: bool = False
    min_historical_periods: PositiveInt = 12


class AssetPreferences(Model):
    """Asset, size, geography, age and payer-mix preferences."""

    preferred_asset_types: List[AssetTypeEnum] = Field(
        default_factory=lambda: list(AssetTypeEnum)
    )

    min_beds: PositiveInt = 0
    max_beds: PositiveInt = 10_000
    preferred_bed_range: Tuple[int, int] = (0, 10_000)

    preferred_states: List[str] = Field(default_factory=list)
    excluded_states: List[str] = Field(default_factory=list)
    preferred_market_types: List[LocationTypeEnum] = Field(
        default_factory=lambda: list(LocationTypeEnum)
    )

    max_building_age: PositiveInt = 100
    requires_recent_renovation: bool = False
    max_years_since_renovation: Optional[int] = Field(default=None, ge=0)

    min_medicare_percent: FloatBetween0And1 = 0.0
    max_medicaid_percent: FloatBetween0And1 = 1.0
    min_private_pay_percent: FloatBetween0And1 = 0.0

    @model_validator(mode="after")
    def validate_beds(self) -> "AssetPreferences":
        if self.min_beds > self.max_beds:
            raise ValueError("min_beds must not exceed max_beds")
        low, high = self.preferred_bed_range
        if low > high:
            raise ValueError("preferred_bed_range must be (low, high)")
        return self


class PartnerProfile(Model):
    """
    A capital partner: REIT, private equity buyer or regional operator.

    Example:
        ```python
        partner = get_partner_profile("sabra")
        partner.economics.target_cap_rate    # 0.0725
        partner.lease_terms.effective_escalation  # 0.025
        ```
    """

    partner_id: str
    name: str
    partner_type: PartnerTypeEnum
    risk_tolerance: RiskToleranceEnum = RiskToleranceEnum.MODERATE

    economics: PartnerEconomics
    lease_terms: PartnerLeaseTerms
    underwriting: PartnerUnderwriting
    asset_preferences: AssetPreferences = Field(default_factory=AssetPreferences)
