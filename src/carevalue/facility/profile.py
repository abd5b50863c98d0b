# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Facility Snapshots

Normalized facility inputs supplied by the extraction pipeline. A profile is
built once per valuation run and never mutated; every engine reads from it.

All rates (occupancy, payer mix, agency labor, margins) are fractions, not
percentages. Monetary amounts are absolute currency units.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field, field_validator

from ..core.primitives import (
    AssetTypeEnum,
    FloatBetween0And1,
    LocationTypeEnum,
    Model,
    PositiveFloat,
    StarRating,
)


class FacilityFinancialProfile(Model):
    """
    Immutable financial, operational, quality and compliance snapshot.

    Only identity, bed count and state are required. Every other field is
    optional; methods that need a missing value raise ``InputError`` and the
    risk engine lowers its data-quality score instead.

    Example:
        ```python
        profile = FacilityFinancialProfile(
            facility_id="fac-001",
            name="Maple Grove Care Center",
            beds=120,
            state="OH",
            year_built=1992,
            ttm_revenue=14_500_000,
            ttm_ebitdar=2_600_000,
            ttm_noi=2_000_000,
            occupancy_rate=0.86,
            cms_rating=4,
            as_of_date=date(2025, 1, 1),
        )
        ```
    """

    # === IDENTITY ===
    facility_id: str = Field(..., description="Stable facility identifier")
    name: str = Field(..., description="Facility display name")
    asset_type: AssetTypeEnum = Field(default=AssetTypeEnum.SNF)
    beds: int = Field(..., description="Operational bed count")
    state: str = Field(..., description="Two-letter state code")
    year_built: Optional[int] = Field(default=None)
    location_type: LocationTypeEnum = Field(default=LocationTypeEnum.SUBURBAN)
    year_renovated: Optional[int] = Field(default=None, description="Year of last major renovation")
    region: Optional[str] = Field(default=None, description="Construction cost region, e.g. 'midwest'")
    square_footage: Optional[PositiveFloat] = Field(default=None, description="Gross building area")
    acres: Optional[PositiveFloat] = Field(default=None, description="Site area")

    # === TRAILING FINANCIALS ===
    ttm_revenue: Optional[float] = Field(default=None, description="Trailing 12-month revenue")
    ttm_ebitdar: Optional[float] = Field(default=None, description="Trailing 12-month EBITDAR")
    ttm_noi: Optional[float] = Field(default=None, description="Trailing 12-month NOI")
    ttm_expenses: Optional[PositiveFloat] = Field(
        default=None, description="Trailing 12-month operating expenses"
    )

    # === OPERATIONS ===
    occupancy_rate: Optional[FloatBetween0And1] = Field(default=None)
    medicare_percent: Optional[FloatBetween0And1] = Field(default=None)
    medicaid_percent: Optional[FloatBetween0And1] = Field(default=None)
    private_pay_percent: Optional[FloatBetween0And1] = Field(default=None)
    managed_care_percent: Optional[FloatBetween0And1] = Field(default=None)

    # === STAFFING ===
    total_hppd: Optional[PositiveFloat] = Field(
        default=None, description="Total nursing hours per patient day"
    )
    rn_hppd: Optional[PositiveFloat] = Field(default=None)
    agency_labor_percent: Optional[FloatBetween0And1] = Field(
        default=None, description="Agency labor as a share of nursing labor"
    )

    # === COMPLIANCE ===
    survey_deficiencies: Optional[int] = Field(default=None, ge=0)
    is_sff: bool = Field(default=False, description="Special Focus Facility designation")
    has_immediate_jeopardy: bool = Field(default=False)

    # === QUALITY (CMS star ratings) ===
    cms_rating: Optional[StarRating] = Field(default=None, description="Overall star rating")
    health_rating: Optional[StarRating] = Field(default=None)
    staffing_rating: Optional[StarRating] = Field(default=None)
    quality_rating: Optional[StarRating] = Field(default=None)

    # === CAPITAL ===
    immediate_capex_needs: Optional[PositiveFloat] = Field(default=None)
    total_capex_needs: Optional[PositiveFloat] = Field(default=None)

    # === MARKET INPUTS ===
    market_cap_rate: Optional[float] = Field(default=None, gt=0, lt=1)
    market_price_per_bed: Optional[float] = Field(default=None, gt=0)
    noi_multiple: Optional[float] = Field(default=None, gt=0)

    # === TIMING ===
    as_of_date: date = Field(
        default_factory=date.today,
        description="Snapshot date; building age and sale recency are measured from here",
    )

    @field_validator("state")
    @classmethod
    def normalize_state(cls, value: str) -> str:
        return value.strip().upper()

    # === DERIVED PROPERTIES ===

    @property
    def building_age(self) -> Optional[int]:
        """Building age in whole years at ``as_of_date``."""
        if self.year_built is None:
            return None
        return self.as_of_date.year - self.year_built

    @property
    def ebitdar_margin(self) -> Optional[float]:
        """EBITDAR as a share of revenue."""
        if self.ttm_ebitdar is None or not self.ttm_revenue:
            return None
        return self.ttm_ebitdar / self.ttm_revenue

    @property
    def capex_per_bed(self) -> Optional[float]:
        """Immediate capital needs per bed."""
        if not self.immediate_capex_needs or self.beds <= 0:
            return None
        return self.immediate_capex_needs / self.beds


class PortfolioFacility(FacilityFinancialProfile):
    """
    One facility's inputs for master lease analysis.

    Portfolio analysis always needs trailing financials and occupancy, so
    those default to zero (financials) or are required (occupancy). Existing
    lease and debt obligations are carried through for reporting.
    """

    ttm_revenue: float = Field(default=0.0)
    ttm_ebitdar: float = Field(default=0.0)
    ttm_noi: float = Field(default=0.0)
    occupancy_rate: FloatBetween0And1 = Field(...)

    existing_annual_rent: Optional[PositiveFloat] = Field(default=None)
    existing_debt_balance: Optional[PositiveFloat] = Field(default=None)
