# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Master lease result records.

Plain immutable records: facility analyses, the portfolio summary, lease
projection, sensitivity tables and the deal decision. Tabular sections expose
``to_dataframe()`` helpers for reporting.
"""

from __future__ import annotations

from typing import List, Optional

import pandas as pd
from pydantic import Field

from ..core.primitives import (
    BuyVsLeaseEnum,
    ConfidenceLevelEnum,
    CoverageStatusEnum,
    DealRecommendationEnum,
    DecisionImpactEnum,
    FacilityRecommendationEnum,
    Model,
)
from ..facility import PortfolioFacility
from ..partners import DealEconomics, UnderwritingCheckResult
from ..risk import PortfolioRiskValuation, RiskAdjustedValuationOutput

###########################################################################
# FACILITY ANALYSIS
###########################################################################


class FacilityAnalysis(Model):
    """
    One facility evaluated against the partner.

    Attributes:
        economics: Deal economics at the partner (or custom) cap rate and yield
        underwriting: Underwriting check against partner thresholds
        risk_valuation: Risk engine output for the facility
        risk_premium_bps: Rule premiums plus any applied risk engine premium
        risk_adjusted_cap_rate: Partner cap rate plus ``risk_premium_bps``
        risk_adjusted_purchase_price: NOI at the risk-adjusted cap rate
        recommendation: include, exclude or negotiate
        notes: Human-readable reasons, in evaluation order
    """

    facility: PortfolioFacility
    economics: DealEconomics
    underwriting: UnderwritingCheckResult
    risk_valuation: RiskAdjustedValuationOutput
    risk_premium_bps: int
    risk_adjusted_cap_rate: float
    risk_adjusted_purchase_price: float
    recommendation: FacilityRecommendationEnum
    notes: List[str] = Field(default_factory=list)


###########################################################################
# PORTFOLIO SUMMARY
###########################################################################


class PortfolioSummary(Model):
    """
    Aggregate economics of the included facilities.

    Every total is the sum of facility values. Weighted ratios are ratios of
    totals: cap rate = NOI / price, yield = rent / price,
    coverage = EBITDAR / rent.
    """

    # === SCALE ===
    total_facilities: int
    included_facilities: int
    excluded_facilities: int
    total_beds: int

    # === FINANCIALS ===
    total_revenue: float
    total_ebitdar: float
    total_noi: float

    # === DEAL ===
    total_purchase_price: float
    total_annual_rent: float
    total_monthly_rent: float

    # === WEIGHTED ===
    weighted_cap_rate: float
    weighted_yield: float
    portfolio_coverage_ratio: float
    coverage_status: CoverageStatusEnum

    # === PER BED ===
    avg_price_per_bed: float
    avg_rent_per_bed: float
    avg_noi_per_bed: float
    avg_ebitdar_margin: float

    # === RISK-ADJUSTED ===
    risk_adjusted_cap_rate: float = Field(..., description="Total NOI over risk-adjusted price")
    risk_adjusted_purchase_price: float = Field(
        ..., description="Sum of facility risk-adjusted prices"
    )

    # === QUALITY ===
    avg_cms_rating: Optional[float] = Field(
        default=None, description="Mean overall rating of rated facilities"
    )
    avg_occupancy: float = Field(..., description="Bed-weighted occupancy")
    portfolio_health_score: float = Field(..., description="Mean underwriting score")


###########################################################################
# LEASE PROJECTION
###########################################################################


class YearProjection(Model):
    """One lease year."""

    year: int
    phase: str = Field(..., description="'initial' or 'renewal_<n>'")
    annual_rent: float
    cumulative_rent: float
    discount_factor: float
    present_value: float
    projected_ebitdar: float
    projected_coverage: float


class LeaseProjection(Model):
    """
    Year-by-year rent over the initial term and any renewals.

    ``total_lease_obligation`` is the final cumulative rent and ``lease_npv``
    the sum of present values.
    """

    initial_term_years: int
    renewal_options: int
    renewal_term_years: int
    total_potential_years: int
    escalation_rate: float

    yearly_projections: List[YearProjection] = Field(default_factory=list)

    lease_npv: float
    total_lease_obligation: float
    avg_annual_rent: float
    renewal_option_value: float
    purchase_option_year: Optional[int] = None
    purchase_option_irr: Optional[float] = None

    def rent_in_year(self, year: int) -> float:
        """Projected rent for ``year``, 0.0 beyond the projection."""
        for projection in self.yearly_projections:
            if projection.year == year:
                return projection.annual_rent
        return 0.0

    def to_dataframe(self) -> pd.DataFrame:
        """Yearly projections indexed by lease year."""
        columns = list(YearProjection.model_fields)
        df = pd.DataFrame(
            [p.model_dump() for p in self.yearly_projections], columns=columns
        )
        return df.set_index("year")


###########################################################################
# SENSITIVITY
###########################################################################


class CapRateSensitivityRow(Model):
    cap_rate: float
    purchase_price: float
    annual_rent: float
    coverage: float


class NOISensitivityRow(Model):
    noi_change: float
    purchase_price: float
    coverage: float


class OccupancySensitivityRow(Model):
    occupancy: float
    projected_noi: float
    coverage: float


class EscalationSensitivityRow(Model):
    escalation: float
    year_5_rent: float
    year_10_rent: float
    total_lease_obligation: float


class SensitivityAnalysis(Model):
    """
    Independent one-parameter sweeps plus break-even measures.

    Attributes:
        break_even_occupancy: Occupancy at which coverage falls to the partner minimum
        break_even_noi_decline: Share of EBITDAR that can be lost before that point
        cushion_to_breakeven: Coverage headroom over the partner minimum
    """

    cap_rate_sensitivity: List[CapRateSensitivityRow] = Field(default_factory=list)
    noi_sensitivity: List[NOISensitivityRow] = Field(default_factory=list)
    occupancy_sensitivity: List[OccupancySensitivityRow] = Field(default_factory=list)
    escalation_sensitivity: List[EscalationSensitivityRow] = Field(default_factory=list)

    break_even_occupancy: float
    break_even_noi_decline: float
    cushion_to_breakeven: float

    def to_dataframes(self) -> dict:
        """One DataFrame per sweep, keyed by sweep name."""
        return {
            name: pd.DataFrame([row.model_dump() for row in getattr(self, name)])
            for name in (
                "cap_rate_sensitivity",
                "noi_sensitivity",
                "occupancy_sensitivity",
                "escalation_sensitivity",
            )
        }


###########################################################################
# DECISION
###########################################################################


class DecisionFactor(Model):
    factor: str
    impact: DecisionImpactEnum
    weight: int = Field(..., ge=1, le=10)
    description: str


class ValueBand(Model):
    """Low / mid / high negotiation band."""

    low: float
    mid: float
    high: float


class PurchaseScenario(Model):
    total_cost: float
    equity_required: float
    debt_service: float
    net_cash_flow: float
    year_one_return: float
    five_year_irr: float


class LeaseScenario(Model):
    year_one_rent: float
    five_year_rent: float
    ten_year_rent: float
    effective_cost: float = Field(..., description="Lease NPV")


class BuyVsLeaseComparison(Model):
    purchase: PurchaseScenario
    lease: LeaseScenario
    recommendation: BuyVsLeaseEnum
    rationale: str


class DealDecision(Model):
    """
    Scored deal recommendation with negotiation guidance.

    The rent band runs from rent at the partner target coverage (low) to
    rent at minimum coverage (high); the price band capitalizes those rents
    at the partner target yield.
    """

    recommendation: DealRecommendationEnum
    confidence: ConfidenceLevelEnum

    positive_factors: List[DecisionFactor] = Field(default_factory=list)
    negative_factors: List[DecisionFactor] = Field(default_factory=list)
    risk_mitigations: List[str] = Field(default_factory=list)

    suggested_purchase_price: ValueBand
    suggested_rent: ValueBand

    buy_vs_lease: BuyVsLeaseComparison

    @property
    def positive_score(self) -> int:
        return sum(f.weight for f in self.positive_factors)

    @property
    def negative_score(self) -> int:
        return sum(f.weight for f in self.negative_factors)

    @property
    def net_score(self) -> int:
        return self.positive_score - self.negative_score


###########################################################################
# RESULT
###########################################################################


class MasterLeaseResult(Model):
    """Complete master lease analysis."""

    summary: PortfolioSummary
    facility_analysis: List[FacilityAnalysis]
    lease_projection: LeaseProjection
    sensitivity: SensitivityAnalysis
    decision: DealDecision
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    excluded_facility_ids: List[str] = Field(default_factory=list)
    portfolio_risk: Optional[PortfolioRiskValuation] = None

    @property
    def included(self) -> List[FacilityAnalysis]:
        excluded_ids = set(self.excluded_facility_ids)
        return [a for a in self.facility_analysis if a.facility.facility_id not in excluded_ids]

    def facilities_dataframe(self) -> pd.DataFrame:
        """Per-facility economics and recommendation."""
        excluded_ids = set(self.excluded_facility_ids)
        return pd.DataFrame(
            [
                {
                    "Facility": a.facility.name,
                    "State": a.facility.state,
                    "Beds": a.facility.beds,
                    "NOI": a.facility.ttm_noi,
                    "Purchase Price": a.economics.purchase_price,
                    "Annual Rent": a.economics.annual_rent,
                    "Coverage": a.economics.coverage_ratio,
                    "Risk-Adjusted Cap Rate": a.risk_adjusted_cap_rate,
                    "Underwriting Score": a.underwriting.score,
                    "Recommendation": a.recommendation.value,
                    "Included": a.facility.facility_id not in excluded_ids,
                }
                for a in self.facility_analysis
            ]
        )
