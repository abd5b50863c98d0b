# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Master lease options and engine settings.

``MasterLeaseOptions`` are per-deal choices (structure, overrides, projection
assumptions). ``MasterLeaseSettings`` holds the engine's rule constants:
facility cap rate premiums, sensitivity grids, decision weights and bands,
and the purchase financing scenario.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field, model_validator

from ..core.primitives import CapRate, FloatBetween0And1, Model, PositiveInt


class MasterLeaseOptions(Model):
    """
    Per-deal options.

    Attributes:
        all_or_nothing: Partner takes the whole portfolio or nothing
        allow_partial_exclusions: Permit carving out facilities recommended for exclusion
        max_excluded_facilities: Most facilities that may be carved out
        custom_cap_rate: Replaces the partner target cap rate
        custom_yield: Replaces the partner target yield
        custom_escalation: Replaces the partner lease escalation
        discount_rate: Rate for lease NPVs
        projection_years: Horizon for escalation sensitivity obligations
        include_renewals: Project renewal terms after the initial term
        noi_growth_rate: Annual EBITDAR growth in the lease projection
        apply_risk_engine_premium: Add each facility's risk engine premium to its cap rate
    """

    # === DEAL STRUCTURE ===
    all_or_nothing: bool = True
    allow_partial_exclusions: bool = False
    max_excluded_facilities: PositiveInt = 0

    # === ECONOMIC OVERRIDES ===
    custom_cap_rate: Optional[CapRate] = None
    custom_yield: Optional[CapRate] = None
    custom_escalation: Optional[float] = Field(default=None, ge=0, lt=1)

    # === ANALYSIS ===
    discount_rate: CapRate = 0.08
    projection_years: int = Field(default=20, gt=0, le=100)
    include_renewals: bool = True
    noi_growth_rate: float = Field(default=0.02, gt=-1, lt=1)
    apply_risk_engine_premium: bool = False


class FacilityRulePremiums(Model):
    """Discrete cap rate premiums applied to individual facilities."""

    low_rating_threshold: int = Field(default=3, ge=1, le=5)
    low_rating_bps: int = 75
    low_occupancy_threshold: FloatBetween0And1 = 0.80
    low_occupancy_bps: int = 50
    immediate_jeopardy_bps: int = 150


class SensitivityGrids(Model):
    """Parameter values swept by the sensitivity analysis."""

    cap_rates: List[CapRate] = Field(
        default_factory=lambda: [0.065, 0.07, 0.075, 0.08, 0.085, 0.09, 0.095, 0.10]
    )
    noi_changes: List[float] = Field(
        default_factory=lambda: [-0.20, -0.15, -0.10, -0.05, 0.0, 0.05, 0.10, 0.15, 0.20]
    )
    occupancies: List[FloatBetween0And1] = Field(
        default_factory=lambda: [0.70, 0.75, 0.80, 0.85, 0.90, 0.95]
    )
    escalations: List[float] = Field(
        default_factory=lambda: [0.015, 0.02, 0.025, 0.03, 0.035]
    )


class DecisionSettings(Model):
    """
    Decision factor weights (1-10), thresholds and net-score bands.

    Net score = sum of positive weights - sum of negative weights.
    """

    # === POSITIVE FACTORS ===
    strong_coverage_weight: int = Field(default=9, ge=1, le=10)
    quality_portfolio_weight: int = Field(default=7, ge=1, le=10)
    quality_portfolio_rating: float = 3.5
    strong_occupancy_weight: int = Field(default=6, ge=1, le=10)
    strong_occupancy_threshold: float = 0.85
    portfolio_scale_weight: int = Field(default=5, ge=1, le=10)

    # === NEGATIVE FACTORS ===
    insufficient_coverage_weight: int = Field(default=10, ge=1, le=10)
    quality_concerns_weight: int = Field(default=8, ge=1, le=10)
    quality_concerns_rating: float = 3.0
    substandard_facilities_weight: int = Field(default=7, ge=1, le=10)
    thin_cushion_weight: int = Field(default=8, ge=1, le=10)
    thin_cushion_threshold: float = 0.10

    # === BANDS ===
    proceed_high_score: int = 15
    proceed_medium_score: int = 5
    negotiate_medium_score: int = -5
    negotiate_low_score: int = -15
    pass_high_confidence_negative: int = 25

    @model_validator(mode="after")
    def validate_bands(self) -> "DecisionSettings":
        """Bands must descend from proceed to negotiate."""
        if not (
            self.proceed_high_score
            >= self.proceed_medium_score
            >= self.negotiate_medium_score
            >= self.negotiate_low_score
        ):
            raise ValueError("Decision bands must be in descending order")
        return self


class FinancingAssumptions(Model):
    """Purchase scenario used by the buy-vs-lease comparison."""

    loan_to_value: FloatBetween0And1 = 0.70
    interest_rate: float = Field(default=0.065, ge=0, lt=1)
    amortization_rate: float = Field(default=0.02, ge=0, lt=1)
    exit_cap_spread: float = Field(default=0.005, ge=0, lt=1)
    hold_years: int = Field(default=5, gt=0)
    hold_noi_growth: float = 0.02
    purchase_min_year_one_return: float = 0.12
    purchase_min_irr: float = 0.15

    @property
    def debt_constant(self) -> float:
        """Annual debt service as a share of the loan: interest plus amortization."""
        return self.interest_rate + self.amortization_rate


class MasterLeaseSettings(Model):
    """Engine constants for master lease analysis. Override with ``model_copy(update=...)``."""

    premiums: FacilityRulePremiums = Field(default_factory=FacilityRulePremiums)
    grids: SensitivityGrids = Field(default_factory=SensitivityGrids)
    decision: DecisionSettings = Field(default_factory=DecisionSettings)
    financing: FinancingAssumptions = Field(default_factory=FinancingAssumptions)


DEFAULT_MASTER_LEASE_SETTINGS = MasterLeaseSettings()
