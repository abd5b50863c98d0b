# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Risk Adjustment Engine

Additive basis-point risk premiums on an asset-type baseline cap rate, for
single facilities and portfolios.
"""

from .engine import (
    build_risk_profile,
    calculate_risk_adjusted_valuation,
    capital_adjustments,
    compliance_adjustments,
    market_adjustments,
    operations_adjustments,
    quality_adjustments,
)
from .portfolio import (
    calculate_portfolio_risk_valuation,
    diversification_benefit_bps,
    portfolio_risk_tier,
)
from .results import (
    CapRateAdjustment,
    FacilityRiskValuation,
    PortfolioRiskProfile,
    PortfolioRiskValuation,
    RatingShare,
    RiskAdjustedValuationInput,
    RiskAdjustedValuationOutput,
    RiskProfile,
)
from .tables import DEFAULT_RISK_TABLES, RiskAdjustmentTables

__all__ = [
    # Engine
    "calculate_risk_adjusted_valuation",
    "calculate_portfolio_risk_valuation",
    # Rule groups
    "quality_adjustments",
    "operations_adjustments",
    "compliance_adjustments",
    "capital_adjustments",
    "market_adjustments",
    "build_risk_profile",
    "diversification_benefit_bps",
    "portfolio_risk_tier",
    # Configuration
    "RiskAdjustmentTables",
    "DEFAULT_RISK_TABLES",
    # Records
    "CapRateAdjustment",
    "FacilityRiskValuation",
    "PortfolioRiskProfile",
    "PortfolioRiskValuation",
    "RatingShare",
    "RiskAdjustedValuationInput",
    "RiskAdjustedValuationOutput",
    "RiskProfile",
]
