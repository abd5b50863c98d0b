# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Portfolio Lease Engine

Evaluates a multi-facility portfolio against a capital partner: facility
inclusion, portfolio economics, multi-phase lease projection, sensitivity
sweeps and a scored buy-vs-lease decision.
"""

from .api import analyze_master_lease
from .decision import (
    calculate_buy_vs_lease,
    decision_factors,
    generate_decision,
    negotiation_bands,
    score_decision,
)
from .facility import analyze_facility, determine_inclusions
from .projection import calculate_lease_projection, lease_phase, purchase_option_irr
from .results import (
    BuyVsLeaseComparison,
    CapRateSensitivityRow,
    DealDecision,
    DecisionFactor,
    EscalationSensitivityRow,
    FacilityAnalysis,
    LeaseProjection,
    LeaseScenario,
    MasterLeaseResult,
    NOISensitivityRow,
    OccupancySensitivityRow,
    PortfolioSummary,
    PurchaseScenario,
    SensitivityAnalysis,
    ValueBand,
    YearProjection,
)
from .sensitivity import calculate_sensitivity
from .settings import (
    DEFAULT_MASTER_LEASE_SETTINGS,
    DecisionSettings,
    FacilityRulePremiums,
    FinancingAssumptions,
    MasterLeaseOptions,
    MasterLeaseSettings,
    SensitivityGrids,
)
from .summary import calculate_portfolio_summary

__all__ = [
    # Entry point
    "analyze_master_lease",
    # Pipeline stages
    "analyze_facility",
    "determine_inclusions",
    "calculate_portfolio_summary",
    "calculate_lease_projection",
    "calculate_sensitivity",
    "generate_decision",
    "decision_factors",
    "score_decision",
    "negotiation_bands",
    "calculate_buy_vs_lease",
    "lease_phase",
    "purchase_option_irr",
    # Configuration
    "MasterLeaseOptions",
    "MasterLeaseSettings",
    "FacilityRulePremiums",
    "SensitivityGrids",
    "DecisionSettings",
    "FinancingAssumptions",
    "DEFAULT_MASTER_LEASE_SETTINGS",
    # Results
    "MasterLeaseResult",
    "FacilityAnalysis",
    "PortfolioSummary",
    "LeaseProjection",
    "YearProjection",
    "SensitivityAnalysis",
    "CapRateSensitivityRow",
    "NOISensitivityRow",
    "OccupancySensitivityRow",
    "EscalationSensitivityRow",
    "DealDecision",
    "DecisionFactor",
    "ValueBand",
    "BuyVsLeaseComparison",
    "PurchaseScenario",
    "LeaseScenario",
]
