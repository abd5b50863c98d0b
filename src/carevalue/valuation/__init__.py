# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Facility Valuation - Independent Methods and Reconciliation

Six independent valuation methods:
1. Direct capitalization (CapRateMethod) - NOI / Cap Rate
2. Price per bed (PricePerBedMethod) - Beds x Adjusted PPB
3. Sales comparison (ComparableSalesMethod) - Weighted comparable PPB
4. Discounted cash flow (DCFMethod) - PV(NOI) + PV(Terminal)
5. NOI multiple (NOIMultipleMethod) - NOI x Multiple
6. Replacement cost (ReplacementCostMethod) - Land + Depreciated Cost To Rebuild

``ValuationReconciler`` combines their results into one recommended value.
"""

from typing import Union

from .base import BaseValuationMethod, MethodOptions
from .cap_rate import CapRateMethod, CapRateOptions, cap_rate_sensitivity
from .dcf import DCFMethod, DCFOptions, DCFSensitivity, dcf_sensitivity
from .market import DEFAULT_MARKET, AssetMarketData, CapRateBand, MarketDefaults
from .noi_multiple import NOIMultipleMethod, NOIMultipleOptions
from .price_per_bed import PricePerBedMethod, PricePerBedOptions, PricePerBedTables
from .reconciler import (
    CapRateSensitivityAnalysis,
    MethodWeights,
    ReconcileOptions,
    SensitivityVariation,
    ValidationReport,
    ValuationReconciler,
    ValuationSummary,
    compare_valuations,
    validate_valuation_input,
)
from .replacement_cost import (
    ReplacementCostBreakdown,
    ReplacementCostMethod,
    ReplacementCostOptions,
    ReplacementCostSettings,
)
from .results import (
    SensitivityPoint,
    ValuationAssumption,
    ValuationCalculation,
    ValuationResult,
)
from .sales_comp import (
    ComparableSale,
    ComparableSalesMethod,
    ComparableSalesOptions,
    calculate_recency_weight,
    calculate_similarity_score,
    comparable_report,
)

# Polymorphic union type for all valuation methods
AnyValuationMethod = Union[
    CapRateMethod,
    PricePerBedMethod,
    ComparableSalesMethod,
    DCFMethod,
    NOIMultipleMethod,
    ReplacementCostMethod,
]

__all__ = [
    # Base class
    "BaseValuationMethod",
    "MethodOptions",
    # Methods and their options
    "CapRateMethod",
    "CapRateOptions",
    "PricePerBedMethod",
    "PricePerBedOptions",
    "PricePerBedTables",
    "ComparableSalesMethod",
    "ComparableSalesOptions",
    "ComparableSale",
    "DCFMethod",
    "DCFOptions",
    "NOIMultipleMethod",
    "NOIMultipleOptions",
    "ReplacementCostMethod",
    "ReplacementCostOptions",
    "ReplacementCostSettings",
    "ReplacementCostBreakdown",
    # Market defaults
    "AssetMarketData",
    "CapRateBand",
    "MarketDefaults",
    "DEFAULT_MARKET",
    # Results
    "SensitivityPoint",
    "ValuationAssumption",
    "ValuationCalculation",
    "ValuationResult",
    # Reconciliation
    "CapRateSensitivityAnalysis",
    "MethodWeights",
    "ReconcileOptions",
    "SensitivityVariation",
    "ValidationReport",
    "ValuationReconciler",
    "ValuationSummary",
    # Helpers
    "DCFSensitivity",
    "calculate_recency_weight",
    "calculate_similarity_score",
    "cap_rate_sensitivity",
    "comparable_report",
    "compare_valuations",
    "dcf_sensitivity",
    "validate_valuation_input",
    # Type unions
    "AnyValuationMethod",
]
