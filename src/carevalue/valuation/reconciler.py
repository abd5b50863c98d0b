# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Valuation Reconciler

Runs the applicable valuation methods for one facility and combines their
point estimates into a single recommended value. Individual method failures
are recorded as skips; the run only fails when no method produced a result.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
from pydantic import Field

from ..core.calculations import FinancialCalculations
from ..core.primitives import (
    AssetTypeEnum,
    Model,
    NoApplicableMethodError,
    ValuationMethodEnum,
)
from ..facility import FacilityFinancialProfile
from .base import BaseValuationMethod, MethodOptions
from .cap_rate import CapRateMethod, CapRateOptions, cap_rate_sensitivity
from .dcf import DCFMethod, DCFOptions
from .noi_multiple import NOIMultipleMethod, NOIMultipleOptions
from .price_per_bed import PricePerBedMethod, PricePerBedOptions
from .replacement_cost import ReplacementCostMethod, ReplacementCostOptions
from .results import ValuationResult, format_percent
from .sales_comp import ComparableSale, ComparableSalesMethod, ComparableSalesOptions

logger = logging.getLogger(__name__)

round_half_up = FinancialCalculations.round_half_up

DEFAULT_METHODS: Tuple[ValuationMethodEnum, ...] = (
    ValuationMethodEnum.CAP_RATE,
    ValuationMethodEnum.PRICE_PER_BED,
    ValuationMethodEnum.DCF,
)


class MethodWeights(Model):
    """
    Base reconciliation weight per method, before confidence scaling.

    Attributes:
        unknown: Weight for a method with no configured weight
    """

    cap_rate: float = Field(default=0.35, ge=0)
    price_per_bed: float = Field(default=0.20, ge=0)
    comparable_sales: float = Field(default=0.25, ge=0)
    dcf: float = Field(default=0.15, ge=0)
    noi_multiple: float = Field(default=0.05, ge=0)
    replacement_cost: float = Field(default=0.10, ge=0)
    unknown: float = Field(default=0.10, ge=0)

    def weight_for(self, method: ValuationMethodEnum) -> float:
        weight = getattr(self, method.value, None)
        # Zero counts as unconfigured
        return weight if weight else self.unknown


class ReconcileOptions(Model):
    """
    Per-run reconciliation options.

    Attributes:
        methods: Explicit subset of methods to run; overrides the default set
        include_all_methods: Run every method, skipping inapplicable ones
        comparables: Comparable sales; enables the comparable sales method
        cap_rate: Cap rate method options
        price_per_bed: Price per bed method options
        comparable_sales: Comparable sales options; ``comparables`` is used
            when these are omitted
        dcf: DCF method options
        noi_multiple: NOI multiple method options
        replacement_cost: Replacement cost method options
        sensitivity_spread: Half-width of the cap rate sweep
        sensitivity_step: Step of the cap rate sweep
    """

    methods: Optional[List[ValuationMethodEnum]] = Field(default=None)
    include_all_methods: bool = False
    comparables: List[ComparableSale] = Field(default_factory=list)

    cap_rate: Optional[CapRateOptions] = Field(default=None)
    price_per_bed: Optional[PricePerBedOptions] = Field(default=None)
    comparable_sales: Optional[ComparableSalesOptions] = Field(default=None)
    dcf: Optional[DCFOptions] = Field(default=None)
    noi_multiple: Optional[NOIMultipleOptions] = Field(default=None)
    replacement_cost: Optional[ReplacementCostOptions] = Field(default=None)

    sensitivity_spread: float = Field(default=0.02, gt=0)
    sensitivity_step: float = Field(default=0.005, gt=0)

    def options_for(self, method: ValuationMethodEnum) -> Optional[MethodOptions]:
        """Options object for ``method``, or None for method defaults."""
        if method == ValuationMethodEnum.COMPARABLE_SALES:
            if self.comparable_sales is not None:
                return self.comparable_sales
            if self.comparables:
                return ComparableSalesOptions(comparables=self.comparables)
            return None
        return getattr(self, method.value, None)


class SensitivityVariation(Model):
    """One row of the reconciler's cap rate sweep."""

    label: str
    cap_rate: float
    value: float
    percent_change: float


class CapRateSensitivityAnalysis(Model):
    """Cap rate sweep around the cap rate method's resolved rate."""

    base_cap_rate: float
    base_value: float
    variations: List[SensitivityVariation] = Field(default_factory=list)


class ValuationSummary(Model):
    """
    Reconciled valuation of one facility.

    Attributes:
        methods: Results of every method that ran, in run order
        recommended_value: Weighted average rounded to the nearest 100,000
        value_low: Lowest low across methods
        value_high: Highest high across methods
        weighted_average: Confidence-weighted average of method values
        confidence: Confidence-weighted average of method confidences
        skipped_methods: Method → reason it did not contribute
        sensitivity: Cap rate sweep when the cap rate method ran
    """

    methods: List[ValuationResult]
    recommended_value: float
    value_low: float
    value_high: float
    weighted_average: float
    confidence: float = Field(..., ge=0, le=100)
    skipped_methods: Dict[str, str] = Field(default_factory=dict)
    sensitivity: Optional[CapRateSensitivityAnalysis] = Field(default=None)

    def result_for(self, method: ValuationMethodEnum) -> Optional[ValuationResult]:
        """The result produced by ``method``, if it ran."""
        return next((r for r in self.methods if r.method == method), None)

    def to_dataframe(self) -> pd.DataFrame:
        """Side-by-side method comparison."""
        return compare_valuations(self.methods)


class ValidationReport(Model):
    """Pre-flight check of a profile's suitability for valuation."""

    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


def _default_methods() -> List[BaseValuationMethod]:
    return [
        CapRateMethod(),
        PricePerBedMethod(),
        ComparableSalesMethod(),
        DCFMethod(),
        NOIMultipleMethod(),
        ReplacementCostMethod(),
    ]


class ValuationReconciler(Model):
    """
    Confidence-weighted reconciliation of independent valuation methods.

    By default the cap rate, price per bed and DCF methods run; comparable
    sales, NOI multiple and replacement cost join when their prerequisite
    data is supplied.

    Example:
        ```python
        summary = ValuationReconciler().reconcile(profile)
        summary.recommended_value  # e.g. 19_800_000
        ```
    """

    methods: List[BaseValuationMethod] = Field(default_factory=_default_methods)
    weights: MethodWeights = Field(default_factory=MethodWeights)
    default_methods: Tuple[ValuationMethodEnum, ...] = DEFAULT_METHODS

    def _select(
        self, profile: FacilityFinancialProfile, options: ReconcileOptions
    ) -> Tuple[List[BaseValuationMethod], Dict[str, str]]:
        """Pick the methods to run and record the ones left out."""
        skipped: Dict[str, str] = {}
        selected: List[BaseValuationMethod] = []

        if options.methods is not None:
            requested = list(options.methods)
            available = {m.kind for m in self.methods}
            for kind in requested:
                if kind not in available:
                    skipped[kind.value] = "method not configured"
            candidates = [m for m in self.methods if m.kind in requested]
            explicit = True
        else:
            candidates = list(self.methods)
            explicit = options.include_all_methods

        for method in candidates:
            method_options = options.options_for(method.kind)
            if explicit or method.kind in self.default_methods:
                if method.is_applicable(profile, method_options):
                    selected.append(method)
                else:
                    skipped[method.kind.value] = "prerequisite data not supplied"
            elif method.is_applicable(profile, method_options):
                selected.append(method)

        return selected, skipped

    def reconcile(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[ReconcileOptions] = None,
    ) -> ValuationSummary:
        """
        Run the applicable methods and reconcile their results.

        Raises:
            NoApplicableMethodError: If no method produced a result
        """
        options = options or ReconcileOptions()
        selected, skipped = self._select(profile, options)

        results: List[ValuationResult] = []
        for method in selected:
            try:
                results.append(method.evaluate(profile, options.options_for(method.kind)))
            except Exception as exc:
                # a failing method is skipped; the run fails only when none succeed
                skipped[method.kind.value] = f"{type(exc).__name__}: {exc}"

        for method_name, reason in skipped.items():
            logger.warning(
                f"Valuation method {method_name} skipped for {profile.facility_id}: {reason}"
            )

        if not results:
            raise NoApplicableMethodError(skipped)

        weighted_sum = 0.0
        total_weight = 0.0
        confidence_sum = 0.0
        for result in results:
            weight = self.weights.weight_for(result.method) * (result.confidence / 100)
            weighted_sum += result.value * weight
            total_weight += weight
            confidence_sum += result.confidence * weight

        if total_weight > 0:
            weighted_average = weighted_sum / total_weight
            confidence = confidence_sum / total_weight
        else:
            weighted_average = results[0].value
            confidence = results[0].confidence

        value_low = min(r.value_low for r in results)
        value_high = max(r.value_high for r in results)
        recommended_value = round_half_up(weighted_average, 100_000)

        sensitivity = self._sensitivity(results, options)

        logger.info(
            f"Reconciled {len(results)} valuation methods for {profile.facility_id}: "
            f"recommended {recommended_value:,.0f} ({confidence:.0f} confidence)"
        )

        return ValuationSummary(
            methods=results,
            recommended_value=recommended_value,
            value_low=round_half_up(value_low),
            value_high=round_half_up(value_high),
            weighted_average=round_half_up(weighted_average),
            confidence=round_half_up(FinancialCalculations.clamp(confidence, 0, 100)),
            skipped_methods=skipped,
            sensitivity=sensitivity,
        )

    @staticmethod
    def _sensitivity(
        results: Sequence[ValuationResult], options: ReconcileOptions
    ) -> Optional[CapRateSensitivityAnalysis]:
        cap_result = next((r for r in results if r.method == ValuationMethodEnum.CAP_RATE), None)
        if cap_result is None:
            return None
        noi = cap_result.inputs_used.get("noi")
        base_rate = cap_result.inputs_used.get("cap_rate")
        if not noi or not base_rate:
            return None

        points = cap_rate_sensitivity(
            noi, base_rate, spread=options.sensitivity_spread, step=options.sensitivity_step
        )
        return CapRateSensitivityAnalysis(
            base_cap_rate=base_rate,
            base_value=cap_result.value,
            variations=[
                SensitivityVariation(
                    label=format_percent(point.rate),
                    cap_rate=point.rate,
                    value=point.value,
                    percent_change=(point.value - cap_result.value) / cap_result.value * 100,
                )
                for point in points
            ],
        )


def compare_valuations(results: Sequence[ValuationResult]) -> pd.DataFrame:
    """
    Side-by-side comparison of method results.

    Returns:
        DataFrame with one row per method: value, range, price per bed,
        implied cap rate and confidence
    """
    return pd.DataFrame(
        [
            {
                "Method": r.method.value,
                "Value": r.value,
                "Value Low": r.value_low,
                "Value High": r.value_high,
                "Price/Bed": r.price_per_bed,
                "Implied Cap Rate": r.implied_cap_rate,
                "Confidence": r.confidence,
            }
            for r in results
        ],
        columns=[
            "Method",
            "Value",
            "Value Low",
            "Value High",
            "Price/Bed",
            "Implied Cap Rate",
            "Confidence",
        ],
    )


def validate_valuation_input(profile: FacilityFinancialProfile) -> ValidationReport:
    """
    Check a profile for valuation readiness without raising.

    Errors block every method; warnings flag inputs that improve accuracy.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if profile.beds <= 0:
        errors.append("Bed count is required and must be positive")
    if not profile.state:
        errors.append("State is required")

    if not profile.ttm_noi and not profile.ttm_ebitdar:
        warnings.append("NOI or EBITDAR is recommended for income-based valuations")
    if profile.cms_rating is None and profile.asset_type == AssetTypeEnum.SNF:
        warnings.append("CMS rating improves valuation accuracy for SNF")
    if profile.occupancy_rate is None:
        warnings.append("Current occupancy improves valuation accuracy")
    if profile.year_built is None:
        warnings.append("Year built helps adjust price per bed valuations")

    return ValidationReport(valid=not errors, errors=errors, warnings=warnings)
