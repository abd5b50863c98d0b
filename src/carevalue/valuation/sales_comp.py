# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Comparable Sales Valuation - Weighted Average Price Per Bed

Values the subject from recent transactions of similar facilities. Each
comparable is scored for similarity to the subject and weighted by recency;
the top-weighted comparables drive a weighted-average price per bed.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import ClassVar, List, Optional, Type

import numpy as np
import pandas as pd
from pydantic import Field, model_validator
from scipy import stats as scipy_stats

from ..core.calculations import FinancialCalculations
from ..core.primitives import (
    AssetTypeEnum,
    AssumptionSourceEnum,
    FloatBetween0And1,
    InputError,
    Model,
    PositiveFloat,
    ValuationMethodEnum,
)
from ..facility import FacilityFinancialProfile
from .base import BaseValuationMethod, MethodOptions, require_beds
from .results import (
    ValuationAssumption,
    ValuationCalculation,
    ValuationResult,
    format_currency,
    format_percent,
)

logger = logging.getLogger(__name__)

round_half_up = FinancialCalculations.round_half_up


class ComparableSale(Model):
    """
    One comparable facility transaction.

    Example:
        ```python
        comp = ComparableSale(
            property_name="Willow Creek",
            city="Columbus",
            state="OH",
            asset_type=AssetTypeEnum.SNF,
            beds=110,
            sale_price=9_900_000,
            sale_date=date(2024, 6, 30),
            cap_rate=0.115,
        )
        comp.price_per_bed  # 90_000
        ```
    """

    property_name: str = Field(..., description="Property name or identifier")
    city: str = Field(default="")
    state: str = Field(..., description="Two-letter state code")
    asset_type: AssetTypeEnum = Field(default=AssetTypeEnum.SNF)
    beds: int = Field(..., gt=0)
    sale_price: PositiveFloat = Field(..., description="Sale price")
    sale_date: date = Field(..., description="Closing date")
    cap_rate: Optional[PositiveFloat] = Field(default=None, description="Cap rate at sale")
    occupancy_at_sale: Optional[FloatBetween0And1] = Field(default=None)

    @property
    def price_per_bed(self) -> float:
        """Sale price per bed."""
        return self.sale_price / self.beds


class ScoredComparable(Model):
    """A comparable together with its similarity score and combined weight."""

    sale: ComparableSale
    age_days: int
    similarity: float
    recency: float
    weight: float


class ComparableSalesOptions(MethodOptions):
    """
    Options for the comparable sales method.

    Attributes:
        comparables: Candidate transactions
        weight_by_recency: Decay weights linearly from 1.0 to 0.5 over ``max_age_days``
        weight_by_similarity: Scale weights by similarity score / 100
        max_age_days: Sales older than this are discarded
        min_comparables: Fewer surviving comparables is an input error
        max_comparables: Upper bound on comparables used
        as_of_date: Date sale age is measured from; defaults to the profile's
    """

    comparables: List[ComparableSale] = Field(default_factory=list)
    weight_by_recency: bool = True
    weight_by_similarity: bool = True
    max_age_days: int = Field(default=730, gt=0)
    min_comparables: int = Field(default=3, ge=1)
    max_comparables: int = Field(default=10, ge=1)
    as_of_date: Optional[date] = Field(default=None)

    @model_validator(mode="after")
    def validate_comparable_counts(self) -> "ComparableSalesOptions":
        if self.max_comparables < self.min_comparables:
            raise ValueError(
                f"max_comparables ({self.max_comparables}) must not be below "
                f"min_comparables ({self.min_comparables})"
            )
        return self


def sale_age_days(sale: ComparableSale, as_of: date) -> int:
    """Days between the sale and ``as_of``."""
    return (as_of - sale.sale_date).days


def calculate_similarity_score(
    subject: FacilityFinancialProfile, comp: ComparableSale, as_of: date
) -> float:
    """
    Score a comparable's similarity to the subject on a 0-100 scale.

    Fixed deductions off 100 for asset type and state mismatch, bed count
    divergence, sale age and occupancy divergence. Floored at zero.
    """
    deduction = 0

    if comp.asset_type != subject.asset_type:
        deduction += 30
    if comp.state.upper() != subject.state:
        deduction += 15

    if subject.beds > 0:
        bed_diff = abs(comp.beds - subject.beds) / subject.beds
        if bed_diff > 0.5:
            deduction += 20
        elif bed_diff > 0.25:
            deduction += 10
        elif bed_diff > 0.1:
            deduction += 5

    age_days = sale_age_days(comp, as_of)
    if age_days > 730:
        deduction += 15
    elif age_days > 365:
        deduction += 8
    elif age_days > 180:
        deduction += 4

    if subject.occupancy_rate is not None and comp.occupancy_at_sale is not None:
        occupancy_diff = abs(comp.occupancy_at_sale - subject.occupancy_rate)
        if occupancy_diff > 0.15:
            deduction += 10
        elif occupancy_diff > 0.08:
            deduction += 5

    return float(max(0, 100 - deduction))


def calculate_recency_weight(age_days: int, max_age_days: int) -> float:
    """Linear decay from 1.0 (sold today) to 0.5 (sold ``max_age_days`` ago)."""
    if age_days > max_age_days:
        return 0.0
    return 0.5 + 0.5 * (1 - age_days / max_age_days)


def score_comparables(
    subject: FacilityFinancialProfile, options: ComparableSalesOptions
) -> List[ScoredComparable]:
    """
    Filter, score and rank comparables.

    Sales dated after the as-of date or older than ``max_age_days`` are
    discarded. Survivors are sorted by combined weight (stable, descending).
    """
    as_of = options.as_of_date or subject.as_of_date
    scored: List[ScoredComparable] = []
    for comp in options.comparables:
        age_days = sale_age_days(comp, as_of)
        if age_days < 0 or age_days > options.max_age_days:
            continue
        similarity = calculate_similarity_score(subject, comp, as_of)
        recency = (
            calculate_recency_weight(age_days, options.max_age_days)
            if options.weight_by_recency
            else 1.0
        )
        weight = 1.0
        if options.weight_by_similarity:
            weight *= similarity / 100
        if options.weight_by_recency:
            weight *= recency
        scored.append(
            ScoredComparable(
                sale=comp, age_days=age_days, similarity=similarity, recency=recency, weight=weight
            )
        )

    return sorted(scored, key=lambda s: s.weight, reverse=True)


def comparable_report(
    subject: FacilityFinancialProfile, options: ComparableSalesOptions
) -> pd.DataFrame:
    """
    Scored comparable analysis as a DataFrame.

    Returns:
        One row per surviving comparable, ranked by weight
    """
    rows = [
        {
            "Rank": rank,
            "Property": s.sale.property_name,
            "Location": f"{s.sale.city}, {s.sale.state}" if s.sale.city else s.sale.state,
            "Asset Type": s.sale.asset_type.value,
            "Beds": s.sale.beds,
            "Sale Price": s.sale.sale_price,
            "Price/Bed": s.sale.price_per_bed,
            "Cap Rate": s.sale.cap_rate,
            "Age (days)": s.age_days,
            "Similarity": s.similarity,
            "Weight": s.weight,
        }
        for rank, s in enumerate(score_comparables(subject, options), start=1)
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "Rank",
            "Property",
            "Location",
            "Asset Type",
            "Beds",
            "Sale Price",
            "Price/Bed",
            "Cap Rate",
            "Age (days)",
            "Similarity",
            "Weight",
        ],
    )


class ComparableSalesMethod(BaseValuationMethod):
    """
    Weighted comparable sales analysis.

    Requires at least ``min_comparables`` sales within ``max_age_days`` of the
    as-of date; otherwise raises ``InputError`` naming ``comparables``.
    """

    kind: ClassVar[ValuationMethodEnum] = ValuationMethodEnum.COMPARABLE_SALES
    options_type: ClassVar[Type[MethodOptions]] = ComparableSalesOptions

    confidence_level: float = Field(default=0.95, gt=0, lt=1)

    def is_applicable(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> bool:
        return options is not None and bool(getattr(options, "comparables", None))

    def evaluate(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> ValuationResult:
        options = self.resolve_options(options)
        beds = require_beds(profile, self.kind)

        scored = score_comparables(profile, options)
        if len(scored) < options.min_comparables:
            raise InputError(
                f"Insufficient comparables: found {len(scored)}, need {options.min_comparables}",
                fields=("comparables",),
            )

        assumptions = [
            ValuationAssumption(
                field="comparables",
                value=len(scored),
                source=AssumptionSourceEnum.PROVIDED,
                description=f"{len(scored)} comparable sales analyzed",
            )
        ]
        calculations: List[ValuationCalculation] = []

        top = scored[: options.max_comparables]

        weights = np.array([s.weight for s in top])
        ppbs = np.array([s.sale.price_per_bed for s in top])
        total_weight = float(weights.sum())
        if total_weight > 0:
            avg_ppb = float(np.dot(ppbs, weights) / total_weight)
        else:
            avg_ppb = float(ppbs.mean())

        for idx, s in enumerate(top, start=1):
            calculations.append(
                ValuationCalculation(
                    label=f"Comp {idx}: {s.sale.property_name}",
                    formula=f"{s.sale.beds} beds @ {format_currency(s.sale.price_per_bed)}/bed",
                    value=s.sale.sale_price,
                    details=(
                        f"{s.sale.city}, {s.sale.state} | Similarity: {s.similarity:.0f}% | "
                        f"Weight: {s.weight * 100:.0f}%"
                    ),
                )
            )

        calculations.append(
            ValuationCalculation(
                label="Weighted Avg PPB",
                value=avg_ppb,
                details=f"Based on {len(top)} comparables",
            )
        )

        value_base = beds * avg_ppb
        ppb_min = float(ppbs.min())
        ppb_max = float(ppbs.max())
        value_low = beds * ppb_min
        value_high = beds * ppb_max

        calculations.append(
            ValuationCalculation(
                label="Subject Value",
                formula=f"{beds} beds x {format_currency(avg_ppb)}/bed",
                value=value_base,
            )
        )

        if len(top) >= 2:
            std_dev = float(ppbs.std(ddof=1))
            t_value = scipy_stats.t.ppf((1 + self.confidence_level) / 2, len(top) - 1)
            margin = t_value * std_dev / np.sqrt(len(top))
            mean_ppb = float(ppbs.mean())
            calculations.append(
                ValuationCalculation(
                    label="PPB Confidence Interval",
                    formula=f"{self.confidence_level * 100:.0f}% Student-t interval on comparable PPB",
                    value=margin,
                    details=(
                        f"{format_currency(mean_ppb - margin)} - {format_currency(mean_ppb + margin)}"
                    ),
                )
            )

        if profile.ttm_noi and profile.ttm_noi > 0 and value_base > 0:
            implied_cap_rate = profile.ttm_noi / value_base
            calculations.append(
                ValuationCalculation(
                    label="Implied Cap Rate",
                    value=implied_cap_rate,
                    details=format_percent(implied_cap_rate),
                )
            )

        with_cap = [s for s in top if s.sale.cap_rate is not None]
        if with_cap and total_weight > 0:
            avg_cap_rate = sum(s.sale.cap_rate * s.weight for s in with_cap) / total_weight
            calculations.append(
                ValuationCalculation(
                    label="Avg Comparable Cap Rate",
                    value=avg_cap_rate,
                    details=f"{format_percent(avg_cap_rate)} based on {len(with_cap)} comps",
                )
            )

        confidence = 70.0
        if len(top) >= 5:
            confidence += 10
        if len(top) >= 8:
            confidence += 5

        avg_similarity = sum(s.similarity for s in top) / len(top)
        if avg_similarity >= 80:
            confidence += 10
        elif avg_similarity >= 60:
            confidence += 5
        elif avg_similarity < 40:
            confidence -= 10

        ppb_spread = FinancialCalculations.safe_divide(ppb_max - ppb_min, avg_ppb)
        if ppb_spread < 0.2:
            confidence += 5
        elif ppb_spread > 0.5:
            confidence -= 10
        confidence = FinancialCalculations.clamp(confidence, 40, 100)

        logger.debug(
            f"Comparable sales valuation for {profile.facility_id}: {len(top)} of "
            f"{len(options.comparables)} comparables used, weighted PPB {avg_ppb:,.0f}"
        )

        return ValuationResult(
            method=self.kind,
            value=round_half_up(value_base),
            value_low=round_half_up(value_low),
            value_high=round_half_up(value_high),
            confidence=confidence,
            assumptions=assumptions,
            calculations=calculations,
            notes=(
                f"Analysis of {len(top)} comparable sales with weighted average similarity "
                f"of {avg_similarity:.0f}%"
            ),
            inputs_used={
                "beds": beds,
                "noi": profile.ttm_noi,
                "price_per_bed": avg_ppb,
                "comparables_used": len(top),
                "asset_type": profile.asset_type.value,
                "state": profile.state,
                "occupancy": profile.occupancy_rate,
            },
        )
