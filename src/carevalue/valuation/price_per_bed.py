# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Price Per Bed Valuation - Value = Beds x Adjusted Price Per Bed

Rule-of-thumb valuation common in senior housing. A base price per bed is
adjusted sequentially for state, building age, CMS rating and occupancy.
"""

from __future__ import annotations

import logging
from typing import ClassVar, Dict, List, Optional, Tuple, Type

from pydantic import Field, model_validator

from ..core.calculations import FinancialCalculations
from ..core.primitives import (
    AssumptionSourceEnum,
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


def _default_state_multipliers() -> Dict[str, float]:
    return {
        "CA": 1.35,
        "NY": 1.25,
        "NJ": 1.20,
        "MA": 1.15,
        "CT": 1.15,
        "WA": 1.10,
        "CO": 1.10,
        "FL": 1.05,
        "AZ": 1.00,
        "TX": 0.95,
        "PA": 0.95,
        "IL": 0.95,
        "NC": 0.93,
        "GA": 0.92,
        "OH": 0.90,
        "TN": 0.90,
        "MI": 0.88,
        "WI": 0.88,
        "IN": 0.85,
        "MO": 0.85,
    }


def _default_rating_multipliers() -> Dict[int, float]:
    return {5: 1.15, 4: 1.05, 3: 1.00, 2: 0.90, 1: 0.75}


class PricePerBedTables(Model):
    """
    Adjustment tables for the price per bed method.

    Attributes:
        state_multipliers: State code → multiplier on the national average
        rating_multipliers: CMS overall rating → multiplier
        age_threshold_years: Age beyond which the age discount starts
        age_discount_per_year: Discount per year beyond the threshold
        max_age_discount: Cap on the age discount
        occupancy_tolerance: Deviation from the asset average ignored
        occupancy_sensitivity: Value change per unit of occupancy deviation
        range_spread: Half-width of the default PPB range
    """

    state_multipliers: Dict[str, float] = Field(default_factory=_default_state_multipliers)
    rating_multipliers: Dict[int, float] = Field(default_factory=_default_rating_multipliers)
    age_threshold_years: int = 30
    age_discount_per_year: float = 0.005
    max_age_discount: float = 0.20
    occupancy_tolerance: float = 0.05
    occupancy_sensitivity: float = 2.0
    range_spread: float = 0.15


class PricePerBedOptions(MethodOptions):
    """Options for the price per bed method; each adjustment can be switched off."""

    market_ppb: Optional[PositiveFloat] = Field(default=None)
    ppb_low: Optional[PositiveFloat] = Field(default=None)
    ppb_high: Optional[PositiveFloat] = Field(default=None)
    adjust_for_state: bool = True
    adjust_for_age: bool = True
    adjust_for_rating: bool = True
    adjust_for_occupancy: bool = True

    @model_validator(mode="after")
    def validate_ppb_band(self) -> "PricePerBedOptions":
        if self.ppb_low is not None and self.ppb_high is not None and self.ppb_low > self.ppb_high:
            raise ValueError(
                f"ppb_low ({self.ppb_low:,.0f}) must not exceed ppb_high ({self.ppb_high:,.0f})"
            )
        return self


class PricePerBedMethod(BaseValuationMethod):
    """
    Market price per bed adjusted for location, age, quality and occupancy.

    Multipliers are applied in a fixed order: state, age, rating, occupancy.
    The adjusted price per bed is rounded to whole currency before it is
    multiplied by beds.
    """

    kind: ClassVar[ValuationMethodEnum] = ValuationMethodEnum.PRICE_PER_BED
    options_type: ClassVar[Type[MethodOptions]] = PricePerBedOptions

    tables: PricePerBedTables = Field(default_factory=PricePerBedTables)

    def adjusted_price_per_bed(
        self, profile: FacilityFinancialProfile, options: PricePerBedOptions
    ) -> Tuple[float, AssumptionSourceEnum, List[Tuple[str, float]]]:
        """
        Apply the sequential multipliers.

        Returns:
            (unrounded adjusted PPB, base PPB source, (description, running PPB)
            steps)
        """
        adjustments: List[Tuple[str, float]] = []
        tables = self.tables
        asset_data = self.market.for_asset(profile.asset_type)

        if options.market_ppb is not None:
            base_ppb = options.market_ppb
            source = AssumptionSourceEnum.PROVIDED
            adjustments.append((f"Base: Provided market PPB ({format_currency(base_ppb)})", base_ppb))
        elif profile.market_price_per_bed is not None:
            base_ppb = profile.market_price_per_bed
            source = AssumptionSourceEnum.MARKET
            adjustments.append((f"Base: Market PPB ({format_currency(base_ppb)})", base_ppb))
        else:
            base_ppb = asset_data.avg_price_per_bed
            source = AssumptionSourceEnum.ASSUMED
            adjustments.append(
                (
                    f"Base: National {profile.asset_type.value} average ({format_currency(base_ppb)})",
                    base_ppb,
                )
            )

        ppb = base_ppb

        if options.adjust_for_state:
            multiplier = tables.state_multipliers.get(profile.state, 1.0)
            if multiplier != 1.0:
                ppb *= multiplier
                adjustments.append((f"State ({profile.state}): {(multiplier - 1) * 100:+.0f}%", ppb))

        age = profile.building_age
        if options.adjust_for_age and age is not None and age > tables.age_threshold_years:
            discount = min(
                (age - tables.age_threshold_years) * tables.age_discount_per_year,
                tables.max_age_discount,
            )
            ppb *= 1 - discount
            adjustments.append((f"Age ({age} years): -{discount * 100:.1f}%", ppb))

        if options.adjust_for_rating and profile.cms_rating is not None:
            multiplier = tables.rating_multipliers.get(profile.cms_rating, 1.0)
            if multiplier != 1.0:
                ppb *= multiplier
                adjustments.append(
                    (f"CMS Rating ({profile.cms_rating}-star): {(multiplier - 1) * 100:+.0f}%", ppb)
                )

        if options.adjust_for_occupancy and profile.occupancy_rate is not None:
            deviation = profile.occupancy_rate - asset_data.avg_occupancy
            if abs(deviation) > tables.occupancy_tolerance:
                adjustment = deviation * tables.occupancy_sensitivity
                # Deep occupancy shortfalls cannot push the price negative
                ppb *= max(0.0, 1 + adjustment)
                adjustments.append(
                    (
                        f"Occupancy ({profile.occupancy_rate * 100:.0f}%): {adjustment * 100:+.1f}%",
                        ppb,
                    )
                )

        return ppb, source, adjustments

    def evaluate(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> ValuationResult:
        options = self.resolve_options(options)
        beds = require_beds(profile, self.kind)

        raw_ppb, source, adjustments = self.adjusted_price_per_bed(profile, options)
        spread = self.tables.range_spread
        ppb = round_half_up(raw_ppb)
        ppb_low = round_half_up(
            options.ppb_low if options.ppb_low is not None else raw_ppb * (1 - spread)
        )
        ppb_high = round_half_up(
            options.ppb_high if options.ppb_high is not None else raw_ppb * (1 + spread)
        )
        ppb_low = min(ppb_low, ppb)
        ppb_high = max(ppb_high, ppb)

        assumptions = [
            ValuationAssumption(
                field="price_per_bed",
                value=format_currency(ppb),
                source=source,
                description="Adjusted price per bed",
            )
        ]
        calculations = [
            ValuationCalculation(
                label="PPB Calculation" if idx == 0 else f"Adjustment {idx}",
                value=running_ppb,
                details=text,
            )
            for idx, (text, running_ppb) in enumerate(adjustments)
        ]

        value_base = beds * ppb
        value_low = beds * ppb_low
        value_high = beds * ppb_high

        calculations.append(
            ValuationCalculation(
                label="Base Value",
                formula="Beds x Price Per Bed",
                value=value_base,
                details=f"{beds} x {format_currency(ppb)} = {format_currency(value_base)}",
            )
        )
        calculations.append(
            ValuationCalculation(
                label="Value Low", formula=f"{beds} x {format_currency(ppb_low)}", value=value_low
            )
        )
        calculations.append(
            ValuationCalculation(
                label="Value High", formula=f"{beds} x {format_currency(ppb_high)}", value=value_high
            )
        )

        if profile.ttm_noi and profile.ttm_noi > 0 and value_base > 0:
            implied_cap_rate = profile.ttm_noi / value_base
            calculations.append(
                ValuationCalculation(
                    label="Implied Cap Rate",
                    formula="NOI / Value",
                    value=implied_cap_rate,
                    details=(
                        f"{format_currency(profile.ttm_noi)} / {format_currency(value_base)} = "
                        f"{format_percent(implied_cap_rate)}"
                    ),
                )
            )

        confidence = 70.0
        if options.market_ppb is not None:
            confidence += 10
        if profile.cms_rating is not None:
            confidence += 5
        if profile.occupancy_rate is not None:
            confidence += 5
        if profile.year_built is not None:
            confidence += 5
        if profile.state in self.tables.state_multipliers:
            confidence += 5
        confidence = FinancialCalculations.clamp(confidence, 40, 100)

        logger.debug(
            f"Price per bed valuation for {profile.facility_id}: {beds} beds at {ppb:,.0f}"
        )

        return ValuationResult(
            method=self.kind,
            value=value_base,
            value_low=value_low,
            value_high=value_high,
            confidence=confidence,
            assumptions=assumptions,
            calculations=calculations,
            notes=(
                f"Price per bed valuation using {format_currency(ppb)}/bed with "
                f"{len(adjustments) - 1} adjustments"
            ),
            inputs_used={
                "beds": beds,
                "price_per_bed": ppb,
                "noi": profile.ttm_noi,
                "asset_type": profile.asset_type.value,
                "state": profile.state,
                "year_built": profile.year_built,
                "cms_rating": profile.cms_rating,
                "occupancy": profile.occupancy_rate,
            },
        )
