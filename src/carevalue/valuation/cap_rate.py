# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Direct Capitalization Valuation - Value = NOI / Cap Rate

The most common valuation method for income-producing healthcare real estate.
The cap rate is resolved from the most specific source available and the value
range is obtained by shocking that rate by a fixed spread.
"""

from __future__ import annotations

import logging
from typing import ClassVar, List, Optional, Type

from pydantic import Field, model_validator

from ..core.calculations import FinancialCalculations
from ..core.primitives import (
    AssumptionSourceEnum,
    CapRate,
    InputError,
    Model,
    ValuationMethodEnum,
)
from ..facility import FacilityFinancialProfile
from .base import BaseValuationMethod, MethodOptions, require_beds, resolve_noi
from .results import (
    ValuationAssumption,
    ValuationCalculation,
    SensitivityPoint,
    ValuationResult,
    format_currency,
    format_percent,
)

logger = logging.getLogger(__name__)

round_half_up = FinancialCalculations.round_half_up

RANGE_SPREAD = 0.01


class CapRateOptions(MethodOptions):
    """
    Options for the cap rate method.

    Attributes:
        target_cap_rate: Explicit cap rate; overrides every other source
        cap_rate_low: Explicit low cap rate (drives the high value)
        cap_rate_high: Explicit high cap rate (drives the low value)
    """

    target_cap_rate: Optional[CapRate] = Field(default=None)
    cap_rate_low: Optional[CapRate] = Field(default=None)
    cap_rate_high: Optional[CapRate] = Field(default=None)

    @model_validator(mode="after")
    def validate_rate_band(self) -> "CapRateOptions":
        """Explicit bounds must bracket the target rate."""
        if self.cap_rate_low is not None and self.cap_rate_high is not None:
            if self.cap_rate_low > self.cap_rate_high:
                raise ValueError(
                    f"cap_rate_low ({self.cap_rate_low:.2%}) must not exceed "
                    f"cap_rate_high ({self.cap_rate_high:.2%})"
                )
        if self.target_cap_rate is not None:
            if self.cap_rate_low is not None and self.cap_rate_low > self.target_cap_rate:
                raise ValueError("cap_rate_low must not exceed target_cap_rate")
            if self.cap_rate_high is not None and self.cap_rate_high < self.target_cap_rate:
                raise ValueError("cap_rate_high must not be below target_cap_rate")
        return self


class ResolvedCapRate(Model):
    """Cap rate chosen for a run together with its band and provenance."""

    rate: float
    low: float
    high: float
    source: AssumptionSourceEnum
    basis: str


class CapRateMethod(BaseValuationMethod):
    """
    Direct capitalization of trailing NOI.

    Cap rate priority:
        1. ``options.target_cap_rate`` (provided)
        2. ``profile.market_cap_rate`` (market)
        3. CMS overall rating band midpoint (derived)
        4. Asset-type national average (assumed)

    Example:
        ```python
        result = CapRateMethod().evaluate(
            profile, CapRateOptions(target_cap_rate=0.10)
        )
        result.value  # 20_000_000 for NOI of 2,000,000
        ```
    """

    kind: ClassVar[ValuationMethodEnum] = ValuationMethodEnum.CAP_RATE
    options_type: ClassVar[Type[MethodOptions]] = CapRateOptions

    def resolve_cap_rate(
        self, profile: FacilityFinancialProfile, options: CapRateOptions
    ) -> ResolvedCapRate:
        """
        Pick the cap rate and its low/high band.

        Raises:
            InputError: If explicit bounds do not bracket the resolved rate
        """
        if options.target_cap_rate is not None:
            rate = options.target_cap_rate
            source = AssumptionSourceEnum.PROVIDED
            basis = "explicit target cap rate"
        elif profile.market_cap_rate is not None:
            rate = profile.market_cap_rate
            source = AssumptionSourceEnum.MARKET
            basis = "market cap rate"
        elif profile.cms_rating is not None and profile.cms_rating in self.market.cap_rate_by_rating:
            rate = self.market.cap_rate_by_rating[profile.cms_rating].midpoint
            source = AssumptionSourceEnum.DERIVED
            basis = f"CMS {profile.cms_rating}-star rating"
        else:
            rate = self.market.for_asset(profile.asset_type).avg_cap_rate
            source = AssumptionSourceEnum.ASSUMED
            basis = f"{profile.asset_type.value} asset type default"

        # Lower bound must stay strictly positive
        low = options.cap_rate_low if options.cap_rate_low is not None else max(
            rate - RANGE_SPREAD, rate / 2
        )
        high = options.cap_rate_high if options.cap_rate_high is not None else rate + RANGE_SPREAD
        # Explicit bounds are only checked against the target at construction
        if not low <= rate <= high:
            fields = ("cap_rate_low",) if low > rate else ("cap_rate_high",)
            raise InputError(
                f"Cap rate band [{format_percent(low)}, {format_percent(high)}] does not "
                f"contain the {basis} rate of {format_percent(rate)}",
                fields=fields,
            )
        return ResolvedCapRate(rate=rate, low=low, high=high, source=source, basis=basis)

    def evaluate(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> ValuationResult:
        options = self.resolve_options(options)
        beds = require_beds(profile, self.kind)
        noi, noi_source, assumptions, calculations = resolve_noi(profile, self.market, self.kind)

        cap = self.resolve_cap_rate(profile, options)
        assumptions.append(
            ValuationAssumption(
                field="cap_rate",
                value=format_percent(cap.rate),
                source=cap.source,
                description=f"Cap rate determined from {cap.basis}",
            )
        )

        value_base = noi / cap.rate
        value_low = noi / cap.high
        value_high = noi / cap.low

        calculations.append(
            ValuationCalculation(
                label="Base Value",
                formula="NOI / Cap Rate",
                value=value_base,
                details=(
                    f"{format_currency(noi)} / {format_percent(cap.rate)} = "
                    f"{format_currency(value_base)}"
                ),
            )
        )
        calculations.append(
            ValuationCalculation(
                label="Value Low (High Cap)",
                formula=f"NOI / {format_percent(cap.high)}",
                value=value_low,
            )
        )
        calculations.append(
            ValuationCalculation(
                label="Value High (Low Cap)",
                formula=f"NOI / {format_percent(cap.low)}",
                value=value_high,
            )
        )
        price_per_bed = value_base / beds
        calculations.append(
            ValuationCalculation(
                label="Price Per Bed",
                formula="Value / Beds",
                value=price_per_bed,
                details=f"{format_currency(value_base)} / {beds} = {format_currency(price_per_bed)}",
            )
        )

        confidence = 80.0
        if noi_source == AssumptionSourceEnum.DERIVED:
            confidence -= 10
        if cap.source == AssumptionSourceEnum.PROVIDED:
            confidence += 10
        if cap.source == AssumptionSourceEnum.ASSUMED:
            confidence -= 10
        if profile.cms_rating is not None and profile.cms_rating >= 4:
            confidence += 5
        if profile.occupancy_rate is not None and profile.occupancy_rate >= 0.85:
            confidence += 5
        confidence = FinancialCalculations.clamp(confidence, 40, 100)

        logger.debug(
            f"Cap rate valuation for {profile.facility_id}: NOI {noi:,.0f} at "
            f"{cap.rate:.4f} ({cap.source.value})"
        )

        return ValuationResult(
            method=self.kind,
            value=round_half_up(value_base),
            value_low=round_half_up(value_low),
            value_high=round_half_up(value_high),
            confidence=confidence,
            assumptions=assumptions,
            calculations=calculations,
            notes=f"Cap rate valuation using {format_percent(cap.rate)} cap rate based on {cap.basis}",
            inputs_used={
                "noi": noi,
                "cap_rate": cap.rate,
                "beds": beds,
                "asset_type": profile.asset_type.value,
                "state": profile.state,
                "cms_rating": profile.cms_rating,
            },
        )


def cap_rate_sensitivity(
    noi: float,
    base_cap_rate: float,
    spread: float = 0.02,
    step: float = 0.005,
) -> List[SensitivityPoint]:
    """
    Symmetric cap rate sweep around ``base_cap_rate``.

    Args:
        noi: Net operating income to capitalize
        base_cap_rate: Center of the sweep
        spread: Distance from the center to each end of the sweep
        step: Increment between rates

    Returns:
        Points in ascending rate order; non-positive rates are skipped

    Raises:
        InputError: If ``step`` is not positive
    """
    if step <= 0:
        raise InputError("Sensitivity step must be positive", fields=("step",))

    steps = int(round(spread / step))
    rows: List[SensitivityPoint] = []
    for i in range(-steps, steps + 1):
        rate = round(base_cap_rate + i * step, 10)
        if rate <= 0:
            continue
        rows.append(SensitivityPoint(rate=rate, value=round_half_up(noi / rate)))
    return rows
