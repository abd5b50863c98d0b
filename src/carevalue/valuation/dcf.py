# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Discounted Cash Flow Valuation

Value = sum of discounted projected NOI + discounted terminal value, where the
terminal value capitalizes the final projection year's NOI at an exit cap rate.
"""

from __future__ import annotations

import logging
from typing import ClassVar, Dict, List, Optional, Tuple, Type

import numpy as np
from pydantic import Field

from ..core.calculations import FinancialCalculations
from ..core.primitives import (
    AssetTypeEnum,
    AssumptionSourceEnum,
    CapRate,
    Model,
    ValuationMethodEnum,
)
from ..facility import FacilityFinancialProfile
from .base import BaseValuationMethod, MethodOptions, require_beds, resolve_noi
from .results import (
    SensitivityPoint,
    ValuationAssumption,
    ValuationCalculation,
    ValuationResult,
    format_currency,
    format_percent,
)

logger = logging.getLogger(__name__)

round_half_up = FinancialCalculations.round_half_up

RANGE_SHOCK = 0.01


class DCFAssumptions(Model):
    """Default DCF inputs for one asset type."""

    discount_rate: CapRate
    terminal_cap_rate: CapRate
    revenue_growth: float
    expense_growth: float


def _default_dcf_assumptions() -> Dict[AssetTypeEnum, DCFAssumptions]:
    return {
        AssetTypeEnum.SNF: DCFAssumptions(
            discount_rate=0.12, terminal_cap_rate=0.11, revenue_growth=0.025, expense_growth=0.03
        ),
        AssetTypeEnum.ALF: DCFAssumptions(
            discount_rate=0.10, terminal_cap_rate=0.085, revenue_growth=0.03, expense_growth=0.025
        ),
        AssetTypeEnum.ILF: DCFAssumptions(
            discount_rate=0.09, terminal_cap_rate=0.075, revenue_growth=0.035, expense_growth=0.025
        ),
    }


class DCFOptions(MethodOptions):
    """
    Options for the DCF method. Unset rates fall back to asset-type defaults.

    Attributes:
        projection_years: Hold period in years
        discount_rate: Required rate of return
        terminal_cap_rate: Exit cap rate applied to the final year's NOI
        revenue_growth_rate: Annual revenue growth
        expense_growth_rate: Annual expense growth
    """

    projection_years: Optional[int] = Field(default=None, gt=0, le=50)
    discount_rate: Optional[CapRate] = Field(default=None)
    terminal_cap_rate: Optional[CapRate] = Field(default=None)
    revenue_growth_rate: Optional[float] = Field(default=None, gt=-1, lt=1)
    expense_growth_rate: Optional[float] = Field(default=None, gt=-1, lt=1)


class DCFInputs(Model):
    """Fully resolved DCF inputs for one run."""

    base_noi: float
    projection_years: int
    discount_rate: float
    terminal_cap_rate: float
    revenue_growth_rate: float
    expense_growth_rate: float
    base_revenue: Optional[float] = None
    base_expenses: Optional[float] = None

    @property
    def noi_growth_rate(self) -> float:
        """Blended NOI growth when revenue and expenses cannot be projected separately."""
        return self.revenue_growth_rate - 0.5 * (
            self.expense_growth_rate - self.revenue_growth_rate
        )


class DCFSensitivity(Model):
    """Independent sweeps over discount rate and terminal cap rate."""

    discount_rate: List[SensitivityPoint] = Field(default_factory=list)
    terminal_cap_rate: List[SensitivityPoint] = Field(default_factory=list)


def project_noi(inputs: DCFInputs) -> np.ndarray:
    """
    Project NOI for years 1..N.

    With a known revenue base, revenue and expenses grow separately and NOI is
    their difference; otherwise NOI grows at the blended rate.
    """
    exponents = np.arange(1, inputs.projection_years + 1, dtype=float)
    if inputs.base_revenue is not None and inputs.base_expenses is not None:
        revenue = inputs.base_revenue * np.power(1 + inputs.revenue_growth_rate, exponents)
        expenses = inputs.base_expenses * np.power(1 + inputs.expense_growth_rate, exponents)
        return revenue - expenses
    return inputs.base_noi * np.power(1 + inputs.noi_growth_rate, exponents)


def discounted_value(
    nois: np.ndarray, discount_rate: float, terminal_cap_rate: float
) -> Tuple[float, float, float]:
    """
    Discount a NOI stream and its terminal value.

    Returns:
        (PV of operating cash flows, terminal value, PV of terminal value)
    """
    years = len(nois)
    factors = FinancialCalculations.discount_factors(discount_rate, years)
    pv_operating = float(np.dot(nois, factors))
    terminal_value = float(nois[-1]) / terminal_cap_rate
    pv_terminal = terminal_value * float(factors[-1])
    return pv_operating, terminal_value, pv_terminal


def total_value(nois: np.ndarray, discount_rate: float, terminal_cap_rate: float) -> float:
    """PV of operating cash flows plus PV of terminal value."""
    pv_operating, _, pv_terminal = discounted_value(nois, discount_rate, terminal_cap_rate)
    return pv_operating + pv_terminal


def _shocked_down(rate: float) -> float:
    return max(rate - RANGE_SHOCK, rate / 2)


class DCFMethod(BaseValuationMethod):
    """
    Multi-year discounted cash flow valuation.

    Requires a positive NOI, either provided or derived from EBITDAR. The
    range re-runs the discounting with the discount rate and terminal cap both
    shocked by 100bps in each direction.
    """

    kind: ClassVar[ValuationMethodEnum] = ValuationMethodEnum.DCF
    options_type: ClassVar[Type[MethodOptions]] = DCFOptions

    defaults: Dict[AssetTypeEnum, DCFAssumptions] = Field(
        default_factory=_default_dcf_assumptions
    )
    default_projection_years: int = Field(default=10, gt=0)

    def resolve_inputs(
        self, profile: FacilityFinancialProfile, options: DCFOptions
    ) -> Tuple[DCFInputs, List[ValuationAssumption], List[ValuationCalculation]]:
        """Resolve base NOI and every rate, recording provenance."""
        noi, _, assumptions, calculations = resolve_noi(
            profile, self.market, self.kind, allow_revenue_only=False
        )
        defaults = self.defaults.get(profile.asset_type, self.defaults[AssetTypeEnum.SNF])

        def pick(explicit: Optional[float], default: float) -> Tuple[float, AssumptionSourceEnum]:
            if explicit is not None:
                return explicit, AssumptionSourceEnum.PROVIDED
            return default, AssumptionSourceEnum.ASSUMED

        years, years_source = pick(options.projection_years, self.default_projection_years)
        discount, discount_source = pick(options.discount_rate, defaults.discount_rate)
        terminal, terminal_source = pick(options.terminal_cap_rate, defaults.terminal_cap_rate)
        revenue_growth, revenue_source = pick(options.revenue_growth_rate, defaults.revenue_growth)
        expense_growth, expense_source = pick(options.expense_growth_rate, defaults.expense_growth)

        if discount_source == AssumptionSourceEnum.ASSUMED:
            discount_source = AssumptionSourceEnum.MARKET
        if terminal_source == AssumptionSourceEnum.ASSUMED:
            terminal_source = AssumptionSourceEnum.MARKET

        assumptions.extend(
            [
                ValuationAssumption(
                    field="projection_years",
                    value=int(years),
                    source=years_source,
                    description="Number of years to project",
                ),
                ValuationAssumption(
                    field="discount_rate",
                    value=format_percent(discount, 1),
                    source=discount_source,
                    description="Required rate of return",
                ),
                ValuationAssumption(
                    field="terminal_cap_rate",
                    value=format_percent(terminal),
                    source=terminal_source,
                    description="Exit cap rate for terminal value",
                ),
                ValuationAssumption(
                    field="revenue_growth",
                    value=format_percent(revenue_growth, 1),
                    source=revenue_source,
                    description="Annual revenue growth rate",
                ),
                ValuationAssumption(
                    field="expense_growth",
                    value=format_percent(expense_growth, 1),
                    source=expense_source,
                    description="Annual expense growth rate",
                ),
            ]
        )

        base_revenue = profile.ttm_revenue or None
        base_expenses = None
        if base_revenue is not None:
            base_expenses = (
                profile.ttm_expenses if profile.ttm_expenses is not None else base_revenue - noi
            )

        inputs = DCFInputs(
            base_noi=noi,
            projection_years=int(years),
            discount_rate=discount,
            terminal_cap_rate=terminal,
            revenue_growth_rate=revenue_growth,
            expense_growth_rate=expense_growth,
            base_revenue=base_revenue,
            base_expenses=base_expenses,
        )
        return inputs, assumptions, calculations

    def evaluate(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> ValuationResult:
        options = self.resolve_options(options)
        beds = require_beds(profile, self.kind)
        inputs, assumptions, calculations = self.resolve_inputs(profile, options)

        nois = project_noi(inputs)
        factors = FinancialCalculations.discount_factors(inputs.discount_rate, inputs.projection_years)
        for year, (noi, factor) in enumerate(zip(nois, factors), start=1):
            pv = float(noi * factor)
            calculations.append(
                ValuationCalculation(
                    label=f"Year {year} NOI",
                    formula=f"PV @ {format_percent(inputs.discount_rate, 1)}",
                    value=pv,
                    details=f"NOI: {format_currency(float(noi))} -> PV: {format_currency(pv)}",
                )
            )

        pv_operating, terminal_value, pv_terminal = discounted_value(
            nois, inputs.discount_rate, inputs.terminal_cap_rate
        )
        value_base = pv_operating + pv_terminal
        final_noi = float(nois[-1])

        calculations.append(
            ValuationCalculation(label="PV of Operating Cash Flows", value=pv_operating)
        )
        calculations.append(
            ValuationCalculation(
                label="Terminal Value",
                formula=f"Year {inputs.projection_years} NOI / Exit Cap",
                value=terminal_value,
                details=(
                    f"{format_currency(final_noi)} / {format_percent(inputs.terminal_cap_rate)} = "
                    f"{format_currency(terminal_value)}"
                ),
            )
        )
        calculations.append(
            ValuationCalculation(
                label="PV of Terminal Value",
                formula=f"TV / (1+r)^{inputs.projection_years}",
                value=pv_terminal,
            )
        )
        calculations.append(
            ValuationCalculation(
                label="Total DCF Value",
                formula="PV(Operating) + PV(Terminal)",
                value=value_base,
                details=f"{format_currency(pv_operating)} + {format_currency(pv_terminal)}",
            )
        )

        shocked = [
            total_value(
                nois,
                inputs.discount_rate + RANGE_SHOCK,
                inputs.terminal_cap_rate + RANGE_SHOCK,
            ),
            total_value(
                nois,
                _shocked_down(inputs.discount_rate),
                _shocked_down(inputs.terminal_cap_rate),
            ),
        ]
        value_low = min(shocked + [value_base])
        value_high = max(shocked + [value_base])

        if value_base > 0:
            going_in_cap = inputs.base_noi / value_base
            calculations.append(
                ValuationCalculation(
                    label="Implied Going-In Cap",
                    value=going_in_cap,
                    details=format_percent(going_in_cap),
                )
            )

        terminal_pct = FinancialCalculations.safe_divide(pv_terminal, value_base) * 100
        calculations.append(
            ValuationCalculation(
                label="Terminal Value % of Total",
                value=terminal_pct,
                details=f"{terminal_pct:.1f}% (healthy band 40-60%)",
            )
        )
        calculations.append(ValuationCalculation(label="Price Per Bed", value=value_base / beds))

        confidence = 75.0
        if options.discount_rate is not None:
            confidence += 5
        if options.revenue_growth_rate is not None:
            confidence += 5
        if inputs.base_revenue is not None:
            confidence += 5
        if terminal_pct > 70 or terminal_pct < 30:
            confidence -= 15
        elif terminal_pct > 60 or terminal_pct < 40:
            confidence -= 5
        confidence = FinancialCalculations.clamp(confidence, 40, 100)

        logger.debug(
            f"DCF valuation for {profile.facility_id}: {inputs.projection_years} years at "
            f"{inputs.discount_rate:.4f}, terminal share {terminal_pct:.1f}%"
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
                f"{inputs.projection_years}-year DCF with {format_percent(inputs.discount_rate, 0)} "
                f"discount rate and {format_percent(inputs.terminal_cap_rate, 1)} terminal cap"
            ),
            inputs_used={
                "noi": inputs.base_noi,
                "beds": beds,
                "asset_type": profile.asset_type.value,
                "projection_years": inputs.projection_years,
                "discount_rate": inputs.discount_rate,
                "terminal_cap_rate": inputs.terminal_cap_rate,
                "revenue_growth_rate": inputs.revenue_growth_rate,
                "expense_growth_rate": inputs.expense_growth_rate,
            },
        )


def dcf_sensitivity(
    profile: FacilityFinancialProfile,
    options: Optional[DCFOptions] = None,
    method: Optional[DCFMethod] = None,
    spread: float = 0.02,
    step: float = 0.005,
) -> DCFSensitivity:
    """
    Sweep discount rate and terminal cap independently around the resolved inputs.

    Each sweep holds the other rate at its resolved value. Non-positive rates
    are skipped.
    """
    method = method or DCFMethod()
    inputs, _, _ = method.resolve_inputs(profile, options or DCFOptions())
    nois = project_noi(inputs)

    steps = int(round(spread / step))
    discount_points: List[SensitivityPoint] = []
    terminal_points: List[SensitivityPoint] = []
    for i in range(-steps, steps + 1):
        rate = round(inputs.discount_rate + i * step, 10)
        if rate > 0:
            discount_points.append(
                SensitivityPoint(
                    rate=rate,
                    value=round_half_up(total_value(nois, rate, inputs.terminal_cap_rate)),
                )
            )
        rate = round(inputs.terminal_cap_rate + i * step, 10)
        if rate > 0:
            terminal_points.append(
                SensitivityPoint(
                    rate=rate,
                    value=round_half_up(total_value(nois, inputs.discount_rate, rate)),
                )
            )
    return DCFSensitivity(discount_rate=discount_points, terminal_cap_rate=terminal_points)
