# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Valuation result records.

Every method returns a ``ValuationResult`` carrying its point estimate, range,
confidence and two ordered provenance trails: the assumptions it relied on and
the intermediate numbers it computed. Trails are part of the return value so
results stay pure and reproducible.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import pandas as pd
from pydantic import Field, model_validator

from ..core.primitives import AssumptionSourceEnum, Model, ValuationMethodEnum

AssumptionValue = Union[int, float, str]


def format_currency(amount: float) -> str:
    """Deterministic currency text used in calculation details."""
    return f"${amount:,.0f}"


def format_percent(rate: float, decimals: int = 2) -> str:
    """Deterministic percentage text for a fractional rate."""
    return f"{rate * 100:.{decimals}f}%"


class ValuationAssumption(Model):
    """Provenance record for one input a method relied on."""

    field: str
    value: AssumptionValue
    source: AssumptionSourceEnum
    description: str


class ValuationCalculation(Model):
    """One step of a method's calculation trail."""

    label: str
    value: float
    formula: Optional[str] = None
    details: Optional[str] = None


class ValuationResult(Model):
    """
    Output of exactly one valuation method.

    Attributes:
        method: Which method produced the result
        value: Point estimate (whole currency units)
        value_low: Low end of the plausible range
        value_high: High end of the plausible range
        confidence: Method confidence score in [0, 100]
        assumptions: Ordered assumption provenance trail
        calculations: Ordered calculation audit trail
        notes: One-line human summary
        inputs_used: Resolved numeric inputs (e.g. the cap rate actually used)
    """

    method: ValuationMethodEnum
    value: float
    value_low: float
    value_high: float
    confidence: float = Field(..., ge=0, le=100)
    assumptions: List[ValuationAssumption] = Field(default_factory=list)
    calculations: List[ValuationCalculation] = Field(default_factory=list)
    notes: str = ""
    inputs_used: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_range(self) -> "ValuationResult":
        """Range bounds must bracket the point estimate."""
        if not (self.value_low <= self.value <= self.value_high):
            raise ValueError(
                f"{self.method.value} range [{self.value_low:,.0f}, {self.value_high:,.0f}] "
                f"does not contain value {self.value:,.0f}"
            )
        return self

    @property
    def beds(self) -> Optional[int]:
        return self.inputs_used.get("beds")

    @property
    def price_per_bed(self) -> Optional[float]:
        """Point estimate per bed, when the bed count is known."""
        beds = self.beds
        if not beds:
            return None
        return self.value / beds

    @property
    def implied_cap_rate(self) -> Optional[float]:
        """NOI / value, when the method used an NOI."""
        noi = self.inputs_used.get("noi")
        if not noi or noi <= 0 or self.value <= 0:
            return None
        return noi / self.value

    def to_dataframe(self) -> pd.DataFrame:
        """Calculation trail as a DataFrame for reporting."""
        return pd.DataFrame(
            [
                {
                    "Method": self.method.value,
                    "Label": calc.label,
                    "Formula": calc.formula,
                    "Value": calc.value,
                    "Details": calc.details,
                }
                for calc in self.calculations
            ],
            columns=["Method", "Label", "Formula", "Value", "Details"],
        )


class SensitivityPoint(Model):
    """One row of a rate sweep: the rate tested and the resulting value."""

    rate: float
    value: float
