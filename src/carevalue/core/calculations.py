# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Financial calculation functions.

Contains static methods for the core financial arithmetic. These functions are
pure (math-only); valuation, risk and lease modules delegate to them so that
each formula, coverage in particular, has a single definition.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
from pyxirr import InvalidPaymentsError, irr


class FinancialCalculations:
    """Pure mathematical helpers for valuation and lease economics."""

    @staticmethod
    def clamp(value: float, lower: float, upper: float) -> float:
        """Clamp ``value`` into ``[lower, upper]``."""
        return max(lower, min(upper, value))

    @staticmethod
    def round_half_up(value: float, step: float = 1) -> float:
        """
        Round to the nearest multiple of ``step``, with ties rounding up.

        Unlike the built-in ``round`` (ties to even), 2,250,000 rounds to
        2,300,000 at a 100,000 step. The quotient is first rounded to nine
        decimals so float noise such as 22.499999999999996 still counts as a tie.
        """
        return math.floor(round(value / step, 9) + 0.5) * step

    @staticmethod
    def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
        """Divide, returning ``default`` when the denominator is zero."""
        if denominator == 0:
            return default
        return numerator / denominator

    @staticmethod
    def coverage_ratio(ebitdar: float, annual_rent: float) -> float:
        """
        Rent coverage ratio: EBITDAR / annual rent.

        The one definition of coverage used by deal economics, portfolio
        summaries, projections and sensitivity tables. Zero rent yields 0.0.
        """
        if annual_rent == 0:
            return 0.0
        return ebitdar / annual_rent

    @staticmethod
    def discount_factor(rate: float, years: float) -> float:
        """End-of-period discount factor ``1 / (1 + rate) ** years``."""
        return 1.0 / ((1.0 + rate) ** years)

    @staticmethod
    def present_value(future_value: float, rate: float, years: float) -> float:
        """Present value of a single future amount."""
        return future_value * FinancialCalculations.discount_factor(rate, years)

    @staticmethod
    def escalation_schedule(base_amount: float, rate: float, years: int) -> np.ndarray:
        """
        Compounding escalation schedule for years 1..N.

        Year ``y`` carries ``base_amount * (1 + rate) ** (y - 1)``.

        Example:
            ```python
            FinancialCalculations.escalation_schedule(1_000_000, 0.03, 5)[-1]
            # 1_125_508.81
            ```
        """
        exponents = np.arange(years, dtype=float)
        return base_amount * np.power(1.0 + rate, exponents)

    @staticmethod
    def discount_factors(rate: float, years: int) -> np.ndarray:
        """End-of-year discount factors for years 1..N."""
        exponents = np.arange(1, years + 1, dtype=float)
        return 1.0 / np.power(1.0 + rate, exponents)

    @staticmethod
    def calculate_irr(cash_flows: Sequence[float]) -> Optional[float]:
        """
        Calculate a periodic Internal Rate of Return using PyXIRR.

        Args:
            cash_flows: Cash flows in period order, negative for investments

        Returns:
            IRR as decimal or None if it cannot be calculated

        Edge Cases Handled:
            - Fewer than two flows → None
            - All flows of one sign → None
            - Non-convergence → None
        """
        flows = [float(cf) for cf in cash_flows]
        if len(flows) < 2:
            return None
        if not (any(cf < 0 for cf in flows) and any(cf > 0 for cf in flows)):
            return None

        try:
            result = irr(flows)
        except InvalidPaymentsError:
            return None

        if result is None or math.isnan(result):
            return None
        return float(result)
