# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Threshold bracket tables.

Most engine adjustments (occupancy, agency labor, building age, deficiency
count, capex per bed, payer mix) are ordered ``{threshold, adjustment}``
tables. They are data, not control flow: every table is resolved by the same
first-match lookup so each one can be swapped or unit tested on its own.
"""

from __future__ import annotations

import math
from typing import Iterable, Literal, Optional, Tuple

from pydantic import Field, model_validator

from .model import Model

BracketComparison = Literal["min", "max", "above"]


class Bracket(Model):
    """One row of a bracket table."""

    threshold: float = Field(..., description="Boundary value for this row")
    adjustment: float = Field(..., description="Adjustment applied when the row matches")


class BracketTable(Model):
    """
    Ordered bracket table resolved by first match.

    Attributes:
        comparison: How a value is tested against each row's threshold.
            ``"min"``: row matches when ``value >= threshold`` (rows ordered
            high to low, e.g. occupancy floors).
            ``"max"``: row matches when ``value <= threshold`` (rows ordered
            low to high, e.g. deficiency ceilings).
            ``"above"``: row matches when ``value > threshold`` (rows ordered
            high to low, e.g. capex per bed).
        brackets: Rows in evaluation order.
        default: Adjustment returned when no row matches.

    Example:
        ```python
        occupancy = BracketTable.from_pairs(
            "min", [(0.95, -50), (0.90, -25), (0.0, 150)]
        )
        occupancy.lookup(0.92)  # -25
        ```
    """

    comparison: BracketComparison
    brackets: Tuple[Bracket, ...]
    default: float = 0.0

    @model_validator(mode="after")
    def validate_ordering(self) -> "BracketTable":
        """Rows must be ordered so that first match is the tightest bracket."""
        thresholds = [b.threshold for b in self.brackets]
        if self.comparison == "max":
            ordered = thresholds == sorted(thresholds)
        else:
            ordered = thresholds == sorted(thresholds, reverse=True)
        if not ordered:
            raise ValueError(
                f"Bracket thresholds {thresholds} are out of order for "
                f"comparison '{self.comparison}'"
            )
        return self

    @classmethod
    def from_pairs(
        cls,
        comparison: BracketComparison,
        pairs: Iterable[Tuple[float, float]],
        default: float = 0.0,
    ) -> "BracketTable":
        """Build a table from ``(threshold, adjustment)`` pairs."""
        return cls(
            comparison=comparison,
            brackets=tuple(Bracket(threshold=t, adjustment=a) for t, a in pairs),
            default=default,
        )

    def match(self, value: float) -> Optional[Bracket]:
        """Return the first matching row, or None."""
        return first_matching_bracket(value, self)

    def lookup(self, value: float) -> float:
        """Return the adjustment of the first matching row, or the default."""
        bracket = self.match(value)
        return bracket.adjustment if bracket is not None else self.default


def first_matching_bracket(value: float, table: BracketTable) -> Optional[Bracket]:
    """
    Resolve ``value`` against ``table`` and return the first matching row.

    NaN never matches any row.
    """
    if value is None or math.isnan(value):
        return None

    for bracket in table.brackets:
        if table.comparison == "min" and value >= bracket.threshold:
            return bracket
        if table.comparison == "max" and value <= bracket.threshold:
            return bracket
        if table.comparison == "above" and value > bracket.threshold:
            return bracket
    return None
