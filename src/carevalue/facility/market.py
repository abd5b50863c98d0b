# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..core.primitives import FloatBetween0And1, Model, PositiveFloat


class MarketConditions(Model):
    """
    Local supply/demand signals for a facility's market.

    Attributes:
        medicaid_rate: State Medicaid per-diem rate
        competitor_occupancy: Average occupancy of competing facilities
        supply_growth_rate: Annual growth in licensed bed supply
        demand_growth_rate: Annual growth in the target population
    """

    medicaid_rate: Optional[PositiveFloat] = Field(default=None)
    competitor_occupancy: Optional[FloatBetween0And1] = Field(default=None)
    supply_growth_rate: Optional[float] = Field(default=None)
    demand_growth_rate: Optional[float] = Field(default=None)
