# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Risk adjustment tables.

Every basis-point rule the risk engine applies lives here as data. The
defaults reflect national healthcare real estate underwriting norms; pass a
modified copy (``DEFAULT_RISK_TABLES.model_copy(update={...})``) to substitute
regional tables.
"""

from __future__ import annotations

import math
from typing import Dict

from pydantic import Field, model_validator

from ..core.primitives import (
    AssetTypeEnum,
    BracketTable,
    CapRate,
    LocationTypeEnum,
    Model,
    RiskTierEnum,
)


def _base_cap_rates() -> Dict[AssetTypeEnum, float]:
    return {
        AssetTypeEnum.SNF: 0.085,
        AssetTypeEnum.ALF: 0.065,
        AssetTypeEnum.ILF: 0.055,
    }


def _cms_rating_bps() -> Dict[int, int]:
    return {5: -75, 4: -35, 3: 0, 2: 50, 1: 100}


def _occupancy_table() -> BracketTable:
    return BracketTable.from_pairs(
        "min",
        [(0.95, -50), (0.90, -25), (0.85, 0), (0.80, 25), (0.75, 50), (0.70, 100), (0.0, 150)],
        default=150,
    )


def _agency_labor_table() -> BracketTable:
    return BracketTable.from_pairs(
        "max",
        [(0.05, -25), (0.10, 0), (0.15, 25), (0.20, 50), (0.30, 100), (math.inf, 150)],
    )


def _medicare_mix_table() -> BracketTable:
    return BracketTable.from_pairs(
        "min", [(0.35, -50), (0.25, -25), (0.15, 0), (0.10, 25), (0.0, 50)], default=50
    )


def _deficiency_table() -> BracketTable:
    return BracketTable.from_pairs(
        "max", [(3, -25), (6, 0), (10, 25), (15, 50), (25, 100), (math.inf, 150)]
    )


def _building_age_table() -> BracketTable:
    return BracketTable.from_pairs(
        "max", [(10, -35), (20, -15), (30, 0), (40, 25), (50, 50), (math.inf, 75)]
    )


def _capex_per_bed_table() -> BracketTable:
    return BracketTable.from_pairs(
        "above", [(20_000, 100), (15_000, 75), (10_000, 50), (5_000, 25)]
    )


def _state_bps() -> Dict[str, int]:
    return {
        # Challenging regulatory/reimbursement environments
        "NY": 50,
        "NJ": 40,
        "CA": 35,
        "CT": 30,
        "MA": 25,
        "PA": 15,
        "IL": 10,
        # Operator-friendly environments
        "TX": -15,
        "FL": -10,
        "GA": -10,
        "AZ": -10,
        "TN": -5,
        "NC": -5,
    }


def _location_bps() -> Dict[LocationTypeEnum, int]:
    return {
        LocationTypeEnum.URBAN: -15,
        LocationTypeEnum.SUBURBAN: 0,
        LocationTypeEnum.RURAL: 25,
    }


class RiskAdjustmentTables(Model):
    """
    Injectable configuration for the risk adjustment engine.

    Positive basis points raise the cap rate (lower value); negative basis
    points lower it.
    """

    # === BASELINE ===
    base_cap_rates: Dict[AssetTypeEnum, CapRate] = Field(default_factory=_base_cap_rates)
    cap_rate_floor: CapRate = Field(
        default=0.01, description="Risk-adjusted cap rates are clamped to this floor"
    )

    # === QUALITY ===
    cms_rating_bps: Dict[int, int] = Field(default_factory=_cms_rating_bps)
    rating_baseline: int = Field(default=3, description="Star rating carrying zero adjustment")
    staffing_rating_step_bps: int = 20
    quality_rating_step_bps: int = 15

    # === OPERATIONS ===
    occupancy: BracketTable = Field(default_factory=_occupancy_table)
    agency_labor: BracketTable = Field(default_factory=_agency_labor_table)
    min_hppd: float = Field(default=3.5, gt=0)
    strong_hppd_margin: float = Field(default=1.0, ge=0)
    low_hppd_bps: int = 50
    strong_hppd_bps: int = -25
    medicare_mix: BracketTable = Field(default_factory=_medicare_mix_table)

    # === COMPLIANCE ===
    immediate_jeopardy_bps: int = 150
    special_focus_bps: int = 200
    deficiencies: BracketTable = Field(default_factory=_deficiency_table)

    # === CAPITAL ===
    building_age: BracketTable = Field(default_factory=_building_age_table)
    capex_per_bed: BracketTable = Field(default_factory=_capex_per_bed_table)

    # === MARKET ===
    state_bps: Dict[str, int] = Field(default_factory=_state_bps)
    location_bps: Dict[LocationTypeEnum, int] = Field(default_factory=_location_bps)
    high_supply_growth: float = 0.03
    high_supply_bps: int = 35
    constrained_supply_growth: float = 0.01
    constrained_competitor_occupancy: float = 0.85
    constrained_supply_bps: int = -25

    # === SCORING ===
    max_data_points: int = Field(default=12, gt=0)
    high_confidence_score: float = 80
    medium_confidence_score: float = 50
    critical_premium: float = 0.03
    high_premium: float = 0.015
    moderate_premium: float = 0.005

    @model_validator(mode="after")
    def validate_thresholds(self) -> "RiskAdjustmentTables":
        """Tier and confidence thresholds must be ordered."""
        if not (self.critical_premium >= self.high_premium >= self.moderate_premium):
            raise ValueError("Risk tier premiums must satisfy critical >= high >= moderate")
        if self.high_confidence_score < self.medium_confidence_score:
            raise ValueError("high_confidence_score must not be below medium_confidence_score")
        return self

    def base_cap_rate(self, asset_type: AssetTypeEnum) -> float:
        """Baseline cap rate for an asset type, falling back to SNF."""
        return self.base_cap_rates.get(asset_type, self.base_cap_rates[AssetTypeEnum.SNF])

    def risk_tier(self, premium: float) -> RiskTierEnum:
        """Overall risk tier as a threshold function of the total premium."""
        if premium >= self.critical_premium:
            return RiskTierEnum.CRITICAL
        if premium >= self.high_premium:
            return RiskTierEnum.HIGH
        if premium >= self.moderate_premium:
            return RiskTierEnum.MODERATE
        return RiskTierEnum.LOW


DEFAULT_RISK_TABLES = RiskAdjustmentTables()
