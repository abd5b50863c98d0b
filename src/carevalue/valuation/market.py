# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Market default assumptions by asset type.

National averages used when a facility snapshot carries no market data of its
own. Passed into each method as configuration so tests and callers can swap
in regional tables.
"""

from __future__ import annotations

from typing import Dict

from pydantic import Field, model_validator

from ..core.primitives import AssetTypeEnum, CapRate, FloatBetween0And1, Model, PositiveFloat


class AssetMarketData(Model):
    """National market averages for one asset type."""

    avg_cap_rate: CapRate
    avg_price_per_bed: PositiveFloat
    avg_occupancy: FloatBetween0And1
    noi_margin: FloatBetween0And1 = Field(
        ..., description="Typical NOI / revenue, used when only revenue is known"
    )


class CapRateBand(Model):
    """Cap rate band for one CMS star rating; the midpoint is the point rate."""

    low: CapRate
    high: CapRate

    @model_validator(mode="after")
    def validate_band(self) -> "CapRateBand":
        if self.low > self.high:
            raise ValueError(f"Cap rate band low {self.low} exceeds high {self.high}")
        return self

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2


def _default_asset_data() -> Dict[AssetTypeEnum, AssetMarketData]:
    return {
        AssetTypeEnum.SNF: AssetMarketData(
            avg_cap_rate=0.12, avg_price_per_bed=85_000, avg_occupancy=0.82, noi_margin=0.08
        ),
        AssetTypeEnum.ALF: AssetMarketData(
            avg_cap_rate=0.075, avg_price_per_bed=175_000, avg_occupancy=0.87, noi_margin=0.20
        ),
        AssetTypeEnum.ILF: AssetMarketData(
            avg_cap_rate=0.065, avg_price_per_bed=225_000, avg_occupancy=0.90, noi_margin=0.30
        ),
    }


def _default_rating_bands() -> Dict[int, CapRateBand]:
    return {
        5: CapRateBand(low=0.090, high=0.105),
        4: CapRateBand(low=0.100, high=0.115),
        3: CapRateBand(low=0.110, high=0.125),
        2: CapRateBand(low=0.120, high=0.135),
        1: CapRateBand(low=0.130, high=0.150),
    }


class MarketDefaults(Model):
    """
    Engine-wide market constants.

    Attributes:
        asset_data: Per asset type averages
        cap_rate_by_rating: CMS overall star rating → cap rate band
        estimated_rent_ratio: Rent as a share of revenue, used to derive NOI
            from EBITDAR when NOI is absent
    """

    asset_data: Dict[AssetTypeEnum, AssetMarketData] = Field(
        default_factory=_default_asset_data
    )
    cap_rate_by_rating: Dict[int, CapRateBand] = Field(default_factory=_default_rating_bands)
    estimated_rent_ratio: FloatBetween0And1 = 0.06

    def for_asset(self, asset_type: AssetTypeEnum) -> AssetMarketData:
        """Averages for an asset type, falling back to SNF."""
        return self.asset_data.get(asset_type, self.asset_data[AssetTypeEnum.SNF])


DEFAULT_MARKET = MarketDefaults()
