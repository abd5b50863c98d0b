# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Replacement Cost Valuation - Value = Land + Depreciated Cost To Rebuild

A cost approach: what it would take to build an equivalent facility today,
less the physical depreciation and obsolescence the existing building has
accumulated. Useful as a ceiling on income-based values and for newer
buildings where trailing income is not yet stabilized.
"""

from __future__ import annotations

import logging
from typing import ClassVar, Dict, Optional, Type

from pydantic import Field, model_validator

from ..core.calculations import FinancialCalculations
from ..core.primitives import (
    AssetTypeEnum,
    AssumptionSourceEnum,
    FloatBetween0And1,
    InputError,
    LocationTypeEnum,
    Model,
    PositiveFloat,
    PositiveInt,
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

RANGE_SPREAD = 0.10
RENOVATION_MAX_AGE_REDUCTION = 0.5


class ReplacementCostSettings(Model):
    """
    Construction cost assumptions for one asset type.

    Attributes:
        construction_cost_per_sf: Hard cost per square foot before regional adjustment
        regional_multipliers: Region name (lowercase) → construction cost multiplier
        useful_life_years: Age at which physical depreciation stops accruing
        residual_value_percent: Share of the depreciable base never depreciated
        soft_cost_percent: Architecture, engineering and permits as a share of hard cost
        ffe_cost_per_bed: Furniture, fixtures and equipment per bed
        entrepreneurial_incentive: Developer margin on the cost subtotal
        land_value_per_acre: Location type → land value per acre
        default_land_value_per_acre: Used for location types missing from the table
        acres_per_bed: Site area estimate when the profile has no acreage
        square_feet_per_bed: Building area estimate when the profile has no square footage
    """

    construction_cost_per_sf: PositiveFloat
    regional_multipliers: Dict[str, float] = Field(default_factory=dict)
    useful_life_years: PositiveInt = 40
    residual_value_percent: FloatBetween0And1 = 0.20
    soft_cost_percent: FloatBetween0And1 = 0.15
    ffe_cost_per_bed: float = Field(default=15_000, ge=0)
    entrepreneurial_incentive: FloatBetween0And1 = 0.10
    land_value_per_acre: Dict[LocationTypeEnum, float] = Field(default_factory=dict)
    default_land_value_per_acre: float = Field(default=200_000, ge=0)
    acres_per_bed: float = Field(default=0.03, ge=0)
    square_feet_per_bed: PositiveFloat = 450


def _default_settings() -> Dict[AssetTypeEnum, ReplacementCostSettings]:
    return {
        AssetTypeEnum.SNF: ReplacementCostSettings(
            construction_cost_per_sf=350,
            regional_multipliers={
                "west": 1.20,
                "northeast": 1.15,
                "southeast": 0.90,
                "midwest": 0.95,
                "southwest": 0.95,
            },
            useful_life_years=40,
            residual_value_percent=0.20,
            soft_cost_percent=0.15,
            ffe_cost_per_bed=15_000,
            entrepreneurial_incentive=0.10,
            land_value_per_acre={
                LocationTypeEnum.URBAN: 500_000,
                LocationTypeEnum.SUBURBAN: 250_000,
                LocationTypeEnum.RURAL: 75_000,
            },
            acres_per_bed=0.03,
            square_feet_per_bed=450,
        ),
        AssetTypeEnum.ALF: ReplacementCostSettings(
            construction_cost_per_sf=300,
            regional_multipliers={
                "west": 1.20,
                "northeast": 1.15,
                "southeast": 0.90,
                "midwest": 0.95,
                "southwest": 0.95,
            },
            useful_life_years=40,
            residual_value_percent=0.20,
            soft_cost_percent=0.12,
            ffe_cost_per_bed=12_000,
            entrepreneurial_incentive=0.12,
            land_value_per_acre={
                LocationTypeEnum.URBAN: 600_000,
                LocationTypeEnum.SUBURBAN: 300_000,
                LocationTypeEnum.RURAL: 100_000,
            },
            acres_per_bed=0.025,
            square_feet_per_bed=550,
        ),
        AssetTypeEnum.ILF: ReplacementCostSettings(
            construction_cost_per_sf=250,
            regional_multipliers={
                "west": 1.25,
                "northeast": 1.15,
                "southeast": 0.88,
                "midwest": 0.92,
                "southwest": 0.90,
            },
            useful_life_years=45,
            residual_value_percent=0.25,
            soft_cost_percent=0.10,
            ffe_cost_per_bed=8_000,
            entrepreneurial_incentive=0.15,
            land_value_per_acre={
                LocationTypeEnum.URBAN: 750_000,
                LocationTypeEnum.SUBURBAN: 400_000,
                LocationTypeEnum.RURAL: 125_000,
            },
            acres_per_bed=0.02,
            square_feet_per_bed=700,
        ),
    }


class ReplacementCostOptions(MethodOptions):
    """
    Options for the replacement cost method.

    Attributes:
        land_value: Known land value; overrides the acreage estimate
        settings: Cost assumptions replacing the asset type defaults
        functional_obsolescence_percent: Share of the depreciable base lost
            to outdated design (e.g. semi-private rooms)
        external_obsolescence_percent: Share of the depreciable base lost
            to market conditions
    """

    land_value: Optional[PositiveFloat] = Field(default=None)
    settings: Optional[ReplacementCostSettings] = Field(default=None)
    functional_obsolescence_percent: FloatBetween0And1 = 0.0
    external_obsolescence_percent: FloatBetween0And1 = 0.0

    @model_validator(mode="after")
    def validate_obsolescence(self) -> "ReplacementCostOptions":
        total = self.functional_obsolescence_percent + self.external_obsolescence_percent
        if total >= 1:
            raise ValueError(
                f"Combined obsolescence ({total:.0%}) must be below 100% of the depreciable base"
            )
        return self


class ReplacementCostBreakdown(Model):
    """Every component of the cost build-up, in build order."""

    land_value: float
    land_source: AssumptionSourceEnum
    square_footage: float
    square_footage_source: AssumptionSourceEnum
    cost_per_sf: float
    building_cost: float
    soft_costs: float
    ffe_cost: float
    entrepreneurial_incentive: float
    gross_replacement_cost: float
    effective_age: float
    physical_depreciation: float
    functional_obsolescence: float
    external_obsolescence: float

    @property
    def total_depreciation(self) -> float:
        return self.physical_depreciation + self.functional_obsolescence + self.external_obsolescence

    @property
    def depreciated_cost(self) -> float:
        return self.gross_replacement_cost - self.total_depreciation


def effective_age(profile: FacilityFinancialProfile) -> float:
    """
    Building age adjusted for renovation.

    A renovation cuts the effective age back to the years since renovation,
    but never by more than half the actual age.
    """
    age = profile.building_age
    if age is None:
        raise InputError(
            "replacement_cost valuation requires year_built", fields=("year_built",)
        )
    age = max(0, age)
    if profile.year_renovated is None:
        return float(age)
    years_since_renovation = profile.as_of_date.year - profile.year_renovated
    reduction = min(age * RENOVATION_MAX_AGE_REDUCTION, age - years_since_renovation)
    return float(max(0.0, age - reduction))


class ReplacementCostMethod(BaseValuationMethod):
    """
    Cost approach: land plus depreciated cost to rebuild.

    Build-up:
        1. Land: provided value, else acres x value per acre for the location type
        2. Building: square feet x cost per SF x regional multiplier
        3. Soft costs and FF&E on top of the building
        4. Entrepreneurial incentive on the land + building + soft + FF&E subtotal
        5. Straight-line physical depreciation of everything but land over the
           useful life, down to the residual value, plus any obsolescence

    Not part of the default run; it joins when the profile carries square
    footage or replacement cost options are supplied.

    Example:
        ```python
        result = ReplacementCostMethod().evaluate(
            profile, ReplacementCostOptions(land_value=1_500_000)
        )
        ```
    """

    kind: ClassVar[ValuationMethodEnum] = ValuationMethodEnum.REPLACEMENT_COST
    options_type: ClassVar[Type[MethodOptions]] = ReplacementCostOptions

    settings: Dict[AssetTypeEnum, ReplacementCostSettings] = Field(
        default_factory=_default_settings
    )

    def is_applicable(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> bool:
        if profile.year_built is None or profile.beds <= 0:
            return False
        return options is not None or profile.square_footage is not None

    def settings_for(
        self, profile: FacilityFinancialProfile, options: ReplacementCostOptions
    ) -> ReplacementCostSettings:
        if options.settings is not None:
            return options.settings
        return self.settings[profile.asset_type]

    def breakdown(
        self, profile: FacilityFinancialProfile, options: ReplacementCostOptions
    ) -> ReplacementCostBreakdown:
        """Compute the full cost build-up without producing a result."""
        settings = self.settings_for(profile, options)
        beds = require_beds(profile, self.kind)
        age = effective_age(profile)

        if options.land_value is not None:
            land_value = options.land_value
            land_source = AssumptionSourceEnum.PROVIDED
        else:
            acres = profile.acres if profile.acres is not None else beds * settings.acres_per_bed
            per_acre = settings.land_value_per_acre.get(
                profile.location_type, settings.default_land_value_per_acre
            )
            land_value = acres * per_acre
            land_source = (
                AssumptionSourceEnum.DERIVED
                if profile.acres is not None
                else AssumptionSourceEnum.ASSUMED
            )

        if profile.square_footage is not None:
            square_footage = profile.square_footage
            square_footage_source = AssumptionSourceEnum.PROVIDED
        else:
            square_footage = beds * settings.square_feet_per_bed
            square_footage_source = AssumptionSourceEnum.ASSUMED

        region = (profile.region or "").strip().lower()
        cost_per_sf = settings.construction_cost_per_sf * settings.regional_multipliers.get(
            region, 1.0
        )
        building_cost = square_footage * cost_per_sf
        soft_costs = building_cost * settings.soft_cost_percent
        ffe_cost = beds * settings.ffe_cost_per_bed
        subtotal = land_value + building_cost + soft_costs + ffe_cost
        incentive = subtotal * settings.entrepreneurial_incentive
        gross = subtotal + incentive

        # Land does not depreciate
        depreciable_base = gross - land_value
        depreciated_share = (1 - settings.residual_value_percent) * (
            min(age, settings.useful_life_years) / settings.useful_life_years
        )

        return ReplacementCostBreakdown(
            land_value=land_value,
            land_source=land_source,
            square_footage=square_footage,
            square_footage_source=square_footage_source,
            cost_per_sf=cost_per_sf,
            building_cost=building_cost,
            soft_costs=soft_costs,
            ffe_cost=ffe_cost,
            entrepreneurial_incentive=incentive,
            gross_replacement_cost=gross,
            effective_age=age,
            physical_depreciation=depreciable_base * depreciated_share,
            functional_obsolescence=depreciable_base * options.functional_obsolescence_percent,
            external_obsolescence=depreciable_base * options.external_obsolescence_percent,
        )

    def evaluate(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> ValuationResult:
        options = self.resolve_options(options)
        costs = self.breakdown(profile, options)
        settings = self.settings_for(profile, options)
        beds = profile.beds

        value_base = costs.depreciated_cost
        value_low = value_base * (1 - RANGE_SPREAD)
        value_high = value_base * (1 + RANGE_SPREAD)

        assumptions = [
            ValuationAssumption(
                field="land_value",
                value=round_half_up(costs.land_value),
                source=costs.land_source,
                description=(
                    "Land value provided directly"
                    if costs.land_source == AssumptionSourceEnum.PROVIDED
                    else f"Land value estimated for a {profile.location_type.value} site"
                ),
            ),
            ValuationAssumption(
                field="square_footage",
                value=round_half_up(costs.square_footage),
                source=costs.square_footage_source,
                description=(
                    "Building area provided directly"
                    if costs.square_footage_source == AssumptionSourceEnum.PROVIDED
                    else f"Building area estimated at {settings.square_feet_per_bed:,.0f} SF/bed"
                ),
            ),
            ValuationAssumption(
                field="cost_per_sf",
                value=format_currency(costs.cost_per_sf),
                source=AssumptionSourceEnum.ASSUMED,
                description=f"{profile.asset_type.value} construction cost per SF",
            ),
        ]
        calculations = [
            ValuationCalculation(label="Land Value", value=costs.land_value),
            ValuationCalculation(
                label="Building Cost",
                formula="Square Feet x Cost Per SF",
                value=costs.building_cost,
                details=(
                    f"{costs.square_footage:,.0f} SF x {format_currency(costs.cost_per_sf)} = "
                    f"{format_currency(costs.building_cost)}"
                ),
            ),
            ValuationCalculation(
                label="Soft Costs",
                formula=f"Building Cost x {format_percent(settings.soft_cost_percent, 0)}",
                value=costs.soft_costs,
            ),
            ValuationCalculation(
                label="FF&E",
                formula=f"{beds} Beds x {format_currency(settings.ffe_cost_per_bed)}",
                value=costs.ffe_cost,
            ),
            ValuationCalculation(
                label="Entrepreneurial Incentive",
                formula=f"Subtotal x {format_percent(settings.entrepreneurial_incentive, 0)}",
                value=costs.entrepreneurial_incentive,
            ),
            ValuationCalculation(
                label="Gross Replacement Cost", value=costs.gross_replacement_cost
            ),
            ValuationCalculation(
                label="Total Depreciation",
                formula=f"Physical ({costs.effective_age:.0f} effective years) + Obsolescence",
                value=costs.total_depreciation,
            ),
            ValuationCalculation(
                label="Depreciated Replacement Cost",
                formula="Gross Replacement Cost - Total Depreciation",
                value=value_base,
                details=(
                    f"{format_currency(costs.gross_replacement_cost)} - "
                    f"{format_currency(costs.total_depreciation)} = {format_currency(value_base)}"
                ),
            ),
        ]

        confidence = 50.0
        if profile.square_footage is not None:
            confidence += 10
        if profile.acres is not None:
            confidence += 5
        if options.land_value is not None:
            confidence += 10
        if profile.year_renovated is not None:
            confidence += 5
        if 50_000 < value_base / beds < 300_000:
            confidence += 5
        confidence = FinancialCalculations.clamp(confidence, 40, 100)

        logger.debug(
            f"Replacement cost valuation for {profile.facility_id}: gross "
            f"{costs.gross_replacement_cost:,.0f}, depreciation {costs.total_depreciation:,.0f}"
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
                f"Replacement cost of {format_currency(costs.gross_replacement_cost)} "
                f"depreciated over {costs.effective_age:.0f} effective years"
            ),
            inputs_used={
                "beds": beds,
                "noi": profile.ttm_noi,
                "square_footage": costs.square_footage,
                "land_value": costs.land_value,
                "gross_replacement_cost": costs.gross_replacement_cost,
                "total_depreciation": costs.total_depreciation,
                "effective_age": costs.effective_age,
                "asset_type": profile.asset_type.value,
            },
        )
