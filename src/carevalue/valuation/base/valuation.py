# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Base Valuation Classes

Common capability shared by every valuation method so the reconciler can
iterate a list of methods without knowing their concrete identities.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, List, Optional, Tuple, Type

from pydantic import Field

from ...core.primitives import (
    AssumptionSourceEnum,
    InputError,
    Model,
    ValuationMethodEnum,
)
from ...facility import FacilityFinancialProfile
from ..market import DEFAULT_MARKET, MarketDefaults
from ..results import (
    ValuationAssumption,
    ValuationCalculation,
    ValuationResult,
    format_currency,
)


class MethodOptions(Model):
    """Base class for per-call method options."""


class BaseValuationMethod(Model, ABC):
    """
    Abstract base class for all valuation methods.

    Each method is a pure mapping ``(profile, options) -> ValuationResult``.
    Methods raise ``InputError`` naming the missing field(s) when their
    mandatory inputs are absent; they never substitute a silent zero.

    Attributes:
        market: Market default tables consulted when the profile lacks data
    """

    kind: ClassVar[ValuationMethodEnum]
    options_type: ClassVar[Type[MethodOptions]] = MethodOptions

    market: MarketDefaults = Field(default=DEFAULT_MARKET)

    @abstractmethod
    def evaluate(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> ValuationResult:
        """
        Value the facility with this method.

        Args:
            profile: Facility snapshot
            options: Method options; defaults are used when omitted

        Returns:
            ValuationResult with range, confidence and provenance trails

        Raises:
            InputError: If mandatory inputs are missing or invalid
        """
        pass

    def is_applicable(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> bool:
        """
        Cheap pre-check of prerequisite data.

        Override in subclasses whose prerequisites are optional data (comparable
        sales, NOI multiple) so the reconciler can leave them out of default runs.
        """
        return True

    def resolve_options(self, options: Optional[MethodOptions]) -> MethodOptions:
        """Return ``options`` or the method's default options."""
        if options is None:
            return self.options_type()
        if not isinstance(options, self.options_type):
            raise TypeError(
                f"{self.kind.value} expects {self.options_type.__name__}, "
                f"got {type(options).__name__}"
            )
        return options


def require_beds(profile: FacilityFinancialProfile, method: ValuationMethodEnum) -> int:
    """Bed count guard shared by every per-bed calculation."""
    if profile.beds <= 0:
        raise InputError(
            f"{method.value} valuation requires a positive bed count, got {profile.beds}",
            fields=("beds",),
        )
    return profile.beds


def resolve_noi(
    profile: FacilityFinancialProfile,
    market: MarketDefaults,
    method: ValuationMethodEnum,
    allow_revenue_only: bool = True,
) -> Tuple[float, AssumptionSourceEnum, List[ValuationAssumption], List[ValuationCalculation]]:
    """
    Resolve the NOI an income method should capitalize.

    Priority: provided NOI → EBITDAR less estimated rent → revenue times the
    asset type's typical NOI margin (only when ``allow_revenue_only``).

    Returns:
        (noi, source, assumptions, calculations)

    Raises:
        InputError: If no income figure is available or the resolved NOI is
            not positive
    """
    assumptions: List[ValuationAssumption] = []
    calculations: List[ValuationCalculation] = []
    rent_ratio = market.estimated_rent_ratio

    if profile.ttm_noi:
        noi = profile.ttm_noi
        source = AssumptionSourceEnum.PROVIDED
        assumptions.append(
            ValuationAssumption(
                field="noi", value=noi, source=source, description="NOI provided directly"
            )
        )
    elif profile.ttm_ebitdar:
        estimated_rent = (profile.ttm_revenue or 0.0) * rent_ratio
        noi = profile.ttm_ebitdar - estimated_rent
        source = AssumptionSourceEnum.DERIVED
        assumptions.append(
            ValuationAssumption(
                field="noi",
                value=noi,
                source=source,
                description=(
                    f"NOI derived from EBITDAR less estimated rent "
                    f"({rent_ratio * 100:.0f}% of revenue)"
                ),
            )
        )
        calculations.append(
            ValuationCalculation(
                label="NOI from EBITDAR",
                formula=f"EBITDAR - Estimated Rent ({rent_ratio * 100:.0f}% of Revenue)",
                value=noi,
                details=(
                    f"{format_currency(profile.ttm_ebitdar)} - {format_currency(estimated_rent)}"
                    f" = {format_currency(noi)}"
                ),
            )
        )
    elif allow_revenue_only and profile.ttm_revenue:
        margin = market.for_asset(profile.asset_type).noi_margin
        noi = profile.ttm_revenue * margin
        source = AssumptionSourceEnum.DERIVED
        assumptions.append(
            ValuationAssumption(
                field="noi",
                value=noi,
                source=source,
                description=(
                    f"NOI estimated from revenue at a {margin * 100:.0f}% "
                    f"{profile.asset_type.value} NOI margin"
                ),
            )
        )
        calculations.append(
            ValuationCalculation(
                label="NOI from Revenue",
                formula=f"Revenue x {margin * 100:.0f}% NOI Margin",
                value=noi,
                details=f"{format_currency(profile.ttm_revenue)} x {margin:.2f} = {format_currency(noi)}",
            )
        )
    else:
        fields = ("ttm_noi", "ttm_ebitdar", "ttm_revenue") if allow_revenue_only else (
            "ttm_noi",
            "ttm_ebitdar",
        )
        raise InputError(
            f"{method.value} valuation requires {' or '.join(fields)}", fields=fields
        )

    if noi <= 0:
        raise InputError(
            f"{method.value} valuation requires a positive NOI, resolved {noi:,.0f}",
            fields=("ttm_noi",),
        )

    return noi, source, assumptions, calculations
