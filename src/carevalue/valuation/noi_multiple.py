# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
NOI Multiple Valuation - Value = NOI x Multiple

Simplified heuristic; carries a fixed moderate confidence.
"""

from __future__ import annotations

import logging
from typing import ClassVar, List, Optional, Type

from pydantic import Field

from ..core.calculations import FinancialCalculations
from ..core.primitives import AssumptionSourceEnum, InputError, ValuationMethodEnum
from ..facility import FacilityFinancialProfile
from .base import BaseValuationMethod, MethodOptions
from .results import (
    ValuationAssumption,
    ValuationCalculation,
    ValuationResult,
    format_currency,
)

logger = logging.getLogger(__name__)

round_half_up = FinancialCalculations.round_half_up


class NOIMultipleOptions(MethodOptions):
    """Explicit multiple; overrides ``profile.noi_multiple``."""

    multiple: Optional[float] = Field(default=None, gt=0)


class NOIMultipleMethod(BaseValuationMethod):
    """NOI times a market multiple, with a +/- 0.5x range."""

    kind: ClassVar[ValuationMethodEnum] = ValuationMethodEnum.NOI_MULTIPLE
    options_type: ClassVar[Type[MethodOptions]] = NOIMultipleOptions

    confidence: float = Field(default=65.0, ge=0, le=100)
    multiple_spread: float = Field(default=0.5, ge=0)

    def is_applicable(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> bool:
        explicit = getattr(options, "multiple", None) if options is not None else None
        return bool(profile.ttm_noi) and (explicit is not None or profile.noi_multiple is not None)

    def evaluate(
        self,
        profile: FacilityFinancialProfile,
        options: Optional[MethodOptions] = None,
    ) -> ValuationResult:
        options = self.resolve_options(options)

        missing: List[str] = []
        if not profile.ttm_noi or profile.ttm_noi <= 0:
            missing.append("ttm_noi")
        if options.multiple is not None:
            multiple = options.multiple
            source = AssumptionSourceEnum.PROVIDED
        elif profile.noi_multiple is not None:
            multiple = profile.noi_multiple
            source = AssumptionSourceEnum.MARKET
        else:
            multiple = None
            missing.append("noi_multiple")
        if missing:
            raise InputError(
                "NOI multiple valuation requires a positive NOI and a multiple", fields=missing
            )

        noi = profile.ttm_noi
        value_base = noi * multiple
        value_low = noi * max(multiple - self.multiple_spread, 0.0)
        value_high = noi * (multiple + self.multiple_spread)

        logger.debug(f"NOI multiple valuation for {profile.facility_id}: {multiple:.2f}x")

        return ValuationResult(
            method=self.kind,
            value=round_half_up(value_base),
            value_low=round_half_up(value_low),
            value_high=round_half_up(value_high),
            confidence=self.confidence,
            assumptions=[
                ValuationAssumption(
                    field="noi",
                    value=noi,
                    source=AssumptionSourceEnum.PROVIDED,
                    description="NOI provided directly",
                ),
                ValuationAssumption(
                    field="noi_multiple",
                    value=f"{multiple:.2f}x",
                    source=source,
                    description="NOI multiple applied to trailing NOI",
                ),
            ],
            calculations=[
                ValuationCalculation(
                    label="Base Value",
                    formula="NOI x Multiple",
                    value=value_base,
                    details=f"{format_currency(noi)} x {multiple:.2f} = {format_currency(value_base)}",
                ),
                ValuationCalculation(
                    label="Value Low",
                    formula=f"NOI x {max(multiple - self.multiple_spread, 0.0):.2f}",
                    value=value_low,
                ),
                ValuationCalculation(
                    label="Value High",
                    formula=f"NOI x {multiple + self.multiple_spread:.2f}",
                    value=value_high,
                ),
            ],
            notes=f"NOI multiple valuation at {multiple:.2f}x trailing NOI",
            inputs_used={
                "noi": noi,
                "noi_multiple": multiple,
                "beds": profile.beds if profile.beds > 0 else None,
            },
        )
