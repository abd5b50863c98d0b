# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Deal economics for one facility under a partner's pricing.

Purchase price capitalizes NOI at the partner cap rate, rent applies the
partner yield to that price, and coverage is EBITDAR over rent. Lease NPV and
total obligation run over the full potential term (initial plus renewals).
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from pydantic import Field

from ..core.calculations import FinancialCalculations
from ..core.primitives import CoverageStatusEnum, InputError, Model
from .profiles import PartnerEconomics, PartnerLeaseTerms, PartnerProfile

logger = logging.getLogger(__name__)

DEFAULT_DISCOUNT_RATE = 0.08


class DealEconomics(Model):
    """Pricing, rent and coverage for one facility."""

    purchase_price: float
    annual_rent: float
    monthly_rent: float
    implied_cap_rate: float
    implied_yield: float
    coverage_ratio: float
    coverage_status: CoverageStatusEnum
    meets_partner_criteria: bool = Field(
        ..., description="Coverage at or above the partner minimum"
    )

    # === LEASE VALUE ===
    lease_npv: float
    total_lease_obligation: float

    # === HEADROOM ===
    max_rent_at_target_coverage: float
    min_purchase_price_at_target_yield: float


def coverage_status(ratio: float, economics: PartnerEconomics) -> CoverageStatusEnum:
    """
    Classify coverage against partner thresholds.

    Boundaries are inclusive: a ratio equal to the target is healthy and a
    ratio equal to the warning level is a warning.
    """
    if ratio >= economics.target_coverage_ratio:
        return CoverageStatusEnum.HEALTHY
    if ratio >= economics.warning_coverage_ratio:
        return CoverageStatusEnum.WARNING
    return CoverageStatusEnum.CRITICAL


def lease_npv(
    base_rent: float, terms: PartnerLeaseTerms, discount_rate: float
) -> Tuple[float, float]:
    """
    Present value and undiscounted total of rent over the full potential term.

    Returns:
        (npv, total_obligation)
    """
    years = terms.total_years
    rents = FinancialCalculations.escalation_schedule(base_rent, terms.effective_escalation, years)
    factors = FinancialCalculations.discount_factors(discount_rate, years)
    return float((rents * factors).sum()), float(rents.sum())


def calculate_deal_economics(
    partner: PartnerProfile,
    noi: float,
    ebitdar: float,
    custom_cap_rate: Optional[float] = None,
    custom_yield: Optional[float] = None,
    discount_rate: float = DEFAULT_DISCOUNT_RATE,
) -> DealEconomics:
    """
    Price and lease one facility for a partner.

    Args:
        partner: Partner whose economics apply
        noi: Trailing NOI
        ebitdar: Trailing EBITDAR
        custom_cap_rate: Replaces the partner target cap rate
        custom_yield: Replaces the partner target yield
        discount_rate: Rate for the lease NPV

    Raises:
        InputError: If a custom cap rate or yield is not positive

    Example:
        ```python
        deal = calculate_deal_economics(get_partner_profile("sabra"), 2_000_000, 3_000_000)
        deal.purchase_price  # 27_586_206.90 (2M / 7.25%)
        ```
    """
    econ = partner.economics
    cap_rate = custom_cap_rate if custom_cap_rate is not None else econ.target_cap_rate
    yield_rate = custom_yield if custom_yield is not None else econ.target_yield
    if cap_rate <= 0:
        raise InputError("Cap rate must be positive", fields=("custom_cap_rate",))
    if yield_rate <= 0:
        raise InputError("Yield must be positive", fields=("custom_yield",))

    purchase_price = noi / cap_rate
    annual_rent = purchase_price * yield_rate
    ratio = FinancialCalculations.coverage_ratio(ebitdar, annual_rent)
    npv, obligation = lease_npv(annual_rent, partner.lease_terms, discount_rate)

    max_rent = ebitdar / econ.target_coverage_ratio

    return DealEconomics(
        purchase_price=purchase_price,
        annual_rent=annual_rent,
        monthly_rent=annual_rent / 12,
        implied_cap_rate=cap_rate,
        implied_yield=yield_rate,
        coverage_ratio=ratio,
        coverage_status=coverage_status(ratio, econ),
        meets_partner_criteria=ratio >= econ.min_coverage_ratio,
        lease_npv=npv,
        total_lease_obligation=obligation,
        max_rent_at_target_coverage=max_rent,
        min_purchase_price_at_target_yield=max_rent / econ.target_yield,
    )
