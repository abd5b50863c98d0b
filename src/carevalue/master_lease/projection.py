# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Multi-phase lease cash-flow projection.

Rent escalates annually from the portfolio's year-one rent across the initial
term and any renewal terms. Each year is discounted at the deal discount rate;
EBITDAR grows at the NOI growth rate to give projected coverage.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

import numpy as np

from ..core.calculations import FinancialCalculations
from ..partners import PartnerLeaseTerms, PartnerProfile
from .results import LeaseProjection, PortfolioSummary, YearProjection
from .settings import MasterLeaseOptions

logger = logging.getLogger(__name__)

INITIAL_PHASE = "initial"


def lease_phase(year: int, initial_term_years: int, renewal_term_years: int) -> str:
    """Phase label for a lease year: ``initial`` or ``renewal_<n>``."""
    if year <= initial_term_years or renewal_term_years <= 0:
        return INITIAL_PHASE
    renewal_year = year - initial_term_years
    return f"renewal_{math.ceil(renewal_year / renewal_term_years)}"


def projection_escalation(terms: PartnerLeaseTerms, options: MasterLeaseOptions) -> float:
    """Custom escalation when given, else the partner's effective escalation."""
    if options.custom_escalation is not None:
        return options.custom_escalation
    return terms.effective_escalation


def purchase_option_irr(
    summary: PortfolioSummary,
    rents: np.ndarray,
    exercise_year: int,
    terms: PartnerLeaseTerms,
    escalation: float,
    noi_growth_rate: float,
) -> Optional[float]:
    """
    Landlord IRR when the tenant exercises a purchase option.

    Cash flows: purchase price out at time zero, rent for years
    1..``exercise_year``, and the option price received with the final rent.
    A fair-market-value option prices grown NOI at the entry cap rate; any
    other formula escalates the original price at the lease escalation.
    """
    if exercise_year > len(rents) or summary.total_purchase_price <= 0:
        return None

    formula = (terms.purchase_option_formula or "FMV").upper()
    if formula.startswith("FMV"):
        grown_noi = summary.total_noi * (1 + noi_growth_rate) ** exercise_year
        option_price = FinancialCalculations.safe_divide(grown_noi, summary.weighted_cap_rate)
    else:
        option_price = summary.total_purchase_price * (1 + escalation) ** exercise_year

    flows = [-summary.total_purchase_price] + rents[:exercise_year].tolist()
    flows[-1] += option_price
    return FinancialCalculations.calculate_irr(flows)


def calculate_lease_projection(
    summary: PortfolioSummary,
    partner: PartnerProfile,
    options: Optional[MasterLeaseOptions] = None,
) -> LeaseProjection:
    """
    Project rent year by year over the full potential lease term.

    Year ``y`` rent is ``total_annual_rent * (1 + escalation) ** (y - 1)``,
    discounted by ``1 / (1 + discount_rate) ** y``. Renewal terms are
    dropped when ``include_renewals`` is false. The renewal option value is
    the summed present value of renewal-phase years.

    Example:
        ```python
        projection = calculate_lease_projection(summary, get_partner_profile("caretrust"))
        projection.to_dataframe()[["phase", "annual_rent", "present_value"]]
        ```
    """
    options = options or MasterLeaseOptions()
    terms = partner.lease_terms

    renewal_options = terms.renewal_options if options.include_renewals else 0
    total_years = terms.initial_term_years + renewal_options * terms.renewal_term_years
    escalation = projection_escalation(terms, options)

    rents = FinancialCalculations.escalation_schedule(
        summary.total_annual_rent, escalation, total_years
    )
    factors = FinancialCalculations.discount_factors(options.discount_rate, total_years)
    present_values = rents * factors
    cumulative = np.cumsum(rents)
    ebitdar = summary.total_ebitdar * np.power(
        1.0 + options.noi_growth_rate, np.arange(1, total_years + 1, dtype=float)
    )

    yearly: List[YearProjection] = []
    for index in range(total_years):
        year = index + 1
        rent = float(rents[index])
        yearly.append(
            YearProjection(
                year=year,
                phase=lease_phase(year, terms.initial_term_years, terms.renewal_term_years),
                annual_rent=rent,
                cumulative_rent=float(cumulative[index]),
                discount_factor=float(factors[index]),
                present_value=float(present_values[index]),
                projected_ebitdar=float(ebitdar[index]),
                projected_coverage=FinancialCalculations.coverage_ratio(
                    float(ebitdar[index]), rent
                ),
            )
        )

    lease_npv = sum(p.present_value for p in yearly)
    total_obligation = yearly[-1].cumulative_rent if yearly else 0.0
    renewal_value = sum(p.present_value for p in yearly if p.phase != INITIAL_PHASE)

    option_year = terms.first_purchase_option_year
    option_irr = None
    if option_year is not None:
        option_irr = purchase_option_irr(
            summary, rents, option_year, terms, escalation, options.noi_growth_rate
        )

    logger.debug(
        f"Lease projection: {total_years} years at {escalation:.4f} escalation, "
        f"NPV {lease_npv:,.0f}"
    )

    return LeaseProjection(
        initial_term_years=terms.initial_term_years,
        renewal_options=renewal_options,
        renewal_term_years=terms.renewal_term_years,
        total_potential_years=total_years,
        escalation_rate=escalation,
        yearly_projections=yearly,
        lease_npv=lease_npv,
        total_lease_obligation=total_obligation,
        avg_annual_rent=FinancialCalculations.safe_divide(total_obligation, total_years),
        renewal_option_value=renewal_value,
        purchase_option_year=option_year,
        purchase_option_irr=option_irr,
    )
