# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Portfolio sensitivity sweeps and break-even measures.

Each sweep moves one parameter across its grid and holds everything else at
the portfolio summary values.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..core.calculations import FinancialCalculations
from ..partners import PartnerProfile
from .results import (
    CapRateSensitivityRow,
    EscalationSensitivityRow,
    NOISensitivityRow,
    OccupancySensitivityRow,
    PortfolioSummary,
    SensitivityAnalysis,
)
from .settings import (
    DEFAULT_MASTER_LEASE_SETTINGS,
    MasterLeaseOptions,
    MasterLeaseSettings,
)

divide = FinancialCalculations.safe_divide
coverage_ratio = FinancialCalculations.coverage_ratio


def calculate_sensitivity(
    summary: PortfolioSummary,
    partner: PartnerProfile,
    options: Optional[MasterLeaseOptions] = None,
    settings: Optional[MasterLeaseSettings] = None,
) -> SensitivityAnalysis:
    """
    Sweep cap rate, NOI, occupancy and escalation; compute break-even points.

    - Cap rate: price = NOI / cap, rent = price x yield, coverage = EBITDAR / rent
    - NOI shock: price at the weighted cap rate, EBITDAR shocked by the same share
    - Occupancy: NOI and EBITDAR scale with occupancy / current occupancy
    - Escalation: year-5 and year-10 rent, total rent over ``projection_years``

    Break-even occupancy is ``occupancy x min_coverage / coverage``, the
    break-even NOI decline ``1 - min_coverage / coverage`` and the cushion
    ``coverage / min_coverage - 1``. With no rent (zero coverage) both
    break-even figures are 0.0.
    """
    options = options or MasterLeaseOptions()
    grids = (settings or DEFAULT_MASTER_LEASE_SETTINGS).grids
    econ = partner.economics
    yield_rate = options.custom_yield if options.custom_yield is not None else econ.target_yield

    noi = summary.total_noi
    ebitdar = summary.total_ebitdar
    rent = summary.total_annual_rent
    coverage = summary.portfolio_coverage_ratio

    cap_rate_rows = []
    for cap_rate in grids.cap_rates:
        price = noi / cap_rate
        annual_rent = price * yield_rate
        cap_rate_rows.append(
            CapRateSensitivityRow(
                cap_rate=cap_rate,
                purchase_price=price,
                annual_rent=annual_rent,
                coverage=coverage_ratio(ebitdar, annual_rent),
            )
        )

    noi_rows = [
        NOISensitivityRow(
            noi_change=change,
            purchase_price=divide(noi * (1 + change), summary.weighted_cap_rate),
            coverage=coverage_ratio(ebitdar * (1 + change), rent),
        )
        for change in grids.noi_changes
    ]

    occupancy_rows = []
    for occupancy in grids.occupancies:
        factor = divide(occupancy, summary.avg_occupancy)
        occupancy_rows.append(
            OccupancySensitivityRow(
                occupancy=occupancy,
                projected_noi=noi * factor,
                coverage=coverage_ratio(ebitdar * factor, rent),
            )
        )

    escalation_rows = []
    for escalation in grids.escalations:
        schedule = FinancialCalculations.escalation_schedule(
            rent, escalation, max(options.projection_years, 10)
        )
        escalation_rows.append(
            EscalationSensitivityRow(
                escalation=escalation,
                year_5_rent=float(schedule[4]),
                year_10_rent=float(schedule[9]),
                total_lease_obligation=float(np.sum(schedule[: options.projection_years])),
            )
        )

    if coverage > 0:
        break_even_occupancy = summary.avg_occupancy * econ.min_coverage_ratio / coverage
        break_even_noi_decline = 1 - econ.min_coverage_ratio / coverage
    else:
        break_even_occupancy = 0.0
        break_even_noi_decline = 0.0

    return SensitivityAnalysis(
        cap_rate_sensitivity=cap_rate_rows,
        noi_sensitivity=noi_rows,
        occupancy_sensitivity=occupancy_rows,
        escalation_sensitivity=escalation_rows,
        break_even_occupancy=break_even_occupancy,
        break_even_noi_decline=break_even_noi_decline,
        cushion_to_breakeven=coverage / econ.min_coverage_ratio - 1,
    )
