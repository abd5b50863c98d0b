# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Facility inputs: financial snapshots, portfolio records and market signals.
"""

from .market import MarketConditions
from .profile import FacilityFinancialProfile, PortfolioFacility

__all__ = [
    "FacilityFinancialProfile",
    "MarketConditions",
    "PortfolioFacility",
]
