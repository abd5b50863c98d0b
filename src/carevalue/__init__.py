# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
carevalue - Healthcare Real Estate Valuation and Deal Economics

Deterministic valuation and deal-economics engine for skilled nursing,
assisted living and independent living acquisitions.

Key Entry Points:
- carevalue.valuation.ValuationReconciler - Multi-method facility valuation
- carevalue.risk.calculate_risk_adjusted_valuation() - Risk-adjusted cap rate
- carevalue.partners.get_partner_profile() - Capital partner presets
- carevalue.master_lease.analyze_master_lease() - Portfolio lease decision

Example Usage:
    ```python
    from carevalue.facility import FacilityFinancialProfile
    from carevalue.valuation import ValuationReconciler

    profile = FacilityFinancialProfile(
        facility_id="fac-001",
        name="Maple Grove Care Center",
        beds=120,
        state="OH",
        ttm_noi=2_000_000,
    )
    summary = ValuationReconciler().reconcile(profile)
    print(f"Recommended value: ${summary.recommended_value:,.0f}")
    ```
"""

import importlib
import logging

# Library logging: applications configure their own handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "core",
    "facility",
    "master_lease",
    "partners",
    "risk",
    "valuation",
]


_LAZY_MODULES = {
    "core": "carevalue.core",
    "facility": "carevalue.facility",
    "master_lease": "carevalue.master_lease",
    "partners": "carevalue.partners",
    "risk": "carevalue.risk",
    "valuation": "carevalue.valuation",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'carevalue' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
