# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Capital Partners

Partner profiles (economics, lease terms, underwriting, asset preferences),
preset REIT / private equity / regional operator profiles, underwriting checks
and single-facility deal economics.
"""

from .economics import (
    DealEconomics,
    calculate_deal_economics,
    coverage_status,
    lease_npv,
)
from .presets import (
    PARTNER_PROFILES,
    all_partner_profiles,
    create_custom_profile,
    get_partner_profile,
)
from .profiles import (
    AssetPreferences,
    PartnerEconomics,
    PartnerLeaseTerms,
    PartnerProfile,
    PartnerUnderwriting,
)
from .underwriting import (
    UnderwritingCheckResult,
    UnderwritingIssue,
    check_underwriting_criteria,
    underwriting_score,
)

__all__ = [
    # Profiles
    "PartnerProfile",
    "PartnerEconomics",
    "PartnerLeaseTerms",
    "PartnerUnderwriting",
    "AssetPreferences",
    # Presets
    "PARTNER_PROFILES",
    "get_partner_profile",
    "all_partner_profiles",
    "create_custom_profile",
    # Underwriting
    "UnderwritingCheckResult",
    "UnderwritingIssue",
    "check_underwriting_criteria",
    "underwriting_score",
    # Economics
    "DealEconomics",
    "calculate_deal_economics",
    "coverage_status",
    "lease_npv",
]
