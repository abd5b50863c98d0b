# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class AssetTypeEnum(str, Enum):
    """
    Healthcare real estate asset classes.

    Attributes:
        SNF: Skilled nursing facility
        ALF: Assisted living facility
        ILF: Independent living facility
    """

    SNF = "SNF"
    ALF = "ALF"
    ILF = "ILF"


class LocationTypeEnum(str, Enum):
    """Market location classification used by location-based adjustments."""

    URBAN = "urban"
    SUBURBAN = "suburban"
    RURAL = "rural"


class AssumptionSourceEnum(str, Enum):
    """
    Provenance of a valuation assumption.

    PROVIDED values came in with the facility snapshot or explicit options,
    MARKET values from market data, DERIVED values were computed from other
    inputs, and ASSUMED values are engine defaults.
    """

    PROVIDED = "provided"
    MARKET = "market"
    DERIVED = "derived"
    ASSUMED = "assumed"


class ValuationMethodEnum(str, Enum):
    """Identifiers of the independent valuation methods."""

    CAP_RATE = "cap_rate"
    PRICE_PER_BED = "price_per_bed"
    COMPARABLE_SALES = "comparable_sales"
    DCF = "dcf"
    NOI_MULTIPLE = "noi_multiple"
    REPLACEMENT_COST = "replacement_cost"


class AdjustmentCategoryEnum(str, Enum):
    """Category of a cap rate risk adjustment."""

    QUALITY = "quality"
    OPERATIONS = "operations"
    COMPLIANCE = "compliance"
    CAPITAL = "capital"
    MARKET = "market"
    OTHER = "other"


class ConfidenceLevelEnum(str, Enum):
    """Qualitative confidence bucket."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskTierEnum(str, Enum):
    """Overall risk tier, ordered from least to most risky."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(RiskTierEnum).index(self)


class CoverageStatusEnum(str, Enum):
    """Rent coverage health relative to partner thresholds."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class FacilityRecommendationEnum(str, Enum):
    """Inclusion recommendation for one facility in a master lease."""

    INCLUDE = "include"
    EXCLUDE = "exclude"
    NEGOTIATE = "negotiate"


class DealRecommendationEnum(str, Enum):
    """
    Portfolio-level deal recommendation, ordered best to worst.

    The ordering is used to compare outcomes: PROCEED < NEGOTIATE < PASS.
    """

    PROCEED = "proceed"
    NEGOTIATE = "negotiate"
    PASS = "pass"

    @property
    def rank(self) -> int:
        return list(DealRecommendationEnum).index(self)


class BuyVsLeaseEnum(str, Enum):
    """Preferred transaction structure."""

    PURCHASE = "purchase"
    LEASE = "lease"
    EITHER = "either"


class IssueSeverityEnum(str, Enum):
    """Severity of an underwriting finding."""

    BLOCKER = "blocker"
    WARNING = "warning"


class EscalationTypeEnum(str, Enum):
    """Annual rent escalation convention."""

    FIXED = "fixed"
    CPI = "cpi"
    GREATER_OF = "greater_of"


class PartnerTypeEnum(str, Enum):
    """Capital partner classification."""

    REIT = "reit"
    PRIVATE_EQUITY = "private_equity"
    REGIONAL_OPERATOR = "regional_operator"
    CUSTOM = "custom"


class RiskToleranceEnum(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class LeaseStructureEnum(str, Enum):
    TRIPLE_NET = "triple_net"
    MODIFIED_GROSS = "modified_gross"
    ABSOLUTE_NET = "absolute_net"


class DecisionImpactEnum(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
