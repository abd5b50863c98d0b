# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Core Primitives

Building blocks shared by every engine: the immutable base model, constrained
numeric types, enums, bracket tables and the error taxonomy.
"""

from .brackets import Bracket, BracketTable, first_matching_bracket
from .enums import (
    AdjustmentCategoryEnum,
    AssetTypeEnum,
    AssumptionSourceEnum,
    BuyVsLeaseEnum,
    ConfidenceLevelEnum,
    CoverageStatusEnum,
    DealRecommendationEnum,
    DecisionImpactEnum,
    EscalationTypeEnum,
    FacilityRecommendationEnum,
    IssueSeverityEnum,
    LeaseStructureEnum,
    LocationTypeEnum,
    PartnerTypeEnum,
    RiskToleranceEnum,
    RiskTierEnum,
    ValuationMethodEnum,
)
from .errors import InputError, NoApplicableMethodError
from .model import Model
from .types import CapRate, FloatBetween0And1, PositiveFloat, PositiveInt, StarRating

__all__ = [
    # Core model
    "Model",
    # Brackets
    "Bracket",
    "BracketTable",
    "first_matching_bracket",
    # Enums
    "AdjustmentCategoryEnum",
    "AssetTypeEnum",
    "AssumptionSourceEnum",
    "BuyVsLeaseEnum",
    "ConfidenceLevelEnum",
    "CoverageStatusEnum",
    "DealRecommendationEnum",
    "DecisionImpactEnum",
    "EscalationTypeEnum",
    "FacilityRecommendationEnum",
    "IssueSeverityEnum",
    "LeaseStructureEnum",
    "LocationTypeEnum",
    "PartnerTypeEnum",
    "RiskToleranceEnum",
    "RiskTierEnum",
    "ValuationMethodEnum",
    # Errors
    "InputError",
    "NoApplicableMethodError",
    # Types
    "CapRate",
    "FloatBetween0And1",
    "PositiveFloat",
    "PositiveInt",
    "StarRating",
]
