# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
carevalue Core

Shared primitives and the pure financial arithmetic every engine delegates to.
"""

from . import primitives
from .calculations import FinancialCalculations

__all__ = [
    "primitives",
    "FinancialCalculations",
]
