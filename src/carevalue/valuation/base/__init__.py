# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .valuation import BaseValuationMethod, MethodOptions, require_beds, resolve_noi

__all__ = [
    "BaseValuationMethod",
    "MethodOptions",
    "require_beds",
    "resolve_noi",
]
