# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Engine error taxonomy.

Both errors subclass ``ValueError`` so callers that already guard valuation
calls with ``except ValueError`` keep working.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional


class InputError(ValueError):
    """
    A mandatory numeric input is missing or invalid.

    Raised synchronously by the method that needs the input. ``fields`` names
    the offending profile/option fields so the surrounding application can tell
    the user exactly what to supply.
    """

    def __init__(self, message: str, fields: Iterable[str] = ()):
        self.fields = tuple(fields)
        if self.fields:
            message = f"{message} (fields: {', '.join(self.fields)})"
        super().__init__(message)


class NoApplicableMethodError(ValueError):
    """Every requested valuation method was inapplicable or failed."""

    def __init__(self, skipped: Optional[Dict[str, str]] = None):
        self.skipped = dict(skipped or {})
        details = "; ".join(f"{method}: {reason}" for method, reason in self.skipped.items())
        message = "No valuation methods could be applied with the provided inputs"
        if details:
            message = f"{message} ({details})"
        super().__init__(message)
