# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Immutable models: facility snapshots, option objects, settings tables and
    results are all frozen once built. Nothing in the engine mutates a model
    after construction; derived values are returned as new models.
    """

    model_config = ConfigDict(
        frozen=True,  # Snapshots and results never change mid-run
        extra="forbid",  # Catches typos in option names immediately
    )
