# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Compiler configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

__all__ = ("CompilerConfig", "DuplicatePolicy")

DuplicatePolicy = Literal["override", "error"]


class CompilerConfig(BaseModel):
    """Configuration for a Compiler and the registry it builds.

    Attributes:
        on_duplicate: What registering an existing output name does.
            "override" replaces the prior operation (last write wins),
            "error" raises DuplicateOperationError.
        cache_plans: Memoize compiled plans per query shape.
        params_cache_size: Entries kept in the (wanted, hint) -> params
            memo. 0 disables it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    on_duplicate: DuplicatePolicy = Field(default="override")
    cache_plans: bool = Field(default=True)
    params_cache_size: int = Field(default=256, ge=0)
