# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Graph: requirement discovery and wave scheduling."""

from __future__ import annotations

from .scheduler import Schedule, Wave, schedule
from .traversal import Requirements, find_cycle, traverse

__all__ = ("Requirements", "Schedule", "Wave", "find_cycle", "schedule", "traverse")
