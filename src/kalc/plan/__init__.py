# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Plans: synthesis, execution and persistence of compiled queries.

Core types:
    Calculator: executable plan (sync call or coroutine).
    PlanRecord: persistable twin of a Calculator.
    Step: bind / invoke / await / gather / result.

Functions:
    synthesize(): Schedule -> Calculator.
    serialize() / dumps(): Calculator -> PlanRecord / JSON.
    deserialize(): record or JSON + registry -> Calculator.
"""

from __future__ import annotations

from .calculator import Calculator
from .codec import deserialize, dumps, loads, serialize
from .record import PLAN_RECORD_VERSION, PlanRecord
from .steps import AwaitStep, BindStep, Call, GatherStep, InvokeStep, ResultStep, Step
from .synthesizer import build_record, synthesize

__all__ = (
    "PLAN_RECORD_VERSION",
    "AwaitStep",
    "BindStep",
    "Calculator",
    "Call",
    "GatherStep",
    "InvokeStep",
    "PlanRecord",
    "ResultStep",
    "Step",
    "build_record",
    "deserialize",
    "dumps",
    "loads",
    "serialize",
    "synthesize",
)
