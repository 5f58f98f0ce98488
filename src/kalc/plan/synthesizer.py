# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Plan synthesis: turn a wave schedule into an executable plan.

Every parameter and every scheduled output gets a slot id (``v0``,
``v1``, ... parameters first, then operations wave by wave). The body
binds parameters, runs each wave (synchronous calls first, then the
asynchronous group as a single await or a gather), and finally maps the
requested outputs' slots back to their names.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Sequence

from kalc.graph import Schedule
from kalc.operations import Operation

from .calculator import Calculator
from .record import PlanRecord
from .steps import AwaitStep, BindStep, Call, GatherStep, InvokeStep, ResultStep, Step

__all__ = ("build_record", "synthesize")

logger = logging.getLogger(__name__)


def build_record(
    schedule: Schedule,
    params: Sequence[str],
    returns: Sequence[str],
) -> PlanRecord:
    """Lay out the portable half of a plan.

    Assumes ``schedule`` is valid for ``params``: every operation input is
    either a param or the output of an earlier wave, and every name in
    ``returns`` is one or the other.
    """
    counter = itertools.count()
    bindings = {name: f"v{next(counter)}" for name in params}
    formulas = {op.output: f"v{next(counter)}" for op in schedule.operations}
    ids = {**bindings, **formulas}

    def call(op: Operation) -> dict:
        return {"slot": ids[op.output], "args": tuple(ids[i] for i in op.inputs)}

    body: list[Step] = [BindStep(bindings=bindings)]
    for wave in schedule:
        body.extend(InvokeStep(**call(op)) for op in wave.sync_group)
        if len(wave.async_group) == 1:
            body.append(AwaitStep(**call(wave.async_group[0])))
        elif wave.async_group:
            body.append(GatherStep(calls=tuple(Call(**call(op)) for op in wave.async_group)))
    body.append(ResultStep(returns={name: ids[name] for name in returns}))

    return PlanRecord(
        formulas=formulas,
        params=list(params),
        returns=list(dict.fromkeys(returns)),
        is_async=schedule.is_async,
        body=body,
    )


def synthesize(
    schedule: Schedule,
    params: Sequence[str],
    returns: Sequence[str],
    operations: Iterable[Operation],
) -> Calculator:
    """Build an executable plan from a schedule.

    Args:
        schedule: Waves of required operations.
        params: Minimal raw inputs.
        returns: Requested outputs.
        operations: Operations used for missing-argument diagnostics.

    Returns:
        Calculator bound to the scheduled operations' implementations.
    """
    record = build_record(schedule, params, returns)
    formulas = {record.formulas[op.output]: op.impl for op in schedule.operations}
    logger.debug(
        "Synthesized plan for %s: %d waves, params=%s",
        record.returns,
        len(schedule),
        record.params,
    )
    return Calculator(record, formulas, operations)
