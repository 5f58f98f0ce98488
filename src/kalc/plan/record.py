# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""PlanRecord: the persistable twin of a compiled plan."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .steps import AwaitStep, BindStep, GatherStep, InvokeStep, Step

__all__ = ("PLAN_RECORD_VERSION", "PlanRecord")

PLAN_RECORD_VERSION = 1


class PlanRecord(BaseModel):
    """Serializable plan: everything except the implementations.

    Implementations are not serializable, so ``formulas`` keeps the
    mapping from each operation's output name to its slot; loading looks
    every name up in a registry and binds the implementation found there.

    Attributes:
        formulas: operation output name -> slot
        params: minimal raw inputs, sorted
        returns: requested outputs, in request order
        is_async: whether invoking the plan returns an awaitable
        body: ordered steps over slots
        version: record format version
    """

    model_config = ConfigDict(frozen=True)

    formulas: dict[str, str] = Field(default_factory=dict)
    params: list[str] = Field(default_factory=list)
    returns: list[str] = Field(default_factory=list)
    is_async: bool = False
    body: list[Step] = Field(default_factory=list)
    version: int = PLAN_RECORD_VERSION

    @property
    def bindings(self) -> dict[str, str]:
        """parameter name -> slot, from the bind step."""
        for step in self.body:
            if isinstance(step, BindStep):
                return dict(step.bindings)
        return {}

    @property
    def formula_ids(self) -> dict[str, str]:
        """Every value name in the plan -> its slot."""
        return {**self.bindings, **self.formulas}

    @property
    def async_slots(self) -> set[str]:
        """Slots filled by awaited formulas."""
        return {slot for slot, (_, awaited) in self.call_shapes.items() if awaited}

    @property
    def call_shapes(self) -> dict[str, tuple[int, bool]]:
        """slot -> (arity, awaited) for every formula the body calls."""
        shapes: dict[str, tuple[int, bool]] = {}
        for step in self.body:
            if isinstance(step, InvokeStep):
                shapes[step.slot] = (len(step.args), False)
            elif isinstance(step, AwaitStep):
                shapes[step.slot] = (len(step.args), True)
            elif isinstance(step, GatherStep):
                for call in step.calls:
                    shapes[call.slot] = (len(call.args), True)
        return shapes
