# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Plan steps: the executable body of a compiled plan, as data.

A plan body is an ordered list of steps over numbered slots:

    bind    copy each parameter from the argument map into its slot
    invoke  call a synchronous formula, store the result in its slot
    await   call one asynchronous formula and await it
    gather  start several asynchronous formulas, then await them all
    result  assemble the output dict from slots

Formulas are looked up by slot id, so a body never refers to a callable
and can be persisted as JSON and relinked later.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

__all__ = (
    "AwaitStep",
    "BindStep",
    "Call",
    "GatherStep",
    "InvokeStep",
    "ResultStep",
    "Step",
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Call(_Frozen):
    """Call ``formulas[slot](*slots[args])`` and store into ``slot``."""

    slot: str
    args: tuple[str, ...] = ()


class BindStep(_Frozen):
    kind: Literal["bind"] = "bind"
    bindings: dict[str, str] = Field(
        default_factory=dict, description="parameter name -> slot"
    )


class InvokeStep(Call):
    kind: Literal["invoke"] = "invoke"


class AwaitStep(Call):
    kind: Literal["await"] = "await"


class GatherStep(_Frozen):
    kind: Literal["gather"] = "gather"
    calls: tuple[Call, ...]


class ResultStep(_Frozen):
    kind: Literal["result"] = "result"
    returns: dict[str, str] = Field(
        default_factory=dict, description="output name -> slot"
    )


Step = Annotated[
    Union[BindStep, InvokeStep, AwaitStep, GatherStep, ResultStep],
    Field(discriminator="kind"),
]
