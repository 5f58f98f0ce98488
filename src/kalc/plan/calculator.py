# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Calculator: the in-process executable form of a compiled plan.

A Calculator runs a PlanRecord's body against a table of linked
implementations. Plans without asynchronous steps run as plain function
calls; plans with them return a coroutine.

    calc = compiler.get_or_compile(["addOne"])
    calc({"x": 3})                  # {'addOne': 7}

    acalc = compiler.get_or_compile(["report"])
    await acalc({"url": "..."})     # async plan
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from functools import partial
from typing import Any

from kalc.diagnostics import missing_arguments
from kalc.operations import Operation, OperationRegistry
from kalc.utils.concurrency import gather

from .record import PlanRecord
from .steps import AwaitStep, BindStep, GatherStep, InvokeStep, ResultStep

__all__ = ("Calculator",)


class Calculator:
    """Executable compiled plan.

    Attributes:
        record: The plan's persistable twin.
        formulas: slot -> implementation, for every operation in the plan.
        operations: Operations consulted when reporting which outputs a
            missing argument blocks (normally the whole registry). A
            registry is kept as a live view; any other iterable is
            copied to a tuple.
    """

    def __init__(
        self,
        record: PlanRecord,
        formulas: Mapping[str, Callable[..., Any]],
        operations: Iterable[Operation],
    ):
        self.record = record
        self.formulas = dict(formulas)
        if not isinstance(operations, OperationRegistry):
            operations = tuple(operations)
        self.operations = operations

    @property
    def params(self) -> list[str]:
        return list(self.record.params)

    @property
    def returns(self) -> list[str]:
        return list(self.record.returns)

    @property
    def is_async(self) -> bool:
        return self.record.is_async

    @property
    def formula_ids(self) -> dict[str, str]:
        return self.record.formula_ids

    def check(self, args: Mapping[str, Any]) -> None:
        """Raise MissingArgumentsError unless every param is in ``args``."""
        missing = [p for p in self.record.params if p not in args]
        if missing:
            raise missing_arguments(self.operations, missing)

    def __call__(self, args: Mapping[str, Any]) -> Any:
        """Run the plan.

        Arguments are checked before anything is computed.

        Returns:
            Output dict, or a coroutine resolving to it for async plans.

        Raises:
            MissingArgumentsError: If a param is absent from ``args``.
        """
        self.check(args)
        if self.record.is_async:
            return self._run_async(args)
        return self._run(args)

    def _run(self, args: Mapping[str, Any]) -> dict[str, Any]:
        slots: dict[str, Any] = {}
        for step in self.record.body:
            if isinstance(step, InvokeStep):
                slots[step.slot] = self._invoke(slots, step.slot, step.args)
            elif isinstance(step, BindStep):
                for name, slot in step.bindings.items():
                    slots[slot] = args[name]
            elif isinstance(step, ResultStep):
                return {name: slots[slot] for name, slot in step.returns.items()}
            else:
                raise TypeError(f"Synchronous plan cannot run {step.kind!r} step")
        return {}

    async def _run_async(self, args: Mapping[str, Any]) -> dict[str, Any]:
        slots: dict[str, Any] = {}
        for step in self.record.body:
            if isinstance(step, InvokeStep):
                slots[step.slot] = self._invoke(slots, step.slot, step.args)
            elif isinstance(step, AwaitStep):
                slots[step.slot] = await self._invoke(slots, step.slot, step.args)
            elif isinstance(step, GatherStep):
                results = await gather(
                    [partial(self._invoke, slots, c.slot, c.args) for c in step.calls]
                )
                for call, value in zip(step.calls, results):
                    slots[call.slot] = value
            elif isinstance(step, BindStep):
                for name, slot in step.bindings.items():
                    slots[slot] = args[name]
            elif isinstance(step, ResultStep):
                return {name: slots[slot] for name, slot in step.returns.items()}
        return {}

    def _invoke(self, slots: dict[str, Any], slot: str, args: tuple[str, ...]) -> Any:
        return self.formulas[slot](*(slots[a] for a in args))

    def __repr__(self) -> str:
        kind = "async" if self.record.is_async else "sync"
        return (
            f"Calculator(returns={self.record.returns}, "
            f"params={self.record.params}, {kind})"
        )
