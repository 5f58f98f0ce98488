# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Compiler: the query interface over an operation registry.

Given requested outputs and the names a caller can already supply, the
Compiler finds the minimal raw inputs, schedules the required operations
into waves, and synthesizes a reusable Calculator for that query shape.

Example:
    compiler = Compiler([
        Operation.from_assignment("x -> double", lambda x: 2 * x),
        Operation.from_assignment("double -> addOne", lambda d: d + 1),
    ])

    compiler.get_params(["addOne"])
    # {'params': ['x'], 'intermediates': ['double']}

    compiler.calculate(["addOne"], {"x": 3})        # {'addOne': 7}
    compiler.calculate(["addOne"], {"double": 10})  # {'addOne': 11}

    calc, record = compiler.compile(["addOne"])
    same = compiler.load(record.model_dump_json())
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .cache import ParamsCache, PlanCache
from .config import CompilerConfig
from .graph import Requirements, schedule, traverse
from .interpreter import ainterpret, interpret
from .operations import Operation, OperationRegistry
from .plan import Calculator, PlanRecord, deserialize, synthesize

__all__ = ("Compiler",)

logger = logging.getLogger(__name__)


class Compiler:
    """Compile, cache, persist and run queries against one registry.

    The compiler owns its plan caches. They are dropped whenever the
    registry changes, so a re-registered operation is never served from a
    stale plan. Registry mutation must not overlap with in-flight queries.

    Attributes:
        registry: Operations keyed by output name.
        config: Duplicate policy and cache settings.
    """

    def __init__(
        self,
        operations: Iterable[Operation] = (),
        *,
        config: CompilerConfig | None = None,
        registry: OperationRegistry | None = None,
    ):
        self.config = config or CompilerConfig()
        if registry is None:
            registry = OperationRegistry(on_duplicate=self.config.on_duplicate)
        registry.register_many(operations)
        self.registry = registry

        self._plans = PlanCache()
        self._requirements = ParamsCache(self.config.params_cache_size)
        self._registry_version = registry.version

    def register(self, op: Operation, *, override: bool | None = None) -> None:
        """Register an operation. See OperationRegistry.register."""
        self.registry.register(op, override=override)

    def requirements(
        self, wanted: Iterable[str], precomputed: Iterable[str] = ()
    ) -> Requirements:
        """Params and operations needed for a query, without compiling."""
        self._refresh()
        return self._lookup(list(wanted), list(precomputed))

    def get_params(
        self, wanted: Iterable[str], precomputed: Iterable[str] = ()
    ) -> dict[str, list[str]]:
        """Minimal raw inputs and intermediates for a query.

        Returns:
            ``{"params": [...], "intermediates": [...]}``, both sorted.
        """
        return self.requirements(wanted, precomputed).as_dict()

    def compile(
        self, wanted: Iterable[str], precomputed: Iterable[str] = ()
    ) -> tuple[Calculator, PlanRecord]:
        """Compile a fresh plan, bypassing the cache.

        Returns:
            The executable and its persistable record.

        Raises:
            CycleError: If the required operations contain a cycle.
        """
        self._refresh()
        calculator = self._compile(_unique(wanted), list(precomputed))
        return calculator, calculator.record

    def load(self, record: PlanRecord | Mapping[str, Any] | str | bytes) -> Calculator:
        """Relink a persisted plan against this compiler's registry.

        Raises:
            PlanFormatError: If the record cannot be parsed.
            LinkageError: If the registry cannot satisfy the record.
        """
        return deserialize(record, self.registry)

    def get_or_compile(
        self, wanted: Iterable[str], precomputed: Iterable[str] = ()
    ) -> Calculator:
        """Cached compile: equal queries return the identical Calculator."""
        self._refresh()
        wanted = _unique(wanted)
        precomputed = list(precomputed)
        if not self.config.cache_plans:
            return self._compile(wanted, precomputed)
        return self._plans.get_or_compile(
            wanted,
            precomputed,
            requirements=self._lookup,
            build=self._compile,
        )

    get_calculator = get_or_compile

    def calculate(self, wanted: Iterable[str], args: Mapping[str, Any]) -> Any:
        """Compute ``wanted`` from ``args`` through a cached plan.

        Every key of ``args`` is treated as precomputed, so supplied
        intermediates are not recomputed.

        Returns:
            Output dict, or an awaitable of it if the plan is asynchronous.

        Raises:
            MissingArgumentsError: If ``args`` cannot produce ``wanted``.
        """
        return self.get_or_compile(wanted, args.keys())(args)

    async def acalculate(
        self, wanted: Iterable[str], args: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Like calculate(), but always awaitable."""
        result = self.calculate(wanted, args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def interpret(self, wanted: Iterable[str], args: Mapping[str, Any]) -> dict[str, Any]:
        """Evaluate directly, without a plan. See kalc.interpreter.interpret."""
        return interpret(self.registry, wanted, args)

    async def ainterpret(
        self, wanted: Iterable[str], args: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Async direct evaluation. See kalc.interpreter.ainterpret."""
        return await ainterpret(self.registry, wanted, args)

    def clear_cache(self) -> None:
        """Drop every cached plan and requirement lookup."""
        self._plans.clear()
        self._requirements.clear()

    def _refresh(self) -> None:
        if self.registry.version != self._registry_version:
            logger.debug("Registry changed; clearing plan caches")
            self.clear_cache()
            self._registry_version = self.registry.version

    def _lookup(self, wanted: Sequence[str], precomputed: Sequence[str]) -> Requirements:
        return self._requirements.get_or_compute(
            wanted,
            precomputed,
            lambda w, p: traverse(self.registry, w, p),
        )

    def _compile(self, wanted: Sequence[str], precomputed: Sequence[str]) -> Calculator:
        requirements = self._lookup(wanted, precomputed)
        waves = schedule(
            requirements.operations,
            set(requirements.params) | set(precomputed),
        )
        return synthesize(waves, requirements.params, wanted, self.registry)

    def __repr__(self) -> str:
        return f"Compiler(operations={len(self.registry)}, plans={len(self._plans)})"


def _unique(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(names))
