# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Direct evaluation without compiling a plan.

Each requested output is resolved recursively through a memo seeded with
a copy of the arguments. Intermediates computed for one output are reused
by the others within the same call; nothing outlives the call. This
skips scheduling and synthesis entirely, which pays off for queries that
are issued only once or twice.

Errors name the requested output and the first missing raw input the
recursion reached, rather than the full set a compiled plan reports.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import partial
from typing import Any

import anyio

from kalc.errors import ConfigurationError, CycleError, MissingInputError
from kalc.graph import find_cycle, traverse
from kalc.operations import OperationRegistry
from kalc.utils.concurrency import gather

__all__ = ("ainterpret", "interpret")


class _Missing(Exception):
    """Raised inside the recursion; converted at the top level."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


def interpret(
    registry: OperationRegistry,
    wanted: Iterable[str],
    args: Mapping[str, Any],
) -> dict[str, Any]:
    """Evaluate ``wanted`` synchronously.

    Raises:
        MissingInputError: If a requested output needs an input that is
            neither supplied nor producible.
        ConfigurationError: If an asynchronous operation is reached; use
            ainterpret() for those.
        CycleError: If resolution loops back on itself.
    """
    memo = dict(args)
    result: dict[str, Any] = {}
    for name in wanted:
        try:
            result[name] = _resolve(registry, name, memo, ())
        except _Missing as e:
            raise MissingInputError(name, e.name) from None
    return result


def _resolve(
    registry: OperationRegistry,
    name: str,
    memo: dict[str, Any],
    path: tuple[str, ...],
) -> Any:
    if name in memo:
        return memo[name]
    op = registry.lookup(name)
    if op is None:
        raise _Missing(name)
    if name in path:
        raise CycleError(path[path.index(name):])
    if op.is_async:
        raise ConfigurationError(
            f"Operation '{name}' is asynchronous; use ainterpret()",
            details={"output": name},
        )

    values = [_resolve(registry, i, memo, path + (name,)) for i in op.inputs]
    memo[name] = op.impl(*values)
    return memo[name]


async def ainterpret(
    registry: OperationRegistry,
    wanted: Iterable[str],
    args: Mapping[str, Any],
) -> dict[str, Any]:
    """Evaluate ``wanted``, awaiting asynchronous operations.

    Inputs of one operation are resolved concurrently. An intermediate
    needed by several branches is computed once; later requesters wait
    for the first.

    Raises:
        MissingInputError: As for interpret().
        CycleError: If the operations reachable from ``wanted`` contain a
            cycle. Checked before anything runs.
    """
    wanted = list(wanted)
    cycle = find_cycle(traverse(registry, wanted, args.keys()).operations)
    if cycle:
        raise CycleError(cycle)

    resolver = _AsyncResolver(registry, args)
    result: dict[str, Any] = {}
    for name in wanted:
        try:
            result[name] = await resolver.resolve(name)
        except _Missing as e:
            raise MissingInputError(name, e.name) from None
    return result


class _AsyncResolver:
    def __init__(self, registry: OperationRegistry, args: Mapping[str, Any]):
        self.registry = registry
        self.memo: dict[str, Any] = dict(args)
        self.pending: dict[str, anyio.Event] = {}
        self.failed: dict[str, Exception] = {}

    async def resolve(self, name: str) -> Any:
        if name in self.memo:
            return self.memo[name]
        if name in self.failed:
            raise self.failed[name]
        if name in self.pending:
            await self.pending[name].wait()
            return await self.resolve(name)

        op = self.registry.lookup(name)
        if op is None:
            raise _Missing(name)

        done = self.pending[name] = anyio.Event()
        try:
            if all(i in self.memo for i in op.inputs):
                values = [self.memo[i] for i in op.inputs]
            else:
                values = await gather([partial(self.resolve, i) for i in op.inputs])
            value = op.impl(*values)
            if op.is_async:
                value = await value
        except Exception as e:
            self.failed[name] = e
            raise
        else:
            self.memo[name] = value
            return value
        finally:
            del self.pending[name]
            done.set()
