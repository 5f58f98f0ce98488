# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Demand-driven traversal of the operation graph.

Starting from the requested outputs, walk declared inputs until reaching
names that are either unregistered or supplied by the caller. Those names
are the parameters of the query; every operation passed on the way is
required. Traversal only discovers reachability. Execution order is the
scheduler's job.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from kalc.operations import Operation, OperationRegistry

__all__ = ("Requirements", "find_cycle", "traverse")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Requirements:
    """What a query needs.

    Attributes:
        wanted: Requested outputs, in request order.
        params: Raw inputs the caller must supply, sorted.
        operations: Operations to run, in discovery order.
    """

    wanted: tuple[str, ...]
    params: tuple[str, ...]
    operations: tuple[Operation, ...]

    @property
    def intermediates(self) -> list[str]:
        """Computed values that were not requested, sorted."""
        wanted = set(self.wanted)
        return sorted(op.output for op in self.operations if op.output not in wanted)

    def as_dict(self) -> dict[str, list[str]]:
        return {"params": list(self.params), "intermediates": self.intermediates}


def traverse(
    registry: OperationRegistry,
    wanted: Iterable[str],
    precomputed: Iterable[str] = (),
) -> Requirements:
    """Find the operations and raw inputs needed to produce ``wanted``.

    A name in ``precomputed`` is a parameter even when an operation could
    produce it, which prunes everything below it. Hints that are never
    reached do not appear in the result.

    Args:
        registry: Operations keyed by output name.
        wanted: Requested output names.
        precomputed: Names the caller can already supply.

    Returns:
        Requirements with sorted params.
    """
    wanted = list(wanted)
    precomputed = set(precomputed)
    stack = wanted[::-1]
    visited: set[str] = set()
    params: list[str] = []
    operations: list[Operation] = []

    while stack:
        name = stack.pop()
        if name in visited:
            continue
        visited.add(name)

        op = None if name in precomputed else registry.lookup(name)
        if op is None:
            params.append(name)
            continue

        operations.append(op)
        stack.extend(reversed(op.inputs))

    params.sort()
    logger.debug(
        "Traversed %s: %d operations, params=%s", wanted, len(operations), params
    )
    return Requirements(
        wanted=tuple(wanted), params=tuple(params), operations=tuple(operations)
    )


def find_cycle(operations: Iterable[Operation]) -> list[str] | None:
    """Return output names forming a dependency cycle, or None.

    Only edges between the given operations are considered.
    """
    by_output = {op.output: op for op in operations}
    state: dict[str, int] = {}  # 1 = on stack, 2 = done

    for root in by_output:
        if root in state:
            continue
        path = [root]
        frames = [iter(by_output[root].inputs)]
        state[root] = 1
        while frames:
            name = next(frames[-1], None)
            if name is None:
                state[path.pop()] = 2
                frames.pop()
            elif name not in by_output or state.get(name) == 2:
                continue
            elif state.get(name) == 1:
                return path[path.index(name):]
            else:
                state[name] = 1
                path.append(name)
                frames.append(iter(by_output[name].inputs))
    return None
