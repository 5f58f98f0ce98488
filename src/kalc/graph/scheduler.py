# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Wave scheduling of required operations.

Operations are layered breadth-first: wave k holds every operation whose
inputs are all available after waves 0..k-1 have run. Within a wave the
operations are mutually independent, so the synchronous ones can run in
any order and the asynchronous ones can all be started before any is
awaited. Wave k+1 starts only after wave k has fully completed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from kalc.errors import CycleError
from kalc.operations import Operation

__all__ = ("Schedule", "Wave", "schedule")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Wave:
    """Operations runnable at the same dependency depth.

    Both groups are ordered by output name.
    """

    sync_group: tuple[Operation, ...] = ()
    async_group: tuple[Operation, ...] = ()

    @property
    def operations(self) -> tuple[Operation, ...]:
        return self.sync_group + self.async_group

    @property
    def outputs(self) -> list[str]:
        return [op.output for op in self.operations]

    def __len__(self) -> int:
        return len(self.sync_group) + len(self.async_group)


@dataclass(frozen=True)
class Schedule:
    """Totally ordered sequence of waves."""

    waves: tuple[Wave, ...] = ()

    @property
    def operations(self) -> tuple[Operation, ...]:
        """All scheduled operations, wave by wave."""
        return tuple(op for wave in self.waves for op in wave.operations)

    @property
    def is_async(self) -> bool:
        return any(wave.async_group for wave in self.waves)

    def __iter__(self) -> Iterator[Wave]:
        return iter(self.waves)

    def __len__(self) -> int:
        return len(self.waves)


def schedule(operations: Iterable[Operation], available: Iterable[str]) -> Schedule:
    """Partition ``operations`` into dependency-ordered waves.

    Args:
        operations: Required operations (order-agnostic).
        available: Names supplied before the first wave, i.e. the query's
            params plus any precomputed hints.

    Returns:
        Schedule whose waves cover every operation exactly once.

    Raises:
        CycleError: If some operations can never become ready.
    """
    available = set(available)
    remaining = {op.output: op for op in operations}
    waves: list[Wave] = []

    while remaining:
        ready = [
            op
            for op in remaining.values()
            if all(name in available for name in op.inputs)
        ]
        if not ready:
            raise CycleError(remaining.keys())

        ready.sort(key=lambda op: op.output)
        waves.append(
            Wave(
                sync_group=tuple(op for op in ready if not op.is_async),
                async_group=tuple(op for op in ready if op.is_async),
            )
        )
        for op in ready:
            available.add(op.output)
            del remaining[op.output]

    logger.debug("Scheduled %s", [len(w) for w in waves])
    return Schedule(waves=tuple(waves))
