# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Memoization of compiled plans and requirement lookups.

PlanCache is two-level: requested outputs, then the minimal params those
outputs need under a given precomputed hint. Two hints that prune the
graph to the same params share one plan, and repeated queries get the
identical Calculator back, which callers may use for their own
identity-based memoization.

Both caches belong to one Compiler. PlanCache never evicts; its key space
is bounded by the query shapes actually issued. ParamsCache drops its
oldest entry once full.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence

from kalc.graph import Requirements
from kalc.plan import Calculator

__all__ = ("ParamsCache", "PlanCache", "canonical_key")

logger = logging.getLogger(__name__)

Build = Callable[[Sequence[str], Sequence[str]], Calculator]
Require = Callable[[Sequence[str], Sequence[str]], Requirements]


def canonical_key(names: Iterable[str]) -> str:
    """Order-insensitive key for a set of names."""
    return "\0".join(sorted(set(names)))


class PlanCache:
    """returns-key -> params-key -> Calculator.

    Lookups and inserts happen under one lock, so a query shape is
    compiled at most once even with concurrent callers. A compile that
    raises inserts nothing.
    """

    def __init__(self) -> None:
        self._plans: dict[str, dict[str, Calculator]] = {}
        self._lock = threading.Lock()

    def get_or_compile(
        self,
        wanted: Sequence[str],
        precomputed: Sequence[str],
        *,
        requirements: Require,
        build: Build,
    ) -> Calculator:
        """Return the cached plan for this query shape, compiling on a miss.

        Args:
            wanted: Requested outputs.
            precomputed: Names the caller can supply.
            requirements: Computes the minimal params for a query. Only
                called when the outputs have been compiled before.
            build: Compiles a new Calculator.
        """
        returns_key = canonical_key(wanted)
        with self._lock:
            bucket = self._plans.get(returns_key)
            if bucket is None:
                calculator = build(wanted, precomputed)
                self._plans[returns_key] = {canonical_key(calculator.params): calculator}
                logger.debug("Plan cache miss for %s", sorted(set(wanted)))
                return calculator

            params_key = canonical_key(requirements(wanted, precomputed).params)
            calculator = bucket.get(params_key)
            if calculator is not None:
                return calculator

            calculator = build(wanted, precomputed)
            bucket[params_key] = calculator
            logger.debug(
                "Plan cache miss for %s with params %s",
                sorted(set(wanted)),
                calculator.params,
            )
            return calculator

    def clear(self) -> None:
        with self._lock:
            self._plans.clear()

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._plans.values())

    def __repr__(self) -> str:
        return f"PlanCache(outputs={len(self._plans)}, plans={len(self)})"


class ParamsCache:
    """Bounded memo of ``(wanted, precomputed) -> Requirements``.

    Oldest entries are dropped first once ``maxsize`` is reached. A
    ``maxsize`` of 0 disables caching.
    """

    def __init__(self, maxsize: int = 256) -> None:
        self.maxsize = maxsize
        self._entries: dict[tuple[tuple[str, ...], frozenset[str]], Requirements] = {}
        self._lock = threading.Lock()

    def get_or_compute(
        self,
        wanted: Sequence[str],
        precomputed: Sequence[str],
        compute: Require,
    ) -> Requirements:
        if self.maxsize == 0:
            return compute(wanted, precomputed)

        key = (tuple(wanted), frozenset(precomputed))
        with self._lock:
            found = self._entries.get(key)
        if found is not None:
            return found

        requirements = compute(wanted, precomputed)
        with self._lock:
            while len(self._entries) >= self.maxsize:
                del self._entries[next(iter(self._entries))]
            self._entries[key] = requirements
        return requirements

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
