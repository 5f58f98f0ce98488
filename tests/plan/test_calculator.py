# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for kalc.plan.calculator - running compiled plans."""

from __future__ import annotations

import inspect

import anyio
import pytest

from kalc.errors import MissingArgumentsError
from kalc.graph import schedule, traverse
from kalc.operations import Operation, OperationRegistry
from kalc.plan import Calculator, synthesize


def _compile(registry, wanted, precomputed=()) -> Calculator:
    req = traverse(registry, wanted, precomputed)
    return synthesize(schedule(req.operations, req.params), req.params, wanted, registry)


# =============================================================================
# Tests: argument checking
# =============================================================================


class TestMissingArguments:
    """Invocation fails before computing anything if params are missing."""

    def test_message_names_blocked_and_missing(self, pricing_registry):
        """The error names blocked outputs and missing params."""
        calc = _compile(pricing_registry, ["salesCost", "upsideSlopeFactor"])
        with pytest.raises(MissingArgumentsError) as exc_info:
            calc(
                {
                    "contractDiscRevShare": 0.5,
                    "saleRate": 0.5,
                    "contractLowRatePenalty": 0.5,
                    "contractDefPenalty": 0.5,
                }
            )
        assert str(exc_info.value) == (
            "Missing arguments: Calculating [upsideSlopeFactor] "
            "requires [baseRate, upsideScale] as input"
        )
        assert exc_info.value.missing == ["baseRate", "upsideScale"]
        assert exc_info.value.blocked == ["upsideSlopeFactor"]

    def test_shortcut_plan_message(self, pricing_registry):
        """A shortcut plan reports its precomputed param as missing."""
        calc = _compile(pricing_registry, ["salesCost"], ["upsideSlopeFactor"])
        with pytest.raises(MissingArgumentsError) as exc_info:
            calc(
                {
                    "contractDiscRevShare": 0.5,
                    "contractLowRatePenalty": 0.5,
                    "contractDefPenalty": 0.5,
                }
            )
        assert str(exc_info.value) == (
            "Missing arguments: Calculating [salesCost] requires [upsideSlopeFactor] as input"
        )

    def test_no_partial_computation(self):
        """Nothing runs when a param is missing."""
        calls = []
        registry = OperationRegistry(
            [
                Operation.from_assignment("x -> a", lambda x: calls.append("a") or x),
                Operation.from_assignment("a, y -> b", lambda a, y: calls.append("b") or a),
            ]
        )
        calc = _compile(registry, ["b"])
        with pytest.raises(MissingArgumentsError):
            calc({"x": 1})
        assert calls == []

    def test_async_plan_fails_at_call_time(self):
        """Async plans check arguments before returning a coroutine."""
        async def fetch(x):
            return x

        registry = OperationRegistry([Operation.from_assignment("x -> y", fetch)])
        calc = _compile(registry, ["y"])
        with pytest.raises(MissingArgumentsError):
            calc({})

    def test_none_is_a_present_value(self, chain_registry):
        """None counts as a supplied value."""
        calc = _compile(chain_registry, ["double"], ["double"])
        assert calc({"double": None}) == {"double": None}

    def test_blocked_outputs_stable_across_calls(self, chain_registry):
        """Operations given as a generator still diagnose every failing call."""
        req = traverse(chain_registry, ["addOne"])
        calc = synthesize(
            schedule(req.operations, req.params),
            req.params,
            ["addOne"],
            (op for op in chain_registry),
        )
        for _ in range(2):
            with pytest.raises(MissingArgumentsError) as exc_info:
                calc({})
            assert exc_info.value.blocked == ["double"]

    def test_registry_kept_as_live_view(self, chain_registry):
        """Operations registered later show up in diagnostics."""
        calc = _compile(chain_registry, ["addOne"])
        chain_registry.register(Operation.from_assignment("x -> triple", lambda x: 3 * x))
        with pytest.raises(MissingArgumentsError) as exc_info:
            calc({})
        assert exc_info.value.blocked == ["double", "triple"]


# =============================================================================
# Tests: synchronous plans
# =============================================================================


class TestSyncPlans:
    """Tests for plans without async steps."""

    def test_returns_plain_dict(self, chain_registry):
        """A sync plan returns a dict, not an awaitable."""
        calc = _compile(chain_registry, ["addOne"])
        result = calc({"x": 3})
        assert not inspect.isawaitable(result)
        assert result == {"addOne": 7}

    def test_extra_args_ignored(self, chain_registry):
        """Arguments outside the params are ignored."""
        calc = _compile(chain_registry, ["addOne"])
        assert calc({"x": 3, "unused": 1}) == {"addOne": 7}

    def test_reusable(self, chain_registry):
        """One Calculator runs many times."""
        calc = _compile(chain_registry, ["addOne"])
        assert [calc({"x": i})["addOne"] for i in range(3)] == [1, 3, 5]

    def test_repr(self, chain_registry):
        """repr shows returns, params and kind."""
        calc = _compile(chain_registry, ["addOne"])
        assert repr(calc) == "Calculator(returns=['addOne'], params=['x'], sync)"


# =============================================================================
# Tests: asynchronous plans
# =============================================================================


class TestAsyncPlans:
    """Tests for plans with await or gather steps."""

    def test_returns_awaitable(self):
        """An async plan returns a coroutine."""
        async def fetch(x):
            return x + 1

        registry = OperationRegistry([Operation.from_assignment("x -> y", fetch)])
        calc = _compile(registry, ["y"])
        assert calc.is_async
        coro = calc({"x": 1})
        assert inspect.iscoroutine(coro)
        coro.close()

    @pytest.mark.anyio
    async def test_mixed_waves(self):
        """Sync and async operations mix across waves."""
        async def fetch(x):
            await anyio.sleep(0)
            return x * 2

        registry = OperationRegistry(
            [
                Operation.from_assignment("x -> fetched", fetch),
                Operation.from_assignment("x -> local", lambda x: x + 1),
                Operation.from_assignment("fetched, local -> total", lambda f, loc: f + loc),
            ]
        )
        calc = _compile(registry, ["total", "fetched"])
        assert await calc({"x": 5}) == {"total": 16, "fetched": 10}

    @pytest.mark.anyio
    async def test_async_group_runs_concurrently(self):
        """Both members must be started before either is awaited."""
        left_started = anyio.Event()
        right_started = anyio.Event()

        async def left(x):
            left_started.set()
            await right_started.wait()
            return "left"

        async def right(x):
            right_started.set()
            await left_started.wait()
            return "right"

        registry = OperationRegistry(
            [
                Operation.from_assignment("x -> left", left),
                Operation.from_assignment("x -> right", right),
            ]
        )
        calc = _compile(registry, ["left", "right"])
        with anyio.fail_after(5):
            assert await calc({"x": 0}) == {"left": "left", "right": "right"}

    @pytest.mark.anyio
    async def test_failure_does_not_cancel_siblings(self):
        """A failing async operation lets its siblings finish."""
        finished = []

        async def boom(x):
            raise ValueError("boom")

        async def slow(x):
            await anyio.sleep(0.01)
            finished.append("slow")
            return x

        registry = OperationRegistry(
            [
                Operation.from_assignment("x -> boom", boom),
                Operation.from_assignment("x -> slow", slow),
            ]
        )
        calc = _compile(registry, ["boom", "slow"])
        with pytest.raises(ValueError, match="boom"):
            await calc({"x": 1})
        assert finished == ["slow"]

    @pytest.mark.anyio
    async def test_next_wave_waits_for_join(self):
        """The next wave starts only after the gather joins."""
        order = []

        async def first(x):
            await anyio.sleep(0.01)
            order.append("first")
            return x

        async def second(x):
            order.append("second")
            return x

        def after(a, b):
            order.append("after")
            return a + b

        registry = OperationRegistry(
            [
                Operation.from_assignment("x -> a", first),
                Operation.from_assignment("x -> b", second),
                Operation.from_assignment("a, b -> c", after),
            ]
        )
        calc = _compile(registry, ["c"])
        assert await calc({"x": 2}) == {"c": 4}
        assert order[-1] == "after"
        assert sorted(order[:2]) == ["first", "second"]
