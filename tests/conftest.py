# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Shared operation sets for the kalc test suite."""

from __future__ import annotations

import pytest

from kalc.operations import Operation, OperationRegistry


def _pricing_operations() -> list[Operation]:
    """Rate-escalation formulas used across the suite."""
    return [
        Operation.from_assignment(
            "saleRate, saleEscFactor -> escSaleRate",
            lambda sale_rate, factor: sale_rate * factor,
        ),
        Operation.from_assignment(
            "utilityRate, utilityEscFactor -> escUtilityRate",
            lambda utility_rate, factor: utility_rate * factor,
        ),
        Operation.from_assignment(
            "escSaleRate, escUtilityRate -> defaultTrigger",
            lambda esc_sale, esc_utility: 0 if esc_sale < esc_utility else 1,
        ),
        Operation.from_assignment(
            "escSaleRate, escUtilityRate, savingsBuffer, defaultTrigger -> defaultRateDelta",
            lambda esc_sale, esc_utility, buffer, trigger: (
                max(esc_sale - esc_utility * (1 - buffer), 0) * trigger
            ),
        ),
        Operation.from_assignment(
            "saleRate, baseRate, upsideScale -> upsideSlopeFactor",
            lambda sale_rate, base_rate, scale: 1 + max(sale_rate - base_rate, 0) * scale,
        ),
        Operation.from_assignment(
            "contractDiscRevShare, upsideSlopeFactor, contractLowRatePenalty,"
            " contractDefPenalty -> salesCost",
            lambda share, slope, low_rate_penalty, def_penalty: (
                share * slope - low_rate_penalty - def_penalty
            ),
        ),
    ]


def _chain_operations() -> list[Operation]:
    """double(x) = 2x, addOne(double) = double + 1."""
    return [
        Operation.from_assignment("x -> double", lambda x: 2 * x),
        Operation.from_assignment("double -> addOne", lambda d: d + 1),
    ]


def _diamond_operations() -> list[Operation]:
    """a(x), b(x), c(a, b)."""
    return [
        Operation.from_assignment("x -> a", lambda x: x + 1),
        Operation.from_assignment("x -> b", lambda x: x * 10),
        Operation.from_assignment("a, b -> c", lambda a, b: a + b),
    ]


@pytest.fixture
def pricing_registry() -> OperationRegistry:
    return OperationRegistry(_pricing_operations())


@pytest.fixture
def chain_registry() -> OperationRegistry:
    return OperationRegistry(_chain_operations())


@pytest.fixture
def diamond_registry() -> OperationRegistry:
    return OperationRegistry(_diamond_operations())


@pytest.fixture
def pricing_operations() -> list[Operation]:
    return _pricing_operations()


@pytest.fixture
def chain_operations() -> list[Operation]:
    return _chain_operations()


@pytest.fixture
def sales_cost_args() -> dict[str, float]:
    """Full raw inputs for salesCost and upsideSlopeFactor."""
    return {
        "contractDiscRevShare": 0.5,
        "saleRate": 0.5,
        "baseRate": 0.5,
        "upsideScale": 3,
        "contractLowRatePenalty": 0.5,
        "contractDefPenalty": 0.5,
    }
