# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""kalc - Demand-driven compiler for named calculations.

Declare small operations by output name and input names; ask for any set
of outputs and kalc works out the minimal raw inputs, schedules the
needed operations into concurrent waves, and hands back a reusable
Calculator:

    from kalc import Compiler, Operation

    compiler = Compiler([
        Operation.from_assignment("x -> double", lambda x: 2 * x),
        Operation.from_assignment("double -> addOne", lambda d: d + 1),
    ])
    compiler.calculate(["addOne"], {"x": 3})   # {'addOne': 7}

Top-level re-exports (lazy):
- Compiler, CompilerConfig
- Operation, OperationRegistry, operation
- Calculator, PlanRecord
- error types from kalc.errors
"""

from __future__ import annotations

from typing import TYPE_CHECKING

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    # compiler
    "Compiler": ("kalc.compiler", "Compiler"),
    "CompilerConfig": ("kalc.config", "CompilerConfig"),
    # operations
    "Operation": ("kalc.operations", "Operation"),
    "OperationRegistry": ("kalc.operations", "OperationRegistry"),
    "operation": ("kalc.operations", "operation"),
    # plan
    "Calculator": ("kalc.plan", "Calculator"),
    "PlanRecord": ("kalc.plan", "PlanRecord"),
    # errors
    "ConfigurationError": ("kalc.errors", "ConfigurationError"),
    "CycleError": ("kalc.errors", "CycleError"),
    "DuplicateOperationError": ("kalc.errors", "DuplicateOperationError"),
    "KalcError": ("kalc.errors", "KalcError"),
    "LinkageError": ("kalc.errors", "LinkageError"),
    "MissingArgumentsError": ("kalc.errors", "MissingArgumentsError"),
    "MissingInputError": ("kalc.errors", "MissingInputError"),
    "OperationNotFoundError": ("kalc.errors", "OperationNotFoundError"),
    "PlanFormatError": ("kalc.errors", "PlanFormatError"),
}

_LOADED: dict[str, object] = {}


def __getattr__(name: str) -> object:
    """Lazy import attributes on first access."""
    if name in _LOADED:
        return _LOADED[name]

    if name in _LAZY_IMPORTS:
        from importlib import import_module

        module_name, attr_name = _LAZY_IMPORTS[name]
        module = import_module(module_name)
        value = getattr(module, attr_name)
        _LOADED[name] = value
        return value

    raise AttributeError(f"module 'kalc' has no attribute {name!r}")


def __dir__() -> list[str]:
    """Return all available attributes for autocomplete."""
    return list(__all__)


if TYPE_CHECKING:
    from kalc.compiler import Compiler
    from kalc.config import CompilerConfig
    from kalc.errors import (
        ConfigurationError,
        CycleError,
        DuplicateOperationError,
        KalcError,
        LinkageError,
        MissingArgumentsError,
        MissingInputError,
        OperationNotFoundError,
        PlanFormatError,
    )
    from kalc.operations import Operation, OperationRegistry, operation
    from kalc.plan import Calculator, PlanRecord

__all__ = (
    "Calculator",
    "Compiler",
    "CompilerConfig",
    "ConfigurationError",
    "CycleError",
    "DuplicateOperationError",
    "KalcError",
    "LinkageError",
    "MissingArgumentsError",
    "MissingInputError",
    "Operation",
    "OperationNotFoundError",
    "OperationRegistry",
    "PlanFormatError",
    "operation",
)
