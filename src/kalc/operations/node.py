# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Operation: one named calculation in the dependency graph.

An Operation declares the value it produces, the values it reads (in the
order its implementation receives them) and the implementation itself.
Declarations are always explicit; nothing is inferred from the callable's
signature or source.

    double = Operation(output="double", inputs=("x",), impl=lambda x: 2 * x)
    add_one = Operation.from_assignment("double -> addOne", lambda d: d + 1)

    @operation("saleRate, saleEscFactor -> escSaleRate")
    def esc_sale_rate(rate, factor):
        return rate * factor
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .assignment import parse_assignment

__all__ = ("Operation", "operation")


class Operation(BaseModel):
    """Declared calculation: ``impl(*inputs) -> output``.

    Attributes:
        output: Name of the produced value (unique within a registry).
        inputs: Names of consumed values, in call order.
        impl: Implementation, sync or ``async def``. Excluded from dumps.
        is_async: Whether ``impl`` returns an awaitable. Inferred from
            ``impl`` when not given.
    """

    model_config = ConfigDict(frozen=True)

    output: str = Field(..., min_length=1)
    inputs: tuple[str, ...] = Field(default_factory=tuple)
    impl: Callable[..., Any] = Field(..., exclude=True, repr=False)
    is_async: bool = Field(default=False)

    @model_validator(mode="before")
    @classmethod
    def _infer_is_async(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("is_async") is None:
            data = dict(data)
            data["is_async"] = inspect.iscoroutinefunction(data.get("impl"))
        return data

    @classmethod
    def from_assignment(
        cls,
        assignment: str,
        impl: Callable[..., Any],
        *,
        is_async: bool | None = None,
    ) -> Operation:
        """Create an Operation from an 'inputs -> output' assignment.

        Raises:
            ValueError: If the assignment cannot be parsed.
        """
        inputs, output = parse_assignment(assignment)
        return cls(
            output=output,
            inputs=inputs,
            impl=impl,
            is_async=is_async,
        )

    @property
    def assignment(self) -> str:
        """Render back to the assignment DSL."""
        return f"{', '.join(self.inputs)} -> {self.output}"

    def __repr__(self) -> str:
        kind = "async" if self.is_async else "sync"
        return f"Operation('{self.assignment}', {kind})"


def operation(
    assignment: str | None = None,
    *,
    output: str | None = None,
    inputs: Sequence[str] = (),
    is_async: bool | None = None,
) -> Callable[[Callable[..., Any]], Operation]:
    """Decorator declaring a function as an Operation.

    Either pass an assignment string or ``output=`` (with optional
    ``inputs=``). The decorated name is bound to the Operation, ready for
    ``OperationRegistry.register``.

    Raises:
        ValueError: If neither or both of assignment/output are given.
    """
    if (assignment is None) == (output is None):
        raise ValueError("operation() takes either an assignment or output=, not both")

    def decorator(func: Callable[..., Any]) -> Operation:
        if assignment is not None:
            return Operation.from_assignment(assignment, func, is_async=is_async)
        return Operation(
            output=output,
            inputs=tuple(inputs),
            impl=func,
            is_async=is_async,
        )

    return decorator
