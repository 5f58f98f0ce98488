# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Operation registry keyed by output name.

A name with no registered operation is, by definition, a raw input. The
registry is owned by one Compiler (not global) and is treated as
read-only while queries are being compiled or run; mutating it while a
query is in flight is not supported.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from kalc.config import DuplicatePolicy
from kalc.errors import DuplicateOperationError, OperationNotFoundError

from .node import Operation

__all__ = ("OperationRegistry",)

logger = logging.getLogger(__name__)


class OperationRegistry:
    """Map output names to the Operation producing them.

    Example:
        registry = OperationRegistry([
            Operation.from_assignment("x -> double", lambda x: 2 * x),
            Operation.from_assignment("double -> addOne", lambda d: d + 1),
        ])
        registry.lookup("double")   # Operation('x -> double', sync)
        registry.lookup("x")        # None: raw input

    Attributes:
        on_duplicate: "override" (last write wins) or "error".
        version: Bumped on every mutation; caches compare it to detect
            stale plans.
    """

    def __init__(
        self,
        operations: Iterable[Operation] = (),
        *,
        on_duplicate: DuplicatePolicy = "override",
    ):
        self._operations: dict[str, Operation] = {}
        self.on_duplicate = on_duplicate
        self.version = 0
        for op in operations:
            self.register(op)

    def register(self, op: Operation, *, override: bool | None = None) -> None:
        """Insert ``op`` under its output name.

        Args:
            op: Operation to register.
            override: Replace an existing binding. Defaults to the
                registry's ``on_duplicate`` policy.

        Raises:
            DuplicateOperationError: If the name exists and overriding is
                not allowed.
        """
        if override is None:
            override = self.on_duplicate == "override"
        if op.output in self._operations:
            if not override:
                raise DuplicateOperationError(op.output)
            logger.debug("Overriding operation '%s'", op.output)
        self._operations[op.output] = op
        self.version += 1

    def register_many(self, operations: Iterable[Operation]) -> None:
        """Register each operation in order, under the same policy."""
        for op in operations:
            self.register(op)

    def lookup(self, output: str) -> Operation | None:
        """Return the operation producing ``output``, or None for raw inputs."""
        return self._operations.get(output)

    def get(self, output: str) -> Operation:
        """Get operation by output name. Raises with available names if not found."""
        op = self._operations.get(output)
        if op is None:
            raise OperationNotFoundError(output, self.list_names())
        return op

    def has(self, output: str) -> bool:
        """Check if an operation produces ``output``."""
        return output in self._operations

    def unregister(self, output: str) -> bool:
        """Remove registration. Returns True if existed."""
        if output in self._operations:
            del self._operations[output]
            self.version += 1
            return True
        return False

    def list_names(self) -> list[str]:
        """Return all registered output names, in registration order."""
        return list(self._operations.keys())

    def __contains__(self, output: object) -> bool:
        """Support 'name in registry' syntax."""
        return output in self._operations

    def __iter__(self) -> Iterator[Operation]:
        """Iterate a snapshot of operations in registration order."""
        return iter(list(self._operations.values()))

    def __len__(self) -> int:
        """Count of registered operations."""
        return len(self._operations)

    def __repr__(self) -> str:
        return f"OperationRegistry(operations={self.list_names()})"
