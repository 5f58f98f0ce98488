# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Which outputs a set of missing inputs blocks.

The lookup is deliberately one hop deep: it names the operations that
read a missing input directly, which may be several levels below the
output the caller actually asked for.
"""

from __future__ import annotations

from collections.abc import Iterable

from kalc.errors import MissingArgumentsError
from kalc.operations import Operation

__all__ = ("missing_arguments", "uncomputable_outputs")


def uncomputable_outputs(operations: Iterable[Operation], missing: Iterable[str]) -> list[str]:
    """Outputs of operations with any direct input in ``missing``.

    Returned in the iteration order of ``operations``.
    """
    missing = set(missing)
    return [op.output for op in operations if any(i in missing for i in op.inputs)]


def missing_arguments(
    operations: Iterable[Operation], missing: Iterable[str]
) -> MissingArgumentsError:
    """Build the error raised when a plan is invoked without some params."""
    missing = list(missing)
    return MissingArgumentsError(missing, uncomputable_outputs(operations, missing))
