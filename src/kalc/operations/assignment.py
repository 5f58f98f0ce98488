# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Assignment DSL for declaring an operation's dependency shape.

An assignment names the inputs an operation reads and the single value it
produces:

    "x -> double"
    "saleRate, saleEscFactor -> escSaleRate"

Only '->' and ',' are syntax. Everything else belongs to the value names,
which are taken verbatim after trimming whitespace.
"""

from __future__ import annotations

__all__ = ("parse_assignment",)


def parse_assignment(assignment: str) -> tuple[tuple[str, ...], str]:
    """Parse 'inputs -> output' into (inputs, output).

    Args:
        assignment: DSL string

    Returns:
        Input names in declared order, and the output name.

    Raises:
        ValueError: If the '->' is missing, repeated, or the right-hand
            side does not name exactly one output.
    """
    if "->" not in assignment:
        raise ValueError(f"Invalid assignment syntax (missing '->'): {assignment}")

    parts = assignment.split("->")
    if len(parts) != 2:
        raise ValueError(f"Invalid assignment syntax: {assignment}")

    inputs = tuple(f.strip() for f in parts[0].split(",") if f.strip())
    outputs = [f.strip() for f in parts[1].split(",") if f.strip()]

    if len(outputs) != 1:
        raise ValueError(
            f"Assignment must name exactly one output, got {outputs}: {assignment}"
        )
    return inputs, outputs[0]
