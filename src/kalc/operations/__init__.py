# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Operations: declared calculations and the registry that holds them.

Core types:
    Operation: output name, ordered input names, implementation.
    OperationRegistry: output name -> Operation, last write wins.

Declaration helpers:
    operation(): decorator form of Operation.from_assignment().
    parse_assignment(): 'a, b -> c' DSL parser.
"""

from __future__ import annotations

from .assignment import parse_assignment
from .node import Operation, operation
from .registry import OperationRegistry

__all__ = (
    "Operation",
    "OperationRegistry",
    "operation",
    "parse_assignment",
)
