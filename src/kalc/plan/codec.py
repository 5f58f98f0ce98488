# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Persist compiled plans and relink them against a registry.

    calc, record = compiler.compile(["salesCost"])
    text = dumps(record)
    ...
    calc = deserialize(text, other_registry)

A record loads against any registry that defines an operation for every
key of ``record.formulas`` with the same arity and sync/async kind.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from kalc.errors import LinkageError, PlanFormatError
from kalc.operations import OperationRegistry

from .calculator import Calculator
from .record import PLAN_RECORD_VERSION, PlanRecord

__all__ = ("deserialize", "dumps", "loads", "serialize")

logger = logging.getLogger(__name__)


def serialize(plan: Calculator | PlanRecord) -> PlanRecord:
    """Return the persistable record of a plan."""
    if isinstance(plan, Calculator):
        return plan.record
    return plan


def dumps(plan: Calculator | PlanRecord, **kwargs: Any) -> str:
    """Serialize a plan to JSON text. kwargs go to ``model_dump_json``."""
    return serialize(plan).model_dump_json(**kwargs)


def loads(data: PlanRecord | Mapping[str, Any] | str | bytes) -> PlanRecord:
    """Parse a record from JSON text, a JSON-compatible dict, or a record.

    Raises:
        PlanFormatError: If the data is not a valid record of a known
            version, or its body calls a slot that has no formula.
    """
    if isinstance(data, PlanRecord):
        record = data
    else:
        try:
            if isinstance(data, (str, bytes)):
                record = PlanRecord.model_validate_json(data)
            else:
                record = PlanRecord.model_validate(data)
        except ValidationError as e:
            raise PlanFormatError(
                f"Invalid plan record: {e.error_count()} validation error(s)",
                details={"errors": e.errors(include_url=False)},
            ) from e

    if record.version != PLAN_RECORD_VERSION:
        raise PlanFormatError(
            f"Unsupported plan record version {record.version}",
            details={"version": record.version, "supported": [PLAN_RECORD_VERSION]},
        )
    if not record.is_async and record.async_slots:
        raise PlanFormatError("Synchronous plan record contains asynchronous steps")
    unlinked = sorted(set(record.call_shapes) - set(record.formulas.values()))
    if unlinked:
        raise PlanFormatError(
            f"Plan record calls slots with no formula: [{', '.join(unlinked)}]",
            details={"slots": unlinked},
        )
    return record


def deserialize(
    data: PlanRecord | Mapping[str, Any] | str | bytes,
    registry: OperationRegistry,
) -> Calculator:
    """Relink a persisted plan against ``registry``.

    Raises:
        PlanFormatError: If the record cannot be parsed.
        LinkageError: If the registry lacks an operation the record uses,
            or one with a different arity or sync/async kind.
    """
    record = loads(data)

    shapes = record.call_shapes
    formulas = {}
    missing: list[str] = []
    mismatched: list[str] = []
    for name, slot in record.formulas.items():
        op = registry.lookup(name)
        if op is None:
            missing.append(name)
            continue
        if slot in shapes and shapes[slot] != (len(op.inputs), op.is_async):
            mismatched.append(name)
            continue
        formulas[slot] = op.impl

    if missing or mismatched:
        raise LinkageError(missing, mismatched)

    logger.debug("Loaded plan for %s against %r", record.returns, registry)
    return Calculator(record, formulas, registry)
