# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Exception hierarchy for kalc.

Every error carries a human-readable message and a ``details`` dict with
the structured facts behind it, so callers can react without parsing
strings:

    try:
        calc(args)
    except MissingArgumentsError as e:
        retry_without(e.blocked) or supply(e.missing)

Errors are local to one request. None of them leave the registry or the
plan cache in a partially updated state.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

__all__ = (
    "ConfigurationError",
    "CycleError",
    "DuplicateOperationError",
    "KalcError",
    "LinkageError",
    "MissingArgumentsError",
    "MissingInputError",
    "OperationNotFoundError",
    "PlanFormatError",
)


class KalcError(Exception):
    """Base class for all kalc errors.

    Attributes:
        message: Human-readable description.
        details: Structured context (names involved, counts, ...).
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message


class ConfigurationError(KalcError):
    """The registry or compiler is configured in a way that cannot work."""


class DuplicateOperationError(ConfigurationError):
    """An output name was registered twice on a registry that forbids it."""

    def __init__(self, output: str):
        super().__init__(
            f"Operation '{output}' already registered. "
            "Use override=True to replace.",
            details={"output": output},
        )
        self.output = output


class OperationNotFoundError(KalcError, KeyError):
    """Lookup of an output name that has no registered operation."""

    def __init__(self, output: str, available: Iterable[str] = ()):
        available = list(available)
        super().__init__(
            f"Operation '{output}' not registered. Available: {available}",
            details={"output": output, "available": available},
        )
        self.output = output

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.message


class CycleError(ConfigurationError):
    """Required operations depend on each other in a loop."""

    def __init__(self, outputs: Iterable[str]):
        outputs = sorted(outputs)
        super().__init__(
            f"Dependency cycle among operations [{', '.join(outputs)}]",
            details={"outputs": outputs},
        )
        self.outputs = outputs


class MissingArgumentsError(KalcError):
    """A compiled plan was invoked without all of its parameters.

    Attributes:
        missing: Parameter names absent from the argument map.
        blocked: Outputs whose direct inputs include a missing name.
    """

    def __init__(self, missing: Iterable[str], blocked: Iterable[str]):
        self.missing = list(missing)
        self.blocked = list(blocked)
        super().__init__(
            f"Missing arguments: Calculating [{', '.join(self.blocked)}] "
            f"requires [{', '.join(self.missing)}] as input",
            details={"missing": self.missing, "blocked": self.blocked},
        )


class MissingInputError(KalcError):
    """The interpreter reached a raw input that was not supplied.

    Attributes:
        requested: Top-level output being calculated.
        missing: The raw input the recursion stopped at.
    """

    def __init__(self, requested: str, missing: str):
        self.requested = requested
        self.missing = missing
        super().__init__(
            f"Cannot calculate [{requested}]; missing required input [{missing}].",
            details={"requested": requested, "missing": missing},
        )


class LinkageError(KalcError):
    """A persisted plan does not match the registry it is loaded against.

    Attributes:
        missing: Outputs the plan references but the registry lacks.
        mismatched: Outputs whose registered operation has a different
            arity or sync/async kind than the plan was compiled with.
    """

    def __init__(self, missing: Iterable[str] = (), mismatched: Iterable[str] = ()):
        self.missing = sorted(missing)
        self.mismatched = sorted(mismatched)
        problems = []
        if self.missing:
            problems.append(f"no operation registered for [{', '.join(self.missing)}]")
        if self.mismatched:
            problems.append(
                f"operation shape changed for [{', '.join(self.mismatched)}]"
            )
        super().__init__(
            f"Cannot link plan: {'; '.join(problems)}",
            details={"missing": self.missing, "mismatched": self.mismatched},
        )


class PlanFormatError(KalcError):
    """A persisted plan record could not be parsed."""
