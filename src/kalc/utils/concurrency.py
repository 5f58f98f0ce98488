# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Fan-out / fan-in helpers on top of anyio."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import anyio

__all__ = ("create_task_group", "gather")

create_task_group = anyio.create_task_group


async def gather(calls: Sequence[Callable[[], Awaitable[Any]]]) -> list[Any]:
    """Run every call concurrently and wait for all of them.

    All calls are started before any is awaited. A failing call does not
    cancel its siblings; once every call has finished, the first failure
    in submission order is re-raised.

    Args:
        calls: Zero-argument coroutine functions.

    Returns:
        Results in the same order as ``calls``.
    """
    results: list[Any] = [None] * len(calls)
    errors: list[BaseException | None] = [None] * len(calls)

    async def run(index: int, call: Callable[[], Awaitable[Any]]) -> None:
        try:
            results[index] = await call()
        except Exception as e:
            errors[index] = e

    async with create_task_group() as tg:
        for index, call in enumerate(calls):
            tg.start_soon(run, index, call)

    for error in errors:
        if error is not None:
            raise error
    return results
