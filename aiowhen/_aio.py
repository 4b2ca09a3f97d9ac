# Copyright Arthur Tacca 2022 - 2024
# Distributed under the Boost Software License, Version 1.0.
# See accompanying file LICENSE or the copy at https://www.boost.org/LICENSE_1_0.txt

"""Contains conditional imports for Trio and anyio and routines for events, nurseries and
timeouts.

The reason for defining these, rather than just using anyio (which already supports both Trio and
wrappers for asyncio) is to allow use of aiowhen with Trio even when anyio is not installed.
"""
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from typing import Any, ContextManager, Protocol, TypeVar, cast
from typing_extensions import TypeVarTuple, Unpack

import asyncio
import sniffio


RetT = TypeVar("RetT")
ArgsT = TypeVarTuple("ArgsT")


class CancelScopeLike(Protocol):
    """A Trio or anyio CancelScope."""
    def cancel(self) -> None:
        ...

    @property
    def cancelled_caught(self) -> bool:
        ...


class NurseryLike(Protocol):
    """A Trio Nursery or anyio TaskGroup."""
    @property
    def cancel_scope(self) -> CancelScopeLike:
        # We only need read-only access.
        ...

    def start_soon(
        self,
        func: Callable[[Unpack[ArgsT]], Awaitable[object]], /,
        *args: Unpack[ArgsT],
    ) -> None:
        ...


class EventLike(Protocol):
    """A Trio or asyncio Event."""
    def is_set(self) -> bool:
        ...

    async def wait(self) -> object:
        ...

    def set(self) -> object:
        ...


try:
    import trio
except ImportError:
    # It's fine if trio/anyio is not installed, it should never be accessed.
    # Suppress errors about this being undefined, or None checks
    trio = cast(Any, None)
try:
    import anyio
except ImportError:
    anyio = cast(Any, None)


# Exception classes that mean "this task was cancelled by its enclosing scope" for every backend
# that is importable. Checked without sniffio so it also works outside of an async context.
CANCELLED_EXC_TYPES: tuple[type[BaseException], ...] = (asyncio.CancelledError,)
if trio is not None:
    CANCELLED_EXC_TYPES += (trio.Cancelled,)


def create_event() -> EventLike:
    """Creates a Trio Event or asyncio Event; they are similar enough for aiowhen."""
    sniffed = sniffio.current_async_library()
    if sniffed == "trio":
        return trio.Event()
    elif sniffed == "asyncio":
        return asyncio.Event()
    else:
        raise RuntimeError(f"Unknown async library {sniffed}")


def open_nursery() -> AbstractAsyncContextManager[NurseryLike]:
    """Opens a Trio Nursery or anyio TaskGroup."""
    sniffed = sniffio.current_async_library()
    if sniffed == "trio":
        return trio.open_nursery()
    elif sniffed == "asyncio":
        return anyio.create_task_group()
    else:
        raise RuntimeError(f"Unknown async library {sniffed}")


def move_on_after(seconds: float) -> ContextManager[CancelScopeLike]:
    """Opens a Trio or anyio cancel scope that is cancelled after ``seconds``.

    After the block exits, ``cancelled_caught`` on the scope says whether the deadline interrupted
    it.
    """
    sniffed = sniffio.current_async_library()
    if sniffed == "trio":
        return trio.move_on_after(seconds)
    elif sniffed == "asyncio":
        return anyio.move_on_after(seconds)
    else:
        raise RuntimeError(f"Unknown async library {sniffed}")


__all__ = [
    "CancelScopeLike", "EventLike", "NurseryLike", "CANCELLED_EXC_TYPES",
    "create_event", "open_nursery", "move_on_after",
]
