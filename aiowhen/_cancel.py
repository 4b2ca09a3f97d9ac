# Copyright Arthur Tacca 2022 - 2025
# Distributed under the Boost Software License, Version 1.0.
# See accompanying file LICENSE or the copy at https://www.boost.org/LICENSE_1_0.txt

import logging
from collections.abc import Callable
from typing import Optional

from aiowhen._aio import *
from aiowhen._src import TaskCancelledException


logger = logging.getLogger(__name__)


class CancellationSource:
    """A single-fire signal shared between an aggregator and the units it coordinates.

    The aggregators in this package trigger the source when their deadline passes or when their
    completion condition is met. Units observe it cooperatively, by polling
    :meth:`raise_if_cancelled`, waiting on :meth:`wait` or sleeping with :meth:`sleep`. Nothing is
    ever forcibly killed unless a cancel scope has been attached with :meth:`link`.

    Only the first call to :meth:`cancel` has any effect, so one source can safely be shared by an
    outer scope and reused for several groups in turn; once triggered, it stays triggered.

    A source can be created outside of an async context; the underlying event is only created the
    first time something waits on it. Like the rest of this package, it is not thread-safe: every
    method must be called from the thread running the event loop. From a worker thread, use
    :func:`trio.from_thread.run_sync` or :func:`anyio.from_thread.run_sync` to call :meth:`cancel`.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._event: Optional[EventLike] = None
        self._callbacks: list[Callable[[], object]] = []

    @property
    def cancelled(self) -> bool:
        """``True`` once :meth:`cancel` has been called."""
        return self._cancelled

    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> bool:
        """Triggers the source.

        Wakes every waiter and runs every registered callback, once. Calling this again is a
        no-op.

        :return: ``True`` if this call triggered the source, ``False`` if it had already been
            triggered.
        """
        if self._cancelled:
            return False
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        logger.debug("Cancellation source %r triggered (%d callbacks)", self, len(callbacks))
        if self._event is not None:
            self._event.set()
        for callback in callbacks:
            callback()
        return True

    def add_callback(self, callback: Callable[[], object]) -> None:
        """Arranges for ``callback()`` to be called when the source is triggered.

        If the source has already been triggered, ``callback`` is called immediately.
        """
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)

    def link(self, cancel_scope: CancelScopeLike) -> None:
        """Cancels ``cancel_scope`` (e.g. ``nursery.cancel_scope``) when the source is triggered.

        Use this for units that should be stopped at their next checkpoint instead of having to
        check the source themselves.
        """
        self.add_callback(cancel_scope.cancel)

    def raise_if_cancelled(self) -> None:
        """:raise TaskCancelledException: If the source has been triggered."""
        if self._cancelled:
            raise TaskCancelledException(self)

    async def wait(self) -> None:
        """Waits until the source is triggered. Returns immediately if it already has been."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = create_event()
        await self._event.wait()

    async def sleep(self, seconds: float) -> None:
        """Sleeps for ``seconds``, but stops early if the source is triggered.

        :raise TaskCancelledException: If the source is (or becomes) triggered before the time is
            up.
        """
        self.raise_if_cancelled()
        with move_on_after(seconds):
            await self.wait()
            raise TaskCancelledException(self)
