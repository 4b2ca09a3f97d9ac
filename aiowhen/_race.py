# Copyright Arthur Tacca 2022 - 2025
# Distributed under the Boost Software License, Version 1.0.
# See accompanying file LICENSE or the copy at https://www.boost.org/LICENSE_1_0.txt

import enum
import logging
from collections.abc import Awaitable, Callable
from typing import Iterable, Optional, TypeVar

from aiowhen._aio import *
from aiowhen._cancel import CancellationSource
from aiowhen._src import ResultBase, TaskTimeoutException
from aiowhen._wait import wait_all, wait_any


logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class RaceOutcome(enum.Enum):
    """Which side won a :func:`race_deadline`."""
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


def _check_seconds(seconds: Optional[float]) -> None:
    if seconds is not None and seconds < 0:
        raise ValueError(f"Deadline must not be negative, got {seconds!r}")


async def race_deadline(
    completion: Callable[[], Awaitable[object]],
    seconds: Optional[float] = None,
    cancellation: Optional[CancellationSource] = None,
) -> RaceOutcome:
    """Races ``completion()`` against a timer of ``seconds``.

    If ``seconds`` is ``None`` or zero there is no timer: ``completion()`` is simply awaited and the
    outcome is always :attr:`RaceOutcome.COMPLETED`. Otherwise ``completion()`` runs inside a
    timeout scope. Only if that scope actually interrupted it is the outcome
    :attr:`RaceOutcome.TIMED_OUT`; a completion that returns at the same instant the deadline
    passes counts as completed. Exactly one of the two outcomes is ever reported.

    Whichever side wins, ``cancellation`` (if given) is triggered afterwards: on timeout to stop
    units that are still running, on completion because whatever is left is no longer needed. It is
    also triggered if ``completion()`` raises or this call is itself cancelled, in which case that
    exception propagates.

    :param completion: An async callable with no arguments that returns when the awaited condition
        is met. Its return value is ignored.
    :param seconds: The deadline, measured from when this function is called.
    :param cancellation: A source to trigger once the race is decided.
    :raise ValueError: If ``seconds`` is negative.
    """
    _check_seconds(seconds)
    try:
        if not seconds:
            await completion()
            return RaceOutcome.COMPLETED
        with move_on_after(seconds) as scope:
            await completion()
        if scope.cancelled_caught:
            logger.debug("Deadline of %ss passed before completion", seconds)
            return RaceOutcome.TIMED_OUT
        return RaceOutcome.COMPLETED
    finally:
        if cancellation is not None:
            cancellation.cancel()


def _value_or_raise(result: ResultBase[ResultT]) -> ResultT:
    # The unit's own exception is raised as-is. Backend cancellation exceptions must not be raised
    # outside of their cancel scope, so those stay wrapped in TaskFailedException.
    exception = result.exception()
    if exception is not None and not isinstance(exception, CANCELLED_EXC_TYPES):
        raise exception
    return result.result()


async def when_all(
    results: Iterable[ResultBase[ResultT]],
    seconds: Optional[float] = None,
    cancellation: Optional[CancellationSource] = None,
) -> list[ResultT]:
    """Waits for every unit in ``results`` and returns their values in the same order.

    Individual failures are not swallowed: once every unit is done, the first unit (in iteration
    order, not completion order) that did not succeed has its own exception raised here, unchanged.
    Only a unit stopped by its backend's cancellation is reported as a :class:`TaskFailedException`
    whose ``__cause__`` is the cancelled exception.

    No partial results are returned on timeout. To find out which units did finish, inspect them
    directly (or use :func:`run_all_safely` / :func:`run_all_collect_errors`).

    :param results: The units to wait for. Iterated exactly once.
    :param seconds: Optional deadline; ``None`` or ``0`` waits indefinitely.
    :param cancellation: Triggered when every unit is done or when the deadline passes.
    :return: The value of each unit, index-aligned with ``results``.
    :raise TaskTimeoutException: If the deadline passed before every unit was done.
    :raise Exception: Whatever the first failed unit raised.
    :raise TaskFailedException: If the first unit that did not succeed was cancelled by its backend.
    """
    units = list(results)
    outcome = await race_deadline(lambda: wait_all(units), seconds, cancellation)
    if outcome is RaceOutcome.TIMED_OUT:
        unfinished = sum(1 for r in units if not r.is_done())
        raise TaskTimeoutException(
            f"Timed out after {seconds}s; {unfinished} of {len(units)} tasks in the group had not"
            f" finished"
        )
    return [_value_or_raise(r) for r in units]


async def when_any(
    results: Iterable[ResultBase[ResultT]],
    seconds: Optional[float] = None,
    cancellation: Optional[CancellationSource] = None,
) -> ResultT:
    """Waits for the first unit in ``results`` to finish and returns its value.

    "Finish" includes failing: if the first unit to be done raised, that same exception is raised
    here rather than waiting for a unit that succeeds.

    :param results: The units to wait for. Iterated exactly once.
    :param seconds: Optional deadline; ``None`` or ``0`` waits indefinitely.
    :param cancellation: Triggered once a unit finishes (to stop the rest) or when the deadline
        passes.
    :return: The value of the first unit to finish.
    :raise TaskTimeoutException: If no unit finished before the deadline.
    :raise Exception: Whatever the first unit to finish raised.
    :raise TaskFailedException: If the first unit to finish was cancelled by its backend.
    :raise RuntimeError: If ``results`` is empty.
    """
    units = list(results)
    first: Optional[ResultBase[ResultT]] = None

    async def wait_first() -> None:
        nonlocal first
        first = await wait_any(units)

    outcome = await race_deadline(wait_first, seconds, cancellation)
    if outcome is RaceOutcome.TIMED_OUT:
        raise TaskTimeoutException(
            f"Timed out after {seconds}s; none of the {len(units)} tasks in the group finished"
        )
    assert first is not None
    return _value_or_raise(first)
