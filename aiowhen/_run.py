# Copyright Arthur Tacca 2022 - 2025
# Distributed under the Boost Software License, Version 1.0.
# See accompanying file LICENSE or the copy at https://www.boost.org/LICENSE_1_0.txt

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Iterable, NamedTuple, Optional, TypeVar

from aiowhen._aio import *
from aiowhen._cancel import CancellationSource
from aiowhen._race import _check_seconds, when_all
from aiowhen._src import (
    ResultCapture, TaskTimeoutException, UnexpectedTaskStateException, UnitState
)


logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class CollectedResult(NamedTuple):
    """One slot of the list returned by :func:`run_all_collect_errors`.

    Exactly one field is meaningful: if ``error`` is ``None`` then ``value`` is the unit's result,
    otherwise ``value`` is just the placeholder passed as ``default``.
    """
    value: Any
    error: Optional[BaseException]


def _launch(
    nursery: NurseryLike,
    factories: Iterable[Callable[[], Awaitable[ResultT]]],
) -> list[ResultCapture[ResultT]]:
    # Failures are recorded in the unit rather than raised into the caller's nursery.
    return [
        ResultCapture.start_soon(nursery, factory, suppress_exception=True)
        for factory in factories
    ]


async def run_all_safely(
    nursery: NurseryLike,
    factories: Iterable[Callable[[], Awaitable[ResultT]]],
    seconds: Optional[float] = None,
    cancellation: Optional[CancellationSource] = None,
) -> list[ResultT]:
    """Runs every factory in ``nursery`` and returns the values of the ones that succeeded.

    If all of them succeed before the deadline, this is the same as :func:`when_all`. Otherwise the
    units are scanned in their original order once the wait is over, and only the values of those
    that had succeeded by then are kept. Units that failed, were cancelled or are still running are
    left out without any indication of why, so the only sign of a partial result is that the list
    is shorter than ``factories``.

    Units that ignore ``cancellation`` keep running in ``nursery`` after this returns.

    :param nursery: A :class:`trio.Nursery` or :class:`anyio.abc.TaskGroup` to run the units in.
    :param factories: Async callables taking no arguments; each is started exactly once.
    :param seconds: Optional deadline; ``None`` or ``0`` waits indefinitely.
    :param cancellation: Triggered when every unit is done or when the deadline passes.
    :return: The successful values, in the relative order of their factories.
    :raise ValueError: If ``seconds`` is negative. Nothing is started in that case.
    """
    _check_seconds(seconds)
    units = _launch(nursery, factories)
    try:
        return await when_all(units, seconds, cancellation)
    except Exception as e:
        values = [r.result() for r in units if r.state() is UnitState.SUCCEEDED]
        logger.debug(
            "Group of %d did not fully succeed (%s); kept %d results",
            len(units), type(e).__name__, len(values),
        )
        return values


async def run_all_collect_errors(
    nursery: NurseryLike,
    factories: Iterable[Callable[[], Awaitable[ResultT]]],
    seconds: Optional[float] = None,
    cancellation: Optional[CancellationSource] = None,
    *,
    default: Optional[ResultT] = None,
) -> list[CollectedResult]:
    """Runs every factory in ``nursery`` and returns a ``(value, error)`` pair for each of them.

    The list always has one :class:`CollectedResult` per factory, in the same order:

    * a unit that succeeded gives ``(value, None)``;
    * a unit that failed gives ``(default, exception)`` with the exception it raised;
    * a unit that was cancelled, or had still not finished when the wait ended, gives
      ``(default, TaskTimeoutException(...))``.

    .. note::
        The last case does not distinguish a unit that was stopped by ``cancellation`` from one
        that was simply too slow for the deadline. Both are reported as timeouts.

    :param nursery: A :class:`trio.Nursery` or :class:`anyio.abc.TaskGroup` to run the units in.
    :param factories: Async callables taking no arguments; each is started exactly once.
    :param seconds: Optional deadline; ``None`` or ``0`` waits indefinitely.
    :param cancellation: Triggered when every unit is done or when the deadline passes.
    :param default: Placeholder value for slots that hold an error.
    :raise UnexpectedTaskStateException: If a unit reports a state with no mapping. This indicates
        a bug and is never folded into the results.
    :raise ValueError: If ``seconds`` is negative. Nothing is started in that case.
    """
    _check_seconds(seconds)
    units = _launch(nursery, factories)
    try:
        values = await when_all(units, seconds, cancellation)
    except Exception as e:
        logger.debug("Group of %d did not fully succeed (%s)", len(units), type(e).__name__)
    else:
        return [CollectedResult(value, None) for value in values]

    collected: list[CollectedResult] = []
    for index, r in enumerate(units):
        state = r.state()
        if state is UnitState.SUCCEEDED:
            collected.append(CollectedResult(r.result(), None))
        elif state is UnitState.FAILED:
            collected.append(CollectedResult(default, r.exception()))
        elif state is UnitState.CANCELLED or state is UnitState.PENDING:
            collected.append(CollectedResult(
                default, TaskTimeoutException(f"Task {index} did not finish ({state.value})")
            ))
        else:
            raise UnexpectedTaskStateException(f"Task {index} is in unexpected state {state!r}")
    return collected
