# Copyright Arthur Tacca 2022 - 2024
# Distributed under the Boost Software License, Version 1.0.
# See accompanying file LICENSE or the copy at https://www.boost.org/LICENSE_1_0.txt

from typing import Any, Iterable, Optional, TypeVar
from aiowhen._aio import *
from aiowhen._src import ResultBase


ResultBaseT = TypeVar("ResultBaseT", bound=ResultBase[Any])


async def wait_all(results: Iterable[ResultBase[object]]) -> None:
    """Waits until every unit is done, whether it succeeded, failed or was cancelled.

    Units are waited for one after the other in iteration order. Finishing in a different order
    does not matter because :meth:`ResultBase.wait_done()` returns immediately for a unit that is
    already done.

    :param results: The units to wait for.
    """
    for r in results:
        await r.wait_done()


async def wait_any(results: Iterable[ResultBaseT]) -> ResultBaseT:
    """Waits until at least one unit is done, and returns it.

    When this returns, more than one unit may already be done; exactly one of them is returned,
    whichever was noticed first.

    :param results: The units to wait for.
    :return: One of the objects in ``results``.
    :raise RuntimeError: If ``results`` is empty.
    """
    first_result: Optional[ResultBaseT] = None

    async def wait_one(result: ResultBaseT) -> None:
        nonlocal first_result
        await result.wait_done()
        if first_result is None:
            first_result = result
        nursery.cancel_scope.cancel()

    async with open_nursery() as nursery:
        for r in results:
            nursery.start_soon(wait_one, r)

    if first_result is None:
        raise RuntimeError("No elements were passed to wait_any")

    return first_result
