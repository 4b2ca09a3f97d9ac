"""Run as part of type checking, not at runtime."""
# pyright: reportUnusedVariable=false
from functools import partial

from typing_extensions import assert_type

from aiowhen import (
    CollectedResult, Future, ResultBase, ResultCapture, run_all_collect_errors, run_all_safely,
    wait_any, when_all, when_any,
)
from aiowhen._aio import CancelScopeLike, NurseryLike

from anyio.abc import TaskGroup
import trio


def check_trio_protocols(trio_nursery: trio.Nursery) -> None:
    """Check Trio's classes satisfy our protocols."""
    nursery: NurseryLike = trio_nursery
    cancel_scope: CancelScopeLike = trio_nursery.cancel_scope


def check_anyio_protocols(task_group: TaskGroup) -> None:
    """Check Anyio's classes satisfy our protocols."""
    nursery: NurseryLike = task_group
    cancel_scope: CancelScopeLike = task_group.cancel_scope


async def sample_func(a: int, b: str) -> list[str]:
    return []


async def returns_int() -> int:
    return 0


async def returns_bool() -> bool:
    return True


async def check_resultcapture_start_soon(nursery: NurseryLike) -> None:
    ResultCapture.start_soon(nursery, sample_func, 1)  # type: ignore
    ResultCapture.start_soon(nursery, sample_func, 1, 'two', False)  # type: ignore
    result = ResultCapture.start_soon(nursery, sample_func, 1, 'two')
    assert_type(result.result(), list[str])


async def check_is_covariant(nursery: NurseryLike) -> None:
    res_int: ResultCapture[int] = ResultCapture.start_soon(nursery, returns_int)
    res_bool: ResultCapture[bool] = ResultCapture.start_soon(nursery, returns_bool)
    also_int: ResultCapture[int] = res_bool
    not_str: ResultCapture[str] = res_bool  # type: ignore

    future_bool = Future[bool]()
    future_bool.set_result(True)
    future_bool.set_result(1)  # type: ignore
    base_int: ResultBase[int] = future_bool
    future_int: Future[int] = future_bool  # type: ignore

    res_one: ResultCapture[int] = await wait_any([res_int])
    res_two: ResultCapture[int] = await wait_any([res_int, res_bool])


async def check_aggregators(nursery: NurseryLike) -> None:
    units = [ResultCapture.start_soon(nursery, sample_func, 1, 'two')]
    assert_type(await when_all(units, 1.5), list[list[str]])
    assert_type(await when_any(units), list[str])

    factories = [partial(sample_func, 1, 'two')]
    assert_type(await run_all_safely(nursery, factories), list[list[str]])
    assert_type(await run_all_collect_errors(nursery, factories, 2.0), list[CollectedResult])
