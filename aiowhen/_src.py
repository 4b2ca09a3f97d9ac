# Copyright Arthur Tacca 2022 - 2025
# Distributed under the Boost Software License, Version 1.0.
# See accompanying file LICENSE or the copy at https://www.boost.org/LICENSE_1_0.txt

import enum
from collections.abc import Awaitable, Callable
from typing import Any, Generic, Optional, TypeVar, cast

from typing_extensions import TypeVarTuple, Unpack

from aiowhen._aio import *


ResultT = TypeVar("ResultT")
ResultT_co = TypeVar("ResultT_co", covariant=True)
ArgsT = TypeVarTuple("ArgsT")
_UNSET: Any = cast(Any, object())  # Sentinel, we manually check it's not present.


class FutureSetAgainException(Exception):
    """Raised if :meth:`Future.set_result()` or :meth:`Future.set_exception()` is called on a unit
    that already holds an outcome, or if :meth:`ResultCapture.run()` is called a second time.

    The offending unit is the only argument::

        raise FutureSetAgainException(self)
    """
    pass


class TaskNotDoneException(Exception):
    """Raised when reading :meth:`ResultBase.result()` or :meth:`ResultBase.exception()` of a unit
    that has not reached a terminal state yet.

    .. attribute:: args
        :type: tuple[ResultBase]

        1-tuple of the unit that was queried too early.
    """
    args: tuple['ResultBase[object]']


class TaskFailedException(Exception):
    """Raised by :meth:`ResultBase.result()` (and so by :func:`when_all` and :func:`when_any`) for
    a unit whose routine raised. The original exception is chained::

        raise TaskFailedException(self) from original_exception

    .. attribute:: __cause__
        :type: BaseException

        The exception raised by the unit, unmodified.

    .. attribute:: args
        :type: tuple[ResultBase]

        1-tuple of the unit that failed.
    """
    pass


class TaskTimeoutException(TimeoutError):
    """Raised when a deadline passes before an aggregator's completion condition is met.

    :func:`run_all_collect_errors` also stores a fresh instance in every slot whose unit was
    cancelled or had not finished when the group was scanned.
    """
    pass


class TaskCancelledException(Exception):
    """Raised by a unit that noticed its :class:`CancellationSource` had been triggered.

    A unit that finishes with this exception is reported as :attr:`UnitState.CANCELLED`, exactly
    like one stopped by its backend's own cancellation.
    """
    pass


class UnexpectedTaskStateException(RuntimeError):
    """A unit was found in a state that the scanning code has no mapping for.

    This is a bug rather than an outcome, so it is always raised and never stored as data.
    """
    pass


class UnitState(enum.Enum):
    """Snapshot of a unit's progress, as returned by :meth:`ResultBase.state()`."""
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


_CANCELLED_TYPES = (TaskCancelledException,) + CANCELLED_EXC_TYPES


# This is covariant even though result is technically mutable.
class ResultBase(Generic[ResultT_co]):
    """Base class for :class:`ResultCapture` and :class:`Future`: a work unit that eventually holds
    either a value or an exception.
    """
    def __init__(self) -> None:
        self._done_event = create_event()
        self._result: ResultT_co = _UNSET
        self._exception: Optional[BaseException] = None

    def result(self) -> ResultT_co:
        """Returns the captured result of the unit.

        :raise TaskNotDoneException: If the unit is not done yet.
        :raise TaskFailedException: If the unit raised; the original exception is the
          ``__cause__``.
        """
        if not self._done_event.is_set():
            raise TaskNotDoneException(self)
        if self._exception is not None:
            raise TaskFailedException(self) from self._exception
        assert self._result is not _UNSET
        return self._result

    def exception(self) -> Optional[BaseException]:
        """Returns the exception raised by the unit, or ``None`` if it returned a value.

        This is the original exception, not a :class:`TaskFailedException`.

        :raise TaskNotDoneException: If the unit is not done yet.
        """
        if not self._done_event.is_set():
            raise TaskNotDoneException(self)
        return self._exception

    def is_done(self) -> bool:
        """Returns ``True`` if the unit has reached a terminal state."""
        return self._done_event.is_set()

    def state(self) -> UnitState:
        """Returns a snapshot of the unit's state.

        A unit is :attr:`UnitState.CANCELLED` if it finished by raising the backend's cancelled
        exception (:class:`trio.Cancelled` or :class:`asyncio.CancelledError`) or
        :class:`TaskCancelledException`; any other exception makes it :attr:`UnitState.FAILED`.
        Unlike :meth:`result`, this never raises.
        """
        if not self._done_event.is_set():
            return UnitState.PENDING
        if self._exception is None:
            return UnitState.SUCCEEDED
        if isinstance(self._exception, _CANCELLED_TYPES):
            return UnitState.CANCELLED
        return UnitState.FAILED

    async def wait_done(self) -> None:
        """Waits until the unit is done.

        .. note::
            This does *not* raise if the unit failed or was cancelled, and cancelling a call to
            this method does *not* cancel the unit.
        """
        await self._done_event.wait()

    def _set_result(self, result: object) -> None:
        """Shared implementation of Future.set_result() and ResultCapture.run().

        This is type-unsafe, since we're modifying it but ResultT is covariant. The caller needs to
        ensure these match.
        """
        if self._done_event.is_set():
            raise FutureSetAgainException(self)
        self._result = cast(ResultT_co, result)
        self._done_event.set()

    def _set_exception(self, exception: BaseException) -> None:
        if self._done_event.is_set():
            raise FutureSetAgainException(self)
        self._exception = exception
        self._done_event.set()


# Invariant, because set_result is public.
class Future(ResultBase[ResultT], Generic[ResultT]):
    """A unit whose outcome is set explicitly by other code, e.g. a callback from a thread or a
    routine that was launched some other way.
    """

    def set_result(self, result: ResultT) -> None:
        """Completes the unit with a value.

        :raise FutureSetAgainException: If an outcome has already been set.
        """
        self._set_result(result)

    def set_exception(self, exception: BaseException) -> None:
        """Completes the unit with an exception.

        Pass a :class:`TaskCancelledException` to mark the unit as cancelled rather than failed.

        :raise FutureSetAgainException: If an outcome has already been set.
        """
        self._set_exception(exception)


class ResultCapture(ResultBase[ResultT_co], Generic[ResultT_co]):
    """A unit backed by a routine running in a nursery.

    Usually created with :meth:`start_soon()`. Instantiating directly is fine as long as something
    calls :meth:`run()` exactly once.

    :param routine: An async callable.
    :param args: Positional arguments for ``routine``.
    :param suppress_exception: If ``True``, exceptions derived from :class:`Exception` are only
        recorded, not re-raised into the enclosing nursery. :class:`BaseException` subclasses
        (including cancellation) always propagate.
    """

    @classmethod
    def start_soon(
        cls,
        nursery: NurseryLike,
        routine: Callable[[Unpack[ArgsT]], Awaitable[ResultT]],
        *args: Unpack[ArgsT],
        suppress_exception: bool = False,
    ) -> 'ResultCapture[ResultT]':
        """Launches ``routine(*args)`` in ``nursery`` and returns the unit capturing its outcome.

        :param nursery: A :class:`trio.Nursery` or :class:`anyio.abc.TaskGroup`.
        :param routine: An async callable. Use :func:`functools.partial` for keyword arguments.
        :param args: Positional arguments for ``routine``.
        :param suppress_exception: See the class documentation.
        """
        rc = cls(routine, *args, suppress_exception=suppress_exception)  # type: ignore
        nursery.start_soon(rc.run)
        return rc  # type: ignore

    def __init__(
        self,
        routine: Callable[..., Awaitable[ResultT_co]],
        *args: object,
        suppress_exception: bool = False,
    ) -> None:
        super().__init__()
        self._routine = routine
        self._args = args
        self._suppress_exception = suppress_exception

    async def run(self, **kwargs: Any) -> None:
        """Runs the routine and records its outcome.

        :raise BaseException: Whatever the routine raised, unless it is an :class:`Exception` and
            ``suppress_exception`` was set.
        :raise FutureSetAgainException: If called more than once.
        """
        try:
            result = await self._routine(*self._args, **kwargs)
            self._set_result(result)
        except Exception as e:
            self._set_exception(e)
            if not self._suppress_exception:
                raise  # Allowed the exception to propagate into user nursery
        except BaseException as e:
            self._set_exception(e)
            raise  # Allowed the exception to propagate into user nursery

    @property
    def routine(self) -> Callable[..., Awaitable[ResultT_co]]:
        """The routine whose result is captured."""
        return self._routine

    @property
    def args(self) -> tuple[object, ...]:
        """The positional arguments passed to the routine."""
        return self._args
