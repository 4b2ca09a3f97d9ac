# Copyright Arthur Tacca 2022 - 2025
# Distributed under the Boost Software License, Version 1.0.
# See accompanying file LICENSE or the copy at https://www.boost.org/LICENSE_1_0.txt

from aiowhen._version import __version__

from aiowhen._src import (
    ResultBase, ResultCapture, Future, UnitState,
    TaskFailedException, TaskNotDoneException, FutureSetAgainException, TaskTimeoutException,
    TaskCancelledException, UnexpectedTaskStateException,
)
from aiowhen._cancel import CancellationSource
from aiowhen._wait import wait_all, wait_any
from aiowhen._race import RaceOutcome, race_deadline, when_all, when_any
from aiowhen._run import CollectedResult, run_all_safely, run_all_collect_errors

__all__ = [
    "ResultBase", "ResultCapture", "Future", "UnitState",
    "TaskFailedException", "TaskNotDoneException", "FutureSetAgainException",
    "TaskTimeoutException", "TaskCancelledException", "UnexpectedTaskStateException",
    "CancellationSource",
    "wait_all", "wait_any",
    "RaceOutcome", "race_deadline", "when_all", "when_any",
    "CollectedResult", "run_all_safely", "run_all_collect_errors",
]
