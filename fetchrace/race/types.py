from collections.abc import Awaitable, Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class FetchTask:
    id: str
    url: str
    call: Callable[[], Awaitable[str]]


@dataclass(frozen=True)
class Success:
    task_id: str
    payload: str


@dataclass(frozen=True)
class Failure:
    task_id: str
    cause: Exception


TaskResult = Success | Failure


@dataclass(frozen=True)
class WonBy:
    task_id: str
    payload: str


@dataclass(frozen=True)
class TimedOut:
    # ids of tasks that failed before the race was abandoned (strict mode only)
    forfeited: tuple[str, ...] = ()


RaceOutcome = WonBy | TimedOut
