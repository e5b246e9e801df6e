from .racer import CancelOnce, RaceFetcher, race
from .types import (
    Failure,
    FetchTask,
    RaceOutcome,
    Success,
    TaskResult,
    TimedOut,
    WonBy,
)

__all__ = [
    "race",
    "RaceFetcher",
    "CancelOnce",
    "FetchTask",
    "TaskResult",
    "Success",
    "Failure",
    "RaceOutcome",
    "WonBy",
    "TimedOut",
]
