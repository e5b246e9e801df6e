# tests/test_race.py
from __future__ import annotations

import asyncio
import dataclasses
import time

import pytest

from fetchrace.race import CancelOnce, FetchTask, RaceFetcher, TimedOut, WonBy, race


def _task(
    task_id: str,
    delay: float,
    payload: str = "",
    *,
    error: Exception | None = None,
    log: list[str] | None = None,
) -> FetchTask:
    """
    A FetchTask that sleeps `delay` seconds, then returns `payload` or raises `error`.
    Cancellation is recorded in `log` when given.
    """

    async def call() -> str:
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            if log is not None:
                log.append(f"{task_id} cancelled")
            raise
        if error is not None:
            raise error
        return payload

    return FetchTask(task_id, f"http://{task_id}.test/", call)


def _race(a: FetchTask, b: FetchTask, deadline_s: float, **kw):
    return asyncio.run(race(a, b, deadline_s, **kw))


def test_fast_task_wins_before_slow_one() -> None:
    start = time.monotonic()
    outcome = _race(_task("a", 0.05, "A-OK"), _task("b", 0.9, "B-OK"), 1.0)
    elapsed = time.monotonic() - start

    assert outcome == WonBy("a", "A-OK")
    assert elapsed < 0.5


def test_second_task_wins_when_faster() -> None:
    outcome = _race(_task("a", 0.5, "A-OK"), _task("b", 0.02, "B-OK"), 1.0)

    assert outcome == WonBy("b", "B-OK")


def test_both_tasks_past_deadline_time_out() -> None:
    start = time.monotonic()
    outcome = _race(_task("a", 0.6, "A-OK"), _task("b", 0.7, "B-OK"), 0.5)
    elapsed = time.monotonic() - start

    assert outcome == TimedOut()
    assert not hasattr(outcome, "payload")
    assert 0.45 <= elapsed < 0.65


def test_never_completing_tasks_are_bounded_by_deadline() -> None:
    start = time.monotonic()
    outcome = _race(_task("a", 3600), _task("b", 3600), 0.1)

    assert isinstance(outcome, TimedOut)
    assert time.monotonic() - start < 1.0


def test_strict_failed_task_forfeits_to_the_other() -> None:
    outcome = _race(
        _task("a", 0.01, error=RuntimeError("boom")),
        _task("b", 0.1, "B-OK"),
        1.0,
        strict=True,
    )

    assert outcome == WonBy("b", "B-OK")


def test_lenient_fast_failure_wins_with_empty_payload() -> None:
    outcome = _race(
        _task("a", 0.01, error=RuntimeError("boom")),
        _task("b", 0.3, "B-OK"),
        1.0,
    )

    assert outcome == WonBy("a", "")


def test_lenient_failure_after_success_does_not_matter() -> None:
    outcome = _race(
        _task("a", 0.3, error=RuntimeError("boom")),
        _task("b", 0.01, "B-OK"),
        1.0,
    )

    assert outcome == WonBy("b", "B-OK")


def test_strict_both_failing_ends_without_waiting_for_deadline() -> None:
    start = time.monotonic()
    outcome = _race(
        _task("a", 0.01, error=RuntimeError("a down")),
        _task("b", 0.05, error=RuntimeError("b down")),
        5.0,
        strict=True,
    )

    assert outcome == TimedOut(forfeited=("a", "b"))
    assert time.monotonic() - start < 1.0


def test_strict_failure_then_deadline_records_forfeit() -> None:
    outcome = _race(
        _task("a", 0.01, error=RuntimeError("boom")),
        _task("b", 0.5, "B-OK"),
        0.1,
        strict=True,
    )

    assert outcome == TimedOut(forfeited=("a",))


def test_simultaneous_readiness_picks_one_winner() -> None:
    outcome = _race(_task("a", 0, "A"), _task("b", 0, "B"), 1.0)

    assert outcome in (WonBy("a", "A"), WonBy("b", "B"))


def test_loser_is_cancelled_after_winner() -> None:
    log: list[str] = []

    async def main():
        outcome = await race(
            _task("a", 0.01, "A-OK", log=log), _task("b", 5, "B-OK", log=log), 1.0
        )
        await asyncio.sleep(0.01)
        return outcome

    outcome = asyncio.run(main())

    assert outcome == WonBy("a", "A-OK")
    assert log == ["b cancelled"]


def test_both_tasks_cancelled_on_timeout() -> None:
    log: list[str] = []

    async def main():
        outcome = await race(
            _task("a", 5, log=log), _task("b", 5, log=log), 0.05
        )
        await asyncio.sleep(0.01)
        return outcome

    outcome = asyncio.run(main())

    assert isinstance(outcome, TimedOut)
    assert sorted(log) == ["a cancelled", "b cancelled"]


def test_no_task_left_pending_after_race() -> None:
    async def main():
        await race(_task("a", 0.01, "A"), _task("b", 5, "B"), 1.0)
        await asyncio.sleep(0.01)
        return asyncio.all_tasks() - {asyncio.current_task()}

    assert asyncio.run(main()) == set()


def test_late_loser_result_is_discarded() -> None:
    finished: list[str] = []

    async def stubborn() -> str:
        # Ignores the cancellation request and answers anyway.
        try:
            await asyncio.sleep(0.05)
        except asyncio.CancelledError:
            pass
        await asyncio.sleep(0.05)
        finished.append("b")
        return "late"

    async def main():
        outcome = await race(
            _task("a", 0.01, "A-OK"), FetchTask("b", "http://b.test/", stubborn), 1.0
        )
        await asyncio.sleep(0.2)
        return outcome, asyncio.all_tasks() - {asyncio.current_task()}

    outcome, leftover = asyncio.run(main())

    assert outcome == WonBy("a", "A-OK")
    assert finished == ["b"]
    assert leftover == set()


def test_cancelling_the_race_cancels_both_tasks() -> None:
    log: list[str] = []

    async def main():
        pending = asyncio.create_task(
            race(_task("a", 5, log=log), _task("b", 5, log=log), 10.0)
        )
        await asyncio.sleep(0.02)
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending
        await asyncio.sleep(0.01)

    asyncio.run(main())

    assert sorted(log) == ["a cancelled", "b cancelled"]


def test_cancel_once_is_idempotent() -> None:
    calls: list[int] = []
    guard = CancelOnce(lambda: calls.append(1))

    assert guard.fired is False
    assert guard() is True
    assert guard() is False
    assert guard.fired is True
    assert calls == [1]


def test_outcome_is_immutable() -> None:
    outcome = WonBy("a", "A-OK")

    with pytest.raises(dataclasses.FrozenInstanceError):
        outcome.payload = "changed"  # type: ignore[misc]


@pytest.mark.parametrize("deadline", [0, -1.0])
def test_non_positive_deadline_rejected(deadline: float) -> None:
    with pytest.raises(ValueError):
        RaceFetcher(deadline)


def test_tasks_must_have_distinct_ids() -> None:
    with pytest.raises(ValueError):
        _race(_task("a", 0, "x"), _task("a", 0, "y"), 1.0)
