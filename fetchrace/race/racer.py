from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .types import Failure, FetchTask, RaceOutcome, Success, TaskResult, TimedOut, WonBy

logger = logging.getLogger(__name__)


class CancelOnce:
    """Runs the wrapped cancel function the first time it is called only."""

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self) -> bool:
        if self._fired:
            return False
        self._fired = True
        self._cancel()
        return True


class RaceFetcher:
    """
    Races two FetchTasks against each other and against a deadline.

    In lenient mode (the default) a failing task reports an empty payload
    and can win the race with it. In strict mode a failing task forfeits and
    the other one keeps running until it answers or the deadline passes.
    """

    def __init__(self, deadline_s: float, *, strict: bool = False):
        if deadline_s <= 0:
            raise ValueError(f"deadline must be positive, got {deadline_s}")
        self.deadline_s = deadline_s
        self.strict = strict

    async def race(self, task_a: FetchTask, task_b: FetchTask) -> RaceOutcome:
        if task_a.id == task_b.id:
            raise ValueError(f"Both tasks share the id '{task_a.id}'")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.deadline_s

        slots: dict[str, asyncio.Future[TaskResult]] = {
            task_a.id: loop.create_future(),
            task_b.id: loop.create_future(),
        }
        runners: list[asyncio.Task[None]] = []

        def cancel_pending() -> None:
            current = asyncio.current_task()
            for runner in runners:
                if runner is not current and not runner.done():
                    runner.cancel()

        cancel = CancelOnce(cancel_pending)

        for task in (task_a, task_b):
            runner = loop.create_task(
                self._run(task, slots[task.id], cancel), name=f"race:{task.id}"
            )
            runners.append(runner)

        try:
            outcome = await self._select(slots, deadline)
        finally:
            cancel()

        logger.info(f"race {task_a.id} vs {task_b.id}: {outcome}")
        return outcome

    async def _run(
        self,
        task: FetchTask,
        slot: asyncio.Future[TaskResult],
        cancel: CancelOnce,
    ) -> None:
        result: TaskResult
        try:
            payload = await task.call()
        except asyncio.CancelledError:
            logger.debug(f"{task.id}: cancelled while fetching {task.url}")
            raise
        except Exception as exc:
            logger.warning(f"{task.id}: fetch from {task.url} failed: {exc}")
            result = Failure(task.id, exc)
        else:
            result = Success(task.id, payload)

        # The slot is only read until the race is decided; a late write is dropped.
        if not slot.done():
            slot.set_result(result)

        if isinstance(result, Success):
            cancel()

    async def _select(
        self,
        slots: dict[str, asyncio.Future[TaskResult]],
        deadline: float,
    ) -> RaceOutcome:
        loop = asyncio.get_running_loop()
        pending: set[asyncio.Future[TaskResult]] = set(slots.values())
        forfeited: list[str] = []

        while pending:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break

            done, pending = await asyncio.wait(
                pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
            )
            if not done:
                break

            for slot in slots.values():
                if slot not in done:
                    continue
                result = slot.result()
                if isinstance(result, Success):
                    return WonBy(result.task_id, result.payload)
                if not self.strict:
                    return WonBy(result.task_id, "")
                forfeited.append(result.task_id)

        return TimedOut(tuple(forfeited))


async def race(
    task_a: FetchTask,
    task_b: FetchTask,
    deadline_s: float,
    *,
    strict: bool = False,
) -> RaceOutcome:
    return await RaceFetcher(deadline_s, strict=strict).race(task_a, task_b)
