"""Bounded-concurrency job execution with retry and idempotent skip.

Responsibilities:
- Run independent async jobs with at most `concurrency` of them in flight.
- Retry failing jobs by immediate re-invocation up to `max_attempts` total attempts.
- Skip jobs whose idempotency key is already known to exist, so reruns resume.
- Fail the whole run on the first fatal job failure, discarding sibling results.

Key types:
- `TaskJob`: one keyed unit of work.
- `BoundedTaskRunner`: executes a batch of jobs and returns results in submission order.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Collection
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar, cast

from ..errors import InvalidInputError, RetryExhaustedError, TransientProviderError
from ..telemetry.logger import RunLogger

T = TypeVar("T")

_NOT_RUN = object()


@dataclass(frozen=True, slots=True)
class TaskJob(Generic[T]):
    """One keyed unit of work.

    Attributes:
        key: Idempotency key, normally the destination object path.
        work: Zero-argument coroutine factory; called once per attempt.
        existing_result: Result reported when the key already exists. Defaults to
            the key itself.
    """

    key: str
    work: Callable[[], Awaitable[T]]
    existing_result: T | None = None


class BoundedTaskRunner:
    """Execute keyed jobs with bounded concurrency and bounded retries."""

    def __init__(
        self,
        concurrency: int = 8,
        max_attempts: int = 5,
        *,
        retry_on: tuple[type[BaseException], ...] = (TransientProviderError,),
        stage: str = "tasks",
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize limits, the retryable error classes, and optional logging."""

        if concurrency <= 0:
            raise InvalidInputError("`concurrency` must be a positive integer.")
        if max_attempts <= 0:
            raise InvalidInputError("`max_attempts` must be a positive integer.")
        self.concurrency = concurrency
        self.max_attempts = max_attempts
        self.retry_on = retry_on
        self.stage = stage
        self._run_logger = run_logger

    async def run(
        self,
        jobs: Sequence[TaskJob[T]],
        existing_keys: Collection[str] = frozenset(),
    ) -> list[T]:
        """Run all jobs and return their results in submission order.

        Args:
            jobs: Jobs in submission order.
            existing_keys: Keys already present at the destination, listed once up front.

        Raises:
            RetryExhaustedError: If a retryable job fails `max_attempts` times.
            Exception: Any non-retryable job failure, unchanged.
        """

        known = frozenset(existing_keys)
        limiter = asyncio.Semaphore(self.concurrency)
        aborted = asyncio.Event()

        async def _gated(job: TaskJob[T]) -> object:
            if job.key in known:
                self._log("job_skip", key=job.key)
                return job.existing_result if job.existing_result is not None else job.key
            async with limiter:
                if aborted.is_set():
                    return _NOT_RUN
                try:
                    return await self._attempt(job)
                except Exception:
                    aborted.set()
                    raise

        outcomes = await asyncio.gather(*(_gated(job) for job in jobs), return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return [cast(T, outcome) for outcome in outcomes]

    async def call(self, key: str, work: Callable[[], Awaitable[T]]) -> T:
        """Run one boundary call under the same retry policy as a batch job."""

        (result,) = await self.run([TaskJob(key=key, work=work)])
        return result

    async def _attempt(self, job: TaskJob[T]) -> T:
        """Invoke one job until it succeeds or exhausts its attempt budget."""

        last_error: BaseException | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await job.work()
            except self.retry_on as exc:
                last_error = exc
                self._log_retry(job.key, attempt, exc)
                continue
            self._log("job_done", key=job.key, attempt=attempt)
            return result
        raise RetryExhaustedError(job.key, self.max_attempts, last_error) from last_error

    def _log(self, event: str, **context: object) -> None:
        """Emit a job-level event when a run logger is attached."""

        if self._run_logger is not None:
            self._run_logger.log_event(self.stage, event, **context)

    def _log_retry(self, key: str, attempt: int, exc: BaseException) -> None:
        """Emit a failed-attempt event when a run logger is attached."""

        if self._run_logger is not None:
            self._run_logger.log_warning(
                self.stage,
                "job_retry",
                key=key,
                attempt=attempt,
                max_attempts=self.max_attempts,
                error_type=type(exc).__name__,
            )
