"""RateLimitedDispatcher - Serializes calls to a quota-constrained API.

Every submitted request goes through a single active-task slot followed by a
FIFO backlog, so at most one request is in flight at any time. A response
verified as rate-limited sends its task to the back of the backlog and holds
the next task until the upstream's reset time.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from releasebot.dispatcher.exceptions import DispatcherClosedError, RateLimitExhaustedError
from releasebot.dispatcher.models import (
    ACCEPTED,
    DispatcherStatus,
    RateLimitedTask,
    RateLimitVerdict,
)

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


def accept_all(response: Any) -> RateLimitVerdict:
    """Verify function accepting every response without delay."""
    return ACCEPTED


class RateLimitedDispatcher(Generic[RequestT, ResponseT]):
    """Runs requests one at a time, absorbing rate-limit backpressure.

    The dispatcher is IDLE when nothing runs, RUNNING while a request is being
    executed, and DELAYED while the next request waits for the time requested
    by the last verified response.

    Exceptions raised by ``work`` fail the caller's future straight away and
    are never retried. Rate-limited responses are retried transparently, as
    many times as needed unless ``max_attempts`` is set.

    Cancelling the future returned by ``submit`` does not withdraw the
    request: it still runs when its turn comes and its result is dropped.
    """

    def __init__(
        self,
        work: Callable[[RequestT], Awaitable[ResponseT]],
        verify: Callable[[ResponseT], RateLimitVerdict] = accept_all,
        clock: Callable[[], float] = time.time,
        max_attempts: int | None = None,
        name: str = "dispatcher",
    ) -> None:
        """Initialize the dispatcher.

        Args:
            work: Coroutine function performing one request.
            verify: Inspects a response and tells whether it was accepted
                and until when the next request must wait.
            clock: Returns the current epoch time; timestamps returned by
                ``verify`` are compared against it.
            max_attempts: Maximum executions of a request that keeps being
                rate-limited. None means no limit.
            name: Name used in log messages.
        """
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._work = work
        self._verify = verify
        self._clock = clock
        self._max_attempts = max_attempts
        self.name = name
        self._backlog: deque[RateLimitedTask[RequestT]] = deque()
        self._current: RateLimitedTask[RequestT] | None = None
        self._retry_not_before: float | None = None
        self._runner: asyncio.Task[None] | None = None
        self._delayed = False
        self._closed = False

    @property
    def status(self) -> DispatcherStatus:
        if self._current is None:
            return DispatcherStatus.IDLE
        if self._delayed:
            return DispatcherStatus.DELAYED
        return DispatcherStatus.RUNNING

    @property
    def backlog_size(self) -> int:
        """Number of requests waiting behind the current one."""
        return len(self._backlog)

    @property
    def retry_not_before(self) -> float | None:
        return self._retry_not_before

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, request: RequestT) -> asyncio.Future[ResponseT]:
        """Queue a request.

        Must be called from a running event loop.

        Args:
            request: The request to hand to ``work``.

        Returns:
            A future resolved with the accepted response, or failed with the
            exception raised while performing the request.

        Raises:
            DispatcherClosedError: If the dispatcher has been closed.
        """
        if self._closed:
            raise DispatcherClosedError(f"{self.name} is closed")

        loop = asyncio.get_running_loop()
        task: RateLimitedTask[RequestT] = RateLimitedTask(request=request, future=loop.create_future())
        self._backlog.append(task)

        if self._current is None:
            self._dispatch_next()
        else:
            logger.debug("%s busy, request queued (backlog=%d)", self.name, len(self._backlog))

        return task.future

    async def aclose(self) -> None:
        """Stop the dispatcher.

        The running request is cancelled and every queued request fails with
        DispatcherClosedError.
        """
        if self._closed:
            return
        self._closed = True

        pending = list(self._backlog)
        self._backlog.clear()
        for task in pending:
            _fail(task, DispatcherClosedError(f"{self.name} closed before the request ran"))

        current = self._current
        runner = self._runner
        if runner is not None and not runner.done():
            runner.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await runner
        # A runner cancelled before its first step never reaches its handlers
        if current is not None:
            _fail(current, DispatcherClosedError(f"{self.name} closed while the request was pending"))
        self._current = None

        logger.info("%s closed (%d queued requests dropped)", self.name, len(pending))

    def _dispatch_next(self) -> None:
        """Start the next queued task, or go back to idle."""
        self._current = None
        if self._closed or not self._backlog:
            return

        task = self._backlog.popleft()
        self._current = task
        self._runner = asyncio.get_running_loop().create_task(self._run(task))

    def _pending_delay(self) -> float:
        if self._retry_not_before is None:
            return 0.0
        return self._retry_not_before - self._clock()

    async def _run(self, task: RateLimitedTask[RequestT]) -> None:
        try:
            delay = self._pending_delay()
            if delay > 0:
                self._delayed = True
                logger.info("%s delaying next request by %.2fs", self.name, delay)
                await asyncio.sleep(delay)
                self._delayed = False

            task.attempts += 1
            try:
                response = await self._work(task.request)
                verdict = self._verify(response)
            except Exception as e:
                logger.warning("%s request failed: %s", self.name, e)
                _fail(task, e)
            else:
                self._settle(task, response, verdict)
        except asyncio.CancelledError:
            if self._closed:
                _fail(task, DispatcherClosedError(f"{self.name} closed while the request was running"))
            else:
                # Cancelled from outside, e.g. event loop shutdown: the backlog
                # stays queued and the next submit restarts dispatching
                logger.warning("%s runner cancelled with %d queued requests", self.name, len(self._backlog))
                if not task.future.done():
                    task.future.cancel()
                self._current = None
            raise
        else:
            self._dispatch_next()
        finally:
            self._delayed = False

    def _settle(
        self,
        task: RateLimitedTask[RequestT],
        response: ResponseT,
        verdict: RateLimitVerdict,
    ) -> None:
        self._retry_not_before = verdict.retry_not_before

        if verdict.accepted:
            if not task.future.done():
                task.future.set_result(response)
            return

        if self._max_attempts is not None and task.attempts >= self._max_attempts:
            logger.warning(
                "%s giving up on rate-limited request after %d attempts",
                self.name,
                task.attempts,
            )
            _fail(task, RateLimitExhaustedError(task.attempts))
            return

        # Back of the queue, not retried in place
        self._backlog.append(task)
        logger.info(
            "%s request rate-limited (attempt %d), re-queued behind %d others",
            self.name,
            task.attempts,
            len(self._backlog) - 1,
        )


def _fail(task: RateLimitedTask[Any], error: BaseException) -> None:
    if not task.future.done():
        task.future.set_exception(error)
