# Copyright Timescale, Inc. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Polling until a service reaches a state.

A ``Waiter`` fetches the service once per tick and asks a ``WaitHandler``
whether it is done. The handler answers with ``(done, error)``:

- ``done`` and no error: the wait succeeds
- ``done`` with an error: the wait fails with that error
- not ``done`` with an error: the error is shown as progress and polling continues
- not ``done`` and no error: polling continues
"""

import asyncio
from .constants import DEFAULT_POLL_INTERVAL, FATAL_STATUSES
from .exceptions import (
    APIRequestError,
    FatalRemoteStateError,
    WaitCanceledError,
    WaitTimeoutError,
)
from .models import ApiResponse, Service
from abc import ABC, abstractmethod
from loguru import logger
from typing import Any, Awaitable, Callable, Optional, Tuple


FetchFunction = Callable[[], Awaitable[ApiResponse]]
CheckResult = Tuple[bool, Optional[Exception]]


def is_server_error(status_code: int) -> bool:
    """Return True for 5xx responses, which are assumed to be temporary."""
    return 500 <= status_code < 600


class WaitHandler(ABC):
    """Interprets status responses for one kind of wait."""

    @abstractmethod
    def message(self) -> str:
        """Return the progress message to display while waiting."""

    @abstractmethod
    def check(self, response: ApiResponse) -> CheckResult:
        """Decide whether the wait is over given the latest status response."""


class StatusWaitHandler(WaitHandler):
    """Waits for a service to reach ``target_status``.

    The status of ``service`` is updated on every successful fetch so callers
    can render the final state after waiting.
    """

    def __init__(self, target_status: str, service: Optional[Service] = None):
        self.target_status = target_status
        self.service = service if service is not None else Service()

    def message(self) -> str:
        return f'Service status: {self.service.status or ""}'

    def check(self, response: ApiResponse) -> CheckResult:
        if response.status_code == 200:
            body = response.json_dict()
            if body is None:
                return True, FatalRemoteStateError('no response body returned from API')

            status = body.get('status')
            self.service.status = status
            if status == self.target_status:
                return True, None
            if status in FATAL_STATUSES:
                return True, FatalRemoteStateError(
                    f'service failed with status: {status}', status=status
                )
            return False, None

        if response.status_code == 404:
            # deleted by someone else while we were waiting
            return True, FatalRemoteStateError('service not found', status_code=404)
        if is_server_error(response.status_code):
            return False, APIRequestError('internal server error', status_code=response.status_code)
        return True, FatalRemoteStateError(
            f'received unexpected {response.status} while checking service status',
            status_code=response.status_code,
        )


class DeletionWaitHandler(WaitHandler):
    """Waits for a service to disappear."""

    def __init__(self, service_id: str):
        self.service_id = service_id

    def message(self) -> str:
        return f"Waiting for service '{self.service_id}' to be deleted"

    def check(self, response: ApiResponse) -> CheckResult:
        if response.status_code == 200:
            return False, None
        if response.status_code == 404:
            return True, None
        if is_server_error(response.status_code):
            return False, APIRequestError('internal server error', status_code=response.status_code)
        return True, FatalRemoteStateError(
            f'received unexpected {response.status} while checking service status',
            status_code=response.status_code,
        )


class ProgressReporter:
    """Writes each new progress message on its own line.

    With no output the messages are only logged.
    """

    def __init__(self, output: Optional[Any] = None):
        self.output = output
        self.last_message: Optional[str] = None

    def update(self, message: str) -> None:
        if message == self.last_message:
            return
        self.last_message = message
        logger.debug(message)
        if self.output is not None:
            self.output.write(f'{message}\n')
            flush = getattr(self.output, 'flush', None)
            if flush is not None:
                flush()


class Waiter:
    """One polling loop over a single resource.

    Attributes:
        message: The progress message currently displayed
        ticks: Number of status fetches performed so far
    """

    def __init__(
        self,
        fetch: FetchFunction,
        handler: WaitHandler,
        timeout: float,
        timeout_message: str = '',
        output: Optional[Any] = None,
        cancel_event: Optional[asyncio.Event] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """Initialize the waiter.

        Args:
            fetch: Coroutine function returning the latest status response
            handler: Interprets each response
            timeout: Overall deadline in seconds
            timeout_message: Context appended to timeout and cancellation errors
            output: Optional text stream for progress lines
            cancel_event: Setting this event cancels the wait
            poll_interval: Seconds between two fetches
        """
        self.fetch = fetch
        self.handler = handler
        self.timeout = timeout
        self.timeout_message = timeout_message
        self.cancel_event = cancel_event if cancel_event is not None else asyncio.Event()
        self.poll_interval = poll_interval
        self.progress = ProgressReporter(output)
        self.message = handler.message()
        self.ticks = 0

    def _update(self, message: str) -> None:
        self.message = message
        self.progress.update(message)

    def _timeout_error(self) -> WaitTimeoutError:
        return WaitTimeoutError(
            f'wait timeout reached after {self.timeout:g}s - {self.timeout_message}'
        )

    def _canceled_error(self) -> WaitCanceledError:
        return WaitCanceledError(f'canceled waiting - {self.timeout_message}')

    async def _sleep(self, delay: float) -> bool:
        """Sleep for ``delay`` seconds; return True if the wait was canceled meanwhile."""
        if delay <= 0:
            return self.cancel_event.is_set()
        try:
            await asyncio.wait_for(self.cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def _fetch(self, timeout: float) -> ApiResponse:
        """Run one fetch, abandoning it as soon as the wait is canceled.

        Raises:
            WaitCanceledError: If ``cancel_event`` is set before the fetch completes
            asyncio.TimeoutError: If the fetch outlives ``timeout``
        """
        fetch = asyncio.ensure_future(self.fetch())
        canceled = asyncio.ensure_future(self.cancel_event.wait())
        try:
            await asyncio.wait(
                {fetch, canceled}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (fetch, canceled):
                if not task.done():
                    task.cancel()

        if self.cancel_event.is_set():
            if fetch.done() and not fetch.cancelled():
                # mark the result as consumed
                fetch.exception()
            raise self._canceled_error()
        if not fetch.done():
            raise asyncio.TimeoutError()
        return fetch.result()

    async def run(self) -> None:
        """Poll until the handler reports completion.

        Raises:
            WaitTimeoutError: If the deadline elapses first
            WaitCanceledError: If ``cancel_event`` is set first
            Exception: Whatever error the handler returned with ``done``
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        self._update(self.message)

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise self._timeout_error()
            if await self._sleep(min(self.poll_interval, remaining)):
                raise self._canceled_error()
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise self._timeout_error()

            self.ticks += 1
            try:
                response = await self._fetch(remaining)
            except WaitCanceledError:
                raise
            except asyncio.TimeoutError:
                if loop.time() >= deadline:
                    raise self._timeout_error() from None
                self._update('Error checking service status: request timed out')
                continue
            except Exception as e:
                # transport failures are retried on the next tick
                self._update(f'Error checking service status: {e}')
                continue

            done, error = self.handler.check(response)
            if done:
                if error is not None:
                    logger.warning(f'Stopped waiting: {error}')
                    raise error
                logger.debug(f'Wait finished after {self.ticks} checks')
                return
            if error is not None:
                self._update(f'Error checking service status: {error}')
                continue
            self._update(self.handler.message())


async def wait(
    fetch: FetchFunction,
    handler: WaitHandler,
    timeout: float,
    timeout_message: str = '',
    output: Optional[Any] = None,
    cancel_event: Optional[asyncio.Event] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> None:
    """Run one ``Waiter`` to completion; see ``Waiter.run``."""
    waiter = Waiter(
        fetch,
        handler,
        timeout,
        timeout_message=timeout_message,
        output=output,
        cancel_event=cancel_event,
        poll_interval=poll_interval,
    )
    await waiter.run()


async def wait_for_service(
    client: Any,
    project_id: str,
    service_id: str,
    handler: WaitHandler,
    timeout: float,
    timeout_message: str = '',
    output: Optional[Any] = None,
    cancel_event: Optional[asyncio.Event] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> None:
    """Poll ``client.get_service`` for one service until ``handler`` is satisfied."""

    async def fetch() -> ApiResponse:
        return await client.get_service(project_id, service_id)

    await wait(
        fetch,
        handler,
        timeout,
        timeout_message=timeout_message,
        output=output,
        cancel_event=cancel_event,
        poll_interval=poll_interval,
    )
