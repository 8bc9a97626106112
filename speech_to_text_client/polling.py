import asyncio
from typing import Any, Awaitable, Callable, FrozenSet, Generic, Optional, TypeVar

from loguru import logger
from speech_to_text_client.errors import (
    PollTimeoutError,
    SpeechToTextError,
    TerminalFailureError,
    TransportError,
    UnexpectedStatusError,
)
from speech_to_text_client.models import ErrorKind, PollConfig, StatusClass
from speech_to_text_client.status import StatusCheck

ResultT = TypeVar("ResultT")

StatusFetcher = Callable[[], Awaitable[ResultT]]
StatusChangeCallback = Callable[[Any, StatusClass], Awaitable[Any]]

# Pending resources and failed fetches are retried; everything else stops the poll.
DEFAULT_RETRY_ON: FrozenSet[ErrorKind] = frozenset(
    {ErrorKind.timeout, ErrorKind.transport}
)


class StatusPoller(Generic[ResultT]):
    def __init__(
        self,
        fetch_status: StatusFetcher,
        check: StatusCheck[ResultT],
        config: Optional[PollConfig] = None,
        retry_on: FrozenSet[ErrorKind] = DEFAULT_RETRY_ON,
        on_status_change: Optional[StatusChangeCallback] = None,
    ):
        self.fetch_status = fetch_status
        self.check = check
        self.config = config or PollConfig()
        self.retry_on = frozenset(retry_on)
        self.on_status_change = on_status_change
        self.logger = logger

    async def _fetch_once(self) -> ResultT:
        """Invokes the status fetcher, tagging any failure as a transport error"""
        try:
            return await self.fetch_status()
        except SpeechToTextError:
            raise
        except Exception as e:
            raise TransportError(f"Status check failed: {e}") from e

    def _error_for(self, result: ResultT, status_class: StatusClass) -> SpeechToTextError:
        """Builds the error that ends (or defers) the poll for a non-success status"""
        if status_class is StatusClass.processing:
            return PollTimeoutError(self.check.pending_message)
        if status_class is StatusClass.failed:
            return TerminalFailureError(self.check.failed_message)
        return UnexpectedStatusError(self.check.describe_unexpected(result))

    async def _handle_status_change(
        self,
        result: ResultT,
        status_class: StatusClass,
        last_class: Optional[StatusClass],
    ) -> None:
        """Invoke the status change callback if the classification has changed"""
        if last_class != status_class and self.on_status_change is not None:
            self.logger.debug(f"Status changed to {status_class.value}")
            await self.on_status_change(result, status_class)

    async def _wait_before_retry(self, attempt: int) -> None:
        self.logger.debug(
            f"Attempt {attempt}/{self.config.times} not finished, "
            f"waiting {self.config.interval_seconds:.2f}s before next attempt"
        )
        await asyncio.sleep(self.config.interval_seconds)

    async def poll_until_terminal(self) -> ResultT:
        """Poll the status fetcher until the resource is done, failed or the attempts run out"""
        last_class = None
        last_error: Optional[SpeechToTextError] = None

        for attempt in range(1, self.config.times + 1):
            try:
                result = await self._fetch_once()
            except TransportError as transport_error:
                self.logger.warning(f"Error polling status: {transport_error}")
                last_error = transport_error
            else:
                status_class = self.check.classify(result)
                await self._handle_status_change(result, status_class, last_class)
                last_class = status_class

                if status_class is StatusClass.done:
                    return result
                last_error = self._error_for(result, status_class)

            if last_error.kind not in self.retry_on:
                raise last_error
            if attempt < self.config.times:
                await self._wait_before_retry(attempt)

        # The budget ran out: surface the last pending or transport error as-is.
        raise last_error


async def poll_until_terminal(
    fetch_status: StatusFetcher,
    check: StatusCheck[ResultT],
    config: Optional[PollConfig] = None,
    retry_on: FrozenSet[ErrorKind] = DEFAULT_RETRY_ON,
    on_status_change: Optional[StatusChangeCallback] = None,
) -> ResultT:
    poller = StatusPoller(
        fetch_status,
        check,
        config=config,
        retry_on=retry_on,
        on_status_change=on_status_change,
    )
    return await poller.poll_until_terminal()
