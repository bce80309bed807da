"""
Core engine containing the batch request queue.
The queue collects outbound API calls and hands them to a transport as a single batch,
either when it holds ``max_size`` requests or when ``delay_seconds`` elapse.
"""

from __future__ import annotations

import asyncio
import typing as t
import uuid
from dataclasses import dataclass

import structlog

from messaging_batch.exceptions import BatchContractError, BatchItemError, BatchTransportError
from messaging_batch.logging import logging_context
from messaging_batch.models import (
    DEFAULT_DELAY_SECONDS,
    DEFAULT_MAX_SIZE,
    BatchOutcome,
    QueueConfig,
)

if t.TYPE_CHECKING:
    from messaging_batch.transports.base import BatchTransport

log = structlog.get_logger(__name__)


@dataclass
class _BatchItem:
    """A request waiting to be flushed."""

    item_id: str
    request: t.Any
    future: asyncio.Future[t.Any]


class BatchQueue:
    """
    Buffer requests and flush them through a batch-capable transport.

    A flush is started when either:
    - The queue reaches ``max_size`` requests, OR
    - ``delay_seconds`` elapse after the first request following a flush

    Notes
    -----
    Requests pushed while a flush is in flight are kept for the next flush.
    ``stop`` only disarms automatic flushing: buffered requests stay pending
    until ``flush`` or ``close`` is awaited.
    """

    def __init__(
        self,
        transport: BatchTransport,
        max_size: int = DEFAULT_MAX_SIZE,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
    ):
        """
        Initialize the queue.

        Parameters
        ----------
        transport : BatchTransport
            Transport receiving the buffered requests of each flush.
        max_size : int
            Flush when this many requests are buffered.
        delay_seconds : float
            Flush a non-empty queue after this many seconds, even if size not reached.

        Raises
        ------
        pydantic.ValidationError
            If ``max_size`` or ``delay_seconds`` is not a positive number.
        """
        self._config = QueueConfig(max_size=max_size, delay_seconds=delay_seconds)
        self._transport = transport

        self._queue: list[_BatchItem] = []
        self._timer_task: asyncio.Task[None] | None = None
        self._flush_task: asyncio.Task[None] | None = None
        self._stopped = False

        log.debug(
            event="Initialized BatchQueue",
            max_size=self._config.max_size,
            delay_seconds=self._config.delay_seconds,
        )

    @classmethod
    def from_config(cls, transport: BatchTransport, config: QueueConfig) -> "BatchQueue":
        return cls(
            transport=transport,
            max_size=config.max_size,
            delay_seconds=config.delay_seconds,
        )

    @property
    def config(self) -> QueueConfig:
        return self._config

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def pending(self) -> tuple[t.Any, ...]:
        """Buffered requests, in send order."""
        return tuple(item.request for item in self._queue)

    @property
    def is_flushing(self) -> bool:
        return self._flush_task is not None

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def __len__(self) -> int:
        return len(self._queue)

    async def __aenter__(self) -> "BatchQueue":
        return self

    async def __aexit__(self, exc_type: t.Any, exc_val: t.Any, exc_tb: t.Any) -> None:
        await self.close()

    def push(self, request: t.Any) -> asyncio.Future[t.Any]:
        """
        Queue a request and return the future of its outcome.

        Parameters
        ----------
        request : typing.Any
            Request handed unchanged to the transport.

        Returns
        -------
        asyncio.Future[typing.Any]
            Resolves to the request payload, or raises a ``BatchError``.

        Raises
        ------
        RuntimeError
            If called outside a running event loop.
        """
        loop = asyncio.get_running_loop()
        item = _BatchItem(
            item_id=str(object=uuid.uuid4()),
            request=request,
            future=loop.create_future(),
        )
        self._queue.append(item)
        pending_count = len(self._queue)
        log.debug(
            event="Queued request for batch",
            item_id=item.item_id,
            pending_count=pending_count,
        )

        if self._stopped or self.is_flushing:
            return item.future

        if pending_count >= self._config.max_size:
            log.debug(
                event="Batch size reached",
                max_size=self._config.max_size,
            )
            self._start_flush()
        elif self._timer_task is None:
            self._arm_timer()

        return item.future

    async def flush(self) -> None:
        """
        Send every buffered request now and wait for the outcome.

        Notes
        -----
        Waits for an in-flight flush first. Sends the buffer in batches of at
        most ``max_size`` requests. Does nothing on an empty queue.
        """
        if self._flush_task is None and not self._queue:
            log.debug(event="Flush requested on empty queue")
            return

        while self._flush_task is not None or self._queue:
            if self._flush_task is not None:
                await asyncio.shield(self._flush_task)
            else:
                await asyncio.shield(self._start_flush())

    def stop(self) -> None:
        """
        Disarm automatic flushing.

        Notes
        -----
        Buffered requests are neither sent nor rejected. An in-flight flush
        still resolves its requests.
        """
        if self._stopped:
            return
        self._stopped = True
        self._cancel_timer()
        log.debug(event="BatchQueue stopped", pending_count=len(self._queue))

    async def close(self) -> None:
        """
        Stop the queue and flush the requests still buffered.
        """
        self.stop()
        await self.flush()
        log.debug(event="BatchQueue closed")

    def _arm_timer(self) -> None:
        log.debug(
            event="Starting batch window timer",
            delay_seconds=self._config.delay_seconds,
        )
        self._timer_task = asyncio.create_task(
            coro=self._window_timer(),
            name=f"batch_queue_timer_{uuid.uuid4()}",
        )

    def _cancel_timer(self) -> None:
        timer_task = self._timer_task
        self._timer_task = None
        if timer_task and not timer_task.done() and timer_task is not asyncio.current_task():
            timer_task.cancel()
            log.debug(event="Window timer cancelled")

    async def _window_timer(self) -> None:
        """
        Flush the queue after the window elapses.
        """
        await asyncio.sleep(delay=self._config.delay_seconds)
        self._timer_task = None
        if not self._queue:
            log.debug(event="Batch window elapsed with empty queue")
            return
        if self.is_flushing:
            return
        log.debug(event="Batch window elapsed, flushing batch")
        self._start_flush()

    def _start_flush(self) -> asyncio.Task[None]:
        """
        Drain up to ``max_size`` requests and send them in the background.

        Returns
        -------
        asyncio.Task[None]
            Task resolving the drained requests.
        """
        max_size = self._config.max_size
        items = self._queue[:max_size]
        self._queue = self._queue[max_size:]
        self._cancel_timer()
        flush_id = str(object=uuid.uuid4())
        log.info(
            event="Flushing batch",
            flush_id=flush_id,
            request_count=len(items),
            remaining_count=len(self._queue),
        )
        flush_task = asyncio.create_task(
            coro=self._send_batch(flush_id=flush_id, items=items),
            name=f"batch_queue_flush_{uuid.uuid4()}",
        )
        self._flush_task = flush_task
        return flush_task

    async def _send_batch(self, *, flush_id: str, items: list[_BatchItem]) -> None:
        """
        Send drained requests through the transport and resolve their futures.

        Parameters
        ----------
        flush_id : str
            Identifier bound to the log context while this flush runs.
        items : list[_BatchItem]
            Items drained for this flush, in push order.
        """
        try:
            with logging_context(flush_id=flush_id):
                await self._resolve_batch(items=items)
        finally:
            self._flush_task = None
            self._after_flush()

    async def _resolve_batch(self, *, items: list[_BatchItem]) -> None:
        try:
            outcomes = list(await self._transport.send_batch([item.request for item in items]))
        except asyncio.CancelledError:
            log.debug(event="Flush cancelled", request_count=len(items))
            for item in items:
                if not item.future.done():
                    item.future.cancel()
            raise
        except Exception as e:
            log.error(
                event="Batch transport failed",
                request_count=len(items),
                error=str(object=e),
            )
            self._reject_all(items=items, error=self._as_transport_error(error=e))
            return

        if len(outcomes) != len(items):
            log.warning(
                event="Transport outcome count mismatch",
                request_count=len(items),
                outcome_count=len(outcomes),
            )
            self._reject_all(
                items=items,
                error=BatchContractError(expected=len(items), received=len(outcomes)),
            )
            return

        try:
            self._apply_outcomes(items=items, outcomes=outcomes)
        except Exception as e:
            log.error(
                event="Failed to apply batch outcomes",
                request_count=len(items),
                error=str(object=e),
            )
            self._reject_all(items=items, error=self._as_transport_error(error=e))

    def _apply_outcomes(self, *, items: list[_BatchItem], outcomes: list[BatchOutcome]) -> None:
        failed_count = 0
        for item, outcome in zip(items, outcomes):
            if item.future.done():
                continue
            if outcome.ok:
                item.future.set_result(outcome.payload)
            else:
                failed_count += 1
                item.future.set_exception(
                    BatchItemError(
                        request=item.request,
                        error=outcome.error,
                        response=outcome.response,
                    )
                )
        log.info(
            event="Batch resolved",
            request_count=len(items),
            failed_count=failed_count,
        )

    @staticmethod
    def _reject_all(*, items: list[_BatchItem], error: BatchTransportError) -> None:
        for item in items:
            if not item.future.done():
                item.future.set_exception(error)

    @staticmethod
    def _as_transport_error(*, error: Exception) -> BatchTransportError:
        if isinstance(error, BatchTransportError):
            return error
        transport_error = BatchTransportError(str(object=error) or type(error).__name__)
        transport_error.__cause__ = error
        return transport_error

    def _after_flush(self) -> None:
        """
        Schedule the next flush for requests pushed while a flush was in flight.
        """
        if self._stopped or not self._queue:
            return
        if len(self._queue) >= self._config.max_size:
            self._start_flush()
        elif self._timer_task is None:
            self._arm_timer()
