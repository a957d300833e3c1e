"""
Best-effort API transaction logging.

Every handled request is written to the audit store as one LogRecord. The write
is raced against a fixed deadline: whichever settles first hands control back to
the caller, and no failure on this path ever reaches the caller.
"""

import asyncio
from typing import Any, Awaitable, Dict, Optional, Set

from txlog.records import (
    NormalizedRequest,
    NormalizedResponse,
    build_log_record,
    new_log_id,
    utc_timestamp,
)
from txlog.utils.logger import get_logger
from txlog.utils.store import TransactionStore

logger = get_logger("transactions")

LOG_TIMEOUT_MS = 1500
API_VERSION = "1.0"


class TransactionLogger:
    """
    Writes LogRecords to a shared store without becoming a latency or
    reliability liability for the request path.

    Build one per process and pass it to handlers; the store is never
    re-created per call.
    """

    def __init__(
        self,
        store: TransactionStore,
        timeout_ms: int = LOG_TIMEOUT_MS,
        api_version: str = API_VERSION,
    ):
        self.store = store
        self.timeout_ms = timeout_ms
        self.api_version = api_version
        # Strong refs for writes scheduled from inside a running loop
        self._background: Set[asyncio.Task] = set()

    async def log_transaction(
        self,
        request: NormalizedRequest,
        response: NormalizedResponse,
        execution_time_ms: int,
        error_message: Optional[str] = None,
    ) -> None:
        try:
            record = build_log_record(
                request, response, execution_time_ms, error_message, self.api_version
            )
        except Exception as e:
            logger.error("transactions.build_error", extra={"error": str(e)})
            return

        logger.debug(
            "transactions.log_attempt",
            extra={
                "log_id": record.log_id,
                "method": record.request_method,
                "url": record.request_url,
                "status": record.response_status_code,
            },
        )
        await self._write_with_deadline(record.to_item())

    async def log_simple_transaction(
        self,
        event_id: int,
        request_type: str,
        response_status: str,
        response_message: str,
    ) -> None:
        """
        Compact log entry for work that has no HTTP exchange behind it,
        e.g. a background job reporting SUCCESS/ERROR for an event.
        """
        try:
            timestamp = utc_timestamp()
            item = {
                "log_id": new_log_id(timestamp),
                "timestamp": timestamp,
                "event_id": event_id,
                "request_type": str(request_type),
                "response_status": str(response_status),
                "response_message": str(response_message),
                "api_version": self.api_version,
            }
        except Exception as e:
            logger.error("transactions.build_error", extra={"error": str(e)})
            return

        logger.info(
            "transactions.simple",
            extra={
                "request_type": item["request_type"],
                "response_status": item["response_status"],
                "response_message": item["response_message"],
            },
        )
        await self._write_with_deadline(item)

    def log_transaction_sync(
        self,
        request: NormalizedRequest,
        response: NormalizedResponse,
        execution_time_ms: int,
        error_message: Optional[str] = None,
    ) -> None:
        """Entry point for synchronous Lambda handlers."""
        self._run(
            self.log_transaction(request, response, execution_time_ms, error_message)
        )

    def log_simple_transaction_sync(
        self,
        event_id: int,
        request_type: str,
        response_status: str,
        response_message: str,
    ) -> None:
        self._run(
            self.log_simple_transaction(
                event_id, request_type, response_status, response_message
            )
        )

    def _run(self, coro: Awaitable[None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        try:
            if loop is None:
                asyncio.run(coro)
            else:
                # Already inside a loop: cannot block it, so just schedule
                task = loop.create_task(coro)
                self._background.add(task)
                task.add_done_callback(self._background.discard)
        except Exception as e:
            logger.error("transactions.dispatch_error", extra={"error": str(e)})

    async def _persist(self, item: Dict[str, Any]) -> bool:
        try:
            await self.store.insert(item)
        except Exception as e:
            logger.error(
                "transactions.store_error",
                extra={"log_id": item.get("log_id"), "error": str(e)},
            )
            return False

        logger.info("transactions.logged", extra={"log_id": item.get("log_id")})
        return True

    async def _write_with_deadline(self, item: Dict[str, Any]) -> None:
        task = asyncio.ensure_future(self._persist(item))
        done, _ = await asyncio.wait({task}, timeout=self.timeout_ms / 1000)

        if task not in done:
            # The store may ignore cancellation; we stop waiting either way
            task.cancel()
            logger.info(
                "transactions.log_timeout",
                extra={"log_id": item.get("log_id"), "timeout_ms": self.timeout_ms},
            )
