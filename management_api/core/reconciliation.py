"""
Deletion reconciliation loop.

Documents confirmed as deleted by the downstream pipeline sit in the
DELETED partition until their records are removed. This loop sweeps that
partition on a fixed interval, starts only when a deletion is requested and
stops itself once no document is DELETING or DELETED.

Dependencies: asyncio, management_api.boundary.record_store
System role: Background finalization of document deletions
"""

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable

from management_api.boundary.record_store import DocumentStore
from management_api.models.document import Document, DocumentStatus
from management_api.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class DeletionReconciler:
    """
    Self-starting, self-stopping sweep over pending deletions.

    At most one sweep task exists at a time. Start and stop decisions are
    taken under one lock, so a deletion requested while the loop is deciding
    to stop keeps it alive for another tick.

    Attributes:
        interval_seconds: Delay before each tick
        batch_size: Maximum documents read per status on a tick
    """

    def __init__(
        self,
        store: DocumentStore,
        finalize: Callable[[str], Awaitable[None]],
        interval_seconds: float = 5.0,
        batch_size: int = 100,
    ) -> None:
        """
        Initialize the reconciler.

        Args:
            store: Record store to sweep
            finalize: Coroutine removing one document record by id
            interval_seconds: Delay before each tick
            batch_size: Maximum documents read per status on a tick
        """
        self._store = store
        self._finalize = finalize
        self.interval_seconds = interval_seconds
        self.batch_size = batch_size
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self._rearmed = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def ensure_running(self) -> bool:
        """
        Start the sweep loop unless one is already active.

        Returns:
            bool: True if this call started the loop
        """
        async with self._lock:
            if self.is_running:
                self._rearmed = True
                return False
            self._rearmed = False
            self._task = asyncio.create_task(self._run(), name="deletion-reconciler")
        logger.info(
            "Deletion reconciler started",
            extra={"interval_seconds": self.interval_seconds},
        )
        return True

    async def stop(self) -> None:
        """Cancel the sweep loop, if running, and wait for it to exit."""
        async with self._lock:
            task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Deletion reconciler cancelled")

    async def _run(self) -> None:
        ticks = 0
        while True:
            await asyncio.sleep(self.interval_seconds)
            self._rearmed = False
            ticks += 1
            work_remains = await self.sweep_once()
            if work_remains:
                continue
            async with self._lock:
                if self._rearmed:
                    continue
                self._task = None
            logger.info("Deletion reconciler stopped: no pending deletions", extra={"ticks": ticks})
            return

    async def _collect(self, status: DocumentStatus) -> list[Document]:
        documents: list[Document] = []
        start_key = None
        while len(documents) < self.batch_size:
            result = await self._store.query_by_status(
                status,
                self.batch_size - len(documents),
                start_key=start_key,
                descending=False,
            )
            documents.extend(result.items)
            start_key = result.next_start_key
            if not start_key:
                break
        return documents

    async def sweep_once(self) -> bool:
        """
        Run one reconciliation tick.

        Finalizes every DELETED document found. A failure on one document is
        logged and the document stays a candidate for the next tick.

        Returns:
            bool: True if any document was DELETED or DELETING, or the store
            could not be read; False when there is nothing left to reconcile
        """
        try:
            deleted = await self._collect(DocumentStatus.DELETED)
            deleting = await self._collect(DocumentStatus.DELETING)
        except Exception as e:
            log_exception_with_context(logger, "Reconciliation sweep could not read the store", e)
            return True

        finalized = 0
        for document in deleted:
            try:
                await self._finalize(document.document_id)
                finalized += 1
            except Exception as e:
                log_exception_with_context(
                    logger,
                    "Failed to finalize document deletion",
                    e,
                    document_id=document.document_id,
                )

        log_with_context(
            logger,
            logging.INFO,
            "Reconciliation sweep finished",
            deleted=len(deleted),
            finalized=finalized,
            deleting=len(deleting),
        )
        return bool(deleted or deleting)
