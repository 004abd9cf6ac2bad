"""
Document change notification collaborators.

The lifecycle coordinator hands every created or transitioned document to a
notifier. Delivery is best effort: failures are logged and never reach the
caller.

Dependencies: asyncio, logging (stdlib), management_api.configs
System role: Outbound broadcast of document status changes
"""

import asyncio
import logging
import uuid
from typing import Protocol

from management_api.configs import get_settings
from management_api.models.document import Document

logger = logging.getLogger(__name__)


class DocumentNotifier(Protocol):
    """Receives documents after every status change."""

    async def notify(self, document: Document) -> None: ...


class LoggingNotifier:
    """Notifier that only records the transition in the log."""

    async def notify(self, document: Document) -> None:
        logger.info(
            "Document status changed",
            extra={"document_id": document.document_id, "status": document.status.value},
        )


class InMemoryNotifier:
    """
    In-process fan-out to subscriber queues.

    Each subscriber gets its own bounded queue; a full queue drops the
    update for that subscriber only.

    Example::

        notifier = InMemoryNotifier()
        sub_id, queue = notifier.subscribe()
        await notifier.notify(document)
        update = await queue.get()
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self._max_queue_size = max_queue_size
        self._subscribers: dict[str, asyncio.Queue[Document]] = {}

    def subscribe(self) -> tuple[str, "asyncio.Queue[Document]"]:
        sub_id = f"sub_{uuid.uuid4().hex[:12]}"
        queue: asyncio.Queue[Document] = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers[sub_id] = queue
        return sub_id, queue

    def unsubscribe(self, sub_id: str) -> bool:
        return self._subscribers.pop(sub_id, None) is not None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def notify(self, document: Document) -> None:
        for sub_id, queue in list(self._subscribers.items()):
            try:
                queue.put_nowait(document)
            except asyncio.QueueFull:
                logger.warning(
                    "Dropping document update for slow subscriber",
                    extra={"subscription_id": sub_id, "document_id": document.document_id},
                )


def get_document_notifier() -> DocumentNotifier:
    """
    Factory function to get the status change notifier based on configuration.

    Returns:
        LoggingNotifier or InMemoryNotifier: Configured notifier

    Raises:
        ValueError: If DOCUMENTS_NOTIFIER_BACKEND is invalid
    """
    backend = get_settings().documents.notifier_backend.lower()

    if backend == "logging":
        logger.info(f"{__name__}:get_document_notifier - Creating logging notifier")
        return LoggingNotifier()

    elif backend == "memory":
        logger.info(f"{__name__}:get_document_notifier - Creating in-memory notifier")
        return InMemoryNotifier()

    else:
        raise ValueError(
            f"Invalid DOCUMENTS_NOTIFIER_BACKEND: {backend}. "
            f"Must be 'logging' or 'memory'."
        )
