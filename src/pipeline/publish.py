"""Publish tick — head of a category's queue -> external target -> posted."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from contentq.content import ContentCategory, ContentStore, category_scope
from contentq.errors import PublishFailed, QueueEmpty
from contentq.lifecycle import LifecycleStateMachine
from contentq.publishers import ContentPublisher
from contentq.queue import QueueEngine

logger = logging.getLogger(__name__)


class PublishResult(BaseModel):
    """Outcome of one publish tick."""

    category: ContentCategory
    published: bool
    content_id: str | None = None
    external_id: str | None = None
    url: str | None = None
    remaining: int = 0


class PublishDriver:
    """Publishes the head of a category queue, one item per tick.

    The category lock is held from head lookup through release, so two
    ticks for the same category never publish the same item and a reorder
    cannot slip in between.
    """

    def __init__(
        self,
        store: ContentStore,
        queue: QueueEngine,
        lifecycle: LifecycleStateMachine,
        publishers: dict[ContentCategory, ContentPublisher],
    ) -> None:
        self._store = store
        self._queue = queue
        self._lifecycle = lifecycle
        self._publishers = publishers

    def tick(self, category: ContentCategory) -> PublishResult:
        """Publish the item at position 1, if any.

        Raises:
            PublishFailed: Delivery failed; the item stays at position 1.
        """
        publisher = self._publishers.get(category)
        if publisher is None:
            raise ValueError(f"No publisher configured for {category}")

        with self._store.transaction(category_scope(category)):
            try:
                head = self._queue.publish_head(category)
            except QueueEmpty:
                logger.info("Nothing queued for %s", category)
                return PublishResult(category=category, published=False)

            try:
                receipt = publisher.publish(head)
            except PublishFailed:
                logger.error("Publishing %s to %s failed; left at head", head.id, publisher.name)
                raise
            except Exception as exc:
                logger.error("Publishing %s to %s failed: %s", head.id, publisher.name, exc)
                raise PublishFailed(head.id, publisher.name, str(exc)) from exc

            self._lifecycle.mark_posted(head.id, receipt.external_id)
            remaining = self._store.max_position(category)

        logger.info(
            "Published %s to %s (%d left in %s)", head.id, publisher.name, remaining, category
        )
        return PublishResult(
            category=category,
            published=True,
            content_id=head.id,
            external_id=receipt.external_id,
            url=receipt.url,
            remaining=remaining,
        )
