"""Per-category publishing queue.

Positions are 1-based and dense: for every category the occupied positions
are exactly ``{1..k}``. Position 1 publishes next. Every mutation runs in a
store transaction scoped to its category, so the contiguity invariant is
never observable as broken outside a single operation.

Reordering is pairwise (swap with next, or swap with the occupant of a
target slot) so each reorder touches at most two items.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from contentq.content.models import ContentCategory, ContentItem, ContentState
from contentq.content.store import ContentStore, category_scope
from contentq.errors import (
    AlreadyQueued,
    InvalidPosition,
    NoNextItem,
    NotQueued,
    QueueEmpty,
)
from contentq.lifecycle.transitions import advance

logger = logging.getLogger(__name__)

# Minimum queued items before the scheduler should generate more content.
DEFAULT_MIN_DEPTH: dict[ContentCategory, int] = {
    ContentCategory.BLOG: 2,
    ContentCategory.LINKEDIN: 4,
}


class QueueHealth(BaseModel):
    """Depth of one category's queue against its configured minimum."""

    category: ContentCategory
    depth: int
    minimum: int

    @property
    def needs_content(self) -> bool:
        return self.depth < self.minimum


class QueueEngine:
    """Assigns, advances, reorders and releases queue positions."""

    def __init__(
        self,
        store: ContentStore,
        min_depth: dict[ContentCategory, int] | None = None,
    ) -> None:
        self._store = store
        self._min_depth = {**DEFAULT_MIN_DEPTH, **(min_depth or {})}

    # ── Helpers ──────────────────────────────────────────────────

    def _load(self, content_id: str, category: ContentCategory) -> ContentItem:
        item = self._store.require(content_id)
        if item.category != category:
            raise InvalidPosition(
                f"Content {content_id} is in category {item.category.value!r}, "
                f"not {ContentCategory(category).value!r}"
            )
        return item

    @staticmethod
    def _check_target(target_position: object) -> int:
        if (
            isinstance(target_position, bool)
            or not isinstance(target_position, int)
            or target_position < 1
        ):
            raise InvalidPosition(
                f"Queue position must be a positive integer, got {target_position!r}"
            )
        return target_position

    # ── Mutations ────────────────────────────────────────────────

    def enqueue(self, content_id: str, category: ContentCategory) -> int:
        """Append an approved item to the tail of its category's queue.

        Moves the item to ``queued`` and returns its new position.

        Raises:
            AlreadyQueued: The item already holds a position.
            InvalidTransition: The item is not ``approved``.
        """
        with self._store.transaction(category_scope(category)):
            item = self._load(content_id, category)
            if item.queue_position is not None:
                raise AlreadyQueued(content_id, item.queue_position)
            update = advance(item, ContentState.QUEUED)
            position = self._store.max_position(category) + 1
            self._store.update(content_id, queue_position=position, **update)
        logger.info("Queued %s at %s position %d", content_id, category, position)
        return position

    def release(self, content_id: str) -> None:
        """Remove an item from its queue and close the gap it leaves.

        Everything behind the released item moves up by one. The whole
        category is re-indexed densely and written as one batch.

        Raises:
            NotQueued: The item has no position.
        """
        category = self._store.require(content_id).category
        with self._store.transaction(category_scope(category)):
            item = self._store.require(content_id)
            if item.queue_position is None:
                raise NotQueued(content_id)
            remaining = [i for i in self._store.queued(category) if i.id != content_id]
            updates: dict[str, dict[str, object]] = {content_id: {"queue_position": None}}
            for index, other in enumerate(remaining, start=1):
                if other.queue_position != index:
                    updates[other.id] = {"queue_position": index}
            self._store.update_many(updates)
        logger.info(
            "Released %s from %s position %d (%d item(s) shifted)",
            content_id,
            category,
            item.queue_position,
            len(updates) - 1,
        )

    def swap_with_next(self, content_id: str, category: ContentCategory) -> int:
        """Exchange an item with the one right behind it.

        Returns the item's new position.

        Raises:
            NotQueued: The item has no position.
            NoNextItem: Nothing sits at ``position + 1``.
        """
        with self._store.transaction(category_scope(category)):
            item = self._load(content_id, category)
            if item.queue_position is None:
                raise NotQueued(content_id)
            position = item.queue_position
            following = self._store.get_by_position(category, position + 1)
            if following is None:
                raise NoNextItem(content_id, position)
            self._store.update_many(
                {
                    content_id: {"queue_position": position + 1},
                    following.id: {"queue_position": position},
                }
            )
        logger.info("Swapped %s with %s in %s", content_id, following.id, category)
        return position + 1

    def move_to(
        self, content_id: str, category: ContentCategory, target_position: int
    ) -> bool:
        """Move an item to ``target_position`` by swapping with its occupant.

        Only the mover and the displaced item change position; nothing in
        between is shifted. Returns False, without writing, when the item is
        already at the target.

        Queues are always dense, so every target from 1 to the depth has an
        occupant and a move is always a swap of exactly two items. A target
        past the depth would leave a gap and is rejected rather than moved
        into as an empty slot.

        Raises:
            InvalidPosition: The target is not a positive integer, or lies
                beyond the end of the queue.
            NotQueued: The item has no position.
        """
        target = self._check_target(target_position)
        with self._store.transaction(category_scope(category)):
            item = self._load(content_id, category)
            if item.queue_position is None:
                raise NotQueued(content_id)
            current = item.queue_position
            if current == target:
                return False
            occupant = self._store.get_by_position(category, target)
            if occupant is None:
                depth = self._store.max_position(category)
                raise InvalidPosition(
                    f"Position {target} is past the end of the {category} queue (depth {depth})"
                )
            self._store.update_many(
                {
                    content_id: {"queue_position": target},
                    occupant.id: {"queue_position": current},
                }
            )
        logger.info(
            "Moved %s from %d to %d in %s (displaced %s)",
            content_id,
            current,
            target,
            category,
            occupant.id,
        )
        return True

    # ── Reads ────────────────────────────────────────────────────

    def publish_head(self, category: ContentCategory) -> ContentItem:
        """Return the item that publishes next.

        Raises:
            QueueEmpty: Nothing is queued in the category.
        """
        with self._store.transaction(category_scope(category)):
            head = self._store.get_by_position(category, 1)
        if head is None:
            raise QueueEmpty(ContentCategory(category).value)
        return head

    def list(self, category: ContentCategory, limit: int | None = None) -> list[ContentItem]:
        """Queued items in publish order."""
        with self._store.transaction(category_scope(category)):
            items = self._store.queued(category)
        return items[:limit] if limit is not None else items

    def health(self, category: ContentCategory) -> QueueHealth:
        """Committed queue depth against the category minimum.

        Reads only committed state, so a reorder or enqueue still in flight
        on another thread is not counted.
        """
        depth = sum(
            1
            for item in self._store.queued(category)
            if item.state == ContentState.QUEUED
        )
        return QueueHealth(
            category=category,
            depth=depth,
            minimum=self._min_depth.get(ContentCategory(category), 0),
        )
