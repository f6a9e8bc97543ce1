"""JSON-backed content store with scoped, all-or-nothing transactions.

Holds every ContentItem and ConversationThread in memory and persists the
committed state to a single JSON file. Writes happen inside
``transaction(*scopes)``: each scope name (``category:blog``,
``content:<id>``, ``thread:<id>``) maps to its own re-entrant lock, so two
categories never contend while operations inside one category serialize.

Locks are taken in the order given, with a bounded wait, and held until the
outermost transaction on the calling thread ends. A failure anywhere inside
restores every record written during the transaction from its undo log.
Readers outside a transaction see only the committed view, so a half-applied
batch is never observable from another thread.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from contentq.content.models import (
    ContentCategory,
    ContentItem,
    ContentState,
    ConversationThread,
    ThreadStatus,
)
from contentq.errors import ContentNotFound, StoreUnavailable, ThreadNotFound

logger = logging.getLogger(__name__)

STORE_FILENAME = ".contentq-store.json"
DEFAULT_LOCK_TIMEOUT = 10.0

# Alias to avoid shadowing by ContentStore.list method
_list = list


def category_scope(category: ContentCategory | str) -> str:
    return f"category:{category}"


def content_scope(content_id: str) -> str:
    return f"content:{content_id}"


def thread_scope(thread_id: str) -> str:
    return f"thread:{thread_id}"


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    items: list[ContentItem] = Field(default_factory=list)
    threads: list[ConversationThread] = Field(default_factory=list)


@dataclass
class _Transaction:
    """Per-thread transaction state: held locks plus an undo log."""

    locks: list[threading.RLock] = field(default_factory=list)
    scopes: list[str] = field(default_factory=list)
    # (kind, key, previous value or None when the record was inserted)
    undo: list[tuple[str, str, BaseModel | None]] = field(default_factory=list)


class ContentStore:
    """Transactional store for content items and conversation threads.

    ``path=None`` keeps everything in memory (tests, dry runs).
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = path
        self._lock_timeout = lock_timeout
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._items: dict[str, ContentItem] = {}
        self._threads: dict[str, ConversationThread] = {}
        self._committed_items: dict[str, ContentItem] = {}
        self._committed_threads: dict[str, ConversationThread] = {}
        self._scope_locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        self._data_lock = threading.Lock()
        self._io_lock = threading.Lock()
        self._local = threading.local()
        self._load()

    @classmethod
    def open(cls, directory: Path, **kwargs: Any) -> ContentStore:
        """Open the store file inside ``directory``."""
        return cls(directory / STORE_FILENAME, **kwargs)

    @property
    def path(self) -> Path | None:
        return self._path

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            data = _StoreData.model_validate(raw)
        except (json.JSONDecodeError, ValidationError, OSError) as exc:
            raise StoreUnavailable(f"Cannot read content store at {self._path}: {exc}") from exc
        for item in data.items:
            self._items[item.id] = item
            self._committed_items[item.id] = item.model_copy(deep=True)
        for thread in data.threads:
            self._threads[thread.id] = thread
            self._committed_threads[thread.id] = thread.model_copy(deep=True)
        logger.debug(
            "Loaded %d item(s) and %d thread(s) from %s",
            len(self._items),
            len(self._threads),
            self._path,
        )

    def _persist(
        self,
        items: dict[str, ContentItem],
        threads: dict[str, ConversationThread],
    ) -> None:
        if self._path is None:
            return
        data = _StoreData(items=_list(items.values()), threads=_list(threads.values()))
        payload = data.model_dump_json(indent=2)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=self._path.name, suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _lock_for(self, scope: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._scope_locks.get(scope)
            if lock is None:
                lock = threading.RLock()
                self._scope_locks[scope] = lock
            return lock

    def _active(self) -> _Transaction | None:
        return getattr(self._local, "tx", None)

    # Uncommitted writes are only visible to the thread making them.

    def _item_view(self) -> dict[str, ContentItem]:
        return self._items if self._active() is not None else self._committed_items

    def _thread_view(self) -> dict[str, ConversationThread]:
        return self._threads if self._active() is not None else self._committed_threads

    def _record_undo(self, kind: str, key: str) -> None:
        tx = self._active()
        if tx is None:
            return
        table: dict[str, Any] = self._items if kind == "item" else self._threads
        previous = table.get(key)
        tx.undo.append((kind, key, previous.model_copy(deep=True) if previous else None))

    def _restore(self, entries: _list[tuple[str, str, BaseModel | None]]) -> None:
        with self._data_lock:
            for kind, key, previous in reversed(entries):
                table: dict[str, Any] = self._items if kind == "item" else self._threads
                if previous is None:
                    table.pop(key, None)
                else:
                    table[key] = previous

    def _commit(self, tx: _Transaction) -> None:
        """Write the next committed view to disk, then publish it to readers.

        The committed view is swapped only after the file is written, so a
        failed write leaves both disk and readers on the previous state.
        """
        if not tx.undo:
            return
        touched = {(kind, key) for kind, key, _ in tx.undo}
        with self._io_lock:
            with self._data_lock:
                items = dict(self._committed_items)
                threads = dict(self._committed_threads)
                for kind, key in touched:
                    working: dict[str, Any] = self._items if kind == "item" else self._threads
                    committed: dict[str, Any] = items if kind == "item" else threads
                    if key in working:
                        committed[key] = working[key].model_copy(deep=True)
                    else:
                        committed.pop(key, None)
            try:
                self._persist(items, threads)
            except OSError as exc:
                raise StoreUnavailable(
                    f"Failed to write content store {self._path}: {exc}"
                ) from exc
            with self._data_lock:
                self._committed_items = items
                self._committed_threads = threads

    # ── Transactions ─────────────────────────────────────────────

    @contextmanager
    def transaction(self, *scopes: str) -> Iterator[ContentStore]:
        """Run a block atomically under the given scope locks.

        Nested calls on the same thread join the outer transaction; their
        locks are held until the outermost block exits. If the nested block
        raises, only its own writes are undone before the error propagates.

        Raises:
            StoreUnavailable: A lock was not acquired within the timeout, or
                the committed state could not be written.
        """
        tx = self._active()
        outer = tx is None
        if tx is None:
            tx = _Transaction()
            self._local.tx = tx
        savepoint = len(tx.undo)
        try:
            for scope in scopes:
                lock = self._lock_for(scope)
                if not lock.acquire(timeout=self._lock_timeout):
                    raise StoreUnavailable(
                        f"Timed out after {self._lock_timeout}s waiting for {scope}"
                    )
                tx.locks.append(lock)
                tx.scopes.append(scope)
            try:
                yield self
            except BaseException:
                self._restore(tx.undo[savepoint:])
                del tx.undo[savepoint:]
                raise
            if outer:
                try:
                    self._commit(tx)
                except BaseException:
                    self._restore(tx.undo)
                    raise
        finally:
            if outer:
                for lock in reversed(tx.locks):
                    lock.release()
                self._local.tx = None

    def holds(self, scope: str) -> bool:
        """Whether the current thread's transaction holds ``scope``."""
        tx = self._active()
        return tx is not None and scope in tx.scopes

    # ── Item writes ──────────────────────────────────────────────

    def insert(self, item: ContentItem) -> str:
        """Insert a new item and return its id (generated when empty)."""
        with self.transaction():
            now = self._clock()
            item_id = item.id or uuid.uuid4().hex
            if item_id in self._items:
                raise ValueError(f"Content {item_id} already exists")
            stored = item.model_copy(
                update={
                    "id": item_id,
                    "created_at": item.created_at or now,
                    "updated_at": now,
                },
                deep=True,
            )
            self._record_undo("item", item_id)
            with self._data_lock:
                self._items[item_id] = stored
            return item_id

    def update(self, content_id: str, **fields: Any) -> ContentItem:
        """Apply a partial update to one item and return the new version.

        Raises ContentNotFound if the id does not exist.
        """
        with self.transaction():
            current = self._items.get(content_id)
            if current is None:
                raise ContentNotFound(content_id)
            data = current.model_dump()
            data.update(fields)
            data["updated_at"] = self._clock()
            updated = ContentItem.model_validate(data)
            self._record_undo("item", content_id)
            with self._data_lock:
                self._items[content_id] = updated
            return updated.model_copy(deep=True)

    def update_many(self, updates: dict[str, dict[str, Any]]) -> None:
        """Apply several partial updates as one batch."""
        with self.transaction():
            for content_id, fields in updates.items():
                self.update(content_id, **fields)

    # ── Item reads ───────────────────────────────────────────────

    def get(self, content_id: str) -> ContentItem | None:
        """Return a copy of an item, or None if not found."""
        item = self._item_view().get(content_id)
        return item.model_copy(deep=True) if item else None

    def require(self, content_id: str) -> ContentItem:
        item = self.get(content_id)
        if item is None:
            raise ContentNotFound(content_id)
        return item

    def list(
        self,
        category: ContentCategory | None = None,
        state: ContentState | None = None,
    ) -> _list[ContentItem]:
        """Return items, optionally filtered by category and/or state."""
        with self._data_lock:
            results = _list(self._item_view().values())
        if category is not None:
            results = [i for i in results if i.category == category]
        if state is not None:
            results = [i for i in results if i.state == state]
        return [i.model_copy(deep=True) for i in results]

    def queued(self, category: ContentCategory) -> _list[ContentItem]:
        """Items holding a position in ``category``, ordered by position."""
        with self._data_lock:
            results = [
                i
                for i in self._item_view().values()
                if i.category == category and i.queue_position is not None
            ]
        results.sort(key=lambda i: i.queue_position or 0)
        return [i.model_copy(deep=True) for i in results]

    def get_by_position(self, category: ContentCategory, position: int) -> ContentItem | None:
        with self._data_lock:
            for item in self._item_view().values():
                if item.category == category and item.queue_position == position:
                    return item.model_copy(deep=True)
        return None

    def max_position(self, category: ContentCategory) -> int:
        """Highest occupied position in the category, 0 when none."""
        with self._data_lock:
            positions = [
                i.queue_position
                for i in self._item_view().values()
                if i.category == category and i.queue_position is not None
            ]
        return max(positions, default=0)

    def find_by_source(self, source_id: str) -> _list[ContentItem]:
        """Items produced from the inbound message ``source_id``."""
        with self._data_lock:
            results = [i for i in self._item_view().values() if i.source_id == source_id]
        return [i.model_copy(deep=True) for i in results]

    # ── Threads ──────────────────────────────────────────────────

    def insert_thread(self, thread: ConversationThread) -> ConversationThread:
        with self.transaction():
            if thread.id in self._threads:
                raise ValueError(f"Thread {thread.id} already exists")
            stored = thread.model_copy(
                update={"created_at": thread.created_at or self._clock()}, deep=True
            )
            self._record_undo("thread", thread.id)
            with self._data_lock:
                self._threads[thread.id] = stored
            return stored.model_copy(deep=True)

    def update_thread(self, thread_id: str, **fields: Any) -> ConversationThread:
        """Apply a partial update to a thread. Raises ThreadNotFound."""
        with self.transaction():
            current = self._threads.get(thread_id)
            if current is None:
                raise ThreadNotFound(thread_id)
            data = current.model_dump()
            data.update(fields)
            updated = ConversationThread.model_validate(data)
            self._record_undo("thread", thread_id)
            with self._data_lock:
                self._threads[thread_id] = updated
            return updated.model_copy(deep=True)

    def get_thread(self, thread_id: str) -> ConversationThread | None:
        thread = self._thread_view().get(thread_id)
        return thread.model_copy(deep=True) if thread else None

    def open_thread_for(self, content_id: str) -> ConversationThread | None:
        """The pending-approval thread reviewing ``content_id``, if any."""
        with self._data_lock:
            for thread in self._thread_view().values():
                if (
                    thread.content_id == content_id
                    and thread.status == ThreadStatus.PENDING_APPROVAL
                ):
                    return thread.model_copy(deep=True)
        return None

    def threads(self) -> _list[ConversationThread]:
        with self._data_lock:
            return [t.model_copy(deep=True) for t in self._thread_view().values()]
