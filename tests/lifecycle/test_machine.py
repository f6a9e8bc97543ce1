"""Tests for LifecycleStateMachine."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from contentq.content.models import (
    ContentCategory,
    ContentItem,
    ContentState,
    ThreadStatus,
)
from contentq.content.store import ContentStore
from contentq.errors import (
    AlreadyQueued,
    GenerationError,
    InvalidTransition,
    ThreadNotFound,
)
from contentq.lifecycle import LifecycleStateMachine
from contentq.queue import QueueEngine

T0 = datetime(2025, 3, 3, 9, 0, tzinfo=UTC)


class FakeTransport:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self._counter = 0

    def notify_for_review(self, item: ContentItem) -> str:
        self._counter += 1
        thread_id = f"thread-{self._counter}"
        self.sent.append(("review", item.id))
        return thread_id

    def notify_revised(self, item: ContentItem, thread_id: str) -> None:
        self.sent.append(("revision", thread_id))

    def notify_confirmation(self, thread_id: str) -> None:
        self.sent.append(("confirmation", thread_id))


class FakeReviser:
    def __init__(self, result: str = "Shorter.") -> None:
        self.result = result
        self.calls: list[tuple[str, str]] = []

    def revise(self, original_text: str, feedback: str) -> str:
        self.calls.append((original_text, feedback))
        return self.result


def _machine(
    store: ContentStore | None = None, reviser: FakeReviser | None = None
) -> tuple[LifecycleStateMachine, ContentStore, FakeTransport]:
    store = store or ContentStore()
    transport = FakeTransport()
    machine = LifecycleStateMachine(
        store,
        QueueEngine(store),
        reviser=reviser or FakeReviser(),
        transport=transport,
        clock=lambda: T0,
    )
    return machine, store, transport


def _pending(machine: LifecycleStateMachine, category=ContentCategory.BLOG) -> str:
    item = machine.create_draft(category, "A long original draft.", title="Draft")
    machine.send_for_review(item.id)
    return item.id


def _snapshot(store: ContentStore, content_id: str) -> tuple:
    item = store.require(content_id)
    return item.state, item.version, item.queue_position


class TestCreateDraft:
    def test_creates_draft(self):
        machine, store, _ = _machine()
        item = machine.create_draft(
            ContentCategory.LINKEDIN, "  Post text  ", tags=["ai"], source_id="m1"
        )
        assert item.state == ContentState.DRAFT
        assert item.text == "Post text"
        assert item.source_id == "m1"
        assert store.require(item.id).tags == ["ai"]

    def test_rejects_empty_text(self):
        machine, store, _ = _machine()
        with pytest.raises(GenerationError):
            machine.create_draft(ContentCategory.BLOG, "   ")
        assert store.list() == []


class TestSendForReview:
    def test_opens_thread(self):
        machine, store, transport = _machine()
        item = machine.create_draft(ContentCategory.BLOG, "Text")

        thread = machine.send_for_review(item.id)

        assert store.require(item.id).state == ContentState.PENDING_APPROVAL
        assert thread.content_id == item.id
        assert thread.status == ThreadStatus.PENDING_APPROVAL
        assert thread.last_applied_at == T0
        assert transport.sent == [("review", item.id)]

    def test_twice_is_invalid(self):
        machine, store, _ = _machine()
        content_id = _pending(machine)
        with pytest.raises(InvalidTransition):
            machine.send_for_review(content_id)
        assert len(store.threads()) == 1

    def test_transport_failure_leaves_draft(self):
        machine, store, transport = _machine()
        item = machine.create_draft(ContentCategory.BLOG, "Text")

        def boom(_item: ContentItem) -> str:
            raise ConnectionError("mail down")

        transport.notify_for_review = boom  # type: ignore[method-assign]
        with pytest.raises(ConnectionError):
            machine.send_for_review(item.id)
        assert store.require(item.id).state == ContentState.DRAFT
        assert store.threads() == []


class TestApprove:
    def test_approve_enqueues_at_tail(self):
        machine, store, _ = _machine()
        content_id = _pending(machine)

        item = machine.approve(content_id)

        assert item.state == ContentState.QUEUED
        assert item.queue_position == 1

    def test_approve_from_draft_is_invalid(self):
        machine, store, _ = _machine()
        item = machine.create_draft(ContentCategory.BLOG, "Text")
        with pytest.raises(InvalidTransition):
            machine.approve(item.id)
        assert _snapshot(store, item.id) == (ContentState.DRAFT, 1, None)

    def test_enqueue_failure_rolls_back_approval(self):
        machine, store, _ = _machine()
        content_id = _pending(machine)
        # Corrupt the item so enqueue refuses it.
        store.update(content_id, queue_position=7)

        with pytest.raises(AlreadyQueued):
            machine.approve(content_id)
        assert store.require(content_id).state == ContentState.PENDING_APPROVAL


class TestRevise:
    def test_revise_bumps_version_and_resends(self):
        reviser = FakeReviser("Short.")
        machine, store, transport = _machine(reviser=reviser)
        content_id = _pending(machine)
        thread = store.open_thread_for(content_id)
        assert thread is not None

        item = machine.revise(content_id, "shorten it")

        assert item.state == ContentState.PENDING_APPROVAL
        assert item.version == 2
        assert item.text == "Short."
        assert item.queue_position is None
        assert reviser.calls == [("A long original draft.", "shorten it")]
        assert transport.sent[-1] == ("revision", thread.id)

    def test_revise_twice(self):
        machine, _, _ = _machine()
        content_id = _pending(machine)
        machine.revise(content_id, "one")
        item = machine.revise(content_id, "two")
        assert item.version == 3

    def test_empty_revision_leaves_item_untouched(self):
        machine, store, transport = _machine(reviser=FakeReviser("  "))
        content_id = _pending(machine)

        with pytest.raises(GenerationError):
            machine.revise(content_id, "shorten it")
        item = store.require(content_id)
        assert item.state == ContentState.PENDING_APPROVAL
        assert item.version == 1
        assert item.text == "A long original draft."
        assert [kind for kind, _ in transport.sent] == ["review"]

    def test_revise_without_open_thread(self):
        machine, store, _ = _machine()
        content_id = _pending(machine)
        thread = store.open_thread_for(content_id)
        assert thread is not None
        store.update_thread(thread.id, status=ThreadStatus.RESOLVED)

        with pytest.raises(ThreadNotFound):
            machine.revise(content_id, "feedback")
        assert store.require(content_id).version == 1

    def test_revise_queued_is_invalid(self):
        machine, store, _ = _machine()
        content_id = _pending(machine)
        machine.approve(content_id)
        with pytest.raises(InvalidTransition):
            machine.revise(content_id, "too late")
        assert _snapshot(store, content_id) == (ContentState.QUEUED, 1, 1)


class TestMarkPosted:
    def test_posts_and_releases(self):
        machine, store, _ = _machine()
        first = _pending(machine)
        second = _pending(machine)
        machine.approve(first)
        machine.approve(second)

        posted = machine.mark_posted(first, external_id="ghost-1")

        assert posted.state == ContentState.POSTED
        assert posted.queue_position is None
        assert posted.published_at == T0
        assert posted.external_id == "ghost-1"
        assert store.require(second).queue_position == 1

    def test_posted_is_terminal(self):
        machine, store, _ = _machine()
        content_id = _pending(machine)
        machine.approve(content_id)
        machine.mark_posted(content_id)

        with pytest.raises(InvalidTransition):
            machine.mark_posted(content_id)
        item = store.require(content_id)
        assert item.state == ContentState.POSTED
        assert item.published_at == T0


class TestInvalidTransitionsLeaveItemUnchanged:
    @pytest.mark.parametrize(
        "state", [ContentState.DRAFT, ContentState.APPROVED, ContentState.ABANDONED]
    )
    def test_approve_and_post_rejected(self, state):
        store = ContentStore()
        machine, _, _ = _machine(store)
        content_id = store.insert(
            ContentItem(category=ContentCategory.BLOG, text="x", state=state)
        )
        before = _snapshot(store, content_id)

        for op in (machine.approve, machine.mark_posted):
            with pytest.raises(InvalidTransition):
                op(content_id)
            assert _snapshot(store, content_id) == before
