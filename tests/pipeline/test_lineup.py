"""Tests for the weekly lineup."""

from contentq.content.models import ContentCategory, ContentItem, ContentState
from contentq.content.store import ContentStore
from contentq.pipeline import build_lineup
from contentq.queue import QueueEngine


def _enqueue(store: ContentStore, engine: QueueEngine, category, text, title=None) -> str:
    cid = store.insert(
        ContentItem(category=category, text=text, title=title, state=ContentState.APPROVED)
    )
    engine.enqueue(cid, category)
    return cid


class TestBuildLineup:
    def test_slots_filled_in_queue_order(self):
        store = ContentStore()
        engine = QueueEngine(store)
        _enqueue(store, engine, ContentCategory.BLOG, "B" * 300, title="First Blog")
        _enqueue(store, engine, ContentCategory.BLOG, "second", title="Second Blog")
        for i in range(4):
            _enqueue(store, engine, ContentCategory.LINKEDIN, f"LinkedIn post {i}")

        text = build_lineup(engine, depth=2)

        assert "BLOG (Monday): [B1]" in text
        assert "Title: First Blog" in text
        assert "B" * 200 + "..." in text
        assert "B" * 201 not in text
        assert "LINKEDIN (Tuesday): [L1]\nLinkedIn post 0" in text
        assert "LINKEDIN (Saturday): [L3]\nLinkedIn post 2" in text
        assert "#2 Second Blog" in text
        assert "#4 LinkedIn post 3" in text

    def test_empty_slots_and_low_queue_warning(self):
        engine = QueueEngine(ContentStore())

        text = build_lineup(engine)

        assert "No blog post in queue" in text
        assert "No linkedin post in queue" in text
        assert "only 0 blog item(s) queued (minimum 2)" in text
        assert "only 0 linkedin item(s) queued (minimum 4)" in text

    def test_custom_slots(self):
        store = ContentStore()
        engine = QueueEngine(store, min_depth={ContentCategory.LINKEDIN: 0})
        _enqueue(store, engine, ContentCategory.LINKEDIN, "only post")

        text = build_lineup(engine, slots={ContentCategory.LINKEDIN: ("Friday",)})

        assert "LINKEDIN (Friday): [L1]\nonly post" in text
        assert "BLOG" not in text
        assert "Warning" not in text
