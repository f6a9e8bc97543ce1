"""Content domain — lifecycle models and the transactional content store."""

from contentq.content.models import (
    ContentCategory,
    ContentItem,
    ContentState,
    ConversationThread,
    ThreadStatus,
)
from contentq.content.store import (
    ContentStore,
    category_scope,
    content_scope,
    thread_scope,
)

__all__ = [
    "ContentCategory",
    "ContentItem",
    "ContentState",
    "ContentStore",
    "ConversationThread",
    "ThreadStatus",
    "category_scope",
    "content_scope",
    "thread_scope",
]
