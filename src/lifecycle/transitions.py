"""Legal lifecycle transitions.

This table is the single authority on how ``ContentItem.state`` may change.
Every component that moves an item asks ``advance()`` for the state update
instead of writing ``state`` itself.
"""

from __future__ import annotations

from typing import Any

from contentq.content.models import ContentItem, ContentState
from contentq.errors import InvalidTransition

TRANSITIONS: dict[ContentState, frozenset[ContentState]] = {
    ContentState.DRAFT: frozenset({ContentState.PENDING_APPROVAL}),
    ContentState.PENDING_APPROVAL: frozenset({ContentState.APPROVED, ContentState.REVISION}),
    ContentState.APPROVED: frozenset({ContentState.QUEUED}),
    ContentState.REVISION: frozenset({ContentState.PENDING_APPROVAL}),
    ContentState.QUEUED: frozenset({ContentState.POSTED}),
    ContentState.POSTED: frozenset(),
    ContentState.ABANDONED: frozenset(),
}

TERMINAL_STATES = frozenset(state for state, targets in TRANSITIONS.items() if not targets)


def can_transition(current: ContentState, target: ContentState) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def advance(item: ContentItem, target: ContentState) -> dict[str, Any]:
    """Return the field update that moves ``item`` to ``target``.

    Raises:
        InvalidTransition: ``target`` is not reachable from the item's state.
    """
    if not can_transition(item.state, target):
        raise InvalidTransition(item.id, item.state.value, target.value)
    return {"state": target}
