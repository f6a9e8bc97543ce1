"""Tests for the lifecycle transition table."""

import itertools

import pytest

from contentq.content.models import ContentCategory, ContentItem, ContentState
from contentq.errors import InvalidTransition
from contentq.lifecycle import TERMINAL_STATES, TRANSITIONS, advance, can_transition

LEGAL = {
    (ContentState.DRAFT, ContentState.PENDING_APPROVAL),
    (ContentState.PENDING_APPROVAL, ContentState.APPROVED),
    (ContentState.PENDING_APPROVAL, ContentState.REVISION),
    (ContentState.APPROVED, ContentState.QUEUED),
    (ContentState.REVISION, ContentState.PENDING_APPROVAL),
    (ContentState.QUEUED, ContentState.POSTED),
}


class TestTable:
    def test_every_state_has_an_entry(self):
        assert set(TRANSITIONS) == set(ContentState)

    def test_terminal_states(self):
        assert TERMINAL_STATES == {ContentState.POSTED, ContentState.ABANDONED}

    @pytest.mark.parametrize(
        ("current", "target"), list(itertools.product(ContentState, ContentState))
    )
    def test_can_transition_matches_table(self, current, target):
        assert can_transition(current, target) is ((current, target) in LEGAL)


class TestAdvance:
    def test_returns_state_update(self):
        item = ContentItem(category=ContentCategory.BLOG, text="x")
        assert advance(item, ContentState.PENDING_APPROVAL) == {
            "state": ContentState.PENDING_APPROVAL
        }

    def test_illegal_transition_names_both_states(self):
        item = ContentItem(id="c1", category=ContentCategory.BLOG, text="x")
        with pytest.raises(InvalidTransition) as exc_info:
            advance(item, ContentState.POSTED)
        message = str(exc_info.value)
        assert "draft" in message
        assert "posted" in message
