"""Base class for publishing a content item to an external target."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from contentq.content.models import ContentItem


class PublishReceipt(BaseModel):
    """What the target handed back after accepting an item."""

    target: str
    external_id: str | None = None
    url: str | None = None


class ContentPublisher(ABC):
    """Delivers one ContentItem to one target.

    Implementations raise ``PublishFailed`` on any delivery error; they never
    touch the content store.
    """

    name: str = ""

    @abstractmethod
    def publish(self, item: ContentItem) -> PublishReceipt:
        """Deliver ``item`` and return the target's receipt."""
