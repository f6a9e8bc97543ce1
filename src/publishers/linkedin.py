"""LinkedIn publisher using the UGC posts API."""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.request

from pydantic import BaseModel

from contentq.content.models import ContentItem
from contentq.errors import PublishFailed
from contentq.publishers.base import ContentPublisher, PublishReceipt

logger = logging.getLogger(__name__)

UGC_POSTS_URL = "https://api.linkedin.com/v2/ugcPosts"


class LinkedInConfig(BaseModel):
    """Configuration for LinkedIn publishing."""

    access_token: str = ""
    author_urn: str = ""
    visibility: str = "PUBLIC"
    timeout: int = 30

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token and self.author_urn)

    @classmethod
    def from_env(cls) -> LinkedInConfig:
        """Create config from environment variables."""
        return cls(
            access_token=os.environ.get("LINKEDIN_ACCESS_TOKEN", ""),
            author_urn=os.environ.get("LINKEDIN_AUTHOR_URN", ""),
        )


class LinkedInPublisher(ContentPublisher):
    """Posts LinkedIn items as text shares on the author's feed."""

    name = "linkedin"

    def __init__(self, config: LinkedInConfig | None = None) -> None:
        self._config = config or LinkedInConfig.from_env()

    def _payload(self, item: ContentItem) -> dict:
        return {
            "author": self._config.author_urn,
            "lifecycleState": "PUBLISHED",
            "specificContent": {
                "com.linkedin.ugc.ShareContent": {
                    "shareCommentary": {"text": item.text},
                    "shareMediaCategory": "NONE",
                }
            },
            "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": self._config.visibility},
        }

    def publish(self, item: ContentItem) -> PublishReceipt:
        if not self._config.is_configured:
            raise PublishFailed(item.id, self.name, "LinkedIn is not configured")

        req = urllib.request.Request(
            UGC_POSTS_URL,
            data=json.dumps(self._payload(item)).encode("utf-8"),
            method="POST",
            headers={
                "Authorization": f"Bearer {self._config.access_token}",
                "Content-Type": "application/json",
                "X-Restli-Protocol-Version": "2.0.0",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self._config.timeout) as resp:
                post_id = resp.headers.get("x-restli-id")
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            raise PublishFailed(item.id, self.name, f"HTTP {exc.code}: {exc.reason}") from exc
        except (urllib.error.URLError, OSError) as exc:
            raise PublishFailed(item.id, self.name, str(exc)) from exc

        if not post_id and raw.strip():
            try:
                post_id = json.loads(raw).get("id")
            except json.JSONDecodeError:
                post_id = None

        logger.info("Published %s to LinkedIn as %s", item.id, post_id)
        return PublishReceipt(target=self.name, external_id=post_id)
