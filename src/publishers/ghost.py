"""Ghost CMS publisher: config, Admin API client, and the blog publisher."""

from __future__ import annotations

import json
import logging
import os
import time
import urllib.error
import urllib.request

import jwt
from pydantic import BaseModel

from contentq.content.models import ContentItem
from contentq.errors import PublishFailed
from contentq.publishers.base import ContentPublisher, PublishReceipt

logger = logging.getLogger(__name__)


class GhostConfig(BaseModel):
    """Configuration for Ghost CMS publishing."""

    url: str = ""
    admin_api_key: str = ""
    newsletter_slug: str = ""
    timeout: int = 30

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.admin_api_key)

    @classmethod
    def from_env(cls) -> GhostConfig:
        """Create config from environment variables."""
        return cls(
            url=os.environ.get("GHOST_URL", ""),
            admin_api_key=os.environ.get("GHOST_ADMIN_API_KEY", ""),
            newsletter_slug=os.environ.get("GHOST_NEWSLETTER_SLUG", ""),
        )


class GhostAPIClient:
    """Client for the Ghost Admin API.

    Handles JWT authentication and post creation via urllib.
    """

    def __init__(self, config: GhostConfig) -> None:
        self.config = config
        self.base_url = config.url.rstrip("/")

    def _generate_token(self) -> str:
        """Generate a short-lived JWT for Ghost Admin API authentication."""
        key_id, secret = self.config.admin_api_key.split(":")
        iat = int(time.time())
        payload = {
            "iat": iat,
            "exp": iat + 5 * 60,
            "aud": "/admin/",
        }
        return jwt.encode(
            payload,
            bytes.fromhex(secret),
            algorithm="HS256",
            headers={"kid": key_id},
        )

    def _request(self, method: str, path: str, data: dict | None = None) -> dict:
        """Make an authenticated request to the Ghost Admin API."""
        url = f"{self.base_url}/ghost/api/admin{path}"
        token = self._generate_token()

        body = json.dumps(data).encode("utf-8") if data else None
        req = urllib.request.Request(
            url,
            data=body,
            method=method,
            headers={
                "Authorization": f"Ghost {token}",
                "Content-Type": "application/json",
            },
        )

        with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
            return json.loads(resp.read().decode("utf-8"))

    @staticmethod
    def _markdown_to_mobiledoc(markdown: str) -> str:
        """Wrap markdown in Ghost's mobiledoc format for proper rendering."""
        mobiledoc = {
            "version": "0.3.1",
            "ghostVersion": "4.0",
            "markups": [],
            "atoms": [],
            "cards": [["markdown", {"markdown": markdown}]],
            "sections": [[10, 0]],
        }
        return json.dumps(mobiledoc)

    def create_post(
        self,
        title: str,
        markdown: str,
        *,
        excerpt: str | None = None,
        tags: list[str] | None = None,
        status: str = "draft",
    ) -> dict:
        """Create a post in Ghost and return the created post dict."""
        post_data: dict = {
            "title": title,
            "mobiledoc": self._markdown_to_mobiledoc(markdown),
            "status": status,
        }
        if excerpt:
            post_data["custom_excerpt"] = excerpt
        if tags:
            post_data["tags"] = [{"name": t} for t in tags]

        result = self._request("POST", "/posts/", {"posts": [post_data]})
        return result["posts"][0]

    def publish_with_newsletter(self, post_id: str, updated_at: str, newsletter_slug: str) -> dict:
        """Publish a draft post and send it to a newsletter.

        Ghost only mails posts that move from draft to published with the
        ``newsletter`` query parameter, so this is a separate PUT.
        """
        path = f"/posts/{post_id}/?newsletter={newsletter_slug}"
        result = self._request(
            "PUT", path, {"posts": [{"status": "published", "updated_at": updated_at}]}
        )
        return result["posts"][0]


class GhostPublisher(ContentPublisher):
    """Publishes blog items as live Ghost posts."""

    name = "ghost"

    def __init__(self, config: GhostConfig | None = None) -> None:
        self._config = config or GhostConfig.from_env()
        self._client = GhostAPIClient(self._config) if self._config.is_configured else None

    def publish(self, item: ContentItem) -> PublishReceipt:
        if self._client is None:
            raise PublishFailed(item.id, self.name, "Ghost is not configured")

        title = item.title or item.label
        newsletter = self._config.newsletter_slug
        try:
            post = self._client.create_post(
                title,
                item.text,
                excerpt=item.excerpt,
                tags=item.tags or None,
                status="draft" if newsletter else "published",
            )
            if newsletter:
                post = self._client.publish_with_newsletter(
                    post["id"], post.get("updated_at", ""), newsletter
                )
        except urllib.error.HTTPError as exc:
            raise PublishFailed(item.id, self.name, f"HTTP {exc.code}: {exc.reason}") from exc
        except (urllib.error.URLError, OSError, ValueError, KeyError) as exc:
            raise PublishFailed(item.id, self.name, str(exc)) from exc

        logger.info("Published '%s' to Ghost as %s", title, post.get("id"))
        return PublishReceipt(target=self.name, external_id=post.get("id"), url=post.get("url"))
