"""Tests for publishers: Ghost, LinkedIn, markdown, and the factory."""

from __future__ import annotations

import io
import json
import urllib.error
from pathlib import Path
from unittest.mock import MagicMock, patch

import jwt
import pytest

from contentq.content.models import ContentCategory, ContentItem, ContentState
from contentq.errors import PublishFailed
from contentq.publishers import (
    GhostAPIClient,
    GhostConfig,
    GhostPublisher,
    LinkedInConfig,
    LinkedInPublisher,
    MarkdownPublisher,
    Target,
    create_publisher,
)

GHOST_KEY = "6489abc:" + "ab" * 32


def _item(category: ContentCategory = ContentCategory.BLOG, **kwargs: object) -> ContentItem:
    defaults: dict[str, object] = {
        "id": "c0ffee00c0ffee00",
        "category": category,
        "text": "Body of the post.",
        "state": ContentState.QUEUED,
        "queue_position": 1,
    }
    defaults.update(kwargs)
    return ContentItem.model_validate(defaults)


def _response(body: dict, headers: dict[str, str] | None = None) -> MagicMock:
    resp = MagicMock()
    resp.read.return_value = json.dumps(body).encode("utf-8")
    resp.headers = headers or {}
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


# ── Ghost ────────────────────────────────────────────────────────────────


class TestGhostConfig:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GHOST_URL", "https://env.ghost.io")
        monkeypatch.setenv("GHOST_ADMIN_API_KEY", GHOST_KEY)
        cfg = GhostConfig.from_env()
        assert cfg.url == "https://env.ghost.io"
        assert cfg.is_configured is True

    def test_not_configured_default(self):
        assert GhostConfig().is_configured is False


class TestGhostAPIClient:
    def test_token_is_signed_with_key_id(self):
        client = GhostAPIClient(GhostConfig(url="https://g.io", admin_api_key=GHOST_KEY))
        token = client._generate_token()

        header = jwt.get_unverified_header(token)
        assert header["kid"] == "6489abc"
        payload = jwt.decode(
            token, bytes.fromhex("ab" * 32), algorithms=["HS256"], audience="/admin/"
        )
        assert payload["exp"] - payload["iat"] == 300

    def test_create_post_payload(self):
        client = GhostAPIClient(GhostConfig(url="https://g.io/", admin_api_key=GHOST_KEY))
        with patch.object(client, "_request", return_value={"posts": [{"id": "p1"}]}) as req:
            post = client.create_post(
                "Title", "# Body", excerpt="Ex", tags=["ai"], status="published"
            )

        assert post == {"id": "p1"}
        method, path, data = req.call_args.args
        assert (method, path) == ("POST", "/posts/")
        sent = data["posts"][0]
        assert sent["status"] == "published"
        assert sent["custom_excerpt"] == "Ex"
        assert sent["tags"] == [{"name": "ai"}]
        assert json.loads(sent["mobiledoc"])["cards"][0][1]["markdown"] == "# Body"

    def test_request_hits_admin_api(self):
        client = GhostAPIClient(GhostConfig(url="https://g.io/", admin_api_key=GHOST_KEY))
        with patch("urllib.request.urlopen", return_value=_response({"posts": []})) as urlopen:
            client._request("GET", "/posts/")
        req = urlopen.call_args.args[0]
        assert req.full_url == "https://g.io/ghost/api/admin/posts/"
        assert req.get_header("Authorization").startswith("Ghost ")


class TestGhostPublisher:
    def test_publishes_live_post(self):
        publisher = GhostPublisher(GhostConfig(url="https://g.io", admin_api_key=GHOST_KEY))
        post = {"id": "ghost-1", "url": "https://g.io/p/", "updated_at": "x"}
        with patch.object(GhostAPIClient, "create_post", return_value=post) as create:
            receipt = publisher.publish(_item(title="Hello"))

        assert receipt.external_id == "ghost-1"
        assert receipt.url == "https://g.io/p/"
        assert create.call_args.kwargs["status"] == "published"

    def test_newsletter_publishes_in_two_steps(self):
        config = GhostConfig(
            url="https://g.io", admin_api_key=GHOST_KEY, newsletter_slug="weekly"
        )
        publisher = GhostPublisher(config)
        draft = {"id": "ghost-1", "updated_at": "2025-01-01T00:00:00.000Z"}
        with (
            patch.object(GhostAPIClient, "create_post", return_value=draft) as create,
            patch.object(
                GhostAPIClient, "publish_with_newsletter", return_value={"id": "ghost-1"}
            ) as send,
        ):
            publisher.publish(_item(title="Hello"))

        assert create.call_args.kwargs["status"] == "draft"
        assert send.call_args.args == ("ghost-1", "2025-01-01T00:00:00.000Z", "weekly")

    def test_not_configured(self):
        with pytest.raises(PublishFailed, match="not configured"):
            GhostPublisher(GhostConfig()).publish(_item())

    def test_http_error_wrapped(self):
        publisher = GhostPublisher(GhostConfig(url="https://g.io", admin_api_key=GHOST_KEY))
        error = urllib.error.HTTPError("https://g.io", 422, "Unprocessable", {}, io.BytesIO())
        with patch.object(GhostAPIClient, "create_post", side_effect=error):
            with pytest.raises(PublishFailed, match="422") as exc_info:
                publisher.publish(_item())
        assert exc_info.value.content_id == "c0ffee00c0ffee00"
        assert exc_info.value.target == "ghost"


# ── LinkedIn ─────────────────────────────────────────────────────────────


class TestLinkedInPublisher:
    CONFIG = LinkedInConfig(access_token="tok", author_urn="urn:li:person:abc")

    def test_posts_share(self):
        resp = _response({}, headers={"x-restli-id": "urn:li:share:1"})
        with patch("urllib.request.urlopen", return_value=resp) as urlopen:
            receipt = LinkedInPublisher(self.CONFIG).publish(
                _item(ContentCategory.LINKEDIN, text="Hello network")
            )

        assert receipt.external_id == "urn:li:share:1"
        req = urlopen.call_args.args[0]
        assert req.full_url == "https://api.linkedin.com/v2/ugcPosts"
        assert req.get_header("Authorization") == "Bearer tok"
        body = json.loads(req.data.decode("utf-8"))
        assert body["author"] == "urn:li:person:abc"
        share = body["specificContent"]["com.linkedin.ugc.ShareContent"]
        assert share["shareCommentary"]["text"] == "Hello network"

    def test_id_from_body_when_header_missing(self):
        with patch("urllib.request.urlopen", return_value=_response({"id": "urn:li:share:2"})):
            receipt = LinkedInPublisher(self.CONFIG).publish(_item(ContentCategory.LINKEDIN))
        assert receipt.external_id == "urn:li:share:2"

    def test_network_error_wrapped(self):
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused")):
            with pytest.raises(PublishFailed, match="refused"):
                LinkedInPublisher(self.CONFIG).publish(_item(ContentCategory.LINKEDIN))

    def test_not_configured(self):
        with pytest.raises(PublishFailed):
            LinkedInPublisher(LinkedInConfig()).publish(_item(ContentCategory.LINKEDIN))

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LINKEDIN_ACCESS_TOKEN", "t")
        monkeypatch.setenv("LINKEDIN_AUTHOR_URN", "urn:li:person:x")
        assert LinkedInConfig.from_env().is_configured is True


# ── Markdown ─────────────────────────────────────────────────────────────


class TestMarkdownPublisher:
    def test_writes_file(self, tmp_path: Path):
        publisher = MarkdownPublisher(tmp_path)
        item = _item(title="Hello World", tags=["ai"], excerpt="Short")

        receipt = publisher.publish(item)

        path = Path(receipt.external_id or "")
        assert path == tmp_path / "blog" / "hello-world-c0ffee00.md"
        content = path.read_text(encoding="utf-8")
        assert content.startswith("---\n")
        assert 'title: "Hello World"' in content
        assert "  - ai" in content
        assert "# Hello World" in content
        assert content.rstrip().endswith("Body of the post.")

    def test_linkedin_has_no_heading(self, tmp_path: Path):
        item = _item(ContentCategory.LINKEDIN, title="LinkedIn Post 1")
        text = MarkdownPublisher(tmp_path).format(item)
        assert "# LinkedIn Post 1" not in text

    def test_write_error_wrapped(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a dir", encoding="utf-8")
        with pytest.raises(PublishFailed):
            MarkdownPublisher(blocker).publish(_item())


# ── Factory ──────────────────────────────────────────────────────────────


class TestCreatePublisher:
    def test_known_targets(self, tmp_path: Path):
        assert isinstance(create_publisher("ghost"), GhostPublisher)
        assert isinstance(create_publisher(Target.LINKEDIN), LinkedInPublisher)
        assert isinstance(create_publisher("markdown", markdown_dir=tmp_path), MarkdownPublisher)

    def test_unknown_target(self):
        with pytest.raises(ValueError, match="Unknown publishing target"):
            create_publisher("myspace")
