"""Tests for discord.py embed and webhook payload building."""

from datetime import datetime, timezone

from alerts.bridge import build_embed, build_webhook_payload
from shared.models import EmbedField, MessageFormat


class TestBuildEmbed:
    def test_content_only_has_no_embed(self):
        assert build_embed(MessageFormat(content="hi")) is None

    def test_full_embed(self):
        timestamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        embed = build_embed(
            MessageFormat(
                color=0x00FF00,
                author_name="Ann",
                author_url="https://example.com/ann",
                author_image_url="https://example.com/ann.png",
                thumbnail_url="https://example.com/thumb.png",
                title="Joined",
                title_url="https://example.com",
                description="Welcome",
                fields=(EmbedField("World", "nether", False),),
                image_url="https://example.com/image.png",
                footer_text="footer",
                footer_icon_url="https://example.com/icon.png",
                timestamp=timestamp,
            )
        )

        data = embed.to_dict()
        assert data["title"] == "Joined"
        assert data["url"] == "https://example.com"
        assert data["description"] == "Welcome"
        assert data["color"] == 0x00FF00
        assert data["author"]["name"] == "Ann"
        assert data["author"]["icon_url"] == "https://example.com/ann.png"
        assert data["thumbnail"]["url"] == "https://example.com/thumb.png"
        assert data["fields"] == [{"name": "World", "value": "nether", "inline": False}]
        assert data["image"]["url"] == "https://example.com/image.png"
        assert data["footer"]["text"] == "footer"
        assert embed.timestamp == timestamp

    def test_current_timestamp(self):
        embed = build_embed(MessageFormat(title="t", use_current_timestamp=True))

        assert embed.timestamp is not None


class TestBuildWebhookPayload:
    def test_payload(self):
        payload = build_webhook_payload(
            MessageFormat(
                content="hello",
                title="t",
                use_webhooks=True,
                webhook_name="Ann",
                webhook_avatar_url="https://example.com/ann.png",
            )
        )

        assert payload["content"] == "hello"
        assert payload["username"] == "Ann"
        assert payload["avatar_url"] == "https://example.com/ann.png"
        assert payload["embeds"][0]["title"] == "t"

    def test_payload_without_embed(self):
        payload = build_webhook_payload(MessageFormat(content="hello", use_webhooks=True))

        assert payload == {"content": "hello"}
