"""Tests for building MessageFormat templates from rule configuration."""

from datetime import datetime, timezone

from alerts.core import DynamicConfig
from alerts.engine import message_format_from_config
from shared.models import BLANK_FIELD_TEXT, EmbedField, MessageFormat


def _format(definition: dict) -> MessageFormat | None:
    return message_format_from_config(DynamicConfig({"Alerts": [definition]}), "Alerts.0")


class TestMessageFormatFromConfig:
    def test_empty_template_is_none(self):
        assert _format({"Trigger": "PlayerJoinEvent", "Target": "global"}) is None

    def test_content_only(self):
        message_format = _format({"Content": "hello"})

        assert message_format.content == "hello"
        assert not message_format.has_embed

    def test_disabled_template_is_none(self):
        assert _format({"Enabled": False, "Content": "hello"}) is None

    def test_hex_and_int_colors(self):
        assert _format({"Embed": {"Color": "#FF8800"}}).color == 0xFF8800
        assert _format({"Embed": {"Color": "00ff00"}}).color == 0x00FF00
        assert _format({"Embed": {"Color": 255}}).color == 255

    def test_invalid_color_is_ignored(self):
        message_format = _format({"Embed": {"Color": "#12", "Title": {"Text": "t"}}})

        assert message_format.color is None
        assert message_format.title == "t"

    def test_fields(self):
        message_format = _format(
            {"Embed": {"Fields": ["Player;{name};false", "World;{world}", "true"]}}
        )

        assert message_format.fields == (
            EmbedField("Player", "{name}", False),
            EmbedField("World", "{world}", True),
            EmbedField(BLANK_FIELD_TEXT, BLANK_FIELD_TEXT, True),
        )

    def test_timestamp_true_uses_render_time(self):
        message_format = _format({"Embed": {"Timestamp": True}})

        assert message_format.use_current_timestamp
        assert message_format.timestamp is None
        assert message_format.effective_timestamp() is not None

    def test_timestamp_epoch_millis(self):
        message_format = _format({"Embed": {"Timestamp": 1700000000000}})

        assert message_format.timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_embed_disabled(self):
        assert _format({"Embed": {"Enabled": False, "Title": {"Text": "t"}}}) is None

    def test_webhook_settings(self):
        message_format = _format(
            {
                "Webhook": {"Enable": True, "Name": "{name}", "AvatarUrl": "{embedavatarurl}"},
                "Content": "hi",
            }
        )

        assert message_format.use_webhooks
        assert message_format.webhook_name == "{name}"
        assert message_format.webhook_avatar_url == "{embedavatarurl}"
        assert message_format.webhook_url is None

    def test_webhook_not_enabled(self):
        message_format = _format({"Webhook": {"Name": "x"}, "Content": "hi"})

        assert not message_format.use_webhooks


class TestTranslate:
    def test_escape_flags_per_field(self):
        seen: dict[str, bool] = {}

        def translator(text, needs_escape):
            seen[text] = needs_escape
            return text.upper()

        message_format = MessageFormat(
            content="content",
            title="title",
            description="description",
            footer_text="footer",
            author_name="author",
            fields=(EmbedField("fieldtitle", "fieldvalue"),),
        )
        translated = message_format.translate(translator)

        assert translated.content == "CONTENT"
        assert translated.fields[0] == EmbedField("FIELDTITLE", "FIELDVALUE", True)
        assert seen == {
            "content": True,
            "title": False,
            "description": True,
            "footer": True,
            "author": False,
            "fieldtitle": False,
            "fieldvalue": True,
        }

    def test_empty_field_text_becomes_blank(self):
        message_format = MessageFormat(fields=(EmbedField("{gone}", "{gone}"),))

        translated = message_format.translate(lambda text, _: "")

        assert translated.fields[0].title == BLANK_FIELD_TEXT
        assert translated.fields[0].value == BLANK_FIELD_TEXT
