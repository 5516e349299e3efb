"""Tests for content models and their stored record form."""

from datetime import UTC, datetime, timedelta, timezone

from forumstore.content.keys import Key, org_root_key
from forumstore.content.models import ChannelContent, ChannelSlug, MarkdownDocument, Post


def _channel_key() -> Key:
    return Key(kind="ChannelContent", id=3, parent=org_root_key("acme"))


class TestPostRecord:
    def test_record_omits_key_and_replies(self):
        post = Post(
            key=Key(kind="Post", id=9, parent=_channel_key()),
            created_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC),
            content=MarkdownDocument(source="hello"),
            replies=[],
        )
        record = post.to_record()
        assert "key" not in record
        assert "replies" not in record
        assert record["content"] == {"source": "hello"}
        assert record["parent_post_key"] is None

    def test_created_at_is_stored_as_fixed_width_utc(self):
        plus_two = timezone(timedelta(hours=2))
        post = Post(created_at=datetime(2026, 1, 2, 5, 0, tzinfo=plus_two))
        assert post.to_record()["created_at"] == "2026-01-02T03:00:00.000000+00:00"

    def test_from_record_restores_fields(self):
        parent = Key(kind="Post", id=1, parent=_channel_key())
        original = Post(
            created_at=datetime(2026, 1, 2, tzinfo=UTC),
            parent_post_key=parent,
            command_type="web",
            content=MarkdownDocument(source="# Title"),
        )
        key = Key(kind="Post", id=2, parent=_channel_key())

        restored = Post.from_record(key, original.to_record())

        assert restored.key == key
        assert restored.parent_post_key == parent
        assert restored.command_type == "web"
        assert restored.content.source == "# Title"
        assert restored.created_at == original.created_at
        assert restored.replies is None

    def test_ids(self):
        parent = Key(kind="Post", id=1, parent=_channel_key())
        post = Post(
            key=Key(kind="Post", id=2, parent=_channel_key()),
            created_at=datetime(2026, 1, 2, tzinfo=UTC),
            parent_post_key=parent,
        )
        assert post.id == post.key.encode()
        assert post.parent_post_id == parent.encode()
        assert post.is_reply is True

    def test_root_post_has_empty_parent_id(self):
        post = Post(created_at=datetime(2026, 1, 2, tzinfo=UTC))
        assert post.parent_post_id == ""
        assert post.is_reply is False
        assert post.id == ""


class TestChannelRecords:
    def test_channel_content_roundtrip(self):
        channel = ChannelContent(key=_channel_key(), slug="news", description="d")
        record = channel.to_record()
        assert record == {"slug": "news", "description": "d"}
        assert ChannelContent.from_record(_channel_key(), record) == channel

    def test_channel_slug_stores_encoded_content_key(self):
        index = ChannelSlug(content_key=_channel_key())
        record = index.to_record()
        assert record == {"content_key": _channel_key().encode()}
        assert ChannelSlug.from_record(record).content_key == _channel_key()
