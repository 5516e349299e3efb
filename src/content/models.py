"""Content domain models - pure Pydantic v2 data types.

Three record kinds are persisted: ChannelSlug (secondary index from a
human slug to a channel's durable key), ChannelContent (the channel
itself) and Post.  Keys live on the models for convenience but are
never part of the stored record.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from forumstore.content.keys import Key

_UNSTORED = {"key", "replies"}


class MarkdownDocument(BaseModel):
    """A text/markdown document."""

    source: str = ""


class ChannelSlug(BaseModel):
    """Lookup record letting a channel be found by slug."""

    content_key: Key

    def to_record(self) -> dict[str, Any]:
        return {"content_key": self.content_key.encode()}

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> ChannelSlug:
        return cls(content_key=Key.decode(record["content_key"]))


class ChannelContent(BaseModel):
    """Main data of a channel."""

    key: Key | None = None
    slug: str
    description: str = ""

    @property
    def id(self) -> str:
        return self.key.encode() if self.key is not None else ""

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude=_UNSTORED)

    @classmethod
    def from_record(cls, key: Key, record: dict[str, Any]) -> ChannelContent:
        return cls.model_validate({**record, "key": key})


class Post(BaseModel):
    """A markdown post, optionally replying to another post.

    ``replies`` is transient: it stays ``None`` unless the post was
    emitted by a reply-grouping enumeration.
    """

    key: Key | None = None
    created_at: datetime
    parent_post_key: Key | None = None
    command_type: str = ""
    content: MarkdownDocument = Field(default_factory=MarkdownDocument)
    replies: list[Post] | None = None

    @property
    def id(self) -> str:
        return self.key.encode() if self.key is not None else ""

    @property
    def parent_post_id(self) -> str:
        return self.parent_post_key.encode() if self.parent_post_key is not None else ""

    @property
    def is_reply(self) -> bool:
        return self.parent_post_key is not None

    def to_record(self) -> dict[str, Any]:
        return {
            "created_at": self.created_at.astimezone(UTC).isoformat(timespec="microseconds"),
            "parent_post_key": self.parent_post_id or None,
            "command_type": self.command_type,
            "content": self.content.model_dump(mode="json"),
        }

    @classmethod
    def from_record(cls, key: Key, record: dict[str, Any]) -> Post:
        parent = record.get("parent_post_key")
        return cls(
            key=key,
            created_at=datetime.fromisoformat(record["created_at"]),
            parent_post_key=Key.decode(parent) if parent else None,
            command_type=record.get("command_type", ""),
            content=MarkdownDocument.model_validate(record.get("content", {})),
        )
