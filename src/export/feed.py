"""Syndication feed built from an enumerated post stream."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import UTC, datetime
from email.utils import format_datetime
from typing import Protocol

from pydantic import BaseModel, Field

from forumstore.content.models import Post

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'


class FeedURLMaker(Protocol):
    """Builds the feed's own URL and one URL per item."""

    def url(self) -> str: ...

    def item_url(self, post_id: str) -> str: ...


class ChannelURLMaker:
    """URLs for a channel's posts pages, e.g. ``/org:acme/channel:news/posts``."""

    def __init__(self, base_url: str, org_slug: str, channel_slug: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.org_slug = org_slug
        self.channel_slug = channel_slug

    def url(self) -> str:
        return f"{self.base_url}/org:{self.org_slug}/channel:{self.channel_slug}/posts"

    def item_url(self, post_id: str) -> str:
        return f"{self.url()}/{post_id}"


class FeedLink(BaseModel):
    href: str


class FeedItem(BaseModel):
    title: str = "Post"
    link: FeedLink
    id: str
    content: str
    created: datetime


class Feed(BaseModel):
    title: str
    link: FeedLink
    description: str = ""
    created: datetime
    items: list[FeedItem] = Field(default_factory=list)

    def to_rss(self) -> str:
        """Render as an RSS 2.0 document."""
        rss = ET.Element("rss", version="2.0")
        channel = ET.SubElement(rss, "channel")
        ET.SubElement(channel, "title").text = self.title
        ET.SubElement(channel, "link").text = self.link.href
        ET.SubElement(channel, "description").text = self.description
        ET.SubElement(channel, "pubDate").text = format_datetime(_aware(self.created))

        for item in self.items:
            entry = ET.SubElement(channel, "item")
            ET.SubElement(entry, "title").text = item.title
            ET.SubElement(entry, "link").text = item.link.href
            ET.SubElement(entry, "guid", isPermaLink="false").text = item.id
            ET.SubElement(entry, "description").text = item.content
            ET.SubElement(entry, "pubDate").text = format_datetime(_aware(item.created))

        return XML_DECLARATION + ET.tostring(rss, encoding="unicode")


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def build_feed(
    posts: Iterable[Post],
    url_maker: FeedURLMaker,
    *,
    title: str = "posts",
    description: str = "",
    now: datetime | None = None,
) -> Feed:
    """Build a feed with one item per post, in stream order.

    Items are collected before the feed is returned, so an error from
    *posts* propagates and no partial feed is produced.
    """
    items = [
        FeedItem(
            link=FeedLink(href=url_maker.item_url(post.id)),
            id=post.id,
            content=post.content.source,
            created=post.created_at,
        )
        for post in posts
    ]
    return Feed(
        title=title,
        link=FeedLink(href=url_maker.url()),
        description=description,
        created=now or datetime.now(tz=UTC),
        items=items,
    )
