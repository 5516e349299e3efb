"""Posts connection - ancestor-scoped, newest-first post enumeration.

A connection scans one channel once per enumeration and materializes
either a flat newest-first stream or a two-level view of root posts
with their replies attached oldest-first.  The export adapters consume
the same lazy stream.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, TextIO

from forumstore.content.keys import POST_KIND
from forumstore.content.models import Post
from forumstore.content.replies import group_replies
from forumstore.export.csv_export import write_posts_csv
from forumstore.export.feed import Feed, FeedURLMaker, build_feed
from forumstore.storage.base import Query

if TYPE_CHECKING:
    from forumstore.content.repository import ChannelsRepo

logger = logging.getLogger(__name__)

CREATED_AT_FIELD = "created_at"


@dataclass
class PostsConnectionOptions:
    channel_slug: str
    include_replies: bool = False
    max_count: int = 100


@dataclass
class EnumerationStats:
    """Counters for the most recent enumeration of a connection."""

    scanned: int = 0
    emitted: int = 0
    dropped_replies: int = 0


class PostsConnection:
    """Lazy view over the posts of one channel.

    Each call to :meth:`enumerate` (or iteration) issues a fresh scan.
    The sequence it returns is finite and single-pass.
    """

    def __init__(self, repo: ChannelsRepo, options: PostsConnectionOptions) -> None:
        self.repo = repo
        self.options = options
        self.stats = EnumerationStats()

    def __iter__(self) -> Iterator[Post]:
        return self.enumerate()

    def enumerate(self) -> Iterator[Post]:
        """Yield the channel's posts.

        Without replies, posts are yielded newest-first as they are
        scanned.  With replies, the whole window is buffered, then root
        posts are yielded newest-first with ``replies`` attached
        oldest-first.  Replies never appear at the top level; a reply
        whose parent is not a root inside the ``max_count`` window is
        dropped and counted in ``stats.dropped_replies``.

        Raises ChannelNotFoundError when iteration starts if the slug is
        unregistered.  Store errors abort the iteration; posts already
        yielded stay yielded.
        """
        stats = self.stats = EnumerationStats()
        channel_slug = self.options.channel_slug
        content_key = self.repo.require_channel_content_key(channel_slug)

        query = Query(
            kind=POST_KIND,
            ancestor=content_key,
            order_field=CREATED_AT_FIELD,
            descending=True,
            limit=self.options.max_count,
        )
        scanned = self._scan(query, stats)

        if not self.options.include_replies:
            for post in scanned:
                stats.emitted += 1
                yield post
            return

        grouping = group_replies(scanned)
        if grouping.dropped:
            stats.dropped_replies = len(grouping.dropped)
            logger.info(
                "Dropped %d replies outside the %d-post window of channel %s",
                len(grouping.dropped),
                self.options.max_count,
                channel_slug,
            )

        for post in grouping.roots:
            stats.emitted += 1
            yield post

    def _scan(self, query: Query, stats: EnumerationStats) -> Iterator[Post]:
        for key, record in self.repo.store.scan(self.repo.ctx, query):
            stats.scanned += 1
            yield Post.from_record(key, record)

    # ── Consumers ────────────────────────────────────────────────

    def all(self) -> list[Post]:
        """Collect every emitted post."""
        return list(self.enumerate())

    def write_to_csv(self, sink: TextIO) -> int:
        """Write the emitted posts as CSV rows; returns the row count."""
        return write_posts_csv(self.enumerate(), sink)

    def make_feed(
        self,
        url_maker: FeedURLMaker,
        *,
        title: str = "posts",
        description: str = "",
        now: datetime | None = None,
    ) -> Feed:
        """Build a syndication feed with one item per emitted post."""
        return build_feed(
            self.enumerate(), url_maker, title=title, description=description, now=now
        )
