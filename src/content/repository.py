"""Channels repository - channels and posts addressed by derived keys.

Every key the repository touches is derived from the organization root:

- ``Org/ChannelSlug:<slug>`` - secondary index, slug -> content key
- ``Org/ChannelContent:<id>`` - the channel record
- ``Org/ChannelContent:<id>/Post:<id>`` - posts, always scanned by
  the channel's content key as ancestor
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from forumstore.content.keys import (
    CHANNEL_CONTENT_KIND,
    CHANNEL_SLUG_KIND,
    POST_KIND,
    Key,
    incomplete_key,
    org_root_key,
)
from forumstore.content.models import ChannelContent, ChannelSlug, MarkdownDocument, Post
from forumstore.errors import (
    ChannelExistsError,
    ChannelNotFoundError,
    EntityNotFoundError,
    InvalidSlugError,
    PostNotFoundError,
)
from forumstore.storage.base import Datastore, Query
from forumstore.storage.context import RequestContext

if TYPE_CHECKING:
    from forumstore.content.connection import PostsConnection

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100
SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{0,63}$")

_TICK = timedelta(microseconds=1)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def validate_slug(slug: str) -> str:
    """Return *slug* unchanged, or raise InvalidSlugError."""
    if not SLUG_PATTERN.match(slug):
        raise InvalidSlugError(slug)
    return slug


class ChannelsRepo:
    """Query and mutate the channels of one organization.

    Args:
        store: Storage backend.
        org_slug: Organization whose root key anchors every key. Must
            pass :func:`validate_slug`.
        ctx: Request context threaded through every storage call.
        clock: Source of ``created_at`` timestamps. Timestamps handed to
            posts are strictly increasing for the life of the repo.
        list_limit: Cap for :meth:`list_posts_in_channel`.
    """

    def __init__(
        self,
        store: Datastore,
        org_slug: str,
        *,
        ctx: RequestContext | None = None,
        clock: Callable[[], datetime] | None = None,
        list_limit: int = DEFAULT_LIST_LIMIT,
    ) -> None:
        self.store = store
        self.org_slug = validate_slug(org_slug)
        self.ctx = ctx or RequestContext.background()
        self._clock = clock or _utcnow
        self._last_created_at: datetime | None = None
        self.list_limit = list_limit

    def root_key(self) -> Key:
        return org_root_key(self.org_slug)

    # ── Key derivation ───────────────────────────────────────────

    def channel_slug_key_for(self, slug: str) -> Key:
        return Key(kind=CHANNEL_SLUG_KIND, name=slug, parent=self.root_key())

    def channel_content_key_for(self, slug: str) -> Key | None:
        """Look up the content key registered for *slug*, or None."""
        try:
            record = self.store.get(self.ctx, self.channel_slug_key_for(slug))
        except EntityNotFoundError:
            return None
        return ChannelSlug.from_record(record).content_key

    def require_channel_content_key(self, slug: str) -> Key:
        """Like channel_content_key_for, raising ChannelNotFoundError."""
        key = self.channel_content_key_for(slug)
        if key is None:
            raise ChannelNotFoundError(slug)
        return key

    # ── Channels ─────────────────────────────────────────────────

    def create_channel(self, slug: str, description: str = "") -> ChannelContent:
        """Create a channel and its slug index in one atomic write.

        Raises InvalidSlugError or ChannelExistsError.
        """
        validate_slug(slug)
        if self.channel_content_key_for(slug) is not None:
            raise ChannelExistsError(slug)

        content_key = self.store.allocate_key(
            self.ctx, incomplete_key(CHANNEL_CONTENT_KIND, self.root_key())
        )
        channel = ChannelContent(key=content_key, slug=slug, description=description)
        index = ChannelSlug(content_key=content_key)

        self.store.put_multi(
            self.ctx,
            [
                (content_key, channel.to_record()),
                (self.channel_slug_key_for(slug), index.to_record()),
            ],
        )
        logger.info("Created channel %s in org %s", slug, self.org_slug)
        return channel

    def get_channel_info(self, slug: str) -> ChannelContent:
        """Load the base info for a channel.

        Raises ChannelNotFoundError if the slug is unregistered or its
        index points at a missing record.
        """
        content_key = self.require_channel_content_key(slug)
        try:
            record = self.store.get(self.ctx, content_key)
        except EntityNotFoundError as exc:
            raise ChannelNotFoundError(slug) from exc
        return ChannelContent.from_record(content_key, record)

    # ── Posts ────────────────────────────────────────────────────

    def _next_created_at(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        if self._last_created_at is not None and now <= self._last_created_at:
            now = self._last_created_at + _TICK
        self._last_created_at = now
        return now

    def create_post(
        self,
        channel_slug: str,
        markdown_source: str,
        *,
        parent_post_key: Key | None = None,
        command_type: str = "",
    ) -> Post:
        """Create a post in a channel.

        *parent_post_key* is stored as given; use :meth:`create_reply`
        to have the parent checked first.
        """
        content_key = self.require_channel_content_key(channel_slug)

        post = Post(
            created_at=self._next_created_at(),
            parent_post_key=parent_post_key,
            command_type=command_type,
            content=MarkdownDocument(source=markdown_source),
        )
        post.key = self.store.put(self.ctx, incomplete_key(POST_KIND, content_key), post.to_record())
        logger.debug("Created post %s in channel %s", post.key, channel_slug)
        return post

    def create_reply(
        self,
        channel_slug: str,
        parent_post_id: str,
        markdown_source: str,
        *,
        command_type: str = "",
    ) -> Post:
        """Create a post replying to *parent_post_id* in the same channel."""
        parent = self.get_post(channel_slug, parent_post_id)
        return self.create_post(
            channel_slug,
            markdown_source,
            parent_post_key=parent.key,
            command_type=command_type,
        )

    def get_post(self, channel_slug: str, post_id: str) -> Post:
        """Load one post by id, which must belong to the channel."""
        content_key = self.require_channel_content_key(channel_slug)
        try:
            key = Key.decode(post_id)
        except ValueError as exc:
            raise PostNotFoundError(post_id) from exc
        if key.kind != POST_KIND or key.parent != content_key:
            raise PostNotFoundError(post_id)

        try:
            record = self.store.get(self.ctx, key)
        except EntityNotFoundError as exc:
            raise PostNotFoundError(post_id) from exc
        return Post.from_record(key, record)

    def list_posts_in_channel(self, channel_slug: str) -> list[Post]:
        """List up to ``list_limit`` posts in a channel, in store order."""
        content_key = self.require_channel_content_key(channel_slug)

        query = Query(kind=POST_KIND, ancestor=content_key, limit=self.list_limit)
        return [Post.from_record(key, record) for key, record in self.store.scan(self.ctx, query)]

    def posts_connection(
        self,
        channel_slug: str,
        *,
        include_replies: bool = False,
        max_count: int | None = None,
    ) -> PostsConnection:
        from forumstore.content.connection import PostsConnection, PostsConnectionOptions

        options = PostsConnectionOptions(
            channel_slug=channel_slug,
            include_replies=include_replies,
            max_count=max_count if max_count is not None else self.list_limit,
        )
        return PostsConnection(self, options)
