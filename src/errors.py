"""Error taxonomy for the forum content store."""

from __future__ import annotations


class ForumStoreError(Exception):
    """Base error for repository and storage operations."""


class ChannelNotFoundError(ForumStoreError):
    """Raised when a slug does not resolve to an existing channel."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"No channel with slug: {slug}")
        self.slug = slug


class ChannelExistsError(ForumStoreError):
    """Raised when creating a channel whose slug is already registered."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Channel already exists with slug: {slug}")
        self.slug = slug


class PostNotFoundError(ForumStoreError):
    """Raised when a post id does not resolve to a post in the channel."""

    def __init__(self, post_id: str) -> None:
        super().__init__(f"No post with id: {post_id}")
        self.post_id = post_id


class InvalidSlugError(ForumStoreError, ValueError):
    def __init__(self, slug: str) -> None:
        super().__init__(f"Invalid slug: {slug!r}")
        self.slug = slug


class StoreError(ForumStoreError):
    """I/O failure from the underlying datastore."""


class EntityNotFoundError(ForumStoreError):
    """Point lookup found no record at the key."""

    def __init__(self, key: object) -> None:
        super().__init__(f"No entity at key: {key}")
        self.key = key


class OperationCancelledError(ForumStoreError):
    """The request context was cancelled or its deadline passed."""
