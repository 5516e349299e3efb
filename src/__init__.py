"""forumstore - hierarchical content store for organization/channel/post forums."""

from forumstore.content.connection import EnumerationStats, PostsConnection, PostsConnectionOptions
from forumstore.content.keys import Key, org_root_key
from forumstore.content.models import ChannelContent, MarkdownDocument, Post
from forumstore.content.repository import ChannelsRepo
from forumstore.storage.context import RequestContext
from forumstore.storage.memory import MemoryDatastore

__version__ = "0.1.0"

__all__ = [
    "ChannelContent",
    "ChannelsRepo",
    "EnumerationStats",
    "Key",
    "MarkdownDocument",
    "MemoryDatastore",
    "Post",
    "PostsConnection",
    "PostsConnectionOptions",
    "RequestContext",
    "__version__",
    "org_root_key",
]
