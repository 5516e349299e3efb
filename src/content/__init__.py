"""Content domain - keys, records, the channels repository and reply grouping.

``PostsConnection`` lives in ``forumstore.content.connection`` and is
not re-exported here because it depends on the export adapters.
"""

from forumstore.content.keys import (
    CHANNEL_CONTENT_KIND,
    CHANNEL_SLUG_KIND,
    ORG_KIND,
    POST_KIND,
    Key,
    incomplete_key,
    org_root_key,
)
from forumstore.content.models import ChannelContent, ChannelSlug, MarkdownDocument, Post
from forumstore.content.replies import ReplyGrouping, group_replies
from forumstore.content.repository import ChannelsRepo, validate_slug

__all__ = [
    "CHANNEL_CONTENT_KIND",
    "CHANNEL_SLUG_KIND",
    "ChannelContent",
    "ChannelSlug",
    "ChannelsRepo",
    "Key",
    "MarkdownDocument",
    "ORG_KIND",
    "POST_KIND",
    "Post",
    "ReplyGrouping",
    "group_replies",
    "incomplete_key",
    "org_root_key",
    "validate_slug",
]
