"""Export adapters driven by the posts connection's lazy stream."""

from forumstore.export.csv_export import CSV_HEADER, post_to_row, write_posts_csv
from forumstore.export.feed import (
    ChannelURLMaker,
    Feed,
    FeedItem,
    FeedLink,
    FeedURLMaker,
    build_feed,
)

__all__ = [
    "CSV_HEADER",
    "ChannelURLMaker",
    "Feed",
    "FeedItem",
    "FeedLink",
    "FeedURLMaker",
    "build_feed",
    "post_to_row",
    "write_posts_csv",
]
