"""CSV export of an enumerated post stream."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from typing import TextIO

from forumstore.content.models import Post

CSV_HEADER = ["id", "createdAt", "parentPostID", "commandType", "content"]


def post_to_row(post: Post) -> list[str]:
    return [
        post.id,
        str(post.created_at),
        post.parent_post_id,
        post.command_type,
        post.content.source,
    ]


def write_posts_csv(posts: Iterable[Post], sink: TextIO) -> int:
    """Write a header row, then one row per post as the stream yields it.

    Returns the number of post rows written.  If *posts* raises midway,
    rows already written stay in *sink*.
    """
    writer = csv.writer(sink, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    count = 0
    for post in posts:
        writer.writerow(post_to_row(post))
        count += 1
    return count
