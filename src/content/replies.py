"""Two-level reply grouping over a time-descending post window.

A single scan ordered newest-first interleaves root posts and replies,
and a reply can come before or after its parent.  Grouping therefore
needs the whole window: one forward pass partitions posts into roots
and per-parent reply groups, then a finalize pass reverses each group
so replies read oldest-first beneath their parent.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from forumstore.content.models import Post


@dataclass
class ReplyGrouping:
    """Roots with ``replies`` attached, plus replies with no root in the window."""

    roots: list[Post] = field(default_factory=list)
    dropped: list[Post] = field(default_factory=list)


def group_replies(posts: Iterable[Post]) -> ReplyGrouping:
    """Partition *posts* (newest first) into roots with attached replies.

    Roots keep their input order.  Each root is returned as a copy with
    ``replies`` set to the posts whose ``parent_post_key`` is that
    root's key, in ascending input-reversed order (oldest first for a
    newest-first input).  A reply whose parent is not a root in *posts*
    (because the parent fell outside the window, or is itself a reply)
    ends up in ``dropped``.  The input posts are not modified.
    """
    roots: list[Post] = []
    groups: dict[str, list[Post]] = defaultdict(list)

    for post in posts:
        if post.parent_post_key is not None:
            groups[post.parent_post_key.encode()].append(post)
        else:
            roots.append(post)

    grouped: list[Post] = []
    for root in roots:
        group = groups.pop(root.id, [])
        group.reverse()
        grouped.append(root.model_copy(update={"replies": group}))

    dropped = [reply for group in groups.values() for reply in group]
    return ReplyGrouping(roots=grouped, dropped=dropped)
