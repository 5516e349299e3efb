"""Hierarchical record keys.

A key is ``(kind, name | id, parent)``.  Every key in the forum hangs
off an organization root, so a key's parent chain doubles as its
implicit foreign keys: a post's chain is ``Org -> ChannelContent ->
Post``.  Keys without a name or id are *incomplete*; the store
completes them on first write.
"""

from __future__ import annotations

import base64
import json

from pydantic import BaseModel, ConfigDict

ORG_KIND = "Org"
CHANNEL_SLUG_KIND = "ChannelSlug"
CHANNEL_CONTENT_KIND = "ChannelContent"
POST_KIND = "Post"


class Key(BaseModel):
    """Immutable hierarchical key."""

    model_config = ConfigDict(frozen=True)

    kind: str
    name: str = ""
    id: int = 0
    parent: Key | None = None

    @property
    def incomplete(self) -> bool:
        return not self.name and not self.id

    @property
    def chain(self) -> tuple[Key, ...]:
        """Parent chain, root first, ending with this key."""
        keys: list[Key] = []
        current: Key | None = self
        while current is not None:
            keys.append(current)
            current = current.parent
        return tuple(reversed(keys))

    def has_ancestor(self, ancestor: Key) -> bool:
        """True if *ancestor* is in this key's chain (including itself)."""
        return ancestor in self.chain

    def with_id(self, new_id: int) -> Key:
        return self.model_copy(update={"id": new_id, "name": ""})

    def encode(self) -> str:
        """Opaque URL-safe string form of the key."""
        path = [[k.kind, k.name or k.id] for k in self.chain]
        raw = json.dumps(path, separators=(",", ":")).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    @classmethod
    def decode(cls, encoded: str) -> Key:
        """Inverse of :meth:`encode`.

        Raises ValueError if *encoded* is not a key produced by encode().
        """
        padded = encoded + "=" * (-len(encoded) % 4)
        try:
            path = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        except (ValueError, UnicodeError) as exc:
            raise ValueError(f"Malformed key: {encoded!r}") from exc
        if not isinstance(path, list) or not path:
            raise ValueError(f"Malformed key: {encoded!r}")

        key: Key | None = None
        for element in path:
            if not isinstance(element, list) or len(element) != 2:
                raise ValueError(f"Malformed key: {encoded!r}")
            kind, ident = element
            if isinstance(ident, bool) or not isinstance(kind, str):
                raise ValueError(f"Malformed key: {encoded!r}")
            if isinstance(ident, int):
                key = cls(kind=kind, id=ident, parent=key)
            elif isinstance(ident, str):
                key = cls(kind=kind, name=ident, parent=key)
            else:
                raise ValueError(f"Malformed key: {encoded!r}")
        if key is None:
            raise ValueError(f"Malformed key: {encoded!r}")
        return key

    def __str__(self) -> str:
        return "/".join(f"{k.kind}:{k.name or k.id}" for k in self.chain)


def org_root_key(org_slug: str) -> Key:
    """Root anchor for every key belonging to an organization."""
    return Key(kind=ORG_KIND, name=org_slug)


def incomplete_key(kind: str, parent: Key | None = None) -> Key:
    return Key(kind=kind, parent=parent)
