"""Abstract datastore collaborator.

The repository talks to storage only through this interface: point
put/get, an atomic multi-put, id allocation, and an ancestor-scoped
ordered scan.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from forumstore.content.keys import Key
from forumstore.storage.context import RequestContext

Record = dict[str, Any]


@dataclass(frozen=True)
class Query:
    """Ancestor-scoped scan over one record kind.

    ``order_field`` of ``None`` means the store's default order, which
    for every store here is write order.
    """

    kind: str
    ancestor: Key
    order_field: str | None = None
    descending: bool = False
    limit: int | None = None


class Datastore(ABC):
    """Interface every storage backend implements."""

    @abstractmethod
    def allocate_key(self, ctx: RequestContext, key: Key) -> Key:
        """Complete an incomplete key without writing anything."""

    @abstractmethod
    def put(self, ctx: RequestContext, key: Key, record: Record) -> Key:
        """Persist *record*, completing *key* if it is incomplete.

        Raises StoreError on I/O failure.
        """

    @abstractmethod
    def put_multi(self, ctx: RequestContext, items: list[tuple[Key, Record]]) -> list[Key]:
        """Persist several records atomically: all are written or none."""

    @abstractmethod
    def get(self, ctx: RequestContext, key: Key) -> Record:
        """Load the record at *key*.

        Raises EntityNotFoundError if absent, StoreError on I/O failure.
        """

    @abstractmethod
    def scan(self, ctx: RequestContext, query: Query) -> Iterator[tuple[Key, Record]]:
        """Yield ``(key, record)`` pairs matching *query*, in order."""
