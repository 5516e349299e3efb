"""In-memory datastore with optional JSON persistence.

Holds every record in a dict keyed by encoded key.  When a directory
is given the whole store is loaded from ``STORE_FILENAME`` on init and
saved after every write.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from forumstore.content.keys import Key
from forumstore.errors import EntityNotFoundError, StoreError
from forumstore.storage.base import Datastore, Query, Record
from forumstore.storage.context import RequestContext

logger = logging.getLogger(__name__)

STORE_FILENAME = ".forumstore.json"


class _StoredEntity(BaseModel):
    key: str
    record: dict[str, Any]


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    next_id: int = 1
    entities: list[_StoredEntity] = Field(default_factory=list)


class MemoryDatastore(Datastore):
    """Dict-backed store; scans are stable and see a snapshot.

    Internal state:
    - ``_entities``: encoded key -> (Key, record), in write order
    - ``_next_id``: next numeric id handed out for incomplete keys
    """

    def __init__(self, directory: Path | None = None) -> None:
        self._path = directory / STORE_FILENAME if directory is not None else None
        self._entities: dict[str, tuple[Key, Record]] = {}
        self._next_id = 1

        if self._path is not None:
            self._load()

    # -- Key allocation ------------------------------------------------------

    def allocate_key(self, ctx: RequestContext, key: Key) -> Key:
        ctx.check()
        return self._complete(key)

    def _complete(self, key: Key) -> Key:
        if not key.incomplete:
            return key
        allocated = key.with_id(self._next_id)
        self._next_id += 1
        return allocated

    # -- Writes --------------------------------------------------------------

    def put(self, ctx: RequestContext, key: Key, record: Record) -> Key:
        return self.put_multi(ctx, [(key, record)])[0]

    def put_multi(self, ctx: RequestContext, items: list[tuple[Key, Record]]) -> list[Key]:
        ctx.check()
        snapshot = (dict(self._entities), self._next_id)

        keys: list[Key] = []
        for key, record in items:
            complete = self._complete(key)
            self._entities[complete.encode()] = (complete, copy.deepcopy(record))
            keys.append(complete)

        try:
            self._save()
        except StoreError:
            self._entities, self._next_id = snapshot
            raise

        logger.debug("Wrote %d record(s): %s", len(keys), ", ".join(str(k) for k in keys))
        return keys

    # -- Reads ---------------------------------------------------------------

    def get(self, ctx: RequestContext, key: Key) -> Record:
        ctx.check()
        entry = self._entities.get(key.encode())
        if entry is None:
            raise EntityNotFoundError(key)
        return copy.deepcopy(entry[1])

    def scan(self, ctx: RequestContext, query: Query) -> Iterator[tuple[Key, Record]]:
        ctx.check()
        rows = [
            (key, record)
            for key, record in self._entities.values()
            if key.kind == query.kind and key.has_ancestor(query.ancestor)
        ]
        if query.order_field is not None:
            field = query.order_field
            # sorted() is stable for ties in both directions; missing values sort lowest
            rows = sorted(
                rows,
                key=lambda row: (row[1].get(field) is not None, row[1].get(field)),
                reverse=query.descending,
            )
        if query.limit is not None:
            rows = rows[: query.limit]

        logger.debug("Scan %s under %s matched %d row(s)", query.kind, query.ancestor, len(rows))
        for key, record in rows:
            ctx.check()
            yield key, copy.deepcopy(record)

    def __len__(self) -> int:
        return len(self._entities)

    # -- Persistence ---------------------------------------------------------

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            data = _StoreData.model_validate(raw)
            entities = {e.key: (Key.decode(e.key), e.record) for e in data.entities}
        except (json.JSONDecodeError, ValueError, KeyError):
            logger.warning("Corrupt forum store at %s, starting fresh", self._path)
            return

        self._entities = entities
        self._next_id = data.next_id

    def _save(self) -> None:
        if self._path is None:
            return
        data = _StoreData(
            next_id=self._next_id,
            entities=[
                _StoredEntity(key=encoded, record=record)
                for encoded, (_, record) in self._entities.items()
            ],
        )
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Failed to save forum store at {self._path}: {exc}") from exc
