"""Storage collaborators for the content repository."""

from forumstore.storage.base import Datastore, Query, Record
from forumstore.storage.context import RequestContext
from forumstore.storage.memory import STORE_FILENAME, MemoryDatastore

__all__ = [
    "Datastore",
    "MemoryDatastore",
    "Query",
    "Record",
    "RequestContext",
    "STORE_FILENAME",
]
