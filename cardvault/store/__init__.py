"""
Local store access: the record gateway and the collection filter repository.
"""
from cardvault.store.gateway import MongoRecordStore, RecordStore
from cardvault.store.collections import CollectionNotFoundError, CollectionRepository

__all__ = [
    "RecordStore",
    "MongoRecordStore",
    "CollectionRepository",
    "CollectionNotFoundError",
]
