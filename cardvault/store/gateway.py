"""
Record Store Gateway - the only operations the hydration engine needs from the store.

The engine reads (existence) and writes (upsert); it never deletes.
MongoRecordStore keeps cards in `cards` and sets in `sets`, keyed by TCGdex ids.
"""
from abc import ABC, abstractmethod
from typing import Iterable, Set

from pymongo import ASCENDING
from pymongo.database import Database

from cardvault.logging import get_logger
from cardvault.models.records import StoredCard, StoredSet

logger = get_logger("record-store")

CARDS_COLLECTION = "cards"
SETS_COLLECTION = "sets"


class RecordStore(ABC):
    """Store contract consumed by the hydration engine."""

    @abstractmethod
    def exist_ids(self, ids: Iterable[str]) -> Set[str]:
        """Return the subset of card ids already stored."""

    @abstractmethod
    def upsert_group(self, stored_set: StoredSet) -> None:
        """Create or refresh a set without downgrading known metadata."""

    @abstractmethod
    def upsert_record(self, card: StoredCard) -> None:
        """Create or replace a card."""


class MongoRecordStore(RecordStore):
    """
    MongoDB implementation.

    Example:
        store = MongoRecordStore(get_db())
        store.ensure_indexes()
        store.upsert_record(create_stored_card(card))
    """

    def __init__(self, db: Database):
        self.db = db
        self.cards = db[CARDS_COLLECTION]
        self.sets = db[SETS_COLLECTION]

    def ensure_indexes(self) -> None:
        self.cards.create_index([("set_id", ASCENDING)], name="set_id_idx")
        logger.debug("Record store indexes ensured")

    def exist_ids(self, ids: Iterable[str]) -> Set[str]:
        ids = list(ids)
        if not ids:
            return set()
        cursor = self.cards.find({"_id": {"$in": ids}}, {"_id": 1})
        return {doc["_id"] for doc in cursor}

    def upsert_group(self, stored_set: StoredSet) -> None:
        self.sets.update_one({"_id": stored_set.id}, stored_set.upsert_operations(), upsert=True)
        logger.debug(
            f"Upserted set: {stored_set.id}",
            extra={"set_id": stored_set.id, "enriched": stored_set.enriched},
        )

    def upsert_record(self, card: StoredCard) -> None:
        document = card.to_document()
        document.pop("_id")
        self.cards.update_one({"_id": card.id}, {"$set": document}, upsert=True)
        logger.debug(f"Upserted card: {card.id}", extra={"card_id": card.id})
