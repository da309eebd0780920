"""
Collection Repository - resolves a hydration target (an auto collection id) to its filter.

Auto collections are stored in the `collections` collection:
    {"_id": "col-42", "type": "auto", "filters": {"set": "sv3", "rarity": "Rare"}}

Filters may also be stored as a JSON string, as older collections were.
"""
import json
from typing import Any

from pydantic import ValidationError
from pymongo.database import Database

from cardvault.models.filters import CollectionFilter

COLLECTIONS_COLLECTION = "collections"


class CollectionNotFoundError(LookupError):
    """The target id does not resolve to an auto collection with usable filters."""


class CollectionRepository:

    def __init__(self, db: Database):
        self.collections = db[COLLECTIONS_COLLECTION]

    def get_filter(self, collection_id: str) -> CollectionFilter:
        """
        Raises:
            CollectionNotFoundError: unknown id, manual collection, or no usable filters
        """
        doc = self.collections.find_one({"_id": collection_id})
        if not doc or doc.get("type") != "auto" or not doc.get("filters"):
            raise CollectionNotFoundError(
                f"Collection {collection_id} is not a valid auto collection with filters."
            )

        raw: Any = doc["filters"]
        try:
            if isinstance(raw, str):
                raw = json.loads(raw)
            return CollectionFilter.model_validate(raw)
        except (ValueError, ValidationError) as e:
            raise CollectionNotFoundError(
                f"Collection {collection_id} has unreadable filters: {e}"
            ) from e
