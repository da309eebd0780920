"""
In-memory collaborators for hydration tests.

FakeCatalogClient answers from a dict of sets and cards and records every call.
CountingRecordStore is the real MongoRecordStore over mongomock, with call
counters and failure injection on top.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import mongomock
from pymongo.errors import PyMongoError

from cardvault.catalog.client import CatalogClient, CatalogNotFound
from cardvault.models.catalog import CardBrief, CardDetail, SetDetail
from cardvault.models.records import StoredCard, StoredSet, create_stored_card
from cardvault.store.gateway import MongoRecordStore


# ============================================================================
# BUILDERS
# ============================================================================

def make_card(
    card_id: str,
    name: str = "Pikachu",
    rarity: Optional[str] = "Common",
    category: str = "Pokémon",
    set_name: Optional[str] = None,
    **fields: Any,
) -> CardDetail:
    set_id, _, local_id = card_id.rpartition("-")
    payload = {
        "id": card_id,
        "localId": local_id,
        "name": name,
        "rarity": rarity,
        "category": category,
        "image": f"https://assets.tcgdex.net/en/sv/{set_id}/{local_id}",
        "set": {
            "id": set_id,
            "name": set_name or f"Set {set_id}",
            "symbol": f"https://assets.tcgdex.net/univ/sv/{set_id}/symbol",
            "cardCount": {"total": 230, "official": 197},
        },
    }
    payload.update(fields)
    return CardDetail.model_validate(payload)


def make_set(
    set_id: str,
    cards: Sequence[CardDetail] = (),
    series: Optional[str] = "Scarlet & Violet",
    name: Optional[str] = None,
) -> SetDetail:
    return SetDetail.model_validate({
        "id": set_id,
        "name": name or f"Set {set_id}",
        "serie": {"id": "sv", "name": series} if series else None,
        "cardCount": {"total": len(cards), "official": len(cards)},
        "releaseDate": "2023-08-11",
        "logo": f"https://assets.tcgdex.net/en/sv/{set_id}/logo",
        "cards": [{"id": c.id, "localId": c.local_id, "name": c.name} for c in cards],
    })


def brief(card: CardDetail) -> CardBrief:
    return CardBrief(id=card.id, local_id=card.local_id, name=card.name)


# ============================================================================
# CATALOG
# ============================================================================

class FakeCatalogClient(CatalogClient):
    """
    Catalog answering from memory.

    Attributes:
        calls: (method, argument) tuples in call order
        failures: method name -> exception raised on every call to it
        missing_sets: set ids that are listed but answer 404 on fetch_group
    """

    def __init__(self, sets: Sequence[SetDetail] = (), cards: Sequence[CardDetail] = ()):
        self.sets: Dict[str, SetDetail] = {s.id: s for s in sets}
        self.cards: Dict[str, CardDetail] = {c.id: c for c in cards}
        self.calls: List[Tuple[str, Any]] = []
        self.failures: Dict[str, Exception] = {}
        self.missing_sets: Set[str] = set()

    def _record(self, method: str, argument: Any = None) -> None:
        self.calls.append((method, argument))
        if method in self.failures:
            raise self.failures[method]

    def methods(self) -> List[str]:
        return [method for method, _ in self.calls]

    def fetch_group(self, group_id: str) -> SetDetail:
        self._record("fetch_group", group_id)
        if group_id in self.missing_sets or group_id not in self.sets:
            raise CatalogNotFound(f"TCGdex resource not found: /sets/{group_id}", status_code=404)
        return self.sets[group_id]

    def fetch_all_groups(self, include_children: bool = False) -> List[SetDetail]:
        self._record("fetch_all_groups", include_children)
        if include_children:
            return [s for s in self.sets.values() if s.id not in self.missing_sets]
        return [s.model_copy(update={"cards": []}) for s in self.sets.values()]

    def fetch_detailed(self, ids: Sequence[str], cancel=None) -> List[CardDetail]:
        ids = list(ids)
        self._record("fetch_detailed", ids)
        details = []
        for card_id in ids:
            if cancel is not None:
                cancel.raise_if_cancelled("detail fetch")
            if card_id in self.cards:
                details.append(self.cards[card_id])
        return details

    def search_by_name(self, name: str) -> List[CardBrief]:
        self._record("search_by_name", name)
        return [brief(c) for c in self.cards.values() if name.lower() in c.name.lower()]

    def search_by_attribute(self, value: str) -> List[CardBrief]:
        self._record("search_by_attribute", value)
        return [brief(c) for c in self.cards.values() if c.rarity == value]

    def search_by_category(self, value: str) -> List[CardBrief]:
        self._record("search_by_category", value)
        return [brief(c) for c in self.cards.values() if c.category == value]


# ============================================================================
# STORE
# ============================================================================

class CountingRecordStore(MongoRecordStore):
    """
    MongoRecordStore over mongomock that counts calls.

    Attributes:
        exist_calls: id chunks passed to exist_ids, in order
        group_writes: set ids passed to upsert_group, in order
        record_writes: card ids passed to upsert_record, in order
        fail_exist_calls: 1-based exist_ids call numbers that raise
        fail_records_after: raise on upsert_record once this many cards are written
    """

    def __init__(self, db=None):
        super().__init__(db if db is not None else mongomock.MongoClient()["cardvault_test"])
        self.exist_calls: List[List[str]] = []
        self.group_writes: List[str] = []
        self.record_writes: List[str] = []
        self.fail_exist_calls: Set[int] = set()
        self.fail_records_after: Optional[int] = None

    def seed(self, cards: Iterable[CardDetail]) -> None:
        """Store cards without touching the counters."""
        for card in cards:
            super().upsert_record(create_stored_card(card))

    def exist_ids(self, ids: Iterable[str]) -> Set[str]:
        ids = list(ids)
        self.exist_calls.append(ids)
        if len(self.exist_calls) in self.fail_exist_calls:
            raise PyMongoError("existence lookup failed")
        return super().exist_ids(ids)

    def upsert_group(self, stored_set: StoredSet) -> None:
        self.group_writes.append(stored_set.id)
        super().upsert_group(stored_set)

    def upsert_record(self, card: StoredCard) -> None:
        if self.fail_records_after is not None and len(self.record_writes) >= self.fail_records_after:
            raise PyMongoError("card write failed")
        self.record_writes.append(card.id)
        super().upsert_record(card)

    def card_ids(self) -> List[str]:
        return sorted(doc["_id"] for doc in self.cards.find({}, {"_id": 1}))

    def set_doc(self, set_id: str) -> Optional[Dict[str, Any]]:
        return self.sets.find_one({"_id": set_id})
