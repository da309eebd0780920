"""
Stored Record Schema - the canonical card and set documents kept in the local store.

Collections:
- cards: one document per catalog card, keyed by the TCGdex card id
- sets:  one document per catalog set, keyed by the TCGdex set id

Every stored card's set_id must resolve to a stored set. When the engine only
knows a set through the reference embedded in a card, the set is created with
placeholder metadata (series = UNKNOWN_SERIES, enriched = False). A later rich
fetch fills those fields in; a placeholder never overwrites a real value.

Usage:
    stored = create_stored_card(card_detail)
    collection.update_one({"_id": stored.id}, {"$set": stored.to_document()}, upsert=True)

    stored_set = infer_stored_set(card_detail.set_ref)
    collection.update_one({"_id": stored_set.id}, stored_set.upsert_operations(), upsert=True)
"""
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from cardvault.models.catalog import CardDetail, SetDetail, SetRef


# Explicit marker for "not yet enriched", distinct from a legitimately empty value
UNKNOWN_SERIES = "Unknown"
UNKNOWN_SET_NAME = "Unknown Set"

DEFAULT_SUPERTYPE = "Pokémon"
DEFAULT_SUBTYPE = "Basic"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# CARDS
# ============================================================================

class CardImages(BaseModel):
    small: Optional[str] = None
    large: Optional[str] = None


class StoredCard(BaseModel):
    """
    Canonical card document.

    Create-or-replace semantics: every upsert overwrites all fields and
    refreshes synced_at.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="TCGdex card id (e.g., 'sv3-125')")
    set_id: str = Field(..., description="Parent set id (e.g., 'sv3')")
    name: str
    supertype: str = Field(DEFAULT_SUPERTYPE, description="Card category ('Pokémon', 'Trainer', 'Energy')")
    subtypes: List[str] = Field(default_factory=list)
    hp: Optional[str] = None
    types: List[str] = Field(default_factory=list)
    evolves_from: Optional[str] = None
    number: str = Field(..., description="Number within the set (TCGdex localId)")
    artist: Optional[str] = None
    rarity: Optional[str] = None
    images: CardImages = Field(default_factory=CardImages)
    tcgplayer_prices: Dict[str, Any] = Field(default_factory=dict)
    cardmarket_prices: Dict[str, Any] = Field(default_factory=dict)
    attacks: Optional[List[Dict[str, Any]]] = None
    abilities: Optional[List[Dict[str, Any]]] = None
    weaknesses: Optional[List[Dict[str, Any]]] = None
    retreat_cost: Optional[List[str]] = None
    is_partial: bool = False
    synced_at: datetime = Field(default_factory=_utcnow)

    def to_document(self) -> Dict[str, Any]:
        """Serialize for MongoDB (uses "_id")."""
        return self.model_dump(by_alias=True)


def create_stored_card(card: CardDetail, synced_at: Optional[datetime] = None) -> StoredCard:
    """
    Factory function: transform a detailed catalog card into its stored form.
    """
    pricing = card.pricing or {}
    return StoredCard(
        _id=card.id,
        set_id=card.set_id,
        name=card.name,
        supertype=card.category or DEFAULT_SUPERTYPE,
        subtypes=[card.stage or DEFAULT_SUBTYPE],
        hp=str(card.hp) if card.hp else None,
        types=list(card.types),
        evolves_from=card.evolve_from,
        number=card.local_id,
        artist=card.illustrator,
        rarity=card.rarity,
        images=CardImages(
            small=f"{card.image}/low.webp" if card.image else None,
            large=f"{card.image}/high.webp" if card.image else None,
        ),
        tcgplayer_prices=pricing.get("tcgplayer") or {},
        cardmarket_prices=pricing.get("cardmarket") or {},
        attacks=card.attacks or None,
        abilities=card.abilities or None,
        weaknesses=card.weaknesses or None,
        # TCGdex gives a count; the store keeps the energy cost list
        retreat_cost=["Colorless"] * card.retreat if card.retreat else None,
        synced_at=synced_at or _utcnow(),
    )


# ============================================================================
# SETS
# ============================================================================

class SetImages(BaseModel):
    symbol: Optional[str] = None
    logo: Optional[str] = None


class StoredSet(BaseModel):
    """
    Canonical set document.

    Display fields (name, images, synced_at) are refreshed on every upsert
    when known. Authoritative fields (series, totals, release date) are only
    refreshed from an enriched set. Placeholder and missing values are set on
    insert only, so they never replace a stored value. Images are written per
    key ("images.logo") for the same reason.
    """
    model_config = ConfigDict(populate_by_name=True)

    DISPLAY_FIELDS: ClassVar[Tuple[str, ...]] = ("name", "images", "synced_at")

    id: str = Field(..., alias="_id", description="TCGdex set id (e.g., 'sv3')")
    name: str
    series: str = Field(UNKNOWN_SERIES, description="Series name, or UNKNOWN_SERIES placeholder")
    printed_total: Optional[int] = None
    total: Optional[int] = None
    release_date: Optional[str] = None
    images: SetImages = Field(default_factory=SetImages)
    enriched: bool = Field(False, description="True when built from full set metadata")
    synced_at: datetime = Field(default_factory=_utcnow)

    def upsert_operations(self) -> Dict[str, Dict[str, Any]]:
        """
        Build the MongoDB update document.

        Returns:
            {"$set": {...}, "$setOnInsert": {...}} with disjoint paths
        """
        document = self.model_dump(by_alias=True, exclude={"id"})
        images = document.pop("images")
        for key, url in images.items():
            document[f"images.{key}"] = url

        refresh: Dict[str, Any] = {}
        insert_only: Dict[str, Any] = {}
        for key, value in document.items():
            is_display = key.split(".")[0] in self.DISPLAY_FIELDS
            if (is_display or self.enriched) and not self._is_placeholder(key, value):
                refresh[key] = value
            else:
                insert_only[key] = value

        operations = {"$set": refresh}
        if insert_only:
            operations["$setOnInsert"] = insert_only
        return operations

    @staticmethod
    def _is_placeholder(key: str, value: Any) -> bool:
        if key == "series":
            return value == UNKNOWN_SERIES
        if key == "name":
            return value == UNKNOWN_SET_NAME
        return value is None


def _set_images(symbol: Optional[str], logo: Optional[str]) -> SetImages:
    return SetImages(
        symbol=f"{symbol}.webp" if symbol else None,
        logo=f"{logo}.webp" if logo else None,
    )


def create_stored_set(detail: SetDetail, synced_at: Optional[datetime] = None) -> StoredSet:
    """
    Factory function: stored set from full set metadata.
    """
    return StoredSet(
        _id=detail.id,
        name=detail.name,
        series=detail.series_name or UNKNOWN_SERIES,
        printed_total=detail.card_count.official,
        total=detail.card_count.total,
        release_date=detail.release_date,
        images=_set_images(detail.symbol, detail.logo),
        enriched=True,
        synced_at=synced_at or _utcnow(),
    )


def infer_stored_set(ref: SetRef, synced_at: Optional[datetime] = None) -> StoredSet:
    """
    Factory function: minimal stored set synthesised from a card's embedded set reference.
    """
    card_count = ref.card_count
    return StoredSet(
        _id=ref.id,
        name=ref.name or UNKNOWN_SET_NAME,
        series=UNKNOWN_SERIES,
        printed_total=card_count.official if card_count else 0,
        total=card_count.total if card_count else 0,
        images=_set_images(ref.symbol, ref.logo),
        enriched=False,
        synced_at=synced_at or _utcnow(),
    )
