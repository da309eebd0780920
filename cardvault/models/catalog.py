"""
Catalog Payload Models - cards and sets as returned by the TCGdex API.

These are ephemeral: they live in memory during a hydration run and are
converted to stored records (see records.py) before persisting.
Field aliases match the TCGdex JSON (camelCase); unknown fields are ignored.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CatalogModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )


class CardCount(CatalogModel):
    total: int = 0
    official: int = 0


class SerieRef(CatalogModel):
    id: str = ""
    name: str


class CardBrief(CatalogModel):
    """Lightweight card reference from a listing call. Never persisted."""
    id: str
    local_id: Optional[str] = Field(None, alias="localId")
    name: str = ""
    image: Optional[str] = None


class SetRef(CatalogModel):
    """Set reference embedded in a detailed card."""
    id: str
    name: str = ""
    logo: Optional[str] = None
    symbol: Optional[str] = None
    card_count: Optional[CardCount] = Field(None, alias="cardCount")


class SetDetail(CatalogModel):
    """
    Full set metadata, optionally with its brief card listing embedded.

    The series is only present when the catalog returned it (set detail
    endpoint) or when the client enriched a listing with series data.
    """
    id: str
    name: str
    serie: Optional[SerieRef] = None
    card_count: CardCount = Field(default_factory=CardCount, alias="cardCount")
    release_date: Optional[str] = Field(None, alias="releaseDate")
    symbol: Optional[str] = None
    logo: Optional[str] = None
    cards: List[CardBrief] = Field(default_factory=list)

    @property
    def series_name(self) -> Optional[str]:
        return self.serie.name if self.serie and self.serie.name else None


class CardDetail(CatalogModel):
    """Fully detailed card, ready to be transformed and persisted."""
    id: str
    local_id: str = Field("", alias="localId")
    name: str
    image: Optional[str] = None
    category: str = "Pokémon"
    illustrator: Optional[str] = None
    rarity: Optional[str] = None
    hp: Optional[int] = None
    types: List[str] = Field(default_factory=list)
    evolve_from: Optional[str] = Field(None, alias="evolveFrom")
    stage: Optional[str] = None
    abilities: List[Dict[str, Any]] = Field(default_factory=list)
    attacks: List[Dict[str, Any]] = Field(default_factory=list)
    weaknesses: List[Dict[str, Any]] = Field(default_factory=list)
    resistances: List[Dict[str, Any]] = Field(default_factory=list)
    retreat: Optional[int] = None
    set_ref: SetRef = Field(..., alias="set")
    pricing: Optional[Dict[str, Any]] = None

    @property
    def set_id(self) -> str:
        return self.set_ref.id
