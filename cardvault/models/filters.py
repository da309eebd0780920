"""
Collection Filter - the declarative description of which cards a collection wants.

Wire names follow the filter JSON stored on auto collections:
    {"set": "sv3", "series": ["Scarlet & Violet"], "names": ["Pikachu"],
     "name": "Charizard", "rarity": "Rare", "supertype": "Trainer", "subtypes": ["Stage 2"]}

Multi-valued fields accept a single string or a list and are normalised to tuples.
Blank strings count as "not set".
"""
import hashlib
import json
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(v.strip() for v in value if isinstance(v, str) and v.strip())


class CollectionFilter(BaseModel):
    """
    Immutable filter for a hydration run.

    Routing priority (highest first): set, series, names, name, rarity, supertype.
    Lower-priority fields still narrow results after acquisition.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    set_id: Optional[str] = Field(None, alias="set", description="Set identifier (e.g., 'sv3')")
    series: Tuple[str, ...] = Field(default=(), description="Series names (exact, case-sensitive)")
    names: Tuple[str, ...] = Field(default=(), description="Card name fragments")
    name: Optional[str] = Field(None, description="Single card name fragment")
    rarity: Tuple[str, ...] = Field(default=(), description="Rarity labels (fuzzy)")
    supertype: Optional[str] = Field(None, description="Card category (e.g., 'Pokémon', 'Trainer')")
    subtypes: Tuple[str, ...] = Field(default=(), description="Subtypes (carried, not enforced)")

    @field_validator("series", "names", "rarity", "subtypes", mode="before")
    @classmethod
    def _normalise_many(cls, value: Any) -> Tuple[str, ...]:
        return _as_tuple(value)

    @field_validator("set_id", "name", "supertype", mode="before")
    @classmethod
    def _normalise_one(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def has_routing_field(self) -> bool:
        """True when at least one field can select an acquisition strategy."""
        return bool(
            self.set_id or self.series or self.names or self.name or self.rarity or self.supertype
        )

    def fingerprint(self) -> str:
        """Stable short hash of the filter, logged with every hydration."""
        payload = json.dumps(self.model_dump(by_alias=True), sort_keys=True, ensure_ascii=False)
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:8]

    def describe(self) -> str:
        """Human readable summary (e.g., "set=sv3, rarity=Rare")."""
        parts = []
        for key, value in self.model_dump(by_alias=True).items():
            if not value:
                continue
            if isinstance(value, (tuple, list)):
                value = "|".join(value)
            parts.append(f"{key}={value}")
        return ", ".join(parts) or "<empty>"
