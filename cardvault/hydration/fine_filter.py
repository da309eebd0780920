"""
Fine Filter - exact in-memory narrowing of fetched cards.

Some strategies over-fetch (name searches are fuzzy upstream, rarity is
single-valued upstream, set/series listings carry every card), so every
detailed card is re-checked against the whole filter. Checks are conjunctive:

- names/name: case-insensitive substring, any requested name
- rarity:     case-insensitive substring of a requested label in the card's
              rarity, any label ("Rare" also matches "Ultra Rare")
- supertype:  case-insensitive equality with the card category

Series is not re-checked: the Series strategy only fetches sets of the
requested series. Subtypes are not checked: TCGdex cards carry a stage,
not subtypes.
"""
from typing import List, Sequence

from cardvault.models.catalog import CardDetail
from cardvault.models.filters import CollectionFilter


def _matches_names(card: CardDetail, names: Sequence[str]) -> bool:
    card_name = card.name.lower()
    return any(name.lower() in card_name for name in names)


def _matches_rarity(card: CardDetail, rarities: Sequence[str]) -> bool:
    card_rarity = (card.rarity or "").lower()
    return any(rarity.lower() in card_rarity for rarity in rarities)


def matches(card: CardDetail, filters: CollectionFilter) -> bool:
    """True when the card passes every check applicable to the filter."""
    if filters.names and not _matches_names(card, filters.names):
        return False
    if filters.name and not _matches_names(card, [filters.name]):
        return False
    if filters.rarity and not _matches_rarity(card, filters.rarity):
        return False
    if filters.supertype and (card.category or "").lower() != filters.supertype.lower():
        return False
    return True


def narrow(records: Sequence[CardDetail], filters: CollectionFilter) -> List[CardDetail]:
    """Keep the cards matching the filter, in acquisition order. Pure."""
    return [card for card in records if matches(card, filters)]
