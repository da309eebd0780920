"""
Strategy Selector - picks exactly one acquisition strategy for a filter.

Priority, highest first: set, series, names, name, rarity, supertype.
Precise and cheap lookups win; catalog-wide attribute scans are the last
resort. Lower-priority fields are ignored here and applied by the Fine Filter.
"""
from cardvault.hydration.errors import InvalidFilterError
from cardvault.hydration.strategies import (
    AcquisitionStrategy,
    AttributeStrategy,
    NameListStrategy,
    SeriesStrategy,
    SetStrategy,
    SingleNameStrategy,
)
from cardvault.models.filters import CollectionFilter


def select_strategy(filters: CollectionFilter) -> AcquisitionStrategy:
    """
    Raises:
        InvalidFilterError: no routing field is set
    """
    if filters.set_id:
        return SetStrategy()
    if filters.series:
        return SeriesStrategy()
    if filters.names:
        return NameListStrategy()
    if filters.name:
        return SingleNameStrategy()
    if filters.rarity:
        return AttributeStrategy("rarity")
    if filters.supertype:
        return AttributeStrategy("category")
    raise InvalidFilterError("Collection filters are not valid for sync: set, series, name, rarity or supertype required.")
