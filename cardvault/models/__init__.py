"""
CardVault Core Models

Exports for the collection filter, catalog payloads, stored records and progress events.
"""

# Collection filter
from cardvault.models.filters import CollectionFilter

# Catalog payloads (ephemeral, as returned by TCGdex)
from cardvault.models.catalog import (
    CardBrief,
    CardCount,
    CardDetail,
    SerieRef,
    SetDetail,
    SetRef,
)

# Stored records (persisted documents)
from cardvault.models.records import (
    UNKNOWN_SERIES,
    UNKNOWN_SET_NAME,
    CardImages,
    SetImages,
    StoredCard,
    StoredSet,
    # Factory functions
    create_stored_card,
    create_stored_set,
    infer_stored_set,
)

# Progress events
from cardvault.models.events import (
    ErrorKind,
    EventStatus,
    HydrationState,
    ProgressEvent,
)

__all__ = [
    "CollectionFilter",
    "CardBrief",
    "CardCount",
    "CardDetail",
    "SerieRef",
    "SetDetail",
    "SetRef",
    "UNKNOWN_SERIES",
    "UNKNOWN_SET_NAME",
    "CardImages",
    "SetImages",
    "StoredCard",
    "StoredSet",
    "create_stored_card",
    "create_stored_set",
    "infer_stored_set",
    "ErrorKind",
    "EventStatus",
    "HydrationState",
    "ProgressEvent",
]
