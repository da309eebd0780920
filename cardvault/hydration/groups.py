"""
Set Upsert - guarantees every stored card has a stored parent set.

Sets fetched in full during acquisition are written right away (so the set
exists even when none of its cards are fetched). Any other set referenced by
a surviving card is synthesised from the reference embedded in the card,
with the series marked UNKNOWN_SERIES. The store never lets that placeholder
overwrite a series obtained earlier from a full fetch.
"""
from typing import Dict, Mapping, Optional, Sequence

from cardvault.logging import get_logger
from cardvault.models.catalog import CardDetail, SetDetail, SetRef
from cardvault.models.records import create_stored_set, infer_stored_set
from cardvault.store.gateway import RecordStore

logger = get_logger("set-upsert")


def ensure_group_detail(detail: SetDetail, store: RecordStore) -> None:
    """Upsert a set from full metadata."""
    store.upsert_group(create_stored_set(detail))
    logger.debug(
        f"Set ensured from full metadata: {detail.id}",
        extra={"set_id": detail.id, "series": detail.series_name},
    )


def ensure_groups(
    records: Sequence[CardDetail],
    store: RecordStore,
    enriched: Optional[Mapping[str, SetDetail]] = None,
) -> int:
    """
    Ensure a stored set exists for every distinct set referenced by the records.

    Args:
        records: Cards about to be persisted
        store: Record store
        enriched: Sets already fetched in full (and written) during acquisition

    Returns:
        Number of sets written by this call
    """
    enriched = enriched or {}
    refs: Dict[str, SetRef] = {}
    for card in records:
        refs.setdefault(card.set_id, card.set_ref)

    written = 0
    for set_id, ref in refs.items():
        if set_id in enriched:
            continue
        store.upsert_group(infer_stored_set(ref))
        written += 1

    if written:
        logger.info(
            f"Synthesised {written} sets from card references",
            extra={"sets": written, "distinct_sets": len(refs)},
        )
    return written
