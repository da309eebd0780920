"""
Dedup Filter - drops candidate cards that are already in the store.

Existence checks run in fixed-size chunks so no single `$in` query grows
unbounded. A failed chunk is logged and its ids are treated as "not stored", so the
worst case is a redundant re-fetch.
"""
from typing import List, Optional, Sequence

from cardvault.config import config
from cardvault.hydration.cancellation import CancellationToken
from cardvault.logging import get_logger
from cardvault.models.catalog import CardBrief
from cardvault.store.gateway import RecordStore

logger = get_logger("dedup-filter")


class DedupFilter:
    """
    Partitions briefs into "already stored" and "needed".

    Attributes:
        degraded_batches: Chunks whose lookup failed, across every call on this filter
        lookups: Existence calls issued, across every call on this filter
    """

    def __init__(
        self,
        store: RecordStore,
        batch_size: Optional[int] = None,
        cancel: Optional[CancellationToken] = None,
        correlation_id: Optional[str] = None,
    ):
        self.store = store
        self.batch_size = batch_size or config.DEDUP_BATCH_SIZE
        if self.batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.cancel = cancel
        self.correlation_id = correlation_id
        self.degraded_batches = 0
        self.lookups = 0

    def partition_needed(self, briefs: Sequence[CardBrief]) -> List[CardBrief]:
        """
        Return the briefs whose ids are not in the store, in input order.

        Makes no store call for an empty input.
        """
        if not briefs:
            return []

        ids = list(dict.fromkeys(brief.id for brief in briefs))
        stored: set = set()

        for start in range(0, len(ids), self.batch_size):
            if self.cancel is not None:
                self.cancel.raise_if_cancelled("dedup")
            chunk = ids[start:start + self.batch_size]
            self.lookups += 1
            try:
                stored |= self.store.exist_ids(chunk)
            except Exception:
                self.degraded_batches += 1
                logger.warning(
                    f"Existence check failed for chunk {start // self.batch_size + 1}, treating {len(chunk)} cards as needed",
                    exc_info=True,
                    extra={"chunk": start // self.batch_size + 1, "chunk_size": len(chunk), "correlation_id": self.correlation_id},
                )

        needed = [brief for brief in briefs if brief.id not in stored]
        logger.info(
            f"Dedup: {len(needed)} needed, {len(briefs) - len(needed)} already stored",
            extra={
                "candidates": len(briefs),
                "needed": len(needed),
                "lookups": self.lookups,
                "degraded_batches": self.degraded_batches,
                "correlation_id": self.correlation_id,
            },
        )
        return needed
