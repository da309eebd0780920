"""
Acquisition Strategies - the five ways a hydration run gathers candidate cards.

Each strategy is a function of (filter, catalog, store) that returns an
Acquisition: the detailed cards it fetched plus the sets it obtained in full.
Progress goes through the context's reporter; nothing else is shared.

Every strategy follows the same shape:
    brief listing(s) from the catalog -> DedupFilter -> fetch_detailed(needed ids)

Design Patterns:
    - Strategy Pattern: one class per acquisition path, same acquire() contract
    - Accumulator: multi-set and multi-name strategies fold into one Acquisition
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Sequence

from cardvault.catalog.client import CatalogClient, CatalogNotFound
from cardvault.config import config
from cardvault.hydration.cancellation import CancellationToken
from cardvault.hydration.dedup import DedupFilter
from cardvault.hydration.groups import ensure_group_detail
from cardvault.hydration.progress import ProgressReporter
from cardvault.logging import get_logger
from cardvault.models.catalog import CardBrief, CardDetail, SetDetail
from cardvault.models.filters import CollectionFilter
from cardvault.store.gateway import RecordStore

logger = get_logger("acquisition")


# ============================================================================
# SHARED TYPES
# ============================================================================

@dataclass
class Acquisition:
    """
    Accumulated result of a strategy.

    Attributes:
        records: Detailed cards, in fetch order
        groups: Sets fetched in full (already upserted), by id
        candidates: Brief candidates seen before dedup
        needed: Candidates not already stored
    """
    records: List[CardDetail] = field(default_factory=list)
    groups: Dict[str, SetDetail] = field(default_factory=dict)
    candidates: int = 0
    needed: int = 0

    def absorb(self, other: "Acquisition") -> "Acquisition":
        self.records.extend(other.records)
        self.groups.update(other.groups)
        self.candidates += other.candidates
        self.needed += other.needed
        return self


@dataclass
class AcquisitionContext:
    """Collaborators handed to a strategy for one run."""
    catalog: CatalogClient
    store: RecordStore
    reporter: ProgressReporter
    dedup: DedupFilter
    cancel: Optional[CancellationToken] = None
    name_progress_interval: int = config.NAME_PROGRESS_INTERVAL
    correlation_id: Optional[str] = None

    def checkpoint(self, where: str) -> None:
        if self.cancel is not None:
            self.cancel.raise_if_cancelled(where)


def fetch_needed(briefs: Sequence[CardBrief], ctx: AcquisitionContext) -> Acquisition:
    """Dedup the briefs against the store and fetch detail for the rest."""
    needed = ctx.dedup.partition_needed(briefs)
    result = Acquisition(candidates=len(briefs), needed=len(needed))
    if needed:
        ctx.checkpoint("detail fetch")
        result.records = ctx.catalog.fetch_detailed([brief.id for brief in needed], cancel=ctx.cancel)
    return result


def acquire_group(detail: SetDetail, ctx: AcquisitionContext) -> Acquisition:
    """Upsert a fully fetched set, then fetch the cards of it not yet stored."""
    ensure_group_detail(detail, ctx.store)
    result = fetch_needed(detail.cards, ctx)
    result.groups[detail.id] = detail
    return result


def _dedupe_briefs(briefs: Sequence[CardBrief]) -> List[CardBrief]:
    """Collapse briefs by id; the last one seen wins, first position is kept."""
    by_id: Dict[str, CardBrief] = {}
    for brief in briefs:
        by_id[brief.id] = brief
    return list(by_id.values())


# ============================================================================
# STRATEGIES
# ============================================================================

class AcquisitionStrategy(ABC):
    """Common contract for all acquisition paths."""

    name: str = "abstract"

    @abstractmethod
    def acquire(self, filters: CollectionFilter, ctx: AcquisitionContext) -> Acquisition:
        """Gather detailed candidate cards for the filter."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SetStrategy(AcquisitionStrategy):
    """One set: the cheapest and most precise path."""

    name = "set"

    def acquire(self, filters: CollectionFilter, ctx: AcquisitionContext) -> Acquisition:
        ctx.reporter.progress(f"Connecting to TCGdex for set {filters.set_id}...", 0, 0)
        ctx.checkpoint("set fetch")
        detail = ctx.catalog.fetch_group(filters.set_id)
        return acquire_group(detail, ctx)


class SeriesStrategy(AcquisitionStrategy):
    """Every set whose series name is one of the requested ones (exact, case-sensitive)."""

    name = "series"

    def acquire(self, filters: CollectionFilter, ctx: AcquisitionContext) -> Acquisition:
        wanted = set(filters.series)
        ctx.reporter.progress(f"Looking up sets in series {', '.join(filters.series)}...", 0, 0)
        ctx.checkpoint("set listing")
        matching = [
            group for group in ctx.catalog.fetch_all_groups(include_children=False)
            if group.series_name in wanted
        ]
        total = len(matching)
        logger.info(
            f"{total} sets match series filter",
            extra={"series": list(filters.series), "sets": total, "correlation_id": ctx.correlation_id},
        )

        acquisition = Acquisition()
        for index, group in enumerate(matching, start=1):
            ctx.reporter.progress(f"Processing set {index}/{total}: {group.name}", index, total)
            ctx.checkpoint("set fetch")
            try:
                detail = ctx.catalog.fetch_group(group.id)
            except CatalogNotFound:
                # Future sets are listed before their data exists
                logger.warning(
                    f"Set {group.id} listed but not found, skipping",
                    extra={"set_id": group.id, "correlation_id": ctx.correlation_id},
                )
                continue
            if detail.serie is None and group.serie is not None:
                detail = detail.model_copy(update={"serie": group.serie})
            acquisition.absorb(acquire_group(detail, ctx))
        return acquisition


class NameListStrategy(AcquisitionStrategy):
    """One name search per requested name, merged by card id."""

    name = "names"

    def acquire(self, filters: CollectionFilter, ctx: AcquisitionContext) -> Acquisition:
        return self._acquire_names(list(filters.names), ctx, report_every=ctx.name_progress_interval)

    @staticmethod
    def _acquire_names(names: List[str], ctx: AcquisitionContext, report_every: int = 0) -> Acquisition:
        total = len(names)
        briefs: List[CardBrief] = []
        for index, name in enumerate(names, start=1):
            ctx.checkpoint("name search")
            briefs.extend(ctx.catalog.search_by_name(name))
            if report_every and index % report_every == 0:
                ctx.reporter.progress(f"Searched {index}/{total} names...", index, total)

        unique = _dedupe_briefs(briefs)
        logger.info(
            f"Name search found {len(unique)} distinct candidates",
            extra={"names": total, "briefs": len(briefs), "correlation_id": ctx.correlation_id},
        )
        return fetch_needed(unique, ctx)


class SingleNameStrategy(NameListStrategy):
    """Exactly one name search, no interim progress."""

    name = "name"

    def acquire(self, filters: CollectionFilter, ctx: AcquisitionContext) -> Acquisition:
        ctx.reporter.progress(f"Searching cards named {filters.name}...", 0, 0)
        return self._acquire_names([filters.name], ctx)


class AttributeStrategy(AcquisitionStrategy):
    """
    Server-side rarity or category listing: the most expensive path.

    The upstream rarity filter is single-valued, so only the first requested
    rarity is sent; the Fine Filter enforces the rest.
    """

    def __init__(self, dimension: Literal["rarity", "category"]):
        if dimension not in ("rarity", "category"):
            raise ValueError(f"Unsupported attribute dimension: {dimension}")
        self.dimension = dimension
        self.name = dimension

    def acquire(self, filters: CollectionFilter, ctx: AcquisitionContext) -> Acquisition:
        ctx.checkpoint("attribute search")
        if self.dimension == "rarity":
            value = filters.rarity[0]
            ctx.reporter.progress(f"Searching cards with rarity {value}...", 0, 0)
            briefs = ctx.catalog.search_by_attribute(value)
        else:
            value = filters.supertype
            ctx.reporter.progress(f"Searching cards of type {value}...", 0, 0)
            briefs = ctx.catalog.search_by_category(value)
        return fetch_needed(_dedupe_briefs(briefs), ctx)

    def __repr__(self) -> str:
        return f"AttributeStrategy({self.dimension!r})"
