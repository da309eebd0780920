"""
Hydration Engine - fills the local store with the catalog cards a filter asks for.

Pipeline (strictly sequential, one run per invocation):

    select_strategy -> strategy.acquire (listing, dedup, detail fetch)
        -> narrow (fine filter) -> ensure_groups -> upsert cards

Every run closes with exactly one terminal event: "complete" (possibly with
zero cards) or "error". Failures are never raised to the caller; they become
that terminal event. A failed or cancelled run keeps whatever it already
wrote and can simply be re-run: stored cards are skipped by the Dedup Filter.

Concurrent runs are not coordinated; two runs for the same filter may fetch
the same cards twice, but upserts are idempotent so the final store is the same.

Example:
    engine = HydrationEngine(TCGdexClient(), get_record_store())
    for event in engine.stream(CollectionFilter(set="sv3", rarity="Rare")):
        print(event.message)
"""
import queue
import threading
import uuid
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from pymongo.errors import PyMongoError

from cardvault.catalog.client import CatalogClient, UpstreamFailure
from cardvault.config import config
from cardvault.hydration.cancellation import CancellationToken
from cardvault.hydration.dedup import DedupFilter
from cardvault.hydration.errors import HydrationError
from cardvault.hydration.fine_filter import narrow
from cardvault.hydration.groups import ensure_groups
from cardvault.hydration.progress import EventSink, ProgressReporter
from cardvault.hydration.selector import select_strategy
from cardvault.hydration.strategies import AcquisitionContext
from cardvault.logging import get_logger, log_execution_time
from cardvault.models.events import ErrorKind, HydrationState, ProgressEvent
from cardvault.models.filters import CollectionFilter
from cardvault.models.records import create_stored_card
from cardvault.store.collections import CollectionNotFoundError, CollectionRepository
from cardvault.store.gateway import RecordStore

logger = get_logger("hydration-engine")


@dataclass
class HydrationResult:
    """Summary of one run, mirroring its terminal event."""
    correlation_id: str
    strategy: Optional[str] = None
    candidates: int = 0
    needed: int = 0
    fetched: int = 0
    total_matched: int = 0
    processed_count: int = 0
    sets_written: int = 0
    degraded_batches: int = 0
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.error_kind is None


class HydrationEngine:
    """
    Args:
        catalog: Upstream catalog client
        store: Local record store
        dedup_batch_size: Ids per existence check
        record_progress_interval: Emit a progress event every N persisted cards
        name_progress_interval: Emit a progress event every N searched names
    """

    def __init__(
        self,
        catalog: CatalogClient,
        store: RecordStore,
        dedup_batch_size: Optional[int] = None,
        record_progress_interval: Optional[int] = None,
        name_progress_interval: Optional[int] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.dedup_batch_size = dedup_batch_size or config.DEDUP_BATCH_SIZE
        self.record_progress_interval = record_progress_interval or config.RECORD_PROGRESS_INTERVAL
        self.name_progress_interval = name_progress_interval or config.NAME_PROGRESS_INTERVAL

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(
        self,
        filters: CollectionFilter,
        on_event: Optional[EventSink] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> HydrationResult:
        """Hydrate for a filter, delivering events to on_event as they happen."""
        return self._run(lambda: filters, on_event, cancel, target=filters.describe())

    def run_collection(
        self,
        collection_id: str,
        collections: CollectionRepository,
        on_event: Optional[EventSink] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> HydrationResult:
        """Hydrate for an auto collection, resolving its filter first."""
        return self._run(
            lambda: collections.get_filter(collection_id),
            on_event,
            cancel,
            target=f"collection {collection_id}",
        )

    def stream(
        self,
        filters: CollectionFilter,
        cancel: Optional[CancellationToken] = None,
    ) -> Iterator[ProgressEvent]:
        """
        Run on a worker thread and yield events until the terminal one.

        Closing the iterator early cancels the run at its next checkpoint.
        """
        return self._stream(lambda sink, token: self.run(filters, sink, token), cancel)

    def stream_collection(
        self,
        collection_id: str,
        collections: CollectionRepository,
        cancel: Optional[CancellationToken] = None,
    ) -> Iterator[ProgressEvent]:
        return self._stream(
            lambda sink, token: self.run_collection(collection_id, collections, sink, token), cancel
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _stream(
        self,
        job: Callable[[EventSink, CancellationToken], HydrationResult],
        cancel: Optional[CancellationToken],
    ) -> Iterator[ProgressEvent]:
        token = cancel or CancellationToken()
        events: "queue.Queue[ProgressEvent]" = queue.Queue()
        worker = threading.Thread(target=job, args=(events.put, token), name="hydration", daemon=True)
        worker.start()

        finished = False
        try:
            while not finished:
                event = events.get()
                finished = event.is_terminal
                yield event
        finally:
            if not finished:
                token.cancel()

    @log_execution_time(logger)
    def _run(
        self,
        resolve: Callable[[], CollectionFilter],
        on_event: Optional[EventSink],
        cancel: Optional[CancellationToken],
        target: str,
    ) -> HydrationResult:
        correlation_id = str(uuid.uuid4())[:8]
        result = HydrationResult(correlation_id=correlation_id)
        reporter = ProgressReporter(on_event)
        log_extra = {"correlation_id": correlation_id}

        logger.info(f"Hydration started for {target}", extra=log_extra)
        reporter.start("Analyzing collection...")

        try:
            filters = resolve()
            log_extra["filter"] = filters.fingerprint()
            self._execute(filters, reporter, cancel, result)
        except CollectionNotFoundError as e:
            self._fail(reporter, result, ErrorKind.INVALID_FILTER, str(e), log_extra)
        except HydrationError as e:
            self._fail(reporter, result, e.kind, str(e), log_extra)
        except UpstreamFailure as e:
            self._fail(reporter, result, ErrorKind.UPSTREAM_FAILURE, f"Catalog request failed: {e}", log_extra)
        except PyMongoError as e:
            self._fail(reporter, result, ErrorKind.STORE_FAILURE, f"Store write failed: {e}", log_extra)
        except Exception as e:
            logger.error("Unexpected hydration failure", exc_info=True, extra=log_extra)
            self._fail(reporter, result, ErrorKind.INTERNAL, str(e) or type(e).__name__, log_extra)

        if result.succeeded:
            logger.info(
                "Hydration completed",
                extra={
                    **log_extra,
                    "strategy": result.strategy,
                    "candidates": result.candidates,
                    "needed": result.needed,
                    "matched": result.total_matched,
                    "processed": result.processed_count,
                },
            )
        return result

    @staticmethod
    def _fail(reporter: ProgressReporter, result: HydrationResult, kind: ErrorKind, message: str, log_extra: dict) -> None:
        result.error_kind = kind
        result.message = message
        logger.error(f"Hydration failed ({kind.value}): {message}", extra=log_extra)
        reporter.fail(kind, message)

    def _execute(
        self,
        filters: CollectionFilter,
        reporter: ProgressReporter,
        cancel: Optional[CancellationToken],
        result: HydrationResult,
    ) -> None:
        strategy = select_strategy(filters)
        result.strategy = strategy.name
        reporter.advance(HydrationState.FETCHING, f"Fetching cards ({strategy.name}: {filters.describe()})...", 0, 0)

        dedup = DedupFilter(self.store, self.dedup_batch_size, cancel, result.correlation_id)
        ctx = AcquisitionContext(
            catalog=self.catalog,
            store=self.store,
            reporter=reporter,
            dedup=dedup,
            cancel=cancel,
            name_progress_interval=self.name_progress_interval,
            correlation_id=result.correlation_id,
        )
        acquisition = strategy.acquire(filters, ctx)
        result.candidates = acquisition.candidates
        result.needed = acquisition.needed
        result.fetched = len(acquisition.records)
        result.degraded_batches = dedup.degraded_batches

        if not acquisition.records:
            if acquisition.candidates and not acquisition.needed:
                message = f"All {acquisition.candidates} cards are already stored."
            else:
                message = "No cards found."
            result.message = message
            reporter.complete(message, 0, 0)
            return

        ctx.checkpoint("filtering")
        reporter.advance(
            HydrationState.FILTERING, f"Filtering {result.fetched} fetched cards...", 0, result.fetched
        )
        survivors = narrow(acquisition.records, filters)
        total = len(survivors)
        result.total_matched = total

        if not survivors:
            result.message = "No cards match the collection filters."
            reporter.complete(result.message, 0, 0)
            return

        ctx.checkpoint("persisting")
        reporter.advance(HydrationState.PERSISTING, f"Found {total} matching cards. Checking sets...", 0, total)
        result.sets_written = ensure_groups(survivors, self.store, acquisition.groups)

        reporter.progress(f"Saving {total} cards...", 0, total)
        for card in survivors:
            ctx.checkpoint("persisting")
            self.store.upsert_record(create_stored_card(card))
            result.processed_count += 1
            if result.processed_count % self.record_progress_interval == 0:
                reporter.progress(
                    f"Syncing... {result.processed_count}/{total}", result.processed_count, total
                )

        result.message = f"Sync complete! {result.processed_count} cards updated."
        reporter.complete(result.message, result.processed_count, total)
