"""
Hydration engine: strategy selection, dedup, fine filtering, set upsert and progress.
"""
from cardvault.hydration.cancellation import CancellationToken
from cardvault.hydration.dedup import DedupFilter
from cardvault.hydration.engine import HydrationEngine, HydrationResult
from cardvault.hydration.errors import HydrationCancelled, HydrationError, InvalidFilterError
from cardvault.hydration.fine_filter import narrow
from cardvault.hydration.groups import ensure_group_detail, ensure_groups
from cardvault.hydration.progress import ProgressReporter
from cardvault.hydration.selector import select_strategy
from cardvault.hydration.strategies import (
    Acquisition,
    AcquisitionContext,
    AcquisitionStrategy,
    AttributeStrategy,
    NameListStrategy,
    SeriesStrategy,
    SetStrategy,
    SingleNameStrategy,
)

__all__ = [
    "CancellationToken",
    "DedupFilter",
    "HydrationEngine",
    "HydrationResult",
    "HydrationCancelled",
    "HydrationError",
    "InvalidFilterError",
    "narrow",
    "ensure_group_detail",
    "ensure_groups",
    "ProgressReporter",
    "select_strategy",
    "Acquisition",
    "AcquisitionContext",
    "AcquisitionStrategy",
    "AttributeStrategy",
    "NameListStrategy",
    "SeriesStrategy",
    "SetStrategy",
    "SingleNameStrategy",
]
