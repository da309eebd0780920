#!/usr/bin/env python3
"""
Collection Hydrator - fills the local card store from TCGdex for one collection filter.

Usage:
    python services/hydrator/main.py --collection col-42
    python services/hydrator/main.py --set sv3 --rarity "Illustration Rare"
    python services/hydrator/main.py --series "Scarlet & Violet" --names Pikachu Charizard --json
"""
import sys
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import argparse
import json
from typing import List, Optional

from pydantic import ValidationError

from cardvault.catalog import TCGdexClient
from cardvault.database import close_db, get_collection_repository, get_record_store
from cardvault.hydration import CancellationToken, HydrationEngine
from cardvault.logging import get_logger
from cardvault.models import CollectionFilter, EventStatus, ProgressEvent

# Initialize logger for this service
logger = get_logger("hydrator")


def build_filter(args: argparse.Namespace) -> CollectionFilter:
    return CollectionFilter(
        set=args.set,
        series=args.series,
        names=args.names,
        name=args.name,
        rarity=args.rarity,
        supertype=args.supertype,
        subtypes=args.subtypes,
    )


def render_event(event: ProgressEvent, as_json: bool) -> None:
    if as_json:
        print(json.dumps(event.to_dict(), ensure_ascii=False), flush=True)
        return

    counters = f" ({event.count}/{event.total})" if event.total else ""
    if event.status == EventStatus.ERROR:
        logger.error(f"{event.message}", extra={"error_kind": event.error_kind.value if event.error_kind else None})
    else:
        logger.info(f"[{event.stage.value}] {event.message}{counters}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="CardVault collection hydrator (TCGdex -> MongoDB)")
    parser.add_argument("--collection", help="Auto collection id; its stored filters are used")
    parser.add_argument("--set", help="Set id (e.g., sv3)")
    parser.add_argument("--series", nargs="+", help="Series names (exact match)")
    parser.add_argument("--names", nargs="+", help="Card name fragments")
    parser.add_argument("--name", help="Single card name fragment")
    parser.add_argument("--rarity", nargs="+", help="Rarity labels (fuzzy match)")
    parser.add_argument("--supertype", help="Card category (e.g., Trainer)")
    parser.add_argument("--subtypes", nargs="+", help="Subtypes")
    parser.add_argument("--json", action="store_true", help="Print each event as a JSON line")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.collection is None:
        try:
            filters = build_filter(args)
        except ValidationError:
            logger.error("Invalid filter arguments", exc_info=True)
            return 2

    logger.info("=" * 60)
    logger.info("CARDVAULT - COLLECTION HYDRATOR")
    logger.info("=" * 60)

    cancel = CancellationToken()
    last_event: Optional[ProgressEvent] = None

    try:
        engine = HydrationEngine(TCGdexClient(), get_record_store())
        if args.collection is not None:
            events = engine.stream_collection(args.collection, get_collection_repository(), cancel)
        else:
            events = engine.stream(filters, cancel)

        try:
            for event in events:
                last_event = event
                render_event(event, args.json)
        except KeyboardInterrupt:
            # Closing the stream cancels the run at its next checkpoint
            cancel.cancel()
            logger.info("Hydration interrupted by user; cards already saved are kept")

    except Exception:
        logger.critical("Fatal error occurred", exc_info=True)
        return 1
    finally:
        close_db()

    if last_event is None or last_event.status != EventStatus.COMPLETE:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
