#!/usr/bin/env python3
"""
Test suite for set upserts: every stored card gets a stored set, and
placeholder metadata never overwrites real metadata.
"""
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cardvault.hydration.groups import ensure_group_detail, ensure_groups
from cardvault.models.records import UNKNOWN_SERIES, UNKNOWN_SET_NAME
from fakes import CountingRecordStore, make_card, make_set


def test_ensure_groups_one_write_per_distinct_set():
    print("\n=== Test 1: Distinct Sets ===")

    store = CountingRecordStore()
    records = [make_card("sv3-1"), make_card("sv3-2"), make_card("sv4-7", set_name="Paradox Rift")]

    written = ensure_groups(records, store)

    assert written == 2
    assert store.group_writes == ["sv3", "sv4"]
    doc = store.set_doc("sv4")
    assert doc["name"] == "Paradox Rift"
    assert doc["series"] == UNKNOWN_SERIES, "Series is unknown from a card reference"
    assert doc["enriched"] is False
    assert doc["printed_total"] == 197

    print(" Distinct sets test passed")


def test_ensure_groups_skips_enriched():
    print("\n=== Test 2: Skip Enriched Sets ===")

    store = CountingRecordStore()
    detail = make_set("sv3", name="Obsidian Flames")
    records = [make_card("sv3-1"), make_card("sv4-1")]

    written = ensure_groups(records, store, {"sv3": detail})

    assert written == 1
    assert store.group_writes == ["sv4"]

    print(" Skip enriched sets test passed")


def test_placeholder_never_downgrades_series():
    print("\n=== Test 3: No Downgrade ===")

    store = CountingRecordStore()
    ensure_group_detail(make_set("sv3", [make_card("sv3-1")], name="Obsidian Flames"), store)
    ensure_groups([make_card("sv3-1", set_name="Obsidian Flames")], store)

    doc = store.set_doc("sv3")
    assert doc["series"] == "Scarlet & Violet", f"Series downgraded to '{doc['series']}'"
    assert doc["enriched"] is True
    assert doc["printed_total"] == 1, "Counts from the full fetch should be kept"
    assert len(store.group_writes) == 2

    print(" No downgrade test passed")


def test_enriched_fetch_upgrades_placeholder():
    print("\n=== Test 4: Upgrade Placeholder ===")

    store = CountingRecordStore()
    ensure_groups([make_card("sv3-1")], store)
    assert store.set_doc("sv3")["series"] == UNKNOWN_SERIES

    ensure_group_detail(make_set("sv3", name="Obsidian Flames"), store)

    doc = store.set_doc("sv3")
    assert doc["series"] == "Scarlet & Violet"
    assert doc["name"] == "Obsidian Flames"
    assert doc["enriched"] is True
    assert doc["release_date"] == "2023-08-11"

    print(" Upgrade placeholder test passed")


def test_full_fetch_without_series_keeps_existing():
    store = CountingRecordStore()
    ensure_group_detail(make_set("sv3"), store)
    ensure_group_detail(make_set("sv3", series=None), store)

    assert store.set_doc("sv3")["series"] == "Scarlet & Violet"


def test_no_records_no_writes():
    store = CountingRecordStore()
    assert ensure_groups([], store) == 0
    assert store.group_writes == []


def test_bare_reference_keeps_full_set_display_fields():
    """A card carrying only its set id must not blank the name or images of a fully fetched set."""
    print("\n=== Test 5: Bare Reference After Full Fetch ===")

    store = CountingRecordStore()
    ensure_group_detail(make_set("sv3", name="Obsidian Flames"), store)
    before = store.set_doc("sv3")

    ensure_groups([make_card("sv3-1", set={"id": "sv3"})], store)

    after = store.set_doc("sv3")
    assert after["name"] == "Obsidian Flames", f"Name replaced by '{after['name']}'"
    assert after["images"] == before["images"], f"Images changed to {after['images']}"
    assert after["images"]["logo"] == "https://assets.tcgdex.net/en/sv/sv3/logo.webp"
    assert after["series"] == "Scarlet & Violet"

    print(" Bare reference test passed")


def test_bare_reference_creates_placeholder_set():
    store = CountingRecordStore()
    ensure_groups([make_card("sv9-1", set={"id": "sv9"})], store)

    doc = store.set_doc("sv9")
    assert doc["name"] == UNKNOWN_SET_NAME
    assert doc["series"] == UNKNOWN_SERIES
    assert doc["images"] == {"symbol": None, "logo": None}


def test_known_reference_images_refresh_per_key():
    """A card reference with a symbol refreshes the symbol and keeps the stored logo."""
    store = CountingRecordStore()
    ensure_group_detail(make_set("sv3", name="Obsidian Flames"), store)

    ensure_groups([make_card("sv3-1", set_name="Obsidian Flames")], store)

    images = store.set_doc("sv3")["images"]
    assert images["symbol"] == "https://assets.tcgdex.net/univ/sv/sv3/symbol.webp"
    assert images["logo"] == "https://assets.tcgdex.net/en/sv/sv3/logo.webp"
