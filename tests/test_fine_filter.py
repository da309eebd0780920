#!/usr/bin/env python3
"""
Test suite for in-memory fine filtering of fetched cards.
"""
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from cardvault.hydration.fine_filter import narrow
from cardvault.models.filters import CollectionFilter
from fakes import make_card

CARDS = [
    make_card("base1-25", name="Pikachu", rarity="Common"),
    make_card("base1-14", name="Raichu", rarity="Rare Holo"),
    make_card("swsh1-1", name="Celebi V", rarity="Double Rare"),
    make_card("swsh4-185", name="Pikachu VMAX", rarity="Ultra Rare"),
    make_card("base1-88", name="Professor Oak", rarity="Rare", category="Trainer"),
]


def _names(cards):
    return [c.name for c in cards]


def test_no_filters_keeps_everything():
    print("\n=== Test 1: No Filters ===")
    assert len(narrow(CARDS, CollectionFilter())) == 5
    print(" No filters test passed")


def test_single_name_case_insensitive():
    print("\n=== Test 2: Single Name ===")
    result = narrow(CARDS, CollectionFilter(name="pikachu"))
    assert _names(result) == ["Pikachu", "Pikachu VMAX"], f"Got {_names(result)}"
    print(" Single name test passed")


def test_name_list():
    print("\n=== Test 3: Name List ===")
    result = narrow(CARDS, CollectionFilter(names=["Raichu", "Oak"]))
    assert _names(result) == ["Raichu", "Professor Oak"], f"Got {_names(result)}"
    print(" Name list test passed")


def test_rarity_fuzzy_match():
    """'Rare' matches Rare Holo, Double Rare, Ultra Rare and Rare, not Common."""
    print("\n=== Test 4: Rarity Fuzzy Match ===")
    result = narrow(CARDS, CollectionFilter(rarity="Rare"))
    assert len(result) == 4, f"Expected 4, got {_names(result)}"
    assert "Pikachu" not in _names(result)
    print(" Rarity fuzzy match test passed")


def test_rarity_list():
    print("\n=== Test 5: Rarity List ===")
    result = narrow(CARDS, CollectionFilter(rarity=["Common", "Ultra Rare"]))
    assert _names(result) == ["Pikachu", "Pikachu VMAX"], f"Got {_names(result)}"
    print(" Rarity list test passed")


def test_supertype_equality():
    print("\n=== Test 6: Supertype ===")
    result = narrow(CARDS, CollectionFilter(supertype="trainer"))
    assert _names(result) == ["Professor Oak"], f"Got {_names(result)}"
    print(" Supertype test passed")


def test_combined_filters_and_logic():
    print("\n=== Test 7: Combined Filters ===")
    result = narrow(CARDS, CollectionFilter(name="Pikachu", rarity="Ultra Rare"))
    assert _names(result) == ["Pikachu VMAX"]

    assert narrow(CARDS, CollectionFilter(name="Pikachu", supertype="Trainer")) == [], "No overlap should be empty"
    print(" Combined filters test passed")


def test_series_and_subtypes_not_rechecked():
    """Series is guaranteed by acquisition and subtypes are not enforced."""
    print("\n=== Test 8: Unchecked Fields ===")
    result = narrow(CARDS, CollectionFilter(series=["Nowhere"], subtypes=["Stage 2"]))
    assert len(result) == 5
    print(" Unchecked fields test passed")


def test_card_without_rarity():
    print("\n=== Test 9: Missing Rarity ===")
    promo = make_card("svp-1", name="Pikachu", rarity=None)
    assert narrow([promo], CollectionFilter(rarity="Promo")) == []
    assert narrow([promo], CollectionFilter(name="Pika")) == [promo]
    print(" Missing rarity test passed")
