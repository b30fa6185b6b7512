"""
Remnant pool hygiene tests.

Tests:
1-4. sanitize_remnant
5-6. merge_remnants
7-8. consume_remnant / pool_square_meters
"""

import pytest

from stonecut.schemas import RemnantPiece, Position
from stonecut.cutting.remnant_pool import (
    sanitize_remnant, is_usable_remnant, normalize_remnants, merge_remnants,
    consume_remnant, pool_square_meters,
)


# ============================================================
# 1-4. sanitize_remnant
# ============================================================

def test_sanitize_recomputes_area():
    piece = RemnantPiece(id="r1", width=20, length=2, square_meters=99, quantity=2)
    clean = sanitize_remnant(piece)
    assert clean.square_meters == pytest.approx(0.8)
    assert clean.is_available is True


def test_sanitize_infers_missing_quantity_from_area():
    piece = RemnantPiece(id="r1", width=10, length=2, square_meters=0.6, quantity=0)
    clean = sanitize_remnant(piece)
    assert clean.quantity == 3
    assert clean.square_meters == pytest.approx(0.6)


def test_sanitize_clears_degenerate_pieces():
    """Pieces restored from session JSON may carry junk; they become unusable, not errors."""
    junk = RemnantPiece.model_construct(id="junk", width=-5, length=float("nan"),
                                        square_meters=None, quantity=1, is_available=True,
                                        source_cut_id="", position=None)
    clean = sanitize_remnant(junk)
    assert clean.width == 0
    assert clean.length == 0
    assert clean.square_meters == 0
    assert clean.is_available is False
    assert is_usable_remnant(junk) is False


def test_sanitize_keeps_unavailable_flag():
    piece = RemnantPiece(id="r1", width=20, length=2, is_available=False)
    assert sanitize_remnant(piece).is_available is False
    assert [p.id for p in normalize_remnants([piece])] == ["r1"]


# ============================================================
# 5-6. merge_remnants
# ============================================================

def test_merge_folds_identical_pieces():
    a = RemnantPiece(id="a", width=15, length=2, source_cut_id="cut_1", quantity=1)
    b = RemnantPiece(id="b", width=15, length=2, source_cut_id="cut_1", quantity=2)
    merged = merge_remnants([a, b])
    assert len(merged) == 1
    assert merged[0].quantity == 3
    assert merged[0].square_meters == pytest.approx(0.9)


def test_merge_keeps_distinct_and_drops_unusable():
    a = RemnantPiece(id="a", width=15, length=2, source_cut_id="cut_1")
    b = RemnantPiece(id="b", width=15, length=2, source_cut_id="cut_1",
                     position=Position(start_width=15, start_length=0))
    gone = RemnantPiece(id="c", width=0, length=2)
    merged = merge_remnants([a, b, gone])
    assert [p.id for p in merged] == ["a", "b"]


# ============================================================
# 7-8. consume / totals
# ============================================================

def test_consume_never_goes_negative():
    piece = RemnantPiece(id="a", width=15, length=2, quantity=2)
    one_left = consume_remnant(piece, 1)
    assert one_left.quantity == 1
    assert one_left.square_meters == pytest.approx(0.3)
    none_left = consume_remnant(piece, 5)
    assert none_left.quantity == 0
    assert none_left.is_available is False
    assert piece.quantity == 2


def test_pool_square_meters_counts_available_only():
    pool = [
        RemnantPiece(id="a", width=15, length=2, quantity=2),
        RemnantPiece(id="b", width=40, length=1, is_available=False),
    ]
    assert pool_square_meters(pool) == pytest.approx(0.6)
