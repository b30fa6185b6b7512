"""
Partition packing and validation tests.

Tests:
1-5.   Packer (order sensitivity, splitting lanes, invalid partitions)
6-7.   Remaining areas
8-16.  Validator (bounds, capacity, placement, overlap, idempotence)
"""

import pytest

from stonecut.schemas import Partition, Position
from stonecut.cutting.partition_packer import pack, remaining_areas
from stonecut.cutting.partition_validator import (
    validate_partitions, rectangles_overlap, OVERLAP_MESSAGE,
)


def _partition(id, width, length, **kwargs):
    return Partition(id=id, width=width, length=length, **kwargs)


# ============================================================
# 1-5. Packer
# ============================================================

def test_packing_wide_after_narrow_fails():
    """A(50cm x 2m) then B(60cm x 1m) in 100cm x 3m: B no longer fits."""
    result = pack([_partition("A", 50, 2), _partition("B", 60, 1)], 100, 3)
    a, b = result.placed
    assert a.position == Position(start_width=0, start_length=0)
    assert b.position is None
    assert "width" in b.validation_error


def test_packing_order_matters():
    """Same partitions, reverse order: both fit."""
    result = pack([_partition("B", 60, 1), _partition("A", 50, 2)], 100, 3)
    b, a = result.placed
    assert b.position == Position(start_width=0, start_length=0)
    assert a.position == Position(start_width=0, start_length=1)
    assert a.validation_error is None


def test_packing_fills_lanes_left_to_right():
    result = pack([_partition("A", 40, 3), _partition("B", 60, 1), _partition("C", 60, 2)], 100, 3)
    positions = [p.position for p in result.placed]
    assert positions == [
        Position(start_width=0, start_length=0),
        Position(start_width=40, start_length=0),
        Position(start_width=40, start_length=1),
    ]
    assert result.free_slices == []


def test_packing_reports_length_shortage():
    result = pack([_partition("A", 100, 2.5), _partition("B", 100, 1)], 100, 3)
    assert result.placed[1].position is None
    assert "length" in result.placed[1].validation_error


def test_invalid_partitions_keep_their_place():
    partitions = [_partition("A", 0, 1), _partition("B", 50, 1), _partition("C", 30, -1)]
    result = pack(partitions, 100, 3)
    assert [p.id for p in result.placed] == ["A", "B", "C"]
    assert result.placed[0] == partitions[0]
    assert result.placed[2] == partitions[2]
    assert result.placed[1].position is not None


# ============================================================
# 6-7. Remaining areas
# ============================================================

def test_remaining_areas_after_packing(ids):
    pieces = remaining_areas([_partition("A", 50, 2)], 100, 3, ids=ids)
    assert len(pieces) == 2
    assert sum(p.square_meters for p in pieces) == pytest.approx(3.0 - 1.0)
    assert all(p.is_available for p in pieces)


def test_remaining_areas_without_partitions_is_whole_stock(ids):
    pieces = remaining_areas([], 100, 3, ids=ids)
    assert len(pieces) == 1
    assert pieces[0].square_meters == pytest.approx(3.0)
    assert remaining_areas([], 0, 3, ids=ids) == []


# ============================================================
# 8-16. Validator
# ============================================================

def test_validation_passes_and_positions_partitions():
    result = validate_partitions([_partition("A", 60, 1), _partition("B", 40, 3)], 100, 3)
    assert result.is_valid is True
    assert result.error is None
    assert result.partition_errors == {}
    assert all(p.position is not None for p in result.validated_partitions)


def test_validation_flags_partition_larger_than_stock():
    result = validate_partitions([_partition("A", 120, 1)], 100, 3)
    assert result.is_valid is False
    assert "Width (120cm)" in result.partition_errors["A"]


def test_validation_capacity_flags_every_contributor():
    result = validate_partitions([_partition("A", 100, 0.6), _partition("B", 100, 0.6)], 100, 1)
    assert result.is_valid is False
    assert set(result.partition_errors) == {"A", "B"}
    assert "exceeds the available area" in result.error
    assert all(p.validation_error for p in result.validated_partitions)


def test_validation_flags_unplaceable_partition():
    result = validate_partitions([_partition("A", 50, 2), _partition("B", 60, 1)], 100, 3)
    assert result.is_valid is False
    assert list(result.partition_errors) == ["B"]
    assert result.error.startswith("1 partition(s)")


def test_validation_requires_a_valid_partition():
    result = validate_partitions([_partition("A", 0, 1)], 100, 3)
    assert result.is_valid is False
    assert "at least one partition" in result.error


def test_validation_is_idempotent():
    partitions = [_partition("A", 50, 2), _partition("B", 60, 1), _partition("C", 50, 1)]
    first = validate_partitions(partitions, 100, 3)
    second = validate_partitions(partitions, 100, 3)
    again = validate_partitions(first.validated_partitions, 100, 3)
    assert first.partition_errors == second.partition_errors == again.partition_errors
    assert [p.position for p in first.validated_partitions] == \
        [p.position for p in again.validated_partitions]


def test_rectangles_overlap():
    a = _partition("A", 50, 1, position=Position(start_width=0, start_length=0))
    b = _partition("B", 50, 1, position=Position(start_width=25, start_length=0.5))
    c = _partition("C", 50, 1, position=Position(start_width=50, start_length=0))
    assert rectangles_overlap(a, b) is True
    assert rectangles_overlap(a, c) is False
    assert rectangles_overlap(a, _partition("D", 10, 1)) is False


def test_packed_partitions_never_overlap():
    partitions = [_partition("A", 40, 1), _partition("B", 60, 2), _partition("C", 40, 1.5),
                  _partition("D", 30, 0.5), _partition("E", 60, 1)]
    placed = [p for p in pack(partitions, 100, 3).placed if p.position is not None]
    assert len(placed) >= 4
    for i, first in enumerate(placed):
        for second in placed[i + 1:]:
            assert rectangles_overlap(first, second) is False


def test_validation_flags_both_overlapping_partitions(monkeypatch):
    """Overlapping placements (e.g. from a hand-drawn layout) flag both partitions."""
    from stonecut.cutting import partition_validator
    from stonecut.schemas import PackingResult

    def overlapping_pack(partitions, area_width, area_length):
        return PackingResult(placed=[
            p.model_copy(update={"position": Position(start_width=0, start_length=0)})
            for p in partitions
        ])

    monkeypatch.setattr(partition_validator, "pack", overlapping_pack)
    result = validate_partitions([_partition("A", 50, 1), _partition("B", 50, 1)], 100, 3)
    assert result.is_valid is False
    assert result.partition_errors == {"A": OVERLAP_MESSAGE, "B": OVERLAP_MESSAGE}
    assert all(p.validation_error == OVERLAP_MESSAGE for p in result.validated_partitions)
