"""
Edge-demand resolver tests: layer strips along stair part edges.

Tests:
1-4.   Landing demands (perimeter, corner trimming)
5-8.   Tread / riser demands and rejected edges
9-11.  Degenerate input
12-15. Companion totals agree with the demand list
16-18. Tool metres
19-20. Edge selection model
"""

import pytest
from pydantic import ValidationError

from stonecut.models import Edge, StairPart
from stonecut.schemas import EdgeSelection
from stonecut.cutting.edge_demand import (
    resolve_edge_demands, total_layer_length_per_unit, max_layer_length,
    layer_square_meters, tool_meters,
)


def _by_edge(demands):
    return {d.edge: d for d in demands}


# ============================================================
# 1-4. Landing
# ============================================================

def test_landing_perimeter_is_one_loop_demand():
    demands = resolve_edge_demands(StairPart.LANDING, 1.2, 1.0, 0.05,
                                   EdgeSelection.of("perimeter"), 2, 3)
    assert len(demands) == 1
    assert demands[0].edge == Edge.PERIMETER
    assert demands[0].length_m == pytest.approx(4.4)
    assert demands[0].layers_needed == 6


def test_landing_front_only_runs_full_width():
    demands = resolve_edge_demands(StairPart.LANDING, 1.2, 1.0, 0.05,
                                   EdgeSelection.of("front"), 1, 1)
    assert demands[0].length_m == pytest.approx(1.0)


def test_landing_corners_trimmed_both_ways():
    edges = EdgeSelection.of("front", "back", "left", "right")
    demands = _by_edge(resolve_edge_demands(StairPart.LANDING, 1.2, 1.0, 0.05, edges, 1, 1))
    assert demands[Edge.FRONT].length_m == pytest.approx(0.95)
    assert demands[Edge.BACK].length_m == pytest.approx(0.95)
    assert demands[Edge.LEFT].length_m == pytest.approx(1.15)
    assert demands[Edge.RIGHT].length_m == pytest.approx(1.15)


def test_landing_demands_come_out_in_priority_order():
    edges = EdgeSelection(right=True, back=True, front=True)
    demands = resolve_edge_demands(StairPart.LANDING, 1.2, 1.0, 0.05, edges, 1, 1)
    assert [d.edge for d in demands] == [Edge.FRONT, Edge.BACK, Edge.RIGHT]


# ============================================================
# 5-8. Tread / riser
# ============================================================

def test_tread_front_runs_full_length():
    demands = resolve_edge_demands(StairPart.TREAD, 1.5, 0.3, 0.05,
                                   EdgeSelection.of("front"), 1, 10)
    assert demands[0].length_m == pytest.approx(1.5)
    assert demands[0].layers_needed == 10


def test_tread_sides_trimmed_only_with_front():
    with_front = _by_edge(resolve_edge_demands(
        StairPart.TREAD, 1.5, 0.3, 0.05, EdgeSelection.of("front", "left"), 1, 1))
    without_front = _by_edge(resolve_edge_demands(
        StairPart.TREAD, 1.5, 0.3, 0.05, EdgeSelection.of("left", "right"), 1, 1))
    assert with_front[Edge.LEFT].length_m == pytest.approx(0.25)
    assert without_front[Edge.LEFT].length_m == pytest.approx(0.3)
    assert without_front[Edge.RIGHT].length_m == pytest.approx(0.3)


@pytest.mark.parametrize("part", [StairPart.TREAD, StairPart.RISER])
@pytest.mark.parametrize("edge", ["back", "perimeter"])
def test_step_parts_reject_back_and_perimeter(part, edge):
    with pytest.raises(ValueError):
        resolve_edge_demands(part, 1.5, 0.3, 0.05, EdgeSelection.of(edge), 1, 1)


def test_side_trimmed_to_nothing_is_dropped():
    demands = resolve_edge_demands(StairPart.RISER, 1.5, 0.05, 0.05,
                                   EdgeSelection.of("front", "left"), 1, 1)
    assert [d.edge for d in demands] == [Edge.FRONT]


# ============================================================
# 9-11. Degenerate input
# ============================================================

@pytest.mark.parametrize("length,width,strip", [(0, 1, 0.05), (1, 0, 0.05), (1, 1, 0), (-1, 1, 0.05)])
def test_non_positive_geometry_gives_no_demand(length, width, strip):
    assert resolve_edge_demands(StairPart.LANDING, length, width, strip,
                                EdgeSelection.of("front"), 1, 1) == []


def test_zero_layers_or_units_gives_no_demand():
    edges = EdgeSelection.of("front")
    assert resolve_edge_demands(StairPart.LANDING, 1, 1, 0.05, edges, 0, 5) == []
    assert resolve_edge_demands(StairPart.LANDING, 1, 1, 0.05, edges, 2, 0) == []


def test_empty_selection_gives_no_demand():
    assert resolve_edge_demands(StairPart.LANDING, 1, 1, 0.05, EdgeSelection(), 1, 1) == []


# ============================================================
# 12-15. Companion totals
# ============================================================

@pytest.mark.parametrize("part,edges", [
    (StairPart.LANDING, ("front", "back", "left", "right")),
    (StairPart.LANDING, ("front", "left")),
    (StairPart.LANDING, ("perimeter",)),
    (StairPart.TREAD, ("front", "left", "right")),
    (StairPart.RISER, ("left",)),
])
def test_layer_area_matches_demand_list(part, edges):
    """Area calculator and demand resolver use the same trimming rule."""
    selection = EdgeSelection.of(*edges)
    strip = 0.05
    demands = resolve_edge_demands(part, 1.2, 0.9, strip, selection, 2, 3)
    from_demands = sum(d.length_m * d.layers_needed * strip for d in demands)
    assert layer_square_meters(part, 1.2, 0.9, strip, selection, 2, 3) == pytest.approx(from_demands)


def test_total_layer_length_per_unit():
    edges = EdgeSelection.of("front", "left", "right")
    assert total_layer_length_per_unit(StairPart.TREAD, 1.5, 0.3, 0.05, edges) == pytest.approx(2.0)


def test_max_layer_length_perimeter_uses_longer_side():
    edges = EdgeSelection.of("perimeter")
    assert max_layer_length(StairPart.LANDING, 1.2, 0.9, 0.05, edges) == pytest.approx(1.2)


def test_max_layer_length_directional():
    edges = EdgeSelection.of("front", "left")
    assert max_layer_length(StairPart.LANDING, 1.2, 0.9, 0.05, edges) == pytest.approx(1.15)
    assert max_layer_length(StairPart.LANDING, 1.2, 0.9, 0, edges) == 0


# ============================================================
# 16-18. Tool metres
# ============================================================

def test_tool_meters_landing_perimeter():
    assert tool_meters(StairPart.LANDING, 1.2, 0.9, EdgeSelection.of("perimeter"), 2) == pytest.approx(8.4)


def test_tool_meters_tread_not_trimmed():
    edges = EdgeSelection.of("front", "left", "right")
    assert tool_meters(StairPart.TREAD, 1.5, 0.3, edges, 4) == pytest.approx((1.5 + 0.6) * 4)


def test_tool_meters_without_edges_is_zero():
    assert tool_meters(StairPart.TREAD, 1.5, 0.3, None, 4) == 0
    assert tool_meters(StairPart.TREAD, 1.5, 0.3, EdgeSelection.of("front"), 0) == 0


# ============================================================
# 19-20. Edge selection
# ============================================================

def test_perimeter_cannot_combine_with_directional_edges():
    with pytest.raises(ValidationError):
        EdgeSelection(perimeter=True, front=True)


def test_selection_reports_edges_in_priority_order():
    selection = EdgeSelection.of(Edge.RIGHT, "front", Edge.BACK)
    assert selection.selected() == [Edge.FRONT, Edge.BACK, Edge.RIGHT]
    assert selection.has_front_or_back is True
    assert selection.has_left_or_right is True
