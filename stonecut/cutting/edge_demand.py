"""
Edge-demand resolver: linear demand for layer strips along stair part edges.

A "layer" is a narrow strip of stone of fixed width glued along an edge of a
tread, riser or landing. Where two strips meet at a corner, the one running
across is shortened by the strip width so the corner square is not counted
twice. Every function here uses the same trimming rule, so the demand list,
the total length and the layer area always agree.

Geometry: for treads and risers length_m runs along the front (nosing) edge
and width_m is the depth. Landings are entered depth-first: front/back strips
run along width_m, left/right strips along length_m.
"""

import logging
from typing import List, Optional, Tuple

from ..models import Edge, StairPart, STEP_EDGES
from ..schemas import EdgeDemand, EdgeSelection

logger = logging.getLogger(__name__)


def _check_edges(part: StairPart, edges: EdgeSelection) -> None:
    if part == StairPart.LANDING:
        return
    not_applicable = [e.value for e in edges.selected() if e not in STEP_EDGES]
    if not_applicable:
        raise ValueError(
            f"Edges {not_applicable} do not apply to a {part.value}. "
            f"Available: {sorted(e.value for e in STEP_EDGES)}"
        )


def _edge_lengths(part: StairPart, length_m: float, width_m: float,
                  strip_width_m: float, edges: EdgeSelection) -> List[Tuple[Edge, float]]:
    """(edge, strip length) for every selected edge, trimmed at corners, in priority order."""
    part = StairPart(part)
    _check_edges(part, edges)

    if part == StairPart.LANDING:
        if edges.perimeter:
            return [(Edge.PERIMETER, 2 * (length_m + width_m))]
        front_back = max(0.0, width_m - strip_width_m) if edges.has_left_or_right else width_m
        left_right = max(0.0, length_m - strip_width_m) if edges.has_front_or_back else length_m
        lengths = {
            Edge.FRONT: front_back,
            Edge.BACK: front_back,
            Edge.LEFT: left_right,
            Edge.RIGHT: left_right,
        }
        return [(e, lengths[e]) for e in edges.selected()]

    # Tread / riser: the front strip runs the full length; side strips stop at it.
    side = max(0.0, width_m - strip_width_m) if edges.front else width_m
    lengths = {Edge.FRONT: length_m, Edge.LEFT: side, Edge.RIGHT: side}
    return [(e, lengths[e]) for e in edges.selected()]


def resolve_edge_demands(part, length_m: float, width_m: float, strip_width_m: float,
                         edges: EdgeSelection, layers_per_unit: int,
                         unit_count: int) -> List[EdgeDemand]:
    """
    Linear strip demand per selected edge.

    Each demand asks for unit_count * layers_per_unit strips of the trimmed edge
    length. Edges trimmed to nothing are dropped. Raises ValueError when a back
    or perimeter edge is requested for a tread or riser.
    """
    if length_m <= 0 or width_m <= 0 or strip_width_m <= 0:
        return []
    if layers_per_unit <= 0 or unit_count <= 0:
        return []

    layers = unit_count * layers_per_unit
    demands = [
        EdgeDemand(edge=edge, length_m=edge_length, layers_needed=layers)
        for edge, edge_length in _edge_lengths(part, length_m, width_m, strip_width_m, edges)
        if edge_length > 0
    ]
    logger.debug("Resolved %d edge demands for %s", len(demands), StairPart(part).value)
    return demands


def total_layer_length_per_unit(part, length_m: float, width_m: float,
                                strip_width_m: float, edges: EdgeSelection) -> float:
    """Sum of all strip lengths for one layer on one part."""
    if strip_width_m <= 0:
        return 0.0
    return sum(l for _, l in _edge_lengths(part, length_m, width_m, strip_width_m, edges))


def max_layer_length(part, length_m: float, width_m: float,
                     strip_width_m: float, edges: EdgeSelection) -> float:
    """
    Longest single strip needed, i.e. the minimum stock length that can supply it.
    A perimeter loop is cut side by side, so its longest piece is the longer side.
    """
    if strip_width_m <= 0:
        return 0.0
    if StairPart(part) == StairPart.LANDING and edges.perimeter:
        return max(length_m, width_m)
    lengths = [l for _, l in _edge_lengths(part, length_m, width_m, strip_width_m, edges)]
    return max(lengths, default=0.0)


def layer_square_meters(part, length_m: float, width_m: float, strip_width_m: float,
                        edges: EdgeSelection, layers_per_unit: int, unit_count: int) -> float:
    """Stone area consumed by layer strips (m²)."""
    if strip_width_m <= 0 or layers_per_unit <= 0 or unit_count <= 0:
        return 0.0
    per_unit = total_layer_length_per_unit(part, length_m, width_m, strip_width_m, edges)
    return per_unit * strip_width_m * layers_per_unit * unit_count


def tool_meters(part, length_m: float, width_m: float, edges: Optional[EdgeSelection],
                unit_count: int) -> float:
    """
    Edge-profiling (tool) metres. Tools run the full edge, no corner trimming.

    For treads and risers the front edge is measured along length_m and the
    sides along width_m, the same geometry as the layer strips. Older stair
    quotes measured the front along the depth and the sides along the run;
    which one the workshop bills needs confirming with the stone cutters.
    """
    if edges is None or unit_count <= 0:
        return 0.0
    part = StairPart(part)
    _check_edges(part, edges)

    meters = 0.0
    if part == StairPart.LANDING and edges.perimeter:
        meters = 2 * (length_m + width_m)
    elif part == StairPart.LANDING:
        meters += width_m * (int(edges.front) + int(edges.back))
        meters += length_m * (int(edges.left) + int(edges.right))
    else:
        # Tread/riser: the front edge is the nosing, sides are the depth
        meters += length_m * int(edges.front)
        meters += width_m * (int(edges.left) + int(edges.right))
    return meters * unit_count
