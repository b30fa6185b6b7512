"""
Remnant allocator: satisfy layer strip demand from leftover stone first.

Each remnant is split into parallel columns of the strip width
(floor(remnant.width / strip_width) columns per piece, times its quantity).
Strips are cut end to end along each column. Whatever cannot be covered by
remnants is reported as new-stock demand; pricing new stock is the caller's job
because it depends on whether the line item uses mandatory pricing.

The pool is owned by the caller. allocate() never mutates it and returns the
pool the next allocation in the same session should use.
"""

import logging
import math
from collections import OrderedDict
from typing import List, Optional

from ..config import settings
from ..models import EDGE_PRIORITY, REMNANT_ELIGIBLE_EDGES
from ..schemas import EdgeDemand, RemnantPiece, AllocationResult, UnfulfilledDemand
from .remnant_pool import sanitize_remnant
from .units import IdSequence, square_meters, CM_PER_M

logger = logging.getLogger(__name__)


def allocate(demands: List[EdgeDemand], remnant_pool: List[RemnantPiece],
             strip_width_cm: float, ids: Optional[IdSequence] = None) -> AllocationResult:
    """
    Greedy first-fit allocation of edge demands against a remnant pool.

    Demands are processed front, back, left, right, perimeter whatever order
    they arrive in. Only front, back and perimeter strips may come from
    remnants; left/right strips always need new stock.
    """
    ids = ids or IdSequence()
    eps = settings.LENGTH_EPSILON
    active = [d for d in demands if d.length_m > 0 and d.layers_needed > 0]
    ordered = sorted(active, key=lambda d: EDGE_PRIORITY[d.edge])
    total_demand = sum(d.layers_needed for d in ordered)

    if strip_width_cm <= 0:
        return AllocationResult(
            from_new_stock=total_demand,
            updated_pool=list(remnant_pool),
            unfulfilled=[
                UnfulfilledDemand(edge=d.edge, length_m=d.length_m, quantity=d.layers_needed)
                for d in ordered
            ],
            total_demand=total_demand,
        )

    strip_width_m = strip_width_cm / CM_PER_M

    # Column lengths per remnant, in pool order. Unusable remnants get none.
    columns: List[List[float]] = []
    columns_per_stone: List[int] = []
    for piece in remnant_pool:
        clean = sanitize_remnant(piece)
        per_stone = int(math.floor((clean.width + eps) / strip_width_cm)) if clean.is_available else 0
        columns_per_stone.append(per_stone)
        columns.append([clean.length] * (per_stone * clean.quantity))

    touched = set()
    used_remnants: List[RemnantPiece] = []
    unfulfilled: List[UnfulfilledDemand] = []
    from_remnants = 0
    sqm_from_remnants = 0.0
    sqm_from_new = 0.0

    for demand in ordered:
        needed = demand.layers_needed

        if demand.edge in REMNANT_ELIGIBLE_EDGES:
            for index, piece_columns in enumerate(columns):
                if needed <= 0:
                    break
                used_here = 0
                for c, remaining in enumerate(piece_columns):
                    if needed <= 0:
                        break
                    if remaining + eps < demand.length_m:
                        continue
                    strips = int(math.floor((remaining + eps) / demand.length_m))
                    use = min(needed, strips)
                    piece_columns[c] = max(0.0, remaining - use * demand.length_m)
                    needed -= use
                    used_here += use
                if used_here:
                    touched.add(index)
                    source = remnant_pool[index]
                    used_remnants.append(RemnantPiece(
                        id=ids.next("used_layer"),
                        width=strip_width_cm,
                        length=demand.length_m,
                        square_meters=square_meters(strip_width_cm, demand.length_m, used_here),
                        is_available=False,
                        source_cut_id=source.source_cut_id or source.id,
                        quantity=used_here,
                    ))

        satisfied = demand.layers_needed - needed
        from_remnants += satisfied
        sqm_from_remnants += satisfied * demand.length_m * strip_width_m
        if needed > 0:
            sqm_from_new += needed * demand.length_m * strip_width_m
            unfulfilled.append(UnfulfilledDemand(
                edge=demand.edge, length_m=demand.length_m, quantity=needed,
            ))

    updated_pool: List[RemnantPiece] = []
    for index, piece in enumerate(remnant_pool):
        if index not in touched:
            updated_pool.append(piece)
            continue
        updated_pool.extend(_leftovers(
            piece, columns[index], columns_per_stone[index], strip_width_cm, ids,
        ))

    if from_remnants:
        logger.info("Layer strips: %d of %d from remnants (%d remnant entries used)",
                    from_remnants, total_demand, len(touched))

    return AllocationResult(
        from_remnants=from_remnants,
        from_new_stock=total_demand - from_remnants,
        cutting_cost_from_new=0.0,
        used_remnants=used_remnants,
        updated_pool=updated_pool,
        unfulfilled=unfulfilled,
        square_meters_from_remnants=sqm_from_remnants,
        square_meters_from_new=sqm_from_new,
        total_demand=total_demand,
    )


def _leftovers(piece: RemnantPiece, column_lengths: List[float], per_stone: int,
               strip_width_cm: float, ids: IdSequence) -> List[RemnantPiece]:
    """Smaller pieces that replace a remnant once strips were cut from it."""
    eps = settings.LENGTH_EPSILON
    clean = sanitize_remnant(piece)
    source_cut_id = piece.source_cut_id or piece.id
    pieces: List[RemnantPiece] = []

    # Partially used columns, grouped by remaining length
    by_length = OrderedDict()
    for length in column_lengths:
        if length > eps:
            key = round(length, 6)
            by_length[key] = by_length.get(key, 0) + 1
    for length, count in by_length.items():
        pieces.append(RemnantPiece(
            id=ids.next("layer_remaining"),
            width=strip_width_cm,
            length=length,
            square_meters=square_meters(strip_width_cm, length, count),
            is_available=True,
            source_cut_id=source_cut_id,
            quantity=count,
        ))

    # Width that was never wide enough for another column
    leftover_width = clean.width - per_stone * strip_width_cm
    if leftover_width > eps:
        pieces.append(RemnantPiece(
            id=ids.next("layer_width_leftover"),
            width=leftover_width,
            length=clean.length,
            square_meters=square_meters(leftover_width, clean.length, clean.quantity),
            is_available=True,
            source_cut_id=source_cut_id,
            quantity=clean.quantity,
        ))
    return pieces
