"""
Linear cut allocator: cuts one stock strip along its width.

The stock is trimmed to the desired width for its full length; the rest of the
width becomes a remnant strip of the same length. Cutting is billed per metre
of cut line, per piece.
"""

import logging
from typing import Optional

from ..models import CutOrientation
from ..schemas import StockItem, CutRecord, RemnantPiece, LinearCutResult
from .units import IdSequence, square_meters, CM_PER_M

logger = logging.getLogger(__name__)


def cut_linear(stock: StockItem, desired_width: float, cutting_cost_per_meter: float,
               quantity: int = 1, ids: Optional[IdSequence] = None) -> LinearCutResult:
    """
    Cut `quantity` pieces of `desired_width` cm out of `stock`.

    When desired_width >= stock.width no physical cut is needed, but the cut
    record and an unavailable zero-width remnant are still returned so the
    caller can trace the line item. Invalid geometry gives the same no-op shape
    with zero cost.
    """
    ids = ids or IdSequence()
    length_m = stock.length_m
    original_width = max(stock.width, 0.0)

    valid = desired_width > 0 and original_width > 0 and length_m > 0 and quantity > 0
    if not valid:
        logger.debug("Linear cut skipped: width=%s desired=%s length_m=%s qty=%s",
                     stock.width, desired_width, length_m, quantity)
        cut_width = original_width
    else:
        cut_width = min(desired_width, original_width)
    remaining_width = original_width - cut_width

    cutting_cost = 0.0
    if valid and cutting_cost_per_meter > 0:
        cutting_cost = length_m * cutting_cost_per_meter * quantity

    cut = CutRecord(
        id=ids.next("cut"),
        original_width=original_width,
        cut_width=cut_width,
        remaining_width=remaining_width,
        length=length_m * CM_PER_M,
        cutting_cost=cutting_cost,
        cutting_cost_per_meter=cutting_cost_per_meter,
        orientation=CutOrientation.LONGITUDINAL,
    )

    remnant_quantity = max(quantity, 0)
    remnant = RemnantPiece(
        id=ids.next("remaining"),
        width=remaining_width,
        length=max(length_m, 0.0),
        square_meters=square_meters(remaining_width, max(length_m, 0.0), remnant_quantity),
        is_available=remaining_width > 0,
        source_cut_id=cut.id,
        quantity=remnant_quantity,
    )

    return LinearCutResult(
        cut=cut,
        remnant=remnant,
        cutting_cost=cutting_cost,
        remaining_width=remaining_width,
    )
