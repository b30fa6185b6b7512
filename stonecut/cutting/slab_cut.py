"""
2D slab cutter: longitudinal + cross cuts on a rectangular slab.

A longitudinal cut trims the width (the cut line runs along the length), a
cross cut trims the length (the cut line runs across the width). Each axis has
its own rate per metre. Up to three remnants result:

    +-------------------+---------+
    |                   |  side   |   side  = remaining width  x desired length
    |     desired       |  strip  |   end   = desired width    x remaining length
    |                   |         |   corner= remaining width  x remaining length
    +-------------------+---------+
    |     end strip     | corner  |
    +-------------------+---------+
"""

import logging
from typing import List, Optional

from ..models import CutOrientation, LengthUnit
from ..schemas import (
    CutRecord, RemnantPiece, Position, SlabCutResult, CutValidationResult, StandardSlabSize,
)
from .units import IdSequence, to_centimeters, square_meters, format_number, CM_PER_M

logger = logging.getLogger(__name__)


def cut_slab(stock_length: float, stock_width: float,
             desired_length: float, desired_width: float,
             longitudinal_rate: float = 0.0, cross_rate: float = 0.0,
             quantity: int = 1,
             length_unit=LengthUnit.M, width_unit=LengthUnit.CM,
             longitudinal_cut_meters: Optional[float] = None,
             cross_cut_meters: Optional[float] = None,
             ids: Optional[IdSequence] = None) -> SlabCutResult:
    """
    Cut `quantity` slabs down to desired_length x desired_width.

    longitudinal_cut_meters / cross_cut_meters override the billed line length
    of each cut (e.g. stair stones nested several to a slab). Without them the
    longitudinal cut is billed over the desired length and the cross cut over
    the desired width.
    """
    ids = ids or IdSequence()

    stock_length_cm = to_centimeters(stock_length, length_unit)
    stock_width_cm = to_centimeters(stock_width, width_unit)
    desired_length_cm = to_centimeters(desired_length, length_unit)
    desired_width_cm = to_centimeters(desired_width, width_unit)

    if stock_length_cm <= 0 or stock_width_cm <= 0 or quantity <= 0:
        logger.debug("Slab cut skipped: stock %sx%s cm, qty=%s",
                     stock_length_cm, stock_width_cm, quantity)
        return SlabCutResult()

    needs_longitudinal = 0 < desired_width_cm < stock_width_cm
    needs_cross = 0 < desired_length_cm < stock_length_cm

    # Desired dimensions larger than the stock are treated as the full stock.
    piece_width_cm = min(desired_width_cm, stock_width_cm) if desired_width_cm > 0 else stock_width_cm
    piece_length_cm = min(desired_length_cm, stock_length_cm) if desired_length_cm > 0 else stock_length_cm
    remaining_width_cm = stock_width_cm - piece_width_cm
    remaining_length_cm = stock_length_cm - piece_length_cm

    longitudinal_meters = longitudinal_cut_meters if longitudinal_cut_meters is not None \
        else piece_length_cm / CM_PER_M
    cross_meters = cross_cut_meters if cross_cut_meters is not None \
        else piece_width_cm / CM_PER_M

    longitudinal_cost = 0.0
    cross_cost = 0.0
    if needs_longitudinal and longitudinal_rate > 0:
        longitudinal_cost = longitudinal_meters * longitudinal_rate * quantity
    if needs_cross and cross_rate > 0:
        cross_cost = cross_meters * cross_rate * quantity

    cuts: List[CutRecord] = []
    longitudinal_id = ""
    cross_id = ""
    if needs_longitudinal:
        longitudinal_id = ids.next("cut_longitudinal")
        cuts.append(CutRecord(
            id=longitudinal_id,
            original_width=stock_width_cm,
            cut_width=piece_width_cm,
            remaining_width=remaining_width_cm,
            length=longitudinal_meters * CM_PER_M,
            cutting_cost=longitudinal_cost,
            cutting_cost_per_meter=longitudinal_rate,
            orientation=CutOrientation.LONGITUDINAL,
        ))
    if needs_cross:
        cross_id = ids.next("cut_cross")
        # The cross cut trims the length axis, recorded as its "width".
        cuts.append(CutRecord(
            id=cross_id,
            original_width=stock_length_cm,
            cut_width=piece_length_cm,
            remaining_width=remaining_length_cm,
            length=cross_meters * CM_PER_M,
            cutting_cost=cross_cost,
            cutting_cost_per_meter=cross_rate,
            orientation=CutOrientation.CROSS,
        ))

    remnants: List[RemnantPiece] = []
    if needs_longitudinal or needs_cross:
        piece_length_m = piece_length_cm / CM_PER_M
        remaining_length_m = remaining_length_cm / CM_PER_M

        if remaining_width_cm > 0 and piece_length_cm > 0:
            remnants.append(_remnant(
                ids, remaining_width_cm, piece_length_m, quantity,
                longitudinal_id or cross_id, piece_width_cm, 0.0,
            ))
        if remaining_length_cm > 0 and piece_width_cm > 0:
            remnants.append(_remnant(
                ids, piece_width_cm, remaining_length_m, quantity,
                cross_id or longitudinal_id, 0.0, piece_length_m,
            ))
        if remaining_width_cm > 0 and remaining_length_cm > 0:
            remnants.append(_remnant(
                ids, remaining_width_cm, remaining_length_m, quantity,
                cross_id or longitudinal_id, piece_width_cm, piece_length_m,
            ))

    logger.debug("Slab cut: longitudinal=%s cross=%s remnants=%d cost=%.2f",
                 needs_longitudinal, needs_cross, len(remnants),
                 longitudinal_cost + cross_cost)

    return SlabCutResult(
        cuts=cuts,
        remnants=remnants,
        total_cutting_cost=longitudinal_cost + cross_cost,
        longitudinal_cutting_cost=longitudinal_cost,
        cross_cutting_cost=cross_cost,
        needs_longitudinal_cut=needs_longitudinal,
        needs_cross_cut=needs_cross,
        remaining_width=remaining_width_cm,
        remaining_length=remaining_length_cm,
    )


def _remnant(ids: IdSequence, width_cm: float, length_m: float, quantity: int,
             source_cut_id: str, start_width: float, start_length: float) -> RemnantPiece:
    return RemnantPiece(
        id=ids.next("remaining"),
        width=width_cm,
        length=length_m,
        square_meters=square_meters(width_cm, length_m, quantity),
        is_available=True,
        source_cut_id=source_cut_id,
        position=Position(start_width=start_width, start_length=start_length),
        quantity=quantity,
    )


def validate_cut_dimensions(original_width: float, original_length: float,
                            desired_width: float, desired_length: float,
                            original_length_unit=LengthUnit.M,
                            desired_length_unit=LengthUnit.M) -> CutValidationResult:
    """Check that a requested piece fits inside its stock. Widths are cm."""
    original_length_cm = to_centimeters(original_length, original_length_unit)
    desired_length_cm = to_centimeters(desired_length, desired_length_unit)

    if desired_width > original_width:
        return CutValidationResult(
            is_valid=False,
            error="Desired width (%scm) cannot exceed the original width (%scm)" % (
                format_number(desired_width), format_number(original_width)),
        )
    if desired_length_cm > original_length_cm:
        return CutValidationResult(
            is_valid=False,
            error="Desired length (%scm) cannot exceed the original length (%scm)" % (
                format_number(desired_length_cm), format_number(original_length_cm)),
        )
    if desired_width <= 0 or desired_length_cm <= 0:
        return CutValidationResult(is_valid=False, error="Desired dimensions must be greater than zero")
    return CutValidationResult(is_valid=True)


def slab_remnants_for_standard_sizes(requested_width_cm: float, requested_length_cm: float,
                                     standard_sizes: List[StandardSlabSize],
                                     ids: Optional[IdSequence] = None) -> List[RemnantPiece]:
    """
    Remnants left when each standard slab size is trimmed to the requested size.

    Sizes that need no cut, or that are degenerate, contribute nothing. Each
    remnant carries the quantity of its standard size.
    """
    ids = ids or IdSequence()
    pieces: List[RemnantPiece] = []

    for size in standard_sizes:
        if size.width_cm <= 0 or size.length_cm <= 0 or size.quantity <= 0:
            continue
        needs_longitudinal = 0 < requested_width_cm < size.width_cm
        needs_cross = 0 < requested_length_cm < size.length_cm
        if not needs_longitudinal and not needs_cross:
            continue

        remaining_width = size.width_cm - requested_width_cm
        remaining_length = size.length_cm - requested_length_cm

        if needs_longitudinal and requested_length_cm > 0:
            length_m = requested_length_cm / CM_PER_M
            pieces.append(RemnantPiece(
                id=ids.next("remaining_slab_width"),
                width=remaining_width,
                length=length_m,
                square_meters=square_meters(remaining_width, length_m, size.quantity),
                source_cut_id=ids.next("cut_slab_width"),
                quantity=size.quantity,
            ))
        if needs_cross and requested_width_cm > 0:
            length_m = remaining_length / CM_PER_M
            pieces.append(RemnantPiece(
                id=ids.next("remaining_slab_length"),
                width=requested_width_cm,
                length=length_m,
                square_meters=square_meters(requested_width_cm, length_m, size.quantity),
                source_cut_id=ids.next("cut_slab_length"),
                quantity=size.quantity,
            ))
        if needs_longitudinal and needs_cross:
            length_m = remaining_length / CM_PER_M
            pieces.append(RemnantPiece(
                id=ids.next("remaining_slab_corner"),
                width=remaining_width,
                length=length_m,
                square_meters=square_meters(remaining_width, length_m, size.quantity),
                source_cut_id=ids.next("cut_slab_corner"),
                quantity=size.quantity,
            ))

    return pieces
