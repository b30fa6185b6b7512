"""
Partition packer: place user-ordered rectangles into one stock area.

The operator cuts partitions in the order they were entered, so the packer
never reorders them. Free space is tracked as vertical width slices: each slice
is a lane [start_width, start_width + width) whose material before
start_length is already used. A partition goes into the first lane (left to
right) that is wide and long enough. A partial-width placement splits the lane:
the used part advances in length, the rest keeps its full remaining length.

Widths are cm, lengths m.
"""

import logging
from typing import List, Optional

from ..config import settings
from ..schemas import Partition, Position, WidthSlice, PackingResult, RemnantPiece
from .units import IdSequence, square_meters, format_number

logger = logging.getLogger(__name__)


def _fits(partition: Partition, slice_: WidthSlice, eps: float) -> bool:
    return (partition.width <= slice_.width + eps
            and partition.length <= slice_.remaining_length + eps)


def _unplaced_reason(partition: Partition, slices: List[WidthSlice], eps: float) -> str:
    """Explain a failed placement against the roomiest remaining slice."""
    if not slices:
        return "No free area left for this partition"

    best = None
    for slice_ in slices:
        if _fits(partition, slice_, eps):
            best = slice_
            break
        if best is None or slice_.width * slice_.remaining_length > best.width * best.remaining_length:
            best = slice_

    if partition.width > best.width + eps:
        return "Partition width (%scm) exceeds the remaining width (%scm)" % (
            format_number(partition.width), format_number(best.width))
    if partition.length > best.remaining_length + eps:
        return "Partition length (%sm) exceeds the remaining length (%sm)" % (
            format_number(partition.length), format_number(best.remaining_length))
    return "Partition cannot fit in the remaining area"


def _place(partition: Partition, slices: List[WidthSlice], eps: float) -> Optional[Position]:
    """Place into the first fitting slice, updating `slices` in place."""
    for i, slice_ in enumerate(slices):
        if not _fits(partition, slice_, eps):
            continue

        position = Position(start_width=slice_.start_width, start_length=slice_.start_length)

        if abs(partition.width - slice_.width) <= eps:
            slice_.remaining_length -= partition.length
            slice_.start_length += partition.length
            if slice_.remaining_length <= eps:
                slices.pop(i)
            return position

        remainder = WidthSlice(
            start_width=slice_.start_width + partition.width,
            width=slice_.width - partition.width,
            start_length=slice_.start_length,
            remaining_length=slice_.remaining_length,
        )
        slice_.width = partition.width
        slice_.remaining_length -= partition.length
        slice_.start_length += partition.length

        slices.insert(i + 1, remainder)
        if slice_.remaining_length <= eps:
            slices.pop(i)
        slices.sort(key=lambda s: s.start_width)
        return position

    return None


def pack(partitions: List[Partition], area_width: float, area_length: float) -> PackingResult:
    """
    Place partitions in caller order into an area_width (cm) x area_length (m) stock.

    Returned partitions keep the input order. Placed ones get a position,
    unplaceable ones a validation_error; partitions with a non-positive
    dimension are passed through untouched.
    """
    eps = settings.LENGTH_EPSILON
    slices: List[WidthSlice] = []
    if area_width > 0 and area_length > 0:
        slices.append(WidthSlice(
            start_width=0.0, width=area_width, start_length=0.0, remaining_length=area_length,
        ))

    placed: List[Partition] = []
    for partition in partitions:
        if not partition.is_valid_geometry:
            placed.append(partition)
            continue

        position = _place(partition, slices, eps)
        if position is not None:
            placed.append(partition.model_copy(update={
                "position": position, "validation_error": None,
            }))
            continue

        reason = _unplaced_reason(partition, slices, eps)
        logger.warning("Partition %s not placed: %s", partition.id, reason)
        placed.append(partition.model_copy(update={
            "position": None, "validation_error": reason,
        }))

    free_slices = [s for s in slices if s.width > eps and s.remaining_length > eps]
    return PackingResult(placed=placed, free_slices=free_slices)


def remaining_areas(partitions: List[Partition], area_width: float, area_length: float,
                    ids: Optional[IdSequence] = None) -> List[RemnantPiece]:
    """Free area left after packing, as available remnants positioned in the stock."""
    ids = ids or IdSequence()

    if not any(p.is_valid_geometry for p in partitions):
        if area_width <= 0 or area_length <= 0:
            return []
        return [RemnantPiece(
            id=ids.next("remaining_all"),
            width=area_width,
            length=area_length,
            square_meters=square_meters(area_width, area_length),
            is_available=True,
            position=Position(start_width=0.0, start_length=0.0),
        )]

    result = pack(partitions, area_width, area_length)
    return [
        RemnantPiece(
            id=ids.next("remaining_slice"),
            width=s.width,
            length=s.remaining_length,
            square_meters=square_meters(s.width, s.remaining_length),
            is_available=True,
            position=Position(start_width=s.start_width, start_length=s.start_length),
        )
        for s in result.free_slices
    ]
