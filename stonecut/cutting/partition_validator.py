"""
Partition validation: bounds, capacity, placement and overlap checks.

Every failure is attached to the partition it concerns; nothing is raised.
The first message recorded for a partition wins, so repeated validation of the
same input always reports the same partitions with the same messages.
"""

import logging
from typing import Dict, List, Optional

from ..config import settings
from ..schemas import Partition, PartitionValidationResult
from .partition_packer import pack
from .units import square_meters, format_number

logger = logging.getLogger(__name__)

OVERLAP_MESSAGE = "Partition overlaps another partition"
UNPLACED_MESSAGE = ("Partition cannot be placed in the available area. "
                    "Reduce its dimensions or remove it.")


def rectangles_overlap(a: Partition, b: Partition) -> bool:
    """Overlap of [start, start + size) rectangles in the (width, length) plane."""
    if a.position is None or b.position is None:
        return False
    a_end_width = a.position.start_width + a.width
    a_end_length = a.position.start_length + a.length
    b_end_width = b.position.start_width + b.width
    b_end_length = b.position.start_length + b.length
    return not (
        a_end_width <= b.position.start_width
        or b_end_width <= a.position.start_width
        or a_end_length <= b.position.start_length
        or b_end_length <= a.position.start_length
    )


def validate_partitions(partitions: List[Partition], area_width: float, area_length: float,
                        available_square_meters: Optional[float] = None) -> PartitionValidationResult:
    """
    Validate partitions against an area_width (cm) x area_length (m) stock.

    available_square_meters defaults to the area of the stock itself.
    """
    if available_square_meters is None:
        available_square_meters = square_meters(area_width, area_length)

    valid = [p for p in partitions if p.is_valid_geometry]
    errors: Dict[str, str] = {}

    if not valid:
        return PartitionValidationResult(
            is_valid=False,
            error="Define at least one partition with valid dimensions",
            partition_errors=errors,
            validated_partitions=list(partitions),
        )

    # (a) Each partition on its own must fit the stock
    for p in valid:
        if p.width > area_width:
            errors.setdefault(p.id, "Width (%scm) exceeds the available width (%scm)" % (
                format_number(p.width), format_number(area_width)))
        if p.length > area_length:
            errors.setdefault(p.id, "Length (%sm) exceeds the available length (%sm)" % (
                format_number(p.length), format_number(area_length)))

    # (b) Capacity: total requested area
    total = sum(p.square_meters for p in valid)
    if total > available_square_meters + settings.AREA_TOLERANCE_M2:
        message = "Total partition area (%s m²) exceeds the available area (%s m²)" % (
            format_number(total), format_number(available_square_meters))
        for p in valid:
            errors.setdefault(p.id, message)
        logger.warning("Partition capacity exceeded: %.4f > %.4f m²", total, available_square_meters)
        return PartitionValidationResult(
            is_valid=False,
            error=message,
            partition_errors=errors,
            validated_partitions=[
                p.model_copy(update={"validation_error": errors.get(p.id)}) for p in partitions
            ],
        )

    # (c) Placement
    placed = pack(valid, area_width, area_length).placed
    for p in placed:
        if p.validation_error:
            errors.setdefault(p.id, p.validation_error)
        if p.position is None:
            errors.setdefault(p.id, UNPLACED_MESSAGE)

    # (d) Overlap between placed rectangles
    positioned = [p for p in placed if p.position is not None]
    for i, first in enumerate(positioned):
        for second in positioned[i + 1:]:
            if rectangles_overlap(first, second):
                errors[first.id] = OVERLAP_MESSAGE
                errors[second.id] = OVERLAP_MESSAGE

    by_id = {p.id: p for p in placed}
    validated = []
    for p in partitions:
        packed = by_id.get(p.id)
        validated.append(p.model_copy(update={
            "validation_error": errors.get(p.id) or (packed.validation_error if packed else None),
            "position": packed.position if packed else None,
        }))

    error = None
    if errors:
        error = "%d partition(s) have problems. Check and correct their dimensions." % len(errors)
    return PartitionValidationResult(
        is_valid=not errors,
        error=error,
        partition_errors=errors,
        validated_partitions=validated,
    )
