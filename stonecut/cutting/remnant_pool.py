"""
Remnant pool hygiene.

Remnant pools come back from the caller's session state (JSON stored with each
contract line item), so pieces may have missing quantities, stale areas or
degenerate geometry. These helpers normalise pieces before allocation and merge
duplicates produced by repeated cuts of the same stock.
"""

import logging
import math
from typing import Dict, List, Tuple

from ..config import settings
from ..schemas import RemnantPiece
from .units import square_meters

logger = logging.getLogger(__name__)


def _as_number(value) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def sanitize_remnant(piece: RemnantPiece) -> RemnantPiece:
    """
    Return a normalised copy: non-negative dimensions, a whole quantity
    (inferred from square_meters when missing), square_meters recomputed, and
    is_available cleared when the geometry cannot be used.
    """
    eps = settings.LENGTH_EPSILON
    width = max(0.0, _as_number(piece.width))
    length = max(0.0, _as_number(piece.length))
    piece_area = square_meters(width, length)
    raw_area = max(0.0, _as_number(piece.square_meters))

    quantity = int(math.floor(_as_number(piece.quantity)))
    if quantity <= 0 and piece_area > eps and raw_area > eps:
        quantity = int(math.floor((raw_area + eps) / piece_area))
    quantity = max(quantity, 0)

    area = piece_area * quantity if quantity > 0 and piece_area > eps else 0.0
    usable = width > eps and length > eps and area > eps and quantity >= 1

    return piece.model_copy(update={
        "width": width,
        "length": length,
        "quantity": quantity,
        "square_meters": area,
        "is_available": bool(piece.is_available) and usable,
    })


def is_usable_remnant(piece: RemnantPiece) -> bool:
    return sanitize_remnant(piece).is_available


def normalize_remnants(pieces: List[RemnantPiece]) -> List[RemnantPiece]:
    return [sanitize_remnant(p) for p in pieces]


def _merge_key(piece: RemnantPiece) -> Tuple:
    start_width = piece.position.start_width if piece.position else 0.0
    start_length = piece.position.start_length if piece.position else 0.0
    return (
        piece.source_cut_id or "",
        round(piece.width, 6),
        round(piece.length, 6),
        round(start_width, 6),
        round(start_length, 6),
    )


def merge_remnants(pieces: List[RemnantPiece]) -> List[RemnantPiece]:
    """Drop unusable pieces and fold identical ones together by summing quantity."""
    merged: Dict[Tuple, RemnantPiece] = {}
    for raw in pieces:
        piece = sanitize_remnant(raw)
        if not piece.is_available:
            continue
        key = _merge_key(piece)
        existing = merged.get(key)
        if existing is None:
            merged[key] = piece
            continue
        merged[key] = sanitize_remnant(existing.model_copy(update={
            "quantity": existing.quantity + piece.quantity,
        }))

    if len(merged) < len(pieces):
        logger.debug("Merged remnant pool from %d to %d pieces", len(pieces), len(merged))
    return list(merged.values())


def consume_remnant(piece: RemnantPiece, quantity: int) -> RemnantPiece:
    """Take `quantity` identical pieces out of a remnant entry. Never goes below zero."""
    remaining = max(0, piece.quantity - max(quantity, 0))
    return piece.model_copy(update={
        "quantity": remaining,
        "square_meters": square_meters(piece.width, piece.length, remaining),
        "is_available": piece.is_available and remaining > 0,
    })


def pool_square_meters(pieces: List[RemnantPiece]) -> float:
    """Total available remnant area."""
    return sum(p.square_meters for p in normalize_remnants(pieces) if p.is_available)
