"""
Calculator registry: maps stock kinds to line-item calculator classes.
"""

from ..models import StockKind
from .base import BaseCalculator
from .long_stone import LongStoneCalculator
from .slab_stone import SlabStoneCalculator
from .stair_part import StairPartCalculator

CALCULATOR_REGISTRY: dict[str, type] = {
    StockKind.LONGITUDINAL.value: LongStoneCalculator,
    StockKind.SLAB.value: SlabStoneCalculator,
    StockKind.STAIR.value: StairPartCalculator,
}


def _key(kind) -> str:
    return kind.value if isinstance(kind, StockKind) else str(kind)


def get_calculator(kind, price_table=None) -> BaseCalculator:
    """Returns an instance of the calculator for a stock kind, or raises ValueError."""
    key = _key(kind)
    if key not in CALCULATOR_REGISTRY:
        raise ValueError(
            f"No calculator registered for stock kind: {key}. "
            f"Available: {list(CALCULATOR_REGISTRY.keys())}"
        )
    return CALCULATOR_REGISTRY[key](price_table=price_table)


def has_calculator(kind) -> bool:
    """Check if a calculator exists for a stock kind."""
    return _key(kind) in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered stock kinds."""
    return list(CALCULATOR_REGISTRY.keys())
