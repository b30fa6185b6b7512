"""
Cutting price lookup and line-item price arithmetic.

Price table fallback chain:
1. Explicit overrides passed to CuttingPriceTable(...)
2. Prices loaded from settings.CUTTING_PRICES_PATH (JSON {code: price_per_meter})
3. DEFAULT_CUTTING_PRICES below

All cutting prices are per linear metre of cut line.
"""

import json
import logging
from typing import Dict, Optional, Tuple

from ..config import settings

logger = logging.getLogger(__name__)

DEFAULT_CUTTING_PRICES = {
    "LONG": 15000.0,    # longitudinal cut (along the length)
    "CROSS": 25000.0,   # cross cut (across the width)
}


def load_price_file(path: str) -> Dict[str, float]:
    """Read a {code: price} JSON file. Missing or malformed files give an empty table."""
    if not path:
        return {}
    try:
        with open(path) as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not load cutting prices from %s: %s", path, e)
        return {}
    if not isinstance(raw, dict):
        logger.warning("Ignoring cutting price file %s: expected a JSON object", path)
        return {}
    prices = {}
    for code, value in raw.items():
        try:
            prices[str(code).upper()] = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric cutting price for %s", code)
    logger.info("Loaded %d cutting prices from %s", len(prices), path)
    return prices


class CuttingPriceTable:
    """Price per metre by cutting type code, or None when the code is unknown."""

    def __init__(self, overrides: Optional[Dict[str, Optional[float]]] = None,
                 use_defaults: bool = True):
        self._sources: Dict[str, Tuple[Optional[float], str]] = {}
        if use_defaults:
            for code, price in DEFAULT_CUTTING_PRICES.items():
                self._sources[code] = (price, "default")
        for code, price in load_price_file(settings.CUTTING_PRICES_PATH).items():
            self._sources[code] = (price, "price_file")
        for code, price in (overrides or {}).items():
            self._sources[str(code).upper()] = (price, "override")

    def get_price_per_meter(self, code: str) -> Optional[float]:
        if not code:
            return None
        return self._sources.get(code.upper(), (None, ""))[0]

    def get_price_with_source(self, code: str) -> Tuple[Optional[float], str]:
        """Returns (price, source) where source is override / price_file / default / unknown."""
        if not code or code.upper() not in self._sources:
            return None, "unknown"
        return self._sources[code.upper()]

    def __call__(self, code: str) -> Optional[float]:
        return self.get_price_per_meter(code)


def base_price(square_meters: float, price_per_square_meter: float) -> float:
    return square_meters * price_per_square_meter


def apply_mandatory_pricing(price: float, percentage: float) -> float:
    """Add the mandatory markup. Non-positive percentages leave the price unchanged."""
    if percentage <= 0:
        return price
    return price * (1 + percentage / 100.0)


def final_price(base: float, is_mandatory: bool, mandatory_percentage: float,
                cutting_cost: float = 0.0) -> dict:
    """
    Price breakdown for one line item.

    Under mandatory pricing the markup replaces per-metre cutting charges, so
    cutting_cost here must already be the billable amount.
    """
    price = base
    increase = 0.0
    if is_mandatory and mandatory_percentage > 0:
        price = apply_mandatory_pricing(base, mandatory_percentage)
        increase = price - base
    return {
        "original_price": base,
        "final_price": price,
        "mandatory_increase": increase,
        "total_with_cutting": price + cutting_cost,
    }


def is_mandatory_active(is_mandatory: bool, mandatory_percentage: float) -> bool:
    return bool(is_mandatory) and mandatory_percentage > 0


def billable_cutting_cost(cutting_cost: float, is_mandatory: bool,
                          mandatory_percentage: float) -> float:
    """Cutting cost actually charged: zero when absorbed by the mandatory markup."""
    if is_mandatory_active(is_mandatory, mandatory_percentage):
        return 0.0
    return cutting_cost
