"""
Abstract base class for all line-item calculators.

Input: the raw fields of one contract line item (form values, often strings)
plus the caller's remnant pool.
Output: a JSON-serialisable line-item dict (see make_line_item).
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from pydantic import ValidationError

from ..config import settings
from ..models import LengthUnit
from ..schemas import RemnantPiece
from .pricing import CuttingPriceTable
from .remnant_pool import normalize_remnants
from .units import IdSequence

logger = logging.getLogger(__name__)


class BaseCalculator(ABC):
    """All line-item calculators inherit from this."""

    stock_kind = None

    def __init__(self, price_table: Optional[Callable[[str], Optional[float]]] = None):
        self.price_table = price_table or CuttingPriceTable()

    @abstractmethod
    def calculate(self, fields: dict, remnant_pool: Optional[List[RemnantPiece]] = None,
                  ids: Optional[IdSequence] = None) -> dict:
        """
        Takes the line-item fields and the current remnant pool.
        Pass `ids` for reproducible piece ids.
        Returns a line-item dict built with make_line_item().
        """
        pass

    # --- Parsing helpers. Bad user input falls back to the default. ---

    def parse_number(self, value, default: float = 0.0) -> float:
        """Parse a numeric value from user input. Accepts a decimal comma."""
        if value is None:
            return default
        try:
            return float(str(value).strip().replace(",", "."))
        except (ValueError, TypeError):
            return default

    def parse_int(self, value, default: int = 0) -> int:
        """Parse an integer from user input."""
        if value is None:
            return default
        try:
            return int(float(str(value).strip().replace(",", ".")))
        except (ValueError, TypeError, OverflowError):
            return default

    def parse_unit(self, value, default: LengthUnit = LengthUnit.M) -> LengthUnit:
        if value is None:
            return default
        try:
            return LengthUnit(str(value).strip().lower())
        except ValueError:
            return default

    def parse_bool(self, value, default: bool = False) -> bool:
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off", ""):
            return False
        return default

    def parse_pool(self, remnant_pool) -> List[RemnantPiece]:
        """
        Accept RemnantPiece objects or their dict form (as stored in session state).
        Entries that cannot be read as a remnant are skipped, never raised.
        """
        pieces = []
        for index, raw in enumerate(remnant_pool or []):
            if isinstance(raw, RemnantPiece):
                pieces.append(raw)
                continue
            try:
                pieces.append(RemnantPiece.model_validate(self._clamp_stored_remnant(raw, index)))
            except (ValidationError, TypeError) as e:
                logger.warning("Skipping unreadable remnant at pool index %d: %s", index, e)
        return normalize_remnants(pieces)

    def _clamp_stored_remnant(self, raw, index: int) -> dict:
        """Negative dimensions become 0 and a missing id gets a placeholder, so sanitising can run."""
        if not isinstance(raw, dict):
            raise TypeError("expected a dict, got %s" % type(raw).__name__)
        data = dict(raw)
        if not data.get("id"):
            data["id"] = "pool_%d" % index
        data["id"] = str(data["id"])
        data["source_cut_id"] = str(data.get("source_cut_id") or "")
        for key in ("width", "length"):
            if key in data:
                data[key] = max(0.0, self.parse_number(data[key]))
        if "quantity" in data:
            data["quantity"] = max(0, self.parse_int(data["quantity"]))
        return data

    # --- Rates ---

    def longitudinal_rate(self, fields: dict) -> float:
        """Per-metre longitudinal rate: explicit field, then price table, then settings."""
        explicit = self.parse_number(fields.get("longitudinal_rate"), default=-1.0)
        if explicit >= 0:
            return explicit
        price = self.price_table(settings.LONGITUDINAL_CUT_CODE)
        return price if price is not None else settings.DEFAULT_LONGITUDINAL_RATE

    def cross_rate(self, fields: dict) -> float:
        """Per-metre cross rate. Falls back to the longitudinal rate when the table has no cross entry."""
        explicit = self.parse_number(fields.get("cross_rate"), default=-1.0)
        if explicit >= 0:
            return explicit
        price = self.price_table(settings.CROSS_CUT_CODE)
        if price is not None:
            return price
        price = self.price_table(settings.LONGITUDINAL_CUT_CODE)
        return price if price is not None else settings.DEFAULT_CROSS_RATE

    def mandatory_settings(self, fields: dict, default_on: bool = False):
        """(is_mandatory, percentage) for a line item."""
        is_mandatory = self.parse_bool(fields.get("is_mandatory"), default=default_on)
        percentage = self.parse_number(fields.get("mandatory_percentage"),
                                       default=settings.MANDATORY_PERCENTAGE_DEFAULT)
        return is_mandatory, percentage

    # --- Output ---

    def dump(self, models) -> list:
        return [m.model_dump(mode="json") for m in models]

    def make_line_item(self, square_meters: float, pricing_square_meters: float,
                       price: dict, cutting_cost: float, billable_cutting_cost: float,
                       remnants: list, cut_records: list, used_remnants: list = None,
                       updated_pool: list = None, assumptions: list = None,
                       **extras) -> dict:
        """Build the line-item dict. `price` is the breakdown from pricing.final_price()."""
        item = {
            "stock_kind": self.stock_kind.value if self.stock_kind else None,
            "square_meters": round(square_meters, 4),
            "pricing_square_meters": round(pricing_square_meters, 4),
            "base_price": round(price["original_price"], 2),
            "mandatory_increase": round(price["mandatory_increase"], 2),
            "cutting_cost": round(cutting_cost, 2),
            "billable_cutting_cost": round(billable_cutting_cost, 2),
            "total_price": round(price["total_with_cutting"], 2),
            "remnants": self.dump(remnants),
            "cut_records": self.dump(cut_records),
            "used_remnants": self.dump(used_remnants or []),
            "updated_pool": self.dump(updated_pool or []),
            "assumptions": assumptions or [],
        }
        item.update(extras)
        return item
