"""
Slab line item: a full slab trimmed on both axes.

Input fields: stock_length, stock_width (cm), length, width (cm), length_unit,
quantity, price_per_square_meter, cutting_mode (line_based | per_square_meter),
cutting_price_per_square_meter, longitudinal_cut_meters, cross_cut_meters,
is_mandatory, mandatory_percentage, longitudinal_rate, cross_rate.
"""

import logging
from typing import List, Optional

from ..models import LengthUnit, StockKind, SlabCuttingMode
from ..schemas import RemnantPiece
from .base import BaseCalculator
from .pricing import base_price, final_price, billable_cutting_cost
from .slab_cut import cut_slab, validate_cut_dimensions
from .units import IdSequence, square_meters_from_dimensions

logger = logging.getLogger(__name__)


class SlabStoneCalculator(BaseCalculator):

    stock_kind = StockKind.SLAB

    def _cutting_mode(self, value) -> SlabCuttingMode:
        try:
            return SlabCuttingMode(str(value).strip().lower())
        except ValueError:
            return SlabCuttingMode.LINE_BASED

    def _optional_meters(self, value) -> Optional[float]:
        meters = self.parse_number(value, default=-1.0)
        return meters if meters >= 0 else None

    def calculate(self, fields: dict, remnant_pool: Optional[List[RemnantPiece]] = None,
                  ids: Optional[IdSequence] = None) -> dict:
        pool = self.parse_pool(remnant_pool)
        assumptions = []

        length_unit = self.parse_unit(fields.get("length_unit"))
        stock_length = self.parse_number(fields.get("stock_length"))
        stock_width = self.parse_number(fields.get("stock_width"))
        desired_length = self.parse_number(fields.get("length"), default=stock_length)
        desired_width = self.parse_number(fields.get("width"), default=stock_width)
        quantity = self.parse_int(fields.get("quantity"), default=1)
        price_per_m2 = self.parse_number(fields.get("price_per_square_meter"))
        mode = self._cutting_mode(fields.get("cutting_mode", SlabCuttingMode.LINE_BASED.value))
        is_mandatory, percentage = self.mandatory_settings(fields)

        check = validate_cut_dimensions(stock_width, stock_length, desired_width, desired_length,
                                        original_length_unit=length_unit,
                                        desired_length_unit=length_unit)
        if not check.is_valid:
            logger.info("Slab line item has invalid dimensions: %s", check.error)
            assumptions.append(check.error)

        if mode == SlabCuttingMode.PER_SQUARE_METER:
            longitudinal_rate = cross_rate = 0.0
        else:
            longitudinal_rate = self.longitudinal_rate(fields)
            cross_rate = self.cross_rate(fields)

        result = cut_slab(
            stock_length, stock_width, desired_length, desired_width,
            longitudinal_rate=longitudinal_rate,
            cross_rate=cross_rate,
            quantity=quantity,
            length_unit=length_unit,
            width_unit=LengthUnit.CM,
            longitudinal_cut_meters=self._optional_meters(fields.get("longitudinal_cut_meters")),
            cross_cut_meters=self._optional_meters(fields.get("cross_cut_meters")),
            ids=ids,
        )

        piece_length = min(desired_length, stock_length) if desired_length > 0 else stock_length
        piece_width = min(desired_width, stock_width) if desired_width > 0 else stock_width
        piece_sqm = square_meters_from_dimensions(
            max(piece_length, 0.0), max(piece_width, 0.0), length_unit, LengthUnit.CM, max(quantity, 0))

        cutting_cost = result.total_cutting_cost
        if mode == SlabCuttingMode.PER_SQUARE_METER:
            cutting_cost = 0.0
            if result.needs_longitudinal_cut or result.needs_cross_cut:
                rate_m2 = self.parse_number(fields.get("cutting_price_per_square_meter"))
                cutting_cost = rate_m2 * piece_sqm
                assumptions.append("Cutting billed per square metre of finished piece.")

        billable = billable_cutting_cost(cutting_cost, is_mandatory, percentage)
        price = final_price(base_price(piece_sqm, price_per_m2), is_mandatory, percentage, billable)

        return self.make_line_item(
            square_meters=piece_sqm,
            pricing_square_meters=piece_sqm,
            price=price,
            cutting_cost=cutting_cost,
            billable_cutting_cost=billable,
            remnants=result.remnants,
            cut_records=result.cuts,
            updated_pool=pool + result.remnants,
            assumptions=assumptions,
            cutting_mode=mode.value,
            longitudinal_cutting_cost=round(result.longitudinal_cutting_cost, 2),
            cross_cutting_cost=round(result.cross_cutting_cost, 2),
            validation_error=check.error,
        )
