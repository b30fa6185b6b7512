"""
Long stone line item: a strip of fixed width cut down along its length.

Input fields: original_width (cm), width (desired, cm), length, length_unit,
quantity, price_per_square_meter, is_mandatory, mandatory_percentage,
longitudinal_rate (optional override of the price table).
Output: line-item dict with one cut record and its remnant.
"""

import logging
from typing import List, Optional

from ..models import StockKind
from ..schemas import StockItem, RemnantPiece
from .base import BaseCalculator
from .linear_cut import cut_linear
from .pricing import base_price, final_price, billable_cutting_cost
from .units import IdSequence, square_meters

logger = logging.getLogger(__name__)


class LongStoneCalculator(BaseCalculator):

    stock_kind = StockKind.LONGITUDINAL

    def calculate(self, fields: dict, remnant_pool: Optional[List[RemnantPiece]] = None,
                  ids: Optional[IdSequence] = None) -> dict:
        pool = self.parse_pool(remnant_pool)
        assumptions = []

        original_width = self.parse_number(fields.get("original_width"))
        desired_width = self.parse_number(fields.get("width"), default=original_width)
        length_unit = self.parse_unit(fields.get("length_unit"))
        quantity = self.parse_int(fields.get("quantity"), default=1)
        price_per_m2 = self.parse_number(fields.get("price_per_square_meter"))
        rate = self.longitudinal_rate(fields)
        is_mandatory, percentage = self.mandatory_settings(fields)

        stock = StockItem(width=original_width,
                          length=self.parse_number(fields.get("length")),
                          length_unit=length_unit,
                          quantity=quantity)
        result = cut_linear(stock, desired_width, rate, quantity=quantity, ids=ids)

        piece_sqm = square_meters(result.cut.cut_width, stock.length_m, quantity)
        # The whole strip is sold; the cut-off part goes back as a remnant.
        pricing_sqm = square_meters(original_width, stock.length_m, quantity) \
            if original_width > 0 else piece_sqm
        if result.remaining_width > 0:
            assumptions.append("Priced on the full strip width (%g cm); %g cm returned as remnant." % (
                original_width, result.remaining_width))

        billable = billable_cutting_cost(result.cutting_cost, is_mandatory, percentage)
        price = final_price(base_price(pricing_sqm, price_per_m2), is_mandatory, percentage, billable)

        remnants = [result.remnant] if result.remnant.is_available else []
        logger.debug("Long stone: %s cm -> %s cm x %s m, qty %d, cut cost %.2f",
                     original_width, result.cut.cut_width, stock.length_m, quantity, result.cutting_cost)

        return self.make_line_item(
            square_meters=piece_sqm,
            pricing_square_meters=pricing_sqm,
            price=price,
            cutting_cost=result.cutting_cost,
            billable_cutting_cost=billable,
            remnants=remnants,
            cut_records=[result.cut],
            updated_pool=pool + remnants,
            assumptions=assumptions,
            remaining_width=result.remaining_width,
        )
