"""
Stair part line item: treads, risers and landings, with optional layer strips
and edge tooling.

Input fields:
  part                      tread | riser | landing
  length, length_unit       run of the part (along the nosing for treads/risers)
  width_cm                  depth of the finished part
  stone_width_cm            width of the stone it is cut from (default width_cm)
  standard_length           stock length the stone is bought in (same unit as length)
  quantity
  price_per_square_meter
  is_mandatory, mandatory_percentage
  layer_edges, layer_width_cm, layers_per_unit, layer_price_per_square_meter
  tools                     list of {edges, price_per_meter}
  tool_edges, tool_price_per_meter   single-tool shorthand
  longitudinal_rate, cross_rate

Several parts are nested across the stone width when they fit, so the stone
count is ceil(quantity / pieces_per_stone). Risers are priced on their actual
length; treads and landings on the standard stock length.

Layer strips come from the caller's remnant pool first; the returned
updated_pool is what the next line item must receive.
"""

import logging
import math
from typing import List, Optional, Tuple

from pydantic import ValidationError

from ..models import Edge, LengthUnit, StairPart, StockKind, MANDATORY_BY_DEFAULT, STEP_EDGES
from ..schemas import EdgeSelection, RemnantPiece
from .base import BaseCalculator
from .edge_demand import resolve_edge_demands, layer_square_meters, tool_meters
from .pricing import base_price, final_price, billable_cutting_cost
from .remnant_allocator import allocate
from .slab_cut import cut_slab
from .units import IdSequence, to_meters, square_meters, CM_PER_M

logger = logging.getLogger(__name__)


class StairPartCalculator(BaseCalculator):

    stock_kind = StockKind.STAIR

    def parse_part(self, value) -> StairPart:
        try:
            return StairPart(str(value).strip().lower())
        except ValueError:
            return StairPart.TREAD

    def parse_edges(self, value, part: StairPart = StairPart.LANDING,
                    problems: Optional[List[str]] = None) -> Optional[EdgeSelection]:
        """
        Edge selection from a list of names, a comma separated string or a
        {edge: bool} dict. None when nothing usable is selected.

        Never raises. Unknown names are ignored, edges that do not apply to a
        tread or riser are dropped, and perimeter combined with other edges
        keeps only the perimeter loop. Each correction is appended to `problems`.
        """
        if problems is None:
            problems = []
        if not value:
            return None
        if isinstance(value, dict):
            names = [k for k, v in value.items() if self.parse_bool(v)]
        elif isinstance(value, str):
            names = [n.strip() for n in value.split(",")]
        elif isinstance(value, (list, tuple, set)):
            names = list(value)
        else:
            problems.append("Ignoring edge selection %r" % (value,))
            return None

        edges = []
        for name in names:
            try:
                edge = Edge(str(name).strip().lower())
            except ValueError:
                logger.debug("Ignoring unknown edge %r", name)
                continue
            if edge not in edges:
                edges.append(edge)

        if part != StairPart.LANDING:
            dropped = [e.value for e in edges if e not in STEP_EDGES]
            if dropped:
                problems.append("Edges %s do not apply to a %s and were ignored" % (
                    ", ".join(dropped), part.value))
                edges = [e for e in edges if e in STEP_EDGES]
        elif Edge.PERIMETER in edges and len(edges) > 1:
            problems.append("Perimeter cannot be combined with other edges; using the perimeter only")
            edges = [Edge.PERIMETER]

        if not edges:
            return None
        try:
            return EdgeSelection.of(*edges)
        except ValidationError as e:
            problems.append("Invalid edge selection: %s" % e.errors()[0].get("msg", ""))
            return None

    def parse_tools(self, fields: dict, part: StairPart,
                    problems: List[str]) -> List[Tuple[EdgeSelection, float]]:
        """
        Edge tools as (edges, price per metre). Reads the `tools` list of
        {edges, price_per_meter} dicts plus the single-tool shorthand
        tool_edges / tool_price_per_meter.
        """
        raw_tools = fields.get("tools") or []
        if isinstance(raw_tools, dict):
            raw_tools = [raw_tools]
        if not isinstance(raw_tools, (list, tuple)):
            problems.append("Ignoring tools field that is not a list")
            raw_tools = []
        raw_tools = list(raw_tools)
        if fields.get("tool_edges"):
            raw_tools.append({"edges": fields.get("tool_edges"),
                              "price_per_meter": fields.get("tool_price_per_meter")})

        tools = []
        for raw in raw_tools:
            if not isinstance(raw, dict):
                problems.append("Ignoring tool entry %r" % (raw,))
                continue
            edges = self.parse_edges(raw.get("edges"), part, problems)
            if edges is None:
                continue
            tools.append((edges, self.parse_number(raw.get("price_per_meter"))))
        return tools

    def stone_usage(self, stone_width_cm: float, width_cm: float, quantity: int) -> dict:
        """How many parts one stone yields across its width, and how many stones are needed."""
        pieces_per_stone = 1
        if stone_width_cm > 0 and width_cm > 0:
            pieces_per_stone = max(1, int(math.floor(stone_width_cm / width_cm)))
        leftover_width = max(0.0, stone_width_cm - pieces_per_stone * width_cm)
        return {
            "pieces_per_stone": pieces_per_stone,
            "leftover_width": leftover_width,
            "base_stone_quantity": int(math.ceil(quantity / pieces_per_stone)) if quantity > 0 else 0,
        }

    def calculate(self, fields: dict, remnant_pool: Optional[List[RemnantPiece]] = None,
                  ids: Optional[IdSequence] = None) -> dict:
        ids = ids or IdSequence()
        pool = self.parse_pool(remnant_pool)
        assumptions = []

        part = self.parse_part(fields.get("part"))
        length_unit = self.parse_unit(fields.get("length_unit"))
        length_m = to_meters(self.parse_number(fields.get("length")), length_unit)
        width_cm = self.parse_number(fields.get("width_cm"))
        width_m = width_cm / CM_PER_M
        stone_width_cm = self.parse_number(fields.get("stone_width_cm"), default=width_cm)
        quantity = self.parse_int(fields.get("quantity"), default=1)
        price_per_m2 = self.parse_number(fields.get("price_per_square_meter"))
        is_mandatory, percentage = self.mandatory_settings(
            fields, default_on=part in MANDATORY_BY_DEFAULT)

        # --- 1. Stone usage and pricing area ---
        usage = self.stone_usage(stone_width_cm, width_cm, quantity)
        stone_count = usage["base_stone_quantity"]

        standard_length_m = to_meters(self.parse_number(fields.get("standard_length")), length_unit)
        pricing_length_m = length_m
        if part != StairPart.RISER and standard_length_m >= length_m:
            pricing_length_m = standard_length_m
        elif part != StairPart.RISER and standard_length_m > 0:
            assumptions.append("Standard length shorter than the part; priced on the actual length.")

        piece_sqm = length_m * width_m * max(quantity, 0)
        pricing_sqm = piece_sqm
        if pricing_length_m > 0 and stone_width_cm > 0 and stone_count > 0:
            pricing_sqm = square_meters(stone_width_cm, pricing_length_m, stone_count)
        if usage["pieces_per_stone"] > 1:
            assumptions.append("%d parts nested across each %g cm stone." % (
                usage["pieces_per_stone"], stone_width_cm))

        # --- 2. Stone cutting ---
        longitudinal_rate = self.longitudinal_rate(fields)
        stone_cut = cut_slab(
            pricing_length_m, stone_width_cm, length_m, width_cm,
            longitudinal_rate=longitudinal_rate,
            cross_rate=self.cross_rate(fields),
            quantity=stone_count,
            length_unit=LengthUnit.M,
            width_unit=LengthUnit.CM,
            longitudinal_cut_meters=length_m,
            cross_cut_meters=width_m,
            ids=ids,
        )
        stone_remnants = self._stone_remnants(
            stone_cut, usage, pricing_length_m, stone_width_cm, length_m, width_cm, quantity, ids)

        # --- 3. Layers ---
        layer_edges = self.parse_edges(fields.get("layer_edges"), part, assumptions)
        layer_width_cm = self.parse_number(fields.get("layer_width_cm"))
        layers_per_unit = self.parse_int(fields.get("layers_per_unit"), default=1)
        layer_price_m2 = self.parse_number(fields.get("layer_price_per_square_meter"),
                                           default=price_per_m2)
        layer = {
            "demands": [],
            "from_remnants": 0,
            "from_new_stock": 0,
            "square_meters": 0.0,
            "square_meters_from_remnants": 0.0,
            "square_meters_from_new": 0.0,
            "material_price": 0.0,
            "cutting_cost": 0.0,
            "unfulfilled": [],
        }
        used_remnants = []
        pool_after = pool
        layer_material_price = 0.0
        layer_cutting_cost = 0.0

        if layer_edges is not None and layer_width_cm > 0:
            layer_width_m = layer_width_cm / CM_PER_M
            demands = resolve_edge_demands(part, length_m, width_m, layer_width_m, layer_edges,
                                           layers_per_unit, quantity)
            allocation = allocate(demands, pool, layer_width_cm, ids=ids)
            used_remnants = allocation.used_remnants
            pool_after = allocation.updated_pool

            # Remnant strips were paid for with their parent item.
            layer_material_price = base_price(allocation.square_meters_from_new, layer_price_m2)
            new_strip_meters = sum(u.length_m * u.quantity for u in allocation.unfulfilled)
            if longitudinal_rate > 0:
                layer_cutting_cost = new_strip_meters * longitudinal_rate

            layer.update({
                "demands": self.dump(demands),
                "from_remnants": allocation.from_remnants,
                "from_new_stock": allocation.from_new_stock,
                "square_meters": round(layer_square_meters(
                    part, length_m, width_m, layer_width_m, layer_edges, layers_per_unit, quantity), 4),
                "square_meters_from_remnants": round(allocation.square_meters_from_remnants, 4),
                "square_meters_from_new": round(allocation.square_meters_from_new, 4),
                "material_price": round(layer_material_price, 2),
                "cutting_cost": round(layer_cutting_cost, 2),
                "unfulfilled": self.dump(allocation.unfulfilled),
            })
            if allocation.from_remnants:
                assumptions.append("%d of %d layer strips cut from remnants." % (
                    allocation.from_remnants, allocation.total_demand))

        # --- 4. Tools ---
        tools = []
        meters = 0.0
        tool_cost = 0.0
        for edges, price_per_meter in self.parse_tools(fields, part, assumptions):
            tool_m = tool_meters(part, length_m, width_m, edges, quantity)
            cost = tool_m * price_per_meter
            meters += tool_m
            tool_cost += cost
            tools.append({
                "edges": [e.value for e in edges.selected()],
                "meters": round(tool_m, 4),
                "price_per_meter": price_per_meter,
                "cost": round(cost, 2),
            })

        # --- 5. Price ---
        cutting_cost = stone_cut.total_cutting_cost + layer_cutting_cost
        billable = billable_cutting_cost(cutting_cost, is_mandatory, percentage)
        base = base_price(pricing_sqm, price_per_m2) + layer_material_price
        price = final_price(base, is_mandatory, percentage, billable + tool_cost)

        logger.debug("Stair %s: %d part(s) from %d stone(s), cutting %.2f, tools %.2f",
                     part.value, quantity, stone_count, cutting_cost, tool_cost)

        return self.make_line_item(
            square_meters=piece_sqm,
            pricing_square_meters=pricing_sqm,
            price=price,
            cutting_cost=cutting_cost,
            billable_cutting_cost=billable,
            remnants=stone_remnants,
            cut_records=stone_cut.cuts,
            used_remnants=used_remnants,
            updated_pool=list(pool_after) + stone_remnants,
            assumptions=assumptions,
            part=part.value,
            is_mandatory=is_mandatory,
            pieces_per_stone=usage["pieces_per_stone"],
            leftover_width=usage["leftover_width"],
            base_stone_quantity=stone_count,
            pricing_length_m=pricing_length_m,
            tool_meters=round(meters, 4),
            tool_cost=round(tool_cost, 2),
            tools=tools,
            layer=layer,
        )

    def _stone_remnants(self, stone_cut, usage: dict, stock_length_m: float,
                        stone_width_cm: float, length_m: float, width_cm: float,
                        quantity: int, ids: IdSequence) -> List[RemnantPiece]:
        """
        Remnants of the stair stones. With one part per stone these are the
        slab cut's remnants. With nesting, the side strip is only the width
        left after all nested parts, and unused nested slots of the last stone
        come back as spare pieces.
        """
        pieces_per_stone = usage["pieces_per_stone"]
        if pieces_per_stone == 1:
            return list(stone_cut.remnants)

        source_cut_id = stone_cut.cuts[0].id if stone_cut.cuts else ""
        nested = cut_slab(stock_length_m, stone_width_cm, length_m, width_cm * pieces_per_stone,
                          quantity=usage["base_stone_quantity"], ids=ids)
        remnants = [r.model_copy(update={"source_cut_id": source_cut_id}) for r in nested.remnants]

        spare = usage["base_stone_quantity"] * pieces_per_stone - quantity
        if spare > 0 and length_m > 0:
            remnants.append(RemnantPiece(
                id=ids.next("spare_piece"),
                width=width_cm,
                length=length_m,
                square_meters=square_meters(width_cm, length_m, spare),
                is_available=True,
                source_cut_id=source_cut_id,
                quantity=spare,
            ))
        return remnants
