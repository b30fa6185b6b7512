"""
Data model for the cutting engine.

Widths are centimetres; lengths of remnants, partitions, slices and edge
demands are metres. Square metres are width_cm * length_m / 100.
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict

from .models import Edge, CutOrientation, LengthUnit, EDGE_PRIORITY


class StockItem(BaseModel):
    width: float                        # cm
    length: float
    length_unit: LengthUnit = LengthUnit.M
    quantity: int = 1

    class Config:
        frozen = True

    @property
    def length_m(self) -> float:
        if self.length_unit == LengthUnit.CM:
            return self.length / 100.0
        return self.length


class Position(BaseModel):
    start_width: float = 0.0            # cm
    start_length: float = 0.0           # m


class RemnantPiece(BaseModel):
    id: str
    width: float = Field(ge=0)          # cm
    length: float = Field(ge=0)         # m
    square_meters: Optional[float] = None
    is_available: bool = True
    source_cut_id: str = ""
    position: Optional[Position] = None
    quantity: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def _fill_square_meters(self):
        if self.square_meters is None:
            self.square_meters = self.width * self.length * self.quantity / 100.0
        return self


class CutRecord(BaseModel):
    id: str
    original_width: float
    cut_width: float
    remaining_width: float
    length: float                       # cut line length, cm
    cutting_cost: float
    cutting_cost_per_meter: float
    orientation: Optional[CutOrientation] = None

    class Config:
        frozen = True


class EdgeDemand(BaseModel):
    edge: Edge
    length_m: float = Field(gt=0)
    layers_needed: int = Field(ge=0)


class EdgeSelection(BaseModel):
    front: bool = False
    back: bool = False
    left: bool = False
    right: bool = False
    perimeter: bool = False

    @model_validator(mode="after")
    def _perimeter_is_exclusive(self):
        if self.perimeter and (self.front or self.back or self.left or self.right):
            raise ValueError("perimeter cannot be combined with front/back/left/right edges")
        return self

    @classmethod
    def of(cls, *edges) -> "EdgeSelection":
        """Build a selection from edge names or Edge members."""
        return cls(**{Edge(e).value: True for e in edges})

    def selected(self) -> List[Edge]:
        """Selected edges in priority order."""
        chosen = [e for e in Edge if getattr(self, e.value)]
        return sorted(chosen, key=lambda e: EDGE_PRIORITY[e])

    @property
    def has_front_or_back(self) -> bool:
        return self.front or self.back

    @property
    def has_left_or_right(self) -> bool:
        return self.left or self.right


class Partition(BaseModel):
    id: str
    width: float                        # cm
    length: float                       # m
    square_meters: Optional[float] = None
    position: Optional[Position] = None
    validation_error: Optional[str] = None

    @model_validator(mode="after")
    def _fill_square_meters(self):
        if self.square_meters is None:
            self.square_meters = max(self.width, 0.0) * max(self.length, 0.0) / 100.0
        return self

    @property
    def is_valid_geometry(self) -> bool:
        return self.width > 0 and self.length > 0


class WidthSlice(BaseModel):
    start_width: float                  # cm
    width: float                        # cm
    start_length: float = 0.0           # m
    remaining_length: float             # m


class StandardSlabSize(BaseModel):
    length_cm: float
    width_cm: float
    quantity: int = 1


# --- Results ---

class LinearCutResult(BaseModel):
    cut: CutRecord
    remnant: RemnantPiece
    cutting_cost: float
    remaining_width: float


class SlabCutResult(BaseModel):
    cuts: List[CutRecord] = []
    remnants: List[RemnantPiece] = []
    total_cutting_cost: float = 0.0
    longitudinal_cutting_cost: float = 0.0
    cross_cutting_cost: float = 0.0
    needs_longitudinal_cut: bool = False
    needs_cross_cut: bool = False
    remaining_width: float = 0.0        # cm
    remaining_length: float = 0.0       # cm


class UnfulfilledDemand(BaseModel):
    edge: Edge
    length_m: float
    quantity: int


class AllocationResult(BaseModel):
    from_remnants: int = 0
    from_new_stock: int = 0
    cutting_cost_from_new: float = 0.0
    used_remnants: List[RemnantPiece] = []
    updated_pool: List[RemnantPiece] = []
    unfulfilled: List[UnfulfilledDemand] = []
    square_meters_from_remnants: float = 0.0
    square_meters_from_new: float = 0.0
    total_demand: int = 0


class PackingResult(BaseModel):
    placed: List[Partition] = []
    free_slices: List[WidthSlice] = []


class PartitionValidationResult(BaseModel):
    is_valid: bool
    error: Optional[str] = None
    partition_errors: Dict[str, str] = {}
    validated_partitions: List[Partition] = []


class CutValidationResult(BaseModel):
    is_valid: bool
    error: Optional[str] = None
