import enum


# --- Enums ---

class LengthUnit(str, enum.Enum):
    CM = "cm"
    M = "m"


class Edge(str, enum.Enum):
    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"
    PERIMETER = "perimeter"


class CutOrientation(str, enum.Enum):
    LONGITUDINAL = "longitudinal"
    CROSS = "cross"


class StairPart(str, enum.Enum):
    TREAD = "tread"
    RISER = "riser"
    LANDING = "landing"


class StockKind(str, enum.Enum):
    LONGITUDINAL = "longitudinal"   # long stone strips, cut along the width only
    SLAB = "slab"                   # full slabs, cut along both axes
    STAIR = "stair"                 # stair treads / risers / landings with layers


class SlabCuttingMode(str, enum.Enum):
    LINE_BASED = "line_based"
    PER_SQUARE_METER = "per_square_meter"


# Fixed processing order for edge demands. Deterministic regardless of input order.
EDGE_PRIORITY = {
    Edge.FRONT: 0,
    Edge.BACK: 1,
    Edge.LEFT: 2,
    Edge.RIGHT: 3,
    Edge.PERIMETER: 4,
}

# Edges whose strips may be cut from remnants. Left/right side strips run along
# the stock's length axis, which width-cut remnants cannot provide.
REMNANT_ELIGIBLE_EDGES = frozenset({Edge.FRONT, Edge.BACK, Edge.PERIMETER})

# Edges that make sense on a tread or riser (no back edge, no closed loop).
STEP_EDGES = frozenset({Edge.FRONT, Edge.LEFT, Edge.RIGHT})

# Parts billed with mandatory pricing unless the caller says otherwise.
MANDATORY_BY_DEFAULT = frozenset({StairPart.RISER, StairPart.LANDING})
