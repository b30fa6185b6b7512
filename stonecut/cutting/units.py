"""
Unit conversion and area arithmetic.

Factor 100 between cm and m in both directions, no rounding.
Area of a (width cm x length m) piece is width * length / 100 square metres.
"""

import uuid

from ..models import LengthUnit

CM_PER_M = 100.0


def to_centimeters(value: float, unit) -> float:
    if LengthUnit(unit) == LengthUnit.M:
        return value * CM_PER_M
    return value


def to_meters(value: float, unit) -> float:
    if LengthUnit(unit) == LengthUnit.CM:
        return value / CM_PER_M
    return value


def convert_length(value: float, from_unit, to_unit) -> float:
    """Convert a length between cm and m."""
    if LengthUnit(from_unit) == LengthUnit(to_unit):
        return value
    return to_meters(value, from_unit) if LengthUnit(to_unit) == LengthUnit.M \
        else to_centimeters(value, from_unit)


def square_meters(width_cm: float, length_m: float, quantity: float = 1) -> float:
    """Area of `quantity` pieces of width_cm x length_m."""
    return width_cm * length_m * quantity / CM_PER_M


def square_meters_from_dimensions(length: float, width: float, length_unit,
                                  width_unit, quantity: float = 1) -> float:
    """Area from two dimensions in any units (cm² → m² via /10000)."""
    length_cm = to_centimeters(length, length_unit)
    width_cm = to_centimeters(width, width_unit)
    return length_cm * width_cm * quantity / (CM_PER_M * CM_PER_M)


def length_from_square_meters(area_m2: float, width: float, width_unit,
                              quantity: float = 1, target_unit=LengthUnit.CM) -> float:
    """Length that gives `area_m2` at the given width. 0 when width or quantity is not positive."""
    width_cm = to_centimeters(width, width_unit)
    if width_cm <= 0 or quantity <= 0:
        return 0.0
    length_cm = area_m2 * CM_PER_M * CM_PER_M / (width_cm * quantity)
    return convert_length(length_cm, LengthUnit.CM, target_unit)


def width_from_square_meters(area_m2: float, length: float, length_unit,
                             quantity: float = 1, target_unit=LengthUnit.CM) -> float:
    """Width that gives `area_m2` at the given length. 0 when length or quantity is not positive."""
    length_cm = to_centimeters(length, length_unit)
    if length_cm <= 0 or quantity <= 0:
        return 0.0
    width_cm = area_m2 * CM_PER_M * CM_PER_M / (length_cm * quantity)
    return convert_length(width_cm, LengthUnit.CM, target_unit)


def almost_equal(a: float, b: float, epsilon: float = 1e-4) -> bool:
    return abs(a - b) <= epsilon


class IdSequence:
    """
    Produces ids of the form <prefix>_<seed>_<n>.

    Pass a fixed seed for reproducible ids (tests, re-rendering the same line
    item); otherwise the seed is a short random hex string.
    """

    def __init__(self, seed=None):
        self.seed = str(seed) if seed is not None else uuid.uuid4().hex[:8]
        self._counter = 0

    def next(self, prefix: str) -> str:
        value = "%s_%s_%d" % (prefix, self.seed, self._counter)
        self._counter += 1
        return value


def format_number(value: float) -> str:
    """Plain number for diagnostic messages (not currency/locale formatting)."""
    return "%g" % round(value, 4)
