"""
Shared test fixtures: deterministic ids and a fixed cutting price table.
"""

import pytest

from stonecut.cutting.pricing import CuttingPriceTable
from stonecut.cutting.units import IdSequence


@pytest.fixture
def ids():
    """Id generator with a fixed seed so ids are stable across runs."""
    return IdSequence(seed="test")


@pytest.fixture
def price_table():
    """Built-in defaults only: LONG 15000/m, CROSS 25000/m."""
    return CuttingPriceTable()


@pytest.fixture
def long_only_prices():
    """Table with a longitudinal rate and no cross entry."""
    return CuttingPriceTable(overrides={"LONG": 10000.0}, use_defaults=False)
