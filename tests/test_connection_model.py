"""
tests/test_connection_model.py
==============================
Link feasibility — unit tests for connection_model.py and ConnectionCalculator.
"""

import asyncio
import math

import pytest

from dcdesign.calculators import ConnectionCalculator
from dcdesign.connection_model import (
    compute_distance,
    compute_pressure_drop,
    evaluate_connection,
)
from dcdesign.errors import CalculationError, ValidationError
from dcdesign.models import ConnectionParams


def link(kind, subtype, length, load=0.0):
    return ConnectionParams(
        type=kind,
        subtype=subtype,
        source_point=(0.0, 0.0, 0.0),
        target_point=(length, 0.0, 0.0),
        load=load,
    )


class TestGeometry:

    def test_distance_is_euclidean(self):
        assert compute_distance((0.0, 0.0, 0.0), (3.0, 4.0, 12.0)) == pytest.approx(13.0)

    def test_pressure_drop_darcy_weisbach(self):
        flow = 1e-4
        velocity = flow / (math.pi * 0.05 ** 2)
        expected = 0.02 * (10.0 / 0.1) * 1000.0 * velocity ** 2 / 2
        assert compute_pressure_drop(10.0, flow) == pytest.approx(expected, rel=1e-12)


class TestPowerLinks:

    def test_short_ups_feed_is_valid(self):
        result = evaluate_connection(link("power", "UPS_TO_PDU", 10.0, load=100.0))
        drop = 100.0 * 10.0 * 1.732 / 208.0
        assert result.efficiency == pytest.approx(1 - drop / 208.0, rel=1e-12)
        assert result.capacity == pytest.approx(208.0 * 100.0)
        assert result.loss == pytest.approx(drop * 100.0, rel=1e-12)
        assert result.is_valid
        assert result.warnings == ()

    def test_long_feed_flags_voltage_drop(self):
        result = evaluate_connection(link("power", "UPS_TO_PDU", 30.0, load=100.0))
        assert not result.is_valid
        assert result.warnings == ("High voltage drop detected",)


class TestCoolingLinks:

    def test_low_flow_chilled_water_is_valid(self):
        result = evaluate_connection(link("cooling", "CHILLED_WATER", 10.0, load=1e-4))
        assert result.is_valid
        assert result.efficiency == pytest.approx(1 - compute_pressure_drop(10.0, 1e-4) / 30.0, rel=1e-12)

    def test_high_flow_exceeds_rated_pressure_drop(self):
        result = evaluate_connection(link("cooling", "VRF", 10.0, load=0.01))
        assert not result.is_valid
        assert "High pressure drop detected" in result.warnings


class TestNetworkLinks:

    def test_fiber_near_limit_warns_but_is_valid(self):
        result = evaluate_connection(link("network", "FIBER", 9000.0))
        assert result.is_valid
        assert result.capacity == 100.0
        assert result.warnings == ("Connection length approaching maximum limit",)

    def test_copper_beyond_limit_invalid(self):
        result = evaluate_connection(link("network", "COPPER", 150.0))
        assert not result.is_valid
        assert result.efficiency == pytest.approx(-0.5)

    def test_unknown_subtype_raises(self):
        with pytest.raises(CalculationError, match="Invalid network connection subtype"):
            evaluate_connection(link("network", "CAT3", 10.0))


class TestConnectionCalculator:

    def test_unknown_type_fails_validation(self):
        with pytest.raises(ValidationError, match="Invalid connection type"):
            asyncio.run(ConnectionCalculator().calculate(link("steam", "PRIMARY", 5.0)))

    def test_negative_load_fails_validation(self):
        with pytest.raises(ValidationError, match="Connection load cannot be negative"):
            asyncio.run(ConnectionCalculator().calculate(link("power", "PRIMARY", 5.0, load=-1.0)))

    def test_unknown_subtype_reported_under_connection_event_type(self, monitor):
        calculator = ConnectionCalculator(monitor=monitor)
        with pytest.raises(CalculationError):
            asyncio.run(calculator.calculate(link("power", "BUSWAY", 5.0, load=10.0)))
        assert monitor.operations[-1].type == "connection"
        assert monitor.operations[-1].action == "connection_validation"

    def test_from_dict_accepts_front_end_keys(self):
        params = ConnectionParams.from_dict(
            {"type": "network", "subtype": "FIBER", "sourcePoint": [0, 0, 0], "targetPoint": [1, 2, 2]}
        )
        assert params.load == 0.0
        assert asyncio.run(ConnectionCalculator().calculate(params)).loss == pytest.approx(3.0 / 10000.0)
