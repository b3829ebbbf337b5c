"""
tests/conftest.py
=================
Shared parameter fixtures and collaborator doubles.
"""

import pytest

from dcdesign.models import (
    CoolingParams,
    EconomicParams,
    EnergyRates,
    Humidity,
    PowerParams,
    RoomDimensions,
    Temperatures,
)
from dcdesign.monitoring import RecordingMonitor


@pytest.fixture
def monitor():
    return RecordingMonitor()


@pytest.fixture
def power_params():
    """The reference feeder: 400 V, 1000 A, pf 0.9, 50 m of copper, linear load."""
    return PowerParams(
        voltage=400.0,
        current=1000.0,
        power_factor=0.9,
        distance=50.0,
        cable_type="COPPER",
        temperature=25.0,
        load_type="linear",
    )


@pytest.fixture
def cooling_params():
    return CoolingParams(
        it_load=500.0,
        temperature=Temperatures(supply=22.0, return_=34.0, ambient=30.0),
        humidity=Humidity(relative=50.0, target=45.0),
        rack_density=8.0,
        room_dimensions=RoomDimensions(length=30.0, width=20.0, height=4.0),
    )


@pytest.fixture
def economic_params():
    return EconomicParams(
        power_cost=600_000.0,
        cooling_cost=240_000.0,
        maintenance_cost=60_000.0,
        initial_investment=1_000_000.0,
        operational_hours=8760.0,
        energy_rates=EnergyRates(peak=0.20, off_peak=0.10),
        carbon_emission_factor=0.45,
    )
