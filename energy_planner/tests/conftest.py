"""
Pytest Configuration and Fixtures for Planner Tests

Provides shared fixtures for:
- Representative households
- A fixed plan start date
- Engine configurations
"""

from datetime import date

import pytest

from energy_planner.optimization.device_models import Device, OptimizationConfig


# ============================================================================
# Calendar Fixtures
# ============================================================================


@pytest.fixture
def start_date() -> date:
    """Monday 1 January 2024, so day 1 is Tuesday 2 January."""
    return date(2024, 1, 1)


# ============================================================================
# Device Fixtures
# ============================================================================


@pytest.fixture
def fridge() -> Device:
    """Refrigerator that runs around the clock."""
    return Device(
        id="fridge",
        name="Refrigerator",
        wattage=1500,
        priority=5,
        frequency="daily",
        hours_per_day=24,
        device_type="refrigerator",
    )


@pytest.fixture
def tv() -> Device:
    """Low-priority television."""
    return Device(
        id="tv",
        name="Television",
        wattage=120,
        priority=1,
        frequency="daily",
        hours_per_day=5,
        device_type="television",
    )


@pytest.fixture
def household(fridge, tv):
    """A mixed household with every frequency class."""
    return [
        fridge,
        tv,
        Device(
            id="ac",
            name="Air Conditioner",
            wattage=2000,
            priority=3,
            frequency="daily",
            hours_per_day=6,
            device_type="air_conditioner",
        ),
        Device(
            id="washer",
            name="Washing Machine",
            wattage=500,
            priority=2,
            frequency="frequently",
            hours_per_day=1.5,
            device_type="washing_machine",
        ),
        Device(
            id="console",
            name="Gaming Console",
            wattage=200,
            priority=1,
            frequency="weekends",
            hours_per_day=4,
            device_type="gaming_console",
        ),
        Device(
            id="mower",
            name="Lawn Mower",
            wattage=1200,
            priority=2,
            frequency="rarely",
            hours_per_day=2,
            device_type="lawn_mower",
        ),
    ]


@pytest.fixture
def household_emissions():
    """Emission levels for the household fixture."""
    return {"fridge": 1, "tv": 3, "ac": 4, "washer": 3, "console": 2, "mower": 5}


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def default_config() -> OptimizationConfig:
    return OptimizationConfig()


@pytest.fixture
def short_config() -> OptimizationConfig:
    """A one-week horizon for quicker plan tests."""
    return OptimizationConfig(horizon_days=7)
