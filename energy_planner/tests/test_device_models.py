"""
Tests for device and plan data models and the device catalog.
"""

import numpy as np
import pytest

from energy_planner.optimization.device_catalog import (
    DeviceCategory,
    estimate_emission_level,
    get_device_category,
    get_device_types_by_category,
    is_refrigeration_class,
)
from energy_planner.optimization.device_models import (
    CostPlan,
    DaySchedule,
    Device,
    DeviceHours,
    Frequency,
    OptimizationConfig,
    PriorityLevel,
)
from energy_planner.optimization.exceptions import (
    InvalidDeviceError,
    InvalidInputError,
    PlanningError,
)


# =============================================================================
# Device Tests
# =============================================================================


class TestDevice:
    """Test suite for the Device model."""

    def test_defaults(self):
        device = Device(id="lamp", name="Lamp", wattage=60)

        assert device.priority == PriorityLevel.MEDIUM
        assert device.frequency == Frequency.DAILY
        assert device.hours_per_day == 0.0
        assert device.device_type == "other"

    def test_coerces_strings_and_ints(self):
        device = Device(id="tv", name="TV", wattage=120, priority=4, frequency="Weekends")

        assert device.priority is PriorityLevel.HIGH
        assert device.frequency is Frequency.WEEKENDS

    def test_unknown_frequency(self):
        with pytest.raises(InvalidDeviceError) as exc_info:
            Device(id="tv", name="TV", wattage=120, frequency="hourly")
        assert exc_info.value.device_id == "tv"

    @pytest.mark.parametrize("priority", [0, 6, True, 2.5, "high"])
    def test_invalid_priority(self, priority):
        with pytest.raises(InvalidDeviceError):
            Device(id="tv", name="TV", wattage=120, priority=priority)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"id": "", "wattage": 100},
            {"id": "x", "wattage": 0},
            {"id": "x", "wattage": -10},
            {"id": "x", "wattage": 100, "hours_per_day": -1},
            {"id": "x", "wattage": 100, "hours_per_day": 25},
            {"id": "x", "wattage": float("nan")},
            {"id": "x", "wattage": float("inf")},
            {"id": "x", "wattage": 100, "hours_per_day": float("nan")},
        ],
    )
    def test_field_validation(self, kwargs):
        with pytest.raises(InvalidDeviceError):
            Device(name="X", **kwargs)

    def test_error_hierarchy(self):
        assert issubclass(InvalidDeviceError, InvalidInputError)
        assert issubclass(InvalidInputError, PlanningError)
        assert issubclass(InvalidInputError, ValueError)

    def test_refrigeration_class(self, fridge, tv):
        assert fridge.is_refrigeration_class
        assert not tv.is_refrigeration_class

    def test_typical_daily_kwh(self, tv):
        assert tv.typical_daily_kwh == pytest.approx(0.6)

    def test_serialization(self, fridge):
        restored = Device.from_dict(fridge.to_dict())

        assert restored == fridge
        assert fridge.to_dict()["frequency"] == "daily"

    def test_from_dict_accepts_inventory_keys(self):
        device = Device.from_dict(
            {
                "id": "heater",
                "name": "Space Heater",
                "watts": 1500,
                "hoursPerDay": 3,
                "type": "heater",
                "priority": 2,
                "frequency": "rarely",
            }
        )

        assert device.wattage == 1500
        assert device.hours_per_day == 3
        assert device.device_type == "heater"
        assert device.frequency is Frequency.RARELY


# =============================================================================
# Schedule and Plan Tests
# =============================================================================


class TestDaySchedule:
    """Test suite for DaySchedule and Plan helpers."""

    @pytest.fixture
    def plan(self, start_date):
        day1 = DaySchedule.from_devices(
            1,
            start_date,
            False,
            [
                DeviceHours("fridge", "Fridge", 150, 10.0, 5, 0.226, 1.5),
                DeviceHours("tv", "TV", 120, 2.0, 1, 0.036, 0.24),
            ],
        )
        day2 = DaySchedule.from_devices(
            2, start_date, False, [DeviceHours("fridge", "Fridge", 150, 8.0, 5, 0.18, 1.2)]
        )
        return CostPlan(
            schedule=[day1, day2],
            total_monthly_cost=0.442,
            total_monthly_kwh=2.94,
            daily_budget=0.5,
            price_per_kwh=0.15,
        )

    def test_day_totals(self, plan):
        day = plan.get_day(1)

        assert day.total_cost == pytest.approx(0.262)
        assert day.total_kwh == pytest.approx(1.74)
        assert day.total_hours == pytest.approx(12.0)
        assert day.get_device("missing") is None

    def test_plan_profiles(self, plan):
        np.testing.assert_allclose(plan.get_daily_cost_profile(), [0.262, 0.18])
        np.testing.assert_allclose(plan.get_device_hours("tv"), [2.0, 0.0])

    def test_plan_properties(self, plan):
        assert plan.num_days == 2
        assert plan.total_hours == pytest.approx(20.0)
        assert plan.is_within_budget
        assert plan.get_day(9) is None

    def test_to_dict_rounds(self, plan):
        data = plan.to_dict()

        assert data["plan_type"] == "cost"
        assert data["schedule"][0]["date"] == "2024-01-01"
        assert data["schedule"][0]["devices"][0]["cost"] == 0.23
        assert data["total_monthly_cost"] == 0.44

    def test_summary(self, plan):
        summary = plan.summary()

        assert "COST SAVER PLAN SUMMARY" in summary
        assert "Monthly Cost: $0.44" in summary


class TestOptimizationConfig:
    """Test suite for engine configuration."""

    def test_defaults(self, default_config):
        assert default_config.horizon_days == 30
        assert default_config.reserved_min_hours == 4.0
        assert default_config.min_schedulable_hours == 0.1
        assert default_config.max_trim_iterations == 100
        assert default_config.solver_name == "CBC"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"horizon_days": 0},
            {"reserved_min_hours": -1},
            {"max_trim_iterations": 0},
            {"comfort_high_priority_weight": 1.5},
            {"max_solve_time_seconds": 0},
        ],
    )
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            OptimizationConfig(**kwargs)

    def test_to_dict(self, default_config):
        assert default_config.to_dict()["comfort_priority_threshold"] == 3


# =============================================================================
# Device Catalog Tests
# =============================================================================


class TestDeviceCatalog:
    """Test suite for the device catalog."""

    def test_categories(self):
        assert get_device_category("refrigerator") == DeviceCategory.KITCHEN
        assert get_device_category("spaceship") == DeviceCategory.OTHER
        assert "dryer" in get_device_types_by_category(DeviceCategory.LAUNDRY)

    @pytest.mark.parametrize(
        "device_type, level",
        [
            ("water_heater", 5),
            ("gas boiler", 5),
            ("generator", 5),
            ("air_conditioner", 4),
            ("heater", 4),
            ("dryer", 4),
            ("electric_stove", 4),
            ("television", 3),
            ("microwave", 3),
            ("washing_machine", 3),
            ("refrigerator", 1),
            ("laptop", 1),
        ],
    )
    def test_emission_estimates(self, device_type, level):
        assert estimate_emission_level(device_type) == level

    def test_refrigeration_matching(self):
        assert is_refrigeration_class("refrigerator")
        assert is_refrigeration_class("other", "Chest Freezer")
        assert is_refrigeration_class("other", "Mini Fridge")
        assert not is_refrigeration_class("microwave", "Kitchen Microwave")
