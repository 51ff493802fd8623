"""
High-Level Planning API

This module provides a chainable interface over the plan generators:

- Device registration
- Budget and price setup
- Weather exclusions and emission levels
- Building the Cost, Eco and Comfort plans together or one at a time
- JSON export of plans and import of device lists
"""

import json
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from energy_planner.optimization.comfort_blender import generate_comfort_plan
from energy_planner.optimization.device_catalog import estimate_emission_level
from energy_planner.optimization.device_models import (
    ComfortPlan,
    CostPlan,
    Device,
    EcoPlan,
    OptimizationConfig,
    PlanBundle,
)
from energy_planner.optimization.eco_reducer import generate_eco_plan
from energy_planner.optimization.exceptions import InvalidInputError
from energy_planner.optimization.plan_assembler import (
    WeatherExclusions,
    generate_cost_plan,
    normalise_exclusions,
)
from energy_planner.optimization.validation import validate_amount, validate_price


class EnergyPlanner:
    """Chainable planner for a household's devices.

    Example:
        >>> planner = EnergyPlanner()
        >>> planner.add_device(Device("fridge", "Fridge", 150, 5, "daily", 24))
        >>> planner.set_budget(120.0, 90.0, 0.15)
        >>> plans = planner.build_all_plans()
        >>> print(plans.comfort.summary())
    """

    def __init__(
        self,
        config: Optional[OptimizationConfig] = None,
        start_date: Optional[date] = None,
    ):
        """Initialize the planner.

        Args:
            config: Engine configuration (uses defaults if not provided)
            start_date: Plan start date (defaults to today at build time)
        """
        self.config = config or OptimizationConfig()
        self.start_date = start_date
        self.devices: List[Device] = []
        self.avg_monthly_cost: Optional[float] = None
        self.preferred_budget: Optional[float] = None
        self.price_per_kwh: Optional[float] = None
        self.weather_exclusions: Dict[int, set] = {}
        self.emission_levels: Dict[str, int] = {}
        self._last_plans: Optional[PlanBundle] = None

    def add_device(self, device: Device) -> "EnergyPlanner":
        """Add a device to the plan.

        Args:
            device: Device to add

        Returns:
            Self for method chaining

        Raises:
            InvalidInputError: If a device with the same id already exists
        """
        if any(d.id == device.id for d in self.devices):
            raise InvalidInputError(f"Device '{device.id}' already exists")
        self.devices.append(device)
        return self

    def add_devices(self, devices: Iterable[Device]) -> "EnergyPlanner":
        for device in devices:
            self.add_device(device)
        return self

    def remove_device(self, device_id: str) -> "EnergyPlanner":
        """Remove a device and any emission level or exclusions tied to it."""
        self.devices = [d for d in self.devices if d.id != device_id]
        self.emission_levels.pop(device_id, None)
        for excluded in self.weather_exclusions.values():
            excluded.discard(device_id)
        return self

    def set_budget(
        self,
        avg_monthly_cost: float,
        preferred_budget: float,
        price_per_kwh: float,
    ) -> "EnergyPlanner":
        """Set the household's spending figures.

        Args:
            avg_monthly_cost: Historical average monthly spend
            preferred_budget: Preferred monthly budget
            price_per_kwh: Electricity price

        Returns:
            Self for method chaining
        """
        validate_amount(avg_monthly_cost, "Average monthly cost")
        validate_amount(preferred_budget, "Preferred budget")
        validate_price(price_per_kwh)

        self.avg_monthly_cost = avg_monthly_cost
        self.preferred_budget = preferred_budget
        self.price_per_kwh = price_per_kwh
        return self

    def set_weather_exclusions(
        self, weather_exclusions: Optional[WeatherExclusions]
    ) -> "EnergyPlanner":
        self.weather_exclusions = normalise_exclusions(weather_exclusions)
        return self

    def set_emission_levels(self, emission_levels: Mapping[str, int]) -> "EnergyPlanner":
        self.emission_levels = dict(emission_levels)
        return self

    def resolve_emission_levels(self) -> Dict[str, int]:
        """Get emission levels, estimating from device types where none were set."""
        return {
            device.id: self.emission_levels.get(
                device.id, estimate_emission_level(device.device_type)
            )
            for device in self.devices
        }

    def _require_budget(self) -> None:
        if not self.devices:
            raise InvalidInputError("No devices added. Use add_device() first.")
        if self.price_per_kwh is None:
            raise InvalidInputError("No budget set. Use set_budget() first.")

    def build_cost_plan(self) -> CostPlan:
        """Build the Cost plan from the preferred budget."""
        self._require_budget()
        return generate_cost_plan(
            self.devices,
            self.preferred_budget,
            self.price_per_kwh,
            weather_exclusions=self.weather_exclusions,
            start_date=self.start_date,
            config=self.config,
        )

    def build_eco_plan(self) -> EcoPlan:
        """Build the Eco plan from the average monthly cost."""
        self._require_budget()
        return generate_eco_plan(
            self.devices,
            self.avg_monthly_cost,
            self.price_per_kwh,
            weather_exclusions=self.weather_exclusions,
            emission_levels=self.resolve_emission_levels(),
            start_date=self.start_date,
            config=self.config,
        )

    def build_comfort_plan(
        self,
        cost_plan: Optional[CostPlan] = None,
        eco_plan: Optional[EcoPlan] = None,
    ) -> ComfortPlan:
        """Build the Comfort plan, building its source plans if not given."""
        self._require_budget()
        return generate_comfort_plan(
            cost_plan or self.build_cost_plan(),
            eco_plan or self.build_eco_plan(),
            self.avg_monthly_cost,
            self.preferred_budget,
            self.price_per_kwh,
            config=self.config,
        )

    def build_all_plans(self) -> PlanBundle:
        """Build all three plans.

        Returns:
            PlanBundle with the Cost, Eco and Comfort plans

        Raises:
            InvalidInputError: If no devices or no budget are set
        """
        cost_plan = self.build_cost_plan()
        eco_plan = self.build_eco_plan()
        comfort_plan = self.build_comfort_plan(cost_plan, eco_plan)

        self._last_plans = PlanBundle(cost=cost_plan, eco=eco_plan, comfort=comfort_plan)
        return self._last_plans

    def get_last_plans(self) -> Optional[PlanBundle]:
        return self._last_plans

    def export_to_json(
        self,
        filepath: Union[str, Path],
        plans: Optional[PlanBundle] = None,
    ) -> None:
        """Export plans to a JSON file.

        Args:
            filepath: Output file path
            plans: Plans to export (uses the last built plans if not provided)
        """
        plans = plans or self._last_plans
        if plans is None:
            raise InvalidInputError("No plans available. Run build_all_plans() first.")

        data = {
            "timestamp": datetime.now().isoformat(),
            "config": self.config.to_dict(),
            "devices": [d.to_dict() for d in self.devices],
            "plans": plans.to_dict(),
        }

        with open(filepath, "w") as f:
            json.dump(data, f, indent=2)

    def import_devices_from_json(self, filepath: Union[str, Path]) -> "EnergyPlanner":
        """Import devices from a JSON file with a top-level ``devices`` list.

        Args:
            filepath: Input file path

        Returns:
            Self for method chaining
        """
        with open(filepath, "r") as f:
            data = json.load(f)

        for device_data in data.get("devices", []):
            self.add_device(Device.from_dict(device_data))

        return self
