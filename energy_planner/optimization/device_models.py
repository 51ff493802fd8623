"""
Device and Plan Data Models

This module defines the data structures for representing household devices,
per-day allocations and the 30-day Cost, Eco and Comfort plans.

Conventions:
- Wattage is in watts, energy in kWh, prices in currency units per kWh
- Day numbers are 1-based (day 1 is the day after the plan start date)
- Schedules are always ordered by ascending day number
"""

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from numbers import Real
from typing import Any, ClassVar, Dict, List, Optional, Tuple
import numpy as np

from energy_planner.optimization.device_catalog import is_refrigeration_class
from energy_planner.optimization.exceptions import InvalidDeviceError


class Frequency(Enum):
    """Usage cadence that gates which days a device may run at all."""

    DAILY = "daily"
    WEEKENDS = "weekends"
    FREQUENTLY = "frequently"
    RARELY = "rarely"


class PriorityLevel(IntEnum):
    """Device priority levels.

    Higher priority devices are funded first when the daily budget is tight
    and are trimmed by a smaller share when a day runs over budget.
    """

    OPTIONAL = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    CRITICAL = 5


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


@dataclass
class Device:
    """Represents a household device under management.

    Attributes:
        id: Stable identifier, unique within a household's device set
        name: Human-readable name for the device
        wattage: Power draw in watts
        priority: Scheduling priority (1-5, 5 = must-run)
        frequency: Usage cadence class
        hours_per_day: Typical daily usage, an upper bound on allocated hours
        device_type: Catalog device type (affects refrigeration handling)
    """

    id: str
    name: str
    wattage: float
    priority: PriorityLevel = PriorityLevel.MEDIUM
    frequency: Frequency = Frequency.DAILY
    hours_per_day: float = 0.0
    device_type: str = "other"

    def __post_init__(self):
        """Coerce enum fields and validate."""
        self._validate()

    def _coerce_enums(self):
        if not isinstance(self.frequency, Frequency):
            try:
                self.frequency = Frequency(str(self.frequency).lower())
            except ValueError:
                raise InvalidDeviceError(
                    f"Unknown frequency '{self.frequency}' for device {self.id}. "
                    f"Valid options: {[f.value for f in Frequency]}",
                    device_id=self.id,
                ) from None

        if not isinstance(self.priority, PriorityLevel):
            if isinstance(self.priority, bool) or not isinstance(self.priority, int):
                raise InvalidDeviceError(
                    f"Priority must be an integer 1-5, got {self.priority!r}",
                    device_id=self.id,
                )
            try:
                self.priority = PriorityLevel(self.priority)
            except ValueError:
                raise InvalidDeviceError(
                    f"Priority must be 1-5, got {self.priority}",
                    device_id=self.id,
                ) from None

    def _validate(self):
        """Validate device configuration.

        Also runs on devices edited after creation, so the enum fields are
        coerced again here.
        """
        if not self.id:
            raise InvalidDeviceError("Device id must not be empty")
        self._coerce_enums()
        if not _is_finite_number(self.wattage) or self.wattage <= 0:
            raise InvalidDeviceError(
                f"Wattage must be positive, got {self.wattage}", device_id=self.id
            )
        if not _is_finite_number(self.hours_per_day) or self.hours_per_day < 0:
            raise InvalidDeviceError(
                f"Hours per day must be non-negative, got {self.hours_per_day}",
                device_id=self.id,
            )
        if self.hours_per_day > 24:
            raise InvalidDeviceError(
                f"Hours per day cannot exceed 24, got {self.hours_per_day}",
                device_id=self.id,
            )

    @property
    def is_refrigeration_class(self) -> bool:
        """Whether the device needs a minimum daily run time."""
        return is_refrigeration_class(self.device_type, self.name)

    @property
    def typical_daily_kwh(self) -> float:
        """Energy used on a day at the typical usage."""
        return self.wattage / 1000 * self.hours_per_day

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "wattage": self.wattage,
            "priority": int(self.priority),
            "frequency": self.frequency.value,
            "hours_per_day": self.hours_per_day,
            "device_type": self.device_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Device":
        """Create from dictionary."""
        data = data.copy()
        # Accept the camelCase keys used by device inventories
        if "hoursPerDay" in data:
            data["hours_per_day"] = data.pop("hoursPerDay")
        if "watts" in data and "wattage" not in data:
            data["wattage"] = data.pop("watts")
        if "type" in data and "device_type" not in data:
            data["device_type"] = data.pop("type")
        return cls(**data)


@dataclass(frozen=True)
class DeviceAllocation:
    """Hours and cost granted to one device by the budget allocator."""

    hours: float
    cost: float

    def to_dict(self) -> Dict[str, float]:
        return {"hours": self.hours, "cost": self.cost}


# Ordered mapping of device id -> allocation, in input device order
BudgetAllocationResult = Dict[str, DeviceAllocation]


@dataclass(frozen=True)
class BudgetValidation:
    """Outcome of checking an allocation against its daily budget."""

    valid: bool
    total_cost: float


@dataclass(frozen=True)
class DeviceHours:
    """Scheduled usage for a single device on a single day.

    Attributes:
        id: Device identifier
        name: Device display name
        wattage: Power draw in watts
        hours: Scheduled run time
        priority: Device priority (1-5)
        cost: Projected cost for the scheduled hours
        kwh: Projected energy for the scheduled hours
        emission_level: Emission level used for the day (0 if not applicable)
    """

    id: str
    name: str
    wattage: float
    hours: float
    priority: int
    cost: float
    kwh: float
    emission_level: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "wattage": self.wattage,
            "hours": round(self.hours, 1),
            "priority": int(self.priority),
            "cost": round(self.cost, 2),
            "kwh": round(self.kwh, 3),
            "emission_level": self.emission_level,
        }


@dataclass(frozen=True)
class DaySchedule:
    """Device usage for one calendar day of the horizon.

    Attributes:
        day_number: Day index within the horizon (1-based)
        date: Calendar date of the day
        is_weekend: Whether the date falls on Saturday or Sunday
        devices: Scheduled devices for the day
        total_cost: Sum of device costs
        total_kwh: Sum of device energy
    """

    day_number: int
    date: date
    is_weekend: bool
    devices: Tuple[DeviceHours, ...]
    total_cost: float
    total_kwh: float

    @classmethod
    def from_devices(
        cls,
        day_number: int,
        day_date: date,
        is_weekend: bool,
        devices: List[DeviceHours],
    ) -> "DaySchedule":
        """Build a day schedule, deriving the totals from its devices."""
        return cls(
            day_number=day_number,
            date=day_date,
            is_weekend=is_weekend,
            devices=tuple(devices),
            total_cost=sum(d.cost for d in devices),
            total_kwh=sum(d.kwh for d in devices),
        )

    @property
    def total_hours(self) -> float:
        """Total scheduled device hours for the day."""
        return sum(d.hours for d in self.devices)

    def get_device(self, device_id: str) -> Optional[DeviceHours]:
        """Get the scheduled entry for a device, if it runs that day."""
        for device in self.devices:
            if device.id == device_id:
                return device
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "day_number": self.day_number,
            "date": self.date.isoformat(),
            "is_weekend": self.is_weekend,
            "devices": [d.to_dict() for d in self.devices],
            "total_cost": round(self.total_cost, 2),
            "total_kwh": round(self.total_kwh, 3),
            "total_hours": round(self.total_hours, 1),
        }


@dataclass
class Plan:
    """A fully computed usage schedule over the planning horizon.

    Attributes:
        schedule: One DaySchedule per day, ascending by day number
        total_monthly_cost: Sum of all day costs
        total_monthly_kwh: Sum of all day energy
        daily_budget: Per-day spending ceiling used to build the plan
        price_per_kwh: Electricity price used to build the plan
        infeasible_days: Days whose trimming pass could not reach the budget
    """

    plan_type: ClassVar[str] = "plan"
    plan_name: ClassVar[str] = "Plan"

    schedule: List[DaySchedule]
    total_monthly_cost: float
    total_monthly_kwh: float
    daily_budget: float
    price_per_kwh: float
    infeasible_days: List[int] = field(default_factory=list)

    @property
    def num_days(self) -> int:
        """Number of days in the plan."""
        return len(self.schedule)

    @property
    def total_hours(self) -> float:
        """Total scheduled device hours across the horizon."""
        return sum(day.total_hours for day in self.schedule)

    @property
    def is_within_budget(self) -> bool:
        """Whether every day's trimming reached its budget."""
        return not self.infeasible_days

    def get_day(self, day_number: int) -> Optional[DaySchedule]:
        """Get the schedule for a specific day number."""
        for day in self.schedule:
            if day.day_number == day_number:
                return day
        return None

    def get_daily_cost_profile(self) -> np.ndarray:
        """Get total cost for each day of the horizon.

        Returns:
            Array of day totals ordered by day number
        """
        return np.array([day.total_cost for day in self.schedule], dtype=np.float64)

    def get_device_hours(self, device_id: str) -> np.ndarray:
        """Get scheduled hours for one device on each day (0 when absent)."""
        hours = np.zeros(self.num_days)
        for idx, day in enumerate(self.schedule):
            entry = day.get_device(device_id)
            if entry is not None:
                hours[idx] = entry.hours
        return hours

    def _metrics(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {
            "plan_type": self.plan_type,
            "schedule": [day.to_dict() for day in self.schedule],
            "total_monthly_cost": round(self.total_monthly_cost, 2),
            "total_monthly_kwh": round(self.total_monthly_kwh, 3),
            "daily_budget": round(self.daily_budget, 2),
            "price_per_kwh": self.price_per_kwh,
            "infeasible_days": list(self.infeasible_days),
        }
        data.update(self._metrics())
        return data

    def summary(self) -> str:
        """Generate human-readable summary."""
        costs = self.get_daily_cost_profile()
        lines = [
            "=" * 60,
            f"{self.plan_name.upper()} SUMMARY",
            "=" * 60,
            f"Days: {self.num_days}",
            f"Daily Budget: ${self.daily_budget:.2f}",
            f"Price: ${self.price_per_kwh:.3f}/kWh",
            "",
            "COST ANALYSIS:",
            f"  Monthly Cost: ${self.total_monthly_cost:.2f}",
            f"  Cheapest Day: ${float(costs.min()) if costs.size else 0.0:.2f}",
            f"  Priciest Day: ${float(costs.max()) if costs.size else 0.0:.2f}",
            "",
            "ENERGY ANALYSIS:",
            f"  Monthly Energy: {self.total_monthly_kwh:.2f} kWh",
            f"  Scheduled Hours: {self.total_hours:.1f} h",
        ]
        for key, value in self._metrics().items():
            lines.append(f"  {key.replace('_', ' ').title()}: {value}")
        if self.infeasible_days:
            lines.append("")
            lines.append(f"Over budget after trimming: days {self.infeasible_days}")
        lines.append("=" * 60)
        return "\n".join(lines)


@dataclass
class CostPlan(Plan):
    """Plan that keeps each day within the preferred budget."""

    plan_type: ClassVar[str] = "cost"
    plan_name: ClassVar[str] = "Cost Saver Plan"


@dataclass
class EcoPlan(Plan):
    """Plan that cuts run time of high-emission devices.

    Attributes:
        avg_emission_reduction: Mean applied reduction as a whole percentage
    """

    plan_type: ClassVar[str] = "eco"
    plan_name: ClassVar[str] = "Eco Mode Plan"

    avg_emission_reduction: int = 0

    def _metrics(self) -> Dict[str, Any]:
        return {"avg_emission_reduction": self.avg_emission_reduction}


@dataclass
class ComfortPlan(Plan):
    """Plan blending the Cost and Eco plans.

    Attributes:
        monthly_budget: Comfort budget between average and preferred spend
    """

    plan_type: ClassVar[str] = "comfort"
    plan_name: ClassVar[str] = "Comfort Balance Plan"

    monthly_budget: float = 0.0

    def _metrics(self) -> Dict[str, Any]:
        return {"monthly_budget": round(self.monthly_budget, 2)}


@dataclass
class PlanBundle:
    """The three plans built for one optimization request."""

    cost: CostPlan
    eco: EcoPlan
    comfort: ComfortPlan

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cost": self.cost.to_dict(),
            "eco": self.eco.to_dict(),
            "comfort": self.comfort.to_dict(),
        }


@dataclass
class OptimizationConfig:
    """Configuration for the planning engine.

    Attributes:
        horizon_days: Number of days in a plan
        reserved_min_hours: Minimum run time reserved for refrigeration
        min_schedulable_hours: Allocations below this are dropped to zero
        max_trim_iterations: Safety cap on the trimming loop
        comfort_priority_threshold: Priority at which Comfort favours cost hours
        comfort_high_priority_weight: Cost-plan weight for high priorities
        comfort_low_priority_weight: Cost-plan weight for low priorities
        max_solve_time_seconds: Time limit for the MILP allocator
        solver_name: Name of solver for the MILP allocator (CBC, GLPK)
        verbose: Enable verbose solver output
    """

    horizon_days: int = 30
    reserved_min_hours: float = 4.0
    min_schedulable_hours: float = 0.1
    max_trim_iterations: int = 100
    comfort_priority_threshold: int = 3
    comfort_high_priority_weight: float = 0.75
    comfort_low_priority_weight: float = 0.25
    max_solve_time_seconds: float = 5.0
    solver_name: str = "CBC"
    verbose: bool = False

    def __post_init__(self):
        """Validate configuration."""
        if self.horizon_days < 1:
            raise ValueError("Horizon must have at least 1 day")
        if self.reserved_min_hours < 0:
            raise ValueError("Reserved minimum hours must be non-negative")
        if self.min_schedulable_hours < 0:
            raise ValueError("Minimum schedulable hours must be non-negative")
        if self.max_trim_iterations < 1:
            raise ValueError("Max trim iterations must be at least 1")
        for weight in (self.comfort_high_priority_weight, self.comfort_low_priority_weight):
            if not 0 <= weight <= 1:
                raise ValueError("Comfort weights must be between 0 and 1")
        if self.max_solve_time_seconds <= 0:
            raise ValueError("Max solve time must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "horizon_days": self.horizon_days,
            "reserved_min_hours": self.reserved_min_hours,
            "min_schedulable_hours": self.min_schedulable_hours,
            "max_trim_iterations": self.max_trim_iterations,
            "comfort_priority_threshold": self.comfort_priority_threshold,
            "comfort_high_priority_weight": self.comfort_high_priority_weight,
            "comfort_low_priority_weight": self.comfort_low_priority_weight,
            "max_solve_time_seconds": self.max_solve_time_seconds,
            "solver_name": self.solver_name,
            "verbose": self.verbose,
        }
