"""
Plan Assembly over the Planning Horizon

Drives the day classifier and an allocator across every day of the horizon,
records one DaySchedule per day and rolls up the monthly totals. Each day
depends only on its own inputs, so days are built by pure per-day functions
and collected in ascending day order.

The Cost plan is assembled here from the greedy budget allocator. The Eco
plan reuses the same day loop from ``eco_reducer``.
"""

from datetime import date
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

import numpy as np
import structlog

from energy_planner.optimization.budget_allocator import allocate_day
from energy_planner.optimization.device_models import (
    CostPlan,
    DaySchedule,
    Device,
    DeviceHours,
    OptimizationConfig,
)
from energy_planner.optimization.cost_model import energy_kwh
from energy_planner.optimization.day_classifier import classify_day, should_run_on_day
from energy_planner.optimization.exceptions import InvalidInputError
from energy_planner.optimization.validation import (
    validate_amount,
    validate_devices,
    validate_price,
)

logger = structlog.get_logger(__name__)

WeatherExclusions = Mapping[int, Iterable[str]]


def normalise_exclusions(
    weather_exclusions: Optional[WeatherExclusions],
) -> Dict[int, Set[str]]:
    """Convert a weather exclusion map to ``{day_number: {device_id}}``.

    Day keys may arrive as strings when the map was read from JSON.

    Raises:
        InvalidInputError: If a day key is not a day number
    """
    if not weather_exclusions:
        return {}
    exclusions = {}
    for day_number, device_ids in weather_exclusions.items():
        try:
            day = int(day_number)
        except (TypeError, ValueError):
            raise InvalidInputError(
                f"Weather exclusion day must be a day number, got {day_number!r}"
            ) from None
        exclusions[day] = set(device_ids or [])
    return exclusions


def iterate_days(start_date: date, horizon_days: int) -> Iterator[Tuple[int, date, bool]]:
    """Yield ``(day_number, date, is_weekend)`` for every horizon day."""
    for day_number in range(1, horizon_days + 1):
        day, weekend = classify_day(start_date, day_number)
        yield day_number, day, weekend


def eligible_devices(
    devices: List[Device],
    day_number: int,
    is_weekend_day: bool,
    excluded: Set[str],
) -> List[Device]:
    """Filter devices down to those allowed to run on a day.

    Args:
        devices: All devices in the plan
        day_number: 1-based day index
        is_weekend_day: Whether the day is a weekend
        excluded: Device ids excluded by weather for this day

    Returns:
        Eligible devices in input order
    """
    return [
        device
        for device in devices
        if should_run_on_day(device.frequency, is_weekend_day, day_number)
        and device.id not in excluded
    ]


def rollup_totals(schedule: List[DaySchedule]) -> Tuple[float, float]:
    """Sum day costs and energy into monthly totals."""
    if not schedule:
        return 0.0, 0.0
    costs = np.array([day.total_cost for day in schedule], dtype=np.float64)
    kwh = np.array([day.total_kwh for day in schedule], dtype=np.float64)
    return float(costs.sum()), float(kwh.sum())


def log_infeasible_day(
    plan_type: str,
    day_number: int,
    total_cost: float,
    daily_budget: float,
    iterations: int,
) -> None:
    """Report a day whose trimming pass ended over budget."""
    logger.warning(
        "budget_infeasible",
        plan=plan_type,
        day_number=day_number,
        total_cost=round(total_cost, 4),
        daily_budget=round(daily_budget, 4),
        iterations=iterations,
    )


def build_cost_day(
    devices: List[Device],
    day_number: int,
    day_date: date,
    is_weekend_day: bool,
    daily_budget: float,
    price_per_kwh: float,
    excluded: Set[str],
    config: OptimizationConfig,
) -> DaySchedule:
    """Build one day of the Cost plan from the greedy allocator.

    Eligible devices that receive no budget stay in the day with zero hours,
    so every eligible device is accounted for.
    """
    day_devices = eligible_devices(devices, day_number, is_weekend_day, excluded)
    if not day_devices:
        return DaySchedule.from_devices(day_number, day_date, is_weekend_day, [])

    allocation = allocate_day(day_devices, daily_budget, price_per_kwh, config)

    scheduled = []
    for device in day_devices:
        granted = allocation[device.id]
        scheduled.append(
            DeviceHours(
                id=device.id,
                name=device.name,
                wattage=device.wattage,
                hours=granted.hours,
                priority=int(device.priority),
                cost=granted.cost,
                kwh=energy_kwh(device.wattage, granted.hours),
            )
        )

    return DaySchedule.from_devices(day_number, day_date, is_weekend_day, scheduled)


def generate_cost_plan(
    devices: List[Device],
    monthly_budget: float,
    price_per_kwh: float,
    weather_exclusions: Optional[WeatherExclusions] = None,
    start_date: Optional[date] = None,
    config: Optional[OptimizationConfig] = None,
) -> CostPlan:
    """Generate the Cost plan over the planning horizon.

    Args:
        devices: Devices to schedule
        monthly_budget: Preferred monthly spend, split evenly across days
        price_per_kwh: Electricity price
        weather_exclusions: Optional map of day number to excluded device ids
        start_date: Plan start date (day 1 is the following day)
        config: Optional engine configuration

    Returns:
        CostPlan with one DaySchedule per horizon day

    Raises:
        InvalidInputError: If devices, budget or price are invalid
    """
    devices = validate_devices(devices)
    validate_price(price_per_kwh)
    validate_amount(monthly_budget, "Monthly budget")

    config = config or OptimizationConfig()
    start = start_date or date.today()
    exclusions = normalise_exclusions(weather_exclusions)
    daily_budget = monthly_budget / config.horizon_days

    schedule = [
        build_cost_day(
            devices,
            day_number,
            day,
            weekend,
            daily_budget,
            price_per_kwh,
            exclusions.get(day_number, set()),
            config,
        )
        for day_number, day, weekend in iterate_days(start, config.horizon_days)
    ]

    total_cost, total_kwh = rollup_totals(schedule)
    logger.info(
        "cost_plan_generated",
        devices=len(devices),
        days=len(schedule),
        total_monthly_cost=round(total_cost, 2),
        daily_budget=round(daily_budget, 2),
    )

    return CostPlan(
        schedule=schedule,
        total_monthly_cost=total_cost,
        total_monthly_kwh=total_kwh,
        daily_budget=daily_budget,
        price_per_kwh=price_per_kwh,
    )
