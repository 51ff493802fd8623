"""
Eco Plan Generation

Cuts each device's typical daily hours by a share that grows with its
emission level, then trims any day that still runs over the daily budget.

Reduction by emission level:
- 5 (very high): 30%
- 4 (high): 20%
- 3 (medium): 15%
- 2: 10%
- 1 (low): 5%
- anything else: no reduction
"""

from datetime import date
from typing import Dict, List, Mapping, Optional, Set, Tuple

import numpy as np
import structlog

from energy_planner.optimization.budget_trimmer import trim_to_budget
from energy_planner.optimization.cost_model import calculate_cost, energy_kwh
from energy_planner.optimization.device_models import (
    DaySchedule,
    Device,
    DeviceHours,
    EcoPlan,
    OptimizationConfig,
)
from energy_planner.optimization.plan_assembler import (
    WeatherExclusions,
    eligible_devices,
    iterate_days,
    log_infeasible_day,
    normalise_exclusions,
    rollup_totals,
)
from energy_planner.optimization.validation import (
    validate_amount,
    validate_devices,
    validate_price,
)

logger = structlog.get_logger(__name__)

EMISSION_REDUCTIONS: Dict[int, float] = {
    5: 0.30,
    4: 0.20,
    3: 0.15,
    2: 0.10,
    1: 0.05,
}
DEFAULT_EMISSION_LEVEL = 1


def get_emission_reduction(emission_level: int) -> float:
    """Get the share of hours removed for an emission level."""
    return EMISSION_REDUCTIONS.get(emission_level, 0.0)


def reduce_device_hours(
    device: Device,
    emission_level: int,
    price_per_kwh: float,
) -> DeviceHours:
    """Schedule a device at its emission-reduced hours."""
    hours = device.hours_per_day * (1 - get_emission_reduction(emission_level))
    return DeviceHours(
        id=device.id,
        name=device.name,
        wattage=device.wattage,
        hours=hours,
        priority=int(device.priority),
        cost=calculate_cost(device.wattage, hours, price_per_kwh),
        kwh=energy_kwh(device.wattage, hours),
        emission_level=emission_level,
    )


def build_eco_day(
    devices: List[Device],
    day_number: int,
    day_date: date,
    is_weekend_day: bool,
    daily_budget: float,
    price_per_kwh: float,
    excluded: Set[str],
    emission_levels: Mapping[str, int],
    config: OptimizationConfig,
) -> Tuple[DaySchedule, bool]:
    """Build one day of the Eco plan.

    Args:
        devices: All devices in the plan
        day_number: 1-based day index
        day_date: Calendar date of the day
        is_weekend_day: Whether the day is a weekend
        daily_budget: Spending ceiling for the day
        price_per_kwh: Electricity price
        excluded: Device ids excluded by weather for this day
        emission_levels: Emission level per device id
        config: Engine configuration

    Returns:
        Tuple of (day schedule, whether the day fits its budget)
    """
    scheduled = [
        reduce_device_hours(
            device,
            emission_levels.get(device.id, DEFAULT_EMISSION_LEVEL),
            price_per_kwh,
        )
        for device in eligible_devices(devices, day_number, is_weekend_day, excluded)
    ]

    feasible = True
    if sum(d.cost for d in scheduled) > daily_budget:
        trimmed = trim_to_budget(
            scheduled, daily_budget, max_iterations=config.max_trim_iterations
        )
        scheduled = trimmed.devices
        if not trimmed.converged:
            feasible = False
            log_infeasible_day(
                "eco",
                day_number,
                trimmed.total_cost,
                daily_budget,
                trimmed.iterations,
            )

    day = DaySchedule.from_devices(day_number, day_date, is_weekend_day, scheduled)
    return day, feasible


def average_emission_reduction(schedule: List[DaySchedule], num_devices: int) -> int:
    """Mean applied reduction across every device-day of the horizon, as a whole percent.

    Days a device does not run count as no reduction.
    """
    device_days = len(schedule) * num_devices
    if device_days == 0:
        return 0
    reductions = np.array(
        [
            get_emission_reduction(device.emission_level)
            for day in schedule
            for device in day.devices
        ],
        dtype=np.float64,
    )
    return int(round(float(reductions.sum()) / device_days * 100))


def generate_eco_plan(
    devices: List[Device],
    avg_monthly_cost: float,
    price_per_kwh: float,
    weather_exclusions: Optional[WeatherExclusions] = None,
    emission_levels: Optional[Mapping[str, int]] = None,
    start_date: Optional[date] = None,
    config: Optional[OptimizationConfig] = None,
) -> EcoPlan:
    """Generate the Eco plan over the planning horizon.

    Args:
        devices: Devices to schedule
        avg_monthly_cost: Historical average monthly spend
        price_per_kwh: Electricity price
        weather_exclusions: Optional map of day number to excluded device ids
        emission_levels: Optional emission level per device id (default 1)
        start_date: Plan start date (day 1 is the following day)
        config: Optional engine configuration

    Returns:
        EcoPlan with one DaySchedule per horizon day

    Raises:
        InvalidInputError: If devices, budget or price are invalid
    """
    devices = validate_devices(devices)
    validate_price(price_per_kwh)
    validate_amount(avg_monthly_cost, "Average monthly cost")

    config = config or OptimizationConfig()
    start = start_date or date.today()
    exclusions = normalise_exclusions(weather_exclusions)
    levels = dict(emission_levels or {})
    daily_budget = avg_monthly_cost / config.horizon_days

    schedule = []
    infeasible_days = []
    for day_number, day, weekend in iterate_days(start, config.horizon_days):
        day_schedule, feasible = build_eco_day(
            devices,
            day_number,
            day,
            weekend,
            daily_budget,
            price_per_kwh,
            exclusions.get(day_number, set()),
            levels,
            config,
        )
        schedule.append(day_schedule)
        if not feasible:
            infeasible_days.append(day_number)

    total_cost, total_kwh = rollup_totals(schedule)
    avg_reduction = average_emission_reduction(schedule, len(devices))

    logger.info(
        "eco_plan_generated",
        devices=len(devices),
        days=len(schedule),
        total_monthly_cost=round(total_cost, 2),
        avg_emission_reduction=avg_reduction,
        infeasible_days=len(infeasible_days),
    )

    return EcoPlan(
        schedule=schedule,
        total_monthly_cost=total_cost,
        total_monthly_kwh=total_kwh,
        daily_budget=daily_budget,
        price_per_kwh=price_per_kwh,
        infeasible_days=infeasible_days,
        avg_emission_reduction=avg_reduction,
    )
