"""
Comfort Plan Blending

Builds the Comfort plan from an already computed Cost plan and Eco plan.

Algorithm Overview:
1. Per day and device, interpolate between the Eco and Cost entries. Devices
   at or above the comfort priority threshold lean toward the Cost plan
   (weight 0.75), the rest toward the Eco plan (weight 0.25). A device
   missing from one plan counts as zero there.
2. Days over the comfort daily budget are trimmed, never below the lower of
   the device's two source entries.
3. The monthly total must land strictly between the Cost and Eco totals. If
   it does not, every entry is mixed with the plain midpoint of the two plans
   so the total lands halfway between the breached boundary and the midpoint
   total. The total is linear in that share and the midpoint total always
   lies strictly inside, so one step suffices.
"""

from typing import Dict, List, Optional, Tuple

import structlog

from energy_planner.optimization.budget_trimmer import trim_to_budget
from energy_planner.optimization.device_models import (
    ComfortPlan,
    CostPlan,
    DaySchedule,
    DeviceHours,
    EcoPlan,
    OptimizationConfig,
)
from energy_planner.optimization.exceptions import InvalidInputError
from energy_planner.optimization.plan_assembler import log_infeasible_day, rollup_totals
from energy_planner.optimization.validation import validate_amount, validate_price

logger = structlog.get_logger(__name__)

_TOLERANCE = 1e-9


def get_blend_weight(priority: int, config: OptimizationConfig) -> float:
    """Get the Cost plan's weight for a device priority."""
    if priority >= config.comfort_priority_threshold:
        return config.comfort_high_priority_weight
    return config.comfort_low_priority_weight


def _zero_like(entry: DeviceHours) -> DeviceHours:
    return DeviceHours(
        id=entry.id,
        name=entry.name,
        wattage=entry.wattage,
        hours=0.0,
        priority=entry.priority,
        cost=0.0,
        kwh=0.0,
    )


def _interpolate(low: DeviceHours, high: DeviceHours, weight: float) -> DeviceHours:
    """Move ``weight`` of the way from ``low`` toward ``high``."""
    return DeviceHours(
        id=high.id,
        name=high.name,
        wattage=high.wattage,
        hours=low.hours + weight * (high.hours - low.hours),
        priority=high.priority,
        cost=low.cost + weight * (high.cost - low.cost),
        kwh=low.kwh + weight * (high.kwh - low.kwh),
        emission_level=max(low.emission_level, high.emission_level),
    )


def _lower_entry(a: DeviceHours, b: DeviceHours) -> DeviceHours:
    return a if a.cost <= b.cost else b


def _check_alignment(cost_plan: CostPlan, eco_plan: EcoPlan) -> None:
    if cost_plan.num_days != eco_plan.num_days:
        raise InvalidInputError(
            f"Plans cover different horizons: cost has {cost_plan.num_days} days, "
            f"eco has {eco_plan.num_days}"
        )
    for cost_day, eco_day in zip(cost_plan.schedule, eco_plan.schedule):
        if cost_day.day_number != eco_day.day_number:
            raise InvalidInputError(
                f"Plans are misaligned: cost day {cost_day.day_number} "
                f"paired with eco day {eco_day.day_number}"
            )


def pair_day_entries(
    cost_day: DaySchedule,
    eco_day: DaySchedule,
) -> List[Tuple[DeviceHours, DeviceHours]]:
    """Pair each device's Cost and Eco entries for a day.

    Devices appear in Cost plan order, followed by any Eco-only devices.
    A device absent from one plan is paired with a zero entry.

    Returns:
        List of (cost entry, eco entry) tuples
    """
    eco_by_id = {d.id: d for d in eco_day.devices}
    pairs = []
    seen = set()
    for cost_entry in cost_day.devices:
        eco_entry = eco_by_id.get(cost_entry.id, _zero_like(cost_entry))
        pairs.append((cost_entry, eco_entry))
        seen.add(cost_entry.id)
    for eco_entry in eco_day.devices:
        if eco_entry.id not in seen:
            pairs.append((_zero_like(eco_entry), eco_entry))
    return pairs


def blend_day(
    cost_day: DaySchedule,
    eco_day: DaySchedule,
    daily_budget: float,
    config: OptimizationConfig,
) -> Tuple[DaySchedule, bool]:
    """Blend one day of the Cost and Eco plans.

    Args:
        cost_day: The Cost plan's day
        eco_day: The Eco plan's day with the same day number
        daily_budget: Comfort daily budget
        config: Engine configuration

    Returns:
        Tuple of (blended day, whether the day fits its budget)
    """
    blended = []
    floors: Dict[str, DeviceHours] = {}
    for cost_entry, eco_entry in pair_day_entries(cost_day, eco_day):
        weight = get_blend_weight(cost_entry.priority, config)
        blended.append(_interpolate(eco_entry, cost_entry, weight))
        floors[cost_entry.id] = _lower_entry(cost_entry, eco_entry)

    feasible = True
    if sum(d.cost for d in blended) > daily_budget:
        trimmed = trim_to_budget(
            blended,
            daily_budget,
            max_iterations=config.max_trim_iterations,
            floors=floors,
        )
        blended = trimmed.devices
        if not trimmed.converged:
            feasible = False
            log_infeasible_day(
                "comfort",
                cost_day.day_number,
                trimmed.total_cost,
                daily_budget,
                trimmed.iterations,
            )

    day = DaySchedule.from_devices(
        cost_day.day_number, cost_day.date, cost_day.is_weekend, blended
    )
    return day, feasible


def midpoint_day(cost_day: DaySchedule, eco_day: DaySchedule) -> DaySchedule:
    """Average the Cost and Eco entries of a day device by device."""
    devices = [
        _interpolate(eco_entry, cost_entry, 0.5)
        for cost_entry, eco_entry in pair_day_entries(cost_day, eco_day)
    ]
    return DaySchedule.from_devices(
        cost_day.day_number, cost_day.date, cost_day.is_weekend, devices
    )


def _mix_days(blend: DaySchedule, midpoint: DaySchedule, share: float) -> DaySchedule:
    # Both days list the same devices in the same order
    devices = [
        _interpolate(b, m, share) for b, m in zip(blend.devices, midpoint.devices)
    ]
    return DaySchedule.from_devices(blend.day_number, blend.date, blend.is_weekend, devices)


def midpoint_share(total: float, midpoint_total: float, low: float, high: float) -> float:
    """Share of the midpoint that moves ``total`` strictly inside ``(low, high)``.

    A total on or past a boundary is moved halfway from that boundary to the
    midpoint total. When the two plans cost the same, the only admissible
    total is the midpoint itself.
    """
    if high - low <= _TOLERANCE:
        return 1.0 if abs(total - midpoint_total) > _TOLERANCE else 0.0
    if total >= high - _TOLERANCE:
        target = (high + midpoint_total) / 2
    elif total <= low + _TOLERANCE:
        target = (low + midpoint_total) / 2
    else:
        return 0.0
    return (total - target) / (total - midpoint_total)


def generate_comfort_plan(
    cost_plan: CostPlan,
    eco_plan: EcoPlan,
    avg_monthly_cost: float,
    preferred_budget: float,
    price_per_kwh: float,
    config: Optional[OptimizationConfig] = None,
) -> ComfortPlan:
    """Generate the Comfort plan from the Cost and Eco plans.

    Args:
        cost_plan: Cost plan over the horizon
        eco_plan: Eco plan over the same horizon
        avg_monthly_cost: Historical average monthly spend
        preferred_budget: The household's preferred monthly budget
        price_per_kwh: Electricity price
        config: Optional engine configuration

    Returns:
        ComfortPlan whose monthly cost lies between the two source plans

    Raises:
        InvalidInputError: If amounts are invalid or the plans do not align
    """
    validate_amount(avg_monthly_cost, "Average monthly cost")
    validate_amount(preferred_budget, "Preferred budget")
    validate_price(price_per_kwh)
    _check_alignment(cost_plan, eco_plan)

    config = config or OptimizationConfig()
    monthly_budget = (avg_monthly_cost + preferred_budget) / 2
    daily_budget = monthly_budget / max(cost_plan.num_days, 1)

    schedule = []
    infeasible = set()
    for cost_day, eco_day in zip(cost_plan.schedule, eco_plan.schedule):
        day, feasible = blend_day(cost_day, eco_day, daily_budget, config)
        schedule.append(day)
        if not feasible:
            infeasible.add(day.day_number)

    total_cost, _ = rollup_totals(schedule)
    low = min(cost_plan.total_monthly_cost, eco_plan.total_monthly_cost)
    high = max(cost_plan.total_monthly_cost, eco_plan.total_monthly_cost)
    midpoint_total = (cost_plan.total_monthly_cost + eco_plan.total_monthly_cost) / 2

    share = midpoint_share(total_cost, midpoint_total, low, high)
    if share > 0:
        midpoints = [
            midpoint_day(cost_day, eco_day)
            for cost_day, eco_day in zip(cost_plan.schedule, eco_plan.schedule)
        ]
        schedule = [_mix_days(b, m, share) for b, m in zip(schedule, midpoints)]
        logger.debug(
            "comfort_plan_recentred",
            blended_total=round(total_cost, 2),
            low=round(low, 2),
            high=round(high, 2),
            share=round(share, 4),
        )
        # Pulling toward the midpoint can lift a day back over its budget
        infeasible.update(
            day.day_number
            for day in schedule
            if day.total_cost > daily_budget + _TOLERANCE
        )

    total_cost, total_kwh = rollup_totals(schedule)
    logger.info(
        "comfort_plan_generated",
        days=len(schedule),
        total_monthly_cost=round(total_cost, 2),
        monthly_budget=round(monthly_budget, 2),
        infeasible_days=len(infeasible),
    )

    return ComfortPlan(
        schedule=schedule,
        total_monthly_cost=total_cost,
        total_monthly_kwh=total_kwh,
        daily_budget=daily_budget,
        price_per_kwh=price_per_kwh,
        infeasible_days=sorted(infeasible),
        monthly_budget=monthly_budget,
    )
