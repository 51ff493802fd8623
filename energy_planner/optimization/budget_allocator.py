"""
Greedy Budget Allocator

Splits one day's budget across devices so the total cost never exceeds it.

Algorithm Overview:
1. Reservation - refrigeration-class devices get a minimum run time
   (4 hours by default) or as much of it as the budget affords
2. Fill - remaining devices, highest priority first and lowest wattage on
   ties, get the lesser of their affordable hours and their typical hours
3. Top-up - reserved devices take any budget still left, up to their
   typical hours
4. Completion - every device appears in the result, zero if unfunded

Budget consumption is tracked on exact hours. Reported hours are floored to
1 decimal and costs to 2 decimals, so the reported total never exceeds the
budget and a larger budget never gives a device fewer hours.
"""

from typing import Dict, Iterable, List, Optional

import structlog

from energy_planner.optimization.cost_model import (
    affordable_hours,
    calculate_cost,
    floor_cost,
    floor_hours,
)
from energy_planner.optimization.device_models import (
    BudgetAllocationResult,
    BudgetValidation,
    Device,
    DeviceAllocation,
    OptimizationConfig,
)
from energy_planner.optimization.validation import (
    validate_amount,
    validate_devices,
    validate_price,
)

logger = structlog.get_logger(__name__)

# Tolerance for comparing float totals against a budget
BUDGET_TOLERANCE = 1e-9


def sort_by_priority(devices: Iterable[Device]) -> List[Device]:
    """Order devices by priority (high first), then wattage (low first)."""
    return sorted(devices, key=lambda d: (-int(d.priority), d.wattage))


def allocate_day(
    devices: List[Device],
    daily_budget: float,
    price_per_kwh: float,
    config: OptimizationConfig,
) -> BudgetAllocationResult:
    """Run the allocation on already validated inputs."""
    ordered = sort_by_priority(devices)
    granted: Dict[str, float] = {}
    reserved: List[Device] = []
    remaining = daily_budget

    # Phase 1: minimum-viable reservation
    for device in ordered:
        if not device.is_refrigeration_class:
            continue
        minimum = min(config.reserved_min_hours, device.hours_per_day)
        if minimum <= 0:
            continue

        reserved.append(device)
        cost = calculate_cost(device.wattage, minimum, price_per_kwh)
        if cost <= remaining:
            granted[device.id] = minimum
            remaining -= cost
        else:
            granted[device.id] = affordable_hours(
                remaining, device.wattage, price_per_kwh
            )
            remaining = 0.0

    # Phase 2: priority-weighted fill
    for device in ordered:
        if remaining <= 0:
            break
        if device.id in granted:
            continue

        hours = min(
            affordable_hours(remaining, device.wattage, price_per_kwh),
            device.hours_per_day,
        )
        remaining = max(
            0.0, remaining - calculate_cost(device.wattage, hours, price_per_kwh)
        )
        granted[device.id] = hours

    # Reserved devices share whatever is left
    for device in reserved:
        if remaining <= 0:
            break
        headroom = device.hours_per_day - granted[device.id]
        if headroom <= 0:
            continue

        extra = min(
            affordable_hours(remaining, device.wattage, price_per_kwh), headroom
        )
        granted[device.id] += extra
        remaining = max(
            0.0, remaining - calculate_cost(device.wattage, extra, price_per_kwh)
        )

    # Phase 3: completion, in input order
    result: BudgetAllocationResult = {}
    for device in devices:
        hours = floor_hours(granted.get(device.id, 0.0))
        if hours < config.min_schedulable_hours:
            hours = 0.0
        cost = floor_cost(calculate_cost(device.wattage, hours, price_per_kwh))
        result[device.id] = DeviceAllocation(hours=hours, cost=cost)

    return result


def allocate_budget(
    devices: List[Device],
    daily_budget: float,
    price_per_kwh: float,
    config: Optional[OptimizationConfig] = None,
) -> BudgetAllocationResult:
    """Allocate device hours to fit within a daily budget.

    Args:
        devices: Devices competing for the budget
        daily_budget: Spending ceiling for the day
        price_per_kwh: Electricity price
        config: Optional engine configuration

    Returns:
        Mapping of device id to allocated hours and cost, in input order

    Raises:
        InvalidInputError: If devices, budget or price are invalid
    """
    devices = validate_devices(devices)
    validate_price(price_per_kwh)
    validate_amount(daily_budget, "Daily budget")

    result = allocate_day(devices, daily_budget, price_per_kwh, config or OptimizationConfig())

    logger.debug(
        "budget_allocated",
        devices=len(devices),
        daily_budget=daily_budget,
        total_cost=round(sum(a.cost for a in result.values()), 2),
    )
    return result


def validate_budget(
    allocation: BudgetAllocationResult,
    daily_budget: float,
) -> BudgetValidation:
    """Check that an allocation's total cost stays within budget.

    Args:
        allocation: Allocation to check
        daily_budget: Spending ceiling for the day

    Returns:
        BudgetValidation with the verdict and the total cost
    """
    total_cost = sum(entry.cost for entry in allocation.values())
    return BudgetValidation(
        valid=total_cost <= daily_budget + BUDGET_TOLERANCE,
        total_cost=round(total_cost, 2),
    )


def get_allocation_summary(allocation: BudgetAllocationResult) -> str:
    """Get a one-line allocation summary for logs and debugging."""
    parts = [
        f"{device_id}: {entry.hours}h (${entry.cost:.2f})"
        for device_id, entry in allocation.items()
    ]
    total = sum(entry.cost for entry in allocation.values())
    return f"{', '.join(parts)} | Total: ${total:.2f}"
