"""
Budget Trimming Pass

Shrinks an over-budget day by repeatedly cutting the single most expensive
device by a priority-dependent share until the day fits its budget. Lower
priorities lose a larger share per cut. A fixed iteration cap guarantees
termination. Running out of iterations is reported through the result and
never raised.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from energy_planner.optimization.device_models import DeviceHours

# Share of a device's cost removed per trim, by priority
TRIM_PERCENTAGES: Dict[int, float] = {
    5: 0.10,
    4: 0.15,
    3: 0.20,
    2: 0.30,
    1: 0.50,
}
DEFAULT_TRIM_PERCENTAGE = 0.20
DEFAULT_MAX_ITERATIONS = 100

_TOLERANCE = 1e-9


@dataclass(frozen=True)
class TrimResult:
    """Outcome of a trimming pass.

    Attributes:
        devices: Devices after trimming, in their original order
        total_cost: Day total after trimming
        iterations: Number of trims applied
        converged: Whether the total ended within budget
    """

    devices: List[DeviceHours]
    total_cost: float
    iterations: int
    converged: bool


def get_trim_percentage(priority: int) -> float:
    """Get the share of cost removed per trim for a priority."""
    return TRIM_PERCENTAGES.get(int(priority), DEFAULT_TRIM_PERCENTAGE)


def _shrink(device: DeviceHours, floor: Optional[DeviceHours]) -> DeviceHours:
    """Cut one device by its trim percentage, never below its floor."""
    target = device.cost * (1 - get_trim_percentage(device.priority))
    if floor is not None and target <= floor.cost:
        return replace(device, hours=floor.hours, cost=floor.cost, kwh=floor.kwh)

    # Cost, energy and hours are proportional for a fixed wattage and price
    factor = target / device.cost
    return replace(
        device,
        hours=max(0.0, device.hours * factor),
        cost=target,
        kwh=device.kwh * factor,
    )


def trim_to_budget(
    devices: List[DeviceHours],
    daily_budget: float,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    floors: Optional[Dict[str, DeviceHours]] = None,
) -> TrimResult:
    """Trim device hours until the day's cost fits the budget.

    Args:
        devices: Scheduled devices for the day
        daily_budget: Spending ceiling for the day
        max_iterations: Safety cap on the number of trims
        floors: Optional per-device lower bounds the trim will not cross

    Returns:
        TrimResult with the trimmed devices and convergence status
    """
    floors = floors or {}
    current = list(devices)
    total = sum(d.cost for d in current)
    iterations = 0

    while total > daily_budget + _TOLERANCE and iterations < max_iterations:
        candidates = [
            idx
            for idx, d in enumerate(current)
            if d.hours > 0
            and d.cost > 0
            and (d.id not in floors or d.cost > floors[d.id].cost + _TOLERANCE)
        ]
        if not candidates:
            break

        # max() keeps the first of equal-cost devices, so ties resolve by input order
        idx = max(candidates, key=lambda i: current[i].cost)
        current[idx] = _shrink(current[idx], floors.get(current[idx].id))
        iterations += 1
        total = sum(d.cost for d in current)

    return TrimResult(
        devices=current,
        total_cost=total,
        iterations=iterations,
        converged=total <= daily_budget + _TOLERANCE,
    )
