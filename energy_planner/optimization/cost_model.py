"""
Energy and cost arithmetic shared by every allocator.

Negative inputs are a caller contract violation and are rejected upstream,
so nothing here validates.
"""

import math

# Guards against 0.3 * 10 landing on 2.9999999999999996 before flooring
_FLOOR_EPSILON = 1e-9


def energy_kwh(wattage_w: float, hours: float) -> float:
    """Energy in kWh for running a device of ``wattage_w`` for ``hours``."""
    return wattage_w / 1000 * hours


def calculate_cost(wattage_w: float, hours: float, price_per_kwh: float) -> float:
    """Cost of running a device of ``wattage_w`` for ``hours``."""
    return energy_kwh(wattage_w, hours) * price_per_kwh


def affordable_hours(budget: float, wattage_w: float, price_per_kwh: float) -> float:
    """Hours a device can run before spending ``budget``."""
    if budget <= 0:
        return 0.0
    return budget * 1000 / (wattage_w * price_per_kwh)


def floor_hours(hours: float) -> float:
    """Round hours down to 1 decimal place."""
    return max(0.0, math.floor(hours * 10 + _FLOOR_EPSILON) / 10)


def floor_cost(cost: float) -> float:
    """Round a cost down to 2 decimal places."""
    return max(0.0, math.floor(cost * 100 + _FLOOR_EPSILON) / 100)
