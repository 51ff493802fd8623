"""
Input validation for the planning entry points.

Every entry point validates its inputs here before doing any allocation work.
Bad input is rejected and never clamped.
"""

import math
from typing import Iterable, List

from energy_planner.optimization.device_models import Device
from energy_planner.optimization.exceptions import InvalidDeviceError, InvalidInputError


def validate_devices(devices: Iterable[Device]) -> List[Device]:
    """Validate a device list for planning.

    Args:
        devices: Devices to plan for

    Returns:
        The devices as a list

    Raises:
        InvalidInputError: If the list is empty or ids repeat
        InvalidDeviceError: If an entry is not a valid Device
    """
    devices = list(devices or [])
    if not devices:
        raise InvalidInputError("At least one device must be provided")

    seen = set()
    for device in devices:
        if not isinstance(device, Device):
            raise InvalidDeviceError(
                f"Expected Device, got {type(device).__name__}"
            )
        # Devices are mutable dataclasses, so re-check fields edited after creation
        device._validate()
        if device.id in seen:
            raise InvalidInputError(f"Duplicate device id '{device.id}'")
        seen.add(device.id)

    return devices


def _is_finite(value) -> bool:
    return value is not None and math.isfinite(value)


def validate_price(price_per_kwh: float) -> None:
    """Reject a non-positive price per kWh."""
    if not _is_finite(price_per_kwh) or price_per_kwh <= 0:
        raise InvalidInputError(
            f"Price per kWh must be positive, got {price_per_kwh}"
        )


def validate_amount(amount: float, label: str) -> None:
    """Reject a negative budget or cost figure."""
    if not _is_finite(amount) or amount < 0:
        raise InvalidInputError(f"{label} must be non-negative, got {amount}")
