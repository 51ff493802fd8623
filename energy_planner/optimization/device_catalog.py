"""
Household Device Catalog

Known device types, their categories and an emission estimate per type.
The catalog also decides which devices are refrigeration-class and
therefore get a minimum reservation from the budget allocator.
"""

from enum import Enum
from typing import Dict, List


class DeviceCategory(Enum):
    """Categories used to group device types."""

    TEMPERATURE = "temperature"
    KITCHEN = "kitchen"
    LAUNDRY = "laundry"
    ELECTRONICS = "electronics"
    LIGHTING = "lighting"
    UTILITIES = "utilities"
    OUTDOOR = "outdoor"
    CLEANING = "cleaning"
    HEALTH = "health"
    OTHER = "other"


class EmissionClass(Enum):
    """Coarse emission classes mapped onto the 1-5 emission scale."""

    VERY_HIGH = 5
    HIGH = 4
    MEDIUM = 3
    LOW = 1


DEVICE_TYPES: Dict[str, Dict[str, object]] = {
    # Temperature
    "air_conditioner": {"label": "Air Conditioner", "category": DeviceCategory.TEMPERATURE},
    "heater": {"label": "Heater", "category": DeviceCategory.TEMPERATURE},
    "fan": {"label": "Fan", "category": DeviceCategory.TEMPERATURE},
    "ceiling_fan": {"label": "Ceiling Fan", "category": DeviceCategory.TEMPERATURE},
    "dehumidifier": {"label": "Dehumidifier", "category": DeviceCategory.TEMPERATURE},
    # Kitchen
    "refrigerator": {"label": "Refrigerator", "category": DeviceCategory.KITCHEN},
    "freezer": {"label": "Freezer", "category": DeviceCategory.KITCHEN},
    "microwave": {"label": "Microwave", "category": DeviceCategory.KITCHEN},
    "oven": {"label": "Oven", "category": DeviceCategory.KITCHEN},
    "electric_stove": {"label": "Electric Stove", "category": DeviceCategory.KITCHEN},
    "dishwasher": {"label": "Dishwasher", "category": DeviceCategory.KITCHEN},
    "blender": {"label": "Blender", "category": DeviceCategory.KITCHEN},
    "toaster": {"label": "Toaster", "category": DeviceCategory.KITCHEN},
    "coffee_maker": {"label": "Coffee Maker", "category": DeviceCategory.KITCHEN},
    "electric_kettle": {"label": "Electric Kettle", "category": DeviceCategory.KITCHEN},
    # Laundry
    "washing_machine": {"label": "Washing Machine", "category": DeviceCategory.LAUNDRY},
    "dryer": {"label": "Clothes Dryer", "category": DeviceCategory.LAUNDRY},
    "iron": {"label": "Electric Iron", "category": DeviceCategory.LAUNDRY},
    # Electronics
    "television": {"label": "Television", "category": DeviceCategory.ELECTRONICS},
    "computer": {"label": "Desktop Computer", "category": DeviceCategory.ELECTRONICS},
    "laptop": {"label": "Laptop", "category": DeviceCategory.ELECTRONICS},
    "phone_charger": {"label": "Phone Charger", "category": DeviceCategory.ELECTRONICS},
    "gaming_console": {"label": "Gaming Console", "category": DeviceCategory.ELECTRONICS},
    "router": {"label": "WiFi Router", "category": DeviceCategory.ELECTRONICS},
    "sound_system": {"label": "Sound System", "category": DeviceCategory.ELECTRONICS},
    # Lighting
    "led_bulb": {"label": "LED Bulb", "category": DeviceCategory.LIGHTING},
    "fluorescent_light": {"label": "Fluorescent Light", "category": DeviceCategory.LIGHTING},
    "incandescent_bulb": {"label": "Incandescent Bulb", "category": DeviceCategory.LIGHTING},
    # Utilities
    "water_pump": {"label": "Water Pump", "category": DeviceCategory.UTILITIES},
    "water_heater": {"label": "Water Heater", "category": DeviceCategory.UTILITIES},
    "generator": {"label": "Generator", "category": DeviceCategory.UTILITIES},
    # Outdoor
    "lawn_mower": {"label": "Lawn Mower (Electric)", "category": DeviceCategory.OUTDOOR},
    "power_tools": {"label": "Power Tools", "category": DeviceCategory.OUTDOOR},
    # Cleaning
    "vacuum_cleaner": {"label": "Vacuum Cleaner", "category": DeviceCategory.CLEANING},
    # Health
    "air_purifier": {"label": "Air Purifier", "category": DeviceCategory.HEALTH},
    # Other
    "other": {"label": "Other", "category": DeviceCategory.OTHER},
}

REFRIGERATION_KEYWORDS = ("refrigerator", "fridge", "freezer")


def _normalise(text: str) -> str:
    return (text or "").lower().replace("_", " ")


def get_device_category(device_type: str) -> DeviceCategory:
    """Get the category for a catalog device type (OTHER if unknown)."""
    entry = DEVICE_TYPES.get(device_type)
    if entry is None:
        return DeviceCategory.OTHER
    return entry["category"]


def get_device_types_by_category(category: DeviceCategory) -> List[str]:
    """Get all catalog device types in a category."""
    return [key for key, entry in DEVICE_TYPES.items() if entry["category"] == category]


def is_refrigeration_class(device_type: str, name: str = "") -> bool:
    """Check whether a device must keep running to preserve its contents.

    Matches on the device type first and falls back to the display name,
    so a device typed ``other`` but named "Garage Freezer" still counts.
    """
    haystack = f"{_normalise(device_type)} {_normalise(name)}"
    return any(keyword in haystack for keyword in REFRIGERATION_KEYWORDS)


def estimate_emission_level(device_type: str) -> int:
    """Estimate a 1-5 emission level from a device type.

    Args:
        device_type: Catalog key or free-form type description

    Returns:
        Emission level (5 = worst polluter)
    """
    kind = _normalise(device_type)

    if "gas" in kind or ("heater" in kind and "water" in kind) or "generator" in kind:
        return EmissionClass.VERY_HIGH.value

    if any(
        keyword in kind
        for keyword in ("air conditioner", "heater", "dryer", "oven", "stove")
    ):
        return EmissionClass.HIGH.value

    if any(
        keyword in kind
        for keyword in ("tv", "television", "microwave", "washing machine", "dishwasher")
    ):
        return EmissionClass.MEDIUM.value

    return EmissionClass.LOW.value
