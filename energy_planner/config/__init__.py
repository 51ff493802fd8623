"""Runtime settings and logging setup for the planner."""

from energy_planner.config.logging import configure_logging
from energy_planner.config.settings import Settings, get_settings, settings

__all__ = ["Settings", "configure_logging", "get_settings", "settings"]
