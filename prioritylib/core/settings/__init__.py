"""Configuration management."""

from prioritylib.core.settings.settings import PrioritySettings, configure_logging, load_settings

__all__ = [
    "PrioritySettings",
    "configure_logging",
    "load_settings",
]
