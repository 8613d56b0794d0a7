"""Configuration helpers for sources, timeouts and polling."""

from .settings import Settings, load_settings

__all__ = [
    "Settings",
    "load_settings",
]
