"""Configuration — settings model and loader."""

from distropkg.core.config.loader import Settings, env_flag, load_settings

__all__ = [
    "Settings",
    "env_flag",
    "load_settings",
]
