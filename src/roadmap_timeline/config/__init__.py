"""Configuration for Roadmap Timeline."""

from roadmap_timeline.config.settings import AppSettings, get_settings, reset_settings

__all__ = ["AppSettings", "get_settings", "reset_settings"]
