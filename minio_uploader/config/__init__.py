"""
Uploader configuration using Pydantic settings.

Configuration comes from the environment and a per-user dotfile.
"""

from .settings import ConfigurationError, Settings, get_settings, load_settings

__all__ = ["ConfigurationError", "Settings", "get_settings", "load_settings"]
