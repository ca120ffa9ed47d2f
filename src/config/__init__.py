"""
Configuration package for vaultpress

Provides export settings via environment variables using pydantic-settings.
"""

from .settings import appsettings, ExportSettings

__all__ = ["appsettings", "ExportSettings"]
