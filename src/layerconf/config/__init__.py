"""
Settings for layerconf itself.

Uses pydantic-settings for environment variable loading.
"""

from layerconf.config.settings import Settings, split_profiles

__all__ = ["Settings", "split_profiles"]
