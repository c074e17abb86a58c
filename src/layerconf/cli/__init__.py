"""
Command-line interface for layerconf.
"""

from layerconf.cli.main import cli

__all__ = ["cli"]
