"""
Configuration package for Touchline.
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
