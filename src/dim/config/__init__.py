"""
Configuration management.
"""

from .config_loader import DEFAULT_CONFIG, DimConfig

__all__ = ["DEFAULT_CONFIG", "DimConfig"]
