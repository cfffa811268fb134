"""
Configuration module for the Patreon API client.
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
