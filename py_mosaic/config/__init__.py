"""
Configuration for mosaic cartogram polishing.
"""

from .config import Settings, settings
from .polisher_settings import PolisherSettings

__all__ = ['Settings', 'settings', 'PolisherSettings']
