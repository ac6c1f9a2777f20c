"""
Utility helpers.
"""

from .geometry import polygon_area, signed_polygon_area
from .log_config import configure_logging

__all__ = ['polygon_area', 'signed_polygon_area', 'configure_logging']
