"""
Mosaic cartograms on hexagonal and square grids with flow-based polishing.
"""

__version__ = "0.1.0"
