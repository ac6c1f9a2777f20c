"""
Error types raised by the mosaic cartogram model and the polisher.
"""


class MosaicError(Exception):
    """Base class for all mosaic cartogram errors."""


class InfeasibleFlowError(MosaicError):
    """The min-cost flow solver could not route the requested supplies."""


class InvalidMoveError(MosaicError):
    """A move was executed although its evaluation found it invalid."""


class ExactModeExhaustedError(MosaicError):
    """Exact polishing stopped before every region reached its desired size."""

    def __init__(self, message: str, remaining_error: int = 0, iterations: int = 0):
        super().__init__(message)
        self.remaining_error = remaining_error
        self.iterations = iterations


class MalformedGuidingShapeError(MosaicError):
    """A region's guiding shape is missing or does not have the expected size."""


class CoordinateFormatError(MosaicError):
    """A coordinate export file could not be parsed."""

    def __init__(self, message: str, line_number: int = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
