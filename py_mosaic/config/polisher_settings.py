"""
Settings for the flow-based polisher.

These control how many build/solve/apply passes the polisher may run and how
it reports a failure to reach the exact cell counts.
"""

from pydantic import BaseModel, Field

from .config import Settings


class PolisherSettings(BaseModel):
    """Limits and switches for one polishing run."""

    max_iterations: int = Field(default=40, ge=0, description="Maximum number of approximate passes")
    exact: bool = Field(default=False, description="Continue with unit-supply passes until every count matches")
    exact_max_iterations: int = Field(default=1000, ge=1, description="Maximum number of exact passes")
    exact_restarts: int = Field(default=0, ge=0, description="How often the restart policy may be consulted")
    raise_on_shortfall: bool = Field(default=False, description="Raise instead of reporting an exact-mode shortfall")
    snapshot_on_tie: bool = Field(default=True, description="Snapshot passes that only match the best error")

    @classmethod
    def from_settings(cls, settings: Settings = None, **overrides) -> "PolisherSettings":
        """Build polisher settings from the environment-backed application settings."""
        if settings is None:
            settings = Settings()
        values = {
            "max_iterations": settings.max_iterations,
            "exact_max_iterations": settings.exact_max_iterations,
        }
        values.update(overrides)
        return cls(**values)
