from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings pulled from ``PY_MOSAIC_*`` environment variables."""

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Grid Configuration
    lattice: str = Field(default="hexagonal", description="Cell shape (hexagonal or square)")

    # Polisher Configuration
    max_iterations: int = Field(default=40, ge=0, description="Approximate polishing pass cap")
    exact_max_iterations: int = Field(default=1000, ge=1, description="Exact polishing pass cap")

    # Export Configuration
    export_dir: str = Field(default="./exports", description="Directory for coordinate exports")

    class Config:
        env_prefix = "PY_MOSAIC_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate singleton settings object
settings = Settings()
