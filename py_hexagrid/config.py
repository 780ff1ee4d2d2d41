"""Configuration management."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings pulled from HEXAGRID_* environment variables."""

    # Grid generation
    grid_size: int = Field(default=8, description="Lattice points per hexagon side")
    max_iteration_count: int = Field(
        default=10, description="Consecutive misses that end triangle pairing"
    )
    force_circle_shape: bool = Field(
        default=False, description="Project boundary points onto the unit circle"
    )
    seed: Optional[int] = Field(default=None, description="LCG seed, random when unset")

    # Relaxation
    relax_iterations: int = Field(default=50, description="Relaxation passes run by the CLI")
    relax_mode: str = Field(default="weighted", description="Relaxation operator (simple, weighted)")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="plain", description="Logging format (plain, json)")

    class Config:
        env_prefix = "HEXAGRID_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
