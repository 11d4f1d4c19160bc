"""
Configuration management using Pydantic Settings.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

PROJECT_DIR = Path(__file__).resolve().parent.parent


def _raster_from_env() -> bool:
    return os.environ.get("RASTER") == "1"


class Settings(BaseSettings):
    """Export settings loaded from environment variables."""

    # Paths
    project_dir: Path = PROJECT_DIR
    dist_dir_name: str = "dist"
    logo_dir_name: str = "assets/logos"

    # Browser
    chrome_executable: Optional[Path] = None
    headless: bool = True
    navigation_timeout_ms: int = 60_000
    settle_timeout_s: float = 30.0
    logo_timeout_ms: int = 10_000

    # Output
    raster: bool = Field(default_factory=_raster_from_env)

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "PRINT_EXPORT_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def dist_dir(self) -> Path:
        return self.project_dir / self.dist_dir_name

    @property
    def logo_dir(self) -> Path:
        return self.project_dir / self.logo_dir_name


def get_settings(**overrides) -> Settings:
    """Build a fresh settings object; keyword overrides win over the environment."""
    return Settings(**overrides)
