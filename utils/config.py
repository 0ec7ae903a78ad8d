"""
Configuration management.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    allowed_origins: List[str] = field(
        default_factory=lambda: _split_origins(os.getenv("ALLOWED_ORIGINS", ""))
    )

    # Data
    data_dir: str = field(default_factory=lambda: os.getenv("DATA_DIR", "./data"))
    hpi_data_file: str = field(default_factory=lambda: os.getenv("HPI_DATA_FILE", ""))

    # Mortgage defaults
    default_amortization_years: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_AMORTIZATION_YEARS", "25"))
    )

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    @property
    def hpi_data_path(self) -> Path:
        """Index data file; defaults to market_hpi.json in the data directory."""
        if self.hpi_data_file:
            return Path(self.hpi_data_file)
        return Path(self.data_dir) / "market_hpi.json"

    @property
    def log_level_value(self) -> int:
        """Numeric logging level, INFO if LOG_LEVEL is unrecognised."""
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "allowed_origins": list(self.allowed_origins),
            "data_dir": self.data_dir,
            "hpi_data_file": str(self.hpi_data_path),
            "default_amortization_years": self.default_amortization_years,
        }


def configure_logging(config: Config) -> None:
    """Configure root logging from LOG_LEVEL."""
    logging.basicConfig(
        level=config.log_level_value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
