"""
Configuration module for dynaform.

Handles environment variables and default settings.
"""

import logging
import os
from dataclasses import dataclass
from typing import Literal

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

InvisibleFieldValidation = Literal["skip", "validate", "warn"]

INVISIBLE_FIELD_VALIDATION_MODES: tuple[str, ...] = ("skip", "validate", "warn")


@dataclass
class DynaformConfig:
    """Configuration settings for dynaform."""

    # Resolver settings
    invisible_field_validation: InvisibleFieldValidation = "skip"

    # Configuration parsing
    warn_on_unknown_references: bool = True

    # Caches
    schema_cache_size: int = 64
    regex_cache_size: int = 256

    # Logging
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.invisible_field_validation not in INVISIBLE_FIELD_VALIDATION_MODES:
            raise ValueError(
                f"invisible_field_validation must be one of "
                f"{', '.join(INVISIBLE_FIELD_VALIDATION_MODES)}; "
                f"got {self.invisible_field_validation!r}"
            )

    @classmethod
    def from_env(cls) -> "DynaformConfig":
        """
        Create configuration from environment variables.

        If an environment variable is not set, uses the class field default value.
        Defaults are defined only in the class fields.
        """
        _defaults = cls()

        return cls(
            invisible_field_validation=os.getenv(
                "DYNAFORM_INVISIBLE_FIELD_VALIDATION",
                _defaults.invisible_field_validation,
            ).lower(),
            warn_on_unknown_references=os.getenv(
                "DYNAFORM_WARN_UNKNOWN_REFERENCES",
                str(_defaults.warn_on_unknown_references).lower(),
            ).lower() == "true",
            schema_cache_size=int(os.getenv("DYNAFORM_SCHEMA_CACHE_SIZE", str(_defaults.schema_cache_size))),
            regex_cache_size=int(os.getenv("DYNAFORM_REGEX_CACHE_SIZE", str(_defaults.regex_cache_size))),
            log_level=os.getenv("DYNAFORM_LOG_LEVEL", _defaults.log_level).upper(),
        )


config = DynaformConfig.from_env()


def get_config() -> DynaformConfig:
    """Get the current configuration."""
    return config


def update_config(**kwargs) -> DynaformConfig:
    """Update configuration settings."""
    global config
    for key, value in kwargs.items():
        if hasattr(config, key):
            setattr(config, key, value)
    return config


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """
    Apply a log level to the ``dynaform`` logger hierarchy.

    Args:
        level: Level name or number. If None, uses config.log_level.

    Returns:
        The package root logger.
    """
    logger = logging.getLogger("dynaform")
    logger.setLevel(level if level is not None else get_config().log_level)
    return logger
