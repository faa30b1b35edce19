"""Configuration management for schemaeq."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from schemaeq.equivalency.options import (
    DEFAULT_MAX_RECURSION_DEPTH,
    EquivalencyOptions,
    load_options,
)
from schemaeq.exceptions import ConfigError

__all__ = ["Config", "configure_logging", "DEFAULT_MAX_RECURSION_DEPTH"]

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class Config:
    """Configuration for schemaeq."""

    options_file: Optional[str] = None
    max_recursion_depth: Optional[int] = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(
        cls,
        *,
        options_file: Optional[str] = None,
        max_recursion_depth: Optional[int] = None,
        log_level: Optional[str] = None,
    ) -> "Config":
        """Load configuration from env vars, with explicit overrides.

        Priority (highest to lowest):
        1. Explicit parameters
        2. Environment variables
        3. Defaults

        Raises:
            ConfigError: If a value cannot be parsed.
        """
        if options_file is None:
            options_file = os.environ.get("SCHEMAEQ_OPTIONS_FILE")

        if max_recursion_depth is None:
            env_depth = os.environ.get("SCHEMAEQ_MAX_RECURSION_DEPTH")
            if env_depth is not None:
                try:
                    max_recursion_depth = int(env_depth)
                except ValueError as e:
                    raise ConfigError(
                        f"SCHEMAEQ_MAX_RECURSION_DEPTH must be an integer, got '{env_depth}'"
                    ) from e

        if log_level is None:
            log_level = os.environ.get("SCHEMAEQ_LOG_LEVEL", "WARNING")
        log_level = log_level.upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level '{log_level}'. "
                f"Expected one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )

        return cls(
            options_file=options_file,
            max_recursion_depth=max_recursion_depth,
            log_level=log_level,
        )

    def build_options(self) -> EquivalencyOptions:
        """Create EquivalencyOptions from the options file and overrides."""
        if self.options_file:
            options = load_options(self.options_file)
        else:
            options = EquivalencyOptions()
        if self.max_recursion_depth is not None:
            options.with_max_recursion_depth(self.max_recursion_depth)
        return options


def configure_logging(config: Config) -> None:
    """Apply the configured log level to the schemaeq loggers."""
    logging.basicConfig(format="%(message)s")
    logging.getLogger("schemaeq").setLevel(config.log_level)
