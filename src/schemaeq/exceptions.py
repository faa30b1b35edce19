"""Exception classes for schemaeq."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from schemaeq.equivalency.execution import Failure

__all__ = [
    "SchemaeqError",
    "SchemaLoadError",
    "ConfigError",
    "EquivalencyAssertionError",
]


class SchemaeqError(Exception):
    """Base exception for schemaeq."""


class SchemaLoadError(SchemaeqError):
    """Error loading schema definition files."""


class ConfigError(SchemaeqError):
    """Error in configuration or in an options file."""


class EquivalencyAssertionError(SchemaeqError, AssertionError):
    """Raised by the assert_* helpers once all failures have been collected."""

    def __init__(self, failures: list["Failure"]):
        self.failures = failures
        super().__init__("\n".join(failure.message for failure in failures))
