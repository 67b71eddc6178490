from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Classification for error logging."""

    CONFIG = "config"
    PARAMETER = "parameter"
    PATTERN = "pattern"
    IO = "io"


class ScrubError(Exception):
    """Base class for errors surfaced to callers of the engine."""

    category: ErrorCategory = ErrorCategory.CONFIG


class ConfigError(ScrubError, ValueError):
    """The pipeline configuration does not parse into the expected shape."""

    category = ErrorCategory.CONFIG


class MissingParameterError(ScrubError, ValueError):
    """A step type's required ``config`` field is absent."""

    category = ErrorCategory.PARAMETER

    def __init__(self, step_type: str, parameter: str) -> None:
        super().__init__(f"step {step_type!r} requires config parameter {parameter!r}")
        self.step_type = step_type
        self.parameter = parameter
