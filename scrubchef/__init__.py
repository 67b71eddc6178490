"""ScrubChef redaction engine.

Detects sensitive values in text with a configurable pipeline of pattern
steps, replaces each occurrence with a stable placeholder, and keeps a
per-run canonical map of every distinct value seen. Modules do not perform
any I/O on import.
"""

from .engine import Engine
from .errors import ConfigError, MissingParameterError, ScrubError

__all__ = [
    "ConfigError",
    "Engine",
    "MissingParameterError",
    "ScrubError",
    "__version__",
]

__version__ = "0.1.0"
