"""Catalog of detectors, keyed by step type.

Importing this package registers every built-in detector on :data:`registry`.
"""

from __future__ import annotations

from . import keyed, parameterized, patterns  # noqa: F401 - registration side effects
from .base import FALLBACK_PREFIX, Detector, DetectorRegistry, Match, registry

__all__ = [
    "FALLBACK_PREFIX",
    "Detector",
    "DetectorRegistry",
    "Match",
    "registry",
]
