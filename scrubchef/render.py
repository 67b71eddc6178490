from __future__ import annotations

from collections.abc import Mapping
from typing import Any

DEFAULT_MODE = "placeholder"
DEFAULT_MASK_CHAR = "*"
DEFAULT_PRESERVE_MASK_CHAR = "#"
DEFAULT_PRESERVE_COUNT = 4


def _mask_char(config: Mapping[str, Any], default: str) -> str:
    value = config.get("maskChar")
    return value if isinstance(value, str) and value else default


def _preserve_count(config: Mapping[str, Any]) -> int:
    value = config.get("preserveCount")
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return DEFAULT_PRESERVE_COUNT


def render_replacement(original: str, canonical_id: str, config: Mapping[str, Any]) -> str:
    """Return the text that replaces ``original``.

    A non-empty ``replacement`` wins over any mode. Otherwise ``mode`` selects
    ``mask`` (every character masked), ``preserveLastN`` (all but the last
    ``preserveCount`` characters masked) or the ``<ID>`` placeholder.
    """
    replacement = config.get("replacement")
    if isinstance(replacement, str) and replacement:
        return replacement

    mode = config.get("mode") or DEFAULT_MODE
    if mode == "mask":
        return _mask_char(config, DEFAULT_MASK_CHAR) * len(original)
    if mode == "preserveLastN":
        n = _preserve_count(config)
        if len(original) <= n:
            return original
        keep = len(original) - n
        return _mask_char(config, DEFAULT_PRESERVE_MASK_CHAR) * keep + original[keep:]
    return f"<{canonical_id}>"
