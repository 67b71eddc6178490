"""Detectors driven by user-supplied step parameters."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

from ..errors import ErrorCategory, MissingParameterError
from .base import Match, find_pattern, non_negative_int, registry

log = logging.getLogger(__name__)

DEFAULT_API_KEY_RE = re.compile(r"\b(?:sk|pk|api|token|key|secret)[\-_][a-zA-Z0-9]{20,}\b")


def _required_string(config: Mapping[str, Any], step_type: str, key: str) -> str:
    value = config.get(key)
    if not isinstance(value, str):
        raise MissingParameterError(step_type, key)
    return value


@registry.detector("regex", "REGEX")
def find_regex(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """Matches of a user-supplied regular expression (``pattern``)."""
    source = _required_string(config, "regex", "pattern")
    if not source:
        return iter(())
    try:
        pattern = re.compile(source)
    except re.error:
        # An invalid pattern skips the step instead of failing the pipeline.
        log.warning(
            "invalid_pattern",
            extra={
                "event_type": "invalid_pattern",
                "error_category": ErrorCategory.PATTERN.value,
            },
        )
        return iter(())
    return find_pattern(pattern, text)


@registry.detector("replace", "REPLACE")
def find_literal(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """Occurrences of the literal ``search`` string."""
    search = _required_string(config, "replace", "search")
    if not search:
        return iter(())
    return find_pattern(re.compile(re.escape(search)), text)


@registry.detector("api_key", "APIKEY", aliases=("apikey",))
def find_api_key(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """API keys, either with a given ``prefix`` or a common key prefix."""
    prefix = config.get("prefix")
    if isinstance(prefix, str) and prefix:
        pattern = re.compile(rf"\b{re.escape(prefix)}[\-_]?[a-zA-Z0-9]{{20,}}\b")
    else:
        pattern = DEFAULT_API_KEY_RE
    return find_pattern(pattern, text)


@registry.detector(
    "partial_mask", "MASK", aliases=("partialMask",), default_mode="mask"
)
def find_fixed_range(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """The fixed ``start``/``end`` range of the input."""
    start = non_negative_int(config, "start")
    end = non_negative_int(config, "end")
    start = 0 if start is None else start
    end = len(text) if end is None else min(end, len(text))
    if start >= len(text) or start >= end:
        return
    yield Match(start, end, text[start:end])
