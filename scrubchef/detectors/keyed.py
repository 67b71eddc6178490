"""Detectors that report only the value part of a ``key -> value`` construct."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import Any

from .base import Match, find_group, registry, string_list

USERNAME_RE = re.compile(r"(?:@|user=|username=|/home/|/users/)([a-zA-Z0-9_-]{3,32})\b")


def _alternation(names: list[str]) -> str:
    return "|".join(re.escape(name) for name in names)


@registry.detector("json_key", "JSON", aliases=("jsonKey",))
def find_json_values(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """String values of ``"key": "value"`` pairs for the listed ``keys``."""
    keys = string_list(config, "keys")
    if not keys:
        return iter(())
    pattern = re.compile(rf'"(?:{_alternation(keys)})"\s*:\s*"([^"]+)"', re.IGNORECASE)
    return find_group(pattern, text)


@registry.detector("query_param", "PARAM", aliases=("queryParam",))
def find_query_values(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """Values following ``?name=`` or ``&name=`` for the listed ``names``."""
    names = string_list(config, "names")
    if not names:
        return iter(())
    pattern = re.compile(rf"[?&](?:{_alternation(names)})=([^&\s#]+)", re.IGNORECASE)
    return find_group(pattern, text)


@registry.detector("http_header", "HEADER", aliases=("header",))
def find_header_values(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """Values of ``Name: value`` header lines for the listed ``names``."""
    names = string_list(config, "names")
    if not names:
        return iter(())
    pattern = re.compile(rf"\b(?:{_alternation(names)}):\s*([^\r\n]+)", re.IGNORECASE)
    return find_group(pattern, text)


@registry.detector("username", "USERNAME")
def find_usernames(text: str, config: Mapping[str, Any]) -> Iterator[Match]:
    """Identifiers after ``@``, ``user=``, ``username=``, ``/home/`` or ``/users/``."""
    return find_group(USERNAME_RE, text)
