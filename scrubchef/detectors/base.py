"""Detector registry and shared matching helpers."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

FALLBACK_PREFIX = "REDACTED"


class Match(NamedTuple):
    """A detected span ``[start, end)`` of the scanned text."""

    start: int
    end: int
    text: str


FindFunc = Callable[[str, Mapping[str, Any]], Iterable[Match]]


@dataclass
class Detector:
    """Description of a detector available to pipeline steps."""

    kind: str
    prefix: str
    find: FindFunc
    aliases: tuple[str, ...] = ()
    default_mode: str | None = None
    description: str = ""

    def detect(self, text: str, config: Mapping[str, Any]) -> list[Match]:
        return list(self.find(text, config))


class DetectorRegistry:
    """Maps step type tags (and their aliases) to detectors.

    The :meth:`detector` method registers a find function as a decorator::

        registry = DetectorRegistry()


        @registry.detector("email", "EMAIL")
        def find_email(text, config): ...

    Unknown tags resolve to ``None``.
    """

    def __init__(self) -> None:
        self._detectors: dict[str, Detector] = {}

    def register(self, detector: Detector) -> Detector:
        for tag in (detector.kind, *detector.aliases):
            self._detectors[tag] = detector
        return detector

    def detector(
        self,
        kind: str,
        prefix: str,
        *,
        aliases: tuple[str, ...] = (),
        default_mode: str | None = None,
        description: str = "",
    ) -> Callable[[FindFunc], FindFunc]:
        def decorator(func: FindFunc) -> FindFunc:
            self.register(
                Detector(
                    kind=kind,
                    prefix=prefix,
                    find=func,
                    aliases=aliases,
                    default_mode=default_mode,
                    description=description or (func.__doc__ or "").strip(),
                )
            )
            return func

        return decorator

    def get(self, type_tag: str) -> Detector | None:
        return self._detectors.get(type_tag)

    def default_prefix(self, type_tag: str) -> str:
        detector = self.get(type_tag)
        return detector.prefix if detector else FALLBACK_PREFIX

    def detectors(self) -> list[Detector]:
        """Return each registered detector once, in registration order."""
        seen: dict[str, Detector] = {}
        for detector in self._detectors.values():
            seen.setdefault(detector.kind, detector)
        return list(seen.values())

    def __contains__(self, type_tag: object) -> bool:
        return type_tag in self._detectors


registry = DetectorRegistry()


# Helpers -------------------------------------------------------------------


def find_pattern(pattern: re.Pattern[str], text: str) -> Iterator[Match]:
    """Yield the non-empty matches of ``pattern`` from left to right.

    Zero-width matches are dropped, so a user pattern such as ``x*`` never
    redacts the empty string between characters.
    """
    for m in pattern.finditer(text):
        if m.end() > m.start():
            yield Match(m.start(), m.end(), m.group(0))


def find_group(pattern: re.Pattern[str], text: str, group: int | str = 1) -> Iterator[Match]:
    """Yield only the span of ``group`` for each match of ``pattern``."""
    for m in pattern.finditer(text):
        start, end = m.span(group)
        if start < 0 or end <= start:
            continue
        yield Match(start, end, m.group(group))


def string_list(config: Mapping[str, Any], key: str) -> list[str]:
    """Read ``key`` as a list of non-empty strings.

    Accepts either a JSON list or a comma separated string.
    """
    value = config.get(key)
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, list):
        items = value
    else:
        return []
    return [item.strip() for item in items if isinstance(item, str) and item.strip()]


def non_negative_int(config: Mapping[str, Any], key: str) -> int | None:
    value = config.get(key)
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None
