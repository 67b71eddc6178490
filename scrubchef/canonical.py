"""Canonical records for every distinct value redacted during a run."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

DEFAULT_CONTEXT_RADIUS = 20
DEFAULT_MAX_CONTEXTS = 3


@dataclass
class CanonicalEntry:
    id: str
    type: str
    original: str
    fingerprint: str
    occurrences: int = 0
    contexts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def context_snippet(text: str, start: int, end: int, radius: int = DEFAULT_CONTEXT_RADIUS) -> str:
    """Return ``text[start:end]`` widened by ``radius`` characters on each side."""
    return text[max(0, start - radius) : min(len(text), end + radius)]


class CanonicalStore:
    """Maps fingerprints to canonical entries and hands out per-prefix IDs.

    IDs have the form ``<PREFIX>_<N>`` where ``N`` counts from 1 separately for
    every prefix. An entry's ID is fixed when the fingerprint is first seen.
    """

    def __init__(self, max_contexts: int = DEFAULT_MAX_CONTEXTS) -> None:
        self.max_contexts = max_contexts
        self.entries: dict[str, CanonicalEntry] = {}
        self._next_ids: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self.entries

    def get(self, fingerprint: str) -> CanonicalEntry | None:
        return self.entries.get(fingerprint)

    def clear(self) -> None:
        """Drop all entries and restart numbering for every prefix."""
        self.entries.clear()
        self._next_ids.clear()

    def _allocate_id(self, type_prefix: str) -> str:
        n = self._next_ids.get(type_prefix, 1)
        self._next_ids[type_prefix] = n + 1
        return f"{type_prefix}_{n}"

    def record_occurrence(
        self,
        fingerprint: str,
        value: str,
        type_prefix: str,
        type_lower: str,
        context: str,
    ) -> CanonicalEntry:
        entry = self.entries.get(fingerprint)
        if entry is None:
            entry = CanonicalEntry(
                id=self._allocate_id(type_prefix),
                type=type_lower,
                original=value,
                fingerprint=fingerprint,
            )
            self.entries[fingerprint] = entry
        entry.occurrences += 1
        if len(entry.contexts) < self.max_contexts and context not in entry.contexts:
            entry.contexts.append(context)
        return entry

    def to_map(self) -> dict:
        return {
            "meta": {},
            "canonical": {fp: entry.to_dict() for fp, entry in self.entries.items()},
        }
