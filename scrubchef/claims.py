from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ClaimedRegion:
    start: int
    end: int


@dataclass
class ClaimTracker:
    """Half-open ranges of the current step's input that are already redacted."""

    regions: list[ClaimedRegion] = field(default_factory=list)

    def clear(self) -> None:
        self.regions.clear()

    def is_claimed(self, start: int, end: int) -> bool:
        return any(not (end <= r.start or start >= r.end) for r in self.regions)

    def claim(self, start: int, end: int) -> None:
        # Callers check is_claimed first; regions never overlap.
        self.regions.append(ClaimedRegion(start, end))
