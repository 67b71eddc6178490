"""Pipeline and step execution."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from .canonical import CanonicalStore, context_snippet
from .claims import ClaimTracker
from .config import Settings, get_settings
from .detectors import Detector, DetectorRegistry, registry
from .errors import ConfigError, ErrorCategory
from .fingerprint import Fingerprinter
from .metrics import (
    matches_redacted_total,
    runs_total,
    step_duration_ms,
    steps_executed_total,
    steps_skipped_total,
)
from .models import PipelineConfig, StepConfig
from .render import render_replacement

PipelineInput = PipelineConfig | Mapping[str, Any] | str | bytes


@dataclass
class StepDiff:
    before: str
    after: str


def parse_pipeline(pipeline: PipelineInput) -> PipelineConfig:
    """Validate ``pipeline`` into a :class:`PipelineConfig`.

    Raises :class:`ConfigError` if it does not have the expected shape.
    """
    if isinstance(pipeline, PipelineConfig):
        return pipeline
    try:
        if isinstance(pipeline, (str, bytes)):
            return PipelineConfig.model_validate_json(pipeline)
        return PipelineConfig.model_validate(pipeline)
    except ValidationError as exc:
        raise ConfigError(f"Invalid pipeline config: {exc}") from exc


def type_prefix(step: StepConfig, detectors: DetectorRegistry = registry) -> str:
    """Prefix used in canonical IDs generated by ``step``."""
    if step.label:
        return "".join(c if c.isalnum() else "_" for c in step.label.upper())
    return detectors.default_prefix(step.type)


class Engine:
    """Redaction engine for one session.

    The engine draws a random session secret when it is created and keys every
    fingerprint with it for its whole lifetime. The canonical map, on the other
    hand, only lives for a single :meth:`run`: it is cleared when the next run
    starts, so IDs restart at ``<PREFIX>_1`` each time.

    An engine is not safe for concurrent runs; use one engine per worker.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        detectors: DetectorRegistry | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.context_radius = settings.context_radius
        self.detectors = detectors or registry
        self._fingerprinter = Fingerprinter()
        self.store = CanonicalStore(max_contexts=settings.max_contexts)
        self.claims = ClaimTracker()
        self.log = logging.getLogger(__name__)

    def fingerprint(self, value: str) -> str:
        return self._fingerprinter.fingerprint(value)

    def run(self, text: str, pipeline: PipelineInput) -> str:
        """Run the enabled steps of ``pipeline`` over ``text`` in order."""
        config = parse_pipeline(pipeline)

        self.claims.clear()
        self.store.clear()
        runs_total.inc()

        for step in config.steps:
            if not step.enabled:
                continue
            text = self.execute_step(step, text)
        return text

    def execute_step(self, step: StepConfig, text: str) -> str:
        """Apply a single step to ``text`` and return the rewritten text."""
        # Offsets from a previous step refer to text that no longer exists.
        self.claims.clear()

        detector = self.detectors.get(step.type)
        if detector is None:
            steps_skipped_total.inc()
            self.log.info(
                "step_skipped",
                extra={"event_type": "step_skipped", "step_id": step.id, "step_type": step.type},
            )
            return text

        prefix = type_prefix(step, self.detectors)
        with step_duration_ms.time():
            output, redacted = self._apply(detector, step, prefix, text)
        steps_executed_total.inc()
        matches_redacted_total.inc(redacted)
        self.log.info(
            "step_done",
            extra={
                "event_type": "step_done",
                "step_id": step.id,
                "step_type": step.type,
                "matches": redacted,
                "latency_ms": step_duration_ms.last_ms,
            },
        )
        return output

    def _apply(
        self, detector: Detector, step: StepConfig, prefix: str, text: str
    ) -> tuple[str, int]:
        config: Mapping[str, Any] = step.config
        if detector.default_mode and "mode" not in config:
            config = {**config, "mode": detector.default_mode}

        # All matches are taken from the unmodified step input so their
        # offsets agree; output is assembled left to right from those offsets.
        matches = sorted(detector.detect(text, config), key=lambda m: (m.start, m.end))
        pieces: list[str] = []
        cursor = 0
        redacted = 0
        for match in matches:
            if self.claims.is_claimed(match.start, match.end):
                continue
            entry = self.store.record_occurrence(
                self.fingerprint(match.text),
                match.text,
                prefix,
                detector.kind,
                context_snippet(text, match.start, match.end, self.context_radius),
            )
            pieces.append(text[cursor : match.start])
            pieces.append(render_replacement(match.text, entry.id, config))
            cursor = match.end
            self.claims.claim(match.start, match.end)
            redacted += 1
        pieces.append(text[cursor:])
        return "".join(pieces), redacted

    def canonical_map(self) -> dict:
        """Return ``{"meta": {}, "canonical": {fingerprint: entry}}`` for the last run."""
        return self.store.to_map()

    def canonical_map_json(self, indent: int | None = None) -> str:
        return json.dumps(self.canonical_map(), indent=indent)

    def inspect_step(self, text: str, pipeline: PipelineInput, step_id: str) -> StepDiff:
        """Return the text just before and just after the step ``step_id``.

        Both sides are full runs of the enabled steps up to that point, so the
        canonical map afterwards reflects the ``after`` run.
        """
        config = parse_pipeline(pipeline)
        index = next((i for i, s in enumerate(config.steps) if s.id == step_id), None)
        if index is None:
            self.log.warning(
                "unknown_step",
                extra={
                    "event_type": "unknown_step",
                    "step_id": step_id,
                    "error_category": ErrorCategory.CONFIG.value,
                },
            )
            raise KeyError(step_id)
        before = self.run(text, config.model_copy(update={"steps": config.steps[:index]}))
        after = self.run(text, config.model_copy(update={"steps": config.steps[: index + 1]}))
        return StepDiff(before=before, after=after)
