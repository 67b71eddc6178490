"""Shareable pipeline recipes."""

from __future__ import annotations

import json
import uuid
from collections.abc import Iterable

from pydantic import ValidationError

from .errors import ConfigError
from .models import PipelineConfig, StepConfig


class PipelineRecipe(PipelineConfig):
    name: str = "Custom Pipeline"
    description: str | None = None


def _step(step_id: str, step_type: str) -> StepConfig:
    return StepConfig(id=step_id, type=step_type)


EXAMPLE_RECIPES: list[PipelineRecipe] = [
    PipelineRecipe(
        name="PII Scrubber",
        description="Removes common personal identifiers like emails and UUIDs.",
        steps=[_step("ex_1", "email"), _step("ex_2", "uuid")],
    ),
    PipelineRecipe(
        name="Infrastructure Logs",
        description="Cleans up IP addresses and MAC addresses from server logs.",
        steps=[_step("ex_3", "ipv4"), _step("ex_4", "mac")],
    ),
    PipelineRecipe(
        name="API Trace Cleaner",
        description="Redacts JWTs and UUIDs from API request/response traces.",
        steps=[_step("ex_5", "jwt"), _step("ex_6", "uuid")],
    ),
]


def get_recipe(name: str) -> PipelineRecipe:
    """Return the built-in recipe called ``name`` (case-insensitive)."""
    for recipe in EXAMPLE_RECIPES:
        if recipe.name.lower() == name.lower():
            return recipe
    raise KeyError(name)


def serialize_pipeline(steps: Iterable[StepConfig], name: str = "Custom Pipeline") -> str:
    recipe = PipelineRecipe(version=1, name=name, steps=list(steps))
    return recipe.model_dump_json(indent=2, exclude_none=True)


def parse_recipe(text: str | bytes) -> PipelineRecipe:
    """Parse a recipe document and give every step a fresh ``id``.

    Imported steps get new IDs so they never collide with steps already in a
    pipeline.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid pipeline recipe: {exc}") from exc
    if not isinstance(data, dict) or not data.get("version") or not isinstance(
        data.get("steps"), list
    ):
        raise ConfigError("Invalid pipeline recipe format")
    try:
        recipe = PipelineRecipe.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid pipeline recipe: {exc}") from exc
    for step in recipe.steps:
        step.id = uuid.uuid4().hex
    return recipe
