"""Pipeline configuration documents."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StepConfig(BaseModel):
    """One configured detection step."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    type: str
    enabled: bool = True
    label: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("config", mode="before")
    @classmethod
    def _null_config(cls, value: Any) -> Any:
        return {} if value is None else value


class PipelineConfig(BaseModel):
    """Ordered list of steps; each step sees the previous step's output."""

    model_config = ConfigDict(extra="ignore")

    version: int = 1
    steps: list[StepConfig]
