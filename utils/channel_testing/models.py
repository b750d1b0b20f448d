"""Pydantic models for channel test results."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChannelToken(BaseModel):
    """One API key belonging to a channel. `id` and `name` are descriptive only."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str | None = None
    api_key: str = Field(min_length=1)


class ProbeResult(BaseModel):
    """Outcome of one `/v1/models` request with one key."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    elapsed_ms: int = Field(ge=0)
    models: list[str] = Field(default_factory=list)
    raw_payload: Any = None

    @model_validator(mode="after")
    def _failed_probe_has_no_models(self):
        if not self.ok and self.models:
            raise ValueError("a failed probe cannot report models")
        return self


class TokenTestItem(BaseModel):
    """Per-token entry of a summary."""

    model_config = ConfigDict(frozen=True)

    token_id: str | None = None
    token_name: str | None = None
    ok: bool
    elapsed_ms: int = Field(ge=0)
    models: list[str] = Field(default_factory=list)


class TokenTestSummary(BaseModel):
    """Aggregate over every token tested against one base URL.

    `elapsed_ms` is the rounded average over all items, failures included.
    `models` is the first-seen union of models from successful items only.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    total: int = Field(ge=0)
    success: int = Field(ge=0)
    failed: int = Field(ge=0)
    elapsed_ms: int = Field(ge=0)
    models: list[str] = Field(default_factory=list)
    items: list[TokenTestItem] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "TokenTestSummary":
        return cls(ok=False, total=0, success=0, failed=0, elapsed_ms=0, models=[], items=[])
