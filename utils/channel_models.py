"""Helpers for reading and writing channel model lists."""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

# Keys checked, in order, when a model descriptor is an object
MODEL_ID_KEYS = ("id", "name", "model")


def _model_id(entry: Any) -> str | None:
    if isinstance(entry, str):
        value = entry.strip()
        return value or None
    if isinstance(entry, dict):
        for key in MODEL_ID_KEYS:
            value = entry.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def normalize_models_input(value: Any) -> list[str]:
    """Turn whatever an upstream or an operator supplied into a list of model IDs.

    Accepts a list of strings or descriptor objects (`{"id": ...}`), an
    OpenAI-style `{"data": [...]}` envelope, or a JSON string holding either.
    Anything else yields an empty list. Order is preserved and duplicates
    are kept; de-duplication is up to the caller.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            logger.debug("Model input is not JSON, ignoring")
            return []

    if isinstance(value, dict) and isinstance(value.get("data"), list):
        value = value["data"]

    if not isinstance(value, list):
        return []

    models = []
    for entry in value:
        model_id = _model_id(entry)
        if model_id is not None:
            models.append(model_id)
    return models


def models_to_json(models: list[str]) -> str:
    """Serialize model IDs for the `models_json` column."""
    return json.dumps(list(dict.fromkeys(models)), separators=(",", ":"))


def parse_models_json(models_json: str | None) -> list[str]:
    if not models_json:
        return []
    return normalize_models_input(models_json)
