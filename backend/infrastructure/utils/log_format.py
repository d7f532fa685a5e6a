from __future__ import annotations

import json
from enum import Enum
from typing import Any

# Upstream error bodies and payload previews are cut to this many characters.
MAX_VALUE_CHARS = 200


def _clip(text: str, limit: int) -> str:
    if limit > 0 and len(text) > limit:
        return text[:limit] + "..."
    return text


def _format_value(value: Any, limit: int) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        # Quoted so spaces and symbols stay unambiguous
        return json.dumps(_clip(value, limit), ensure_ascii=False)
    if isinstance(value, (list, tuple, dict)):
        return _clip(json.dumps(value, ensure_ascii=False, default=str), limit)
    return json.dumps(_clip(str(value), limit), ensure_ascii=False)


def format_kv(_limit: int = MAX_VALUE_CHARS, **fields: Any) -> str:
    """
    Render a compact single-line key=value log string; None fields are dropped.

    Example:
      what="movie details id=550" status=404 body="{...}"
    """
    return " ".join(
        f"{key}={_format_value(value, _limit)}" for key, value in fields.items() if value is not None
    )
