"""
API payload converters - turn Rebrickable JSON objects into models.
"""

from typing import Any

from ..database.models import LegoSet, LegoTheme
from ..exceptions import ParsingError


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def payload_to_set(payload: dict) -> LegoSet:
    """Convert a Rebrickable set object to a LegoSet (theme name not joined)."""
    if not isinstance(payload, dict):
        raise ParsingError(f"Expected set object, got {type(payload).__name__}")

    return LegoSet(
        set_num=str(payload.get("set_num") or ""),
        name=str(payload.get("name") or ""),
        year=_as_int(payload.get("year")),
        theme_id=_as_int(payload.get("theme_id")),
        num_parts=_as_int(payload.get("num_parts")),
        image_url=payload.get("set_img_url") or None,
    )


def payload_to_theme(payload: dict) -> LegoTheme:
    """Convert a Rebrickable theme object to a LegoTheme."""
    if not isinstance(payload, dict):
        raise ParsingError(f"Expected theme object, got {type(payload).__name__}")

    theme_id = payload.get("id")
    if theme_id is None:
        raise ParsingError("Theme object without id")

    parent_id = payload.get("parent_id")
    return LegoTheme(
        id=_as_int(theme_id),
        name=str(payload.get("name") or ""),
        parent_id=_as_int(parent_id) if parent_id is not None else None,
        set_count=_as_int(payload.get("set_count")),
    )


def payloads_to_sets(payloads: list[dict]) -> list[LegoSet]:
    """Convert a page of set objects, dropping entries without a set number."""
    sets = [payload_to_set(p) for p in payloads]
    return [s for s in sets if s.set_num]


def payloads_to_themes(payloads: list[dict]) -> list[LegoTheme]:
    return [payload_to_theme(p) for p in payloads]
