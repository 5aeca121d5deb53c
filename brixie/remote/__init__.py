"""
Remote catalog access.
"""

from .base import CatalogRemote, EntityKind
from .converters import payload_to_set, payload_to_theme, payloads_to_sets, payloads_to_themes
from .rebrickable import RebrickableCatalog

__all__ = [
    "CatalogRemote",
    "EntityKind",
    "RebrickableCatalog",
    "payload_to_set",
    "payload_to_theme",
    "payloads_to_sets",
    "payloads_to_themes",
]
