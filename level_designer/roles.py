"""Role classification of catalog ids."""

from enum import Enum
from typing import Optional

from .constants import ROLE_KEYWORDS, ROLE_TAGS
from .schema import Catalog


class Role(str, Enum):
    PATH = "path"
    SLOT = "slot"
    SPAWNER = "spawner"
    BASE = "base"
    DECORATION = "decoration"
    OTHER = "other"


def classify_role(object_id: Optional[str], catalog: Optional[Catalog] = None) -> Role:
    """
    Catalog tags decide first; ids without a catalog entry or without role
    tags fall back to case-insensitive keyword matching on the id.
    """
    if not object_id:
        return Role.OTHER

    entry = catalog.get(object_id) if catalog is not None else None
    if entry is not None and entry.tags:
        tags = {t.strip().lower() for t in entry.tags}
        for role, role_tags in ROLE_TAGS.items():
            if tags.intersection(role_tags):
                return Role(role)

    lowered = object_id.lower()
    for role, keywords in ROLE_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return Role(role)
    return Role.OTHER


def find_role_id(role: Role, layout_ids, catalog: Optional[Catalog] = None) -> Optional[str]:
    """First id with the given role among layout_ids, then among catalog entries."""
    for object_id in layout_ids:
        if classify_role(object_id, catalog) == role:
            return object_id
    if catalog is not None:
        for entry in catalog:
            if classify_role(entry.id, catalog) == role:
                return entry.id
    return None
