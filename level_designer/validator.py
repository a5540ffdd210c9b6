"""Layout validation against a game-type profile."""

from collections import Counter
from dataclasses import dataclass
from typing import Optional

from .errors import LayoutValidationError
from .schema import GameTypeProfile, LayoutData


@dataclass(frozen=True)
class ValidationResult:
    """Pass/fail with a human-readable reason."""
    ok: bool
    message: str

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def passed(cls) -> "ValidationResult":
        return cls(True, "OK")

    @classmethod
    def failed(cls, message: str) -> "ValidationResult":
        return cls(False, message)


def validate_layout(layout: Optional[LayoutData], profile: Optional[GameTypeProfile]) -> ValidationResult:
    """
    Check gameType, catalog membership and per-id maxPerLevel.

    Returns the first problem found, in object order.
    """
    if layout is None:
        return ValidationResult.failed("NullLayout")
    if profile is None:
        return ValidationResult.failed("Null profile")
    if (layout.game_type or "").lower() != (profile.game_type_id or "").lower():
        return ValidationResult.failed(
            f"gameType mismatch: {layout.game_type} vs profile {profile.game_type_id}"
        )

    catalog = profile.catalog
    if catalog is None:
        return ValidationResult.failed("Null catalog")

    counts: Counter = Counter()
    for obj in layout.objects:
        if not obj.id or not obj.id.strip():
            return ValidationResult.failed("Found object with empty id")

        entry = catalog.get(obj.id)
        if entry is None:
            return ValidationResult.failed(f"Object id '{obj.id}' not in catalog")

        counts[entry.id] += 1
        if entry.max_per_level is not None and counts[entry.id] > entry.max_per_level:
            return ValidationResult.failed(f"Object '{obj.id}' exceeds maxPerLevel {entry.max_per_level}")

    return ValidationResult.passed()


def ensure_valid(layout: Optional[LayoutData], profile: Optional[GameTypeProfile]) -> LayoutData:
    """Validate and return the layout, raising LayoutValidationError on failure."""
    result = validate_layout(layout, profile)
    if not result.ok:
        raise LayoutValidationError(result.message)
    return layout
