from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

BADGE_REQUIREMENT_LEVEL = "level"


@dataclass(frozen=True, slots=True)
class Badge:
    badge_id: UUID
    name: str
    requirement_type: str
    requirement_value: int
    description: str = ""
    icon: str | None = None
