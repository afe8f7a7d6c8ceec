from __future__ import annotations

from quizplay.core.config import get_settings

DUEL_INVITATION_TTL_SECONDS = max(3600, int(get_settings().duel_invitation_ttl_hours) * 3600)

__all__ = ["DUEL_INVITATION_TTL_SECONDS"]
