from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from deathshock.controller import TriggerHandle
from deathshock.fsm import TriggerPhase

DEATH_EVENT = "player_death"


class GameEvent(BaseModel):
    """Event posted by the game-side mod. Only `player_death` fires a trigger."""

    type: str = Field(..., min_length=1, max_length=64)
    ts: float | None = None
    player: dict[str, Any] | None = None


class TriggerStatus(BaseModel):
    accepted: bool = True
    trigger_id: str | None = None
    state: TriggerPhase | None = None
    intensity: int | None = None
    duration_ms: int | None = None
    status_code: int | None = None
    error_kind: str | None = None
    message: str | None = None

    @staticmethod
    def from_handle(handle: TriggerHandle) -> "TriggerStatus":
        return TriggerStatus(
            trigger_id=handle.trigger_id,
            state=handle.state,
            intensity=handle.intensity,
            duration_ms=handle.duration_ms,
            status_code=handle.status_code,
            error_kind=handle.error_kind.value if handle.error_kind else None,
            message=handle.message,
        )
