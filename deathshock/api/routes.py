from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from deathshock.api.deps import get_controller
from deathshock.api.models import DEATH_EVENT, GameEvent, TriggerStatus
from deathshock.controller import TriggerController
from deathshock.websocket_hub import hub

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/popups")
async def popups_ws(websocket: WebSocket) -> None:
    await hub.connect(websocket)

    try:
        # Keep the socket open; the mod may send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(websocket)
    except Exception:
        await hub.disconnect(websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


# Sync route: FastAPI runs it on a worker thread, which stands in for the game's
# event thread. trigger() does file I/O but never waits on the network.
@router.post("/events", response_model=TriggerStatus, status_code=status.HTTP_202_ACCEPTED)
def post_event(payload: GameEvent, controller: TriggerController = Depends(get_controller)) -> TriggerStatus:
    if payload.type != DEATH_EVENT:
        logger.debug("Ignoring game event of type %s", payload.type)
        return TriggerStatus(accepted=False)

    handle = controller.trigger()
    return TriggerStatus.from_handle(handle)


@router.get("/triggers/{trigger_id}", response_model=TriggerStatus)
async def get_trigger(trigger_id: str, controller: TriggerController = Depends(get_controller)) -> TriggerStatus:
    handle = controller.get(trigger_id)
    if handle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trigger not found")
    return TriggerStatus.from_handle(handle)
