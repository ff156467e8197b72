from __future__ import annotations

from enum import StrEnum

from statemachine import State, StateMachine


class TriggerPhase(StrEnum):
    idle = "idle"
    loading = "loading"
    building = "building"
    dispatching = "dispatching"
    succeeded = "succeeded"
    cancelled = "cancelled"
    failed = "failed"


class TriggerFSM(StateMachine):
    """Lifecycle of one death trigger.

    idle -> loading -> (failed | building) -> dispatching -> (succeeded | cancelled | failed)

    The controller does the work; the FSM only guards transitions so a late
    dispatch event cannot move a finished trigger.
    """

    idle = State(TriggerPhase.idle.value, value=TriggerPhase.idle.value, initial=True)
    loading = State(TriggerPhase.loading.value, value=TriggerPhase.loading.value)
    building = State(TriggerPhase.building.value, value=TriggerPhase.building.value)
    dispatching = State(TriggerPhase.dispatching.value, value=TriggerPhase.dispatching.value)
    succeeded = State(TriggerPhase.succeeded.value, value=TriggerPhase.succeeded.value, final=True)
    cancelled = State(TriggerPhase.cancelled.value, value=TriggerPhase.cancelled.value, final=True)
    failed = State(TriggerPhase.failed.value, value=TriggerPhase.failed.value, final=True)

    load = idle.to(loading)
    config_loaded = loading.to(building)
    request_built = building.to(dispatching)
    respond = dispatching.to(succeeded)
    cancel = dispatching.to(cancelled)
    fail = loading.to(failed) | building.to(failed) | dispatching.to(failed)

    @property
    def phase(self) -> TriggerPhase:
        return TriggerPhase(str(self.current_state.value))

    @property
    def terminal(self) -> bool:
        return bool(self.current_state.final)
