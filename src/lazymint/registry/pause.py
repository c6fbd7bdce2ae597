"""Pause controller — the registry's global halt switch.

State machine:
    ACTIVE → PAUSED    (pause)
    PAUSED → ACTIVE    (unpause)

Re-entering the current state is rejected with InvalidState. Who may
toggle the switch is decided by the registry, not here.
"""

from __future__ import annotations

from lazymint.errors import InvalidState, Paused
from lazymint.models.registry import RegistryState


_TRANSITIONS: dict[RegistryState, set[RegistryState]] = {
    RegistryState.ACTIVE: {RegistryState.PAUSED},
    RegistryState.PAUSED: {RegistryState.ACTIVE},
}


class PauseController:
    """Holds the pause flag and validates its transitions."""

    def __init__(self, state: RegistryState = RegistryState.ACTIVE) -> None:
        self._state = state

    @property
    def state(self) -> RegistryState:
        return self._state

    @property
    def paused(self) -> bool:
        return self._state == RegistryState.PAUSED

    def require_not_paused(self) -> None:
        if self.paused:
            raise Paused("Pausable: paused")

    def validate_transition(self, target: RegistryState) -> None:
        """Raise InvalidState if target is not reachable from the current state."""
        if target not in _TRANSITIONS[self._state]:
            raise InvalidState(
                f"Invalid pause transition: {self._state.value} → {target.value}"
            )

    def pause(self) -> None:
        self.validate_transition(RegistryState.PAUSED)
        self._state = RegistryState.PAUSED

    def unpause(self) -> None:
        self.validate_transition(RegistryState.ACTIVE)
        self._state = RegistryState.ACTIVE
