# src/core/rides/state_machine.py
"""
Машина состояний поездки.
Единственное место, где описаны допустимые переходы.
"""

from __future__ import annotations

from src.common.constants import RideStatus
from src.common.exceptions import InvalidTransitionError


class RideStateMachine:
    ALLOWED_TRANSITIONS: dict[RideStatus, tuple[RideStatus, ...]] = {
        RideStatus.REQUESTED: (RideStatus.ACCEPTED, RideStatus.CANCELLED),
        RideStatus.ACCEPTED: (RideStatus.IN_PROGRESS, RideStatus.CANCELLED),
        RideStatus.PICKUP: (),
        RideStatus.IN_PROGRESS: (RideStatus.COMPLETED,),
        RideStatus.COMPLETED: (),
        RideStatus.CANCELLED: (),
    }

    TERMINAL: frozenset[RideStatus] = frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED})

    # Переходы, которые водитель выполняет через advance
    DRIVER_TARGETS: frozenset[RideStatus] = frozenset({RideStatus.IN_PROGRESS, RideStatus.COMPLETED})

    @staticmethod
    def can_transition(current_status: RideStatus | str, new_status: RideStatus | str) -> bool:
        try:
            curr = RideStatus(current_status)
            new = RideStatus(new_status)
        except ValueError:
            return False
        return new in RideStateMachine.ALLOWED_TRANSITIONS.get(curr, ())

    @staticmethod
    def is_terminal(status: RideStatus | str) -> bool:
        return RideStatus(status) in RideStateMachine.TERMINAL

    @staticmethod
    def ensure_transition(ride_id: str, current_status: RideStatus, new_status: RideStatus) -> None:
        """
        Raises:
            InvalidTransitionError: Переход не разрешён
        """
        if not RideStateMachine.can_transition(current_status, new_status):
            raise InvalidTransitionError(ride_id, current_status, new_status)
