# tests/core/test_rides_state_machine.py
"""
Тесты машины состояний поездки.
"""

from __future__ import annotations

import pytest

from src.common.constants import RideStatus
from src.common.exceptions import InvalidTransitionError
from src.core.rides.state_machine import RideStateMachine


ALLOWED = {
    (RideStatus.REQUESTED, RideStatus.ACCEPTED),
    (RideStatus.REQUESTED, RideStatus.CANCELLED),
    (RideStatus.ACCEPTED, RideStatus.IN_PROGRESS),
    (RideStatus.ACCEPTED, RideStatus.CANCELLED),
    (RideStatus.IN_PROGRESS, RideStatus.COMPLETED),
}


class TestRideStateMachine:
    """Тесты допустимых переходов."""

    @pytest.mark.parametrize("current", list(RideStatus))
    @pytest.mark.parametrize("target", list(RideStatus))
    def test_transition_table(self, current: RideStatus, target: RideStatus) -> None:
        """Разрешены только рёбра из таблицы переходов."""
        assert RideStateMachine.can_transition(current, target) == ((current, target) in ALLOWED)

    @pytest.mark.parametrize("status", [RideStatus.COMPLETED, RideStatus.CANCELLED])
    def test_terminal_states(self, status: RideStatus) -> None:
        assert RideStateMachine.is_terminal(status) is True
        assert RideStateMachine.ALLOWED_TRANSITIONS[status] == ()

    def test_pickup_has_no_edges(self) -> None:
        """PICKUP остаётся в перечислении, но переходов не имеет."""
        assert RideStateMachine.ALLOWED_TRANSITIONS[RideStatus.PICKUP] == ()
        assert not any(RideStatus.PICKUP in targets for targets in RideStateMachine.ALLOWED_TRANSITIONS.values())

    def test_accepts_string_values(self) -> None:
        assert RideStateMachine.can_transition("requested", "accepted") is True

    def test_unknown_status_is_rejected(self) -> None:
        assert RideStateMachine.can_transition("requested", "teleported") is False

    def test_ensure_transition_raises(self) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            RideStateMachine.ensure_transition("ride-1", RideStatus.COMPLETED, RideStatus.IN_PROGRESS)

        assert exc_info.value.ride_id == "ride-1"
        assert exc_info.value.current == RideStatus.COMPLETED
        assert exc_info.value.target == RideStatus.IN_PROGRESS

    def test_ensure_transition_passes(self) -> None:
        RideStateMachine.ensure_transition("ride-1", RideStatus.REQUESTED, RideStatus.ACCEPTED)
