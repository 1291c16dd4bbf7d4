"""
Tests for the mode transition matrix.
"""

import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 3)[0])

from transport_mode.feasibility import can_transition
from transport_mode.modes import TransportMode as M


ALL_MODES = list(M)


class TestFeasibility:
    """One test per row of the matrix."""

    @pytest.mark.parametrize('mode', ALL_MODES)
    def test_same_mode_always_allowed(self, mode):
        assert can_transition(mode, mode, False)
        assert can_transition(mode, mode, True)

    def test_car_train_needs_station(self):
        """Car <-> train only at a station, in both directions."""
        assert can_transition(M.CAR, M.TRAIN, True)
        assert can_transition(M.TRAIN, M.CAR, True)
        assert not can_transition(M.CAR, M.TRAIN, False)
        assert not can_transition(M.TRAIN, M.CAR, False)

    @pytest.mark.parametrize('at_station', [True, False])
    def test_cycling_train_never(self, at_station):
        assert not can_transition(M.CYCLING, M.TRAIN, at_station)
        assert not can_transition(M.TRAIN, M.CYCLING, at_station)

    @pytest.mark.parametrize('source', [M.STATIONARY, M.WALKING, M.AIRPLANE])
    def test_unrestricted_sources(self, source):
        for target in ALL_MODES:
            assert can_transition(source, target, False)

    def test_cycling_to_non_train(self):
        for target in (M.STATIONARY, M.WALKING, M.CAR, M.AIRPLANE):
            assert can_transition(M.CYCLING, target, False)

    def test_car_targets(self):
        assert can_transition(M.CAR, M.WALKING, False)
        assert can_transition(M.CAR, M.CYCLING, False)
        assert can_transition(M.CAR, M.STATIONARY, False)
        assert not can_transition(M.CAR, M.AIRPLANE, False)
        assert not can_transition(M.CAR, M.AIRPLANE, True)

    def test_train_targets(self):
        assert can_transition(M.TRAIN, M.WALKING, False)
        assert can_transition(M.TRAIN, M.STATIONARY, False)
        assert not can_transition(M.TRAIN, M.AIRPLANE, False)

    def test_unlisted_pairs_allowed(self):
        """Sources outside the table default to allowed."""
        assert can_transition(M.BOAT, M.CAR, False)
        assert can_transition(M.UNKNOWN, M.TRAIN, False)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
