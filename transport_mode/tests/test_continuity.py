"""
Tests for the continuity guard.
"""

import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 3)[0])

from transport_mode.context import ModeResult
from transport_mode.continuity import CONTINUITY, apply_continuity_guard
from transport_mode.modes import DetectionReason, TransportMode as M
from transport_mode.settings import DetectionSettings


CFG = DetectionSettings()


def candidate(mode):
    return ModeResult(mode, f"{mode.value} by speed", 0.6, DetectionReason.SPEED_BRACKET_MATCH, 'speed_bracket')


class TestContinuityGuard:
    """Tests for apply_continuity_guard."""

    def test_car_to_airplane_forced_to_car(self):
        """A minute after driving, an airplane reading stays car."""
        result = apply_continuity_guard(M.CAR, candidate(M.AIRPLANE), 60.0, False, CFG)
        assert result.mode is M.CAR
        assert result.code is DetectionReason.PHYSICALLY_IMPOSSIBLE
        assert result.rule == CONTINUITY

    def test_long_gap_passes_through(self):
        """Gaps of at least the stop duration accept any candidate."""
        cand = candidate(M.AIRPLANE)
        assert apply_continuity_guard(M.CAR, cand, 300.0, False, CFG) is cand
        assert apply_continuity_guard(M.CAR, cand, 3600.0, False, CFG) is cand

    @pytest.mark.parametrize('previous', [M.STATIONARY, M.UNKNOWN])
    def test_inactive_previous_passes_through(self, previous):
        cand = candidate(M.TRAIN)
        assert apply_continuity_guard(previous, cand, 10.0, False, CFG) is cand

    def test_same_mode_passes_through(self):
        cand = candidate(M.CAR)
        assert apply_continuity_guard(M.CAR, cand, 10.0, False, CFG) is cand

    def test_feasible_switch_keeps_previous_mode(self):
        """Current behaviour: an allowed switch inside the window is suppressed."""
        result = apply_continuity_guard(M.WALKING, candidate(M.CYCLING), 60.0, False, CFG)
        assert result.mode is M.WALKING
        assert result.code is DetectionReason.KEEP_CONTINUITY

        result = apply_continuity_guard(M.CAR, candidate(M.WALKING), 60.0, False, CFG)
        assert result.mode is M.CAR

    def test_infeasible_switch_passes_through(self):
        """Current behaviour: a disallowed switch inside the window is accepted."""
        cand = candidate(M.TRAIN)
        result = apply_continuity_guard(M.CAR, cand, 60.0, False, CFG)
        assert result is cand

        cand = candidate(M.TRAIN)
        assert apply_continuity_guard(M.CYCLING, cand, 60.0, True, CFG) is cand

    def test_station_flag_changes_car_train(self):
        """At a station car -> train is feasible, so car is kept."""
        result = apply_continuity_guard(M.CAR, candidate(M.TRAIN), 60.0, True, CFG)
        assert result.mode is M.CAR
        assert result.code is DetectionReason.KEEP_CONTINUITY

    @pytest.mark.parametrize('previous', [M.WALKING, M.CYCLING, M.TRAIN])
    def test_airplane_candidate_passes_through(self, previous):
        """A take-off right after walking is not rewritten to the previous mode."""
        cand = candidate(M.AIRPLANE)
        assert apply_continuity_guard(previous, cand, 60.0, False, CFG) is cand

    def test_window_is_configurable(self):
        cfg = DetectionSettings(min_stop_duration_seconds=30)
        cand = candidate(M.CYCLING)
        assert apply_continuity_guard(M.WALKING, cand, 60.0, False, cfg) is cand


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
