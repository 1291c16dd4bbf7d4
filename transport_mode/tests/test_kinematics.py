"""
Tests for distance, speed and speed history.
"""

import math

import numpy as np
import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 3)[0])

from transport_mode.kinematics import (
    GeoFix,
    distance_meters,
    haversine_distance,
    speed_kmh,
    update_speed_history,
)


AMSTERDAM = GeoFix(52.3791, 4.9003, 0)
UTRECHT = GeoFix(52.0894, 5.1100, 1_800_000)


class TestDistance:
    """Tests for great-circle distance."""

    def test_same_point(self):
        """Distance from a fix to itself should be 0."""
        assert distance_meters(AMSTERDAM, AMSTERDAM) == pytest.approx(0, abs=1e-6)

    def test_known_distance(self):
        """Amsterdam Centraal to Utrecht Centraal is about 35 km."""
        dist = distance_meters(AMSTERDAM, UTRECHT)
        assert 34000 < dist < 36000

    def test_symmetric(self):
        """distance(a, b) == distance(b, a) exactly."""
        rng = np.random.default_rng(7)
        for _ in range(50):
            a = GeoFix(rng.uniform(-89, 89), rng.uniform(-179, 179), 0)
            b = GeoFix(rng.uniform(-89, 89), rng.uniform(-179, 179), 1000)
            assert distance_meters(a, b) == distance_meters(b, a)

    def test_invalid_coordinates_give_zero(self):
        """Out-of-range or NaN coordinates never produce NaN."""
        bad = GeoFix(123.0, 4.9, 0)
        nan = GeoFix(float('nan'), 4.9, 0)
        assert distance_meters(AMSTERDAM, bad) == 0.0
        assert distance_meters(nan, AMSTERDAM) == 0.0

    def test_haversine_vectorized(self):
        """haversine_distance accepts numpy arrays."""
        lats = np.array([52.0, 52.0])
        lons = np.array([4.0, 4.0])
        dists = haversine_distance(lats, lons, lats + 0.01, lons)
        assert dists.shape == (2,)
        assert dists[0] == pytest.approx(1112, rel=0.01)


class TestSpeed:
    """Tests for instantaneous speed."""

    def test_derived_speed(self):
        """Speed is distance over elapsed time when nothing is reported."""
        speed = speed_kmh(AMSTERDAM, UTRECHT, 1800)
        expected = distance_meters(AMSTERDAM, UTRECHT) / 1800 * 3.6
        assert speed == pytest.approx(expected)

    def test_zero_elapsed(self):
        """Non-positive elapsed time without a reported speed gives 0."""
        assert speed_kmh(AMSTERDAM, UTRECHT, 0) == 0.0
        assert speed_kmh(AMSTERDAM, UTRECHT, -5) == 0.0
        assert speed_kmh(AMSTERDAM, UTRECHT, float('nan')) == 0.0

    def test_reported_speed_wins_over_derived(self):
        """A device speed on the current fix is used as-is."""
        current = GeoFix(52.0894, 5.1100, 1_800_000, speed_mps=10.0)
        assert speed_kmh(AMSTERDAM, current, 1800) == pytest.approx(36.0)

    def test_hint_wins_over_reported(self):
        """An explicit hint beats the reported speed."""
        current = GeoFix(52.0894, 5.1100, 1_800_000, speed_mps=10.0)
        assert speed_kmh(AMSTERDAM, current, 1800, speed_hint_mps=20.0) == pytest.approx(72.0)

    def test_negative_reported_speed_ignored(self):
        """The -1 'not available' sentinel falls back to the derived speed."""
        current = GeoFix(52.0894, 5.1100, 1_800_000, speed_mps=-1.0)
        assert speed_kmh(AMSTERDAM, current, 1800) == pytest.approx(speed_kmh(AMSTERDAM, UTRECHT, 1800))

    def test_reported_speed_with_zero_elapsed(self):
        """Explicit speeds do not need a positive elapsed time."""
        current = GeoFix(52.0894, 5.1100, 0, speed_mps=5.0)
        assert speed_kmh(AMSTERDAM, current, 0) == pytest.approx(18.0)

    def test_never_nan(self):
        """Invalid fixes yield a finite speed."""
        bad = GeoFix(float('nan'), float('nan'), 1000)
        assert math.isfinite(speed_kmh(AMSTERDAM, bad, 1))


class TestSpeedHistory:
    """Tests for the bounded speed history."""

    def test_mean(self):
        history = []
        update_speed_history(history, 10.0)
        avg = update_speed_history(history, 20.0)
        assert avg == pytest.approx(15.0)

    def test_capacity_and_fifo(self):
        """Oldest entries are evicted beyond capacity."""
        history = []
        for speed in range(15):
            update_speed_history(history, float(speed), capacity=10)
        assert len(history) == 10
        assert history == [float(s) for s in range(5, 15)]

    def test_non_finite_not_recorded(self):
        history = [5.0]
        avg = update_speed_history(history, float('inf'))
        assert history == [5.0]
        assert avg == pytest.approx(5.0)

    def test_empty_history_mean(self):
        assert update_speed_history([], float('nan')) == 0.0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
