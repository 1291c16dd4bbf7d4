"""
Kinematics for consecutive geolocation fixes.

Great-circle distance, instantaneous speed and the rolling speed history
kept in the persistent detection context.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np


EARTH_RADIUS_M = 6371000.0
MPS_TO_KMH = 3.6


@dataclass(frozen=True)
class GeoFix:
    """
    A single timestamped geolocation sample.

    Attributes:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        timestamp_ms: Unix epoch milliseconds
        speed_mps: Device-reported speed in m/s, if any. Negative values
            (e.g. the -1.0 sentinel some trackers emit) mean "not available".
    """
    latitude: float
    longitude: float
    timestamp_ms: int
    speed_mps: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        """True if the coordinates are finite and within WGS84 bounds."""
        try:
            lat = float(self.latitude)
            lon = float(self.longitude)
        except (TypeError, ValueError):
            return False
        return (math.isfinite(lat) and math.isfinite(lon)
                and -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0)

    @property
    def reported_speed_mps(self) -> Optional[float]:
        """Device speed if usable, else None."""
        return usable_speed(self.speed_mps)


def usable_speed(speed_mps: Optional[float]) -> Optional[float]:
    if speed_mps is None:
        return None
    try:
        value = float(speed_mps)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Great-circle distance using the Haversine formula.

    Works on scalars or numpy arrays.

    Args:
        lat1, lon1: First point(s) (degrees)
        lat2, lon2: Second point(s) (degrees)

    Returns:
        Distance in meters
    """
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)
    dlat = np.radians(np.subtract(lat2, lat1))
    dlon = np.radians(np.subtract(lon2, lon1))

    a = np.sin(dlat / 2)**2 + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon / 2)**2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def distance_meters(a: GeoFix, b: GeoFix) -> float:
    """
    Distance between two fixes in meters.

    Invalid coordinates on either side yield 0.0 rather than NaN.
    """
    if not (a.is_valid and b.is_valid):
        return 0.0
    # Order the arguments so the result is bit-for-bit symmetric
    p, q = sorted([(a.latitude, a.longitude), (b.latitude, b.longitude)])
    return float(haversine_distance(p[0], p[1], q[0], q[1]))


def speed_kmh(
    previous: GeoFix,
    current: GeoFix,
    elapsed_seconds: float,
    speed_hint_mps: Optional[float] = None,
) -> float:
    """
    Instantaneous speed in km/h for the segment previous -> current.

    Precedence: an explicit speed hint, then the speed reported on the
    current fix, then distance / elapsed time. A derived speed needs a
    positive elapsed time; otherwise the speed is 0.0.

    Args:
        previous: Earlier fix
        current: Later fix
        elapsed_seconds: Time between the fixes
        speed_hint_mps: Optional externally supplied speed in m/s

    Returns:
        Speed in km/h (never NaN, never negative)
    """
    explicit = usable_speed(speed_hint_mps)
    if explicit is None:
        explicit = current.reported_speed_mps
    if explicit is not None:
        return explicit * MPS_TO_KMH

    if not has_positive_elapsed(elapsed_seconds):
        return 0.0

    distance = distance_meters(previous, current)
    speed = distance / float(elapsed_seconds) * MPS_TO_KMH
    return speed if math.isfinite(speed) else 0.0


def has_positive_elapsed(elapsed_seconds: float) -> bool:
    try:
        value = float(elapsed_seconds)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


def update_speed_history(
    history: List[float],
    speed: float,
    capacity: int = 10,
) -> float:
    """
    Push a speed into a bounded FIFO history and return the new mean.

    The oldest entries are evicted once the history exceeds `capacity`.
    Non-finite speeds are not recorded.
    """
    if math.isfinite(speed):
        history.append(float(speed))
        del history[:-capacity]
    if not history:
        return 0.0
    return float(np.mean(history))
