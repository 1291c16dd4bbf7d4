"""
Sample trajectory generation for testing and development.

Generates sparse location traces (one fix every few minutes, as background
location tracking produces) with reverse-geocode payloads shaped like
Nominatim jsonv2 responses:
- walk: a stroll through town
- train_commute: walk to Amsterdam Centraal, intercity to Utrecht Centraal, walk
- highway_drive: walk to the car, motorway, city streets, park
- flight: walk through the terminal, take-off, cruise, landing
"""

import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime, timedelta


# Reference location: Amsterdam
DEFAULT_START_LAT = 52.3676
DEFAULT_START_LON = 4.9041


def station_payload(name: str, city: str) -> Dict[str, Any]:
    """Reverse-geocode payload for a railway station."""
    return {
        'category': 'railway',
        'type': 'station',
        'addresstype': 'railway',
        'name': name,
        'display_name': f"{name}, {city}",
        'address': {'railway': name, 'city': city},
    }


def motorway_payload(ref: str) -> Dict[str, Any]:
    """Reverse-geocode payload for a motorway."""
    return {
        'category': 'highway',
        'type': 'motorway',
        'addresstype': 'road',
        'name': ref,
        'display_name': ref,
        'address': {'road': ref},
    }


def airport_payload(name: str, city: str) -> Dict[str, Any]:
    """Reverse-geocode payload for an airport."""
    return {
        'category': 'aeroway',
        'type': 'aerodrome',
        'addresstype': 'aeroway',
        'name': name,
        'display_name': f"{name}, {city}",
        'address': {'aeroway': name, 'city': city},
    }


def _meters_to_degrees_lat(meters):
    """Convert meters to degrees latitude (approximate)."""
    return meters / 111320.0


def _meters_to_degrees_lon(meters, lat: float):
    """Convert meters to degrees longitude at given latitude."""
    return meters / (111320.0 * np.cos(np.radians(lat)))


def generate_leg(
    start_lat: float,
    start_lon: float,
    heading: float,  # degrees, 0 = North
    speed_kmh: float,
    num_fixes: int,
    interval_seconds: float = 300.0,
    noise_std: float = 1.0,  # meters
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Generate fixes along a straight leg at constant speed.

    The leg starts one interval after (start_lat, start_lon), so legs can be
    chained without duplicating the joining fix.

    Returns:
        Tuple of (latitudes, longitudes, seconds since leg start)
    """
    times = interval_seconds * np.arange(1, num_fixes + 1)
    distance = speed_kmh / 3.6 * times

    heading_rad = np.radians(heading)
    x = distance * np.sin(heading_rad) + np.random.normal(0, noise_std, num_fixes)
    y = distance * np.cos(heading_rad) + np.random.normal(0, noise_std, num_fixes)

    lats = start_lat + _meters_to_degrees_lat(y)
    lons = start_lon + _meters_to_degrees_lon(x, start_lat)
    return lats, lons, times


# (speed km/h, number of fixes, heading, payload for every fix of the leg)
Leg = Tuple[float, int, float, Optional[Dict[str, Any]]]

JOURNEYS: Dict[str, List[Leg]] = {
    'walk': [
        (0, 1, 0, None),
        (5, 6, 45, None),
    ],
    'train_commute': [
        (0, 1, 0, None),
        (5, 3, 0, None),
        (5, 1, 0, station_payload('Amsterdam Centraal', 'Amsterdam')),
        (140, 4, 150, None),
        (140, 1, 150, station_payload('Utrecht Centraal', 'Utrecht')),
        (5, 3, 90, None),
    ],
    'highway_drive': [
        (0, 1, 0, None),
        (5, 2, 0, None),
        (100, 5, 180, motorway_payload('A2')),
        (60, 2, 180, None),
        (0, 2, 0, None),
    ],
    'flight': [
        (0, 1, 0, None),
        (5, 2, 0, airport_payload('Schiphol', 'Haarlemmermeer')),
        (250, 1, 270, airport_payload('Schiphol', 'Haarlemmermeer')),
        (800, 4, 270, None),
        (200, 1, 270, airport_payload('Heathrow', 'London')),
        (5, 2, 270, None),
    ],
}


def generate_sample_journey(
    journey_type: str = 'train_commute',
    start_lat: float = DEFAULT_START_LAT,
    start_lon: float = DEFAULT_START_LON,
    start_time: Optional[datetime] = None,
    interval_seconds: float = 300.0,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """
    Generate a sample journey DataFrame.

    Args:
        journey_type: One of 'walk', 'train_commute', 'highway_drive', 'flight'
        start_lat, start_lon: Starting position
        start_time: Starting timestamp (defaults to fixed time if seed provided, else now)
        interval_seconds: Time between fixes
        seed: Random seed for reproducibility

    Returns:
        DataFrame with columns: timestamp, latitude, longitude, geocode
    """
    if journey_type not in JOURNEYS:
        raise ValueError(f"Unknown journey type: {journey_type}")

    if seed is not None:
        np.random.seed(seed)

    if start_time is None:
        # Use fixed time when seed is provided for reproducibility
        if seed is not None:
            start_time = datetime(2024, 1, 1, 8, 0, 0)
        else:
            start_time = datetime.now()

    all_lats = [start_lat]
    all_lons = [start_lon]
    all_times = [0.0]
    all_geocodes: List[Optional[Dict[str, Any]]] = [None]

    for speed, num_fixes, heading, payload in JOURNEYS[journey_type]:
        lats, lons, times = generate_leg(
            all_lats[-1], all_lons[-1],
            heading=heading,
            speed_kmh=speed,
            num_fixes=num_fixes,
            interval_seconds=interval_seconds,
        )
        all_lats.extend(lats)
        all_lons.extend(lons)
        leg_start = all_times[-1]
        all_times.extend(leg_start + t for t in times)
        all_geocodes.extend([payload] * num_fixes)

    timestamps = [start_time + timedelta(seconds=float(t)) for t in all_times]

    return pd.DataFrame({
        'timestamp': timestamps,
        'latitude': all_lats,
        'longitude': all_lons,
        'geocode': all_geocodes,
    })


def generate_journey_dataset(
    num_journeys: int = 8,
    seed: Optional[int] = None,
) -> List[pd.DataFrame]:
    """
    Generate a list of journeys cycling through every journey type.

    Args:
        num_journeys: Number of journeys to generate
        seed: Random seed for reproducibility

    Returns:
        List of journey DataFrames, each with a journey_id column
    """
    if seed is not None:
        np.random.seed(seed)

    journeys = []
    types = list(JOURNEYS)

    for i in range(num_journeys):
        journey_type = types[i % len(types)]

        # Vary starting location slightly
        start_lat = DEFAULT_START_LAT + np.random.uniform(-0.01, 0.01)
        start_lon = DEFAULT_START_LON + np.random.uniform(-0.01, 0.01)

        df = generate_sample_journey(
            journey_type=journey_type,
            start_lat=start_lat,
            start_lon=start_lon,
            seed=seed + i if seed is not None else None,
        )
        df['journey_id'] = i
        df['journey_type'] = journey_type

        journeys.append(df)

    return journeys
