"""
Geographic signals from reverse-geocode payloads.

Reverse geocoders disagree on schema: Nominatim `json` uses `class`, `jsonv2`
uses `category`, both add `addresstype`, and some providers nest the same
keys under `address` or wrap everything in a GeoJSON Feature. The tables
below list exactly which (field, value) pairs count as a signal; lookups
check the top level first and then the nested `address` object.

Nothing in this module raises on malformed input: an unreadable payload is
an empty signal.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


# (field, accepted values) pairs. Comparison is case-insensitive.
FieldRule = Tuple[str, frozenset]

TRAIN_STATION_FIELDS: Tuple[FieldRule, ...] = (
    ('type', frozenset({'railway_station', 'platform', 'halt'})),
    ('class', frozenset({'railway'})),
    ('category', frozenset({'railway'})),
    ('addresstype', frozenset({'railway'})),
    ('railway', frozenset({'station', 'halt', 'platform'})),
    ('amenity', frozenset({'subway_entrance'})),
)

AIRPORT_FIELDS: Tuple[FieldRule, ...] = (
    ('type', frozenset({'aerodrome', 'airport', 'terminal'})),
    ('class', frozenset({'aeroway'})),
    ('category', frozenset({'aeroway'})),
    ('addresstype', frozenset({'aeroway'})),
    ('aeroway', frozenset({'aerodrome', 'terminal', 'runway', 'taxiway', 'apron'})),
    ('amenity', frozenset({'airport'})),
)

MOTORWAY_TYPES = frozenset({'motorway', 'motorway_link', 'trunk', 'trunk_link'})

# Standalone highway indicators; class/category 'highway' alone is any road,
# so it only counts together with a motorway-grade type (see _is_highway).
HIGHWAY_FIELDS: Tuple[FieldRule, ...] = (
    ('type', frozenset({'motorway', 'motorway_link'})),
    ('highway', MOTORWAY_TYPES),
    ('addresstype', frozenset({'motorway'})),
)

CITY_FIELDS = ('city', 'town', 'village', 'municipality')
# Nominatim puts the feature name under its class key inside `address`
ADDRESS_NAME_FIELDS = ('railway', 'aeroway')


@dataclass(frozen=True)
class PlaceSignal:
    """Flags derived from one reverse-geocode payload."""
    is_train_station: bool = False
    station_name: Optional[str] = None
    is_airport: bool = False
    airport_name: Optional[str] = None
    is_highway: bool = False
    place_name: Optional[str] = None


EMPTY_SIGNAL = PlaceSignal()


def _load_payload(payload: Any) -> Optional[Dict[str, Any]]:
    """Turn a string or mapping into a dict, unwrapping GeoJSON features."""
    if payload is None:
        return None
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except (TypeError, ValueError, RecursionError):
            logger.debug("Ignoring unparseable geocode payload")
            return None
    if not isinstance(payload, Mapping):
        return None

    data = dict(payload)
    properties = data.get('properties')
    if data.get('type') == 'Feature' and isinstance(properties, Mapping):
        data = dict(properties)
    return data


def _address(data: Mapping[str, Any]) -> Mapping[str, Any]:
    address = data.get('address')
    return address if isinstance(address, Mapping) else {}


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _field(data: Mapping[str, Any], name: str) -> Optional[str]:
    """Field value from the top level, falling back to `address`."""
    value = _text(data.get(name))
    if value is None:
        value = _text(_address(data).get(name))
    return value


def _matches(data: Mapping[str, Any], rules: Tuple[FieldRule, ...]) -> bool:
    for name, accepted in rules:
        for source in (data, _address(data)):
            value = _text(source.get(name))
            if value is not None and value.lower() in accepted:
                return True
    return False


def _is_highway(data: Mapping[str, Any]) -> bool:
    if _matches(data, HIGHWAY_FIELDS):
        return True
    for source in (data, _address(data)):
        road_class = _text(source.get('class')) or _text(source.get('category'))
        road_type = _text(source.get('type'))
        if (road_class is not None and road_class.lower() == 'highway'
                and road_type is not None and road_type.lower() in MOTORWAY_TYPES):
            return True
    return False


def _place_label(data: Mapping[str, Any]) -> Optional[str]:
    """'{city} - {name}' when both are present, else whichever exists."""
    address = _address(data)
    city = None
    for key in CITY_FIELDS:
        city = _text(address.get(key))
        if city:
            break
    candidates = [address.get('name'), data.get('name')]
    candidates += [address.get(key) for key in ADDRESS_NAME_FIELDS]
    name = next((_text(c) for c in candidates if _text(c)), None)
    if city and name:
        return f"{city} - {name}"
    return name or city


def is_train_station(payload: Any) -> bool:
    data = _load_payload(payload)
    return data is not None and _matches(data, TRAIN_STATION_FIELDS)


def is_airport(payload: Any) -> bool:
    data = _load_payload(payload)
    return data is not None and _matches(data, AIRPORT_FIELDS)


def is_highway(payload: Any) -> bool:
    data = _load_payload(payload)
    return data is not None and _is_highway(data)


def extract_place_signal(payload: Any) -> PlaceSignal:
    """
    Derive a PlaceSignal from an optional reverse-geocode payload.

    Args:
        payload: JSON string, dict, GeoJSON Feature, or None

    Returns:
        PlaceSignal; all flags False when the payload is missing or unreadable
    """
    data = _load_payload(payload)
    if data is None:
        return EMPTY_SIGNAL

    at_station = _matches(data, TRAIN_STATION_FIELDS)
    at_airport = _matches(data, AIRPORT_FIELDS)
    label = _place_label(data)

    return PlaceSignal(
        is_train_station=at_station,
        station_name=label if at_station else None,
        is_airport=at_airport,
        airport_name=label if at_airport else None,
        is_highway=_is_highway(data),
        place_name=_field(data, 'display_name') or label,
    )
