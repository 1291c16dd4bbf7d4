"""
Transport modes and detection reason codes.

Reason codes are short stable keys so that persisted labels stay compact;
`reason_label` turns them into user-facing text.
"""

from enum import Enum
from typing import Dict, Union


class TransportMode(Enum):
    """Transport modes a segment between two fixes can be labelled with."""
    STATIONARY = "stationary"
    WALKING = "walking"
    CYCLING = "cycling"
    CAR = "car"
    TRAIN = "train"
    AIRPLANE = "airplane"
    BOAT = "boat"
    UNKNOWN = "unknown"

    @property
    def is_active(self) -> bool:
        """True for modes that involve travel (not stationary or unknown)."""
        return self not in (TransportMode.STATIONARY, TransportMode.UNKNOWN)


class DetectionReason(Enum):
    """Machine keys explaining why a mode was chosen."""
    SPEED_BRACKET_MATCH = "SPEED_BRACKET_MATCH"
    HIGHWAY_OR_MOTORWAY = "HIGHWAY_OR_MOTORWAY"
    TRAIN_STATION_AND_SPEED = "TRAIN_STATION_AND_SPEED"
    AIRPORT_AND_PLANE_SPEED = "AIRPORT_AND_PLANE_SPEED"
    TRAIN_JOURNEY_START = "TRAIN_JOURNEY_START"
    TRAIN_JOURNEY_CONTINUATION = "TRAIN_JOURNEY_CONTINUATION"
    TRAIN_JOURNEY_NEW_LEG = "TRAIN_JOURNEY_NEW_LEG"
    TRAIN_JOURNEY_END = "TRAIN_JOURNEY_END"
    AIRPLANE_JOURNEY_CONTINUATION = "AIRPLANE_JOURNEY_CONTINUATION"
    KEEP_CONTINUITY = "KEEP_CONTINUITY"
    PHYSICALLY_IMPOSSIBLE = "PHYSICALLY_IMPOSSIBLE"
    DEFAULT = "DEFAULT"


REASON_LABELS: Dict[DetectionReason, str] = {
    DetectionReason.SPEED_BRACKET_MATCH: 'Speed matches transport mode bracket',
    DetectionReason.HIGHWAY_OR_MOTORWAY: 'Detected motorway or highway, assumed car',
    DetectionReason.TRAIN_STATION_AND_SPEED: 'At a train station, assumed train',
    DetectionReason.AIRPORT_AND_PLANE_SPEED: 'At an airport at airplane speed',
    DetectionReason.TRAIN_JOURNEY_START: 'Train journey started',
    DetectionReason.TRAIN_JOURNEY_CONTINUATION: 'Continuing existing train journey',
    DetectionReason.TRAIN_JOURNEY_NEW_LEG: 'Arrived at another station, new train leg',
    DetectionReason.TRAIN_JOURNEY_END: 'Train journey ended',
    DetectionReason.AIRPLANE_JOURNEY_CONTINUATION: 'Continuing existing airplane journey',
    DetectionReason.KEEP_CONTINUITY: 'Continuity maintained, mode preserved',
    DetectionReason.PHYSICALLY_IMPOSSIBLE: 'Mode changed due to physically impossible combination',
    DetectionReason.DEFAULT: 'Default mode assignment',
}


def reason_label(reason: Union[DetectionReason, str]) -> str:
    """
    Get a user-friendly label for a reason code.

    Unknown strings (legacy free-text reasons) are returned unchanged.
    """
    if isinstance(reason, DetectionReason):
        return REASON_LABELS[reason]
    try:
        return REASON_LABELS[DetectionReason(reason)]
    except ValueError:
        return reason
