"""
Detection state.

`EnhancedModeContext` is the explicit accumulator threaded through every
classification of one trajectory. It must be owned by exactly one caller
and updated strictly in fix order. Independent trajectories each get their
own context and can be classified concurrently.

`DetectionContext` is the per-fix-pair snapshot handed to the rules.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .kinematics import GeoFix, update_speed_history
from .modes import DetectionReason, TransportMode
from .signals import PlaceSignal


class JourneyState(Enum):
    """States of the train journey tracker."""
    NOT_IN_JOURNEY = "not_in_journey"
    IN_JOURNEY = "in_journey"


@dataclass(frozen=True)
class ModeResult:
    """Outcome of classifying one segment."""
    mode: TransportMode
    reason: str
    confidence: Optional[float] = None  # 0-1, None when not applicable
    code: DetectionReason = DetectionReason.DEFAULT
    rule: Optional[str] = None

    def with_mode(
        self,
        mode: TransportMode,
        reason: str,
        code: DetectionReason,
        confidence: Optional[float] = None,
        rule: Optional[str] = None,
    ) -> 'ModeResult':
        return replace(self, mode=mode, reason=reason, code=code,
                       confidence=confidence, rule=rule or self.rule)

    def as_dict(self) -> Dict[str, str]:
        """The {mode, reason} shape returned to callers."""
        return {'mode': self.mode.value, 'reason': self.reason}


@dataclass(frozen=True)
class PlaceVisit:
    """A fix observed at a named train station or airport."""
    timestamp_ms: int
    name: str
    latitude: float
    longitude: float

    @property
    def coordinates(self) -> Tuple[float, float]:
        return self.latitude, self.longitude


@dataclass(frozen=True)
class ModeHistoryEntry:
    """One classified segment, kept in the bounded mode history."""
    mode: TransportMode
    timestamp_ms: int
    speed_kmh: float
    confidence: Optional[float]
    code: DetectionReason


@dataclass(frozen=True)
class DetectionContext:
    """Everything the rules may look at for one fix pair."""
    previous: GeoFix
    current: GeoFix
    elapsed_seconds: float
    speed_kmh: float
    speed_history: Tuple[float, ...]
    average_speed: float
    signal: PlaceSignal
    in_train_journey: bool = False
    in_airplane_journey: bool = False


@dataclass
class EnhancedModeContext:
    """
    Persistent state for one trajectory's classification run.

    Invariants:
        - len(speed_history) and len(mode_history) never exceed their
          configured capacities
        - is_in_train_journey implies train_journey_start_time_ms is set
        - is_in_airplane_journey implies airplane_journey_start_time_ms is set
    """
    current_mode: TransportMode = TransportMode.UNKNOWN
    last_speed: float = 0.0
    speed_history: List[float] = field(default_factory=list)
    average_speed: float = 0.0
    mode_history: List[ModeHistoryEntry] = field(default_factory=list)

    # Train
    train_stations: List[PlaceVisit] = field(default_factory=list)
    last_train_station: Optional[PlaceVisit] = None
    is_in_train_journey: bool = False
    train_journey_start_time_ms: Optional[int] = None
    train_journey_start_station: Optional[str] = None

    # Airplane
    airports: List[PlaceVisit] = field(default_factory=list)
    last_airport: Optional[PlaceVisit] = None
    is_in_airplane_journey: bool = False
    airplane_journey_start_time_ms: Optional[int] = None
    airplane_journey_start_airport: Optional[str] = None

    @property
    def journey_state(self) -> JourneyState:
        if self.is_in_train_journey:
            return JourneyState.IN_JOURNEY
        return JourneyState.NOT_IN_JOURNEY

    def record_speed(self, speed_kmh: float, capacity: int = 10) -> float:
        """Push a speed into the bounded history and refresh the average."""
        self.average_speed = update_speed_history(self.speed_history, speed_kmh, capacity)
        return self.average_speed

    def record_mode(self, result: ModeResult, fix: GeoFix, speed_kmh: float, capacity: int = 20) -> None:
        """Append the final result of a segment, evicting the oldest entries."""
        self.mode_history.append(ModeHistoryEntry(
            mode=result.mode,
            timestamp_ms=fix.timestamp_ms,
            speed_kmh=speed_kmh,
            confidence=result.confidence,
            code=result.code,
        ))
        del self.mode_history[:-capacity]

    def record_station(self, fix: GeoFix, name: str) -> PlaceVisit:
        visit = _visit(fix, name)
        self.train_stations.append(visit)
        self.last_train_station = visit
        return visit

    def record_airport(self, fix: GeoFix, name: str) -> PlaceVisit:
        visit = _visit(fix, name)
        self.airports.append(visit)
        self.last_airport = visit
        return visit

    def start_train_journey(self, start_time_ms: int, station: Optional[str]) -> None:
        self.is_in_train_journey = True
        self.train_journey_start_time_ms = start_time_ms
        self.train_journey_start_station = station or "Unknown"

    def end_train_journey(self) -> None:
        self.is_in_train_journey = False
        self.train_journey_start_time_ms = None
        self.train_journey_start_station = None

    def start_airplane_journey(self, start_time_ms: int, airport: Optional[str]) -> None:
        self.is_in_airplane_journey = True
        self.airplane_journey_start_time_ms = start_time_ms
        self.airplane_journey_start_airport = airport or "Unknown"

    def end_airplane_journey(self) -> None:
        self.is_in_airplane_journey = False
        self.airplane_journey_start_time_ms = None
        self.airplane_journey_start_airport = None


def _visit(fix: GeoFix, name: str) -> PlaceVisit:
    return PlaceVisit(
        timestamp_ms=fix.timestamp_ms,
        name=name,
        latitude=fix.latitude,
        longitude=fix.longitude,
    )
