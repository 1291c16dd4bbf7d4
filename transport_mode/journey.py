"""
Train and airplane journey tracking.

Keeps track of whether the trajectory is currently on a train, across the
whole run, using the persistent EnhancedModeContext:

- Entry: at a station and moving; or classified as train at a station; or
  classified as train shortly after visiting a station (the journey is then
  backdated to that visit, covering boarding without a clean station fix).
- Continuation: stays train while the speed holds up. Reaching a different
  named station closes the leg and opens a new one anchored there.
- Exit: dropping below the exit speed ends the journey and the segment
  keeps the mode the rules produced for it.

Airplane journeys are simpler: any final airplane result opens one, any
other result closes it, and while it is open a speed-bracket result at
cruising speed stays airplane.
"""

import logging
from typing import Optional

from .context import DetectionContext, EnhancedModeContext, ModeResult, PlaceVisit
from .modes import DetectionReason, TransportMode
from .rules import HIGHWAY_OVERRIDE, SPEED_BRACKET
from .settings import DetectionSettings, settings as default_settings

logger = logging.getLogger(__name__)


TRAIN_JOURNEY = 'train_journey'
AIRPLANE_JOURNEY = 'airplane_journey'


class TrainJourneyTracker:
    """Train journey state machine over an EnhancedModeContext."""

    def __init__(self, settings: Optional[DetectionSettings] = None):
        self.settings = settings or default_settings

    def record_station(self, context: EnhancedModeContext, detection: DetectionContext) -> Optional[PlaceVisit]:
        """Log a visit if the current fix is at a named station."""
        signal = detection.signal
        if signal.is_train_station and signal.station_name:
            return context.record_station(detection.current, signal.station_name)
        return None

    def _recent_station(self, context: EnhancedModeContext, now_ms: int) -> Optional[PlaceVisit]:
        last = context.last_train_station
        if last is None:
            return None
        if now_ms - last.timestamp_ms < self.settings.station_memory_ms:
            return last
        return None

    def _start(self, context: EnhancedModeContext, start_ms: int, station: Optional[str]) -> None:
        context.start_train_journey(start_ms, station)
        logger.info(f"Train journey started at {context.train_journey_start_station}")

    def _end(self, context: EnhancedModeContext, why: str) -> None:
        logger.info(f"Train journey from {context.train_journey_start_station} ended: {why}")
        context.end_train_journey()

    def update(
        self,
        context: EnhancedModeContext,
        detection: DetectionContext,
        result: ModeResult,
    ) -> ModeResult:
        """
        Advance the journey state for one fix pair.

        Args:
            context: Persistent context (mutated)
            detection: Snapshot for the current fix pair
            result: Mode chosen by the rule engine

        Returns:
            The result to carry forward (train while in a journey)
        """
        cfg = self.settings
        signal = detection.signal
        speed = detection.speed_kmh
        now_ms = detection.current.timestamp_ms
        at_station = signal.is_train_station
        station = signal.station_name

        # Motorway and airplane results are incompatible with being on a train
        if result.rule == HIGHWAY_OVERRIDE or result.mode is TransportMode.AIRPLANE:
            if context.is_in_train_journey:
                self._end(context, f"overridden by {result.mode.value}")
            return result

        if not context.is_in_train_journey:
            return self._try_enter(context, result, at_station, station, speed, now_ms)

        if at_station and station and station != context.train_journey_start_station:
            previous_start = context.train_journey_start_station
            self._end(context, f"arrived at {station}")
            self._start(context, now_ms, station)
            return result.with_mode(
                TransportMode.TRAIN,
                reason=f"Arrived at {station} from {previous_start}, starting new leg",
                code=DetectionReason.TRAIN_JOURNEY_NEW_LEG,
                confidence=0.9,
                rule=TRAIN_JOURNEY,
            )

        if speed < cfg.train_exit_speed_kmh:
            start_station = context.train_journey_start_station
            self._end(context, f"speed {speed:.1f} km/h below {cfg.train_exit_speed_kmh:g} km/h")
            return result.with_mode(
                result.mode,
                reason=f"Train journey from {start_station} ended; {result.reason}",
                code=DetectionReason.TRAIN_JOURNEY_END,
                confidence=result.confidence,
            )

        if speed >= cfg.train_continue_speed_kmh:
            return result.with_mode(
                TransportMode.TRAIN,
                reason=(f"Continuing train journey from {context.train_journey_start_station} "
                        f"({speed:.1f} km/h)"),
                code=DetectionReason.TRAIN_JOURNEY_CONTINUATION,
                confidence=0.85,
                rule=TRAIN_JOURNEY,
            )

        return result

    def _try_enter(
        self,
        context: EnhancedModeContext,
        result: ModeResult,
        at_station: bool,
        station: Optional[str],
        speed: float,
        now_ms: int,
    ) -> ModeResult:
        cfg = self.settings

        if at_station and (speed >= cfg.train_entry_speed_kmh or result.mode is TransportMode.TRAIN):
            self._start(context, now_ms, station)
            if result.mode is TransportMode.TRAIN:
                return result
            return result.with_mode(
                TransportMode.TRAIN,
                reason=f"Departing {context.train_journey_start_station} at {speed:.1f} km/h",
                code=DetectionReason.TRAIN_JOURNEY_START,
                confidence=0.85,
                rule=TRAIN_JOURNEY,
            )

        if result.mode is TransportMode.TRAIN and speed >= cfg.train_retroactive_entry_speed_kmh:
            recent = self._recent_station(context, now_ms)
            if recent is not None:
                # Backdate the journey to the station visit
                self._start(context, recent.timestamp_ms, recent.name)
                return result.with_mode(
                    TransportMode.TRAIN,
                    reason=f"Train speed shortly after visiting {recent.name}",
                    code=DetectionReason.TRAIN_JOURNEY_START,
                    confidence=0.85,
                    rule=TRAIN_JOURNEY,
                )

        return result


class AirplaneJourneyTracker:
    """Airplane journey state over an EnhancedModeContext."""

    def __init__(self, settings: Optional[DetectionSettings] = None):
        self.settings = settings or default_settings

    def record_airport(self, context: EnhancedModeContext, detection: DetectionContext) -> Optional[PlaceVisit]:
        """Log a visit if the current fix is at a named airport."""
        signal = detection.signal
        if signal.is_airport and signal.airport_name:
            return context.record_airport(detection.current, signal.airport_name)
        return None

    def _recent_airport(self, context: EnhancedModeContext, now_ms: int) -> Optional[PlaceVisit]:
        last = context.last_airport
        if last is None:
            return None
        if now_ms - last.timestamp_ms < self.settings.airport_memory_ms:
            return last
        return None

    def update(
        self,
        context: EnhancedModeContext,
        detection: DetectionContext,
        result: ModeResult,
    ) -> ModeResult:
        """
        Keep an open airplane journey airborne.

        Only speed-bracket results are relabelled; override rules (motorway,
        station, airport) keep their result.
        """
        if not context.is_in_airplane_journey or result.rule != SPEED_BRACKET:
            return result

        speed = detection.speed_kmh
        if speed < self.settings.airplane_continue_speed_kmh:
            return result

        return result.with_mode(
            TransportMode.AIRPLANE,
            reason=(f"Continuing airplane journey from {context.airplane_journey_start_airport} "
                    f"({speed:.0f} km/h)"),
            code=DetectionReason.AIRPLANE_JOURNEY_CONTINUATION,
            confidence=0.85,
            rule=AIRPLANE_JOURNEY,
        )

    def commit(
        self,
        context: EnhancedModeContext,
        detection: DetectionContext,
        result: ModeResult,
    ) -> None:
        """Open or close the journey from the final result of a segment."""
        now_ms = detection.current.timestamp_ms

        if result.mode is TransportMode.AIRPLANE and not context.is_in_airplane_journey:
            airport = detection.signal.airport_name
            if airport is None:
                recent = self._recent_airport(context, now_ms)
                airport = recent.name if recent is not None else None
            context.start_airplane_journey(now_ms, airport)
            logger.info(f"Airplane journey started at {context.airplane_journey_start_airport}")
        elif result.mode is not TransportMode.AIRPLANE and context.is_in_airplane_journey:
            logger.info(
                f"Airplane journey from {context.airplane_journey_start_airport} ended: {result.mode.value}"
            )
            context.end_airplane_journey()
