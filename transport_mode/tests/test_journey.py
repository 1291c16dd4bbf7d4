"""
Tests for train journey tracking.
"""

import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 3)[0])

from transport_mode.context import DetectionContext, EnhancedModeContext, JourneyState, ModeResult
from transport_mode.journey import AIRPLANE_JOURNEY, AirplaneJourneyTracker, TrainJourneyTracker
from transport_mode.kinematics import GeoFix
from transport_mode.modes import DetectionReason, TransportMode
from transport_mode.rules import AIRPORT, HIGHWAY_OVERRIDE, SPEED_BRACKET, TRAIN_STATION
from transport_mode.settings import DetectionSettings
from transport_mode.signals import PlaceSignal


CFG = DetectionSettings()


def make_detection(speed, signal=None, now_ms=600_000):
    return DetectionContext(
        previous=GeoFix(52.0, 4.0, now_ms - 60_000),
        current=GeoFix(52.01, 4.0, now_ms),
        elapsed_seconds=60.0,
        speed_kmh=speed,
        speed_history=(speed,),
        average_speed=speed,
        signal=signal or PlaceSignal(),
    )


def bracket(mode):
    return ModeResult(mode, f"{mode.value} by speed", 0.6, DetectionReason.SPEED_BRACKET_MATCH, SPEED_BRACKET)


def station(name):
    return PlaceSignal(is_train_station=True, station_name=name)


STATION_TRAIN = ModeResult(TransportMode.TRAIN, 'At station', 0.75,
                           DetectionReason.TRAIN_STATION_AND_SPEED, TRAIN_STATION)


@pytest.fixture
def tracker():
    return TrainJourneyTracker(CFG)


class TestEntry:
    """Tests for starting a journey."""

    def test_station_and_moving(self, tracker):
        """At a station at or above the entry speed starts a journey."""
        context = EnhancedModeContext()
        result = tracker.update(context, make_detection(15.0, station('Delft')), bracket(TransportMode.CYCLING))
        assert context.is_in_train_journey
        assert context.train_journey_start_station == 'Delft'
        assert result.mode is TransportMode.TRAIN
        assert result.code is DetectionReason.TRAIN_JOURNEY_START

    def test_station_and_train_result(self, tracker):
        """A train result at a station starts a journey at any speed."""
        context = EnhancedModeContext()
        result = tracker.update(context, make_detection(1.0, station('Delft')), STATION_TRAIN)
        assert context.journey_state is JourneyState.IN_JOURNEY
        assert result is STATION_TRAIN

    def test_station_slow_and_not_train(self, tracker):
        context = EnhancedModeContext()
        result = tracker.update(context, make_detection(5.0, station('Delft')), bracket(TransportMode.WALKING))
        assert not context.is_in_train_journey
        assert result.mode is TransportMode.WALKING

    def test_unnamed_station_uses_unknown(self, tracker):
        context = EnhancedModeContext()
        tracker.update(context, make_detection(30.0, station(None)), bracket(TransportMode.CAR))
        assert context.train_journey_start_station == 'Unknown'

    def test_retroactive_entry(self, tracker):
        """Train speed shortly after a station visit backdates the journey."""
        context = EnhancedModeContext()
        visit = tracker.record_station(context, make_detection(2.0, station('Leiden'), now_ms=0))
        assert visit is not None

        detection = make_detection(150.0, now_ms=20 * 60_000)
        result = tracker.update(context, detection, bracket(TransportMode.TRAIN))
        assert context.is_in_train_journey
        assert context.train_journey_start_time_ms == 0
        assert context.train_journey_start_station == 'Leiden'
        assert result.code is DetectionReason.TRAIN_JOURNEY_START

    def test_no_retroactive_entry_after_memory(self, tracker):
        context = EnhancedModeContext()
        tracker.record_station(context, make_detection(2.0, station('Leiden'), now_ms=0))
        detection = make_detection(150.0, now_ms=2 * 3600 * 1000)
        result = tracker.update(context, detection, bracket(TransportMode.TRAIN))
        assert not context.is_in_train_journey
        assert result.code is DetectionReason.SPEED_BRACKET_MATCH

    def test_no_entry_without_station(self, tracker):
        context = EnhancedModeContext()
        tracker.update(context, make_detection(150.0), bracket(TransportMode.TRAIN))
        assert not context.is_in_train_journey


class TestInJourney:
    """Tests for continuation, new legs and exit."""

    def start(self, name='Amsterdam'):
        context = EnhancedModeContext()
        context.start_train_journey(0, name)
        return context

    def test_continuation(self, tracker):
        """Fast enough keeps it a train whatever the brackets say."""
        context = self.start()
        result = tracker.update(context, make_detection(100.0), bracket(TransportMode.CAR))
        assert result.mode is TransportMode.TRAIN
        assert result.code is DetectionReason.TRAIN_JOURNEY_CONTINUATION
        assert context.is_in_train_journey

    def test_slowdown_exit(self, tracker):
        """Dropping to 10 km/h ends the journey and keeps the bracket mode."""
        context = self.start()
        result = tracker.update(context, make_detection(10.0), bracket(TransportMode.CYCLING))
        assert not context.is_in_train_journey
        assert context.train_journey_start_time_ms is None
        assert result.mode is TransportMode.CYCLING
        assert result.code is DetectionReason.TRAIN_JOURNEY_END

    def test_new_leg_at_other_station(self, tracker):
        context = self.start('Amsterdam')
        detection = make_detection(5.0, station('Utrecht'), now_ms=1_800_000)
        result = tracker.update(context, detection, STATION_TRAIN)
        assert result.mode is TransportMode.TRAIN
        assert result.code is DetectionReason.TRAIN_JOURNEY_NEW_LEG
        assert context.is_in_train_journey
        assert context.train_journey_start_station == 'Utrecht'
        assert context.train_journey_start_time_ms == 1_800_000

    def test_same_station_slow_exits(self, tracker):
        """Back at the start station and slow: the journey is over."""
        context = self.start('Amsterdam')
        result = tracker.update(context, make_detection(3.0, station('Amsterdam')), STATION_TRAIN)
        assert not context.is_in_train_journey
        assert result.code is DetectionReason.TRAIN_JOURNEY_END

    def test_highway_ends_journey(self, tracker):
        context = self.start()
        highway = ModeResult(TransportMode.CAR, 'Motorway', 0.95,
                             DetectionReason.HIGHWAY_OR_MOTORWAY, HIGHWAY_OVERRIDE)
        result = tracker.update(context, make_detection(100.0, PlaceSignal(is_highway=True)), highway)
        assert result is highway
        assert not context.is_in_train_journey

    def test_airplane_ends_journey(self, tracker):
        context = self.start()
        result = tracker.update(context, make_detection(500.0), bracket(TransportMode.AIRPLANE))
        assert result.mode is TransportMode.AIRPLANE
        assert not context.is_in_train_journey

class TestAirplaneJourney:
    """Tests for airplane journey tracking."""

    @pytest.fixture
    def flight(self):
        return AirplaneJourneyTracker(CFG)

    def airborne(self, airport='Schiphol'):
        context = EnhancedModeContext()
        context.start_airplane_journey(0, airport)
        return context

    def test_airport_visit_logged(self, flight):
        context = EnhancedModeContext()
        signal = PlaceSignal(is_airport=True, airport_name='Schiphol')
        visit = flight.record_airport(context, make_detection(5.0, signal, now_ms=0))
        assert visit is not None
        assert context.last_airport is visit
        assert context.airports == [visit]

    def test_unnamed_airport_not_logged(self, flight):
        context = EnhancedModeContext()
        assert flight.record_airport(context, make_detection(5.0, PlaceSignal(is_airport=True))) is None
        assert context.airports == []

    def test_commit_starts_journey(self, flight):
        context = EnhancedModeContext()
        signal = PlaceSignal(is_airport=True, airport_name='Schiphol')
        airport = ModeResult(TransportMode.AIRPLANE, 'At airport', 0.9,
                             DetectionReason.AIRPORT_AND_PLANE_SPEED, AIRPORT)
        flight.commit(context, make_detection(250.0, signal, now_ms=600_000), airport)
        assert context.is_in_airplane_journey
        assert context.airplane_journey_start_time_ms == 600_000
        assert context.airplane_journey_start_airport == 'Schiphol'

    def test_commit_recalls_recent_airport(self, flight):
        """Take-off detected off-airport is attributed to the airport just visited."""
        context = EnhancedModeContext()
        flight.record_airport(context, make_detection(5.0, PlaceSignal(is_airport=True, airport_name='Schiphol'),
                                                      now_ms=0))
        flight.commit(context, make_detection(400.0, now_ms=900_000), bracket(TransportMode.AIRPLANE))
        assert context.airplane_journey_start_airport == 'Schiphol'

    def test_commit_without_airport(self, flight):
        context = EnhancedModeContext()
        flight.commit(context, make_detection(400.0), bracket(TransportMode.AIRPLANE))
        assert context.airplane_journey_start_airport == 'Unknown'

    def test_continuation_above_threshold(self, flight):
        context = self.airborne()
        result = flight.update(context, make_detection(220.0), bracket(TransportMode.TRAIN))
        assert result.mode is TransportMode.AIRPLANE
        assert result.code is DetectionReason.AIRPLANE_JOURNEY_CONTINUATION
        assert result.rule == AIRPLANE_JOURNEY
        assert 'Schiphol' in result.reason

    def test_no_continuation_below_threshold(self, flight):
        context = self.airborne()
        result = flight.update(context, make_detection(150.0), bracket(TransportMode.TRAIN))
        assert result.mode is TransportMode.TRAIN

    def test_overrides_keep_their_result(self, flight):
        """Station and motorway rules are not relabelled."""
        context = self.airborne()
        result = flight.update(context, make_detection(250.0, station('Schiphol Airport')),
                               STATION_TRAIN)
        assert result is STATION_TRAIN

    def test_no_continuation_outside_journey(self, flight):
        context = EnhancedModeContext()
        result = flight.update(context, make_detection(250.0), bracket(TransportMode.TRAIN))
        assert result.mode is TransportMode.TRAIN

    def test_commit_ends_journey(self, flight):
        context = self.airborne()
        flight.commit(context, make_detection(5.0), bracket(TransportMode.WALKING))
        assert not context.is_in_airplane_journey
        assert context.airplane_journey_start_time_ms is None
        assert context.airplane_journey_start_airport is None



if __name__ == '__main__':
    pytest.main([__file__, '-v'])
