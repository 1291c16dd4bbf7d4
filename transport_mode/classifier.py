"""
Transport mode classifier.

Labels each segment between consecutive fixes with a transport mode:
- STATIONARY, WALKING, CYCLING, CAR, TRAIN, AIRPLANE (BOAT via custom brackets)

Per fix pair: compute kinematics -> extract place signals -> evaluate rules
in priority order -> update the airplane and train journey states -> apply
the continuity guard -> persist the context and the mode history.

`TransportModeClassifier.classify` handles one fix pair against a
caller-owned EnhancedModeContext; `classify_trajectory` runs it over a whole
DataFrame of ordered fixes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .context import DetectionContext, EnhancedModeContext, ModeResult
from .continuity import apply_continuity_guard
from .journey import AirplaneJourneyTracker, TrainJourneyTracker
from .kinematics import GeoFix, has_positive_elapsed, haversine_distance, speed_kmh, usable_speed
from .modes import DetectionReason, TransportMode
from .rules import Rule, RuleEngine, default_rules, speed_bracket_rule
from .settings import DetectionSettings, settings as default_settings
from .signals import extract_place_signal

logger = logging.getLogger(__name__)


class TransportModeClassifier:
    """
    Rule-based transport mode classifier.

    The classifier itself is stateless between calls; all cross-call state
    lives in the EnhancedModeContext passed to `classify`, so one classifier
    can serve many trajectories as long as each has its own context.
    """

    def __init__(
        self,
        settings: Optional[DetectionSettings] = None,
        rules: Optional[Sequence[Rule]] = None,
    ):
        """
        Initialize the classifier.

        Args:
            settings: Detection thresholds (defaults to environment settings)
            rules: Override rules; defaults to highway/train station/airport.
                The speed-bracket baseline is always added.
        """
        self.settings = settings or default_settings
        if rules is None:
            rules = default_rules(self.settings)
        self.engine = RuleEngine(rules, baseline=speed_bracket_rule(self.settings))
        self.journey = TrainJourneyTracker(self.settings)
        self.flight = AirplaneJourneyTracker(self.settings)

    def new_context(self) -> EnhancedModeContext:
        """Fresh persistent context for a new trajectory."""
        return EnhancedModeContext()

    def build_detection_context(
        self,
        previous: GeoFix,
        current: GeoFix,
        elapsed_seconds: float,
        geocode: Any,
        context: EnhancedModeContext,
        speed_hint_mps: Optional[float] = None,
    ) -> DetectionContext:
        """Compute kinematics and signals and update the speed history."""
        speed = speed_kmh(previous, current, elapsed_seconds, speed_hint_mps)

        has_explicit_speed = (usable_speed(speed_hint_mps) is not None
                              or current.reported_speed_mps is not None)
        # A derived speed only counts when both fixes are usable
        has_derived_speed = (has_positive_elapsed(elapsed_seconds)
                             and previous.is_valid and current.is_valid)
        if has_explicit_speed or has_derived_speed:
            context.record_speed(speed, self.settings.speed_history_size)

        return DetectionContext(
            previous=previous,
            current=current,
            elapsed_seconds=elapsed_seconds,
            speed_kmh=speed,
            speed_history=tuple(context.speed_history),
            average_speed=context.average_speed,
            signal=extract_place_signal(geocode),
            in_train_journey=context.is_in_train_journey,
            in_airplane_journey=context.is_in_airplane_journey,
        )

    def classify(
        self,
        previous: GeoFix,
        current: GeoFix,
        elapsed_seconds: float,
        geocode: Any,
        context: EnhancedModeContext,
        speed_hint_mps: Optional[float] = None,
    ) -> ModeResult:
        """
        Classify the segment previous -> current.

        Args:
            previous: Earlier fix
            current: Later fix
            elapsed_seconds: Seconds between the two fixes
            geocode: Optional reverse-geocode payload for the current fix
            context: Persistent context for this trajectory (mutated)
            speed_hint_mps: Optional externally known speed (m/s)

        Returns:
            ModeResult for the segment
        """
        detection = self.build_detection_context(
            previous, current, elapsed_seconds, geocode, context, speed_hint_mps
        )

        self.journey.record_station(context, detection)
        self.flight.record_airport(context, detection)
        raw = self.engine.evaluate(detection)
        candidate = self.flight.update(context, detection, raw)
        candidate = self.journey.update(context, detection, candidate)
        result = apply_continuity_guard(
            context.current_mode,
            candidate,
            elapsed_seconds,
            detection.signal.is_train_station,
            self.settings,
        )

        self.flight.commit(context, detection, result)
        context.current_mode = result.mode
        context.last_speed = detection.speed_kmh
        context.record_mode(result, current, detection.speed_kmh, self.settings.mode_history_size)

        logger.debug(
            f"{detection.speed_kmh:.1f} km/h -> {result.mode.value} "
            f"({result.code.value}, rule={result.rule})"
        )
        return result


def classify_segment(
    previous: GeoFix,
    current: GeoFix,
    elapsed_seconds: float,
    geocode: Any,
    context: EnhancedModeContext,
    speed_hint_mps: Optional[float] = None,
    settings: Optional[DetectionSettings] = None,
) -> Dict[str, str]:
    """
    Convenience function: classify one fix pair and return {mode, reason}.

    Builds a classifier with the given (or default) settings; for long
    trajectories prefer reusing one TransportModeClassifier.
    """
    classifier = TransportModeClassifier(settings=settings)
    result = classifier.classify(previous, current, elapsed_seconds, geocode, context, speed_hint_mps)
    return result.as_dict()


@dataclass
class ModeSegment:
    """A contiguous run of fixes labelled with the same mode."""
    mode: TransportMode
    start_idx: int
    end_idx: int
    start_time_ms: int
    end_time_ms: int
    distance_m: float
    duration_s: float


@dataclass
class TrajectoryModeResult:
    """Result of classifying a whole trajectory."""
    # DataFrame with per-point labels
    df: pd.DataFrame
    # Contiguous runs of the same mode
    segments: List[ModeSegment]
    # Totals by mode value (meters / seconds)
    distance_by_mode: Dict[str, float]
    duration_by_mode: Dict[str, float]
    # Share of labelled pairs per mode value
    mode_fractions: Dict[str, float]
    # Final persistent context
    context: EnhancedModeContext

    @property
    def num_segments(self) -> int:
        return len(self.segments)

    @property
    def dominant_mode(self) -> Optional[TransportMode]:
        """Mode covering the most distance, if any distance was covered."""
        if not self.distance_by_mode:
            return None
        mode, distance = max(self.distance_by_mode.items(), key=lambda kv: kv[1])
        return TransportMode(mode) if distance > 0 else None


def _epoch_ms(series: pd.Series) -> np.ndarray:
    """Timestamps as float epoch milliseconds (NaN where missing)."""
    if pd.api.types.is_datetime64_any_dtype(series):
        epoch = pd.Timestamp(0, tz=series.dt.tz)
        return ((series - epoch) / pd.Timedelta(milliseconds=1)).to_numpy(dtype=float)
    return pd.to_numeric(series, errors='coerce').to_numpy(dtype=float)


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return None if np.isnan(value) else value


def classify_trajectory(
    df: pd.DataFrame,
    time_col: str = 'timestamp',
    lat_col: str = 'latitude',
    lon_col: str = 'longitude',
    geocode_col: str = 'geocode',
    speed_col: Optional[str] = None,
    settings: Optional[DetectionSettings] = None,
) -> TrajectoryModeResult:
    """
    Classify every segment of an ordered trajectory.

    Rows with invalid coordinates or timestamps are skipped: they are
    labelled unknown and the previous valid fix is kept for the next pair.

    Args:
        df: DataFrame of fixes in chronological order
        time_col: Timestamp column (datetime64 or epoch milliseconds)
        lat_col: Latitude column (degrees)
        lon_col: Longitude column (degrees)
        geocode_col: Optional column of reverse-geocode payloads
        speed_col: Optional column of device speeds (m/s)
        settings: Detection settings

    Returns:
        TrajectoryModeResult with per-point labels and per-mode totals
    """
    missing = [c for c in (time_col, lat_col, lon_col) if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    classifier = TransportModeClassifier(settings=settings)
    context = classifier.new_context()

    n = len(df)
    times_ms = _epoch_ms(df[time_col])
    lats = pd.to_numeric(df[lat_col], errors='coerce').to_numpy(dtype=float)
    lons = pd.to_numeric(df[lon_col], errors='coerce').to_numpy(dtype=float)
    geocodes = df[geocode_col].tolist() if geocode_col in df.columns else [None] * n
    speeds = df[speed_col].tolist() if speed_col and speed_col in df.columns else [None] * n

    modes: List[Optional[str]] = [None] * n
    reasons: List[Optional[str]] = [None] * n
    confidences = np.full(n, np.nan)
    distances = np.zeros(n)
    elapsed = np.zeros(n)
    is_pair = np.zeros(n, dtype=bool)

    previous: Optional[GeoFix] = None
    prev_idx = -1
    for i in range(n):
        if np.isnan(times_ms[i]):
            fix = None
        else:
            fix = GeoFix(
                latitude=lats[i],
                longitude=lons[i],
                timestamp_ms=int(times_ms[i]),
                speed_mps=_optional_float(speeds[i]),
            )
        if fix is None or not fix.is_valid:
            logger.warning(f"Skipping row {i}: invalid coordinates or timestamp")
            modes[i] = TransportMode.UNKNOWN.value
            reasons[i] = DetectionReason.DEFAULT.value
            continue

        if previous is not None:
            dt = (fix.timestamp_ms - previous.timestamp_ms) / 1000.0
            result = classifier.classify(previous, fix, dt, geocodes[i], context)
            modes[i] = result.mode.value
            reasons[i] = result.reason
            if result.confidence is not None:
                confidences[i] = result.confidence
            distances[i] = haversine_distance(previous.latitude, previous.longitude,
                                              fix.latitude, fix.longitude)
            elapsed[i] = max(dt, 0.0)
            is_pair[i] = True
            if modes[prev_idx] is None:
                # First fix carries the label of the first segment
                modes[prev_idx] = modes[i]
                reasons[prev_idx] = reasons[i]
        previous = fix
        prev_idx = i

    modes = [m if m is not None else TransportMode.UNKNOWN.value for m in modes]
    reasons = [r if r is not None else DetectionReason.DEFAULT.value for r in reasons]

    result_df = df.copy()
    result_df['mode'] = modes
    result_df['reason'] = reasons
    result_df['confidence'] = confidences
    result_df['distance_m'] = distances
    result_df['elapsed_s'] = elapsed

    segments = _extract_segments(result_df, times_ms)

    # Totals over classified pairs only (not row 0 or skipped rows)
    labelled = pd.Series(is_pair, index=result_df.index)
    pair_modes = result_df.loc[labelled, 'mode']
    distance_by_mode = result_df.loc[labelled].groupby('mode')['distance_m'].sum().to_dict()
    duration_by_mode = result_df.loc[labelled].groupby('mode')['elapsed_s'].sum().to_dict()
    counts = pair_modes.value_counts()
    total = int(counts.sum())
    mode_fractions = {m: int(c) / total for m, c in counts.items()} if total > 0 else {}

    return TrajectoryModeResult(
        df=result_df,
        segments=segments,
        distance_by_mode={m: float(v) for m, v in distance_by_mode.items()},
        duration_by_mode={m: float(v) for m, v in duration_by_mode.items()},
        mode_fractions=mode_fractions,
        context=context,
    )


def _extract_segments(df: pd.DataFrame, times_ms: np.ndarray) -> List[ModeSegment]:
    """Extract contiguous same-mode runs from a labelled DataFrame."""
    segments = []
    n = len(df)

    if n == 0:
        return segments

    modes = df['mode'].values
    distances = df['distance_m'].values
    elapsed = df['elapsed_s'].values

    current_mode = modes[0]
    start_idx = 0

    for i in range(1, n + 1):
        if i == n or modes[i] != current_mode:
            end_idx = i - 1
            run = slice(start_idx, i)

            start_t = times_ms[start_idx]
            end_t = times_ms[end_idx]
            segments.append(ModeSegment(
                mode=TransportMode(current_mode),
                start_idx=start_idx,
                end_idx=end_idx,
                start_time_ms=int(start_t) if not np.isnan(start_t) else 0,
                end_time_ms=int(end_t) if not np.isnan(end_t) else 0,
                distance_m=float(np.sum(distances[run])),
                duration_s=float(np.sum(elapsed[run])),
            ))

            if i < n:
                current_mode = modes[i]
                start_idx = i

    return segments
