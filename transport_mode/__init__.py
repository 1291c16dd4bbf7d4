"""
Transport Mode - Label trajectory segments with the transport mode used.

This package provides tools for:
- Distance and speed between consecutive geolocation fixes
- Reading train station, airport and motorway signals from reverse-geocode payloads
- Priority-ordered rules, train journey tracking and a continuity guard
- Classifying whole trajectories and summarising distance/time by mode
- Visualizing labelled trajectories

Example usage:
    from transport_mode import classify_trajectory, generate_sample_journey
    from transport_mode.visualization import plot_mode_trajectory

    # Generate sample data
    df = generate_sample_journey('train_commute', seed=42)

    # Label segments
    result = classify_trajectory(df)

    # Visualize
    plot_mode_trajectory(result)
"""

from .classifier import classify_segment, classify_trajectory, TransportModeClassifier
from .context import EnhancedModeContext, ModeResult
from .feasibility import can_transition
from .kinematics import GeoFix, distance_meters, speed_kmh
from .modes import DetectionReason, TransportMode
from .sample_data import generate_sample_journey, generate_journey_dataset
from .settings import DetectionSettings, SpeedBracket
from .signals import PlaceSignal, extract_place_signal

__version__ = "0.1.0"
__all__ = [
    "classify_segment",
    "classify_trajectory",
    "TransportModeClassifier",
    "EnhancedModeContext",
    "ModeResult",
    "can_transition",
    "GeoFix",
    "distance_meters",
    "speed_kmh",
    "DetectionReason",
    "TransportMode",
    "generate_sample_journey",
    "generate_journey_dataset",
    "DetectionSettings",
    "SpeedBracket",
    "PlaceSignal",
    "extract_place_signal",
]
