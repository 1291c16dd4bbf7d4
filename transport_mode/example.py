#!/usr/bin/env python3
"""
Example usage of the transport mode classifier.

This script demonstrates:
1. Classifying fix pairs one at a time with a persistent context
2. Labelling whole sample journeys
3. Reading place signals from reverse-geocode payloads
4. Tuning thresholds through DetectionSettings
"""

import logging

import pandas as pd
from transport_mode import (
    DetectionSettings,
    GeoFix,
    TransportModeClassifier,
    classify_trajectory,
    extract_place_signal,
    generate_journey_dataset,
    generate_sample_journey,
)
from transport_mode.sample_data import station_payload


def example_fix_by_fix():
    """Classify a short train ride fix by fix."""
    print("=" * 60)
    print("Example 1: Fix-by-fix classification")
    print("=" * 60)

    classifier = TransportModeClassifier()
    context = classifier.new_context()

    fixes = [
        (GeoFix(52.3791, 4.9003, 0), None),
        (GeoFix(52.3789, 4.9005, 60_000), station_payload('Amsterdam Centraal', 'Amsterdam')),
        (GeoFix(52.3100, 4.9500, 1_860_000), None),
        (GeoFix(52.0894, 5.1100, 2_460_000), station_payload('Utrecht Centraal', 'Utrecht')),
    ]

    for (prev, _), (curr, geocode) in zip(fixes, fixes[1:]):
        dt = (curr.timestamp_ms - prev.timestamp_ms) / 1000.0
        result = classifier.classify(prev, curr, dt, geocode, context)
        print(f"  {result.mode.value:10s} | {result.code.value:28s} | {result.reason}")

    print(f"\n  In train journey: {context.is_in_train_journey} "
          f"(from {context.train_journey_start_station})")


def example_sample_journeys():
    """Label every sample journey type."""
    print("\n" + "=" * 60)
    print("Example 2: Sample journeys")
    print("=" * 60)

    for journey_type in ['walk', 'train_commute', 'highway_drive', 'flight']:
        df = generate_sample_journey(journey_type, seed=42)
        result = classify_trajectory(df)

        print(f"\n{journey_type.upper()} ({len(df)} fixes, {result.num_segments} segments):")
        for seg in result.segments:
            print(f"  {seg.mode.value:10s} | fixes {seg.start_idx:2d}-{seg.end_idx:2d} | "
                  f"{seg.distance_m / 1000:7.2f} km | {seg.duration_s / 60:5.1f} min")


def example_place_signals():
    """Show what the signal extractor reads from payloads."""
    print("\n" + "=" * 60)
    print("Example 3: Place signals")
    print("=" * 60)

    payloads = [
        station_payload('Utrecht Centraal', 'Utrecht'),
        '{"class": "highway", "type": "motorway", "name": "A2"}',
        '{"category": "aeroway", "type": "aerodrome", "name": "Schiphol"}',
        'not json',
        None,
    ]
    for payload in payloads:
        print(f"  {extract_place_signal(payload)}")


def example_dataset_summary():
    """Summarise distance by mode across a dataset."""
    print("\n" + "=" * 60)
    print("Example 4: Dataset summary")
    print("=" * 60)

    rows = []
    for df in generate_journey_dataset(num_journeys=8, seed=42):
        result = classify_trajectory(df)
        row = {'journey_id': int(df['journey_id'].iloc[0]), 'type': df['journey_type'].iloc[0]}
        row.update({f'{mode}_km': km / 1000 for mode, km in result.distance_by_mode.items()})
        rows.append(row)

    summary_df = pd.DataFrame(rows).fillna(0)
    print(summary_df.round(1).to_string(index=False))


def example_custom_settings():
    """Example: a stricter continuity window."""
    print("\n" + "=" * 60)
    print("Example 5: Custom settings")
    print("=" * 60)

    df = generate_sample_journey('train_commute', interval_seconds=120, seed=42)

    default = classify_trajectory(df)
    relaxed = classify_trajectory(df, settings=DetectionSettings(min_stop_duration_seconds=60))

    print(f"\n  Default (300s window): {default.mode_fractions}")
    print(f"  Relaxed (60s window):  {relaxed.mode_fractions}")


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    example_fix_by_fix()
    example_sample_journeys()
    example_place_signals()
    example_dataset_summary()
    example_custom_settings()

    print("\n" + "=" * 60)
    print("All examples completed!")
    print("=" * 60)
