"""
Visualization tools for labelled trajectories.

Provides plotting functions for:
- Trajectory paths colored by transport mode
- Distance and time by mode
- Speed timeline with mode bands
"""

import numpy as np
import pandas as pd
from typing import Optional, Tuple
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from .classifier import TrajectoryModeResult
from .modes import TransportMode


# Color scheme for transport modes
MODE_COLORS = {
    TransportMode.STATIONARY: '#95a5a6',  # Grey
    TransportMode.WALKING: '#2ecc71',     # Green
    TransportMode.CYCLING: '#f1c40f',     # Yellow
    TransportMode.CAR: '#e74c3c',         # Red
    TransportMode.TRAIN: '#3498db',       # Blue
    TransportMode.AIRPLANE: '#9b59b6',    # Purple
    TransportMode.BOAT: '#1abc9c',        # Teal
    TransportMode.UNKNOWN: '#34495e',     # Dark
}

MODE_COLORS_STR = {mode.value: color for mode, color in MODE_COLORS.items()}


def _legend_patches(modes):
    return [mpatches.Patch(color=MODE_COLORS[m], label=m.value.capitalize()) for m in modes]


def _elapsed_seconds(df: pd.DataFrame, time_col: str) -> np.ndarray:
    if pd.api.types.is_datetime64_any_dtype(df[time_col]):
        return (df[time_col] - df[time_col].iloc[0]).dt.total_seconds().values
    return (df[time_col].values.astype(float) - float(df[time_col].iloc[0])) / 1000.0


def plot_mode_trajectory(
    result: TrajectoryModeResult,
    ax: Optional[plt.Axes] = None,
    lat_col: str = 'latitude',
    lon_col: str = 'longitude',
    linewidth: float = 3,
    marker_size: float = 30,
    title: Optional[str] = None,
    show_legend: bool = True,
) -> plt.Axes:
    """
    Plot the trajectory with segments colored by transport mode.

    Args:
        result: TrajectoryModeResult from classify_trajectory()
        ax: Matplotlib axes (creates new figure if None)
        lat_col, lon_col: Column names for coordinates
        linewidth: Line width
        marker_size: Size of start/end markers
        title: Plot title
        show_legend: If True, show legend

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(12, 9))

    df = result.df
    x = df[lon_col].values
    y = df[lat_col].values

    for seg in result.segments:
        # Start one point earlier so consecutive runs connect
        start_idx = max(seg.start_idx - 1, 0)
        end_idx = seg.end_idx + 1
        ax.plot(x[start_idx:end_idx], y[start_idx:end_idx], color=MODE_COLORS[seg.mode],
                linewidth=linewidth, zorder=2, solid_capstyle='round')

    if len(x) > 0:
        ax.scatter(x[0], y[0], c='black', s=marker_size * 2, marker='o',
                   label='Start', zorder=4, edgecolors='white', linewidth=2)
        ax.scatter(x[-1], y[-1], c='black', s=marker_size * 2, marker='s',
                   label='End', zorder=4, edgecolors='white', linewidth=2)

    ax.set_xlabel('Longitude')
    ax.set_ylabel('Latitude')
    ax.grid(True, alpha=0.3)

    if show_legend:
        present = sorted({seg.mode for seg in result.segments}, key=lambda m: list(TransportMode).index(m))
        ax.legend(handles=_legend_patches(present), loc='best')

    if title:
        ax.set_title(title)
    else:
        ax.set_title(f'Transport modes: {result.num_segments} segments')

    return ax


def plot_mode_summary(
    result: TrajectoryModeResult,
    figsize: Tuple[float, float] = (12, 5),
) -> plt.Figure:
    """
    Plot distance and time spent per transport mode.

    Args:
        result: TrajectoryModeResult from classify_trajectory()
        figsize: Figure size

    Returns:
        Matplotlib figure
    """
    fig, axes = plt.subplots(1, 2, figsize=figsize)

    modes = [m for m in TransportMode
             if result.distance_by_mode.get(m.value, 0) > 0 or result.duration_by_mode.get(m.value, 0) > 0]
    labels = [m.value.capitalize() for m in modes]
    colors = [MODE_COLORS[m] for m in modes]

    # Distance by mode
    ax = axes[0]
    distances_km = [result.distance_by_mode.get(m.value, 0) / 1000 for m in modes]
    bars = ax.bar(labels, distances_km, color=colors, edgecolor='white', linewidth=1.5)
    ax.set_ylabel('Distance (km)')
    ax.set_title('Distance by Mode')
    for bar, km in zip(bars, distances_km):
        if km > 0:
            ax.text(bar.get_x() + bar.get_width() / 2, bar.get_height(),
                    f'{km:.1f}', ha='center', va='bottom', fontsize=10)

    # Time by mode
    ax = axes[1]
    minutes = [result.duration_by_mode.get(m.value, 0) / 60 for m in modes]
    ax.bar(labels, minutes, color=colors, edgecolor='white', linewidth=1.5)
    ax.set_ylabel('Time (min)')
    ax.set_title('Time by Mode')

    plt.tight_layout()
    return fig


def create_mode_report(
    result: TrajectoryModeResult,
    time_col: str = 'timestamp',
    save_path: Optional[str] = None,
    figsize: Tuple[float, float] = (16, 10),
) -> plt.Figure:
    """
    Create a visualization report for a labelled trajectory.

    Args:
        result: TrajectoryModeResult from classify_trajectory()
        time_col: Name of timestamp column
        save_path: If provided, save figure to this path
        figsize: Figure size

    Returns:
        Matplotlib figure
    """
    fig = plt.figure(figsize=figsize)
    gs = fig.add_gridspec(2, 3, hspace=0.35, wspace=0.3)

    # Map (spans 2 rows, 2 cols)
    ax1 = fig.add_subplot(gs[0:2, 0:2])
    plot_mode_trajectory(result, ax=ax1, title='Labelled Trajectory')

    # Distance share
    ax2 = fig.add_subplot(gs[0, 2])
    shares = [(m, result.distance_by_mode.get(m.value, 0)) for m in TransportMode]
    shares = [(m, d) for m, d in shares if d > 0]
    if shares:
        modes, distances = zip(*shares)
        ax2.pie(distances, labels=[m.value for m in modes],
                colors=[MODE_COLORS[m] for m in modes], autopct='%1.1f%%', startangle=90)
    ax2.set_title('Distance Share')

    # Speed timeline with mode bands
    ax3 = fig.add_subplot(gs[1, 2])
    df = result.df
    time = _elapsed_seconds(df, time_col) / 60
    elapsed = df['elapsed_s'].values
    speed = np.divide(df['distance_m'].values, elapsed, out=np.zeros(len(df)), where=elapsed > 0) * 3.6
    for seg in result.segments:
        ax3.axvspan(time[seg.start_idx], time[seg.end_idx], color=MODE_COLORS[seg.mode], alpha=0.3)
    ax3.plot(time, speed, color='black', linewidth=1)
    ax3.set_xlabel('Time (min)')
    ax3.set_ylabel('Speed (km/h)')
    ax3.set_title('Speed')
    ax3.grid(True, alpha=0.3)

    fig.suptitle(f'Transport Mode Report ({len(df)} fixes, {result.num_segments} segments)',
                 fontsize=14, fontweight='bold')

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
