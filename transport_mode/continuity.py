"""
Continuity guard.

Last step of every classification. When the previous segment was an active
mode and the new fix arrived too soon for a real stop-and-switch, the
candidate mode is checked against the previous one:

- car -> airplane is never accepted directly; the result stays car.
- other airplane candidates pass through unchanged.
- if the feasibility matrix allows the switch, the previous mode is kept.
- otherwise the candidate passes through unchanged.

Note the third case keeps the previous mode exactly when the switch is
allowed. Pending product confirmation this is the intended behaviour and is
pinned by tests.
"""

import logging
from typing import Optional

from .context import ModeResult
from .feasibility import can_transition
from .modes import DetectionReason, TransportMode
from .settings import DetectionSettings, settings as default_settings

logger = logging.getLogger(__name__)


CONTINUITY = 'continuity_guard'


def apply_continuity_guard(
    current_mode: TransportMode,
    candidate: ModeResult,
    elapsed_seconds: float,
    at_station: bool,
    settings: Optional[DetectionSettings] = None,
) -> ModeResult:
    """
    Suppress implausible short-interval mode switches.

    Args:
        current_mode: Mode persisted from the previous segment
        candidate: Result proposed for the current segment
        elapsed_seconds: Time since the previous fix
        at_station: True if the current fix is at a train station
        settings: Detection settings (min stop duration)

    Returns:
        The final ModeResult for the segment
    """
    cfg = settings or default_settings

    if not current_mode.is_active or elapsed_seconds >= cfg.min_stop_duration_seconds:
        return candidate

    if current_mode is TransportMode.CAR and candidate.mode is TransportMode.AIRPLANE:
        logger.debug("Rejected direct car -> airplane switch")
        return candidate.with_mode(
            TransportMode.CAR,
            reason="Direct switch from car to airplane is not possible, keeping car",
            code=DetectionReason.PHYSICALLY_IMPOSSIBLE,
            rule=CONTINUITY,
        )

    # Airplane candidates skip the feasibility rewrite
    if candidate.mode is current_mode or candidate.mode is TransportMode.AIRPLANE:
        return candidate

    if can_transition(current_mode, candidate.mode, at_station):
        logger.debug(
            f"Kept {current_mode.value} over {candidate.mode.value} after {elapsed_seconds:.0f}s"
        )
        return candidate.with_mode(
            current_mode,
            reason=f"Keeping {current_mode.value} ({elapsed_seconds:.0f}s since last fix)",
            code=DetectionReason.KEEP_CONTINUITY,
            rule=CONTINUITY,
        )

    return candidate
