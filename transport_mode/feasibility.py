"""
Mode-to-mode transition feasibility.

A pure lookup used by the continuity guard: can someone plausibly switch
from one transport mode to another, given whether they are at a train
station?
"""

from .modes import TransportMode


def can_transition(
    from_mode: TransportMode,
    to_mode: TransportMode,
    at_station: bool,
) -> bool:
    """
    Check whether switching from `from_mode` to `to_mode` is plausible.

    Args:
        from_mode: Mode of the previous segment
        to_mode: Candidate mode for the current segment
        at_station: True if the current fix is at a train station

    Returns:
        True if the transition is possible. Pairs not covered by the
        table are allowed.
    """
    M = TransportMode

    if from_mode is to_mode:
        return True

    # Car and train only meet at a station
    if {from_mode, to_mode} == {M.CAR, M.TRAIN}:
        return at_station

    # No bikes on this train
    if {from_mode, to_mode} == {M.CYCLING, M.TRAIN}:
        return False

    if from_mode in (M.STATIONARY, M.WALKING, M.AIRPLANE):
        return True

    if from_mode is M.CYCLING:
        return True

    if from_mode is M.CAR:
        return to_mode in (M.WALKING, M.CYCLING, M.STATIONARY)

    if from_mode is M.TRAIN:
        return to_mode in (M.WALKING, M.STATIONARY)

    return True
