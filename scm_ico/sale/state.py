"""Sale lifecycle derived from the clock.

The state is never stored. It is recomputed from the close time, the hold
duration and the current time on every query, so it cannot drift from the
clock.
"""

from ..core.types import IcoState, Timestamp


def derive_state(close_time: Timestamp | None, now: Timestamp, hold_duration: int) -> IcoState:
    """
    Compute the sale state at a given time.

    Args:
        close_time: When the target was reached, or None if it has not been
        now: Current timestamp
        hold_duration: Seconds between closing and claims opening

    Returns:
        ONGOING before the target is reached, CLOSED during the hold period,
        FINISHED once close_time + hold_duration has passed
    """
    if close_time is None:
        return IcoState.ONGOING
    if now < close_time + hold_duration:
        return IcoState.CLOSED
    return IcoState.FINISHED
