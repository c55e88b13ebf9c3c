"""Event capacity rule.

Seats are counted as approved participants. An approval may only be written
while at least one seat is free.
"""

from errors import ApiError


def assert_capacity_available(capacity: int, approved_participants: int) -> None:
    """Raise if the event has no free seat left.

    Args:
        capacity: Total seats on the event
        approved_participants: Seats already taken

    Raises:
        ApiError 400 event_full: If approved_participants >= capacity

    Example:
        >>> assert_capacity_available(10, 5)
        >>> assert_capacity_available(10, 10)
        Traceback (most recent call last):
        ...
        errors.ApiError: Event capacity has already been reached.
    """
    if approved_participants >= capacity:
        raise ApiError(
            400,
            "event_full",
            "Event capacity has already been reached.",
            details={"capacity": capacity, "approvedParticipants": approved_participants},
        )


def slots_available(capacity: int, approved_participants: int) -> int:
    """Free seats, never negative."""
    return max(capacity - approved_participants, 0)
