"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    BOOKED = "BOOKED"
    CHECKED_IN = "CHECKED_IN"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_active(self) -> bool:
        """Active reservations block overlapping stays"""
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]

    def can_transition_to(self, new_status: "ReservationStatus") -> bool:
        return new_status in ALLOWED_TRANSITIONS[self]


ACTIVE_STATUSES = frozenset({ReservationStatus.BOOKED, ReservationStatus.CHECKED_IN})

ALLOWED_TRANSITIONS = {
    ReservationStatus.BOOKED: frozenset({ReservationStatus.CHECKED_IN, ReservationStatus.CANCELLED}),
    ReservationStatus.CHECKED_IN: frozenset({ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}
