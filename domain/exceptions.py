"""Domain Exceptions

Every failure a booking operation can report is a subclass of
``BookingError``. The families map to how the caller should react:

* ``InputError``: malformed request, fix and resubmit.
* ``NotFoundError``: the referenced room or reservation does not exist.
* ``ConflictError``: the request is valid but clashes with current state.
* ``ChainVerificationError``: the submitted transaction cannot back a
  reservation. Terminal for that submission.
* ``ChainUnavailable``: the chain could not be queried at all.
"""


class BookingError(ValueError):
    """Base class for booking failures"""


# ==================== INPUT ERRORS ====================
class InputError(BookingError):
    pass


class InvalidDate(InputError):
    pass


class MinimumStayViolation(InputError):
    def __init__(self, message: str = "Minimum stay is 1 night"):
        super().__init__(message)


class InvalidWalletAddress(InputError):
    pass


class InvalidTransactionHash(InputError):
    pass


class InvalidRoomMetadata(InputError):
    pass


# ==================== NOT FOUND ====================
class NotFoundError(BookingError):
    pass


class RoomNotFound(NotFoundError):
    def __init__(self, room_id: int):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class ReservationNotFound(NotFoundError):
    def __init__(self, reference):
        self.reference = reference
        super().__init__(f"Reservation {reference} not found")


# ==================== CONFLICTS ====================
class ConflictError(BookingError):
    pass


class RoomNotAvailable(ConflictError):
    def __init__(self, room_id: int):
        self.room_id = room_id
        super().__init__(f"Room {room_id} is not available for the requested dates")


class TransactionAlreadyRecorded(ConflictError):
    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction {tx_hash} already backs a reservation")


class InvalidTransition(ConflictError):
    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change reservation status from {current.value} to {requested.value}"
        )


class StaleReservation(ConflictError):
    def __init__(self, reservation_id):
        self.reservation_id = reservation_id
        super().__init__(f"Reservation {reservation_id} was modified concurrently")


# ==================== CHAIN VERIFICATION ====================
class ChainVerificationError(BookingError):
    pass


class TransactionNotFound(ChainVerificationError):
    pass


class TransactionFailed(ChainVerificationError):
    pass


class WrongContract(ChainVerificationError):
    pass


class NotABookingCall(ChainVerificationError):
    pass


class RoomMismatch(ChainVerificationError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Transaction books room {actual}, expected room {expected}")


class BookingEventMissing(ChainVerificationError):
    def __init__(self, message: str = "Booked event not found in transaction"):
        super().__init__(message)


class PaymentMismatch(ChainVerificationError):
    def __init__(self, expected_wei: int, paid_wei: int):
        self.expected_wei = expected_wei
        self.paid_wei = paid_wei
        super().__init__(f"Paid {paid_wei} wei, expected at least {expected_wei} wei")


class ChainUnavailable(BookingError):
    pass
