"""Typed decoder for the booking contract ABI.

Only the shapes the ledger consumes are modelled: the payable booking entry
points and the ``Booked`` event. Anything else is a decode failure.
"""
from enum import Enum
from typing import NamedTuple

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import (
    event_signature_to_log_topic,
    function_signature_to_4byte_selector,
    to_hex,
    to_normalized_address,
)

from domain.chain import TxLog

BOOK_ARGUMENT_TYPES = ["uint256", "uint256", "uint256"]
BOOKED_EVENT_SIGNATURE = "Booked(bytes32,uint256,address,uint256)"
BOOKED_EVENT_TOPIC = event_signature_to_log_topic(BOOKED_EVENT_SIGNATURE)


class AbiDecodeError(ValueError):
    pass


class BookingFunction(str, Enum):
    BOOK = "book(uint256,uint256,uint256)"
    BOOK_ROOM = "bookRoom(uint256,uint256,uint256)"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.value)


_FUNCTIONS_BY_SELECTOR = {function.selector: function for function in BookingFunction}


class BookCall(NamedTuple):
    function: BookingFunction
    room_id: int
    check_in_epoch: int
    check_out_epoch: int


class BookedEvent(NamedTuple):
    booking_hash: str
    room_id: int
    user: str
    paid_amount: int


def decode_booking_call(data: bytes) -> BookCall:
    """Decode transaction input into a booking call"""
    data = bytes(data)
    if len(data) < 4:
        raise AbiDecodeError("Transaction input has no function selector")

    function = _FUNCTIONS_BY_SELECTOR.get(data[:4])
    if function is None:
        raise AbiDecodeError(f"Unknown function selector {to_hex(data[:4])}")

    try:
        room_id, check_in_epoch, check_out_epoch = decode(BOOK_ARGUMENT_TYPES, data[4:])
    except DecodingError as exc:
        raise AbiDecodeError(f"Malformed {function.name.lower()} arguments: {exc}") from exc

    return BookCall(function, room_id, check_in_epoch, check_out_epoch)


def decode_booked_event(log: TxLog) -> BookedEvent:
    """Decode a log entry as a Booked event"""
    topics = [bytes(topic) for topic in log.topics]
    # bookingHash, roomId and user are indexed
    if len(topics) != 4 or topics[0] != BOOKED_EVENT_TOPIC:
        raise AbiDecodeError("Log is not a Booked event")
    if any(len(topic) != 32 for topic in topics[1:]):
        raise AbiDecodeError("Malformed Booked event topics")

    try:
        (paid_amount,) = decode(["uint256"], bytes(log.data))
    except DecodingError as exc:
        raise AbiDecodeError(f"Malformed Booked event data: {exc}") from exc

    return BookedEvent(
        booking_hash=to_hex(topics[1]),
        room_id=int.from_bytes(topics[2], "big"),
        user=to_normalized_address(topics[3][-20:]),
        paid_amount=paid_amount,
    )
