"""Application Service - on-chain payment verification"""
import logging
from decimal import Decimal
from typing import NamedTuple, Optional

from eth_utils import to_wei

from domain.chain import ChainReader
from domain.contract import AbiDecodeError, decode_booked_event, decode_booking_call
from domain.exceptions import (
    BookingEventMissing,
    MinimumStayViolation,
    NotABookingCall,
    PaymentMismatch,
    RoomMismatch,
    TransactionFailed,
    TransactionNotFound,
    WrongContract,
)
from domain.value_objects import StayWindow

logger = logging.getLogger(__name__)


def _same_address(left: str, right: str) -> bool:
    return left.lower() == right.lower()


class VerifiedBooking(NamedTuple):
    booking_hash: str
    room_id: int
    payer: str
    paid_amount: int
    nights: int


class ChainVerifier:
    """Decides whether a submitted transaction can back a reservation.

    Pure verification oracle: it only reads from the chain and never touches
    the ledger. Each check maps to its own exception so callers can tell a
    reverted payment from a transaction aimed at the wrong room.
    """

    def __init__(
        self,
        reader: ChainReader,
        contract_address: str,
        enforce_payment_amount: bool = False
    ):
        self.reader = reader
        self.contract_address = contract_address
        self.enforce_payment_amount = enforce_payment_amount

    async def verify(
        self,
        tx_hash: str,
        expected_room_id: int,
        stay: StayWindow,
        price_per_night: Optional[Decimal] = None
    ) -> VerifiedBooking:
        receipt = await self.reader.get_receipt(tx_hash)
        if receipt is None:
            raise TransactionNotFound(f"Transaction {tx_hash} not found")
        if not receipt.succeeded:
            raise TransactionFailed(f"Transaction {tx_hash} failed on chain")

        tx = await self.reader.get_transaction(tx_hash)
        if tx is None or not tx.to:
            raise TransactionNotFound(f"Transaction {tx_hash} not found")

        if not _same_address(tx.to, self.contract_address):
            raise WrongContract(f"Transaction {tx_hash} was sent to {tx.to}, not the booking contract")

        try:
            call = decode_booking_call(tx.input)
        except AbiDecodeError as exc:
            raise NotABookingCall(f"Transaction {tx_hash} is not a booking call: {exc}") from exc

        if call.room_id != expected_room_id:
            raise RoomMismatch(expected_room_id, call.room_id)

        event = self._find_booked_event(receipt.logs)

        nights = stay.nights()
        if nights < 1:
            raise MinimumStayViolation()

        if self.enforce_payment_amount and price_per_night is not None:
            expected_wei = to_wei(Decimal(price_per_night), "ether") * nights
            if event.paid_amount < expected_wei:
                raise PaymentMismatch(expected_wei, event.paid_amount)

        logger.info(
            "Verified %s for room %s (booking %s, %s nights)",
            tx_hash, call.room_id, event.booking_hash, nights
        )
        return VerifiedBooking(
            booking_hash=event.booking_hash,
            room_id=call.room_id,
            payer=event.user,
            paid_amount=event.paid_amount,
            nights=nights,
        )

    def _find_booked_event(self, logs):
        # stricter than a scan of every log: a Booked event only counts when the
        # booking contract emitted it, so other contracts cannot forge one
        for log in logs:
            if not _same_address(log.address, self.contract_address):
                continue
            try:
                return decode_booked_event(log)
            except AbiDecodeError:
                continue
        raise BookingEventMissing()
