"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Optional, List
from decimal import Decimal

from domain.enums import ReservationStatus
from domain.exceptions import InvalidRoomMetadata, InvalidTransition
from domain.value_objects import StayWindow, RoomBookingSummary


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)

    # References to other contexts
    room_id: int
    wallet_address: str

    # Guest contact
    customer_name: str = ""
    phone_number: str = ""

    # Value Objects
    stay: StayWindow

    # On-chain references
    tx_hash: str
    booking_hash: Optional[str] = None
    paid_amount: Optional[int] = None

    # Enums/Status
    status: ReservationStatus = ReservationStatus.BOOKED

    # Metadata
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        room_id: int,
        wallet_address: str,
        stay: StayWindow,
        tx_hash: str,
        booking_hash: Optional[str] = None,
        paid_amount: Optional[int] = None,
        customer_name: str = "",
        phone_number: str = ""
    ) -> "Reservation":
        """Create a freshly booked reservation for a verified transaction"""
        return Reservation(
            room_id=room_id,
            wallet_address=wallet_address.lower(),
            customer_name=customer_name or "",
            phone_number=phone_number or "",
            stay=stay,
            tx_hash=tx_hash,
            booking_hash=booking_hash,
            paid_amount=paid_amount,
            status=ReservationStatus.BOOKED,
        )

    # ==================== STATE TRANSITION METHODS ====================
    def transition_to(self, new_status: ReservationStatus) -> None:
        """Move to new_status if the status machine allows it"""
        if not self.status.can_transition_to(new_status):
            raise InvalidTransition(self.status, new_status)

        self.status = new_status
        self.modified_at = _utcnow()
        self.version += 1

    def check_in(self) -> None:
        self.transition_to(ReservationStatus.CHECKED_IN)

    def complete(self) -> None:
        self.transition_to(ReservationStatus.COMPLETED)

    def cancel(self) -> None:
        self.transition_to(ReservationStatus.CANCELLED)

    # ==================== QUERY METHODS ====================
    def is_active(self) -> bool:
        return self.status.is_active

    def conflicts_with(self, stay: StayWindow) -> bool:
        """Only active reservations block a candidate stay"""
        return self.is_active() and self.stay.overlaps(stay)

    def get_nights(self) -> int:
        return self.stay.nights()

    def to_summary(self) -> RoomBookingSummary:
        """Build the mirror entry kept on the room"""
        return RoomBookingSummary(
            wallet_address=self.wallet_address,
            check_in=self.stay.check_in,
            check_out=self.stay.check_out,
            tx_hash=self.tx_hash,
            booking_hash=self.booking_hash,
            status=self.status,
            created_at=self.created_at,
        )


class Room(BaseModel):
    """Room Aggregate Root Entity"""

    # Identity, assigned by the catalog
    room_id: int

    # Metadata
    name: str
    description: str = ""
    images: List[str] = []
    price_per_night: Decimal
    beds: int
    max_guests: int

    # Mirror of the ledger for this room
    bookings: List[RoomBookingSummary] = []

    created_at: datetime = Field(default_factory=_utcnow)

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        room_id: int,
        name: str,
        price_per_night: Decimal,
        beds: int,
        max_guests: int,
        description: str = "",
        images: Optional[List[str]] = None
    ) -> "Room":
        """Create new room with validation"""
        Room.validate_metadata(name, price_per_night, beds, max_guests, images)
        return Room(
            room_id=room_id,
            name=name.strip(),
            description=description or "",
            images=list(images or []),
            price_per_night=Decimal(price_per_night),
            beds=beds,
            max_guests=max_guests,
            bookings=[],
        )

    @staticmethod
    def validate_metadata(
        name: str,
        price_per_night: Decimal,
        beds: int,
        max_guests: int,
        images: Optional[List[str]] = None
    ) -> None:
        """Validate room business rules"""
        if not name or not name.strip():
            raise InvalidRoomMetadata("Room name is required")
        if not images:
            raise InvalidRoomMetadata("At least one image is required")
        if price_per_night is None or Decimal(price_per_night) <= 0:
            raise InvalidRoomMetadata("Price per night must be greater than 0")
        if beds is None or beds < 1:
            raise InvalidRoomMetadata("A room needs at least 1 bed")
        if max_guests is None or max_guests < beds:
            raise InvalidRoomMetadata("Max guests cannot be lower than the number of beds")

    # ==================== MIRROR METHODS ====================
    def append_booking(self, summary: RoomBookingSummary) -> None:
        self.bookings.append(summary)

    def set_booking_status(self, tx_hash: str, status: ReservationStatus) -> bool:
        """Update the mirrored status of the booking backed by tx_hash"""
        for summary in self.bookings:
            if summary.tx_hash == tx_hash:
                summary.status = status
                return True
        return False
