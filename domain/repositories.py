"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Callable, Optional, List
from uuid import UUID

from domain.entities import Reservation, Room
from domain.enums import ReservationStatus
from domain.value_objects import RoomBookingSummary, StayWindow


class ReservationRepository(ABC):
    """Repository interface for the Reservation ledger"""

    @abstractmethod
    async def add_if_available(self, reservation: Reservation) -> Reservation:
        """Insert reservation unless an active reservation on the same room overlaps it.

        The overlap check and the insert must be atomic per room. Raises
        RoomNotAvailable on conflict and TransactionAlreadyRecorded when the
        transaction hash already backs a reservation.
        """
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def find_by_tx_hash(self, tx_hash: str) -> Optional[Reservation]:
        """Find reservation by originating transaction hash"""
        pass

    @abstractmethod
    async def find_by_booking_hash(self, booking_hash: str) -> Optional[Reservation]:
        """Find reservation by on-chain booking hash"""
        pass

    @abstractmethod
    async def find_by_room(self, room_id: int) -> List[Reservation]:
        """Find reservations for a room, ordered by check-in"""
        pass

    @abstractmethod
    async def find_by_wallet(self, wallet_address: str) -> List[Reservation]:
        """Find reservations held by a wallet, ordered by check-in"""
        pass

    @abstractmethod
    async def find_conflicting(self, room_id: int, stay: StayWindow) -> List[Reservation]:
        """Find active reservations on room_id overlapping stay"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Reservation]:
        """Find all reservations in insertion order"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        pass


class RoomRepository(ABC):
    """Repository interface for the Room catalog"""

    @abstractmethod
    async def add(self, build: Callable[[int], Room]) -> Room:
        """Allocate the next room id atomically and store build(room_id)"""
        pass

    @abstractmethod
    async def find_by_id(self, room_id: int) -> Optional[Room]:
        """Find room by ID"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Room]:
        """Find all rooms ordered by ID"""
        pass

    @abstractmethod
    async def append_booking(self, room_id: int, summary: RoomBookingSummary) -> None:
        """Append a booking summary to the room mirror"""
        pass

    @abstractmethod
    async def update_booking_status(self, room_id: int, tx_hash: str, status: ReservationStatus) -> bool:
        """Set the mirrored status of the booking backed by tx_hash"""
        pass

    @abstractmethod
    async def replace_bookings(self, room_id: int, summaries: List[RoomBookingSummary]) -> None:
        """Overwrite the room mirror"""
        pass
