"""In-Memory Repository Implementations"""
import asyncio
from typing import Callable, Dict, List, Optional
from uuid import UUID

from domain.repositories import ReservationRepository, RoomRepository
from domain.entities import Reservation, Room
from domain.enums import ReservationStatus
from domain.exceptions import (
    ReservationNotFound,
    RoomNotAvailable,
    RoomNotFound,
    StaleReservation,
    TransactionAlreadyRecorded,
)
from domain.value_objects import RoomBookingSummary, StayWindow


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository.

    Records are copied on the way in and out so callers never share state
    with the store. Inserts are serialized per room with an asyncio.Lock.
    """

    def __init__(self):
        self._storage: Dict[UUID, Reservation] = {}
        self._room_locks: Dict[int, asyncio.Lock] = {}

    def _lock_for(self, room_id: int) -> asyncio.Lock:
        return self._room_locks.setdefault(room_id, asyncio.Lock())

    async def add_if_available(self, reservation: Reservation) -> Reservation:
        """Check for conflicts and insert as one step"""
        async with self._lock_for(reservation.room_id):
            if self._find_by_tx_hash(reservation.tx_hash):
                raise TransactionAlreadyRecorded(reservation.tx_hash)
            if self._conflicting(reservation.room_id, reservation.stay):
                raise RoomNotAvailable(reservation.room_id)
            self._storage[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        found = self._storage.get(reservation_id)
        return found.model_copy(deep=True) if found else None

    async def find_by_tx_hash(self, tx_hash: str) -> Optional[Reservation]:
        """Find reservation by transaction hash"""
        found = self._find_by_tx_hash(tx_hash)
        return found.model_copy(deep=True) if found else None

    async def find_by_booking_hash(self, booking_hash: str) -> Optional[Reservation]:
        """Find reservation by booking hash"""
        booking_hash = booking_hash.lower()
        for reservation in self._storage.values():
            if reservation.booking_hash and reservation.booking_hash.lower() == booking_hash:
                return reservation.model_copy(deep=True)
        return None

    async def find_by_room(self, room_id: int) -> List[Reservation]:
        """Find reservations for a room"""
        found = [r for r in self._storage.values() if r.room_id == room_id]
        return self._copies(sorted(found, key=lambda r: r.stay.check_in))

    async def find_by_wallet(self, wallet_address: str) -> List[Reservation]:
        """Find reservations for a wallet"""
        wallet_address = wallet_address.lower()
        found = [r for r in self._storage.values() if r.wallet_address == wallet_address]
        return self._copies(sorted(found, key=lambda r: r.stay.check_in))

    async def find_conflicting(self, room_id: int, stay: StayWindow) -> List[Reservation]:
        """Find active reservations overlapping stay"""
        return self._copies(self._conflicting(room_id, stay))

    async def find_all(self) -> List[Reservation]:
        """Find all reservations"""
        return self._copies(self._storage.values())

    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation, rejecting writes based on an outdated version"""
        stored = self._storage.get(reservation.reservation_id)
        if stored is None:
            raise ReservationNotFound(reservation.reservation_id)
        if stored.version >= reservation.version:
            raise StaleReservation(reservation.reservation_id)
        self._storage[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation

    def _find_by_tx_hash(self, tx_hash: str) -> Optional[Reservation]:
        tx_hash = tx_hash.lower()
        for reservation in self._storage.values():
            if reservation.tx_hash.lower() == tx_hash:
                return reservation
        return None

    def _conflicting(self, room_id: int, stay: StayWindow) -> List[Reservation]:
        return [
            r for r in self._storage.values()
            if r.room_id == room_id and r.conflicts_with(stay)
        ]

    @staticmethod
    def _copies(reservations) -> List[Reservation]:
        return [r.model_copy(deep=True) for r in reservations]


class InMemoryRoomRepository(RoomRepository):
    """In-memory implementation of RoomRepository"""

    def __init__(self):
        self._storage: Dict[int, Room] = {}
        self._lock = asyncio.Lock()
        self._last_room_id = 0

    async def add(self, build: Callable[[int], Room]) -> Room:
        """Allocate the next room id and store the built room"""
        async with self._lock:
            room_id = max(self._last_room_id, max(self._storage, default=0)) + 1
            room = build(room_id)
            self._storage[room_id] = room.model_copy(deep=True)
            self._last_room_id = room_id
        return room

    async def find_by_id(self, room_id: int) -> Optional[Room]:
        """Find room by ID"""
        found = self._storage.get(room_id)
        return found.model_copy(deep=True) if found else None

    async def find_all(self) -> List[Room]:
        """Find all rooms"""
        return [self._storage[k].model_copy(deep=True) for k in sorted(self._storage)]

    async def append_booking(self, room_id: int, summary: RoomBookingSummary) -> None:
        """Append booking summary to the room mirror"""
        async with self._lock:
            self._get(room_id).append_booking(summary.model_copy(deep=True))

    async def update_booking_status(self, room_id: int, tx_hash: str, status: ReservationStatus) -> bool:
        """Set mirrored booking status"""
        async with self._lock:
            return self._get(room_id).set_booking_status(tx_hash, status)

    async def replace_bookings(self, room_id: int, summaries: List[RoomBookingSummary]) -> None:
        """Overwrite the room mirror"""
        async with self._lock:
            self._get(room_id).bookings = [s.model_copy(deep=True) for s in summaries]

    def _get(self, room_id: int) -> Room:
        room = self._storage.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room
