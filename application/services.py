"""Application Services - Business use cases"""
import logging
from datetime import timezone, tzinfo
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from domain.entities import Reservation, Room
from domain.enums import ReservationStatus
from domain.exceptions import (
    ChainVerificationError,
    ReservationNotFound,
    RoomNotAvailable,
    RoomNotFound,
    TransactionAlreadyRecorded,
)
from domain.repositories import ReservationRepository, RoomRepository
from domain.value_objects import (
    DateLike,
    StayWindow,
    normalize_tx_hash,
    normalize_wallet_address,
)
from application.verification import ChainVerifier

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Decides whether a room is free for a canonical stay"""

    def __init__(self, repository: ReservationRepository):
        self.repository = repository

    async def is_available(self, room_id: int, stay: StayWindow) -> bool:
        """True when no active reservation on the room overlaps stay"""
        conflicts = await self.repository.find_conflicting(room_id, stay)
        return not conflicts


class RoomCatalogService:
    """Service for Room catalog use cases"""

    def __init__(self, repository: RoomRepository, reservation_repo: ReservationRepository):
        self.repository = repository
        self.reservation_repo = reservation_repo

    async def list_rooms(self) -> List[Room]:
        """Get all rooms with their mirrored bookings"""
        return await self.repository.find_all()

    async def get_room(self, room_id: int) -> Room:
        room = await self.repository.find_by_id(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    async def create_room(
        self,
        name: str,
        price_per_night: Decimal,
        beds: int,
        max_guests: int,
        description: str = "",
        images: Optional[List[str]] = None
    ) -> Room:
        """Create a room under the next sequential room id"""
        # validate first so a rejected room never consumes an id
        Room.validate_metadata(name, price_per_night, beds, max_guests, images)

        room = await self.repository.add(
            lambda room_id: Room.create(
                room_id=room_id,
                name=name,
                price_per_night=price_per_night,
                beds=beds,
                max_guests=max_guests,
                description=description,
                images=images,
            )
        )
        logger.info("Created room %s (%s)", room.room_id, room.name)
        return room

    async def reconcile_room(self, room_id: int) -> Room:
        """Rebuild the room's booking mirror from the ledger"""
        await self.get_room(room_id)

        reservations = await self.reservation_repo.find_by_room(room_id)
        reservations.sort(key=lambda r: r.created_at)
        await self.repository.replace_bookings(room_id, [r.to_summary() for r in reservations])

        logger.info("Reconciled mirror for room %s (%s bookings)", room_id, len(reservations))
        return await self.get_room(room_id)


class ReservationService:
    """Service for Reservation ledger use cases"""

    def __init__(
        self,
        repository: ReservationRepository,
        room_repo: RoomRepository,
        verifier: ChainVerifier,
        availability: Optional[AvailabilityService] = None,
        tz: tzinfo = timezone.utc
    ):
        self.repository = repository
        self.room_repo = room_repo
        self.verifier = verifier
        self.availability = availability or AvailabilityService(repository)
        self.tz = tz

    async def _get_room(self, room_id: int) -> Room:
        room = await self.room_repo.find_by_id(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    async def check_availability(
        self,
        room_id: int,
        check_in: DateLike,
        check_out: DateLike
    ) -> bool:
        """Pre-payment availability query"""
        await self._get_room(room_id)
        stay = StayWindow.normalize(check_in, check_out, self.tz)
        return await self.availability.is_available(room_id, stay)

    async def commit_reservation(
        self,
        room_id: int,
        wallet_address: str,
        customer_name: str,
        phone_number: str,
        check_in: DateLike,
        check_out: DateLike,
        tx_hash: str
    ) -> Reservation:
        """Record a reservation backed by a verified on-chain payment"""
        wallet_address = normalize_wallet_address(wallet_address)
        tx_hash = normalize_tx_hash(tx_hash)
        stay = StayWindow.normalize(check_in, check_out, self.tz)

        room = await self._get_room(room_id)

        if not await self.availability.is_available(room_id, stay):
            raise RoomNotAvailable(room_id)
        if await self.repository.find_by_tx_hash(tx_hash):
            raise TransactionAlreadyRecorded(tx_hash)

        try:
            verified = await self.verifier.verify(tx_hash, room_id, stay, room.price_per_night)
        except ChainVerificationError as e:
            logger.warning("Rejected %s for room %s: %s", tx_hash, room_id, e)
            raise

        reservation = Reservation.create(
            room_id=room_id,
            wallet_address=wallet_address,
            stay=stay,
            tx_hash=tx_hash,
            booking_hash=verified.booking_hash,
            paid_amount=verified.paid_amount,
            customer_name=customer_name,
            phone_number=phone_number,
        )

        # authoritative gate: the store re-checks overlap atomically with the insert
        await self.repository.add_if_available(reservation)
        logger.info(
            "Booked room %s for %s from %s to %s (tx %s)",
            room_id, wallet_address, stay.check_in.isoformat(), stay.check_out.isoformat(), tx_hash
        )

        await self._mirror_append(reservation)
        return reservation

    async def get_reservation(self, reservation_id: UUID) -> Reservation:
        reservation = await self.repository.find_by_id(reservation_id)
        if reservation is None:
            raise ReservationNotFound(reservation_id)
        return reservation

    async def get_reservation_by_booking_hash(self, booking_hash: str) -> Reservation:
        reservation = await self.repository.find_by_booking_hash(booking_hash)
        if reservation is None:
            raise ReservationNotFound(booking_hash)
        return reservation

    async def list_reservations_for_room(self, room_id: int) -> List[Reservation]:
        """Reservations on a room, earliest stay first"""
        await self._get_room(room_id)
        return await self.repository.find_by_room(room_id)

    async def list_reservations_for_holder(self, wallet_address: str) -> List[Reservation]:
        """Reservations held by a wallet, earliest stay first"""
        return await self.repository.find_by_wallet(normalize_wallet_address(wallet_address))

    async def list_all_reservations(self) -> List[Reservation]:
        """All reservations in insertion order"""
        return await self.repository.find_all()

    async def transition_status(
        self,
        reservation_id: UUID,
        new_status: ReservationStatus
    ) -> Reservation:
        """Apply a status transition to the ledger, then to the room mirror"""
        reservation = await self.get_reservation(reservation_id)
        previous = reservation.status

        reservation.transition_to(new_status)
        await self.repository.update(reservation)
        logger.info(
            "Reservation %s moved from %s to %s",
            reservation_id, previous.value, new_status.value
        )

        await self._mirror_status(reservation)
        return reservation

    async def cancel_reservation(self, reservation_id: UUID) -> Reservation:
        return await self.transition_status(reservation_id, ReservationStatus.CANCELLED)

    async def check_in_reservation(self, reservation_id: UUID) -> Reservation:
        return await self.transition_status(reservation_id, ReservationStatus.CHECKED_IN)

    async def complete_reservation(self, reservation_id: UUID) -> Reservation:
        return await self.transition_status(reservation_id, ReservationStatus.COMPLETED)

    # Mirror writes are best effort: the ledger is already committed and
    # RoomCatalogService.reconcile_room can rebuild the mirror later.
    async def _mirror_append(self, reservation: Reservation) -> None:
        try:
            await self.room_repo.append_booking(reservation.room_id, reservation.to_summary())
        except Exception:
            logger.exception(
                "Mirror append failed for room %s (tx %s); ledger record kept",
                reservation.room_id, reservation.tx_hash
            )

    async def _mirror_status(self, reservation: Reservation) -> None:
        try:
            found = await self.room_repo.update_booking_status(
                reservation.room_id, reservation.tx_hash, reservation.status
            )
            if not found:
                logger.warning(
                    "Mirror entry for tx %s missing on room %s",
                    reservation.tx_hash, reservation.room_id
                )
        except Exception:
            logger.exception(
                "Mirror status update failed for room %s (tx %s); ledger record kept",
                reservation.room_id, reservation.tx_hash
            )
