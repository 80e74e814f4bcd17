import logging

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import JSONResponse
from uuid import UUID
from typing import List, Optional
from fastapi.security import OAuth2PasswordRequestForm

from api.schemas import (
    # Rooms
    CreateRoomRequest, RoomResponse, RoomSummaryResponse, RoomBookingResponse,
    # Bookings
    CheckAvailabilityRequest, AvailabilityResponse, CreateBookingRequest,
    ReservationResponse, ErrorResponse,
    # Auth
    Token, UserResponse
)

from api.dependencies import authenticate_admin, get_current_admin
from infrastructure.security import create_access_token
from domain.auth import AdminUser

from application.services import ReservationService, RoomCatalogService
from application.verification import ChainVerifier
from infrastructure.chain_client import Web3ChainReader
from infrastructure.config import Config
from infrastructure.logger import setup_logger
from infrastructure.repositories.in_memory_repositories import (
    InMemoryReservationRepository, InMemoryRoomRepository
)
from domain.entities import Reservation, Room
from domain.enums import ReservationStatus
from domain.exceptions import (
    BookingError, NotFoundError, ConflictError, ChainUnavailable
)

setup_logger(Config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="EtherStay Reservation API",
    description="Records on-chain room bookings into the hotel reservation ledger",
    version="1.0.0"
)

# Store handles and chain client, created once per process
reservation_repo = InMemoryReservationRepository()
room_repo = InMemoryRoomRepository()
chain_reader = Web3ChainReader.from_config(Config)


# Dependency injection
def get_chain_verifier() -> ChainVerifier:
    return ChainVerifier(
        chain_reader,
        contract_address=Config.CONTRACT_ADDRESS,
        enforce_payment_amount=Config.ENFORCE_PAYMENT_AMOUNT
    )

def get_reservation_service(verifier: ChainVerifier = Depends(get_chain_verifier)) -> ReservationService:
    return ReservationService(reservation_repo, room_repo, verifier, tz=Config.hotel_tz())

def get_room_catalog_service() -> RoomCatalogService:
    return RoomCatalogService(room_repo, reservation_repo)

# ============================================================================
# ERROR MAPPING
# ============================================================================

def _status_for(error: BookingError) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ConflictError):
        return 409
    if isinstance(error, ChainUnavailable):
        return 502
    # input and chain verification errors
    return 400

@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), error=type(exc).__name__).model_dump()
    )

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running", "contract": Config.CONTRACT_ADDRESS}

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus enum values"""
    return {
        "values": [item.name for item in ReservationStatus],
        "active": [item.name for item in ReservationStatus if item.is_active],
        "description": "BOOKED -> CHECKED_IN -> COMPLETED; BOOKED or CHECKED_IN -> CANCELLED"
    }

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    admin = authenticate_admin(form_data.username, form_data.password)
    if admin is None:
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"access_token": create_access_token(admin.username), "token_type": "bearer"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: AdminUser = Depends(get_current_admin)):
    return current_user

# ============================================================================
# ROOM ENDPOINTS
# ============================================================================

@app.get("/api/rooms", response_model=List[RoomResponse], tags=["Rooms"])
async def list_rooms(service: RoomCatalogService = Depends(get_room_catalog_service)):
    """List all rooms with their bookings"""
    rooms = await service.list_rooms()
    return [_room_to_response(r) for r in rooms]

@app.get("/api/rooms/{room_id}", response_model=RoomResponse, tags=["Rooms"])
async def get_room(room_id: int, service: RoomCatalogService = Depends(get_room_catalog_service)):
    """Get room by ID"""
    return _room_to_response(await service.get_room(room_id))

@app.get("/api/admin/rooms", response_model=List[RoomSummaryResponse], tags=["Admin"])
async def admin_list_rooms(
    service: RoomCatalogService = Depends(get_room_catalog_service),
    current_user: AdminUser = Depends(get_current_admin)
):
    """List room metadata"""
    rooms = await service.list_rooms()
    return [_room_to_summary(r) for r in rooms]

@app.post("/api/admin/rooms", response_model=RoomResponse, status_code=201, tags=["Admin"])
async def create_room(
    request: CreateRoomRequest,
    service: RoomCatalogService = Depends(get_room_catalog_service),
    current_user: AdminUser = Depends(get_current_admin)
):
    """Create a room under the next room id"""
    room = await service.create_room(
        name=request.name,
        description=request.description,
        images=request.images,
        price_per_night=request.price_per_night,
        beds=request.beds,
        max_guests=request.max_guests
    )
    return _room_to_response(room)

@app.post("/api/admin/rooms/{room_id}/reconcile", response_model=RoomResponse, tags=["Admin"])
async def reconcile_room(
    room_id: int,
    service: RoomCatalogService = Depends(get_room_catalog_service),
    current_user: AdminUser = Depends(get_current_admin)
):
    """Rebuild a room's booking list from the reservation ledger"""
    return _room_to_response(await service.reconcile_room(room_id))

# ============================================================================
# BOOKING ENDPOINTS
# ============================================================================

@app.post("/api/bookings/check", response_model=AvailabilityResponse, tags=["Bookings"])
async def check_availability(
    request: CheckAvailabilityRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Check whether a room is free for the requested dates"""
    available = await service.check_availability(
        room_id=request.room_id,
        check_in=request.check_in,
        check_out=request.check_out
    )
    return {"available": available}

@app.post("/api/bookings", response_model=ReservationResponse, status_code=201, tags=["Bookings"])
async def commit_reservation(
    request: CreateBookingRequest,
    service: ReservationService = Depends(get_reservation_service),
    catalog: RoomCatalogService = Depends(get_room_catalog_service)
):
    """Record a booking after its on-chain payment succeeded"""
    reservation = await service.commit_reservation(
        room_id=request.room_id,
        wallet_address=request.wallet_address,
        customer_name=request.customer_name,
        phone_number=request.phone_number,
        check_in=request.check_in,
        check_out=request.check_out,
        tx_hash=request.tx_hash
    )
    room = await catalog.get_room(reservation.room_id)
    return _reservation_to_response(reservation, room)

@app.get("/api/bookings/admin", response_model=List[ReservationResponse], tags=["Bookings"])
async def list_all_reservations(
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_admin)
):
    """All reservations in the order they were recorded"""
    reservations = await service.list_all_reservations()
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/bookings/room/{room_id}", response_model=List[ReservationResponse], tags=["Bookings"])
async def list_room_reservations(
    room_id: int,
    service: ReservationService = Depends(get_reservation_service)
):
    """Reservations on a room, earliest stay first"""
    reservations = await service.list_reservations_for_room(room_id)
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/bookings/my/{wallet_address}", response_model=List[ReservationResponse], tags=["Bookings"])
async def list_holder_reservations(
    wallet_address: str,
    service: ReservationService = Depends(get_reservation_service),
    catalog: RoomCatalogService = Depends(get_room_catalog_service)
):
    """Reservations held by a wallet, with room details"""
    reservations = await service.list_reservations_for_holder(wallet_address)
    rooms = {room.room_id: room for room in await catalog.list_rooms()}
    return [_reservation_to_response(r, rooms.get(r.room_id)) for r in reservations]

@app.get("/api/bookings/hash/{booking_hash}", response_model=ReservationResponse, tags=["Bookings"])
async def get_reservation_by_booking_hash(
    booking_hash: str,
    service: ReservationService = Depends(get_reservation_service)
):
    """Get reservation by on-chain booking hash"""
    return _reservation_to_response(await service.get_reservation_by_booking_hash(booking_hash))

@app.get("/api/bookings/{reservation_id}", response_model=ReservationResponse, tags=["Bookings"])
async def get_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service)
):
    """Get reservation by ID"""
    return _reservation_to_response(await service.get_reservation(reservation_id))

@app.patch("/api/bookings/{reservation_id}/cancel", response_model=ReservationResponse, tags=["Bookings"])
async def cancel_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_admin)
):
    """Cancel a booked or checked-in reservation"""
    return _reservation_to_response(await service.cancel_reservation(reservation_id))

@app.patch("/api/bookings/{reservation_id}/checkin", response_model=ReservationResponse, tags=["Bookings"])
async def check_in_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_admin)
):
    """Mark guest as checked in"""
    return _reservation_to_response(await service.check_in_reservation(reservation_id))

@app.patch("/api/bookings/{reservation_id}/complete", response_model=ReservationResponse, tags=["Bookings"])
async def complete_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: AdminUser = Depends(get_current_admin)
):
    """Mark a checked-in stay as completed"""
    return _reservation_to_response(await service.complete_reservation(reservation_id))

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _room_to_summary(room: Room) -> RoomSummaryResponse:
    """Convert Room entity to RoomSummaryResponse"""
    return RoomSummaryResponse(
        room_id=room.room_id,
        name=room.name,
        description=room.description,
        images=room.images,
        price_per_night=room.price_per_night,
        beds=room.beds,
        max_guests=room.max_guests
    )

def _room_to_response(room: Room) -> RoomResponse:
    """Convert Room entity to RoomResponse"""
    return RoomResponse(
        **_room_to_summary(room).model_dump(),
        bookings=[
            RoomBookingResponse(
                wallet_address=b.wallet_address,
                check_in=b.check_in,
                check_out=b.check_out,
                tx_hash=b.tx_hash,
                booking_hash=b.booking_hash,
                status=b.status.value,
                created_at=b.created_at
            )
            for b in room.bookings
        ],
        created_at=room.created_at
    )

def _reservation_to_response(reservation: Reservation, room: Optional[Room] = None) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        room_id=reservation.room_id,
        wallet_address=reservation.wallet_address,
        customer_name=reservation.customer_name,
        phone_number=reservation.phone_number,
        check_in=reservation.stay.check_in,
        check_out=reservation.stay.check_out,
        nights=reservation.get_nights(),
        tx_hash=reservation.tx_hash,
        booking_hash=reservation.booking_hash,
        paid_amount=str(reservation.paid_amount) if reservation.paid_amount is not None else None,
        status=reservation.status.value,
        created_at=reservation.created_at,
        modified_at=reservation.modified_at,
        version=reservation.version,
        room=_room_to_summary(room) if room else None
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
