"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional


# ============================================================================
# ROOM SCHEMAS
# ============================================================================

class CreateRoomRequest(BaseModel):
    """Create room request DTO"""
    name: str
    description: str = ""
    images: List[str] = []
    price_per_night: Decimal
    beds: int
    max_guests: int


class RoomBookingResponse(BaseModel):
    """Mirrored booking summary DTO"""
    wallet_address: str
    check_in: datetime
    check_out: datetime
    tx_hash: str
    booking_hash: Optional[str] = None
    status: str
    created_at: datetime


class RoomSummaryResponse(BaseModel):
    """Room metadata without bookings"""
    room_id: int
    name: str
    description: str
    images: List[str]
    price_per_night: Decimal
    beds: int
    max_guests: int


class RoomResponse(RoomSummaryResponse):
    """Room with its mirrored bookings"""
    bookings: List[RoomBookingResponse]
    created_at: datetime


# ============================================================================
# BOOKING SCHEMAS
# ============================================================================

class CheckAvailabilityRequest(BaseModel):
    """Check availability request DTO; dates are any parseable date string"""
    room_id: int
    check_in: str
    check_out: str


class AvailabilityResponse(BaseModel):
    available: bool


class CreateBookingRequest(BaseModel):
    """Record a booking after the on-chain payment succeeded"""
    room_id: int
    wallet_address: str
    customer_name: str = ""
    phone_number: str = ""
    check_in: str
    check_out: str
    tx_hash: str


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: UUID
    room_id: int
    wallet_address: str
    customer_name: str
    phone_number: str
    check_in: datetime
    check_out: datetime
    nights: int
    tx_hash: str
    booking_hash: Optional[str] = None
    paid_amount: Optional[str] = None  # wei, as string to survive JSON number limits
    status: str
    created_at: datetime
    modified_at: datetime
    version: int
    room: Optional[RoomSummaryResponse] = None


class ErrorResponse(BaseModel):
    detail: str
    error: str


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str


class UserResponse(BaseModel):
    """Admin profile DTO"""
    username: str
    full_name: str
    disabled: bool
