"""Domain Value Objects"""
import math
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Union

from dateutil import parser
from eth_utils import is_address
from pydantic import BaseModel, Field

from domain.enums import ReservationStatus
from domain.exceptions import (
    InvalidDate,
    InvalidTransactionHash,
    InvalidWalletAddress,
    MinimumStayViolation,
)

# Hotel policy: guests arrive from 14:00 and leave by 12:00, so a checkout
# and a check-in on the same day never share an instant.
CHECK_IN_TIME = time(14, 0)
CHECK_OUT_TIME = time(12, 0)
ONE_DAY = timedelta(days=1)

TX_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")

DateLike = Union[str, date, datetime]


def _calendar_date(value: DateLike, field_name: str, tz: tzinfo) -> date:
    """Reduce a date-like input to the calendar day it denotes in the hotel timezone"""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = parser.parse(value)
        except (ValueError, OverflowError):
            raise InvalidDate(f"Invalid date for {field_name}: {value!r}")
    else:
        raise InvalidDate(f"Invalid date for {field_name}: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz)
    return parsed.date()


class StayWindow(BaseModel):
    """Half-open stay interval [check_in, check_out)"""
    check_in: datetime
    check_out: datetime

    class Config:
        frozen = True

    @classmethod
    def normalize(
        cls,
        check_in_raw: DateLike,
        check_out_raw: DateLike,
        tz: tzinfo = timezone.utc
    ) -> "StayWindow":
        """Pin raw dates to the hotel check-in (14:00) and check-out (12:00) times"""
        check_in_day = _calendar_date(check_in_raw, "checkIn", tz)
        check_out_day = _calendar_date(check_out_raw, "checkOut", tz)

        if check_out_day <= check_in_day:
            raise MinimumStayViolation()

        return cls(
            check_in=datetime.combine(check_in_day, CHECK_IN_TIME, tzinfo=tz),
            check_out=datetime.combine(check_out_day, CHECK_OUT_TIME, tzinfo=tz),
        )

    def overlaps(self, other: "StayWindow") -> bool:
        """Strict half-open overlap; touching boundaries do not conflict"""
        return self.check_in < other.check_out and self.check_out > other.check_in

    def nights(self) -> int:
        """Whole nights, rounding a partial day up"""
        return math.ceil((self.check_out - self.check_in) / ONE_DAY)


class RoomBookingSummary(BaseModel):
    """Mirror entry embedded in a Room for one reservation"""
    wallet_address: str
    check_in: datetime
    check_out: datetime
    tx_hash: str
    booking_hash: Optional[str] = None
    status: ReservationStatus = ReservationStatus.BOOKED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def normalize_wallet_address(value: str) -> str:
    """Validate a wallet address and return its lowercased form"""
    if not isinstance(value, str) or not is_address(value):
        raise InvalidWalletAddress(f"Invalid wallet address: {value!r}")
    return value.lower()


def normalize_tx_hash(value: str) -> str:
    """Validate a 32-byte hex transaction hash and return it lowercased"""
    if not isinstance(value, str) or not TX_HASH_PATTERN.match(value):
        raise InvalidTransactionHash(f"Invalid transaction hash: {value!r}")
    return value.lower()
