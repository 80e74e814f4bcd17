import os
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # ------------------------
    # Chain (Sepolia by default)
    # ------------------------
    RPC_URL = os.getenv("RPC_URL", "https://ethereum-sepolia-rpc.publicnode.com")
    CONTRACT_ADDRESS = os.getenv("CONTRACT_ADDRESS", "0x27C98d65c46D5914C0b0370175C3EbF2775B396c")
    CHAIN_TIMEOUT_SECONDS = float(os.getenv("CHAIN_TIMEOUT_SECONDS", "10"))
    CHAIN_MAX_RETRIES = int(os.getenv("CHAIN_MAX_RETRIES", "3"))
    CHAIN_RETRY_DELAY_SECONDS = float(os.getenv("CHAIN_RETRY_DELAY_SECONDS", "0.5"))

    # Off by default: the contract itself enforces the room price
    ENFORCE_PAYMENT_AMOUNT = _as_bool(os.getenv("ENFORCE_PAYMENT_AMOUNT", "false"))

    # ------------------------
    # Hotel policy
    # ------------------------
    HOTEL_TIMEZONE = os.getenv("HOTEL_TIMEZONE", "UTC")

    # ------------------------
    # Admin auth
    # ------------------------
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

    # ------------------------
    # Logging
    # ------------------------
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def hotel_tz(cls) -> ZoneInfo:
        return ZoneInfo(cls.HOTEL_TIMEZONE)
