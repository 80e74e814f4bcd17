"""Password hashing and admin access tokens"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from infrastructure.config import Config

# bcrypt_sha256 digests the password first, so inputs past bcrypt's 72-byte cap still count
pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a bearer token for subject, valid for ACCESS_TOKEN_EXPIRE_MINUTES by default"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=Config.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": subject, "exp": datetime.now(timezone.utc) + expires_delta}
    return jwt.encode(claims, Config.SECRET_KEY, algorithm=Config.ALGORITHM)


def token_subject(token: str) -> Optional[str]:
    """Subject of a valid, unexpired token; None for anything else"""
    try:
        claims = jwt.decode(token, Config.SECRET_KEY, algorithms=[Config.ALGORITHM])
    except JWTError:
        return None
    return claims.get("sub")
