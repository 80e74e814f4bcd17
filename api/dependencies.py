"""API Dependencies - Admin Authentication"""
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from domain.auth import AdminUser
from infrastructure.config import Config
from infrastructure.security import hash_password, token_subject, verify_password

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

# One operator account, configured through ADMIN_USERNAME / ADMIN_PASSWORD
_ADMIN = AdminUser(username=Config.ADMIN_USERNAME)
_ADMIN_PASSWORD_HASH = hash_password(Config.ADMIN_PASSWORD)


def authenticate_admin(username: str, password: str) -> Optional[AdminUser]:
    """Return the admin when the credentials match, else None"""
    if not secrets.compare_digest(username.encode(), _ADMIN.username.encode()):
        return None
    if not verify_password(password, _ADMIN_PASSWORD_HASH):
        return None
    return _ADMIN


async def get_current_admin(token: str = Depends(oauth2_scheme)) -> AdminUser:
    if token_subject(token) != _ADMIN.username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if _ADMIN.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return _ADMIN
