"""Domain Entities - Back-office identity"""
from pydantic import BaseModel


class AdminUser(BaseModel):
    """The hotel operator. Guests never log in; a wallet address is their identity"""
    username: str
    full_name: str = "Hotel Administrator"
    disabled: bool = False

    class Config:
        frozen = True
