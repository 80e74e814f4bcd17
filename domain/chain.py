"""Domain Chain Interfaces - read-only view of the payment ledger"""
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel

SUCCESS_STATUS = 1


class TxLog(BaseModel):
    """One log entry emitted during a transaction"""
    address: str
    topics: List[bytes]
    data: bytes = b""


class TxReceipt(BaseModel):
    """Execution outcome of a mined transaction"""
    tx_hash: str
    status: int
    logs: List[TxLog] = []

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_STATUS


class ChainTransaction(BaseModel):
    """Transaction body as submitted by the payer"""
    tx_hash: str
    to: Optional[str] = None
    sender: Optional[str] = None
    input: bytes = b""
    value: int = 0


class ChainReader(ABC):
    """Read-only access to transactions on the payment chain"""

    @abstractmethod
    async def get_receipt(self, tx_hash: str) -> Optional[TxReceipt]:
        """Return the receipt, or None if the chain does not know the transaction"""
        pass

    @abstractmethod
    async def get_transaction(self, tx_hash: str) -> Optional[ChainTransaction]:
        """Return the transaction body, or None if unknown"""
        pass
