"""web3-backed ChainReader"""
import asyncio
import logging
from typing import Optional

from aiohttp import ClientError
from eth_utils import to_bytes
from web3 import AsyncWeb3
from web3.exceptions import TransactionNotFound, Web3Exception

from domain.chain import ChainReader, ChainTransaction, TxLog, TxReceipt
from domain.exceptions import ChainUnavailable
from infrastructure.config import Config

logger = logging.getLogger(__name__)


def _as_bytes(value) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return to_bytes(hexstr=value)
    return bytes(value)


class Web3ChainReader(ChainReader):
    """Reads receipts and transactions over JSON-RPC.

    Every lookup is read-only, so transport failures, provider HTTP errors
    (429, 5xx) and timeouts are retried with a linear backoff. A transaction
    the node does not know is reported as None, never retried.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        w3: Optional[AsyncWeb3] = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 0.5
    ):
        self.w3 = w3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay

    @classmethod
    def from_config(cls, config=Config) -> "Web3ChainReader":
        return cls(
            rpc_url=config.RPC_URL,
            timeout=config.CHAIN_TIMEOUT_SECONDS,
            max_retries=config.CHAIN_MAX_RETRIES,
            retry_delay=config.CHAIN_RETRY_DELAY_SECONDS,
        )

    async def get_receipt(self, tx_hash: str) -> Optional[TxReceipt]:
        raw = await self._lookup("get_transaction_receipt", tx_hash)
        if raw is None:
            return None

        status = raw.get("status")
        return TxReceipt(
            tx_hash=tx_hash,
            status=int(status) if status is not None else 0,
            logs=[
                TxLog(
                    address=log["address"],
                    topics=[_as_bytes(topic) for topic in log["topics"]],
                    data=_as_bytes(log.get("data")),
                )
                for log in raw.get("logs") or []
            ],
        )

    async def get_transaction(self, tx_hash: str) -> Optional[ChainTransaction]:
        raw = await self._lookup("get_transaction", tx_hash)
        if raw is None:
            return None

        return ChainTransaction(
            tx_hash=tx_hash,
            to=raw.get("to"),
            sender=raw.get("from"),
            input=_as_bytes(raw.get("input")),
            value=int(raw.get("value") or 0),
        )

    async def _lookup(self, method: str, tx_hash: str):
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                call = getattr(self.w3.eth, method)
                return await asyncio.wait_for(call(tx_hash), timeout=self.timeout)
            except TransactionNotFound:
                return None
            except (Web3Exception, ClientError, asyncio.TimeoutError, OSError) as exc:
                last_error = exc
                logger.warning(
                    "Chain %s(%s) attempt %s/%s failed: %s",
                    method, tx_hash, attempt, self.max_retries, exc
                )
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_delay * attempt)

        raise ChainUnavailable(f"Chain lookup {method} failed for {tx_hash}") from last_error
