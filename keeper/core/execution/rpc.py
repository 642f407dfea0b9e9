"""
JSON-RPC connection to the keeper's network.

A single NetworkConnection is opened at startup and shared by every request.
It reads chain state (blocks, fees, nonces, balances), broadcasts signed
transactions and polls for receipts.
"""

import asyncio
import logging
import time
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from .models import Block, FeeData

logger = logging.getLogger(__name__)

# Tip suggested on EIP-1559 networks when none is configured (1.5 gwei)
DEFAULT_PRIORITY_FEE_WEI = 1_500_000_000


class RpcError(RuntimeError):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, method: str, error: Any):
        self.method = method
        self.error = error
        message = error.get("message") if isinstance(error, dict) else error
        super().__init__(f"RPC error from {method}: {message}")


class NetworkConnection:
    """
    Async JSON-RPC client for one endpoint.

    `ready()` performs the initial handshake (chain id detection) and must
    complete before any state is read.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        priority_fee_wei: int = DEFAULT_PRIORITY_FEE_WEI,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.priority_fee_wei = priority_fee_wei
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._chain_id: Optional[int] = None
        self._ready_lock = asyncio.Lock()
        self._request_id = 0

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        """Make an RPC call to the endpoint."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }

        response = await self._client.post(self.rpc_url, json=payload)
        response.raise_for_status()
        result = response.json()

        if "error" in result:
            raise RpcError(method, result["error"])

        return result.get("result")

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            raise RuntimeError("Network connection is not ready; await ready() first")
        return self._chain_id

    async def ready(self) -> int:
        """Wait until the network is known and return its chain id."""
        async with self._ready_lock:
            if self._chain_id is None:
                self._chain_id = int(await self._rpc_call("eth_chainId", []), 16)
                logger.info(f"Connected to {self.rpc_url} (chain {self._chain_id})")
            return self._chain_id

    async def get_block(self, block_tag: str = "latest") -> Block:
        raw = await self._rpc_call("eth_getBlockByNumber", [block_tag, False])
        if raw is None:
            raise RpcError("eth_getBlockByNumber", f"block {block_tag} not found")
        return Block.from_rpc(raw)

    async def get_fee_data(self, block: Optional[Block] = None) -> FeeData:
        """
        Current fee levels.

        The gas price always comes from eth_gasPrice. When `block` (default:
        the latest block) carries a base fee, the EIP-1559 maximum is twice
        the base fee plus the priority tip.
        """
        if block is None:
            block = await self.get_block("latest")
        gas_price = int(await self._rpc_call("eth_gasPrice", []), 16)

        if not block.supports_eip1559:
            return FeeData(gas_price=gas_price)

        max_fee = block.base_fee_per_gas * 2 + self.priority_fee_wei
        return FeeData(
            gas_price=gas_price,
            max_fee_per_gas=max_fee,
            max_priority_fee_per_gas=self.priority_fee_wei,
        )

    async def get_transaction_count(self, address: str, block_tag: str = "latest") -> int:
        result = await self._rpc_call("eth_getTransactionCount", [address, block_tag])
        return int(result, 16)

    async def get_balance(self, address: str, block_tag: str = "latest") -> int:
        result = await self._rpc_call("eth_getBalance", [address, block_tag])
        return int(result, 16)

    async def send_raw_transaction(self, raw_tx: str) -> str:
        """Broadcast a signed transaction and return its hash."""
        return await self._rpc_call("eth_sendRawTransaction", [raw_tx])

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self._rpc_call("eth_getTransactionReceipt", [tx_hash])

    async def get_block_number(self) -> int:
        return int(await self._rpc_call("eth_blockNumber", []), 16)

    async def wait_for_transaction(
        self,
        tx_hash: str,
        confirmations: int = 1,
        poll_interval: float = 2.0,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Poll until the transaction is mined with enough confirmations.

        Returns the receipt regardless of its status; callers decide what a
        reverted receipt means. A failed poll is logged and retried, since the
        transaction is already broadcast. Raises asyncio.TimeoutError once
        `timeout` seconds pass; with no timeout it waits indefinitely.
        """
        started = time.monotonic()

        while True:
            try:
                receipt = await self.get_transaction_receipt(tx_hash)
                if receipt and receipt.get("blockNumber"):
                    mined_in = int(receipt["blockNumber"], 16)
                    if confirmations <= 1:
                        return receipt
                    current = await self.get_block_number()
                    if current - mined_in + 1 >= confirmations:
                        return receipt
            except Exception as e:
                logger.warning(f"Receipt lookup for {tx_hash} failed, retrying: {e}")

            if timeout is not None and time.monotonic() - started > timeout:
                raise asyncio.TimeoutError(
                    f"Transaction {tx_hash} not confirmed within {timeout}s"
                )
            await asyncio.sleep(poll_interval)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


def format_ether(wei: int) -> str:
    """Render a wei amount in ether for log lines."""
    return f"{Decimal(wei) / Decimal(10**18):f}"
