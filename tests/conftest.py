"""Shared fakes for keeper tests: an in-memory network and a real test signer."""

from typing import Any, Dict, List, Optional

import pytest

from keeper.abi import FLUID_PROPOSALS_ABI
from keeper.core import Keeper
from keeper.core.execution import Block, FeeData, OperatorSigner

# Well-known development mnemonic; account 0 is 0xf39F...2266
TEST_MNEMONIC = "test test test test test test test test test test test junk"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
CONTRACT_ADDRESS = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
TX_HASH = "0x" + "ab" * 32

GWEI = 10**9


class FakeConnection:
    """Stands in for NetworkConnection and records every network call."""

    def __init__(
        self,
        base_fee: Optional[int] = 10 * GWEI,
        gas_price: int = 25 * GWEI,
        priority_fee: int = 1_500_000_000,
        nonce: int = 7,
        chain_id: int = 1,
        receipt_status: int = 1,
        balance: int = 3 * 10**18,
    ):
        self.rpc_url = "http://fake-rpc.local"
        self.base_fee = base_fee
        self.gas_price = gas_price
        self.priority_fee = priority_fee
        self.nonce = nonce
        self._chain_id = chain_id
        self.receipt_status = receipt_status
        self.balance = balance

        self.ready_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.wait_error: Optional[Exception] = None
        self.balance_error: Optional[Exception] = None

        self.calls: List[str] = []
        self.sent: List[str] = []
        self.closed = False

    @property
    def chain_id(self) -> int:
        return self._chain_id

    async def ready(self) -> int:
        self.calls.append("ready")
        if self.ready_error:
            raise self.ready_error
        return self._chain_id

    async def get_block(self, block_tag: str = "latest") -> Block:
        self.calls.append("get_block")
        return Block(number=100, base_fee_per_gas=self.base_fee)

    async def get_fee_data(self, block: Optional[Block] = None) -> FeeData:
        self.calls.append("get_fee_data")
        base_fee = self.base_fee if block is None else block.base_fee_per_gas
        if base_fee is None:
            return FeeData(gas_price=self.gas_price)
        return FeeData(
            gas_price=self.gas_price,
            max_fee_per_gas=base_fee * 2 + self.priority_fee,
            max_priority_fee_per_gas=self.priority_fee,
        )

    async def get_transaction_count(self, address: str, block_tag: str = "latest") -> int:
        self.calls.append("get_transaction_count")
        return self.nonce

    async def send_raw_transaction(self, raw_tx: str) -> str:
        self.calls.append("send_raw_transaction")
        if self.send_error:
            raise self.send_error
        self.sent.append(raw_tx)
        return TX_HASH

    async def wait_for_transaction(
        self,
        tx_hash: str,
        confirmations: int = 1,
        poll_interval: float = 2.0,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        self.calls.append("wait_for_transaction")
        if self.wait_error:
            raise self.wait_error
        return {
            "transactionHash": tx_hash,
            "blockNumber": hex(101),
            "status": hex(self.receipt_status),
            "gasUsed": hex(43_000),
            "effectiveGasPrice": hex(12 * GWEI),
        }

    async def get_balance(self, address: str, block_tag: str = "latest") -> int:
        self.calls.append("get_balance")
        if self.balance_error:
            raise self.balance_error
        return self.balance

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def legacy_connection() -> FakeConnection:
    return FakeConnection(base_fee=None)


@pytest.fixture
def make_signer():
    def _make(connection: FakeConnection) -> OperatorSigner:
        return OperatorSigner.from_mnemonic(TEST_MNEMONIC, connection)
    return _make


@pytest.fixture
def signer(connection, make_signer) -> OperatorSigner:
    return make_signer(connection)


@pytest.fixture
def make_keeper(make_signer):
    def _make(connection: FakeConnection, gas_limit: int = 250_000) -> Keeper:
        return Keeper.build(
            signer=make_signer(connection),
            contract_address=CONTRACT_ADDRESS,
            abi=FLUID_PROPOSALS_ABI,
            gas_limit=gas_limit,
            poll_interval=0,
        )
    return _make
