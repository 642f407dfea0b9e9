"""
Operator identity: the key the keeper signs every transaction with.

The key is derived once from the operator's recovery phrase and bound to a
single NetworkConnection. It is passed explicitly to the components that
need it rather than living in module state.
"""

from typing import Any, Dict

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_hex

from .rpc import NetworkConnection

DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0/0"

Account.enable_unaudited_hdwallet_features()


class OperatorSigner:
    """A LocalAccount connected to the network it transacts on."""

    def __init__(self, account: LocalAccount, connection: NetworkConnection):
        self._account = account
        self.connection = connection

    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        connection: NetworkConnection,
        derivation_path: str = DEFAULT_DERIVATION_PATH,
    ) -> "OperatorSigner":
        account = Account.from_mnemonic(mnemonic.strip(), account_path=derivation_path)
        return cls(account, connection)

    @property
    def address(self) -> str:
        """0x-prefixed checksummed address."""
        return self._account.address

    def sign_transaction(self, tx: Dict[str, Any]) -> str:
        """Sign a transaction dict and return the 0x-prefixed raw bytes."""
        signed = self._account.sign_transaction(tx)
        return to_hex(signed.raw_transaction)

    async def get_transaction_count(self) -> int:
        return await self.connection.get_transaction_count(self.address)

    async def get_balance(self) -> int:
        return await self.connection.get_balance(self.address)

    def __repr__(self) -> str:
        return f"OperatorSigner(address={self.address!r})"
