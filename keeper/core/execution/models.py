"""
Transaction execution models and types.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class FeeModel(str, Enum):
    """How a network prices transactions."""
    LEGACY = "legacy"            # Single flat gas price
    DYNAMIC = "dynamic"          # EIP-1559 base fee + priority tip


class TransactionStatus(str, Enum):
    """Transaction lifecycle status."""
    SUBMITTED = "submitted"      # Broadcast to network
    CONFIRMED = "confirmed"      # Included with a success status
    REVERTED = "reverted"        # On-chain revert
    TIMEOUT = "timeout"          # Confirmation timeout


@dataclass(frozen=True)
class Block:
    """The parts of a block header the fee resolver reads."""
    number: int
    base_fee_per_gas: Optional[int] = None

    @property
    def supports_eip1559(self) -> bool:
        return self.base_fee_per_gas is not None

    @classmethod
    def from_rpc(cls, raw: Dict[str, Any]) -> "Block":
        base_fee = raw.get("baseFeePerGas")
        return cls(
            number=int(raw["number"], 16),
            base_fee_per_gas=int(base_fee, 16) if base_fee is not None else None,
        )


@dataclass(frozen=True)
class FeeData:
    """Current fee levels reported by the network."""
    gas_price: int
    max_fee_per_gas: Optional[int] = None       # EIP-1559
    max_priority_fee_per_gas: Optional[int] = None  # EIP-1559


@dataclass(frozen=True)
class FeePlan:
    """Pricing and sequencing for a single transaction."""
    fee_model: FeeModel
    gas_limit: int
    nonce: int
    gas_price: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None

    @classmethod
    def dynamic(cls, gas_limit: int, max_fee_per_gas: int, max_priority_fee_per_gas: int, nonce: int) -> "FeePlan":
        return cls(
            fee_model=FeeModel.DYNAMIC,
            gas_limit=gas_limit,
            nonce=nonce,
            max_fee_per_gas=max_fee_per_gas,
            max_priority_fee_per_gas=max_priority_fee_per_gas,
        )

    @classmethod
    def legacy(cls, gas_price: int, gas_limit: int, nonce: int) -> "FeePlan":
        return cls(
            fee_model=FeeModel.LEGACY,
            gas_limit=gas_limit,
            nonce=nonce,
            gas_price=gas_price,
        )

    def to_tx_fields(self) -> Dict[str, int]:
        """Fields merged into the transaction dict before signing."""
        fields = {"gas": self.gas_limit, "nonce": self.nonce}
        if self.fee_model == FeeModel.DYNAMIC:
            fields["maxFeePerGas"] = self.max_fee_per_gas
            fields["maxPriorityFeePerGas"] = self.max_priority_fee_per_gas
        else:
            fields["gasPrice"] = self.gas_price
        return fields


@dataclass
class TransactionResult:
    """Result of submitting one keeper call."""
    function_name: str
    tx_hash: str
    status: TransactionStatus = TransactionStatus.SUBMITTED
    nonce: Optional[int] = None

    # Confirmation details
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == TransactionStatus.CONFIRMED


def _epoch_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass(frozen=True)
class CallOutcome:
    """What the cron endpoint reports back to the scheduler."""
    status: bool
    timestamp: int = field(default_factory=_epoch_millis)

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "timestamp": self.timestamp}
