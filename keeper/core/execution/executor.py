"""
Transaction executor for keeper calls.

Handles the lifecycle of one zero-argument contract call:
- Transaction construction from a FeePlan
- Signing with the injected operator signer
- Submission
- Confirmation monitoring (one block)
- Post-transaction balance report
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from .contract import TargetContract
from .models import FeePlan, TransactionResult, TransactionStatus
from .rpc import format_ether
from .signer import OperatorSigner


logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    """Base exception for execution errors."""

    def __init__(self, message: str, result: Optional[TransactionResult] = None):
        super().__init__(message)
        self.result = result


class TransactionSubmitError(ExecutionError):
    """Transaction signing or submission failed."""
    pass


class TransactionRevertError(ExecutionError):
    """Transaction reverted on-chain."""

    def __init__(
        self,
        message: str,
        receipt: Optional[Dict[str, Any]] = None,
        result: Optional[TransactionResult] = None,
    ):
        super().__init__(message, result)
        self.receipt = receipt


class TransactionTimeoutError(ExecutionError):
    """Transaction confirmation timed out."""
    pass


class TransactionExecutor:
    """
    Submits keeper calls and waits for them to land.

    `execute` never raises: every failure is logged at CRITICAL and reported
    as False. `submit` is the raising variant it wraps.
    """

    def __init__(
        self,
        signer: OperatorSigner,
        confirmations: int = 1,
        poll_interval: float = 2.0,
        confirmation_timeout: Optional[float] = None,
    ):
        self.signer = signer
        self.confirmations = confirmations
        self.poll_interval = poll_interval
        self.confirmation_timeout = confirmation_timeout

    @property
    def connection(self):
        return self.signer.connection

    def build_transaction(
        self,
        contract: TargetContract,
        function_name: str,
        fee_plan: FeePlan,
    ) -> Dict[str, Any]:
        """Unsigned transaction dict for `function_name()` priced by `fee_plan`."""
        call = contract.operation(function_name)
        tx: Dict[str, Any] = {
            "to": contract.address,
            "data": call.calldata,
            "value": 0,
            "chainId": self.connection.chain_id,
        }
        tx.update(fee_plan.to_tx_fields())
        return tx

    async def submit(
        self,
        contract: TargetContract,
        function_name: str,
        fee_plan: FeePlan,
    ) -> TransactionResult:
        """
        Sign, send and confirm a call.

        Raises:
            TransactionSubmitError: signing or broadcast failed
            TransactionRevertError: the receipt has status 0
            TransactionTimeoutError: no receipt within the confirmation timeout
        """
        try:
            tx = self.build_transaction(contract, function_name, fee_plan)
            raw_tx = self.signer.sign_transaction(tx)
            tx_hash = await self.connection.send_raw_transaction(raw_tx)
        except Exception as e:
            raise TransactionSubmitError(str(e)) from e

        result = TransactionResult(function_name=function_name, tx_hash=tx_hash, nonce=fee_plan.nonce)
        logger.info(f"- Sent transaction to {function_name} fluid proposals ({tx_hash})")

        try:
            receipt = await self.connection.wait_for_transaction(
                tx_hash,
                confirmations=self.confirmations,
                poll_interval=self.poll_interval,
                timeout=self.confirmation_timeout,
            )
        except asyncio.TimeoutError as e:
            result.status = TransactionStatus.TIMEOUT
            raise TransactionTimeoutError(str(e), result) from e

        result.block_number = int(receipt["blockNumber"], 16)
        result.gas_used = int(receipt.get("gasUsed", "0x0"), 16)

        # Check status (0x1 = success, 0x0 = revert)
        if int(receipt.get("status", "0x1"), 16) == 0:
            result.status = TransactionStatus.REVERTED
            raise TransactionRevertError(
                f"transaction {tx_hash} reverted in block {result.block_number}",
                receipt=receipt,
                result=result,
            )

        result.status = TransactionStatus.CONFIRMED
        return result

    async def execute(
        self,
        contract: TargetContract,
        function_name: str,
        fee_plan: FeePlan,
    ) -> bool:
        """Submit and confirm; True on confirmation, False on any failure."""
        try:
            result = await self.submit(contract, function_name, fee_plan)
        except Exception as e:
            logger.critical("- Transaction failed to process.")
            logger.critical(f"- {function_name}: {e}")
            result = getattr(e, "result", None)
            if result is not None:
                logger.critical(f"- {result.tx_hash} (nonce {result.nonce}) ended {result.status.value}")
            return False

        logger.info(
            f"Done calling {function_name}. "
            f"(block {result.block_number}, gas used {result.gas_used})"
        )
        await self._report_balance()
        return True

    async def _report_balance(self) -> None:
        """Log the operator balance; failures here never affect the outcome."""
        try:
            balance = await self.signer.get_balance()
        except Exception as e:
            logger.warning(f"Could not read balance of {self.signer.address}: {e}")
            return
        logger.info(f"Current balance is {balance} wei ({format_ether(balance)} ETH)")
