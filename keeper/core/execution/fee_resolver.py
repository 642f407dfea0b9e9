"""
Fee & nonce resolution for keeper transactions.

Every call re-reads the chain: readiness, latest block, fee data and the
operator's transaction count, strictly in that order. Nothing is cached, so a
network that crosses its EIP-1559 fork is priced correctly on the next call.
"""

import logging

from .models import FeePlan
from .rpc import NetworkConnection
from .signer import OperatorSigner

logger = logging.getLogger(__name__)


class FeeResolver:
    """Builds a submission-ready FeePlan from the network's current state."""

    def __init__(self, connection: NetworkConnection, gas_limit: int):
        self.connection = connection
        self.gas_limit = gas_limit

    async def resolve(self, signer: OperatorSigner) -> FeePlan:
        """
        Args:
            signer: The identity whose nonce is used

        Returns:
            A dynamic (EIP-1559) or legacy FeePlan

        Raises:
            Whatever the connection raises; there are no retries here.
        """
        await self.connection.ready()

        # Classification and fee levels come from the same block
        block = await self.connection.get_block("latest")
        fee_data = await self.connection.get_fee_data(block)
        nonce = await self.connection.get_transaction_count(signer.address)

        if block.supports_eip1559:
            plan = FeePlan.dynamic(
                gas_limit=self.gas_limit,
                max_fee_per_gas=fee_data.max_fee_per_gas,
                max_priority_fee_per_gas=fee_data.max_priority_fee_per_gas,
                nonce=nonce,
            )
        else:
            plan = FeePlan.legacy(
                gas_price=fee_data.gas_price,
                gas_limit=self.gas_limit,
                nonce=nonce,
            )

        logger.debug(f"Resolved {plan.fee_model.value} fee plan: {plan}")
        return plan
