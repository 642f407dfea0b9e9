"""
Keeper orchestration: capability check, then fee/nonce resolution and
execution under the operator's lock.
"""

import logging
from typing import Iterable, Optional

from .execution import (
    ContractInterface,
    FeeResolver,
    NonceManager,
    OperatorSigner,
    TargetContract,
    TransactionExecutor,
)

logger = logging.getLogger(__name__)

CONTRACT_LABEL = "FluidProposals"


class Keeper:
    """Calls whitelisted zero-argument functions on one contract."""

    def __init__(
        self,
        signer: OperatorSigner,
        contract_address: str,
        interface: ContractInterface,
        resolver: FeeResolver,
        executor: TransactionExecutor,
        nonce_manager: Optional[NonceManager] = None,
    ):
        self.signer = signer
        self.contract_address = contract_address
        self.interface = interface
        self.resolver = resolver
        self.executor = executor
        self.nonce_manager = nonce_manager or NonceManager()

    @classmethod
    def build(
        cls,
        signer: OperatorSigner,
        contract_address: str,
        abi: Iterable[str],
        gas_limit: int,
        poll_interval: float = 2.0,
        confirmation_timeout: Optional[float] = None,
    ) -> "Keeper":
        """Wire the default resolver and executor around a signer."""
        return cls(
            signer=signer,
            contract_address=contract_address,
            interface=ContractInterface(abi),
            resolver=FeeResolver(signer.connection, gas_limit=gas_limit),
            executor=TransactionExecutor(
                signer,
                poll_interval=poll_interval,
                confirmation_timeout=confirmation_timeout,
            ),
        )

    @property
    def connection(self):
        return self.signer.connection

    async def call(self, function_name: str) -> bool:
        """Invoke `function_name()` and wait for it; False on any failure."""
        if not self.interface.has_function(function_name):
            logger.error(f"Contract's ABI doesn't have function {function_name}")
            return False

        logger.info(f"Acting as {self.signer.address}")
        logger.info(f"Connected to {self.connection.rpc_url}")
        logger.info(f"Calling {function_name} on {CONTRACT_LABEL} at {self.contract_address}")

        try:
            contract = TargetContract.at(self.contract_address, self.interface, self.signer)
            chain_id = await self.connection.ready()
        except Exception as e:
            logger.critical(f"- Could not prepare {function_name}: {e}")
            return False

        async with self.nonce_manager.lock(chain_id, self.signer.address) as state:
            try:
                fee_plan = await self.resolver.resolve(self.signer)
            except Exception as e:
                logger.critical(f"- Could not resolve fees for {function_name}: {e}")
                return False
            state.last_nonce = fee_plan.nonce

            logger.info(f"Calling {function_name}...")
            return await self.executor.execute(contract, function_name, fee_plan)
