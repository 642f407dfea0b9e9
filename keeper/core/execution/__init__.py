"""
Transaction Execution Layer

Everything needed to poke a zero-argument contract function:
- NetworkConnection: JSON-RPC reads, broadcast and receipt polling
- OperatorSigner: the mnemonic-derived key, bound to a connection
- ContractInterface / TargetContract: the whitelist and its call closures
- FeeResolver: legacy vs. EIP-1559 pricing plus a fresh nonce
- NonceManager: one in-flight transaction per identity
- TransactionExecutor: sign, send, confirm, report

Usage:
    from keeper.core.execution import (
        ContractInterface,
        FeeResolver,
        NetworkConnection,
        OperatorSigner,
        TargetContract,
        TransactionExecutor,
    )

    connection = NetworkConnection("https://rpc.example")
    signer = OperatorSigner.from_mnemonic(mnemonic, connection)
    contract = TargetContract.at(address, ContractInterface(abi), signer)

    plan = await FeeResolver(connection, gas_limit=500_000).resolve(signer)
    ok = await TransactionExecutor(signer).execute(contract, "execute", plan)
"""

from .models import (
    Block,
    CallOutcome,
    FeeData,
    FeeModel,
    FeePlan,
    TransactionResult,
    TransactionStatus,
)

from .rpc import (
    NetworkConnection,
    RpcError,
)

from .signer import (
    OperatorSigner,
)

from .contract import (
    ContractInterface,
    TargetContract,
    UnknownFunctionError,
    ZeroArgCall,
    function_selector,
)

from .fee_resolver import (
    FeeResolver,
)

from .nonce_manager import (
    NonceManager,
    NonceState,
)

from .executor import (
    TransactionExecutor,
    ExecutionError,
    TransactionSubmitError,
    TransactionRevertError,
    TransactionTimeoutError,
)

__all__ = [
    # Models
    "Block",
    "CallOutcome",
    "FeeData",
    "FeeModel",
    "FeePlan",
    "TransactionResult",
    "TransactionStatus",
    # Network
    "NetworkConnection",
    "RpcError",
    # Signer
    "OperatorSigner",
    # Contract
    "ContractInterface",
    "TargetContract",
    "UnknownFunctionError",
    "ZeroArgCall",
    "function_selector",
    # Fees
    "FeeResolver",
    # Nonce Manager
    "NonceManager",
    "NonceState",
    # Executor
    "TransactionExecutor",
    "ExecutionError",
    "TransactionSubmitError",
    "TransactionRevertError",
    "TransactionTimeoutError",
]
