from fastapi import APIRouter, Depends
from typing import Dict, Any

from ..core import Keeper
from .cron import get_keeper

router = APIRouter()


@router.get("/healthz")
async def health_check(keeper: Keeper = Depends(get_keeper)) -> Dict[str, Any]:
    """Health check endpoint that verifies the RPC endpoint answers"""

    network: Dict[str, Any] = {"rpc_url": keeper.connection.rpc_url}
    try:
        network["chain_id"] = await keeper.connection.ready()
        network["status"] = "healthy"
    except Exception as exc:
        network["status"] = "unavailable"
        network["error"] = str(exc)

    chain_id = network.get("chain_id")
    busy = chain_id is not None and keeper.nonce_manager.is_locked(chain_id, keeper.signer.address)
    state = keeper.nonce_manager.get_state(chain_id, keeper.signer.address) if chain_id is not None else None

    return {
        "status": "healthy" if network["status"] == "healthy" else "degraded",
        "operator": keeper.signer.address,
        "contract": keeper.contract_address,
        "network": network,
        "callable_functions": sorted(keeper.interface.callable_functions),
        "transaction_in_flight": busy,
        "last_nonce": state.last_nonce if state else None,
        "completed_calls": state.completed if state else 0,
        "last_call_at": state.last_updated.isoformat() if state else None,
    }
