"""
Per-identity serialization of keeper transactions.

Only one resolve-then-submit sequence may run per (chain, address) at a time;
otherwise two triggers read the same transaction count and submit conflicting
transactions. Locks are process-local.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, Optional


@dataclass
class NonceState:
    """Bookkeeping for one identity on one chain."""
    address: str
    chain_id: int
    in_flight: bool = False
    last_nonce: Optional[int] = None
    completed: int = 0
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NonceManager:
    """
    Hands out one asyncio.Lock per identity.

    Usage:
        async with nonce_manager.lock(chain_id, signer.address) as state:
            plan = await resolver.resolve(signer)
            state.last_nonce = plan.nonce
            ...
    """

    def __init__(self):
        self._states: Dict[str, NonceState] = {}  # key: "{chain_id}:{address}"
        self._locks: Dict[str, asyncio.Lock] = {}

    def _get_key(self, chain_id: int, address: str) -> str:
        return f"{chain_id}:{address.lower()}"

    def _get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    @asynccontextmanager
    async def lock(self, chain_id: int, address: str) -> AsyncIterator[NonceState]:
        key = self._get_key(chain_id, address)
        async with self._get_lock(key):
            state = self._states.setdefault(
                key, NonceState(address=address.lower(), chain_id=chain_id)
            )
            state.in_flight = True
            try:
                yield state
            finally:
                state.in_flight = False
                state.completed += 1
                state.last_updated = datetime.now(timezone.utc)

    def is_locked(self, chain_id: int, address: str) -> bool:
        lock = self._locks.get(self._get_key(chain_id, address))
        return bool(lock and lock.locked())

    def get_state(self, chain_id: int, address: str) -> Optional[NonceState]:
        """Get the bookkeeping for an identity, if it has transacted."""
        return self._states.get(self._get_key(chain_id, address))
