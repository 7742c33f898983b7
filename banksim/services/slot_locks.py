"""
Per-slot serialization.

Two requests touching the same slot must not both read the same
last_observed_at and replay the same days. Within one process every slot
operation holds the slot's asyncio.Lock; across processes the bank_state
version column turns a lost update into a StaleDataError.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class SlotLocks:
    """Registry of one asyncio.Lock per slot id"""

    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}

    def get(self, slot_id: int) -> asyncio.Lock:
        lock = self._locks.get(slot_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[slot_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, slot_id: int) -> AsyncIterator[None]:
        async with self.get(slot_id):
            yield
