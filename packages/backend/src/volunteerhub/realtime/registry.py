"""Connection registry — which live connections does a user have?

A user may hold several connections at once (multiple tabs, phone and
laptop). The registry maps user id → set of connection handles:

- a handle is listed under at most one user at a time
- a user with no handles has no entry at all
- lookup() returns a frozen snapshot, so the gateway can fan out while
  other tasks connect and disconnect

All mutations go through one asyncio.Lock. The registry is process-local;
the gateway only talks to it through register/unregister/lookup, so a
shared backend can replace it without touching the gateway.
"""

import asyncio
import uuid
from typing import Hashable


class ConnectionRegistry:
    def __init__(self) -> None:
        self._by_user: dict[uuid.UUID, set[Hashable]] = {}
        self._owner: dict[Hashable, uuid.UUID] = {}
        self._lock = asyncio.Lock()

    async def register(self, user_id: uuid.UUID, handle: Hashable) -> None:
        """Add ``handle`` under ``user_id``. Registering twice is a no-op."""
        async with self._lock:
            previous = self._owner.get(handle)
            if previous is not None and previous != user_id:
                self._discard(previous, handle)
            self._by_user.setdefault(user_id, set()).add(handle)
            self._owner[handle] = user_id

    async def unregister(self, user_id: uuid.UUID, handle: Hashable) -> None:
        """Remove ``handle``. Unknown handles are ignored."""
        async with self._lock:
            if self._owner.get(handle) == user_id:
                del self._owner[handle]
            self._discard(user_id, handle)

    async def lookup(self, user_id: uuid.UUID) -> frozenset:
        """Snapshot of the user's live handles (empty if offline)."""
        async with self._lock:
            return frozenset(self._by_user.get(user_id, ()))

    def _discard(self, user_id: uuid.UUID, handle: Hashable) -> None:
        handles = self._by_user.get(user_id)
        if handles is None:
            return
        handles.discard(handle)
        if not handles:
            del self._by_user[user_id]

    # ─── Introspection (health / tests) ───────────────────

    def online_users(self) -> int:
        return len(self._by_user)

    def connection_count(self) -> int:
        return len(self._owner)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._by_user
