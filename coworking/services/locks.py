"""Named mutual-exclusion leases keyed by resource id.

Only one holder per key at a time; different keys never contend. Acquisition
blocks up to a bounded wait and a lease auto-expires so a crashed or stuck
holder cannot wedge the key forever. A holder that overruns its lease loses it:
a waiter may reclaim the key and the late ``release`` becomes a no-op.
"""
from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from secrets import token_hex
from typing import AsyncIterator, Callable, Dict

from ..core.config import settings

logger = logging.getLogger(__name__)


class LockTimeout(TimeoutError):
    """Raised when a key stays held past the bounded wait."""

    def __init__(self, key: str, wait: float) -> None:
        super().__init__(f"could not acquire lock {key!r} within {wait:.2f}s")
        self.key = key
        self.wait = wait


@dataclass(slots=True)
class Lease:
    key: str
    token: str
    expires_at: float


class KeyedLock:
    """In-process lease registry serialising work per key."""

    def __init__(self, expire_after: float, clock: Callable[[], float] = time.monotonic) -> None:
        if expire_after <= 0:
            raise ValueError("expire_after must be positive")
        self._expire_after = expire_after
        self._clock = clock
        self._leases: Dict[str, Lease] = {}
        self._changed = asyncio.Condition()

    def locked(self, key: str) -> bool:
        lease = self._leases.get(key)
        return lease is not None and lease.expires_at > self._clock()

    async def acquire(self, key: str, *, wait: float) -> Lease:
        """Take the lease for ``key``, blocking at most ``wait`` seconds."""

        deadline = self._clock() + wait
        async with self._changed:
            while True:
                now = self._clock()
                current = self._leases.get(key)
                if current is None or current.expires_at <= now:
                    if current is not None:
                        logger.warning("Lease %s on %s expired unreleased; reclaiming", current.token, key)
                    lease = Lease(key=key, token=token_hex(8), expires_at=now + self._expire_after)
                    self._leases[key] = lease
                    return lease

                if now >= deadline:
                    raise LockTimeout(key, wait)

                timeout = min(deadline, current.expires_at) - now
                try:
                    await asyncio.wait_for(self._changed.wait(), timeout=timeout)
                except asyncio.TimeoutError:
                    continue

    async def release(self, lease: Lease) -> bool:
        """Give the lease back. Returns False if it had already been reclaimed."""

        async with self._changed:
            current = self._leases.get(lease.key)
            if current is None or current.token != lease.token:
                logger.warning("Lease %s on %s was reclaimed before release", lease.token, lease.key)
                return False
            if current.expires_at <= self._clock():
                logger.warning("Lease %s on %s overran its %.1fs expiry", lease.token, lease.key, self._expire_after)
            del self._leases[lease.key]
            self._changed.notify_all()
            return True

    @asynccontextmanager
    async def hold(self, key: str, *, wait: float) -> AsyncIterator[Lease]:
        lease = await self.acquire(key, wait=wait)
        try:
            yield lease
        finally:
            await self.release(lease)


office_locks = KeyedLock(expire_after=settings.reservation_lock_ttl_seconds)


def office_lock_key(office_id: str) -> str:
    return f"reservations_office_{office_id}"
