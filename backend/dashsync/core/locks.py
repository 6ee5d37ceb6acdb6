"""Per-domain write locks.

Two overlapping saves of the same domain would each read the existing key
set before the other writes, and the later one could delete rows the
earlier one just inserted. Saves of one domain are therefore serialised
within the process. The registry is created in the application lifespan
and stored on ``app.state.domain_locks``.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class DomainLockRegistry:
    """One ``asyncio.Lock`` per known domain. Unknown domains are refused."""

    def __init__(self, domains: Iterable[str]) -> None:
        self._locks = {domain: asyncio.Lock() for domain in domains}

    def __contains__(self, domain: str) -> bool:
        return domain in self._locks

    def __len__(self) -> int:
        return len(self._locks)

    def lock_for(self, domain: str) -> asyncio.Lock:
        try:
            return self._locks[domain]
        except KeyError:
            raise ValueError(f"Unknown sync domain: {domain}") from None

    def locked(self, domain: str) -> bool:
        return self.lock_for(domain).locked()

    @asynccontextmanager
    async def hold(self, domain: str) -> AsyncIterator[None]:
        lock = self.lock_for(domain)
        if lock.locked():
            logger.info("Waiting for in-flight %s sync to finish", domain)
        async with lock:
            yield
