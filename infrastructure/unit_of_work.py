"""
Unit of Work for the in-memory repositories.

Serialises transactions with an asyncio lock and snapshots every
repository on entry, so a failed block leaves no partial state behind.

Usage:
    >>> async with uow.transaction():
    ...     booking = await booking_repo.save(booking)
    ...     await voucher_repo.update(voucher)
    ...     # Commits on normal exit, restores every snapshot on exception
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List

from domain.repositories import UnitOfWork
from infrastructure.repositories.in_memory_repositories import SnapshotMixin

logger = logging.getLogger(__name__)


class InMemoryUnitOfWork(UnitOfWork):
    """Commit-or-rollback scope over a fixed set of in-memory repositories"""

    def __init__(self, *repositories: SnapshotMixin) -> None:
        self._repositories: List[SnapshotMixin] = list(repositories)
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["InMemoryUnitOfWork"]:
        async with self._lock:
            snapshots: Dict[int, Dict] = {
                id(repo): repo.snapshot() for repo in self._repositories
            }
            logger.debug("UnitOfWork transaction started")
            try:
                yield self
            except BaseException as exc:
                for repo in self._repositories:
                    repo.restore(snapshots[id(repo)])
                logger.warning("UnitOfWork rolled back due to %s", type(exc).__name__)
                raise
            logger.debug("UnitOfWork committed")
