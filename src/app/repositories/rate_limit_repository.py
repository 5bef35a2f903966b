from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.domain.entities import RateLimitEntry


class IRateLimitRepository(ABC):
    """
    Rate limit repository interface - application layer

    Read failures and write failures are raised as StorageError so the
    rate limiter can apply its fail-open / fail-closed policy.
    """

    @abstractmethod
    async def get_for_update(self, origin: str) -> Optional[RateLimitEntry]:
        """Get the entry for an origin, locking the row where supported"""
        pass

    @abstractmethod
    async def list(self) -> List[RateLimitEntry]:
        """Get all entries"""
        pass

    @abstractmethod
    async def save(self, entry: RateLimitEntry) -> RateLimitEntry:
        """Insert or update an entry"""
        pass

    @abstractmethod
    async def delete(self, origin: str) -> None:
        """Remove the entry for an origin (no-op when absent)"""
        pass

    @abstractmethod
    async def delete_all(self) -> int:
        """Remove every entry, returning how many were removed"""
        pass

    @abstractmethod
    async def delete_idle_since(self, cutoff: datetime) -> int:
        """Remove entries whose last attempt is older than cutoff"""
        pass
