"""Read-through cache for external ingredient name normalization"""

import logging
from typing import Awaitable, Callable

import anyio
from sqlalchemy.orm import Session, sessionmaker

from app.exceptions import ServiceValidationError
from core.utils.helpers import normalize_name
from repositories.normalization_repository import NormalizationRepository

logger = logging.getLogger("mise.normalization")


class NormalizationService:
    """
    Memoizes an expensive raw name -> canonical name lookup.

    Entries are written once. When two callers miss on the same name at the
    same time both compute, only the first insert is kept, and both return
    the stored value.
    """

    @staticmethod
    def lookup_key(raw_name: str) -> str:
        """
        Cache key for a raw ingredient name (lowercase, collapsed whitespace).

        Raises:
            ServiceValidationError: If the name is blank
        """
        key = normalize_name(raw_name or "")
        if not key:
            raise ServiceValidationError(
                "Ingredient name must not be empty", details={"raw_name": raw_name}
            )
        return key

    @staticmethod
    def get_or_compute(db: Session, raw_name: str, compute: Callable[[], str]) -> str:
        """
        Return the cached normalization for raw_name, computing it on a miss.

        Args:
            db: Database session
            raw_name: Name as written in a recipe
            compute: Called only on a miss; its exceptions propagate and
                nothing is stored

        Returns:
            The stored normalized name

        Raises:
            ServiceValidationError: If raw_name or the computed value is blank
        """
        key = NormalizationService.lookup_key(raw_name)
        cached = NormalizationRepository(db).get_value(key)
        if cached is not None:
            logger.debug(f"Normalization cache hit for '{key}'")
            return cached

        logger.debug(f"Normalization cache miss for '{key}'")
        return NormalizationService._store(db, key, compute())

    @staticmethod
    async def aget_or_compute(
        session_factory: sessionmaker,
        raw_name: str,
        compute: Callable[[], Awaitable[str]],
    ) -> str:
        """
        Async variant of get_or_compute for callers on an event loop.

        Storage runs in a worker thread with its own session; compute is
        awaited in between, so cancelling it leaves no entry behind.
        """
        key = NormalizationService.lookup_key(raw_name)

        def _read():
            with session_factory() as db:
                return NormalizationRepository(db).get_value(key)

        cached = await anyio.to_thread.run_sync(_read)
        if cached is not None:
            logger.debug(f"Normalization cache hit for '{key}'")
            return cached

        value = await compute()

        def _write():
            with session_factory() as db:
                return NormalizationService._store(db, key, value)

        return await anyio.to_thread.run_sync(_write)

    @staticmethod
    def _store(db: Session, key: str, value: str) -> str:
        normalized = value.strip() if isinstance(value, str) else ""
        if not normalized:
            raise ServiceValidationError(
                "Normalization produced an empty name", details={"raw_name": key}
            )

        repo = NormalizationRepository(db)
        if repo.insert_or_ignore(key, normalized):
            logger.info(f"Cached normalization '{key}' -> '{normalized}'")
        else:
            logger.debug(f"Normalization for '{key}' was stored by another caller")
        return repo.get_value(key)
