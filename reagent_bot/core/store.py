import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .errors import ConstraintViolation, StoreError, StoreTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")
Work = Callable[[AsyncSession], Awaitable[T]]


class AccessLevel(str, Enum):
    RESTRICTED = "restricted"
    ELEVATED = "elevated"


def _error_code(exc: SQLAlchemyError) -> str:
    orig: Any = getattr(exc, "orig", None)
    for attr in ("sqlstate", "pgcode", "sqlite_errorname"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return type(orig or exc).__name__


class Store:
    """
    Entry point for every read and write against the backing database.

    Each call to ``run`` gets its own session bound to the requested access
    level, a commit on success, a rollback on failure and a hard timeout.
    Driver errors never leave this class untyped.
    """

    def __init__(
        self,
        restricted: async_sessionmaker,
        elevated: async_sessionmaker,
        timeout: float = 5.0,
    ):
        self._factories = {
            AccessLevel.RESTRICTED: restricted,
            AccessLevel.ELEVATED: elevated,
        }
        self.timeout = timeout

    async def run(self, work: Work, access: AccessLevel = AccessLevel.RESTRICTED) -> T:
        factory = self._factories[access]

        async def unit():
            async with factory() as db:
                try:
                    result = await work(db)
                    await db.commit()
                    return result
                except Exception:
                    await db.rollback()
                    raise

        try:
            return await asyncio.wait_for(unit(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error(f"Store call timed out after {self.timeout}s ({access.value})")
            raise StoreTimeout() from exc
        except IntegrityError as exc:
            code = _error_code(exc)
            logger.warning(f"Constraint violation [{code}]: {exc.orig}")
            raise ConstraintViolation(str(exc.orig), code=code) from exc
        except SQLAlchemyError as exc:
            code = _error_code(exc)
            logger.error(f"Store error [{code}]: {exc}")
            raise StoreError(str(exc), code=code) from exc

    async def ping(self, access: AccessLevel = AccessLevel.RESTRICTED) -> bool:
        async def work(db: AsyncSession):
            await db.execute(text("SELECT 1"))
            return True

        try:
            return await self.run(work, access=access)
        except StoreError:
            return False
