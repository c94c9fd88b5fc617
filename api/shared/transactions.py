"""Transaction boundary for services: commit, classify store errors, retry conflicts.

This module must not import the DI container; services import it while the
container is still being built.
"""
import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.shared.exceptions import ConflictError, StoreUnavailableError

logger = logging.getLogger("chat.db")

T = TypeVar("T")

# serialization_failure, deadlock_detected
_CONFLICT_SQLSTATES = {"40001", "40P01"}


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_conflict(exc: SQLAlchemyError) -> bool:
    """Whether a store error is a transient write conflict worth retrying."""
    if isinstance(exc, IntegrityError):
        return True
    if isinstance(exc, DBAPIError):
        return _sqlstate(exc) in _CONFLICT_SQLSTATES
    return False


def classify_store_error(exc: SQLAlchemyError) -> Exception:
    """Translate a SQLAlchemy error into a service-level error kind."""
    if is_conflict(exc):
        return ConflictError(
            "Concurrent update could not be serialized", {"reason": str(exc.__class__.__name__)}
        )
    if isinstance(exc, (OperationalError, InterfaceError, DBAPIError)):
        return StoreUnavailableError("Database operation failed", {"reason": str(exc.__class__.__name__)})
    return exc


async def run_in_transaction(
    session: AsyncSession,
    work: Callable[[AsyncSession], Awaitable[T]],
    *,
    attempts: int = 3,
    base_delay: float = 0.05,
    retryable: Callable[[], bool] = lambda: True,
) -> T:
    """Run ``work`` and commit, retrying transient conflicts.

    Each attempt starts from a clean transaction. A conflict is retried (with
    jittered exponential backoff) only while ``retryable()`` is true and
    attempts remain; it is then raised as ``ConflictError``. Any other failure
    rolls back and propagates, store I/O failures as ``StoreUnavailableError``.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            result = await work(session)
            await session.commit()
            return result
        except SQLAlchemyError as exc:
            await session.rollback()
            if is_conflict(exc) and retryable() and attempt < attempts:
                delay = base_delay * (2 ** (attempt - 1)) * (1 + random.random())
                logger.warning(
                    f"Store conflict on attempt {attempt}/{attempts}, retrying in {delay:.3f}s"
                )
                await asyncio.sleep(delay)
                continue
            classified = classify_store_error(exc)
            if classified is exc:
                raise
            logger.error(f"Store error after {attempt} attempt(s): {exc.__class__.__name__}")
            raise classified from exc
        except Exception:
            await session.rollback()
            raise
