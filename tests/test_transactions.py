"""Tests for the transaction helper and store error classification."""
import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from api.shared.transactions import classify_store_error, is_conflict, run_in_transaction
from api.shared.exceptions import ConflictError, StoreUnavailableError


class _Orig(Exception):
    def __init__(self, sqlstate=None):
        super().__init__("driver error")
        self.sqlstate = sqlstate


def _integrity():
    return IntegrityError("INSERT INTO message", {}, _Orig())


class Flaky:
    """Unit of work that fails with ``errors`` before succeeding."""

    def __init__(self, *errors, result="done"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self, session):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


async def test_returns_result_and_commits(db_session):
    work = Flaky()
    assert await run_in_transaction(db_session, work) == "done"
    assert work.calls == 1


async def test_conflict_is_retried(db_session):
    work = Flaky(_integrity(), _integrity())

    assert await run_in_transaction(db_session, work, attempts=3, base_delay=0) == "done"
    assert work.calls == 3


async def test_conflict_exhausts_attempts(db_session):
    work = Flaky(_integrity(), _integrity(), _integrity())

    with pytest.raises(ConflictError) as exc_info:
        await run_in_transaction(db_session, work, attempts=3, base_delay=0)
    assert exc_info.value.status_code == 409
    assert work.calls == 3


async def test_conflict_not_retried_when_not_retryable(db_session):
    work = Flaky(_integrity())

    with pytest.raises(ConflictError):
        await run_in_transaction(
            db_session, work, attempts=3, base_delay=0, retryable=lambda: False
        )
    assert work.calls == 1


async def test_operational_error_is_store_unavailable(db_session):
    work = Flaky(OperationalError("SELECT 1", {}, _Orig()))

    with pytest.raises(StoreUnavailableError) as exc_info:
        await run_in_transaction(db_session, work, base_delay=0)
    assert exc_info.value.status_code == 503
    assert work.calls == 1


async def test_other_errors_propagate(db_session):
    work = Flaky(RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        await run_in_transaction(db_session, work)
    assert work.calls == 1


@pytest.mark.parametrize("sqlstate, expected", [("40001", True), ("40P01", True), ("08006", False)])
def test_sqlstate_conflicts(sqlstate, expected):
    exc = DBAPIError("UPDATE conversation", {}, _Orig(sqlstate))
    assert is_conflict(exc) is expected


def test_serialization_failure_classifies_as_conflict():
    exc = DBAPIError("UPDATE conversation", {}, _Orig("40001"))
    assert isinstance(classify_store_error(exc), ConflictError)
