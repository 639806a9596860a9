"""Tests for transaction scoping."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from authsvc.database import Database
from authsvc.db.models import Account


async def _accounts(database: Database) -> int:
    async with database.session() as db:
        return (await db.execute(select(func.count()).select_from(Account))).scalar_one()


def _account(username: str) -> Account:
    return Account(username=username, password_hash="h", user_type="tenant", auth_provider="local")


class TestTransaction:
    async def test_commits_on_success(self, database: Database):
        async with database.transaction() as db:
            db.add(_account("a@x.com"))
        assert await _accounts(database) == 1

    async def test_rolls_back_on_error(self, database: Database):
        with pytest.raises(RuntimeError, match="boom"):
            async with database.transaction() as db:
                db.add(_account("a@x.com"))
                await db.flush()
                raise RuntimeError("boom")
        assert await _accounts(database) == 0

    async def test_rollback_failure_keeps_original_error(self, database: Database, monkeypatch):
        async def failing_rollback(self):
            raise ConnectionError("connection lost")

        with pytest.raises(RuntimeError, match="boom"):
            async with database.transaction() as db:
                monkeypatch.setattr(type(db), "rollback", failing_rollback)
                raise RuntimeError("boom")

    async def test_check_constraint_requires_password_for_local(self, database: Database):
        with pytest.raises(IntegrityError):
            async with database.transaction() as db:
                db.add(Account(username="a@x.com", password_hash=None, user_type="tenant", auth_provider="local"))
