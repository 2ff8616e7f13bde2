"""Unit tests for UserRepository.

Tests cover:
- Account creation
- Lookups by id and email
- Partial profile updates
- Password and last-login updates
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from pantry_chef.database.repositories.user import UserRecord, UserRepository
from tests.factories.records import make_user_row


pytestmark = pytest.mark.unit


@pytest.fixture
def repository(mock_pool: MagicMock) -> UserRepository:
    return UserRepository(pool=mock_pool)


class TestCreate:
    """Tests for UserRepository.create."""

    async def test_inserts_lowercased_email(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        row = make_user_row(email="jane@example.com")
        mock_conn.fetchrow.return_value = row

        user = await repository.create(
            name="Jane Cook",
            email="Jane@Example.COM",
            password_hash="hash",
            preferences={"defaultPortions": 4},
        )

        assert isinstance(user, UserRecord)
        assert user.id == row["id"]
        query, _id, name, email, password_hash, preferences = mock_conn.fetchrow.call_args.args
        assert "INSERT INTO users" in query
        assert (name, email, password_hash) == ("Jane Cook", "jane@example.com", "hash")
        assert preferences == {"defaultPortions": 4}


class TestLookups:
    """Tests for get_by_id and get_by_email."""

    async def test_get_by_id_missing(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        assert await repository.get_by_id(make_user_row()["id"]) is None

    async def test_get_by_email_lowercases(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        mock_conn.fetchrow.return_value = make_user_row()

        user = await repository.get_by_email("JANE@example.com")

        assert user is not None
        assert mock_conn.fetchrow.call_args.args[1] == "jane@example.com"


class TestUpdateProfile:
    """Tests for UserRepository.update_profile."""

    async def test_updates_only_given_fields(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        row = make_user_row(name="New Name")
        mock_conn.fetchrow.return_value = row

        user = await repository.update_profile(row["id"], name="New Name")

        assert user is not None
        assert user.name == "New Name"
        query = mock_conn.fetchrow.call_args.args[0]
        assert "name = $2" in query
        assert "preferences" not in query.split("RETURNING")[0]
        assert mock_conn.fetchrow.call_args.args[1:] == (row["id"], "New Name")

    async def test_numbers_parameters_in_order(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        row = make_user_row()
        mock_conn.fetchrow.return_value = row

        await repository.update_profile(
            row["id"], preferences={"defaultPortions": 6}, avatar="https://img.test/a.png"
        )

        query = mock_conn.fetchrow.call_args.args[0]
        assert "preferences = $2" in query
        assert "avatar = $3" in query

    async def test_nothing_to_update_reads_user(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        """Should return the current row without issuing an UPDATE."""
        row = make_user_row()
        mock_conn.fetchrow.return_value = row

        await repository.update_profile(row["id"])

        assert mock_conn.fetchrow.call_args.args[0].strip().startswith("SELECT")


class TestAccountUpdates:
    """Tests for password and last-login updates."""

    async def test_update_password_hash(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        user_id = make_user_row()["id"]

        await repository.update_password_hash(user_id, "new-hash")

        query, *args = mock_conn.execute.call_args.args
        assert "password_hash = $2" in query
        assert args == [user_id, "new-hash"]

    async def test_touch_last_login(
        self, repository: UserRepository, mock_conn: MagicMock
    ) -> None:
        row = make_user_row()
        mock_conn.fetchrow.return_value = row

        user = await repository.touch_last_login(row["id"])

        assert user is not None
        assert "last_login_at = now()" in mock_conn.fetchrow.call_args.args[0]
