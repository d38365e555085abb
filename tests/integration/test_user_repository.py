"""Integration tests for the UserRepository against an in-memory database.

Every test starts with 50 stored users named John0..John49 / Doe0..Doe49 and
ends by deleting all of them and checking that storage is empty.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from sqlmodel import Session

from src.userstore.core.errors import ConstraintViolationError
from src.userstore.entities.core.user import User, UserRepository
from tests.fixtures.core import NO_OF_USERS

pytestmark = pytest.mark.integration


class TestUserRepository:
    """Repository behaviour over the 50-user fixture."""

    @pytest.fixture
    def user_repo(self, session: Session) -> UserRepository:
        """User repository instance."""
        return UserRepository(session)

    @pytest.fixture(autouse=True)
    def saved_users(self, user_repo: UserRepository) -> Generator[list[User]]:
        """Save the fixture users, then delete everything after the test."""
        users = [User(first_name=f"John{i}", last_name=f"Doe{i}") for i in range(NO_OF_USERS)]
        user_repo.save_all(users)
        for user in users:
            assert user.id is not None

        yield users

        user_repo.delete_all()
        assert user_repo.count() == 0

    def test_find_all_should_return_all_users(self, user_repo: UserRepository, saved_users: list[User]):
        users = user_repo.find_all()

        assert len(users) == NO_OF_USERS, "Wrong number of users found"
        assert len(users) == len(saved_users), "Wrong number of users found"
        assert {user.id for user in users} == {user.id for user in saved_users}

    def test_delete_by_id_should_remove_a_user_from_the_repository(
        self, user_repo: UserRepository, saved_users: list[User]
    ):
        user_id = saved_users[0].id

        user_repo.delete(user_id)

        users = user_repo.find_all()

        template = User(id=user_id, first_name=None, last_name=None)
        assert template not in users, "User should be deleted"
        assert len(users) == NO_OF_USERS - 1, "Wrong number of users found"
        assert not user_repo.exists(user_id), "User should be deleted"
        assert user_repo.find_one(user_id) is None, "User should be deleted"

    def test_delete_many_should_delete_the_specified_users(
        self, user_repo: UserRepository, saved_users: list[User]
    ):
        user_repo.delete_many(saved_users)

        assert user_repo.count() == 0

    def test_delete_many_should_only_delete_the_given_users(
        self, user_repo: UserRepository, saved_users: list[User]
    ):
        to_delete = saved_users[:10]

        user_repo.delete_many(to_delete)

        assert user_repo.count() == NO_OF_USERS - len(to_delete)
        assert not any(user_repo.exists(user.id) for user in to_delete)
        assert user_repo.exists(saved_users[10].id)

    def test_repository_should_check_null_constraint_for_first_name(self, user_repo: UserRepository):
        user = User(first_name=None, last_name="LastName")

        with pytest.raises(ConstraintViolationError) as exc_info:
            user_repo.save(user)

        assert "USER column: FIRSTNAME" in str(exc_info.value), "Could not find column name in error message"
        assert user.id is None
        assert user_repo.count() == NO_OF_USERS

    def test_repository_should_check_null_constraint_for_last_name(self, user_repo: UserRepository):
        user = User(first_name="FirstName", last_name=None)

        with pytest.raises(ConstraintViolationError) as exc_info:
            user_repo.save(user)

        assert "USER column: LASTNAME" in str(exc_info.value), "Could not find column name in error message"
        assert user_repo.count() == NO_OF_USERS

    def test_find_by_name_should_return_matching_users(self, user_repo: UserRepository):
        name = "John1"

        matches = user_repo.find_by_first_name_order_by_last_name_asc(name)

        assert matches is not None
        assert len(matches) == 1
        assert matches[0].first_name == name

        user_repo.save(User(first_name=name, last_name="DoeB"))
        matches2 = user_repo.find_by_first_name_order_by_last_name_asc(name)

        assert matches2 is not None
        assert len(matches2) == 2
        assert matches2[0].last_name == "Doe1"
        assert matches2[1].last_name == "DoeB"

    def test_get_by_first_name_like_should_return_matching_users(self, user_repo: UserRepository):
        matches = user_repo.get_by_first_name_like("%ohn%")  # '%' is the SQL wildcard

        assert len(matches) == NO_OF_USERS

    def test_count_should_track_saves_and_deletes(self, user_repo: UserRepository, saved_users: list[User]):
        assert user_repo.count() == NO_OF_USERS

        user_repo.save(User(first_name="Jane", last_name="Roe"))
        assert user_repo.count() == NO_OF_USERS + 1

        user_repo.delete(saved_users[0].id)
        assert user_repo.count() == NO_OF_USERS
