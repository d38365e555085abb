"""User repository."""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import func, inspect
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from src.userstore.core.errors import ConstraintViolationError
from src.userstore.core.services.database.query_spec import QuerySpec, like

from .entity import User
from .table import UserTable


class UserRepository:
    """Data-access layer for users.

    Every public method runs in its own transaction: it commits on success
    and rolls back before re-raising on failure.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            yield self._session
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            error = ConstraintViolationError.from_integrity_error(e)
            logger.error("User write rejected by storage: {}", error)
            raise error from e
        except Exception:
            self._session.rollback()
            raise

    @staticmethod
    def _check_constraints(user: User) -> None:
        """Reject a user whose non-nullable columns would receive ``None``."""
        table = UserTable.__table__
        for attr in inspect(UserTable).column_attrs:
            column = attr.columns[0]
            if column.primary_key or column.nullable:
                continue
            if getattr(user, attr.key) is None:
                raise ConstraintViolationError(table.name, column.name)

    def _write(self, user: User) -> UserTable:
        """Stage an insert or update for ``user`` and return the staged row."""
        if not user.is_new:
            row = self._session.get(UserTable, user.id)
            if row is not None:
                row.first_name = user.first_name
                row.last_name = user.last_name
                self._session.add(row)
                return row
            logger.debug("User {} is not stored; inserting it as a new row", user.id)

        row = UserTable.model_validate(user, from_attributes=True)
        row.id = None
        self._session.add(row)
        return row

    def save(self, user: User) -> User:
        """Insert or update a user and write the assigned identity back onto it."""
        try:
            self._check_constraints(user)
        except ConstraintViolationError as e:
            logger.error("Refusing to save user: {}", e)
            raise

        with self._transaction() as session:
            row = self._write(user)
            session.flush()
            user.id = row.id

        logger.debug("Saved user {}", user.id)
        return user

    def save_all(self, users: Iterable[User]) -> list[User]:
        """Save several users in one transaction.

        Nothing is stored when any of them violates a constraint.
        """
        users = list(users)
        try:
            for user in users:
                self._check_constraints(user)
        except ConstraintViolationError as e:
            logger.error("Refusing to save {} users: {}", len(users), e)
            raise

        with self._transaction() as session:
            rows = [self._write(user) for user in users]
            session.flush()
            for user, row in zip(users, rows, strict=True):
                user.id = row.id

        logger.debug("Saved {} users", len(users))
        return users

    def delete(self, user_id: int | None) -> None:
        """Delete the user with ``user_id``; does nothing when it is not stored."""
        with self._transaction() as session:
            row = session.get(UserTable, user_id) if user_id is not None else None
            if row is None:
                logger.debug("No user {} to delete", user_id)
                return
            session.delete(row)

        logger.debug("Deleted user {}", user_id)

    def delete_many(self, users: Iterable[User]) -> None:
        """Delete each given user by identity, skipping unsaved ones."""
        ids = [user.id for user in users if user.id is not None]
        if not ids:
            return

        with self._transaction() as session:
            statement = select(UserTable).where(UserTable.id.in_(ids))  # type: ignore[union-attr]
            rows = session.exec(statement).all()
            for row in rows:
                session.delete(row)

        logger.debug("Deleted {} of {} requested users", len(rows), len(ids))

    def delete_all(self) -> None:
        """Delete every stored user."""
        with self._transaction() as session:
            rows = session.exec(select(UserTable)).all()
            for row in rows:
                session.delete(row)

        logger.debug("Deleted all {} users", len(rows))

    def exists(self, user_id: int | None) -> bool:
        if user_id is None:
            return False
        statement = select(func.count()).select_from(UserTable).where(UserTable.id == user_id)
        return self._session.exec(statement).one() > 0

    def find_one(self, user_id: int | None) -> User | None:
        if user_id is None:
            return None
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def find_all(self) -> list[User]:
        """Return every stored user in insertion order."""
        return self.find(QuerySpec(order_by=[UserTable.id]))

    def count(self) -> int:
        statement = select(func.count()).select_from(UserTable)
        return self._session.exec(statement).one()

    def find(self, spec: QuerySpec) -> list[User]:
        """Return the users matching an explicit query specification."""
        statement = spec.apply(select(UserTable))
        rows = self._session.exec(statement).all()
        return [User.model_validate(row, from_attributes=True) for row in rows]

    def find_by_first_name_order_by_last_name_asc(self, first_name: str) -> list[User]:
        """Users with exactly ``first_name``, ascending by last name then id."""
        spec = QuerySpec(
            where=[UserTable.first_name == first_name],
            order_by=[UserTable.last_name.asc(), UserTable.id.asc()],  # type: ignore[attr-defined]
        )
        return self.find(spec)

    def get_by_first_name_like(self, pattern: str) -> list[User]:
        """Users whose first name matches a ``LIKE`` pattern; only ``%`` is a wildcard."""
        spec = QuerySpec(
            where=[like(UserTable.first_name, pattern)],
            order_by=[UserTable.id],
        )
        return self.find(spec)
