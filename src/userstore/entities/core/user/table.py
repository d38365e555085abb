"""User database table model."""

from sqlmodel import Field

from src.userstore.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    Maps onto the ``USER`` table. Both name columns are ``NOT NULL``; the
    attribute names stay snake_case while the column names follow the
    upper-case schema.
    """

    __tablename__ = "USER"  # type: ignore[assignment]

    first_name: str = Field(nullable=False, sa_column_kwargs={"name": "FIRSTNAME"})
    last_name: str = Field(nullable=False, sa_column_kwargs={"name": "LASTNAME"})
