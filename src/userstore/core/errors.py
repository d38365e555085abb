"""Error types raised by the data-access layer."""

import re

from sqlalchemy.exc import IntegrityError

# SQLite: "NOT NULL constraint failed: USER.FIRSTNAME"
# PostgreSQL: 'null value in column "FIRSTNAME" of relation "USER" violates not-null constraint'
_SQLITE_NOT_NULL = re.compile(r"NOT NULL constraint failed: (?P<table>\w+)\.(?P<column>\w+)")
_POSTGRES_NOT_NULL = re.compile(
    r'null value in column "(?P<column>\w+)" of relation "(?P<table>\w+)"'
)


class ConstraintViolationError(Exception):
    """A storage-layer rejection caused by a broken schema rule.

    When the table and column are known the message names them in the form
    ``"<TABLE> column: <COLUMN>"`` so callers can tell which field failed.
    """

    def __init__(
        self,
        table: str | None,
        column: str | None,
        constraint: str = "NOT NULL check constraint",
    ) -> None:
        self.table = table
        self.column = column
        self.constraint = constraint
        if table is None or column is None:
            super().__init__(constraint)
        else:
            super().__init__(f"{constraint}; {table} column: {column}")

    @classmethod
    def from_integrity_error(cls, error: IntegrityError) -> "ConstraintViolationError":
        """Translate a driver-level ``IntegrityError`` into a constraint violation."""
        message = str(error.orig) if error.orig is not None else str(error)
        for pattern in (_SQLITE_NOT_NULL, _POSTGRES_NOT_NULL):
            match = pattern.search(message)
            if match:
                return cls(match.group("table"), match.group("column"))
        return cls(None, None, constraint=f"integrity constraint violation: {message}")
