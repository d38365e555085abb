"""Explicit query specifications.

A finder is described as a list of predicates plus a sort order instead of
being derived from a method name. The same specification can be applied to
any ``select()`` statement over a table model.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.sql.elements import ColumnElement
from sqlmodel.sql.expression import Select, SelectOfScalar

LIKE_ESCAPE = "\\"


def like_pattern(pattern: str) -> str:
    """Escape a ``LIKE`` pattern so that only ``%`` acts as a wildcard.

    ``_`` and the escape character itself are matched literally.
    """
    return (
        pattern.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def like(column: Any, pattern: str) -> ColumnElement[bool]:
    """Build a ``column LIKE pattern`` predicate with ``%``-only wildcards."""
    return column.like(like_pattern(pattern), escape=LIKE_ESCAPE)


@dataclass(frozen=True)
class QuerySpec:
    """Predicate and sort specification for a finder."""

    where: Sequence[ColumnElement[bool]] = field(default_factory=tuple)
    order_by: Sequence[Any] = field(default_factory=tuple)

    def apply(self, statement: Select | SelectOfScalar) -> Select | SelectOfScalar:
        """Return ``statement`` filtered by every predicate and sorted in order."""
        for predicate in self.where:
            statement = statement.where(predicate)
        if self.order_by:
            statement = statement.order_by(*self.order_by)
        return statement

    def and_where(self, *predicates: ColumnElement[bool]) -> "QuerySpec":
        return QuerySpec(where=(*self.where, *predicates), order_by=self.order_by)

    def then_order_by(self, *columns: Any) -> "QuerySpec":
        return QuerySpec(where=self.where, order_by=(*self.order_by, *columns))
