"""Shared utilities for CLI commands."""

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.table import Table

from src.userstore.core.services.database.db_manage import DbManageService
from src.userstore.core.services.database.db_session import DbSessionService
from src.userstore.entities.core.user import User, UserRepository

# Initialize Rich console for colored output
console = Console()


@contextmanager
def user_repository() -> Iterator[UserRepository]:
    """Yield a repository bound to a session on the configured database.

    The schema is created first when it does not exist yet.
    """
    db = DbSessionService()
    try:
        DbManageService(db.engine).create_all()
        with db.session_scope() as session:
            yield UserRepository(session)
    finally:
        db.dispose()


def users_table(users: list[User]) -> Table:
    """Render users as a Rich table."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="yellow", justify="right")
    table.add_column("First Name", style="cyan")
    table.add_column("Last Name", style="blue")

    for user in users:
        table.add_row(str(user.id), user.first_name or "", user.last_name or "")

    return table
