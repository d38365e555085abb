"""User management CLI commands."""

import typer
from rich.panel import Panel

from src.userstore.core.errors import ConstraintViolationError
from src.userstore.entities.core.user import User

from .utils import console, user_repository, users_table

users_app = typer.Typer(help="👥 User management commands")


def _print_users(users: list[User], empty_message: str) -> None:
    if not users:
        console.print(f"[yellow]{empty_message}[/yellow]")
        return
    console.print(users_table(users))
    console.print(f"\n[dim]Showing {len(users)} users[/dim]")


@users_app.command("init-db")
def init_db() -> None:
    """🗄️ Create the user tables if they do not exist."""
    with user_repository():
        pass
    console.print("[green]✅ Database initialized[/green]")


@users_app.command("seed")
def seed(
    count: int = typer.Option(50, "--count", "-n", min=1, help="Number of users to create"),
    first_prefix: str = typer.Option("John", help="Prefix for generated first names"),
    last_prefix: str = typer.Option("Doe", help="Prefix for generated last names"),
) -> None:
    """
    🌱 Insert generated users.

    Creates users named <first_prefix><i> <last_prefix><i> for i in 0..count-1.
    """
    users = [User(first_name=f"{first_prefix}{i}", last_name=f"{last_prefix}{i}") for i in range(count)]
    with user_repository() as repo:
        repo.save_all(users)
        total = repo.count()

    console.print(f"[green]✅ Created {len(users)} users ({total} stored)[/green]")


@users_app.command("add")
def add_user(
    first_name: str | None = typer.Option(None, "--first-name", help="First name"),
    last_name: str | None = typer.Option(None, "--last-name", help="Last name"),
) -> None:
    """➕ Save a single user and print its id."""
    try:
        with user_repository() as repo:
            user = repo.save(User(first_name=first_name, last_name=last_name))
    except ConstraintViolationError as e:
        console.print(f"[red]❌ Failed to add user: {e}[/red]")
        raise typer.Exit(1) from None

    console.print(
        Panel.fit(
            f"[bold green]Added user {user.id}: {user.first_name} {user.last_name}[/bold green]",
            border_style="green",
        )
    )


@users_app.command("list")
def list_users() -> None:
    """📋 List every stored user."""
    with user_repository() as repo:
        users = repo.find_all()
    _print_users(users, "No users found")


@users_app.command("count")
def count_users() -> None:
    """🔢 Print the number of stored users."""
    with user_repository() as repo:
        total = repo.count()
    console.print(total)


@users_app.command("find")
def find_users(
    first_name: str = typer.Argument(..., help="Exact first name to match"),
) -> None:
    """🔍 Find users by exact first name, ordered by last name."""
    with user_repository() as repo:
        users = repo.find_by_first_name_order_by_last_name_asc(first_name)
    _print_users(users, f"No users named '{first_name}'")


@users_app.command("search")
def search_users(
    pattern: str = typer.Argument(..., help="LIKE pattern; '%' matches any sequence"),
) -> None:
    """🔎 Find users whose first name matches a LIKE pattern."""
    with user_repository() as repo:
        users = repo.get_by_first_name_like(pattern)
    _print_users(users, f"No users match '{pattern}'")


@users_app.command("delete")
def delete_user(
    user_id: int = typer.Argument(..., help="Id of the user to delete"),
) -> None:
    """🗑️ Delete a user by id; nothing happens when it does not exist."""
    with user_repository() as repo:
        existed = repo.exists(user_id)
        repo.delete(user_id)

    if existed:
        console.print(f"[green]✅ Deleted user {user_id}[/green]")
    else:
        console.print(f"[yellow]No user {user_id}; nothing deleted[/yellow]")


@users_app.command("purge")
def purge_users(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """🧹 Delete every stored user."""
    if not yes:
        typer.confirm("Delete all users?", abort=True)

    with user_repository() as repo:
        repo.delete_all()
        remaining = repo.count()

    console.print(f"[green]✅ All users deleted ({remaining} remaining)[/green]")
