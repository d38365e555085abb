"""User domain entity."""

from typing import Any

from pydantic import Field

from src.userstore.entities.core._base import Entity


class User(Entity):
    """User entity representing a person in the system.

    Names may be ``None`` in memory; storage refuses to persist such a user.
    The identity stays ``None`` until the first successful save.
    """

    first_name: str | None = Field(description="User's first name")
    last_name: str | None = Field(description="User's last name")

    def __eq__(self, other: Any) -> bool:
        """Compare saved users by identity and unsaved users by their names."""
        if not isinstance(other, User):
            return False

        if self.id is not None or other.id is not None:
            return self.id == other.id

        return self.first_name == other.first_name and self.last_name == other.last_name

    def __hash__(self) -> int:
        if self.id is not None:
            return hash(self.id)
        return hash((self.first_name, self.last_name))
