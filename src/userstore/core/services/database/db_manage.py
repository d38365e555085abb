"""Schema management for the user tables."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

# Importing the table models registers them with SQLModel.metadata.
from src.userstore.entities.core.user import UserTable  # noqa: F401


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables."""
        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def drop_all(self) -> None:
        """Drop all database tables."""
        SQLModel.metadata.drop_all(self._engine)
        logger.info("Database tables dropped.")

    def table_names(self) -> list[str]:
        """Names of the tables registered in the metadata."""
        return sorted(SQLModel.metadata.tables)
