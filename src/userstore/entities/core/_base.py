from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


class Entity(BaseModel):
    """Base entity class with a storage-assigned integer identity."""

    id: int | None = PydanticField(
        default=None,
        description="Identity assigned by storage on the first save",
    )

    @property
    def is_new(self) -> bool:
        return self.id is None


class EntityTable(SQLModel, table=False):
    """Base table class with an autoincrement ``ID`` primary key."""

    id: int | None = Field(
        default=None,
        primary_key=True,
        sa_column_kwargs={"name": "ID", "autoincrement": True},
        description="Generated primary key",
    )
