# models/category.py
from sqlmodel import Field, SQLModel


class Category(SQLModel, table=True):
    """Per-user sidebar grouping of boards."""

    __tablename__ = "Categories"

    id: str = Field(primary_key=True)
    name: str
    user_id: str = Field(index=True)
    team_id: str = Field(index=True)
    create_at: int = Field(default=0)
    update_at: int = Field(default=0)


class CategoryBoard(SQLModel, table=True):
    __tablename__ = "CategoryBoards"

    category_id: str = Field(foreign_key="Categories.id", primary_key=True)
    board_id: str = Field(foreign_key="Boards.id", primary_key=True)
    user_id: str = Field(index=True)
    sort_order: int = Field(default=0)
