# models/sharing.py
from sqlmodel import Field, SQLModel


class Sharing(SQLModel, table=True):
    """Public read-only link settings for a board."""

    __tablename__ = "Sharing"

    board_id: str = Field(foreign_key="Boards.id", primary_key=True)
    enabled: bool = Field(default=False)
    token: str = Field(default="")
    modified_by: str = Field(default="")
    update_at: int = Field(default=0)
