# models/boards.py
import copy
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from boards_core.errors import BadRequestError
from boards_core.models.blocks import validate_title
from boards_core.models.permissions import MINIMUM_ROLE_NAMES, Role


class BoardType(str, Enum):
    OPEN = "O"
    PRIVATE = "P"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in cls._value2member_map_


def validate_minimum_role(minimum_role: str) -> None:
    if minimum_role not in MINIMUM_ROLE_NAMES:
        raise BadRequestError(f"invalid minimum role: {minimum_role}")


class BoardBase(SQLModel):
    id: str = Field(default="", primary_key=True)
    team_id: str = Field(default="", index=True)
    channel_id: str = Field(default="", index=True)
    created_by: str = Field(default="")
    modified_by: str = Field(default="")
    type: str = Field(default=BoardType.OPEN.value)
    minimum_role: str = Field(default="")
    title: str = Field(default="")
    description: str = Field(default="")
    icon: str = Field(default="")
    show_description: bool = Field(default=False)
    is_template: bool = Field(default=False)
    template_version: int = Field(default=0)
    properties: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    card_properties: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    create_at: int = Field(default=0)
    update_at: int = Field(default=0)
    delete_at: int = Field(default=0, index=True)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "id": "bq5mz3n9xob8itgq2y7oxtxuy6r",
                    "team_id": "team-1",
                    "type": "O",
                    "minimum_role": "viewer",
                    "title": "Sprint planning",
                }
            ]
        }
    )


class Board(BoardBase, table=True):
    __tablename__ = "Boards"

    @property
    def is_deleted(self) -> bool:
        return self.delete_at != 0

    @property
    def minimum_rank(self) -> Role:
        return Role.from_name(self.minimum_role)

    def is_valid(self) -> None:
        if not self.id:
            raise BadRequestError("board ID cannot be empty")
        if not self.team_id:
            raise BadRequestError(f"board {self.id} has an empty team ID")
        if not BoardType.is_valid(self.type):
            raise BadRequestError(f"invalid board type: {self.type}")
        validate_minimum_role(self.minimum_role)
        validate_title(self.title)

    def clone(self, **overrides: Any) -> "Board":
        data = copy.deepcopy(self.model_dump())
        data.update(overrides)
        return Board(**data)


class BoardPatch(SQLModel):
    """Partial update for a board. ``None`` leaves the attribute untouched."""

    type: Optional[str] = None
    minimum_role: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    show_description: Optional[bool] = None
    channel_id: Optional[str] = None
    updated_properties: Dict[str, Any] = Field(default_factory=dict)
    deleted_properties: List[str] = Field(default_factory=list)
    updated_card_properties: List[Dict[str, Any]] = Field(default_factory=list)
    deleted_card_properties: List[str] = Field(default_factory=list)

    def is_valid(self) -> None:
        if self.type is not None and not BoardType.is_valid(self.type):
            raise BadRequestError(f"invalid board type: {self.type}")
        if self.minimum_role is not None:
            validate_minimum_role(self.minimum_role)
        if self.title is not None:
            validate_title(self.title)
        for card_property in self.updated_card_properties:
            if not card_property.get("id"):
                raise BadRequestError("card property without id")

    def patch(self, board: Board) -> Board:
        if self.type is not None:
            board.type = self.type
        if self.minimum_role is not None:
            board.minimum_role = self.minimum_role
        if self.title is not None:
            board.title = self.title
        if self.description is not None:
            board.description = self.description
        if self.icon is not None:
            board.icon = self.icon
        if self.show_description is not None:
            board.show_description = self.show_description
        if self.channel_id is not None:
            board.channel_id = self.channel_id

        properties = dict(board.properties or {})
        properties.update(self.updated_properties)
        for key in self.deleted_properties:
            properties.pop(key, None)
        board.properties = properties

        # Card properties are matched by their "id" key
        card_properties = [
            prop for prop in (board.card_properties or [])
            if prop.get("id") not in self.deleted_card_properties
        ]
        for updated in self.updated_card_properties:
            for index, prop in enumerate(card_properties):
                if prop.get("id") == updated["id"]:
                    card_properties[index] = updated
                    break
            else:
                card_properties.append(updated)
        board.card_properties = card_properties
        return board
