# models/blocks.py
import copy
import json
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from boards_core.errors import BadRequestError, SizeLimitExceededError

BLOCK_TITLE_MAX_BYTES = 65535  # Maximum size of a TEXT column in MySQL
BLOCK_TITLE_MAX_RUNES = BLOCK_TITLE_MAX_BYTES // 4  # Assume a worst-case representation
BLOCK_FIELDS_MAX_RUNES = 800000

_SAFE_FIELD_KEY = re.compile(r"^[a-zA-Z0-9 _-]+$")


class BlockType(str, Enum):
    VIEW = "view"
    CARD = "card"
    TEXT = "text"
    IMAGE = "image"
    DIVIDER = "divider"
    COMMENT = "comment"
    CHECKBOX = "checkbox"
    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    ATTACHMENT = "attachment"
    MARKDOWN = "markdown"
    VIDEO = "video"
    UNKNOWN = "unknown"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in cls._value2member_map_


def validate_title(title: str) -> None:
    if len(title) > BLOCK_TITLE_MAX_RUNES:
        raise SizeLimitExceededError("block title size limit exceeded")


def validate_fields_size(fields: Dict[str, Any]) -> None:
    # Count characters of the UTF-8 text, not of \u escapes
    if len(json.dumps(fields, ensure_ascii=False)) > BLOCK_FIELDS_MAX_RUNES:
        raise SizeLimitExceededError("block fields size limit exceeded")


def validate_field_keys(fields: Dict[str, Any]) -> None:
    """Recursively reject keys with characters outside the safe set."""
    for key, value in fields.items():
        if not _SAFE_FIELD_KEY.match(key):
            raise BadRequestError(f"invalid characters in block with key: {key}")
        if isinstance(value, dict):
            validate_field_keys(value)


class BlockBase(SQLModel):
    id: str = Field(default="", primary_key=True)
    board_id: str = Field(default="", foreign_key="Boards.id", index=True)
    parent_id: str = Field(default="")
    created_by: str = Field(default="")
    modified_by: str = Field(default="")
    schema_version: int = Field(default=1)
    type: str = Field(default=BlockType.UNKNOWN.value)
    title: str = Field(default="")
    fields: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    create_at: int = Field(default=0)
    update_at: int = Field(default=0)
    delete_at: int = Field(default=0, index=True)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "id": "c7yd4k1qnbgfz3pkxd1u9hykw1a",
                    "board_id": "bq5mz3n9xob8itgq2y7oxtxuy6r",
                    "type": "card",
                    "title": "Write release notes",
                }
            ]
        }
    )


class Block(BlockBase, table=True):
    __tablename__ = "Blocks"

    @property
    def is_deleted(self) -> bool:
        return self.delete_at != 0

    def is_valid(self) -> None:
        """Check the block before inserting it.

        Raises:
            BadRequestError: missing IDs or an unknown block type
            SizeLimitExceededError: title or fields over the storage limit
        """
        if not self.id:
            raise BadRequestError("block ID cannot be empty")
        if not self.board_id:
            raise BadRequestError(f"block {self.id} has an empty board ID")
        if not BlockType.is_valid(self.type):
            raise BadRequestError(f"invalid block type: {self.type}")
        validate_title(self.title)
        validate_fields_size(self.fields or {})

    def clone(self, **overrides: Any) -> "Block":
        data = copy.deepcopy(self.model_dump())
        data.update(overrides)
        return Block(**data)


class BlockPatch(SQLModel):
    """Partial update for a block. ``None`` leaves the attribute untouched."""

    parent_id: Optional[str] = None
    schema_version: Optional[int] = None
    type: Optional[str] = None
    title: Optional[str] = None
    updated_fields: Dict[str, Any] = Field(default_factory=dict)
    deleted_fields: List[str] = Field(default_factory=list)

    def is_valid(self) -> None:
        if self.type is not None and not BlockType.is_valid(self.type):
            raise BadRequestError(f"invalid block type: {self.type}")
        if self.title is not None:
            validate_title(self.title)
        validate_field_keys(self.updated_fields)

    def patch(self, block: Block) -> Block:
        if self.parent_id is not None:
            block.parent_id = self.parent_id
        if self.schema_version is not None:
            block.schema_version = self.schema_version
        if self.type is not None:
            block.type = self.type
        if self.title is not None:
            block.title = self.title

        # Assign a new dict so the JSON column is flagged as modified
        fields = dict(block.fields or {})
        fields.update(self.updated_fields)
        for key in self.deleted_fields:
            fields.pop(key, None)
        block.fields = fields
        return block
