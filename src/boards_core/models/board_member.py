# models/board_member.py
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from sqlmodel import Field, SQLModel

from boards_core.models.permissions import Role


class BoardMember(SQLModel, table=True):
    """Explicit membership row.

    The four scheme flags are stored independently for compatibility with
    existing rows; the highest flag that is set is the member's rank.
    """

    __tablename__ = "BoardMembers"

    board_id: str = Field(foreign_key="Boards.id", primary_key=True)
    user_id: str = Field(primary_key=True, index=True)
    roles: str = Field(default="")
    scheme_admin: bool = Field(default=False)
    scheme_editor: bool = Field(default=False)
    scheme_commenter: bool = Field(default=False)
    scheme_viewer: bool = Field(default=False)

    @property
    def role(self) -> Role:
        if self.scheme_admin:
            return Role.ADMIN
        if self.scheme_editor:
            return Role.EDITOR
        if self.scheme_commenter:
            return Role.COMMENTER
        if self.scheme_viewer:
            return Role.VIEWER
        return Role.NONE

    @classmethod
    def from_role(cls, board_id: str, user_id: str, role: Role) -> "BoardMember":
        return cls(
            board_id=board_id,
            user_id=user_id,
            roles=role.role_name,
            scheme_admin=role == Role.ADMIN,
            scheme_editor=role == Role.EDITOR,
            scheme_commenter=role == Role.COMMENTER,
            scheme_viewer=role == Role.VIEWER,
        )


class MembershipSource(str, Enum):
    EXPLICIT = "explicit"
    SYNTHETIC_CHANNEL = "synthetic_channel"
    SYNTHETIC_TEAM_TEMPLATE = "synthetic_team_template"


@dataclass(frozen=True)
class Membership:
    """Resolved access of one user on one board. Never persisted."""

    board_id: str
    user_id: str
    role: Role
    source: MembershipSource
    member: Optional[BoardMember] = None

    @property
    def is_synthetic(self) -> bool:
        return self.source is not MembershipSource.EXPLICIT

    @classmethod
    def explicit(cls, member: BoardMember) -> "Membership":
        return cls(
            board_id=member.board_id,
            user_id=member.user_id,
            role=member.role,
            source=MembershipSource.EXPLICIT,
            member=member,
        )

    def to_board_member(self) -> BoardMember:
        """Project onto the four-flag row shape, e.g. for API responses."""
        if self.member is not None:
            return self.member
        return BoardMember.from_role(self.board_id, self.user_id, self.role)

    def to_dict(self) -> Dict[str, Any]:
        """Four-flag row shape plus a ``synthetic`` marker."""
        data = self.to_board_member().model_dump()
        data["synthetic"] = self.is_synthetic
        return data
