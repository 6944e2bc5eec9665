# models/permissions.py
from enum import Enum, IntEnum
from typing import Dict


class Role(IntEnum):
    """Board access ranks. Compared by ordinal, never by name."""

    NONE = 0
    VIEWER = 1
    COMMENTER = 2
    EDITOR = 3
    ADMIN = 4

    @property
    def role_name(self) -> str:
        return "" if self is Role.NONE else self.name.lower()

    @classmethod
    def from_name(cls, name: str) -> "Role":
        if not name:
            return cls.NONE
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"invalid role: {name}") from None


# Values accepted for Board.minimum_role. Admin is never a floor.
MINIMUM_ROLE_NAMES = ("", "viewer", "commenter", "editor")


class Permission(str, Enum):
    VIEW_BOARD = "view_board"
    COMMENT_BOARD = "comment_board"
    MANAGE_BOARD_CARDS = "manage_board_cards"
    MANAGE_BOARD_PROPERTIES = "manage_board_properties"
    MANAGE_BOARD_MEMBERS = "manage_board_members"
    DELETE_BOARD = "delete_board"
    SHARE_BOARD = "share_board"
    MANAGE_BOARD_ROLES = "manage_board_roles"
    MANAGE_BOARD_TYPE = "manage_board_type"


# Lowest rank that carries each permission.
ROLE_PERMISSIONS: Dict[Permission, Role] = {
    Permission.VIEW_BOARD: Role.VIEWER,
    Permission.COMMENT_BOARD: Role.COMMENTER,
    Permission.MANAGE_BOARD_CARDS: Role.EDITOR,
    Permission.MANAGE_BOARD_PROPERTIES: Role.EDITOR,
    Permission.MANAGE_BOARD_MEMBERS: Role.EDITOR,
    Permission.DELETE_BOARD: Role.ADMIN,
    Permission.SHARE_BOARD: Role.ADMIN,
    Permission.MANAGE_BOARD_ROLES: Role.ADMIN,
    Permission.MANAGE_BOARD_TYPE: Role.ADMIN,
}


def role_has_permission(role: Role, permission: Permission) -> bool:
    return role >= ROLE_PERMISSIONS[permission]
