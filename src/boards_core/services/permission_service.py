# services/permission_service.py
from typing import Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import union
from sqlmodel import col, select

from boards_core.connectors.base import PlatformConnector
from boards_core.errors import NotFoundError
from boards_core.models.board_member import BoardMember, Membership, MembershipSource
from boards_core.models.boards import Board, BoardType
from boards_core.models.permissions import Permission, Role, role_has_permission
from boards_core.models.users import ChannelMember, TeamMember, User
from boards_core.repositories.store import Store
from boards_core.services.role_resolver import RoleResolver


class PermissionService:
    def __init__(self, store: Store, connector: PlatformConnector, resolver: Optional[RoleResolver] = None):
        self.store = store
        self.connector = connector
        self.resolver = resolver or RoleResolver(store, connector)

    def has_permission(self, user_id: str, board_id: str, permission: Permission) -> bool:
        """
        Check whether a user may perform ``permission`` on a board.

        Returns False when the user has no membership of any kind. Any other
        failure while resolving is logged and also denies access.
        """
        try:
            membership = self.resolver.resolve(user_id, board_id)
        except NotFoundError:
            return False
        except Exception as e:
            logger.error(f"Error resolving role of {user_id} on board {board_id}: {e}")
            return False
        return role_has_permission(membership.role, permission)

    def has_permission_to_team(self, user_id: str, team_id: str) -> bool:
        try:
            self.connector.get_team_member(team_id, user_id)
            return True
        except NotFoundError:
            return False
        except Exception as e:
            logger.error(f"Error checking team membership of {user_id} in team {team_id}: {e}")
            return False

    def list_visible_boards_predicate(self, user_id: str, team_id: str, include_public: bool):
        """
        Build the query for the boards of a team that a user can see.

        A board is visible when the user has an explicit row on it, belongs
        to its linked channel (guests excluded), or, when ``include_public``
        is set, belongs to the team and the board is open. Deleted boards and
        templates are never listed.

        Returns:
            Select: a ``select(Board)`` statement
        """
        sources = [
            select(col(BoardMember.board_id).label("id")).where(BoardMember.user_id == user_id),
            select(col(Board.id).label("id"))
            .join(ChannelMember, ChannelMember.channel_id == Board.channel_id)
            .join(User, User.id == ChannelMember.user_id)
            .where(
                ChannelMember.user_id == user_id,
                Board.channel_id != "",
                User.is_guest == False,  # noqa: E712
            ),
        ]
        if include_public:
            sources.append(
                select(col(Board.id).label("id"))
                .join(TeamMember, TeamMember.team_id == Board.team_id)
                .join(User, User.id == TeamMember.user_id)
                .where(
                    TeamMember.user_id == user_id,
                    TeamMember.delete_at == 0,
                    Board.type == BoardType.OPEN.value,
                    User.is_guest == False,  # noqa: E712
                )
            )

        visible = union(*sources).subquery()
        return (
            select(Board)
            .where(
                Board.team_id == team_id,
                Board.delete_at == 0,
                Board.is_template == False,  # noqa: E712
                col(Board.id).in_(select(visible.c.id)),
            )
            .order_by(Board.title, Board.id)
        )

    def get_boards_for_user_and_team(self, user_id: str, team_id: str, include_public: bool) -> List[Board]:
        return self.store.find_boards(self.list_visible_boards_predicate(user_id, team_id, include_public))

    def get_members_for_board(self, board_id: str) -> List[Membership]:
        """Explicit members of a board plus the members of its linked channel.

        A user with an explicit row is listed once, with the explicit role.
        """
        board = self.store.get_board(board_id)
        memberships: Dict[str, Membership] = {}
        for member in self.store.get_members_for_board(board_id):
            memberships[member.user_id] = Membership.explicit(member)

        role = max(Role.EDITOR, board.minimum_rank)
        for user_id in self.store.members.get_channel_user_ids(board.channel_id):
            if user_id in memberships:
                continue
            memberships[user_id] = Membership(
                board_id=board_id,
                user_id=user_id,
                role=role,
                source=MembershipSource.SYNTHETIC_CHANNEL,
            )
        return list(memberships.values())

    def get_members_for_user(self, user_id: str) -> List[Membership]:
        memberships: Dict[Tuple[str, str], Membership] = {}
        for member in self.store.get_members_for_user(user_id):
            memberships[(member.board_id, user_id)] = Membership.explicit(member)

        for board in self.store.members.get_channel_boards_for_user(user_id):
            key = (board.id, user_id)
            if key in memberships:
                continue
            memberships[key] = Membership(
                board_id=board.id,
                user_id=user_id,
                role=max(Role.EDITOR, board.minimum_rank),
                source=MembershipSource.SYNTHETIC_CHANNEL,
            )
        return list(memberships.values())
