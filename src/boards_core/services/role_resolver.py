# services/role_resolver.py
from boards_core.connectors.base import PlatformConnector
from boards_core.errors import NotFoundError
from boards_core.models.board_member import Membership, MembershipSource
from boards_core.models.boards import Board, BoardType
from boards_core.models.permissions import Role
from boards_core.repositories.store import Store

SYSTEM_USER_ID = "system"


class RoleResolver:
    """Works out what access a user has on a board.

    An explicit BoardMember row always wins and is returned as stored. Without
    one, access may be derived from the board's linked channel (editor) or,
    for open template boards, from team membership (viewer). Derived access
    is raised to the board's minimum role and is never persisted.
    """

    def __init__(self, store: Store, connector: PlatformConnector):
        self.store = store
        self.connector = connector

    def resolve(self, user_id: str, board_id: str) -> Membership:
        """
        Resolve the effective membership of a user on a board.

        Returns:
            Membership: The explicit or synthetic membership

        Raises:
            NotFoundError: If the board does not exist or the user has no access of any kind
        """
        member = self.store.get_member_for_board(board_id, user_id)
        if member is not None:
            return Membership.explicit(member)

        if user_id == SYSTEM_USER_ID:
            raise NotFoundError("board member")

        user = self.connector.get_user_by_id(user_id)
        if user.is_guest:
            raise NotFoundError("board member")

        board = self.store.get_board(board_id)

        if board.channel_id:
            try:
                self.connector.get_channel_member(board.channel_id, user_id)
                return self._synthetic(board, user_id, Role.EDITOR, MembershipSource.SYNTHETIC_CHANNEL)
            except NotFoundError:
                pass

        if board.type == BoardType.OPEN.value and board.is_template:
            try:
                self.connector.get_team_member(board.team_id, user_id)
                return self._synthetic(board, user_id, Role.VIEWER, MembershipSource.SYNTHETIC_TEAM_TEMPLATE)
            except NotFoundError:
                pass

        raise NotFoundError("board member")

    @staticmethod
    def _synthetic(board: Board, user_id: str, derived: Role, source: MembershipSource) -> Membership:
        return Membership(
            board_id=board.id,
            user_id=user_id,
            role=max(derived, board.minimum_rank),
            source=source,
        )
