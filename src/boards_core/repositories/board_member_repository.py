# repositories/board_member_repository.py
from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from boards_core.database import use_session
from boards_core.models.board_member import BoardMember
from boards_core.models.boards import Board
from boards_core.models.users import ChannelMember, User


class BoardMemberRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_member_for_board(
        self, board_id: str, user_id: str, session: Optional[Session] = None
    ) -> Optional[BoardMember]:
        """
        Get the explicit membership row of a user on a board.

        Returns:
            Optional[BoardMember]: The row, or None when the user has no explicit membership
        """
        with use_session(self.engine, session) as s:
            return s.get(BoardMember, (board_id, user_id))

    def get_members_for_board(self, board_id: str, session: Optional[Session] = None) -> List[BoardMember]:
        statement = select(BoardMember).where(BoardMember.board_id == board_id)
        with use_session(self.engine, session) as s:
            return list(s.exec(statement).all())

    def get_members_for_user(self, user_id: str, session: Optional[Session] = None) -> List[BoardMember]:
        """Explicit rows of a user on boards that are not soft-deleted."""
        statement = (
            select(BoardMember)
            .join(Board, Board.id == BoardMember.board_id)
            .where(BoardMember.user_id == user_id, Board.delete_at == 0)
        )
        with use_session(self.engine, session) as s:
            return list(s.exec(statement).all())

    def get_channel_user_ids(self, channel_id: str, session: Optional[Session] = None) -> List[str]:
        """Members of a channel that may receive synthetic access: no guests, no bots."""
        if not channel_id:
            return []
        statement = (
            select(ChannelMember.user_id)
            .join(User, User.id == ChannelMember.user_id)
            .where(
                ChannelMember.channel_id == channel_id,
                User.is_guest == False,  # noqa: E712
                User.is_bot == False,  # noqa: E712
            )
            .order_by(ChannelMember.user_id)
        )
        with use_session(self.engine, session) as s:
            return list(s.exec(statement).all())

    def get_channel_boards_for_user(self, user_id: str, session: Optional[Session] = None) -> List[Board]:
        """Active boards linked to a channel the user belongs to, for non-guest, non-bot users."""
        statement = (
            select(Board)
            .join(ChannelMember, ChannelMember.channel_id == Board.channel_id)
            .join(User, User.id == ChannelMember.user_id)
            .where(
                ChannelMember.user_id == user_id,
                Board.channel_id != "",
                Board.delete_at == 0,
                User.is_guest == False,  # noqa: E712
                User.is_bot == False,  # noqa: E712
            )
        )
        with use_session(self.engine, session) as s:
            return list(s.exec(statement).all())

    def save_member(self, session: Session, member: BoardMember) -> BoardMember:
        """Insert or replace the explicit row for (board_id, user_id)."""
        return session.merge(member)

    def delete_members_for_boards(self, session: Session, board_ids: List[str]) -> None:
        statement = select(BoardMember).where(col(BoardMember.board_id).in_(board_ids))
        for member in session.exec(statement).all():
            session.delete(member)
