# repositories/boards_repository.py
from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from boards_core.database import use_session
from boards_core.errors import NotFoundError
from boards_core.models.boards import Board
from boards_core.utils import get_millis


class BoardsRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_board(self, board_id: str, session: Optional[Session] = None) -> Board:
        """
        Get an active board by ID.

        Args:
            board_id (str): The ID of the board

        Returns:
            Board: The board

        Raises:
            NotFoundError: If the board does not exist or is soft-deleted
        """
        with use_session(self.engine, session) as s:
            board = s.get(Board, board_id)
        if board is None or board.is_deleted:
            raise NotFoundError("board")
        return board

    def get_deleted_board(self, board_id: str, session: Optional[Session] = None) -> Board:
        with use_session(self.engine, session) as s:
            board = s.get(Board, board_id)
        if board is None or not board.is_deleted:
            raise NotFoundError("board")
        return board

    def get_boards_in_team_by_ids(
        self, team_id: str, board_ids: List[str], session: Optional[Session] = None
    ) -> List[Board]:
        """Active boards of ``team_id`` among ``board_ids``; unknown IDs are skipped."""
        if not board_ids:
            return []
        statement = select(Board).where(
            Board.team_id == team_id,
            col(Board.id).in_(board_ids),
            Board.delete_at == 0,
        )
        with use_session(self.engine, session) as s:
            return list(s.exec(statement).all())

    def find_boards(self, statement, session: Optional[Session] = None) -> List[Board]:
        with use_session(self.engine, session) as s:
            return list(s.exec(statement).all())

    def insert_board(self, session: Session, board: Board, user_id: str, now: Optional[int] = None) -> Board:
        now = now or get_millis()
        board.created_by = user_id
        board.modified_by = user_id
        board.create_at = now
        board.update_at = now
        board.delete_at = 0
        session.add(board)
        return board

    def update_board(self, session: Session, board: Board, user_id: str, now: Optional[int] = None) -> Board:
        board.modified_by = user_id
        board.update_at = now or get_millis()
        session.add(board)
        return board

    def delete_board(self, session: Session, board: Board, user_id: str, now: int) -> None:
        board.modified_by = user_id
        board.update_at = now
        board.delete_at = now
        session.add(board)

    def undelete_board(self, session: Session, board: Board, user_id: str, now: int) -> Board:
        board.modified_by = user_id
        board.update_at = now
        board.delete_at = 0
        session.add(board)
        return board
