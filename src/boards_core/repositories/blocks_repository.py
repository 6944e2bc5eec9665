# repositories/blocks_repository.py
from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from boards_core.database import use_session
from boards_core.errors import NotFoundError
from boards_core.models.blocks import Block
from boards_core.models.boards import Board
from boards_core.utils import get_millis


class BlocksRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_block(self, block_id: str, session: Optional[Session] = None) -> Block:
        with use_session(self.engine, session) as s:
            block = s.get(Block, block_id)
        if block is None or block.is_deleted:
            raise NotFoundError("block")
        return block

    def get_deleted_block(self, block_id: str, session: Optional[Session] = None) -> Block:
        with use_session(self.engine, session) as s:
            block = s.get(Block, block_id)
        if block is None or not block.is_deleted:
            raise NotFoundError("block")
        return block

    def get_blocks_by_ids(self, block_ids: List[str], session: Optional[Session] = None) -> List[Block]:
        """Active blocks among ``block_ids``. Missing IDs are simply absent from the result."""
        if not block_ids:
            return []
        statement = select(Block).where(col(Block.id).in_(block_ids), Block.delete_at == 0)
        with use_session(self.engine, session) as s:
            return list(s.exec(statement).all())

    def get_blocks_for_board(
        self, board_id: str, session: Optional[Session] = None, include_deleted: bool = False
    ) -> List[Block]:
        statement = select(Block).where(Block.board_id == board_id)
        if not include_deleted:
            statement = statement.where(Block.delete_at == 0)
        statement = statement.order_by(Block.create_at, Block.id)
        with use_session(self.engine, session) as s:
            return list(s.exec(statement).all())

    def insert_block(self, session: Session, block: Block, user_id: str, now: Optional[int] = None) -> Block:
        """
        Stage a new block in ``session``.

        Raises:
            NotFoundError: If the block's board does not exist in this unit of work
        """
        board = session.get(Board, block.board_id)
        if board is None or board.is_deleted:
            raise NotFoundError("board")

        now = now or get_millis()
        block.created_by = user_id
        block.modified_by = user_id
        block.create_at = now
        block.update_at = now
        block.delete_at = 0
        session.add(block)
        return block

    def update_block(self, session: Session, block: Block, user_id: str, now: Optional[int] = None) -> Block:
        block.modified_by = user_id
        block.update_at = now or get_millis()
        session.add(block)
        return block

    def delete_block(self, session: Session, block: Block, user_id: str, now: int) -> None:
        block.modified_by = user_id
        block.update_at = now
        block.delete_at = now
        session.add(block)

    def delete_blocks_for_board(self, session: Session, board_id: str, user_id: str, now: int) -> int:
        blocks = self.get_blocks_for_board(board_id, session=session)
        for block in blocks:
            self.delete_block(session, block, user_id, now)
        return len(blocks)

    def undelete_block(self, session: Session, block: Block, user_id: str, now: int) -> Block:
        block.modified_by = user_id
        block.update_at = now
        block.delete_at = 0
        session.add(block)
        return block

    def undelete_blocks_deleted_at(
        self, session: Session, board_id: str, deleted_at: int, user_id: str, now: int
    ) -> List[Block]:
        """Restore the blocks of a board that were soft-deleted at ``deleted_at``."""
        statement = select(Block).where(Block.board_id == board_id, Block.delete_at == deleted_at)
        blocks = list(session.exec(statement).all())
        for block in blocks:
            self.undelete_block(session, block, user_id, now)
        return blocks
