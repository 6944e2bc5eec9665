# services/boards_and_blocks_service.py
from typing import List, Tuple

from loguru import logger

from boards_core.errors import BadRequestError
from boards_core.models.blocks import Block
from boards_core.models.board_member import BoardMember
from boards_core.models.boards import Board
from boards_core.models.boards_and_blocks import (
    BoardsAndBlocks,
    DeleteBoardsAndBlocks,
    PatchBoardsAndBlocks,
    validate_boards_and_blocks,
    validate_delete_boards_and_blocks,
    validate_patch_boards_and_blocks,
)
from boards_core.repositories.store import Store


class BatchMutationEngine:
    """Applies multi-board, multi-block changes as single units.

    Every request is validated in full before the store is touched, and the
    write itself is one store transaction: either all rows change or none do.
    """

    def __init__(self, store: Store):
        self.store = store

    def create_boards_and_blocks(self, bab: BoardsAndBlocks, user_id: str) -> BoardsAndBlocks:
        """
        Create a set of boards and their blocks.

        Args:
            bab (BoardsAndBlocks): Boards and blocks to create. Every block must
                belong to one of the boards in the set.
            user_id (str): The ID of the creating user

        Returns:
            BoardsAndBlocks: The stored boards and blocks

        Raises:
            BadRequestError: If the set is malformed
            SizeLimitExceededError: If a title or fields payload is too large
        """
        self._validate_create(bab)
        created, _ = self.store.create_boards_and_blocks(bab, user_id)
        logger.info(f"Created {len(created.boards)} boards and {len(created.blocks)} blocks for {user_id}")
        return created

    def create_boards_and_blocks_with_admin(
        self, bab: BoardsAndBlocks, user_id: str
    ) -> Tuple[BoardsAndBlocks, List[BoardMember]]:
        self._validate_create(bab)
        created, members = self.store.create_boards_and_blocks(bab, user_id, add_admin=True)
        logger.info(
            f"Created {len(created.boards)} boards and {len(created.blocks)} blocks "
            f"with {user_id} as admin"
        )
        return created, members

    def patch_boards_and_blocks(self, pbab: PatchBoardsAndBlocks, user_id: str) -> BoardsAndBlocks:
        try:
            validate_patch_boards_and_blocks(pbab)
        except BadRequestError as e:
            logger.warning(f"Rejected patch request from {user_id}: {e}")
            raise

        patched = self.store.patch_boards_and_blocks(pbab, user_id)
        logger.info(f"Patched boards {pbab.board_ids} and {len(pbab.block_ids)} blocks")
        return patched

    def delete_boards_and_blocks(self, dbab: DeleteBoardsAndBlocks, user_id: str) -> None:
        try:
            validate_delete_boards_and_blocks(dbab)
        except BadRequestError as e:
            logger.warning(f"Rejected delete request from {user_id}: {e}")
            raise

        self.store.delete_boards_and_blocks(dbab, user_id)
        logger.info(f"Deleted boards {dbab.boards} and {len(dbab.blocks)} blocks")

    def undelete_board(self, board_id: str, user_id: str) -> Board:
        board, blocks = self.store.undelete_board(board_id, user_id)
        logger.info(f"Restored board {board_id} with {len(blocks)} blocks")
        return board

    def undelete_block(self, block_id: str, user_id: str) -> Block:
        block = self.store.undelete_block(block_id, user_id)
        logger.info(f"Restored block {block_id} on board {block.board_id}")
        return block

    def duplicate_board(
        self, board_id: str, user_id: str, team_id: str = "", as_template: bool = False
    ) -> Tuple[BoardsAndBlocks, List[BoardMember]]:
        """
        Copy a board and its blocks under new IDs.

        The copy is unlinked from any channel and the caller becomes its only
        member, as admin.

        Raises:
            NotFoundError: If the source board does not exist
        """
        duplicated, members = self.store.duplicate_board(board_id, user_id, team_id, as_template)
        logger.info(f"Duplicated board {board_id} as {duplicated.boards[0].id}")
        return duplicated, members

    def _validate_create(self, bab: BoardsAndBlocks) -> None:
        try:
            validate_boards_and_blocks(bab)
        except BadRequestError as e:
            logger.warning(f"Rejected create request: {e}")
            raise
