# repositories/store.py
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from sqlalchemy.engine import Engine
from sqlmodel import Session

from boards_core.database import transaction
from boards_core.errors import BadRequestError
from boards_core.models.blocks import Block, BlockType
from boards_core.models.board_member import BoardMember
from boards_core.models.boards import Board
from boards_core.models.boards_and_blocks import (
    BoardsAndBlocks,
    DeleteBoardsAndBlocks,
    PatchBoardsAndBlocks,
)
from boards_core.models.permissions import Role
from boards_core.repositories.blocks_repository import BlocksRepository
from boards_core.repositories.board_member_repository import BoardMemberRepository
from boards_core.repositories.boards_repository import BoardsRepository
from boards_core.repositories.category_repository import CategoryRepository
from boards_core.repositories.sharing_repository import SharingRepository
from boards_core.utils import IDType, get_millis, new_id, remap_block_references


class Store:
    """Persistence facade for the boards core.

    Reads go straight to the repositories and open their own short-lived
    sessions. Every multi-row write runs inside ``transaction()`` so that a
    failure leaves no partial state behind.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.boards = BoardsRepository(engine)
        self.blocks = BlocksRepository(engine)
        self.members = BoardMemberRepository(engine)
        self.sharing = SharingRepository(engine)
        self.categories = CategoryRepository(engine)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        with transaction(self.engine) as session:
            yield session

    # Reads

    def get_board(self, board_id: str) -> Board:
        return self.boards.get_board(board_id)

    def get_block(self, block_id: str) -> Block:
        return self.blocks.get_block(block_id)

    def get_blocks_by_ids(self, block_ids: List[str]) -> List[Block]:
        return self.blocks.get_blocks_by_ids(block_ids)

    def get_blocks_for_board(self, board_id: str) -> List[Block]:
        return self.blocks.get_blocks_for_board(board_id)

    def get_boards_in_team_by_ids(self, team_id: str, board_ids: List[str]) -> List[Board]:
        return self.boards.get_boards_in_team_by_ids(team_id, board_ids)

    def get_member_for_board(self, board_id: str, user_id: str) -> Optional[BoardMember]:
        return self.members.get_member_for_board(board_id, user_id)

    def get_members_for_board(self, board_id: str) -> List[BoardMember]:
        return self.members.get_members_for_board(board_id)

    def get_members_for_user(self, user_id: str) -> List[BoardMember]:
        return self.members.get_members_for_user(user_id)

    def find_boards(self, statement) -> List[Board]:
        return self.boards.find_boards(statement)

    # Single-row writes

    def insert_board(self, board: Board, user_id: str) -> Board:
        with self.transaction() as session:
            return self.boards.insert_board(session, board, user_id)

    def insert_block(self, block: Block, user_id: str) -> Block:
        with self.transaction() as session:
            return self.blocks.insert_block(session, block, user_id)

    def save_member(self, member: BoardMember) -> BoardMember:
        with self.transaction() as session:
            return self.members.save_member(session, member)

    # Batch writes

    def create_boards_and_blocks(
        self, bab: BoardsAndBlocks, user_id: str, add_admin: bool = False
    ) -> Tuple[BoardsAndBlocks, List[BoardMember]]:
        """
        Insert every board, then every block, then optionally an admin row per
        board for ``user_id``, in one transaction.

        Returns:
            Tuple[BoardsAndBlocks, List[BoardMember]]: The stored entities and the admin rows
        """
        now = get_millis()
        with self.transaction() as session:
            boards = [
                self.boards.insert_board(session, board.clone(), user_id, now)
                for board in bab.boards
            ]
            # Boards must exist before their blocks are checked
            session.flush()
            blocks = [
                self.blocks.insert_block(session, block.clone(), user_id, now)
                for block in bab.blocks
            ]
            members = []
            if add_admin:
                members = [
                    self.members.save_member(session, BoardMember.from_role(board.id, user_id, Role.ADMIN))
                    for board in boards
                ]
        return BoardsAndBlocks(boards=boards, blocks=blocks), members

    def patch_boards_and_blocks(self, pbab: PatchBoardsAndBlocks, user_id: str) -> BoardsAndBlocks:
        """
        Apply board and block patches in one transaction.

        Raises:
            NotFoundError: If a board or block does not exist
            BadRequestError: If a block does not belong to one of the patched boards
            SizeLimitExceededError: If a patched block's fields grow past the limit
        """
        now = get_millis()
        with self.transaction() as session:
            blocks_by_id: Dict[str, Block] = {}
            for block_id in pbab.block_ids:
                block = self.blocks.get_block(block_id, session=session)
                if block.board_id not in pbab.board_ids:
                    raise BadRequestError(
                        f"block {block_id} doesn't belong to any of the boards in the patch request"
                    )
                blocks_by_id[block_id] = block

            boards = [self.boards.get_board(board_id, session=session) for board_id in pbab.board_ids]

            # Check sizes on scratch copies before touching any loaded row
            for block_id, block_patch in zip(pbab.block_ids, pbab.block_patches):
                block_patch.patch(blocks_by_id[block_id].clone()).is_valid()

            patched_boards = []
            for board, board_patch in zip(boards, pbab.board_patches):
                board_patch.patch(board)
                patched_boards.append(self.boards.update_board(session, board, user_id, now))

            patched_blocks = []
            for block_id, block_patch in zip(pbab.block_ids, pbab.block_patches):
                block = block_patch.patch(blocks_by_id[block_id])
                patched_blocks.append(self.blocks.update_block(session, block, user_id, now))

        return BoardsAndBlocks(boards=patched_boards, blocks=patched_blocks)

    def delete_boards_and_blocks(self, dbab: DeleteBoardsAndBlocks, user_id: str) -> None:
        """
        Soft-delete the listed boards with all of their blocks and drop the rows
        that hang off them (members, sharing, category links), in one transaction.

        Raises:
            NotFoundError: If a board or block does not exist
            BadRequestError: If a block does not belong to one of the listed boards
        """
        now = get_millis()
        with self.transaction() as session:
            boards = [self.boards.get_board(board_id, session=session) for board_id in dbab.boards]

            blocks = []
            for block_id in dbab.blocks:
                block = self.blocks.get_block(block_id, session=session)
                if block.board_id not in dbab.boards:
                    raise BadRequestError(
                        f"block {block_id} doesn't belong to any of the boards in the delete request"
                    )
                blocks.append(block)

            for block in blocks:
                self.blocks.delete_block(session, block, user_id, now)

            for board in boards:
                self.blocks.delete_blocks_for_board(session, board.id, user_id, now)
                self.boards.delete_board(session, board, user_id, now)

            self.members.delete_members_for_boards(session, dbab.boards)
            self.sharing.delete_sharing_for_boards(session, dbab.boards)
            self.categories.delete_category_boards_for_boards(session, dbab.boards)

    def undelete_board(self, board_id: str, user_id: str) -> Tuple[Board, List[Block]]:
        now = get_millis()
        with self.transaction() as session:
            board = self.boards.get_deleted_board(board_id, session=session)
            deleted_at = board.delete_at
            self.boards.undelete_board(session, board, user_id, now)
            blocks = self.blocks.undelete_blocks_deleted_at(session, board_id, deleted_at, user_id, now)

            # Membership rows were dropped on delete; the restorer gets admin back
            if self.members.get_member_for_board(board_id, user_id, session=session) is None:
                self.members.save_member(session, BoardMember.from_role(board_id, user_id, Role.ADMIN))
        return board, blocks

    def undelete_block(self, block_id: str, user_id: str) -> Block:
        now = get_millis()
        with self.transaction() as session:
            block = self.blocks.get_deleted_block(block_id, session=session)
            # The board has to be active for its block to come back
            self.boards.get_board(block.board_id, session=session)
            return self.blocks.undelete_block(session, block, user_id, now)

    def duplicate_board(
        self, board_id: str, user_id: str, team_id: str = "", as_template: bool = False
    ) -> Tuple[BoardsAndBlocks, List[BoardMember]]:
        """
        Copy a board and its content blocks under fresh IDs in one transaction.

        Comment blocks and soft-deleted blocks are left behind. Parent and
        ordering references inside the copied blocks follow the new IDs.
        """
        now = get_millis()
        with self.transaction() as session:
            source = self.boards.get_board(board_id, session=session)
            source_blocks = [
                block
                for block in self.blocks.get_blocks_for_board(board_id, session=session)
                if block.type != BlockType.COMMENT.value
            ]

            new_board_id = new_id(IDType.BOARD)
            id_map = {source.id: new_board_id}
            for block in source_blocks:
                id_map[block.id] = new_id(IDType.BLOCK)

            board = source.clone(
                id=new_board_id,
                team_id=team_id or source.team_id,
                channel_id="",
                is_template=as_template,
            )
            self.boards.insert_board(session, board, user_id, now)
            session.flush()

            blocks = []
            for block in source_blocks:
                duplicate = block.clone(
                    id=id_map[block.id],
                    board_id=new_board_id,
                    parent_id=id_map.get(block.parent_id, block.parent_id),
                    fields=remap_block_references(block.fields or {}, id_map),
                )
                blocks.append(self.blocks.insert_block(session, duplicate, user_id, now))

            member = self.members.save_member(session, BoardMember.from_role(new_board_id, user_id, Role.ADMIN))

        return BoardsAndBlocks(boards=[board], blocks=blocks), [member]

