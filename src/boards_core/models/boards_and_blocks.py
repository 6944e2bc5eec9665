# models/boards_and_blocks.py
from typing import List

from sqlmodel import Field, SQLModel

from boards_core.errors import BadRequestError
from boards_core.models.blocks import Block, BlockBase, BlockPatch
from boards_core.models.boards import Board, BoardBase, BoardPatch
from boards_core.utils import find_duplicates


class BoardsAndBlocks(SQLModel):
    """A set of boards and blocks created, returned or duplicated together."""

    boards: List[Board] = Field(default_factory=list)
    blocks: List[Block] = Field(default_factory=list)


class BoardsAndBlocksCreate(SQLModel):
    """Request body for creating boards and blocks."""

    boards: List[BoardBase] = Field(default_factory=list)
    blocks: List[BlockBase] = Field(default_factory=list)

    def to_boards_and_blocks(self) -> BoardsAndBlocks:
        return BoardsAndBlocks(
            boards=[Board.model_validate(board) for board in self.boards],
            blocks=[Block.model_validate(block) for block in self.blocks],
        )


class PatchBoardsAndBlocks(SQLModel):
    board_ids: List[str] = Field(default_factory=list)
    board_patches: List[BoardPatch] = Field(default_factory=list)
    block_ids: List[str] = Field(default_factory=list)
    block_patches: List[BlockPatch] = Field(default_factory=list)


class DeleteBoardsAndBlocks(SQLModel):
    boards: List[str] = Field(default_factory=list)
    blocks: List[str] = Field(default_factory=list)


def validate_boards_and_blocks(bab: BoardsAndBlocks) -> None:
    """Structural checks for a create request. Touches no storage.

    Raises:
        BadRequestError: the bundle is empty, IDs are missing or repeated,
            boards span several teams, or a block points at a board that is
            not part of the bundle
        SizeLimitExceededError: a title or fields payload is too large
    """
    if not bab.boards:
        raise BadRequestError("at least one board is required")

    board_ids = set()
    team_id = None
    for board in bab.boards:
        board.is_valid()
        if team_id is None:
            team_id = board.team_id
        elif board.team_id != team_id:
            raise BadRequestError("all boards must belong to the same team")
        board_ids.add(board.id)

    duplicates = find_duplicates(board.id for board in bab.boards)
    if duplicates:
        raise BadRequestError(f"duplicate board IDs: {', '.join(duplicates)}")

    duplicates = find_duplicates(block.id for block in bab.blocks)
    if duplicates:
        raise BadRequestError(f"duplicate block IDs: {', '.join(duplicates)}")

    for block in bab.blocks:
        block.is_valid()
        if block.board_id not in board_ids:
            raise BadRequestError(
                f"block {block.id} belongs to board {block.board_id}, which is not part of the request"
            )


def validate_patch_boards_and_blocks(pbab: PatchBoardsAndBlocks) -> None:
    """Structural checks for a patch request. Touches no storage."""
    if not pbab.board_ids and not pbab.block_ids and not pbab.board_patches and not pbab.block_patches:
        raise BadRequestError("the patch request is empty")

    if len(pbab.board_ids) != len(pbab.board_patches):
        raise BadRequestError("board IDs and board patches must have the same length")

    if len(pbab.block_ids) != len(pbab.block_patches):
        raise BadRequestError("block IDs and block patches must have the same length")

    duplicates = find_duplicates(pbab.board_ids)
    if duplicates:
        raise BadRequestError(f"duplicate board IDs: {', '.join(duplicates)}")

    duplicates = find_duplicates(pbab.block_ids)
    if duplicates:
        raise BadRequestError(f"duplicate block IDs: {', '.join(duplicates)}")

    for board_patch in pbab.board_patches:
        board_patch.is_valid()
    for block_patch in pbab.block_patches:
        block_patch.is_valid()


def validate_delete_boards_and_blocks(dbab: DeleteBoardsAndBlocks) -> None:
    if not dbab.boards:
        raise BadRequestError("at least one board is required")
