from boards_core.models.permissions import MINIMUM_ROLE_NAMES, Permission, Role
from boards_core.models.boards import Board, BoardBase, BoardPatch, BoardType
from boards_core.models.blocks import Block, BlockBase, BlockPatch, BlockType
from boards_core.models.board_member import BoardMember, Membership, MembershipSource
from boards_core.models.boards_and_blocks import (
    BoardsAndBlocks,
    BoardsAndBlocksCreate,
    DeleteBoardsAndBlocks,
    PatchBoardsAndBlocks,
)
from boards_core.models.category import Category, CategoryBoard
from boards_core.models.sharing import Sharing
from boards_core.models.users import ChannelMember, DirectPost, TeamMember, User

__all__ = [
    "MINIMUM_ROLE_NAMES",
    "Permission",
    "Role",
    "Board",
    "BoardBase",
    "BoardPatch",
    "BoardType",
    "Block",
    "BlockBase",
    "BlockPatch",
    "BlockType",
    "BoardMember",
    "Membership",
    "MembershipSource",
    "BoardsAndBlocks",
    "BoardsAndBlocksCreate",
    "DeleteBoardsAndBlocks",
    "PatchBoardsAndBlocks",
    "Category",
    "CategoryBoard",
    "Sharing",
    "ChannelMember",
    "DirectPost",
    "TeamMember",
    "User",
]
