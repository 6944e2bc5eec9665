# boards_core/routers/boards_and_blocks_router.py
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger
from sqlalchemy.exc import IntegrityError

from boards_core.authentication import verify_token
from boards_core.errors import BadRequestError, NotFoundError
from boards_core.models.boards_and_blocks import (
    BoardsAndBlocksCreate,
    DeleteBoardsAndBlocks,
    PatchBoardsAndBlocks,
    validate_patch_boards_and_blocks,
)
from boards_core.models.permissions import Permission
from boards_core.repositories.store import Store
from boards_core.services.boards_and_blocks_service import BatchMutationEngine
from boards_core.services.permission_service import PermissionService
from boards_core.services.service_account import Notifier

router = APIRouter(tags=["Boards and Blocks"])


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_permissions(request: Request) -> PermissionService:
    return request.app.state.permissions


def get_mutations(request: Request) -> BatchMutationEngine:
    return request.app.state.mutations


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def _to_http_error(e: Exception, action: str) -> HTTPException:
    if isinstance(e, BadRequestError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, IntegrityError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Failed to {action}: conflicting data")
    logger.exception(f"Failed to {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}",
    )


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


@router.post("/teams/{team_id}/boards-and-blocks", status_code=status.HTTP_201_CREATED)
async def create_boards_and_blocks(
    team_id: str,
    request_body: BoardsAndBlocksCreate,
    user_id: str,
    permissions: PermissionService = Depends(get_permissions),
    mutations: BatchMutationEngine = Depends(get_mutations),
    token: str = Depends(verify_token),
):
    """Create boards and blocks in one go; the caller becomes admin of every board"""
    try:
        if not permissions.has_permission_to_team(user_id, team_id):
            raise _forbidden("You don't have permission to create boards in this team")

        bab = request_body.to_boards_and_blocks()
        for board in bab.boards:
            if board.team_id != team_id:
                raise BadRequestError(f"board {board.id} does not belong to team {team_id}")

        created, members = mutations.create_boards_and_blocks_with_admin(bab, user_id)
        return {
            "boards": [board.model_dump() for board in created.boards],
            "blocks": [block.model_dump() for block in created.blocks],
            "members": [member.model_dump() for member in members],
        }
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "create boards and blocks")


@router.patch("/teams/{team_id}/boards-and-blocks")
async def patch_boards_and_blocks(
    team_id: str,
    pbab: PatchBoardsAndBlocks,
    user_id: str,
    store: Store = Depends(get_store),
    permissions: PermissionService = Depends(get_permissions),
    mutations: BatchMutationEngine = Depends(get_mutations),
    token: str = Depends(verify_token),
):
    try:
        validate_patch_boards_and_blocks(pbab)

        for board_id, board_patch in zip(pbab.board_ids, pbab.board_patches):
            if not permissions.has_permission(user_id, board_id, Permission.MANAGE_BOARD_CARDS):
                raise _forbidden(f"You don't have permission to edit board {board_id}")
            if board_patch.type is not None and not permissions.has_permission(
                user_id, board_id, Permission.MANAGE_BOARD_TYPE
            ):
                raise _forbidden(f"You don't have permission to change the type of board {board_id}")
            if board_patch.minimum_role is not None and not permissions.has_permission(
                user_id, board_id, Permission.MANAGE_BOARD_ROLES
            ):
                raise _forbidden(f"You don't have permission to change the minimum role of board {board_id}")

        in_team = store.get_boards_in_team_by_ids(team_id, pbab.board_ids)
        if len(in_team) != len(set(pbab.board_ids)):
            raise BadRequestError(f"all boards must belong to team {team_id}")

        patched = mutations.patch_boards_and_blocks(pbab, user_id)
        return {
            "boards": [board.model_dump() for board in patched.boards],
            "blocks": [block.model_dump() for block in patched.blocks],
        }
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "patch boards and blocks")


@router.delete("/boards-and-blocks")
async def delete_boards_and_blocks(
    dbab: DeleteBoardsAndBlocks,
    user_id: str,
    store: Store = Depends(get_store),
    permissions: PermissionService = Depends(get_permissions),
    mutations: BatchMutationEngine = Depends(get_mutations),
    notifier: Notifier = Depends(get_notifier),
    token: str = Depends(verify_token),
):
    """Soft-delete boards and blocks, then let the other board members know"""
    try:
        for board_id in dbab.boards:
            if not permissions.has_permission(user_id, board_id, Permission.DELETE_BOARD):
                raise _forbidden(f"You don't have permission to delete board {board_id}")

        # Membership rows go away with the boards, so collect them first
        notices: Dict[str, Tuple[str, List[str]]] = {}
        for board_id in dbab.boards:
            board = store.get_board(board_id)
            notices[board_id] = board.title or board_id, [
                member.user_id for member in store.get_members_for_board(board_id)
                if member.user_id != user_id
            ]

        mutations.delete_boards_and_blocks(dbab, user_id)

        for title, recipients in notices.values():
            notifier.notify(recipients, f"Board \"{title}\" was deleted")
        return {"boards": dbab.boards, "blocks": dbab.blocks}
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "delete boards and blocks")


@router.post("/boards/{board_id}/duplicate", status_code=status.HTTP_201_CREATED)
async def duplicate_board(
    board_id: str,
    user_id: str,
    as_template: bool = False,
    to_team: Optional[str] = None,
    permissions: PermissionService = Depends(get_permissions),
    mutations: BatchMutationEngine = Depends(get_mutations),
    token: str = Depends(verify_token),
):
    try:
        if not permissions.has_permission(user_id, board_id, Permission.VIEW_BOARD):
            raise _forbidden("You don't have permission to view this board")
        if to_team and not permissions.has_permission_to_team(user_id, to_team):
            raise _forbidden("You don't have permission to create boards in the target team")

        duplicated, members = mutations.duplicate_board(board_id, user_id, to_team or "", as_template)
        return {
            "boards": [board.model_dump() for board in duplicated.boards],
            "blocks": [block.model_dump() for block in duplicated.blocks],
            "members": [member.model_dump() for member in members],
        }
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "duplicate board")


@router.post("/boards/{board_id}/undelete")
async def undelete_board(
    board_id: str,
    user_id: str,
    store: Store = Depends(get_store),
    permissions: PermissionService = Depends(get_permissions),
    mutations: BatchMutationEngine = Depends(get_mutations),
    token: str = Depends(verify_token),
):
    try:
        # A deleted board has no members left; team membership decides
        deleted = store.boards.get_deleted_board(board_id)
        if not permissions.has_permission_to_team(user_id, deleted.team_id):
            raise _forbidden("You don't have permission to restore this board")

        board = mutations.undelete_board(board_id, user_id)
        return board.model_dump()
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "undelete board")


@router.get("/teams/{team_id}/boards")
async def get_boards_for_team(
    team_id: str,
    user_id: str,
    include_public: bool = True,
    permissions: PermissionService = Depends(get_permissions),
    token: str = Depends(verify_token),
):
    """List the team's boards visible to the user"""
    try:
        if not permissions.has_permission_to_team(user_id, team_id):
            raise _forbidden("You don't have access to this team")

        boards = permissions.get_boards_for_user_and_team(user_id, team_id, include_public)
        return [board.model_dump() for board in boards]
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "list boards")


@router.get("/boards/{board_id}/members")
async def get_board_members(
    board_id: str,
    user_id: str,
    permissions: PermissionService = Depends(get_permissions),
    token: str = Depends(verify_token),
):
    """Explicit members plus linked-channel members of a board"""
    try:
        if not permissions.has_permission(user_id, board_id, Permission.VIEW_BOARD):
            raise _forbidden("You don't have permission to view this board")

        return [membership.to_dict() for membership in permissions.get_members_for_board(board_id)]
    except HTTPException:
        raise
    except Exception as e:
        raise _to_http_error(e, "list board members")
