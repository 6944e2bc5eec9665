from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from boards_core.errors import BadRequestError, NotFoundError, SizeLimitExceededError
from boards_core.models import (
    BlockPatch,
    BoardMember,
    BoardPatch,
    BoardsAndBlocks,
    Category,
    CategoryBoard,
    DeleteBoardsAndBlocks,
    PatchBoardsAndBlocks,
    Role,
    Sharing,
)
from boards_core.models.blocks import BLOCK_TITLE_MAX_RUNES
from boards_core.repositories.store import Store
from boards_core.services.boards_and_blocks_service import BatchMutationEngine

from conftest import OTHER_TEAM_ID, make_block, make_board


def test_create_boards_and_blocks(store, mutations):
    bab = BoardsAndBlocks(
        boards=[make_board("b1"), make_board("b2")],
        blocks=[make_block("c1", "b1"), make_block("c2", "b2", parent_id="c1")],
    )

    created = mutations.create_boards_and_blocks(bab, "alice")

    assert [board.id for board in created.boards] == ["b1", "b2"]
    assert [block.id for block in created.blocks] == ["c1", "c2"]
    board = store.get_board("b1")
    assert board.created_by == "alice"
    assert board.modified_by == "alice"
    assert board.create_at > 0
    assert board.update_at == board.create_at
    assert store.get_block("c2").board_id == "b2"
    # No membership rows without the admin variant
    assert store.get_member_for_board("b1", "alice") is None


def test_create_with_admin_adds_one_admin_per_board(store, mutations):
    bab = BoardsAndBlocks(boards=[make_board("b1"), make_board("b2")])

    created, members = mutations.create_boards_and_blocks_with_admin(bab, "alice")

    assert len(created.boards) == 2
    assert sorted(member.board_id for member in members) == ["b1", "b2"]
    for board_id in ("b1", "b2"):
        member = store.get_member_for_board(board_id, "alice")
        assert member.role == Role.ADMIN
        assert member.scheme_admin


def test_create_block_for_board_outside_the_bundle_writes_nothing(store, mutations):
    bab = BoardsAndBlocks(
        boards=[make_board("b1")],
        blocks=[make_block("c1", "b1"), make_block("c2", "elsewhere")],
    )

    with pytest.raises(BadRequestError):
        mutations.create_boards_and_blocks(bab, "alice")

    with pytest.raises(NotFoundError):
        store.get_board("b1")
    for block_id in ("c1", "c2"):
        with pytest.raises(NotFoundError):
            store.get_block(block_id)


@pytest.mark.parametrize(
    "bab",
    [
        BoardsAndBlocks(),
        BoardsAndBlocks(blocks=[make_block("c1", "b1")]),
        BoardsAndBlocks(boards=[make_board("b1"), make_board("b1")]),
        BoardsAndBlocks(boards=[make_board("b1")], blocks=[make_block("c1", "b1"), make_block("c1", "b1")]),
        BoardsAndBlocks(boards=[make_board("b1"), make_board("b2", team_id=OTHER_TEAM_ID)]),
        BoardsAndBlocks(boards=[make_board("")]),
        BoardsAndBlocks(boards=[make_board("b1", team_id="")]),
        BoardsAndBlocks(boards=[make_board("b1", type="X")]),
        BoardsAndBlocks(boards=[make_board("b1", minimum_role="admin")]),
        BoardsAndBlocks(boards=[make_board("b1")], blocks=[make_block("c1", "b1", type="sticker")]),
    ],
)
def test_create_rejects_malformed_bundles(store, mutations, bab):
    with pytest.raises(BadRequestError):
        mutations.create_boards_and_blocks(bab, "alice")

    with pytest.raises(NotFoundError):
        store.get_board("b1")


def test_create_rejects_oversized_title(mutations):
    bab = BoardsAndBlocks(
        boards=[make_board("b1")],
        blocks=[make_block("c1", "b1", title="x" * (BLOCK_TITLE_MAX_RUNES + 1))],
    )

    with pytest.raises(SizeLimitExceededError):
        mutations.create_boards_and_blocks(bab, "alice")


def test_create_accepts_title_at_the_limit(store, mutations):
    bab = BoardsAndBlocks(
        boards=[make_board("b1")],
        blocks=[make_block("c1", "b1", title="x" * BLOCK_TITLE_MAX_RUNES)],
    )

    mutations.create_boards_and_blocks(bab, "alice")

    assert len(store.get_block("c1").title) == BLOCK_TITLE_MAX_RUNES


def test_create_stores_non_ascii_fields(store, mutations):
    text = "中" * 200000
    bab = BoardsAndBlocks(boards=[make_board("b1")], blocks=[make_block("c1", "b1", fields={"text": text})])

    mutations.create_boards_and_blocks(bab, "alice")

    assert store.get_block("c1").fields["text"] == text


def test_patch_accepts_non_ascii_fields(store, mutations, create_board):
    create_board("b1", blocks=[make_block("c1", "b1")])
    pbab = PatchBoardsAndBlocks(
        board_ids=["b1"],
        board_patches=[BoardPatch()],
        block_ids=["c1"],
        block_patches=[BlockPatch(updated_fields={"text": "日本語" * 70000})],
    )

    mutations.patch_boards_and_blocks(pbab, "alice")

    assert store.get_block("c1").fields["text"] == "日本語" * 70000


def test_create_existing_board_rolls_back_everything(store, mutations, create_board):
    create_board("b1")
    bab = BoardsAndBlocks(boards=[make_board("b2"), make_board("b1")], blocks=[make_block("c2", "b2")])

    with pytest.raises(IntegrityError):
        mutations.create_boards_and_blocks(bab, "alice")

    with pytest.raises(NotFoundError):
        store.get_board("b2")
    with pytest.raises(NotFoundError):
        store.get_block("c2")


@pytest.fixture
def board_with_block(create_board):
    create_board("b1", blocks=[make_block("c1", "b1", title="old card", fields={"icon": "x"})], title="old board")


def test_patch_boards_and_blocks(store, mutations, board_with_block):
    pbab = PatchBoardsAndBlocks(
        board_ids=["b1"],
        board_patches=[BoardPatch(title="new board", updated_properties={"color": "red"})],
        block_ids=["c1"],
        block_patches=[BlockPatch(title="new card", updated_fields={"done": True}, deleted_fields=["icon"])],
    )

    patched = mutations.patch_boards_and_blocks(pbab, "bob")

    assert patched.boards[0].title == "new board"
    board = store.get_board("b1")
    block = store.get_block("c1")
    assert board.title == "new board"
    assert board.properties == {"color": "red"}
    assert board.modified_by == "bob"
    assert block.title == "new card"
    assert block.fields == {"done": True}
    assert block.modified_by == "bob"


def test_patch_failure_mid_transaction_keeps_old_state(store, mutations, board_with_block, monkeypatch):
    def fail(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(store.blocks, "update_block", fail)
    pbab = PatchBoardsAndBlocks(
        board_ids=["b1"],
        board_patches=[BoardPatch(title="new board")],
        block_ids=["c1"],
        block_patches=[BlockPatch(title="new card")],
    )

    with pytest.raises(RuntimeError):
        mutations.patch_boards_and_blocks(pbab, "bob")

    assert store.get_board("b1").title == "old board"
    assert store.get_block("c1").title == "old card"


@pytest.mark.parametrize(
    "pbab",
    [
        PatchBoardsAndBlocks(),
        PatchBoardsAndBlocks(board_ids=["b1", "b2"], board_patches=[BoardPatch()]),
        PatchBoardsAndBlocks(board_ids=["b1"], board_patches=[BoardPatch()], block_ids=["c1"]),
        PatchBoardsAndBlocks(board_ids=["b1", "b1"], board_patches=[BoardPatch(), BoardPatch()]),
        PatchBoardsAndBlocks(board_ids=["b1"], board_patches=[BoardPatch(type="X")]),
        PatchBoardsAndBlocks(board_ids=["b1"], board_patches=[BoardPatch(minimum_role="owner")]),
        PatchBoardsAndBlocks(
            board_ids=["b1"],
            board_patches=[BoardPatch()],
            block_ids=["c1"],
            block_patches=[BlockPatch(updated_fields={"bad.key": 1})],
        ),
    ],
)
def test_patch_validation_touches_no_storage(pbab):
    store = MagicMock(spec=Store)
    engine = BatchMutationEngine(store)

    with pytest.raises(BadRequestError):
        engine.patch_boards_and_blocks(pbab, "bob")

    assert store.method_calls == []


def test_patch_block_outside_listed_boards(store, mutations, board_with_block, create_board):
    create_board("b2")
    pbab = PatchBoardsAndBlocks(
        board_ids=["b2"],
        board_patches=[BoardPatch(title="renamed")],
        block_ids=["c1"],
        block_patches=[BlockPatch(title="moved")],
    )

    with pytest.raises(BadRequestError):
        mutations.patch_boards_and_blocks(pbab, "bob")

    assert store.get_board("b2").title == "Board b2"


def test_patch_missing_entities(mutations, board_with_block):
    with pytest.raises(NotFoundError):
        mutations.patch_boards_and_blocks(
            PatchBoardsAndBlocks(board_ids=["missing"], board_patches=[BoardPatch(title="x")]), "bob"
        )
    with pytest.raises(NotFoundError):
        mutations.patch_boards_and_blocks(
            PatchBoardsAndBlocks(
                board_ids=["b1"],
                board_patches=[BoardPatch()],
                block_ids=["missing"],
                block_patches=[BlockPatch(title="x")],
            ),
            "bob",
        )


def test_patch_card_properties(store, mutations, create_board):
    create_board("b1", card_properties=[{"id": "status", "name": "Status"}, {"id": "owner", "name": "Owner"}])
    pbab = PatchBoardsAndBlocks(
        board_ids=["b1"],
        board_patches=[
            BoardPatch(
                updated_card_properties=[{"id": "status", "name": "State"}, {"id": "due", "name": "Due"}],
                deleted_card_properties=["owner"],
            )
        ],
    )

    mutations.patch_boards_and_blocks(pbab, "alice")

    assert store.get_board("b1").card_properties == [
        {"id": "status", "name": "State"},
        {"id": "due", "name": "Due"},
    ]


@pytest.fixture
def two_boards(store, create_board):
    create_board("b1", blocks=[make_block("c1", "b1"), make_block("c2", "b1")])
    create_board("b2", blocks=[make_block("c3", "b2")])


def test_delete_block_of_unlisted_board_changes_nothing(store, mutations, two_boards):
    dbab = DeleteBoardsAndBlocks(boards=["b1"], blocks=["c1", "c3"])

    with pytest.raises(BadRequestError) as exc_info:
        mutations.delete_boards_and_blocks(dbab, "alice")

    assert str(exc_info.value) == "block c3 doesn't belong to any of the boards in the delete request"
    assert store.get_board("b1").delete_at == 0
    for block_id in ("c1", "c2", "c3"):
        assert store.get_block(block_id).delete_at == 0


def test_delete_boards_and_blocks_cascades(engine, store, mutations, two_boards):
    with store.transaction() as session:
        store.members.save_member(session, BoardMember.from_role("b1", "alice", Role.ADMIN))
        store.sharing.upsert_sharing(session, Sharing(board_id="b1", enabled=True, token="k1"))
        store.categories.create_category(session, Category(id="t1", name="Work", user_id="alice", team_id="team-1"))
    with store.transaction() as session:
        store.categories.add_board_to_category(session, CategoryBoard(category_id="t1", board_id="b1", user_id="alice"))

    mutations.delete_boards_and_blocks(DeleteBoardsAndBlocks(boards=["b1"], blocks=["c1"]), "alice")

    with pytest.raises(NotFoundError):
        store.get_board("b1")
    for block_id in ("c1", "c2"):
        with pytest.raises(NotFoundError):
            store.get_block(block_id)
    assert store.get_block("c3").delete_at == 0
    assert store.get_members_for_board("b1") == []
    assert store.sharing.get_sharing("b1") is None
    assert store.categories.get_category_boards("alice", "team-1") == []
    with Session(engine) as session:
        assert session.exec(select(Category)).first() is not None


def test_delete_requires_boards(store, mutations, two_boards):
    with pytest.raises(BadRequestError):
        mutations.delete_boards_and_blocks(DeleteBoardsAndBlocks(blocks=["c1"]), "alice")
    with pytest.raises(NotFoundError):
        mutations.delete_boards_and_blocks(DeleteBoardsAndBlocks(boards=["b1", "missing"]), "alice")

    assert store.get_board("b1").delete_at == 0


def test_undelete_board_restores_blocks_deleted_with_it(store, mutations, two_boards):
    # c2 was removed on its own before the board went away
    with store.transaction() as session:
        block = store.blocks.get_block("c2", session=session)
        store.blocks.delete_block(session, block, "alice", 1000)

    mutations.delete_boards_and_blocks(DeleteBoardsAndBlocks(boards=["b1"]), "alice")
    board = mutations.undelete_board("b1", "bob")

    assert board.delete_at == 0
    assert store.get_board("b1").modified_by == "bob"
    assert store.get_block("c1").delete_at == 0
    with pytest.raises(NotFoundError):
        store.get_block("c2")
    assert store.get_member_for_board("b1", "bob").role == Role.ADMIN


def test_undelete_active_board_is_not_found(mutations, two_boards):
    with pytest.raises(NotFoundError):
        mutations.undelete_board("b1", "alice")


def test_undelete_block(store, mutations, two_boards):
    with store.transaction() as session:
        block = store.blocks.get_block("c2", session=session)
        store.blocks.delete_block(session, block, "alice", 1000)

    restored = mutations.undelete_block("c2", "bob")

    assert restored.delete_at == 0
    assert store.get_block("c2").modified_by == "bob"
    with pytest.raises(NotFoundError):
        mutations.undelete_block("c2", "bob")


def test_undelete_block_of_deleted_board(mutations, two_boards):
    mutations.delete_boards_and_blocks(DeleteBoardsAndBlocks(boards=["b1"]), "alice")

    with pytest.raises(NotFoundError):
        mutations.undelete_block("c1", "alice")
