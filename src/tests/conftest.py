import pytest
from sqlmodel import Session

from boards_core.connectors.database_connector import DatabaseConnector
from boards_core.database import create_db_and_tables, create_db_engine
from boards_core.models import Block, Board, BoardsAndBlocks, ChannelMember, TeamMember, User
from boards_core.repositories.store import Store
from boards_core.services.boards_and_blocks_service import BatchMutationEngine
from boards_core.services.permission_service import PermissionService
from boards_core.services.role_resolver import RoleResolver

TEAM_ID = "team-1"
OTHER_TEAM_ID = "team-2"
CHANNEL_ID = "channel-1"


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'boards.db'}", echo=False)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture(autouse=True)
def seed_platform(engine):
    """Host platform rows shared by every test.

    alice: team-1 and channel-1 member
    bob: team-1 member only
    dan: team-1 and channel-1 member
    guest: guest account, team-1 and channel-1 member
    carol: no team
    leaver: left team-1
    helper-bot: bot account in channel-1
    """
    with Session(engine) as session:
        session.add_all(
            [
                User(id="alice", username="alice"),
                User(id="bob", username="bob"),
                User(id="dan", username="dan"),
                User(id="guest", username="guest", is_guest=True),
                User(id="carol", username="carol"),
                User(id="leaver", username="leaver"),
                User(id="helper-bot", username="helper", is_bot=True),
                TeamMember(team_id=TEAM_ID, user_id="alice"),
                TeamMember(team_id=TEAM_ID, user_id="bob"),
                TeamMember(team_id=TEAM_ID, user_id="dan"),
                TeamMember(team_id=TEAM_ID, user_id="guest"),
                TeamMember(team_id=TEAM_ID, user_id="leaver", delete_at=1000),
                TeamMember(team_id=OTHER_TEAM_ID, user_id="alice"),
                ChannelMember(channel_id=CHANNEL_ID, user_id="alice"),
                ChannelMember(channel_id=CHANNEL_ID, user_id="dan"),
                ChannelMember(channel_id=CHANNEL_ID, user_id="guest"),
                ChannelMember(channel_id=CHANNEL_ID, user_id="helper-bot"),
            ]
        )
        session.commit()


@pytest.fixture
def store(engine):
    return Store(engine)


@pytest.fixture
def connector(engine):
    return DatabaseConnector(engine)


@pytest.fixture
def resolver(store, connector):
    return RoleResolver(store, connector)


@pytest.fixture
def permissions(store, connector, resolver):
    return PermissionService(store, connector, resolver)


@pytest.fixture
def mutations(store):
    return BatchMutationEngine(store)


def make_board(board_id, **kwargs):
    kwargs.setdefault("team_id", TEAM_ID)
    kwargs.setdefault("title", f"Board {board_id}")
    return Board(id=board_id, **kwargs)


def make_block(block_id, board_id, **kwargs):
    kwargs.setdefault("type", "card")
    kwargs.setdefault("title", f"Card {block_id}")
    return Block(id=block_id, board_id=board_id, **kwargs)


@pytest.fixture
def create_board(mutations):
    """Create one board, optionally with blocks, without any membership rows."""

    def _create(board_id, blocks=(), user_id="alice", **kwargs):
        bab = BoardsAndBlocks(boards=[make_board(board_id, **kwargs)], blocks=list(blocks))
        created = mutations.create_boards_and_blocks(bab, user_id)
        return created.boards[0]

    return _create
