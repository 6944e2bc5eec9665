# connectors/database_connector.py
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from boards_core.connectors.base import PlatformConnector
from boards_core.errors import NotFoundError
from boards_core.models.users import ChannelMember, DirectPost, TeamMember, User
from boards_core.utils import get_millis


class DatabaseConnector(PlatformConnector):
    def __init__(self, engine: Engine):
        """
        Initialize the connector over the host platform tables.

        Args:
            engine (Engine): engine bound to the database that holds the
                Users, ChannelMembers and TeamMembers tables
        """
        self.engine = engine
        self.logger = logging.getLogger(__name__)

    def get_user_by_id(self, user_id: str) -> User:
        with Session(self.engine) as session:
            user = session.get(User, user_id)
        if user is None:
            raise NotFoundError("user")
        return user

    def get_channel_member(self, channel_id: str, user_id: str) -> ChannelMember:
        with Session(self.engine) as session:
            member = session.get(ChannelMember, (channel_id, user_id))
        if member is None:
            raise NotFoundError("channel member")
        return member

    def get_team_member(self, team_id: str, user_id: str) -> TeamMember:
        with Session(self.engine) as session:
            member = session.get(TeamMember, (team_id, user_id))
        # A member who left the team keeps the row with delete_at set
        if member is None or member.delete_at != 0:
            raise NotFoundError("team member")
        return member

    def ensure_bot(self, username: str) -> str:
        """
        Look up the bot account by username, creating it when missing.

        Returns:
            str: The bot's user ID.

        Raises:
            SQLAlchemyError: If the lookup or the insert fails.
        """
        try:
            with Session(self.engine) as session:
                statement = select(User).where(User.username == username, User.is_bot == True)  # noqa: E712
                bot = session.exec(statement).first()
                if bot:
                    return bot.id

                bot = User(id=f"bot-{username}", username=username, is_bot=True, create_at=get_millis())
                session.add(bot)
                session.commit()
                self.logger.info(f"Created bot account {username}")
                return bot.id
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to ensure bot account {username}: {str(e)}")
            raise

    def send_direct_message(self, sender_id: str, recipient_id: str, message: str) -> None:
        try:
            with Session(self.engine) as session:
                session.add(
                    DirectPost(
                        sender_id=sender_id,
                        recipient_id=recipient_id,
                        message=message,
                        create_at=get_millis(),
                    )
                )
                session.commit()
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to send direct message to {recipient_id}: {str(e)}")
            raise
