# connectors/base.py
from abc import ABC, abstractmethod

from boards_core.models.users import ChannelMember, TeamMember, User


class PlatformConnector(ABC):
    """Base abstract class for the host platform services the boards core consumes"""

    @abstractmethod
    def get_user_by_id(self, user_id: str) -> User:
        """Return the user, raising NotFoundError when it does not exist"""
        pass

    @abstractmethod
    def get_channel_member(self, channel_id: str, user_id: str) -> ChannelMember:
        """Return the channel membership, raising NotFoundError when the user is not a member"""
        pass

    @abstractmethod
    def get_team_member(self, team_id: str, user_id: str) -> TeamMember:
        """Return the team membership, raising NotFoundError when the user is not a member"""
        pass

    @abstractmethod
    def ensure_bot(self, username: str) -> str:
        """Create the bot account if needed and return its user ID"""
        pass

    @abstractmethod
    def send_direct_message(self, sender_id: str, recipient_id: str, message: str) -> None:
        """Post a direct message from one user to another"""
        pass
