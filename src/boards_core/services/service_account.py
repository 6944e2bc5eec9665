# services/service_account.py
from typing import Iterable, List, Optional

from loguru import logger

from boards_core.connectors.base import PlatformConnector

DEFAULT_BOT_USERNAME = "boards"


class ServiceAccount:
    """Holds the boards bot user ID, provisioning the account on first use.

    Two callers racing on the first access may both call ``ensure_bot``; the
    connector returns the same ID either way.
    """

    def __init__(self, connector: PlatformConnector, username: str = DEFAULT_BOT_USERNAME):
        self.connector = connector
        self.username = username
        self._user_id: Optional[str] = None

    @property
    def user_id(self) -> str:
        if self._user_id is None:
            try:
                self._user_id = self.connector.ensure_bot(self.username)
            except Exception as e:
                logger.error(f"Failed to ensure bot account {self.username}: {e}")
                raise
        return self._user_id


class Notifier:
    def __init__(self, connector: PlatformConnector, service_account: ServiceAccount):
        self.connector = connector
        self.service_account = service_account

    def notify(self, user_ids: Iterable[str], message: str) -> List[str]:
        """
        Send ``message`` as the bot to each user.

        Returns:
            List[str]: The users the message was delivered to
        """
        sender_id = self.service_account.user_id
        delivered = []
        for user_id in user_ids:
            try:
                self.connector.send_direct_message(sender_id, user_id, message)
                delivered.append(user_id)
            except Exception as e:
                logger.error(f"Failed to notify {user_id}: {e}")
        return delivered
