# models/users.py
# Tables owned by the host chat platform. The boards core only reads them,
# except for provisioning the service account and posting its messages.
from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "Users"

    id: str = Field(primary_key=True)
    username: str = Field(index=True)
    is_guest: bool = Field(default=False)
    is_bot: bool = Field(default=False)
    create_at: int = Field(default=0)


class ChannelMember(SQLModel, table=True):
    __tablename__ = "ChannelMembers"

    channel_id: str = Field(primary_key=True)
    user_id: str = Field(primary_key=True, index=True)


class TeamMember(SQLModel, table=True):
    __tablename__ = "TeamMembers"

    team_id: str = Field(primary_key=True)
    user_id: str = Field(primary_key=True, index=True)
    delete_at: int = Field(default=0)


class DirectPost(SQLModel, table=True):
    """A direct message posted on behalf of a bot account."""

    __tablename__ = "DirectPosts"

    id: Optional[int] = Field(default=None, primary_key=True)
    sender_id: str = Field(index=True)
    recipient_id: str = Field(index=True)
    message: str
    create_at: int = Field(default=0)
