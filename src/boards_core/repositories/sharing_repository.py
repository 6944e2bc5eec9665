# repositories/sharing_repository.py
from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from boards_core.database import use_session
from boards_core.models.sharing import Sharing


class SharingRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def get_sharing(self, board_id: str, session: Optional[Session] = None) -> Optional[Sharing]:
        with use_session(self.engine, session) as s:
            return s.get(Sharing, board_id)

    def upsert_sharing(self, session: Session, sharing: Sharing) -> Sharing:
        return session.merge(sharing)

    def delete_sharing_for_boards(self, session: Session, board_ids: List[str]) -> None:
        statement = select(Sharing).where(col(Sharing.board_id).in_(board_ids))
        for sharing in session.exec(statement).all():
            session.delete(sharing)
