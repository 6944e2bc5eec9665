# repositories/category_repository.py
from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from boards_core.database import use_session
from boards_core.models.category import Category, CategoryBoard


class CategoryRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def create_category(self, session: Session, category: Category) -> Category:
        session.add(category)
        return category

    def add_board_to_category(self, session: Session, category_board: CategoryBoard) -> CategoryBoard:
        return session.merge(category_board)

    def get_category_boards(
        self, user_id: str, team_id: str, session: Optional[Session] = None
    ) -> List[CategoryBoard]:
        statement = (
            select(CategoryBoard)
            .join(Category, Category.id == CategoryBoard.category_id)
            .where(CategoryBoard.user_id == user_id, Category.team_id == team_id)
            .order_by(CategoryBoard.sort_order)
        )
        with use_session(self.engine, session) as s:
            return list(s.exec(statement).all())

    def delete_category_boards_for_boards(self, session: Session, board_ids: List[str]) -> None:
        statement = select(CategoryBoard).where(col(CategoryBoard.board_id).in_(board_ids))
        for category_board in session.exec(statement).all():
            session.delete(category_board)
