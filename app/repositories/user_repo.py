# app/repositories/user_repo.py
import uuid

from sqlmodel import Session, select

from app.database import commit_or_raise
from app.models.user import User


class UserRepository:
    """
    Persistence for marketplace accounts. Commits go through
    `commit_or_raise`, so failures surface as StorageError.
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        return session.get(User, user_id)

    def list(self, session: Session, skip: int = 0, limit: int = 50) -> list[User]:
        """Oldest accounts first."""
        stmt = select(User).order_by(User.created_at).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def save(self, session: Session, user: User) -> User:
        """Insert or update, then reload the row."""
        session.add(user)
        commit_or_raise(session)
        session.refresh(user)
        return user

    def delete(self, session: Session, user: User) -> None:
        session.delete(user)
        commit_or_raise(session)
