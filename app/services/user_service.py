# app/services/user_service.py
import logging
import uuid

from sqlmodel import Session

from app.core.errors import InvalidArgumentError, NotFoundError
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserUpdate, UserRoleUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - self profile edits (username only)
      - admin listing, role changes and deletion
    """

    def __init__(self, repo: UserRepository, cart_repo: CartRepository):
        self.repo = repo
        self.cart_repo = cart_repo

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Currently, only `username` is editable.
        """
        if payload.username is not None:
            current_user.username = payload.username

        return self.repo.save(session, current_user)

    # ----- Admin operations -----

    def list_users(self, session: Session, skip: int, limit: int) -> list[User]:
        """List users with pagination (admin only)."""
        return self.repo.list(session, skip=skip, limit=limit)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id (admin only).

        Raises:
            NotFoundError: if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_role(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change user's role (admin only).

        Role validation is enforced by the schema (Literal).
        """
        user = self.get_user(session, user_id)
        user.role = payload.role
        logger.info("User %s role set to %s", user_id, payload.role)
        return self.repo.save(session, user)

    def delete_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        acting_user: User,
    ) -> None:
        """
        Delete a user and their cart (admin only).
        Admins cannot delete themselves.
        """
        if user_id == acting_user.id:
            raise InvalidArgumentError("Admins cannot delete their own account")

        user = self.get_user(session, user_id)
        self.cart_repo.delete_for_owner(session, user.id)
        self.repo.delete(session, user)
        logger.info("User %s deleted by %s", user_id, acting_user.id)
