import logging
import uuid

from sqlmodel import Session

from app.core.errors import InvalidInputError, NotFoundError
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserCreate, UserUpdate, UserRoleUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Profile and role management.

    Users are provisioned by the auth dependency; this service never
    creates or deletes rows. Roles are only changed by admins, and a
    vendor or delivery agent profile is created separately once the
    matching role has been granted.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def _rename(self, session: Session, user: User, name: str | None) -> User:
        if name is not None:
            user.name = name
        return self.repo.update(session, user)

    # ----- Self profile -----

    def get_me(self, current_user: User) -> User:
        return current_user

    def create_me(self, session: Session, current_user: User, payload: UserCreate) -> User:
        """
        Profile completion after sign-up. Email comes from the identity
        token; a different one in the payload is rejected.
        """
        if payload.email and payload.email != current_user.email:
            raise InvalidInputError("Email cannot be changed")
        return self._rename(session, current_user, payload.name)

    def update_me(self, session: Session, current_user: User, payload: UserUpdate) -> User:
        return self._rename(session, current_user, payload.name)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        role: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[User]:
        return self.repo.list_users(session, role=role, skip=skip, limit=limit)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        user = self.repo.get_by_id(session, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_role(self, session: Session, user_id: uuid.UUID, payload: UserRoleUpdate) -> User:
        user = self.get_user(session, user_id)
        previous = user.role
        user.role = payload.role
        user = self.repo.update(session, user)

        logger.info("User %s role %s -> %s", user.id, previous, user.role)
        return user
