import uuid

from sqlmodel import Session, select

from app.models.user import User


class UserRepository:
    """
    Data access for the local mirror of Supabase Auth accounts.
    Rows are inserted by the auth dependency, so there is no create here.
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        return session.get(User, user_id)

    def list_users(
        self,
        session: Session,
        *,
        role: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[User]:
        """Newest accounts first, optionally only one role."""
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        stmt = stmt.order_by(User.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def update(self, session: Session, user: User) -> User:
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
