import pytest

from app.core.errors import InvalidInputError
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserCreate, UserRoleUpdate
from app.services.user_service import UserService


@pytest.fixture
def user_service() -> UserService:
    return UserService(UserRepository())


def test_completion_rejects_foreign_email(session, user_service, make_user):
    me = make_user("customer", name="before")

    with pytest.raises(InvalidInputError):
        user_service.create_me(session, me, UserCreate(email="other@example.com", name="Asha"))

    completed = user_service.create_me(session, me, UserCreate(email=me.email, name="Asha"))
    assert completed.name == "Asha"


def test_role_grant_and_filtered_listing(session, user_service, make_user, caplog):
    customer = make_user("customer")
    make_user("admin")

    with caplog.at_level("INFO", logger="app.services.user_service"):
        promoted = user_service.update_role(session, customer.id, UserRoleUpdate(role="vendor"))

    assert promoted.role == "vendor"
    assert "customer -> vendor" in caplog.text
    assert [u.id for u in user_service.list_users(session, role="vendor")] == [customer.id]
