import pytest

from app.core.errors import ForbiddenError, InvalidInputError, InvalidStateError
from app.models.order import Order
from app.models.user import User
from app.repositories.delivery_repo import DeliveryRepository
from app.schemas.delivery import AgentCreate, DeliveryStatusUpdate, LocationUpdate


@pytest.fixture
def agent_and_user(session, make_agent):
    agent = make_agent()
    return agent, session.get(User, agent.user_id)


def test_accept_moves_order_out_for_delivery(session, delivery_service, placed_order, agent_and_user):
    order, _, _, _ = placed_order
    agent, agent_user = agent_and_user

    result = delivery_service.accept(session, agent.id, order.id, agent_user)

    assert result.order.status == "out_for_delivery"
    assert result.order.delivery_status == "out_for_delivery"
    assert result.agent.current_orders == [order.id]


def test_delivered_removes_order_from_set(session, delivery_service, placed_order, agent_and_user):
    order, _, _, _ = placed_order
    agent, agent_user = agent_and_user
    delivery_service.accept(session, agent.id, order.id, agent_user)

    result = delivery_service.update_status(
        session,
        agent.id,
        agent_user,
        DeliveryStatusUpdate(order_id=order.id, status="delivered", notes="Left at door"),
    )

    assert result.order.status == "delivered"
    assert result.order.delivery_status == "delivered"
    assert result.agent.current_orders == []
    assert result.notes == "Left at door"

    with pytest.raises(InvalidStateError) as exc:
        delivery_service.update_status(
            session,
            agent.id,
            agent_user,
            DeliveryStatusUpdate(order_id=order.id, status="delivered"),
        )
    assert exc.value.detail == "Order not assigned to this agent"


def test_update_status_rejects_unknown_value(session, delivery_service, placed_order, agent_and_user):
    order, _, _, _ = placed_order
    agent, agent_user = agent_and_user

    with pytest.raises(InvalidInputError):
        delivery_service.update_status(
            session,
            agent.id,
            agent_user,
            DeliveryStatusUpdate(order_id=order.id, status="pending"),
        )


def test_accept_requires_pending_delivery(session, delivery_service, placed_order, agent_and_user):
    order, _, _, _ = placed_order
    agent, agent_user = agent_and_user
    row = session.get(Order, order.id)
    row.delivery_status = "delivered"
    session.add(row)
    session.commit()

    with pytest.raises(InvalidStateError) as exc:
        delivery_service.accept(session, agent.id, order.id, agent_user)
    assert exc.value.detail == "Order is not available for delivery"


def test_assign_is_idempotent_and_leaves_order_untouched(
    session, delivery_service, placed_order, make_agent
):
    order, _, _, _ = placed_order
    agent = make_agent()

    delivery_service.assign(session, agent.id, order.id)
    result = delivery_service.assign(session, agent.id, order.id)

    assert result.agent.current_orders == [order.id]
    assert result.order.status == "ordered"
    assert result.order.delivery_status == "pending"


def test_order_held_by_one_agent_only(session, delivery_service, placed_order, make_agent):
    order, _, _, _ = placed_order
    first = make_agent()
    second = make_agent()
    delivery_service.assign(session, first.id, order.id)

    with pytest.raises(InvalidStateError) as exc:
        delivery_service.assign(session, second.id, order.id)
    assert exc.value.detail == "Order is already assigned to another agent"


def test_agent_cannot_act_for_another(session, delivery_service, placed_order, make_agent, agent_and_user):
    order, _, _, _ = placed_order
    _, agent_user = agent_and_user
    other = make_agent()

    with pytest.raises(ForbiddenError):
        delivery_service.accept(session, other.id, order.id, agent_user)


def test_remove_from_set_is_exact_match(session, placed_order, make_agent):
    order, _, _, _ = placed_order
    agent = make_agent()
    other = make_agent()
    repo = DeliveryRepository()

    assert repo.add_to_set(session, agent.id, order.id) is True
    assert repo.add_to_set(session, agent.id, order.id) is False
    assert repo.remove_from_set(session, other.id, order.id) is False
    assert repo.in_set(session, agent.id, order.id)
    assert repo.remove_from_set(session, agent.id, order.id) is True
    assert not repo.in_set(session, agent.id, order.id)


def test_history_only_sees_current_set(
    session, delivery_service, order_service, placed_order, agent_and_user
):
    order, _, owner, _ = placed_order
    agent, agent_user = agent_and_user
    delivery_service.assign(session, agent.id, order.id)

    assert delivery_service.history(session, agent.id, agent_user).total == 0

    # Vendor-side completion keeps the order in the set, so it shows up.
    order_service.advance_status(session, order.id, "delivered", owner)
    history = delivery_service.history(session, agent.id, agent_user)
    assert history.total == 1
    assert history.orders[0].id == order.id


def test_history_misses_agent_completed_delivery(
    session, delivery_service, placed_order, agent_and_user
):
    order, _, _, _ = placed_order
    agent, agent_user = agent_and_user
    delivery_service.accept(session, agent.id, order.id, agent_user)
    delivery_service.update_status(
        session,
        agent.id,
        agent_user,
        DeliveryStatusUpdate(order_id=order.id, status="delivered"),
    )

    assert delivery_service.history(session, agent.id, agent_user).total == 0


def test_agent_profile_crud(session, delivery_service, make_user, placed_order):
    user = make_user("deliveryAgent")
    created = delivery_service.create_agent(
        session, AgentCreate(name="Ravi", contact="555-0101", user_id=user.id)
    )
    assert created.current_orders == []

    with pytest.raises(InvalidStateError):
        delivery_service.create_agent(session, AgentCreate(name="Dup", user_id=user.id))

    moved = delivery_service.update_location(
        session, created.id, user, LocationUpdate(latitude=12.97, longitude=77.59)
    )
    assert (moved.latitude, moved.longitude) == (12.97, 77.59)

    order, _, _, _ = placed_order
    delivery_service.assign(session, created.id, order.id)
    with pytest.raises(InvalidStateError):
        delivery_service.delete_agent(session, created.id)
