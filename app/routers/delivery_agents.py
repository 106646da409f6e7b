# app/routers/delivery_agents.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin, require_agent, require_roles, require_staff
from app.database import get_session
from app.models.user import User
from app.repositories.delivery_repo import DeliveryRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.delivery import (
    AgentCreate,
    AgentRead,
    AgentUpdate,
    AssignmentRequest,
    AssignmentResult,
    DeliveryHistory,
    DeliveryStatusUpdate,
    LocationUpdate,
)
from app.services.delivery_service import DeliveryService

router = APIRouter(prefix="/delivery-agents", tags=["Delivery agents"])

delivery_repo = DeliveryRepository()
order_repo = OrderRepository()
service = DeliveryService(delivery_repo, order_repo)

require_agent_or_staff = require_roles("deliveryAgent", "vendor", "admin")


# -------- Admin / vendor endpoints --------


@router.post(
    "",
    response_model=AgentRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_agent(
    payload: AgentCreate,
    session: Session = Depends(get_session),
):
    """
    Register a delivery agent (admin only).

    `user_id` links the profile to a login account with role deliveryAgent.
    """
    return service.create_agent(session, payload)


@router.get(
    "",
    response_model=list[AgentRead],
    dependencies=[Depends(require_staff)],
)
def list_agents(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List delivery agents with the orders they currently hold.
    """
    return service.list_agents(session, skip, limit)


@router.post(
    "/{agent_id}/assign",
    response_model=AssignmentResult,
    dependencies=[Depends(require_staff)],
)
def assign_order(
    agent_id: uuid.UUID,
    payload: AssignmentRequest,
    session: Session = Depends(get_session),
):
    """
    Put an order into the agent's assignment set.

    The order's status fields are not changed; the agent accepts it next.
    """
    return service.assign(session, agent_id, payload.order_id)


@router.delete(
    "/{agent_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_agent(
    agent_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Remove a delivery agent without active deliveries (admin only).
    """
    service.delete_agent(session, agent_id)
    return None


# -------- Agent endpoints --------


@router.get("/{agent_id}", response_model=AgentRead)
def get_agent(
    agent_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_agent_or_staff),
):
    """
    Get an agent profile. Agents may only read their own.
    """
    return service.get_agent(session, agent_id, current_user)


@router.put("/{agent_id}", response_model=AgentRead)
def update_agent(
    agent_id: uuid.UUID,
    payload: AgentUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_agent),
):
    """
    Update the caller's own agent profile (name / contact).
    """
    return service.update_profile(session, agent_id, current_user, payload)


@router.put("/{agent_id}/location", response_model=AgentRead)
def update_location(
    agent_id: uuid.UUID,
    payload: LocationUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_agent),
):
    """
    Report the caller's current coordinates.
    """
    return service.update_location(session, agent_id, current_user, payload)


@router.post("/{agent_id}/accept", response_model=AssignmentResult)
def accept_order(
    agent_id: uuid.UUID,
    payload: AssignmentRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_agent),
):
    """
    Take a pending order; it goes out_for_delivery.
    """
    return service.accept(session, agent_id, payload.order_id, current_user)


@router.put("/{agent_id}/status", response_model=AssignmentResult)
def update_delivery_status(
    agent_id: uuid.UUID,
    payload: DeliveryStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_agent),
):
    """
    Move a held order to out_for_delivery or delivered.

    delivered also completes the order and releases it from the agent.
    """
    return service.update_status(session, agent_id, current_user, payload)


@router.get("/{agent_id}/history", response_model=DeliveryHistory)
def delivery_history(
    agent_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_agent),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    """
    Paginated delivered orders among the caller's held orders.
    """
    return service.history(session, agent_id, current_user, page, page_size)
