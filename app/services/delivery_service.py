import logging
import uuid

from sqlmodel import Session

from app.core.errors import (
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from app.models.delivery_agent import DeliveryAgent
from app.models.order import Order
from app.models.user import User
from app.repositories.delivery_repo import DeliveryRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.delivery import (
    AgentCreate,
    AgentRead,
    AgentUpdate,
    AssignmentResult,
    DeliveryHistory,
    DeliveryStatusUpdate,
    LocationUpdate,
)
from app.schemas.order import OrderRead
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)

AGENT_SETTABLE_STATUSES = {"out_for_delivery", "delivered"}


class DeliveryService:
    """
    Business logic for delivery agents (delivery assignment tracker).

    Each agent owns an assignment set: the orders it is currently
    working on. Membership drives what the agent may update:

      - assign:        admin/vendor puts a pending order into the set
      - accept:        the agent takes a pending order; the order goes
                       out_for_delivery
      - update_status: only for orders in the set; 'delivered' completes
                       the order and drops it from the set
    """

    def __init__(self, delivery_repo: DeliveryRepository, order_repo: OrderRepository):
        self.delivery_repo = delivery_repo
        self.order_repo = order_repo

    # ----- Helpers -----

    def _get_agent(self, session: Session, agent_id: uuid.UUID) -> DeliveryAgent:
        agent = self.delivery_repo.get_by_id(session, agent_id)
        if agent is None:
            raise NotFoundError("Delivery agent not found")
        return agent

    def _get_order(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    @staticmethod
    def _ensure_self(agent: DeliveryAgent, actor: User) -> None:
        if agent.user_id is None or agent.user_id != actor.id:
            raise ForbiddenError()

    def _ensure_assignable(self, session: Session, agent: DeliveryAgent, order: Order) -> None:
        if order.delivery_status != "pending":
            raise InvalidStateError("Order is not available for delivery")

        holder = self.delivery_repo.holder_of(session, order.id)
        if holder is not None and holder.agent_id != agent.id:
            raise InvalidStateError("Order is already assigned to another agent")

    def _to_read(self, session: Session, agent: DeliveryAgent) -> AgentRead:
        return AgentRead(
            id=agent.id,
            user_id=agent.user_id,
            name=agent.name,
            contact=agent.contact,
            latitude=agent.latitude,
            longitude=agent.longitude,
            current_orders=self.delivery_repo.current_order_ids(session, agent.id),
            created_at=agent.created_at,
        )

    def _result(
        self,
        session: Session,
        order: Order,
        agent: DeliveryAgent,
        notes: str | None = None,
    ) -> AssignmentResult:
        return AssignmentResult(
            order=OrderRead.model_validate(order),
            agent=self._to_read(session, agent),
            notes=notes,
        )

    # ----- Agent profiles -----

    def create_agent(self, session: Session, payload: AgentCreate) -> AgentRead:
        if payload.user_id is not None and self.delivery_repo.get_by_user(session, payload.user_id):
            raise InvalidStateError("User already has a delivery agent profile")

        agent = DeliveryAgent(
            user_id=payload.user_id,
            name=payload.name,
            contact=payload.contact,
            latitude=payload.latitude,
            longitude=payload.longitude,
        )
        agent = self.delivery_repo.create(session, agent)
        return self._to_read(session, agent)

    def list_agents(self, session: Session, skip: int = 0, limit: int = 50) -> list[AgentRead]:
        agents = self.delivery_repo.list_agents(session, skip, limit)
        return [self._to_read(session, a) for a in agents]

    def get_agent(self, session: Session, agent_id: uuid.UUID, actor: User) -> AgentRead:
        agent = self._get_agent(session, agent_id)
        if actor.role == "deliveryAgent":
            self._ensure_self(agent, actor)
        return self._to_read(session, agent)

    def update_profile(
        self,
        session: Session,
        agent_id: uuid.UUID,
        actor: User,
        payload: AgentUpdate,
    ) -> AgentRead:
        agent = self._get_agent(session, agent_id)
        self._ensure_self(agent, actor)

        if payload.name is not None:
            agent.name = payload.name
        if payload.contact is not None:
            agent.contact = payload.contact

        agent = self.delivery_repo.update(session, agent)
        return self._to_read(session, agent)

    def update_location(
        self,
        session: Session,
        agent_id: uuid.UUID,
        actor: User,
        payload: LocationUpdate,
    ) -> AgentRead:
        agent = self._get_agent(session, agent_id)
        self._ensure_self(agent, actor)

        agent.latitude = payload.latitude
        agent.longitude = payload.longitude
        agent = self.delivery_repo.update(session, agent)
        return self._to_read(session, agent)

    def delete_agent(self, session: Session, agent_id: uuid.UUID) -> None:
        agent = self._get_agent(session, agent_id)
        if self.delivery_repo.current_order_ids(session, agent.id):
            raise InvalidStateError("Cannot delete agent with active deliveries")
        self.delivery_repo.delete(session, agent)

    # ----- Assignment set -----

    def assign(
        self,
        session: Session,
        agent_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> AssignmentResult:
        """
        Admin/vendor assignment. Adds the order to the agent's set
        (no-op if already there); order fields are not touched.
        """
        agent = self._get_agent(session, agent_id)
        order = self._get_order(session, order_id)
        self._ensure_assignable(session, agent, order)

        if self.delivery_repo.add_to_set(session, agent.id, order.id):
            logger.info("Order %s assigned to agent %s", order.id, agent.id)
        session.commit()

        return self._result(session, order, agent)

    def accept(
        self,
        session: Session,
        agent_id: uuid.UUID,
        order_id: uuid.UUID,
        actor: User,
    ) -> AssignmentResult:
        """
        Agent takes a pending order: it joins the agent's set and goes
        out_for_delivery on both status and delivery_status.
        """
        agent = self._get_agent(session, agent_id)
        self._ensure_self(agent, actor)
        order = self._get_order(session, order_id)
        self._ensure_assignable(session, agent, order)

        self.delivery_repo.add_to_set(session, agent.id, order.id)
        order.delivery_status = "out_for_delivery"
        order.status = "out_for_delivery"
        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)

        logger.info("Agent %s accepted order %s", agent.id, order.id)
        return self._result(session, order, agent)

    def update_status(
        self,
        session: Session,
        agent_id: uuid.UUID,
        actor: User,
        payload: DeliveryStatusUpdate,
    ) -> AssignmentResult:
        """
        Agent moves an order in its set to out_for_delivery or delivered.
        'delivered' also completes the order and removes it from the set.
        """
        if payload.status not in AGENT_SETTABLE_STATUSES:
            raise InvalidInputError("Invalid delivery status")

        agent = self._get_agent(session, agent_id)
        self._ensure_self(agent, actor)
        order = self._get_order(session, payload.order_id)

        if not self.delivery_repo.in_set(session, agent.id, order.id):
            raise InvalidStateError("Order not assigned to this agent")

        order.delivery_status = payload.status
        if payload.status == "delivered":
            order.status = "delivered"
            self.delivery_repo.remove_from_set(session, agent.id, order.id)

        self.order_repo.update_order(session, order)
        session.commit()
        session.refresh(order)

        logger.info("Agent %s set order %s delivery_status=%s", agent.id, order.id, payload.status)
        return self._result(session, order, agent, payload.notes)

    def history(
        self,
        session: Session,
        agent_id: uuid.UUID,
        actor: User,
        page: int = 1,
        page_size: int = 10,
    ) -> DeliveryHistory:
        """
        Delivered orders among the agent's *current* set.

        update_status removes delivered orders from the set, so this only
        lists orders marked delivered by the vendor while still held.
        """
        agent = self._get_agent(session, agent_id)
        self._ensure_self(agent, actor)

        result = paginate(
            session=session,
            query=self.delivery_repo.delivered_in_set_query(agent.id),
            page=page,
            page_size=page_size,
        )
        return DeliveryHistory(
            orders=[OrderRead.model_validate(o) for o in result.items],
            total=result.total,
            total_pages=result.total_pages,
            current_page=result.current_page,
            page_size=result.page_size,
        )
