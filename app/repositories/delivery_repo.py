import uuid

from sqlmodel import Session, select

from app.models.delivery_agent import AgentAssignment, DeliveryAgent
from app.models.order import Order


class DeliveryRepository:
    """
    Data access layer for delivery agents and their assignment sets.

    The assignment set is only mutated through `add_to_set` (idempotent)
    and `remove_from_set` (exact match).

    NOTE:
      - Assignment-set changes are not committed here; Accept and
        UpdateStatus change the order in the same transaction.
      - Agent profile CRUD commits directly.
    """

    # ----- Agents -----

    def get_by_id(self, session: Session, agent_id: uuid.UUID) -> DeliveryAgent | None:
        return session.get(DeliveryAgent, agent_id)

    def get_by_user(self, session: Session, user_id: uuid.UUID) -> DeliveryAgent | None:
        stmt = select(DeliveryAgent).where(DeliveryAgent.user_id == user_id)
        return session.exec(stmt).first()

    def list_agents(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[DeliveryAgent]:
        stmt = (
            select(DeliveryAgent)
            .order_by(DeliveryAgent.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return session.exec(stmt).all()

    def create(self, session: Session, agent: DeliveryAgent) -> DeliveryAgent:
        session.add(agent)
        session.commit()
        session.refresh(agent)
        return agent

    def update(self, session: Session, agent: DeliveryAgent) -> DeliveryAgent:
        session.add(agent)
        session.commit()
        session.refresh(agent)
        return agent

    def delete(self, session: Session, agent: DeliveryAgent) -> None:
        session.delete(agent)
        session.commit()

    # ----- Assignment set -----

    def current_order_ids(self, session: Session, agent_id: uuid.UUID) -> list[uuid.UUID]:
        stmt = (
            select(AgentAssignment.order_id)
            .where(AgentAssignment.agent_id == agent_id)
            .order_by(AgentAssignment.assigned_at)
        )
        return list(session.exec(stmt).all())

    def holder_of(self, session: Session, order_id: uuid.UUID) -> AgentAssignment | None:
        """Return the membership row holding `order_id`, whichever agent owns it."""
        stmt = select(AgentAssignment).where(AgentAssignment.order_id == order_id)
        return session.exec(stmt).first()

    def in_set(self, session: Session, agent_id: uuid.UUID, order_id: uuid.UUID) -> bool:
        row = self.holder_of(session, order_id)
        return row is not None and row.agent_id == agent_id

    def add_to_set(self, session: Session, agent_id: uuid.UUID, order_id: uuid.UUID) -> bool:
        """
        Add `order_id` to the agent's set. Returns False if it was already there.
        """
        if self.in_set(session, agent_id, order_id):
            return False
        session.add(AgentAssignment(agent_id=agent_id, order_id=order_id))
        session.flush()
        return True

    def remove_from_set(
        self,
        session: Session,
        agent_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> bool:
        """
        Remove exactly (agent_id, order_id). Returns False if it was not a member.
        """
        row = self.holder_of(session, order_id)
        if row is None or row.agent_id != agent_id:
            return False
        session.delete(row)
        session.flush()
        return True

    def remove_orders(self, session: Session, order_ids: list[uuid.UUID]) -> None:
        if not order_ids:
            return
        stmt = select(AgentAssignment).where(AgentAssignment.order_id.in_(order_ids))
        for row in session.exec(stmt).all():
            session.delete(row)
        session.flush()

    # ----- History -----

    def delivered_in_set_query(self, agent_id: uuid.UUID):
        """
        Delivered orders that are members of the agent's current set,
        newest update first. Returned as a statement for pagination.
        """
        member_ids = select(AgentAssignment.order_id).where(
            AgentAssignment.agent_id == agent_id
        )
        return (
            select(Order)
            .where(Order.delivery_status == "delivered", Order.id.in_(member_ids))
            .order_by(Order.updated_at.desc())
        )
