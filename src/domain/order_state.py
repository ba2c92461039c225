"""Order lifecycle state machine.

Statuses, the legal transition table, who may trigger each edge, and the
optimistic preconditions that the persistence write must be conditioned on.
Everything here is pure: callers supply an order snapshot and an actor and
get back either a TransitionPlan or a typed OrderWorkflowError.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from src.domain.errors import ClaimConflict, Forbidden, InvalidTransition

DEFAULT_ESTIMATED_DELIVERY_MINUTES = 30


class OrderStatus(str, Enum):
    """Order lifecycle statuses, matching the orders.status column."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    ASSIGNED = "assigned"
    OUT_FOR_DELIVERY = "out_for_delivery"
    COMPLETED = "completed"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


INITIAL_STATUS = OrderStatus.PENDING
TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.REJECTED})


class Role(str, Enum):
    """Caller role, resolved once per request from the caller's profile."""

    CUSTOMER = "customer"
    RESTAURANT = "restaurant"
    DELIVERY = "delivery"
    UNASSIGNED = "unassigned"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        """Map a stored role value onto a Role, defaulting to UNASSIGNED."""
        if isinstance(value, Role):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in ("delivery_partner", "driver"):
                return cls.DELIVERY
            for role in cls:
                if role.value == normalized:
                    return role
        return cls.UNASSIGNED


@dataclass(frozen=True)
class Actor:
    """Authenticated identity plus role attempting an action."""

    user_id: str
    role: Role

    def __post_init__(self) -> None:
        object.__setattr__(self, "user_id", str(self.user_id))


@dataclass(frozen=True)
class OrderSnapshot:
    """Read-only view of the order fields the state machine looks at."""

    id: str
    customer_id: str
    restaurant_id: str
    status: OrderStatus
    delivery_partner_id: str | None = None
    estimated_delivery_time: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "OrderSnapshot":
        """Build a snapshot from an orders table row."""
        partner = row.get("delivery_partner_id")
        return cls(
            id=str(row["id"]),
            customer_id=str(row["customer_id"]),
            restaurant_id=str(row["restaurant_id"]),
            status=OrderStatus(row["status"]),
            delivery_partner_id=str(partner) if partner else None,
            estimated_delivery_time=_parse_timestamp(row.get("estimated_delivery_time")),
            created_at=_parse_timestamp(row.get("created_at")),
            updated_at=_parse_timestamp(row.get("updated_at")),
        )


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    # PostgREST returns ISO 8601, sometimes with a trailing Z
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# Edge precondition: raises Forbidden or ClaimConflict when not met.
Precondition = Callable[[OrderSnapshot, Actor], None]


def _owns_restaurant(order: OrderSnapshot, actor: Actor) -> None:
    if order.restaurant_id != actor.user_id:
        raise Forbidden("Order does not belong to this restaurant")


def _unclaimed(order: OrderSnapshot, actor: Actor) -> None:
    if order.delivery_partner_id is not None:
        raise ClaimConflict(order.id)


def _is_assigned_partner(order: OrderSnapshot, actor: Actor) -> None:
    if order.delivery_partner_id != actor.user_id:
        raise Forbidden("Only the assigned delivery partner can update this order")


@dataclass(frozen=True)
class TransitionRule:
    """One edge of the transition table."""

    source: OrderStatus
    target: OrderStatus
    role: Role
    precondition: Precondition

    @property
    def is_claim(self) -> bool:
        return self.source is OrderStatus.READY and self.target is OrderStatus.ASSIGNED


TRANSITION_RULES: dict[tuple[OrderStatus, OrderStatus], TransitionRule] = {
    (rule.source, rule.target): rule
    for rule in (
        TransitionRule(OrderStatus.PENDING, OrderStatus.CONFIRMED, Role.RESTAURANT, _owns_restaurant),
        TransitionRule(OrderStatus.PENDING, OrderStatus.REJECTED, Role.RESTAURANT, _owns_restaurant),
        TransitionRule(OrderStatus.CONFIRMED, OrderStatus.PREPARING, Role.RESTAURANT, _owns_restaurant),
        TransitionRule(OrderStatus.PREPARING, OrderStatus.READY, Role.RESTAURANT, _owns_restaurant),
        TransitionRule(OrderStatus.READY, OrderStatus.ASSIGNED, Role.DELIVERY, _unclaimed),
        TransitionRule(OrderStatus.ASSIGNED, OrderStatus.OUT_FOR_DELIVERY, Role.DELIVERY, _is_assigned_partner),
        TransitionRule(OrderStatus.OUT_FOR_DELIVERY, OrderStatus.COMPLETED, Role.DELIVERY, _is_assigned_partner),
    )
}


@dataclass(frozen=True)
class TransitionPlan:
    """A validated transition, ready to be written conditionally.

    changes holds the column values to write. expected holds the column
    values the row must still have for the write to apply; a write that
    matches zero rows means a concurrent writer got there first.
    """

    order_id: str
    source: OrderStatus
    target: OrderStatus
    actor: Actor
    changes: dict[str, Any] = field(default_factory=dict)
    expected: dict[str, Any] = field(default_factory=dict)

    @property
    def is_claim(self) -> bool:
        return self.source is OrderStatus.READY and self.target is OrderStatus.ASSIGNED

    def apply(self, order: OrderSnapshot) -> OrderSnapshot:
        """Tentative local view of the order after this plan is written."""
        estimated = self.changes.get("estimated_delivery_time")
        return replace(
            order,
            status=self.target,
            delivery_partner_id=self.changes.get("delivery_partner_id", order.delivery_partner_id),
            estimated_delivery_time=_parse_timestamp(estimated) if estimated else order.estimated_delivery_time,
            updated_at=_parse_timestamp(self.changes["updated_at"]),
        )


def get_rule(source: OrderStatus | str, target: OrderStatus | str) -> TransitionRule | None:
    """Look up the table edge between two statuses, if any."""
    try:
        return TRANSITION_RULES.get((OrderStatus(source), OrderStatus(target)))
    except ValueError:
        return None


def allowed_targets(status: OrderStatus | str, role: Role | None = None) -> list[OrderStatus]:
    """Statuses reachable from status in one step, optionally for one role."""
    status = OrderStatus(status)
    return [
        rule.target
        for (source, _), rule in TRANSITION_RULES.items()
        if source is status and (role is None or rule.role is role)
    ]


def plan_transition(
    order: OrderSnapshot,
    target: OrderStatus | str,
    actor: Actor,
    now: datetime | None = None,
    estimated_delivery_minutes: int = DEFAULT_ESTIMATED_DELIVERY_MINUTES,
) -> TransitionPlan:
    """Validate a status change and describe the conditional write for it.

    Args:
        order: Current snapshot of the order.
        target: Requested status.
        actor: Who is asking.
        now: Clock override for tests.
        estimated_delivery_minutes: Delivery estimate set on claim.

    Returns:
        TransitionPlan: Changes and optimistic preconditions for the write.

    Raises:
        InvalidTransition: The edge is not in the table (includes self-transitions
            and leaving completed/rejected).
        Forbidden: The actor's role or identity does not match the edge.
        ClaimConflict: A ready order already has a delivery partner.
    """
    try:
        target_status = OrderStatus(target)
    except ValueError as e:
        raise InvalidTransition(order.status.value, str(target), f"Unknown order status '{target}'") from e

    rule = TRANSITION_RULES.get((order.status, target_status))
    if rule is None:
        message = None
        if order.status.is_terminal or order.status is target_status:
            message = f"Order is already {order.status.value}"
        raise InvalidTransition(order.status.value, target_status.value, message)

    if actor.role is not rule.role:
        raise Forbidden(
            f"Role '{actor.role.value}' cannot move an order from "
            f"'{rule.source.value}' to '{rule.target.value}'"
        )
    rule.precondition(order, actor)

    now = now or datetime.now(timezone.utc)
    changes: dict[str, Any] = {
        "status": target_status.value,
        "updated_at": now.isoformat(),
    }
    expected: dict[str, Any] = {"status": order.status.value}

    if rule.is_claim:
        changes["delivery_partner_id"] = actor.user_id
        changes["estimated_delivery_time"] = (now + timedelta(minutes=estimated_delivery_minutes)).isoformat()
        expected["delivery_partner_id"] = None
    elif rule.role is Role.DELIVERY:
        expected["delivery_partner_id"] = actor.user_id

    return TransitionPlan(
        order_id=order.id,
        source=order.status,
        target=target_status,
        actor=actor,
        changes=changes,
        expected=expected,
    )


def is_valid_history(statuses: Iterable[OrderStatus | str]) -> bool:
    """Check that a status sequence is a walk through the table from pending."""
    try:
        walk = [OrderStatus(status) for status in statuses]
    except ValueError:
        return False
    if not walk or walk[0] is not INITIAL_STATUS:
        return False
    return all((a, b) in TRANSITION_RULES for a, b in zip(walk, walk[1:]))
