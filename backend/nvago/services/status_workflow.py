"""Order status pipeline.

Orders move forward through ``CANONICAL_ORDER`` one step at a time. ``Denied`` sits
outside the chain: it can be reached before the layout is approved and nothing
leaves it. All functions here are pure; persisting the new status and delivering
notifications is up to the caller.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class OrderStatus(str, Enum):
    VALIDATION = "Validation"
    LAYOUT_APPROVAL = "Layout Approval"
    PRINTING = "Printing"
    FOR_PICKUP = "For Pickup"
    FINISHED = "Finished"
    DENIED = "Denied"


CANONICAL_ORDER: List[OrderStatus] = [
    OrderStatus.VALIDATION,
    OrderStatus.LAYOUT_APPROVAL,
    OrderStatus.PRINTING,
    OrderStatus.FOR_PICKUP,
    OrderStatus.FINISHED,
]

INITIAL_STATUS = OrderStatus.VALIDATION

# Denied is only reachable before the layout is approved
DENIABLE_FROM = frozenset([OrderStatus.VALIDATION, OrderStatus.LAYOUT_APPROVAL])


class NotificationKind(str, Enum):
    APPROVAL_REQUEST = "approval_request"
    READY_FOR_PICKUP = "ready_for_pickup"
    COMPLETED = "completed"
    DENIED = "denied"


@dataclass(frozen=True)
class TransitionDecision:
    allowed: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    layout_file: Optional[str] = None


@dataclass(frozen=True)
class TransitionPlan:
    """What accepting a transition implies. Rejected plans carry no side effects."""

    current: OrderStatus
    target: OrderStatus
    allowed: bool
    reason: Optional[str] = None
    notifications: List[Notification] = field(default_factory=list)
    archive_conversation: bool = False

    @property
    def is_noop(self) -> bool:
        return self.allowed and self.current == self.target


StatusLike = Union[OrderStatus, str]


def to_status(value: StatusLike) -> Optional[OrderStatus]:
    """Coerce a stored status string to ``OrderStatus``; unknown values give None."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def check_transition(current: StatusLike, target: StatusLike) -> TransitionDecision:
    cur = to_status(current)
    tgt = to_status(target)
    if cur is None:
        return TransitionDecision(False, f"Unknown current status '{current}'")
    if tgt is None:
        return TransitionDecision(False, f"Unknown status '{target}'")

    if cur == OrderStatus.DENIED:
        return TransitionDecision(False, "Order has been denied")

    if tgt == OrderStatus.DENIED:
        if cur in DENIABLE_FROM:
            return TransitionDecision(True)
        return TransitionDecision(False, f"Order in '{cur.value}' status can no longer be denied")

    cur_idx = CANONICAL_ORDER.index(cur)
    tgt_idx = CANONICAL_ORDER.index(tgt)
    if tgt_idx < cur_idx:
        return TransitionDecision(False, f"Order cannot move back from '{cur.value}' to '{tgt.value}'")
    if tgt_idx > cur_idx + 1:
        predecessor = CANONICAL_ORDER[tgt_idx - 1]
        return TransitionDecision(False, f"Order must be in '{predecessor.value}' status first")
    return TransitionDecision(True)


def can_transition(current: StatusLike, target: StatusLike) -> bool:
    return check_transition(current, target).allowed


def next_status(current: StatusLike) -> Optional[OrderStatus]:
    cur = to_status(current)
    if cur is None or cur not in CANONICAL_ORDER:
        return None
    idx = CANONICAL_ORDER.index(cur)
    return CANONICAL_ORDER[idx + 1] if idx + 1 < len(CANONICAL_ORDER) else None


def notifications_for(target: OrderStatus, order_ref: str, layout_file: Optional[str]) -> List[Notification]:
    if target == OrderStatus.LAYOUT_APPROVAL:
        msg = f"Your layout for {order_ref} is ready for approval."
        if layout_file:
            msg += f" Layout file: {layout_file}"
        return [Notification(NotificationKind.APPROVAL_REQUEST, msg, layout_file)]
    if target == OrderStatus.FOR_PICKUP:
        return [Notification(NotificationKind.READY_FOR_PICKUP, f"Your {order_ref} is ready for pick up.")]
    if target == OrderStatus.FINISHED:
        return [Notification(NotificationKind.COMPLETED, f"Your {order_ref} is complete. Thank you for ordering with us!")]
    if target == OrderStatus.DENIED:
        return [Notification(NotificationKind.DENIED, f"Your {order_ref} was denied. Please contact us for details.")]
    return []


def plan_transition(
    current: StatusLike,
    target: StatusLike,
    layout_file: Optional[str] = None,
    order_ref: str = "",
) -> TransitionPlan:
    """Decide a transition and list the notifications it implies."""
    decision = check_transition(current, target)
    cur = to_status(current) or current
    tgt = to_status(target) or target
    if not decision.allowed:
        return TransitionPlan(cur, tgt, False, decision.reason)
    if cur == tgt:
        return TransitionPlan(cur, tgt, True)

    ref = f"order #{order_ref}" if order_ref else "order"
    return TransitionPlan(
        cur,
        tgt,
        True,
        notifications=notifications_for(tgt, ref, layout_file),
        archive_conversation=tgt == OrderStatus.FINISHED,
    )
