import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from sqlmodel import select

from nvago.db.session import get_session
from nvago.models.draft import OrderDraft
from nvago.models.order import Order, OrderStatusLog, PaymentConfirmation, Sale, StatusUpdate
from nvago.services.notify import NotificationClient
from nvago.services.pricing import PriceEngine
from nvago.services.sales import build_sale_from_order
from nvago.services.status_workflow import (
    OrderStatus,
    TransitionPlan,
    next_status,
    notifications_for,
    plan_transition,
)
from nvago.services.validation import Validator, requires_dimensions
from nvago.utils.numbers import parse_decimal, parse_int

logger = logging.getLogger(__name__)
router = APIRouter()


class ApprovalRequest(BaseModel):
    layout_file: str
    note: Optional[str] = None


def _order_from_draft(draft: OrderDraft, total: float) -> Order:
    dims = requires_dimensions(draft.product_category)
    variant = draft.selected_variant.label if draft.selected_variant else None
    return Order(
        first_name=draft.first_name.strip(),
        last_name=draft.last_name.strip(),
        contact=draft.contact.strip(),
        address=draft.address.strip(),
        email=draft.email,
        product_name=draft.product_name,
        variant=variant or draft.product_name,
        height=parse_decimal(draft.height) if dims else None,
        width=parse_decimal(draft.width) if dims else None,
        quantity=parse_int(draft.quantity),
        eyelets=parse_int(draft.eyelets) if draft.is_solvent_tarp else None,
        has_file=draft.has_file,
        attached_file=draft.attached_file,
        instructions=draft.instructions,
        total=total,
    )


def _load_order(session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        logger.warning("Order not found id=%s", order_id)
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _record_transition(session, order: Order, plan: TransitionPlan, note: Optional[str] = None) -> None:
    """Stage the status change and its log row; the caller commits."""
    old_status = order.status
    order.status = plan.target.value
    order.updated_at = datetime.now(timezone.utc)
    if plan.archive_conversation:
        order.chat_archived = True
    session.add(order)
    session.add(OrderStatusLog(order_id=order.id, old_status=old_status, new_status=order.status, note=note))


def _dispatch(order: Order, plan: TransitionPlan, notifications=None) -> List[Dict[str, Any]]:
    # notifications go out after the commit; a failed delivery never undoes the transition
    client = NotificationClient()
    sent = []
    for n in notifications if notifications is not None else plan.notifications:
        ok = client.notify(order.id, n, email=order.email, archive_conversation=plan.archive_conversation)
        if not ok:
            logger.warning("Notification kind=%s for order_id=%s was not delivered", n.kind.value, order.id)
        sent.append({"kind": n.kind.value, "delivered": ok})
    return sent


@router.post("/", status_code=201)
async def submit_order(draft: OrderDraft) -> Dict[str, Any]:
    """Validate and price a draft, then store it as a new order in 'Validation'."""
    validation = Validator().validate(draft)
    if not validation["is_form_valid"]:
        logger.info("Rejected order submission issues=%s", validation["issues"])
        raise HTTPException(status_code=422, detail={"issues": validation["issues"]})

    pricing = PriceEngine().estimate(draft)

    session = get_session()
    try:
        order = _order_from_draft(draft, pricing.total)
        session.add(order)
        session.commit()
        session.refresh(order)
        logger.info("Created order id=%s product=%s total=%s", order.id, order.product_name, order.total)
        return {"order": order.model_dump(), "pricing": pricing.model_dump()}
    finally:
        session.close()


@router.get("/{order_id}")
async def get_order(order_id: int) -> Dict[str, Any]:
    session = get_session()
    try:
        order = _load_order(session, order_id)
        upcoming = next_status(order.status)
        return {**order.model_dump(), "next_status": upcoming.value if upcoming else None}
    finally:
        session.close()


@router.post("/{order_id}/payment")
async def confirm_payment(order_id: int, payment: PaymentConfirmation) -> Dict[str, Any]:
    """Mark an order as paid: it moves on to layout approval and a sale is recorded once."""
    session = get_session()
    try:
        order = _load_order(session, order_id)
        plan = plan_transition(order.status, OrderStatus.LAYOUT_APPROVAL, order_ref=str(order.id))
        if not plan.allowed:
            raise HTTPException(status_code=409, detail=plan.reason)

        order.payment_proof = payment.payment_proof
        if not plan.is_noop:
            _record_transition(session, order, plan, note="payment confirmed")

        existing = session.exec(select(Sale).where(Sale.order_id == order.id)).first()
        if existing is None:
            session.add(build_sale_from_order(order))
            logger.info("Recorded sale for order_id=%s", order.id)
        session.add(order)
        session.commit()
        session.refresh(order)
        return order.model_dump()
    finally:
        session.close()


@router.post("/{order_id}/status")
async def update_status(order_id: int, update: StatusUpdate) -> Dict[str, Any]:
    """Move an order to a new status. Inadmissible requests are refused before any write."""
    session = get_session()
    try:
        order = _load_order(session, order_id)
        plan = plan_transition(order.status, update.status, layout_file=update.layout_file, order_ref=str(order.id))
        if not plan.allowed:
            logger.info("Refused transition order_id=%s %s -> %s: %s", order.id, order.status, update.status, plan.reason)
            raise HTTPException(status_code=409, detail=plan.reason)

        if plan.is_noop:
            return {"order": order.model_dump(), "changed": False, "notifications": []}

        if update.layout_file:
            order.layout_file = update.layout_file
        _record_transition(session, order, plan, note=update.note)
        session.commit()
        session.refresh(order)
        logger.info("Order id=%s moved %s -> %s", order.id, plan.current.value, order.status)

        sent = _dispatch(order, plan)
        return {"order": order.model_dump(), "changed": True, "notifications": sent}
    finally:
        session.close()


@router.post("/{order_id}/approval")
async def send_for_approval(order_id: int, req: ApprovalRequest) -> Dict[str, Any]:
    """Send the layout to the customer; the order ends up in 'Layout Approval'."""
    session = get_session()
    try:
        order = _load_order(session, order_id)
        plan = plan_transition(
            order.status, OrderStatus.LAYOUT_APPROVAL, layout_file=req.layout_file, order_ref=str(order.id)
        )
        if not plan.allowed:
            raise HTTPException(status_code=409, detail=plan.reason)

        order.layout_file = req.layout_file
        if plan.is_noop:
            session.add(order)
        else:
            _record_transition(session, order, plan, note=req.note)
        session.commit()
        session.refresh(order)

        # resending to an order already awaiting approval still notifies the customer
        notifications = plan.notifications or notifications_for(
            OrderStatus.LAYOUT_APPROVAL, f"order #{order.id}", req.layout_file
        )
        sent = _dispatch(order, plan, notifications)
        return {"order": order.model_dump(), "changed": not plan.is_noop, "notifications": sent}
    finally:
        session.close()


@router.get("/{order_id}/history")
async def status_history(order_id: int) -> List[Dict[str, Any]]:
    session = get_session()
    try:
        _load_order(session, order_id)
        rows = session.exec(
            select(OrderStatusLog).where(OrderStatusLog.order_id == order_id).order_by(OrderStatusLog.id)
        ).all()
        return [r.model_dump() for r in rows]
    finally:
        session.close()
