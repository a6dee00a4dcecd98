from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field

from nvago.services.status_workflow import INITIAL_STATUS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    contact: str
    address: str
    email: Optional[str] = None

    product_name: Optional[str] = None
    variant: Optional[str] = None
    # inches; null for products without dimensions
    height: Optional[float] = None
    width: Optional[float] = None
    quantity: int = 1
    eyelets: Optional[int] = None
    has_file: bool = False
    attached_file: Optional[str] = None
    instructions: Optional[str] = None
    total: float = 0.0

    status: str = Field(default=INITIAL_STATUS.value, index=True)
    payment_proof: Optional[str] = None
    layout_file: Optional[str] = None
    chat_archived: bool = False

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class OrderStatusLog(SQLModel, table=True):
    __tablename__ = "order_status_log"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    old_status: str
    new_status: str
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class Sale(SQLModel, table=True):
    """One row per paid order; feeds the sales report."""

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True, unique=True)
    customer_email: str = "unknown@local"
    customer_name: str = "Customer"
    product_name: str = "Order"
    variant: Optional[str] = None
    quantity: int = 1
    unit_price: float = 0.0
    subtotal: float = 0.0
    layout_fee: float = 0.0
    total_amount: float = 0.0
    sale_date: datetime = Field(default_factory=_utcnow)
    sale_month: str = ""
    sale_year: int = 0


class StatusUpdate(SQLModel):
    status: str
    layout_file: Optional[str] = None
    note: Optional[str] = None


class PaymentConfirmation(SQLModel):
    payment_proof: str = "walk_in_payment"
