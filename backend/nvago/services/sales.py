from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from nvago.models.order import Order, Sale
from nvago.services.pricing import PriceEngine


def _dimension_label(order: Order) -> Optional[str]:
    width = order.width or 0
    height = order.height or 0
    if width > 0 or height > 0:
        return f"{width:g}x{height:g} in"
    return None


def build_sale_from_order(order: Order, now: Optional[datetime] = None) -> Sale:
    """Derive the sale row for a paid order.

    The stored order total already includes the layout fee, so it is split back out:
    subtotal = total - layout fee (never below zero) and unit price = subtotal / quantity.
    """
    sale_date = now or datetime.now(timezone.utc)
    qty = max(1, order.quantity or 1)
    total = float(order.total or 0)

    layout_fee = 0.0 if order.has_file else PriceEngine.LAYOUT_FEE
    subtotal = round(max(total - layout_fee, 0.0), 2)
    unit_price = round(subtotal / qty, 2)

    customer_name = " ".join(n for n in (order.first_name, order.last_name) if n) or "Customer"

    return Sale(
        order_id=order.id,
        customer_email=order.email or "unknown@local",
        customer_name=customer_name,
        product_name=order.variant or order.product_name or "Order",
        variant=_dimension_label(order),
        quantity=qty,
        unit_price=unit_price,
        subtotal=subtotal,
        layout_fee=layout_fee,
        total_amount=round(total, 2),
        sale_date=sale_date,
        sale_month=sale_date.strftime("%B"),
        sale_year=sale_date.year,
    )


def summarize_sales(sales: Iterable[Sale]) -> Dict[str, Any]:
    rows = list(sales)
    return {
        "transactions": len(rows),
        "total_quantity": sum(s.quantity or 0 for s in rows),
        "subtotal": round(sum(s.subtotal or 0 for s in rows), 2),
        "layout_fees": round(sum(s.layout_fee or 0 for s in rows), 2),
        "grand_total": round(sum(s.total_amount or 0 for s in rows), 2),
    }
