from datetime import date as date_type
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Request
from nvago.db.session import get_session
from nvago.models.order import Order, Sale
from nvago.services.sales import summarize_sales
from nvago.services.status_workflow import OrderStatus
from sqlmodel import select, func
import logging
from starlette.responses import HTMLResponse

logger = logging.getLogger(__name__)
router = APIRouter()


def _peso(amount: float) -> str:
    return f"₱{amount:,.2f}"


def _render_summary_html(total: int, revenue: float, pending: int) -> str:
    return f"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>NVAGo Dashboard</title>
  <style>
    body {{ font-family: Inter, system-ui, -apple-system, 'Segoe UI', Roboto, Arial; background:#f3f4f6; padding:24px; }}
    .cards {{ display:flex; gap:16px; }}
    .card {{ background:white; padding:20px; border-radius:8px; flex:1 }}
    .title {{ color:#6b7280; font-size:13px }}
    .value {{ font-size:28px; font-weight:700; margin-top:6px }}
  </style>
</head>
<body>
  <h1>Dashboard Summary</h1>
  <div class="cards">
    <div class="card"><div class="title">Total Orders</div><div class="value">{total}</div></div>
    <div class="card"><div class="title">Revenue</div><div class="value">{_peso(revenue)}</div></div>
    <div class="card"><div class="title">Awaiting Validation</div><div class="value">{pending}</div></div>
  </div>
</body>
</html>
"""


@router.get("/summary")
async def summary(request: Request) -> Any:
    session = get_session()
    try:
        total = int(session.exec(select(func.count()).select_from(Order)).one() or 0)
        # revenue counts paid orders only
        sales = session.exec(select(Sale)).all()
        revenue = round(sum((s.total_amount or 0) for s in sales), 2)
        pending = int(
            session.exec(
                select(func.count()).select_from(Order).where(Order.status == OrderStatus.VALIDATION.value)
            ).one()
            or 0
        )

        accept = request.headers.get("accept", "")
        if "text/html" in accept:
            return HTMLResponse(content=_render_summary_html(total, revenue, pending))

        return {"total_orders": total, "revenue": revenue, "pending_validation": pending}
    except Exception as e:
        logger.exception("Failed to compute summary: %s", e)
        raise HTTPException(status_code=500, detail="Failed to compute dashboard summary")
    finally:
        session.close()


@router.get("/stats")
async def stats() -> Dict[str, Any]:
    session = get_session()
    try:
        rows = session.exec(select(Order)).all()
        by_status: Dict[str, int] = {s.value: 0 for s in OrderStatus}
        for o in rows:
            by_status[o.status or "unknown"] = by_status.get(o.status or "unknown", 0) + 1
        return {"by_status": by_status}
    finally:
        session.close()


@router.get("/sales")
async def sales_report(date: Optional[date_type] = None) -> Dict[str, Any]:
    """Sales rows (optionally for one day) with report totals."""
    session = get_session()
    try:
        rows = session.exec(select(Sale).order_by(Sale.sale_date)).all()
        if date is not None:
            rows = [s for s in rows if s.sale_date.date() == date]
        return {"rows": [s.model_dump() for s in rows], "totals": summarize_sales(rows)}
    finally:
        session.close()
