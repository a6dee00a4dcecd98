import logging

from fastapi import APIRouter

from nvago.models.draft import OrderDraft, PricingResult
from nvago.services.pricing import PriceEngine

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=PricingResult)
async def quote(draft: OrderDraft) -> PricingResult:
    """Live price preview for the order form; recomputed on every edit."""
    result = PriceEngine().estimate(draft)
    logger.debug("Quote product=%s qty=%s => %s", draft.product_name, draft.quantity, result.total)
    return result
