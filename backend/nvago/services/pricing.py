import logging

from nvago.models.draft import OrderDraft, PricingResult
from nvago.services.validation import (
    Validator,
    dimension_error,
    dimension_warning,
    parse_dimensions,
    requires_dimensions,
)
from nvago.utils.numbers import parse_int

logger = logging.getLogger(__name__)


class PriceEngine:
    """Rule-based pricing for the order form (prices in PHP)."""

    WHOLESALE_MIN_QUANTITY = 10
    LAYOUT_FEE = 150.0  # staff-produced artwork when the customer has no file
    EYELET_FEE = 1.0  # per eyelet, per unit ordered

    def __init__(self, validator: Validator = None):
        self.validator = validator or Validator()

    def _quantity(self, draft: OrderDraft) -> int:
        # an empty quantity still previews the price of one unit
        qty = parse_int(draft.quantity)
        return qty if qty and qty > 0 else 1

    def _unit_price(self, draft: OrderDraft, qty: int) -> float:
        variant = draft.selected_variant
        if variant is None:
            return 0.0
        retail = variant.retail_price or 0.0
        if qty >= self.WHOLESALE_MIN_QUANTITY and variant.wholesale_price is not None:
            return variant.wholesale_price
        return retail

    def _area(self, draft: OrderDraft) -> float:
        h, w = parse_dimensions(draft.height, draft.width)
        area = (h or 0.0) * (w or 0.0)
        return area if area else 1.0

    def estimate(self, draft: OrderDraft) -> PricingResult:
        dims = requires_dimensions(draft.product_category)
        dim_warning = dimension_warning(draft.height, draft.width) if dims else ""
        dim_error = dimension_error(draft.height, draft.width) if dims else None

        base = {
            "dim_warning": dim_warning,
            "dim_error": dim_error,
            "dtf_warning": self.validator.dtf_warning(draft),
            "is_form_valid": self.validator.is_form_valid(draft),
        }

        if draft.selected_variant is None or dim_error:
            logger.debug("No price for draft product=%s dim_error=%s", draft.product_name, dim_error)
            return PricingResult(total=0.0, **base)

        qty = self._quantity(draft)
        unit = self._unit_price(draft, qty)
        area = self._area(draft) if dims else 1.0

        subtotal = unit * area * qty
        layout_fee = 0.0 if draft.has_file else self.LAYOUT_FEE

        eyelet_fee = 0.0
        if draft.is_solvent_tarp:
            eyelets = max(parse_int(draft.eyelets) or 0, 0)
            eyelet_fee = eyelets * self.EYELET_FEE * qty

        total = subtotal + layout_fee + eyelet_fee

        return PricingResult(
            total=round(total, 2),
            unit_price=unit,
            area=area,
            subtotal=round(subtotal, 2),
            layout_fee=layout_fee,
            eyelet_fee=eyelet_fee,
            **base,
        )
