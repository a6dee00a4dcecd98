from typing import Any, Dict, List, Optional, Tuple

from nvago.models.draft import OrderDraft
from nvago.utils.numbers import is_whole_number, parse_decimal, parse_int

DIMENSION_CATEGORIES = {"tarp", "sticker", "cloth", "film", "print", "photopaper"}

# inches
MIN_SHORT_SIDE = 2
MIN_LONG_SIDE = 3

MINIMUM_ORDER_QUANTITY = 10
MINIMUM_ORDER_PRODUCT_PREFIX = "dtf print"

DIM_ERROR = "Minimum size is 2 × 3 inches (either 2×3 or 3×2)."
DIM_MISSING_WARNING = "Please enter both width and height for accurate pricing."
DTF_WARNING = "Minimum quantity for DTF Print is 10."


def requires_dimensions(category: Optional[str]) -> bool:
    return (category or "").strip().lower() in DIMENSION_CATEGORIES


def is_minimum_order_product(product_name: Optional[str]) -> bool:
    """Legacy name match for the minimum-order class ("DTF PRINT PER 22x39 INCHES")."""
    return (product_name or "").strip().lower().startswith(MINIMUM_ORDER_PRODUCT_PREFIX)


def requires_minimum_order(draft: OrderDraft) -> bool:
    """The flag is canonical; older clients only send the product name."""
    return draft.requires_minimum_order or is_minimum_order_product(draft.product_name)


def parse_dimensions(height: Any, width: Any) -> Tuple[Optional[float], Optional[float]]:
    return parse_decimal(height), parse_decimal(width)


def dimensions_valid(h: float, w: float) -> bool:
    """Orientation-agnostic 2×3 minimum."""
    return min(h, w) >= MIN_SHORT_SIDE and max(h, w) >= MIN_LONG_SIDE


def dimension_error(height: Any, width: Any) -> Optional[str]:
    """Blocking message for a complete but undersized pair; None while incomplete."""
    h, w = parse_dimensions(height, width)
    if h is None or w is None:
        return None
    if not dimensions_valid(h, w):
        return DIM_ERROR
    return None


def dimension_warning(height: Any, width: Any) -> str:
    """Live hint shown while typing. Names each side below the short-side minimum."""
    if _blank(height) or _blank(width):
        return DIM_MISSING_WARNING

    h, w = parse_dimensions(height, width)
    parts: List[str] = []
    if w is not None and w < MIN_SHORT_SIDE:
        parts.append('Width is below 2"')
    if h is not None and h < MIN_SHORT_SIDE:
        parts.append('Height is below 2"')

    if h is not None and w is not None and not dimensions_valid(h, w) and not parts:
        parts.append("Minimum size is 2 × 3 inches (any orientation)")

    if not parts:
        return ""
    return "Minimum size: 2 × 3 inches. " + ". ".join(parts)


def _blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


class Validator:
    """Submit-time gate for an order draft.

    Rules:
    - first name, last name, contact and address must be non-blank
    - a variant must be selected when the product has variants
    - quantity must be a whole number >= 1, or >= 10 for the minimum-order class
    - dimension products need a complete 2×3 (any orientation) size
    - solvent tarp needs a non-negative whole eyelet count
    - "already have a file" needs an attached file

    Invalid input is reported as data: issues are returned sorted and nothing is raised.
    """

    def _add_issue(self, issues: List[str], issue: str) -> None:
        if issue not in issues:
            issues.append(issue)

    def validate(self, draft: OrderDraft) -> Dict[str, Any]:
        issues: List[str] = []

        for field in ("first_name", "last_name", "contact", "address"):
            if not (getattr(draft, field) or "").strip():
                self._add_issue(issues, f"missing_{field}")

        if draft.has_variants and draft.selected_variant is None:
            self._add_issue(issues, "missing_variant")

        # Quantity
        if _blank(draft.quantity):
            self._add_issue(issues, "missing_quantity")
        elif not is_whole_number(draft.quantity) or parse_int(draft.quantity) < 1:
            self._add_issue(issues, "invalid_quantity")
        elif requires_minimum_order(draft) and parse_int(draft.quantity) < MINIMUM_ORDER_QUANTITY:
            self._add_issue(issues, "quantity_below_minimum")

        # Dimensions
        if requires_dimensions(draft.product_category):
            h, w = parse_dimensions(draft.height, draft.width)
            if h is None or w is None:
                self._add_issue(issues, "missing_dimensions")
            elif not dimensions_valid(h, w):
                self._add_issue(issues, "invalid_dimensions")

        if draft.is_solvent_tarp and not is_whole_number(draft.eyelets):
            self._add_issue(issues, "invalid_eyelets")

        if draft.has_file and not (draft.attached_file or "").strip():
            self._add_issue(issues, "missing_attached_file")

        issues_sorted = sorted(issues)
        return {"is_form_valid": not issues_sorted, "issues": issues_sorted}

    def is_form_valid(self, draft: OrderDraft) -> bool:
        return self.validate(draft)["is_form_valid"]

    def dtf_warning(self, draft: OrderDraft) -> str:
        qty = parse_int(draft.quantity) or 0
        if requires_minimum_order(draft) and 0 < qty < MINIMUM_ORDER_QUANTITY:
            return DTF_WARNING
        return ""
