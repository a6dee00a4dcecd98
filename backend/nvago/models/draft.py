from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Variant(BaseModel):
    """A priced SKU of a product. Missing prices count as zero."""

    model_config = ConfigDict(frozen=True)

    retail_price: Optional[float] = Field(default=None, ge=0)
    wholesale_price: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    size: Optional[str] = None

    @property
    def label(self) -> Optional[str]:
        return self.description or self.size


class OrderDraft(BaseModel):
    """Order form state as the customer fills it in.

    Numeric fields keep the raw form value (string or number); parsing happens in the
    pricing and validation services so that empty input stays "not yet provided".
    The draft is immutable: every edit produces a new draft and a fresh recompute.
    """

    model_config = ConfigDict(frozen=True)

    product_name: str = ""
    product_category: str = ""
    selected_variant: Optional[Variant] = None
    has_variants: bool = False

    quantity: Optional[Union[str, int]] = None
    height: Optional[Union[str, float]] = None
    width: Optional[Union[str, float]] = None

    has_file: bool = False
    attached_file: Optional[str] = None

    is_solvent_tarp: bool = False
    eyelets: Optional[Union[str, int]] = None

    # "DTF Print" class: minimum order of 10 regardless of the general rule
    requires_minimum_order: bool = False

    first_name: str = ""
    last_name: str = ""
    contact: str = ""
    address: str = ""
    email: Optional[str] = None
    instructions: Optional[str] = None


class PricingResult(BaseModel):
    total: float = 0.0
    unit_price: float = 0.0
    area: float = 1.0
    subtotal: float = 0.0
    layout_fee: float = 0.0
    eyelet_fee: float = 0.0
    dim_warning: str = ""
    dim_error: Optional[str] = None
    dtf_warning: str = ""
    is_form_valid: bool = False


class ValidationResult(BaseModel):
    is_form_valid: bool
    issues: List[str] = Field(default_factory=list)
