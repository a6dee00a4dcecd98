from fastapi import APIRouter

from nvago.models.draft import OrderDraft, ValidationResult
from nvago.services.validation import Validator

router = APIRouter()


@router.post("/", response_model=ValidationResult)
async def validate_draft(draft: OrderDraft):
    v = Validator()
    result = v.validate(draft)
    return result
