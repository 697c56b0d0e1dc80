# schemas/assignment.py
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional


class AssignItem(BaseModel):
    line_item_id: int
    unit_id: int
    price_per_unit: float = Field(..., ge=0)
    delivery_days: int = Field(..., ge=0)


class AssignCategoryRequest(BaseModel):
    supplier_id: int
    items: List[AssignItem] = Field(..., min_length=1)


class AssignmentResult(BaseModel):
    success: bool
    job_ids: List[int] = []
    quote_status: Optional[str] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class CancellationResult(BaseModel):
    success: bool
    quote_reverted: bool = False
    cancelled_job_ids: List[int] = []
    message: str = ""


class RateJobRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)


class ConfirmReadyRequest(BaseModel):
    confirmed: bool


class JobCorrection(BaseModel):
    """Back-office fix-ups; only the fields sent are applied."""

    supplier_rating: Optional[int] = Field(None, ge=1, le=5)
    courier_confirmed_ready: Optional[bool] = None
    promised_delivery_days: Optional[int] = Field(None, ge=0, le=365)
    supplier_ready_at: Optional[datetime] = None


class SupplierPriceIn(BaseModel):
    unit_id: int
    price: float = Field(..., ge=0)
    delivery_days: Optional[int] = Field(None, ge=0)
    is_preferred: Optional[bool] = None
