from pydantic import BaseModel, validator, Field
from typing import Optional
from datetime import datetime
from ..utils.constants import AppConstants


class ExpenseCreate(BaseModel):
    event_id: int = Field(..., gt=0)
    category: str = Field(..., min_length=1, max_length=AppConstants.MAX_CATEGORY_LENGTH)
    actual_spent: float = Field(..., ge=0, description="Amount must not be negative")

    @validator("category")
    def category_not_empty(cls, v):
        if not v.strip():
            raise ValueError("Category cannot be empty")
        return v.strip()


class ExpenseResponse(BaseModel):
    id: int
    event_id: int
    category: str
    actual_spent: float
    total_budget: float
    total_amount_spent: float
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BudgetTotals(BaseModel):
    total_budget: float
    total_actual: float
    remaining: float
