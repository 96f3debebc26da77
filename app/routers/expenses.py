# app/routers/expenses.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Dict, Any
from ..database import get_db
from ..dependencies.permissions import get_current_user
from ..services.expense_service import ExpenseService
from ..schemas.expense import ExpenseCreate, ExpenseResponse, BudgetTotals
from ..schemas.user import CurrentUser
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["expenses"])


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def add_expense(
    expense_data: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Record spending against an event budget"""
    expense_service = ExpenseService(db)
    result = expense_service.add_expense(
        event_id=expense_data.event_id,
        category=expense_data.category,
        actual_spent=expense_data.actual_spent,
        actor=current_user,
    )

    result["expense"] = ExpenseResponse(**result["expense"]).model_dump()
    return RouterResponse.created(data=result, message="Expense recorded")


@router.get("/event/{event_id}", response_model=Dict[str, Any])
@handle_service_errors
async def get_event_expenses(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    expense_service = ExpenseService(db)
    expenses = expense_service.list_expenses(event_id=event_id, actor=current_user)

    return RouterResponse.success(
        data={"expenses": [ExpenseResponse(**e).model_dump() for e in expenses]}
    )


@router.get("/event/{event_id}/totals", response_model=Dict[str, Any])
@handle_service_errors
async def get_event_totals(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Budget against freshly summed spending"""
    expense_service = ExpenseService(db)
    totals = expense_service.get_totals(event_id=event_id, actor=current_user)

    return RouterResponse.success(data=BudgetTotals(**totals).model_dump())


@router.delete("/{expense_id}", response_model=Dict[str, Any])
@handle_service_errors
async def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    expense_service = ExpenseService(db)
    expense_service.delete_expense(expense_id=expense_id, actor=current_user)

    return RouterResponse.deleted(message="Expense deleted successfully")
