from sqlalchemy import func, insert, literal, select
from typing import Dict, List, Any
import logging
import math

from ..models.event import Event
from ..models.expense import Expense
from ..utils.constants import AppConstants
from .base import BaseService
from .exceptions import ValidationError, NotFoundError

logger = logging.getLogger(__name__)


class ExpenseService(BaseService):
    """Budget ledger: append-only expense rows with running-total snapshots.

    The ledger records spending, it does not cap it; ``remaining`` may go
    negative. ``get_totals`` recomputes from the rows and is the source of
    truth. The stamped ``total_amount_spent`` is informational and is not
    rewritten when an earlier row is deleted.
    """

    def add_expense(
        self, event_id: int, category: str, actual_spent: float, actor
    ) -> Dict[str, Any]:
        """Append an expense and return the new running total and remaining budget"""

        category = category.strip() if isinstance(category, str) else category
        if not category:
            raise ValidationError("category is required")
        if (
            actual_spent is None
            or isinstance(actual_spent, bool)
            or not isinstance(actual_spent, (int, float))
        ):
            raise ValidationError("actual_spent is required")
        if not math.isfinite(actual_spent):
            raise ValidationError("actual_spent must be a finite amount")
        if actual_spent < 0:
            raise ValidationError("actual_spent cannot be negative")
        actual_spent = float(actual_spent)

        with self._transaction("add expense"):
            event = self._get_event_or_raise(event_id, lock=True)
            self._require_event_manager(actor, event, "record its expenses")

            last_total = (
                select(Expense.total_amount_spent)
                .where(Expense.event_id == event_id)
                .order_by(Expense.id.desc())
                .limit(1)
                .correlate(None)
                .scalar_subquery()
            )
            candidate = select(
                literal(event_id, Expense.event_id.type),
                literal(category, Expense.category.type),
                literal(actual_spent, Expense.actual_spent.type),
                Event.total_budget,
                func.coalesce(last_total, 0.0)
                + literal(actual_spent, Expense.actual_spent.type),
            ).where(Event.id == event_id)

            stmt = (
                insert(Expense)
                .from_select(
                    [
                        "event_id",
                        "category",
                        "actual_spent",
                        "total_budget",
                        "total_amount_spent",
                    ],
                    candidate,
                )
                .returning(Expense.id)
            )
            expense_id = self.db.execute(stmt).scalar_one()

            expense = self.db.get(Expense, expense_id)
            new_total = expense.total_amount_spent
            remaining = expense.total_budget - new_total
            result = {
                "expense": self._serialize(expense),
                "new_total": self._round(new_total),
                "remaining": self._round(remaining),
            }

        if remaining < 0:
            logger.warning(
                f"Event {event_id} is over budget by {self._round(-remaining)} "
                f"after expense {expense_id}"
            )
        logger.info(
            f"Expense {expense_id} ({category}: {actual_spent}) recorded for event {event_id}"
        )
        return result

    def list_expenses(self, event_id: int, actor) -> List[Dict[str, Any]]:
        """Ledger rows in insertion order"""

        with self._transaction("list expenses"):
            event = self._get_event_or_raise(event_id)
            self._require_event_manager(actor, event, "view its expenses")

            expenses = (
                self.db.query(Expense)
                .filter(Expense.event_id == event_id)
                .order_by(Expense.id)
                .all()
            )
            return [self._serialize(e) for e in expenses]

    def get_totals(self, event_id: int, actor) -> Dict[str, float]:
        """Budget, fresh sum of actual spending and what is left"""

        with self._transaction("compute expense totals"):
            event = self._get_event_or_raise(event_id)
            self._require_event_manager(actor, event, "view its budget")

            total_actual = (
                self.db.query(func.coalesce(func.sum(Expense.actual_spent), 0.0))
                .filter(Expense.event_id == event_id)
                .scalar()
            )
            total_budget = event.total_budget or 0.0

        return {
            "total_budget": self._round(total_budget),
            "total_actual": self._round(total_actual),
            "remaining": self._round(total_budget - total_actual),
        }

    def delete_expense(self, expense_id: int, actor) -> None:
        """Remove one ledger row; later rows keep their stamped running totals"""

        with self._transaction("delete expense"):
            expense = self.db.query(Expense).filter(Expense.id == expense_id).first()
            if not expense:
                raise NotFoundError("Expense not found")

            event_id = expense.event_id
            event = self._get_event_or_raise(event_id, lock=True)
            self._require_event_manager(actor, event, "delete its expenses")
            self.db.delete(expense)

        logger.info(f"Expense {expense_id} deleted from event {event_id}")

    # === HELPER METHODS ===
    @staticmethod
    def _round(amount: float) -> float:
        return round(float(amount), AppConstants.CURRENCY_DECIMAL_PLACES)

    @staticmethod
    def _serialize(expense: Expense) -> Dict[str, Any]:
        return {
            "id": expense.id,
            "event_id": expense.event_id,
            "category": expense.category,
            "actual_spent": expense.actual_spent,
            "total_budget": expense.total_budget,
            "total_amount_spent": expense.total_amount_spent,
            "created_at": expense.created_at,
        }
