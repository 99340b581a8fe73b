from datetime import date

from sqlalchemy.orm import joinedload

from consignments.errors import AppError
from consignments.extensions import db
from consignments.models import Asset, Expense, Transaction
from consignments.models.base import utcnow
from consignments.models.expense import EXPENSE_CATEGORIES, EXPENSE_STATUSES
from consignments.services.common import (
    apply_updates,
    parse_bool,
    parse_date,
    parse_decimal,
    parse_int,
    require_fields,
)


def _category(value, _label):
    category = (value or "").strip().lower()
    if category not in EXPENSE_CATEGORIES:
        raise AppError("Invalid expense category.", 400)
    return category


def _status(value, _label):
    status = (value or "").strip().lower()
    if status not in EXPENSE_STATUSES:
        raise AppError("Invalid expense status.", 400)
    return status


def _bool(value, _label):
    return parse_bool(value)


EXPENSE_UPDATE_FIELDS = (
    "category",
    "amount",
    "description",
    "vendor",
    "status",
    "receipt_url",
    "expense_date",
    "deduct_from_owner",
    "owner_responsible_percentage",
    "maintenance_request_id",
)
EXPENSE_CONVERTERS = {
    "category": _category,
    "status": _status,
    "amount": parse_decimal,
    "expense_date": parse_date,
    "deduct_from_owner": _bool,
    "owner_responsible_percentage": parse_decimal,
    "maintenance_request_id": parse_int,
}


class ExpenseService:
    @staticmethod
    def list_expenses(status=None, asset_id=None, owner_id=None):
        query = Expense.query.options(joinedload(Expense.asset), joinedload(Expense.owner)).order_by(
            Expense.expense_date.desc(), Expense.id.desc()
        )
        if status:
            query = query.filter(Expense.status == status)
        if asset_id:
            query = query.filter(Expense.asset_id == asset_id)
        if owner_id:
            query = query.filter(Expense.owner_id == owner_id)
        return query.all()

    @staticmethod
    def create_expense(payload, approver_id=None):
        require_fields(
            payload,
            "asset_id",
            "category",
            "amount",
            "description",
            message="asset_id, category, amount and description are required",
        )
        asset = db.session.get(Asset, parse_int(payload["asset_id"], "asset_id"))
        if not asset:
            raise AppError("Asset not found", 404)

        expense = Expense(
            asset_id=asset.id,
            owner_id=parse_int(payload.get("owner_id"), "owner_id", asset.owner_id),
            status="pending",
            deduct_from_owner=True,
            owner_responsible_percentage=100,
            expense_date=date.today(),
        )
        apply_updates(
            expense,
            {k: v for k, v in payload.items() if v not in (None, "")},
            EXPENSE_UPDATE_FIELDS,
            EXPENSE_CONVERTERS,
        )
        if expense.amount is None or expense.amount <= 0:
            raise AppError("amount must be a positive number.", 400)
        db.session.add(expense)
        if expense.status == "approved":
            db.session.flush()
            expense.approved_at = utcnow()
            expense.approved_by = approver_id
            ExpenseService._record_approval_transaction(expense)
        db.session.commit()
        return expense

    @staticmethod
    def update_expense(expense_id, updates, approver_id=None):
        if not expense_id:
            raise AppError("Expense ID required", 400)
        expense = db.session.get(Expense, expense_id)
        if not expense:
            raise AppError("Expense not found", 404)

        previous_status = expense.status
        apply_updates(expense, updates, EXPENSE_UPDATE_FIELDS, EXPENSE_CONVERTERS)
        if expense.amount is None or expense.amount <= 0:
            raise AppError("amount must be a positive number.", 400)

        if expense.status == "approved":
            if previous_status != "approved":
                expense.approved_at = utcnow()
                expense.approved_by = approver_id
            ExpenseService._record_approval_transaction(expense)
        db.session.commit()
        return expense

    @staticmethod
    def _record_approval_transaction(expense):
        """Keep exactly one ledger row per approved expense, mirroring its amount."""
        reference = f"EXP-{expense.id}"
        existing = Transaction.query.filter_by(reference_number=reference).first()
        if existing is not None:
            existing.amount = -abs(expense.amount)
            return existing
        row = Transaction(
            asset_id=expense.asset_id,
            owner_id=expense.owner_id,
            transaction_type=expense.category,
            amount=-abs(expense.amount),
            description=expense.description,
            category=expense.category,
            status="completed",
            transaction_date=expense.expense_date,
            reference_number=reference,
        )
        db.session.add(row)
        return row

    @staticmethod
    def delete_expense(expense_id):
        expense = db.session.get(Expense, expense_id)
        if expense is None:
            return False
        db.session.delete(expense)
        db.session.commit()
        return True
