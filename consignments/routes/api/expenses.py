from flask import Blueprint, jsonify, request
from flask_login import current_user

from consignments.decorators import manager_required, role_required
from consignments.errors import AppError
from consignments.services import ExpenseService
from consignments.services.common import parse_int

api_expense_bp = Blueprint("api_expense", __name__)


@api_expense_bp.get("")
@role_required("manager", "admin", "owner")
def list_expenses():
    owner_id = request.args.get("owner_id", type=int)
    if current_user.role == "owner":
        owner_id = current_user.owner.id if current_user.owner else -1
    rows = ExpenseService.list_expenses(
        status=request.args.get("status"),
        asset_id=request.args.get("asset_id", type=int),
        owner_id=owner_id,
    )
    return jsonify({"expenses": [row.to_dict(include_relations=True) for row in rows]})


@api_expense_bp.post("")
@manager_required
def create_expense():
    expense = ExpenseService.create_expense(request.get_json(silent=True) or {}, approver_id=current_user.id)
    return jsonify({"success": True, "expense": expense.to_dict(include_relations=True)}), 201


@api_expense_bp.patch("")
@manager_required
def update_expense():
    payload = dict(request.get_json(silent=True) or {})
    expense_id = parse_int(payload.pop("id", None), "id")
    expense = ExpenseService.update_expense(expense_id, payload, approver_id=current_user.id)
    return jsonify({"success": True, "expense": expense.to_dict(include_relations=True)})


@api_expense_bp.delete("")
@manager_required
def delete_expense():
    expense_id = request.args.get("id", type=int)
    if not expense_id:
        raise AppError("Expense ID required", 400)
    ExpenseService.delete_expense(expense_id)
    return jsonify({"success": True})
