from flask import Blueprint, Response, jsonify, request
from flask_login import current_user

from consignments.decorators import manager_required, role_required
from consignments.errors import AppError
from consignments.services import RemittanceService
from consignments.services.common import parse_int

api_remittance_bp = Blueprint("api_remittance", __name__)


def _pdf_response(pdf_bytes, filename):
    return Response(
        pdf_bytes,
        mimetype="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}.pdf"},
    )


def _breakdown_from_request():
    payload = request.get_json(silent=True)
    breakdown = payload.get("remittance_data", payload) if isinstance(payload, dict) else payload
    if not isinstance(breakdown, dict):
        raise AppError("Remittance data is required", 400)
    return breakdown


@api_remittance_bp.post("/calculate")
@manager_required
def calculate():
    payload = request.get_json(silent=True) or {}
    breakdown = RemittanceService.calculate(
        payload.get("owner_id"),
        payload.get("period_start"),
        payload.get("period_end"),
    )
    return jsonify(breakdown)


@api_remittance_bp.post("/send")
@manager_required
def send():
    remittance = RemittanceService.send(_breakdown_from_request())
    return jsonify(
        {
            "success": True,
            "remittance": remittance.to_dict(include_owner=True),
            "message": "Statement generated and saved. Owner will be notified.",
        }
    )


@api_remittance_bp.get("")
@role_required("manager", "admin", "owner")
def list_remittances():
    owner_id = request.args.get("owner_id", type=int)
    if current_user.role == "owner":
        owner_id = current_user.owner.id if current_user.owner else -1
    rows = RemittanceService.list_remittances(owner_id=owner_id, status=request.args.get("status"))
    return jsonify({"remittances": [row.to_dict(include_owner=True) for row in rows]})


@api_remittance_bp.patch("")
@manager_required
def update_remittance():
    payload = dict(request.get_json(silent=True) or {})
    remittance_id = parse_int(payload.pop("id", None), "id")
    remittance = RemittanceService.update_remittance(remittance_id, payload)
    return jsonify({"success": True, "remittance": remittance.to_dict(include_owner=True)})


@api_remittance_bp.post("/generate-pdf")
@manager_required
def generate_pdf():
    statement = _breakdown_from_request()
    owner = statement.get("owner") or {}
    period = statement.get("period") or {}
    filename = f"statement-{owner.get('id', 'owner')}-{period.get('start', '')}-{period.get('end', '')}"
    return _pdf_response(RemittanceService.render_pdf(statement), filename)


@api_remittance_bp.get("/<int:remittance_id>/statement")
@role_required("manager", "admin", "owner")
def statement(remittance_id):
    remittance = RemittanceService.get_remittance(remittance_id)
    if current_user.role == "owner" and (not current_user.owner or current_user.owner.id != remittance.owner_id):
        return jsonify({"error": "Forbidden"}), 403
    pdf_bytes = RemittanceService.render_pdf(RemittanceService.statement_from_remittance(remittance))
    return _pdf_response(pdf_bytes, remittance.remittance_number)
