from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from consignments.decorators import manager_required, role_required
from consignments.services import CrmSyncService, MaintenanceService
from consignments.services.common import parse_int

api_maintenance_bp = Blueprint("api_maintenance", __name__)


@api_maintenance_bp.get("")
@login_required
def list_requests():
    rows = MaintenanceService.list_requests(
        status=request.args.get("status"),
        asset_id=request.args.get("asset_id", type=int),
    )
    return jsonify({"maintenance_requests": [row.to_dict(include_relations=True) for row in rows]})


@api_maintenance_bp.post("")
@role_required("manager", "admin", "owner")
def create_request():
    row = MaintenanceService.create_request(request.get_json(silent=True) or {}, reported_by=current_user.id)
    crm_sync = CrmSyncService.sync_maintenance(row)
    return (
        jsonify(
            {"success": True, "maintenance_request": row.to_dict(include_relations=True), "crm_sync": crm_sync.to_dict()}
        ),
        201,
    )


@api_maintenance_bp.patch("")
@manager_required
def update_request():
    payload = dict(request.get_json(silent=True) or {})
    request_id = parse_int(payload.pop("id", None), "id")
    row = MaintenanceService.update_request(request_id, payload)
    response = {"success": True, "maintenance_request": row.to_dict(include_relations=True)}
    if "status" in payload:
        response["crm_sync"] = CrmSyncService.sync_maintenance(row).to_dict()
    return jsonify(response)
