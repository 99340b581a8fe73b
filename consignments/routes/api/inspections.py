from flask import Blueprint, jsonify, request
from flask_login import current_user

from consignments.decorators import manager_required
from consignments.services import InspectionService

api_inspection_bp = Blueprint("api_inspection", __name__)


@api_inspection_bp.post("")
@manager_required
def create_inspection():
    inspection, report = InspectionService.create_inspection(
        request.get_json(silent=True) or {}, inspector_id=current_user.id
    )
    return (
        jsonify(
            {
                "success": True,
                "inspection": inspection.to_dict(),
                "damage_report": report.to_dict() if report else None,
            }
        ),
        201,
    )


@api_inspection_bp.get("")
@manager_required
def list_inspections():
    rows = InspectionService.list_inspections(booking_id=request.args.get("booking_id", type=int))
    return jsonify({"inspections": [row.to_dict() for row in rows]})


@api_inspection_bp.get("/damage-reports")
@manager_required
def list_damage_reports():
    rows = InspectionService.list_damage_reports(
        asset_id=request.args.get("asset_id", type=int),
        booking_id=request.args.get("booking_id", type=int),
    )
    return jsonify({"damage_reports": [row.to_dict(include_relations=True) for row in rows]})
