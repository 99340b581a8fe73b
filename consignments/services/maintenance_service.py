import secrets
from datetime import date

from sqlalchemy.orm import joinedload

from consignments.errors import AppError
from consignments.extensions import db
from consignments.models import Asset, MaintenanceRequest
from consignments.models.maintenance import MAINTENANCE_STATUSES
from consignments.services.common import apply_updates, epoch_ms, parse_date, parse_decimal, parse_int, require_fields

PRIORITIES = {"LOW", "MEDIUM", "HIGH", "URGENT"}


def _status(value, _label):
    status = (value or "").strip().lower()
    if status not in MAINTENANCE_STATUSES:
        raise AppError("Invalid maintenance status.", 400)
    return status


def _priority(value, _label):
    priority = (value or "MEDIUM").strip().upper()
    if priority not in PRIORITIES:
        raise AppError("Invalid priority.", 400)
    return priority


MAINTENANCE_FIELDS = (
    "title",
    "description",
    "priority",
    "category",
    "status",
    "scheduled_date",
    "completion_date",
    "estimated_cost",
    "actual_cost",
    "vendor_name",
    "vendor_contact",
    "resolution_notes",
)
MAINTENANCE_CONVERTERS = {
    "status": _status,
    "priority": _priority,
    "scheduled_date": parse_date,
    "completion_date": parse_date,
    "estimated_cost": parse_decimal,
    "actual_cost": parse_decimal,
}


class MaintenanceService:
    @staticmethod
    def generate_ticket_number(sequence=None):
        suffix = sequence if sequence is not None else secrets.randbelow(9000) + 1000
        return f"MX-{epoch_ms()}-{suffix}"

    @staticmethod
    def list_requests(status=None, asset_id=None):
        query = MaintenanceRequest.query.options(joinedload(MaintenanceRequest.asset)).order_by(
            MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc()
        )
        if status:
            query = query.filter(MaintenanceRequest.status == status)
        if asset_id:
            query = query.filter(MaintenanceRequest.asset_id == asset_id)
        return query.all()

    @staticmethod
    def get_request(request_id):
        row = db.session.get(MaintenanceRequest, request_id)
        if not row:
            raise AppError("Maintenance request not found", 404)
        return row

    @staticmethod
    def create_request(payload, reported_by=None, ticket_number=None):
        require_fields(payload, "asset_id", "title", "description", message="asset_id, title and description are required")
        asset = db.session.get(Asset, parse_int(payload["asset_id"], "asset_id"))
        if not asset:
            raise AppError("Asset not found", 404)

        row = MaintenanceRequest(
            ticket_number=ticket_number or MaintenanceService.generate_ticket_number(),
            asset_id=asset.id,
            owner_id=asset.owner_id,
            reported_by=reported_by,
            status="requested",
            priority="MEDIUM",
        )
        apply_updates(
            row,
            {k: v for k, v in payload.items() if v not in (None, "")},
            MAINTENANCE_FIELDS,
            MAINTENANCE_CONVERTERS,
        )
        db.session.add(row)
        db.session.commit()
        return row

    @staticmethod
    def update_request(request_id, updates):
        if not request_id:
            raise AppError("Maintenance request ID required", 400)
        row = MaintenanceService.get_request(request_id)
        apply_updates(row, updates, MAINTENANCE_FIELDS, MAINTENANCE_CONVERTERS)
        if updates.get("status") == "completed" and row.completion_date is None:
            row.completion_date = date.today()
        db.session.commit()
        return row
