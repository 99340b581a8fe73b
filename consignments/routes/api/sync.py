from flask import Blueprint, current_app, jsonify, request

from consignments.decorators import manager_required
from consignments.errors import AppError
from consignments.extensions import db
from consignments.integrations.hubspot import HubSpotError
from consignments.models import Booking, MaintenanceRequest, Owner
from consignments.services import CrmSyncService
from consignments.services.common import parse_int

api_sync_bp = Blueprint("api_sync", __name__)
api_webhook_bp = Blueprint("api_webhook", __name__)

SYNC_TARGETS = {
    "owner": (Owner, "Owner not found", CrmSyncService.sync_owner),
    "booking": (Booking, "Booking not found", CrmSyncService.sync_booking),
    "maintenance": (MaintenanceRequest, "Maintenance not found", CrmSyncService.sync_maintenance),
}


@api_sync_bp.post("/hubspot")
@manager_required
def sync_one():
    payload = request.get_json(silent=True) or {}
    target = SYNC_TARGETS.get(payload.get("type"))
    if target is None:
        raise AppError("Invalid type", 400)

    model, not_found, sync = target
    object_id = parse_int(payload.get("id"), "id")
    row = db.session.get(model, object_id) if object_id else None
    if row is None:
        raise AppError(not_found, 404)

    current_app.logger.info("Syncing %s %s to HubSpot", payload["type"], row.id)
    result = sync(row)
    if result.status == "skipped":
        status_code = 400 if CrmSyncService.client().enabled else 503
        return jsonify({"error": result.error or "Sync skipped", "crm_sync": result.to_dict()}), status_code
    if not result.ok:
        return jsonify({"error": "Sync failed", "crm_sync": result.to_dict()}), 500
    return jsonify({"success": True, "hubspotId": result.crm_id})


@api_sync_bp.get("/hubspot")
@manager_required
def sync_all():
    synced, failed = CrmSyncService.bulk_sync()
    return jsonify({"success": True, "synced": synced, "failed": failed})


@api_webhook_bp.post("/hubspot")
def hubspot_webhook():
    events = request.get_json(silent=True)
    if isinstance(events, dict):
        events = [events]
    if not isinstance(events, list):
        raise AppError("Webhook body must be a list of events", 400)

    current_app.logger.info("Received HubSpot webhook with %s event(s)", len(events))
    try:
        handled = CrmSyncService.process_webhook(events)
    except HubSpotError as exc:
        db.session.rollback()
        current_app.logger.error("Error processing HubSpot webhook: %s", exc.message)
        return jsonify({"error": "Failed to process webhook"}), 500
    return jsonify({"success": True, "processed": handled})
