from flask import Blueprint, jsonify, request

from consignments.decorators import manager_required
from consignments.services import CrmSyncService, OwnerService

api_owner_bp = Blueprint("api_owner", __name__)
api_onboard_bp = Blueprint("api_onboard", __name__)


@api_owner_bp.get("")
@manager_required
def list_owners():
    return jsonify({"owners": [row.to_dict(include_profile=True) for row in OwnerService.list_owners()]})


@api_owner_bp.get("/<int:owner_id>")
@manager_required
def get_owner(owner_id):
    return jsonify({"owner": OwnerService.get_owner(owner_id).to_dict(include_profile=True)})


@api_owner_bp.post("")
@manager_required
def create_owner():
    owner = OwnerService.create_owner(request.get_json(silent=True) or {})
    crm_sync = CrmSyncService.sync_owner(owner)
    return jsonify({"success": True, "owner": owner.to_dict(include_profile=True), "crm_sync": crm_sync.to_dict()}), 201


@api_owner_bp.patch("/<int:owner_id>")
@manager_required
def update_owner(owner_id):
    payload = dict(request.get_json(silent=True) or {})
    payload.pop("id", None)
    owner = OwnerService.update_owner(owner_id, payload)
    return jsonify({"success": True, "owner": owner.to_dict(include_profile=True)})


@api_onboard_bp.post("/owner")
def onboard_owner():
    form = request.get_json(silent=True) or {}
    owner, asset = OwnerService.onboard_owner(form)
    contact_sync, deal_sync = CrmSyncService.sync_onboarding(owner, asset, form)
    return (
        jsonify(
            {
                "success": True,
                "owner": owner.to_dict(),
                "asset": asset.to_dict(),
                "hubspot": {"contactId": contact_sync.crm_id, "dealId": deal_sync.crm_id},
                "crm_sync": {"contact": contact_sync.to_dict(), "deal": deal_sync.to_dict()},
            }
        ),
        201,
    )
