from flask import Blueprint, jsonify, request
from flask_login import login_required

from consignments.decorators import manager_required
from consignments.errors import AppError
from consignments.services import AssetService, CrmSyncService, FileService
from consignments.services.common import parse_int

api_asset_bp = Blueprint("api_asset", __name__)


@api_asset_bp.get("")
@login_required
def list_assets():
    rows = AssetService.list_assets(
        status=request.args.get("status"),
        owner_id=request.args.get("owner_id", type=int),
    )
    return jsonify({"assets": [row.to_dict(include_owner=True) for row in rows]})


@api_asset_bp.get("/<int:asset_id>")
@login_required
def get_asset(asset_id):
    asset = AssetService.get_asset(asset_id)
    return jsonify({"asset": asset.to_dict(include_owner=True)})


@api_asset_bp.post("")
@manager_required
def create_asset():
    payload = request.get_json(silent=True) or {}
    asset = AssetService.create_asset(payload)
    crm_sync = CrmSyncService.sync_owner(asset.owner)
    return jsonify({"success": True, "asset": asset.to_dict(include_owner=True), "crm_sync": crm_sync.to_dict()}), 201


@api_asset_bp.patch("")
@manager_required
def update_asset():
    payload = dict(request.get_json(silent=True) or {})
    asset_id = parse_int(payload.pop("id", None), "id")
    asset = AssetService.update_asset(asset_id, payload)
    return jsonify({"success": True, "asset": asset.to_dict(include_owner=True)})


@api_asset_bp.delete("")
@manager_required
def delete_asset():
    asset_id = request.args.get("id", type=int)
    if not asset_id:
        raise AppError("Asset ID required", 400)
    AssetService.delete_asset(asset_id)
    return jsonify({"success": True})


@api_asset_bp.post("/<int:asset_id>/image")
@manager_required
def upload_image(asset_id):
    asset = AssetService.get_asset(asset_id)
    url = FileService.save_asset_image(request.files.get("image"), asset.id)
    asset = AssetService.attach_image(asset, url)
    return jsonify({"success": True, "url": url, "asset": asset.to_dict()}), 201
