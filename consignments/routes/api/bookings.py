from flask import Blueprint, abort, jsonify, request
from flask_login import current_user, login_required

from consignments.decorators import manager_required
from consignments.errors import AppError
from consignments.services import BookingService, CrmSyncService
from consignments.services.common import parse_int

api_booking_bp = Blueprint("api_booking", __name__)


@api_booking_bp.get("")
@login_required
def list_bookings():
    renter_id = request.args.get("renter_id", type=int)
    owner_id = request.args.get("owner_id", type=int)
    if current_user.role == "renter":
        renter_id = current_user.renter.id if current_user.renter else -1
    elif current_user.role == "owner":
        owner_id = current_user.owner.id if current_user.owner else -1

    rows = BookingService.list_bookings(
        status=request.args.get("status"),
        asset_id=request.args.get("asset_id", type=int),
        renter_id=renter_id,
        owner_id=owner_id,
    )
    return jsonify({"bookings": [row.to_dict(include_relations=True) for row in rows]})


@api_booking_bp.get("/<int:booking_id>")
@login_required
def get_booking(booking_id):
    booking = BookingService.get_booking(booking_id)
    if current_user.role == "renter":
        if current_user.renter is None or booking.renter_id != current_user.renter.id:
            abort(403)
    elif current_user.role == "owner":
        if current_user.owner is None or booking.owner_id != current_user.owner.id:
            abort(403)
    return jsonify({"booking": booking.to_dict(include_relations=True)})


@api_booking_bp.post("")
@login_required
def create_booking():
    payload = dict(request.get_json(silent=True) or {})
    if current_user.role == "renter":
        if not current_user.renter:
            raise AppError("Renter profile not found.", 403)
        payload["renter_id"] = current_user.renter.id
        payload.pop("status", None)
    elif not current_user.is_manager:
        raise AppError("Forbidden", 403)

    booking = BookingService.create_booking(payload)
    crm_sync = CrmSyncService.sync_booking(booking)
    return (
        jsonify({"success": True, "booking": booking.to_dict(include_relations=True), "crm_sync": crm_sync.to_dict()}),
        201,
    )


@api_booking_bp.patch("")
@manager_required
def update_booking():
    payload = dict(request.get_json(silent=True) or {})
    booking_id = parse_int(payload.pop("id", None), "id")
    booking = BookingService.update_booking(booking_id, payload)
    response = {"success": True, "booking": booking.to_dict(include_relations=True)}
    if "status" in payload:
        response["crm_sync"] = CrmSyncService.sync_booking(booking).to_dict()
    return jsonify(response)


@api_booking_bp.delete("")
@manager_required
def cancel_booking():
    booking_id = request.args.get("id", type=int)
    if not booking_id:
        raise AppError("Booking ID required", 400)
    BookingService.cancel_booking(booking_id)
    return jsonify({"success": True})
