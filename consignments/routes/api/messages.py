from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from consignments.services import MessageService
from consignments.services.common import parse_int

api_message_bp = Blueprint("api_message", __name__)


@api_message_bp.get("")
@login_required
def list_messages():
    user_id = request.args.get("user_id", type=int)
    if not current_user.is_manager:
        user_id = current_user.id
    rows = MessageService.list_messages(user_id=user_id, asset_id=request.args.get("asset_id", type=int))
    return jsonify({"messages": [row.to_dict() for row in rows]})


@api_message_bp.post("")
@login_required
def send_message():
    payload = dict(request.get_json(silent=True) or {})
    if not current_user.is_manager:
        payload["from_user_id"] = current_user.id
    row = MessageService.send_message(payload, sender_id=current_user.id)
    return jsonify({"success": True, "message": row.to_dict()}), 201


@api_message_bp.patch("")
@login_required
def mark_read():
    payload = request.get_json(silent=True) or {}
    row = MessageService.mark_read(parse_int(payload.get("id"), "id"), reader_id=current_user.id)
    return jsonify({"success": True, "message": row.to_dict()})


@api_message_bp.get("/conversations")
@login_required
def conversations():
    user_id = request.args.get("user_id", type=int)
    if not current_user.is_manager or not user_id:
        user_id = current_user.id
    return jsonify({"conversations": MessageService.conversations(user_id)})
