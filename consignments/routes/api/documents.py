from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from consignments.decorators import manager_required, role_required
from consignments.errors import AppError
from consignments.services import FileService

api_document_bp = Blueprint("api_document", __name__)


@api_document_bp.post("/upload")
@role_required("manager", "admin", "owner")
def upload_document():
    document = FileService.upload_document(request.files.get("file"), request.form, uploaded_by=current_user.id)
    return jsonify({"success": True, "document": document.to_dict()}), 201


@api_document_bp.get("")
@api_document_bp.get("/upload")
@login_required
def list_documents():
    owner_id = request.args.get("owner_id", type=int)
    renter_id = request.args.get("renter_id", type=int)
    if current_user.role == "owner":
        owner_id = current_user.owner.id if current_user.owner else -1
    elif current_user.role == "renter":
        renter_id = current_user.renter.id if current_user.renter else -1
    rows = FileService.list_documents(
        document_type=request.args.get("type"),
        asset_id=request.args.get("asset_id", type=int),
        owner_id=owner_id,
        renter_id=renter_id,
    )
    return jsonify({"documents": [row.to_dict(include_relations=True) for row in rows]})


@api_document_bp.delete("")
@api_document_bp.delete("/upload")
@manager_required
def delete_document():
    document_id = request.args.get("id", type=int)
    if not document_id:
        raise AppError("Document ID required", 400)
    FileService.delete_document(document_id)
    return jsonify({"success": True})
