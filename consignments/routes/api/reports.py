from flask import Blueprint, jsonify, request
from flask_login import current_user

from consignments.decorators import manager_required, role_required
from consignments.extensions import cache
from consignments.services import ReportingService

api_report_bp = Blueprint("api_report", __name__)
api_platform_bp = Blueprint("api_platform", __name__)


@api_report_bp.get("/dashboard")
@manager_required
def dashboard():
    return jsonify(ReportingService.dashboard())


@api_report_bp.get("/financials")
@manager_required
def financials():
    return jsonify(ReportingService.financials())


@api_report_bp.get("/owner-earnings")
@role_required("manager", "admin", "owner")
def owner_earnings():
    owner_id = request.args.get("owner_id", type=int)
    if current_user.role == "owner":
        owner_id = current_user.owner.id if current_user.owner else None
    return jsonify(ReportingService.owner_earnings(owner_id))


@api_platform_bp.get("/platform-stats")
@cache.cached(timeout=120)
def platform_stats():
    return jsonify(ReportingService.platform_stats())
