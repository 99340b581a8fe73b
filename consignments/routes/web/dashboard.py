from flask import Blueprint, render_template, request
from flask_login import current_user, login_required

from consignments.decorators import role_required
from consignments.errors import AppError
from consignments.services import AssetService, BookingService, RemittanceService, ReportingService

web_dashboard_bp = Blueprint("web_dashboard", __name__)


def _current_owner():
    if not current_user.owner:
        raise AppError("Owner profile not found.", 404)
    return current_user.owner


@web_dashboard_bp.get("/owner/portal")
@login_required
@role_required("owner")
def owner_portal():
    owner = _current_owner()
    return render_template(
        "owner_portal.html",
        owner=owner,
        assets=AssetService.list_assets(owner_id=owner.id),
        bookings=BookingService.list_bookings(owner_id=owner.id),
        earnings=ReportingService.owner_earnings(owner.id),
        remittances=RemittanceService.list_remittances(owner_id=owner.id),
    )


@web_dashboard_bp.get("/renter/browse")
@login_required
@role_required("renter", "manager", "admin")
def renter_browse():
    rv_type = (request.args.get("rv_type") or "").strip()
    assets = AssetService.list_assets(status="available")
    if rv_type:
        assets = [asset for asset in assets if asset.rv_type == rv_type]
    return render_template("renter_browse.html", assets=assets, rv_type=rv_type)


@web_dashboard_bp.get("/renter/bookings")
@login_required
@role_required("renter")
def renter_bookings():
    renter = current_user.renter
    bookings = BookingService.list_bookings(renter_id=renter.id) if renter else []
    return render_template("renter_bookings.html", bookings=bookings)
