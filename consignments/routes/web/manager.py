from datetime import date

from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import login_required

from consignments.decorators import manager_required
from consignments.errors import AppError
from consignments.models.maintenance import OPEN_MAINTENANCE_STATUSES
from consignments.services import (
    AssetService,
    BookingService,
    MaintenanceService,
    OwnerService,
    RemittanceService,
    ReportingService,
)

web_manager_bp = Blueprint("web_manager", __name__, url_prefix="/manager")


@web_manager_bp.get("/dashboard")
@login_required
@manager_required
def dashboard():
    return render_template(
        "manager_dashboard.html",
        summary=ReportingService.dashboard(),
        recent_bookings=BookingService.list_bookings()[:10],
        open_maintenance=[
            row for row in MaintenanceService.list_requests() if row.status in OPEN_MAINTENANCE_STATUSES
        ][:10],
        assets=AssetService.list_assets(),
    )


@web_manager_bp.get("/financials")
@login_required
@manager_required
def financials():
    return render_template("manager_financials.html", report=ReportingService.financials())


@web_manager_bp.route("/remittances", methods=["GET", "POST"])
@login_required
@manager_required
def remittances():
    breakdown = None
    form = {
        "owner_id": request.values.get("owner_id", ""),
        "period_start": request.values.get("period_start") or date.today().replace(day=1).isoformat(),
        "period_end": request.values.get("period_end") or date.today().isoformat(),
    }
    if request.method == "POST":
        try:
            breakdown = RemittanceService.calculate(form["owner_id"], form["period_start"], form["period_end"])
            if request.form.get("action") == "send":
                remittance = RemittanceService.send(breakdown)
                flash(f"Statement {remittance.remittance_number} generated and saved.", "success")
                return redirect(url_for("web_manager.remittances"))
        except AppError as exc:
            flash(exc.message, "error")

    return render_template(
        "manager_remittances.html",
        owners=OwnerService.list_owners(),
        remittances=RemittanceService.list_remittances(),
        breakdown=breakdown,
        form=form,
    )
