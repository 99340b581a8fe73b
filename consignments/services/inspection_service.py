from datetime import date
from decimal import Decimal

from consignments.errors import AppError
from consignments.extensions import db
from consignments.models import Booking, DamageReport, Inspection
from consignments.models.base import utcnow
from consignments.models.damage_report import MAJOR_DAMAGE_THRESHOLD
from consignments.models.inspection import INSPECTION_TYPES
from consignments.services.common import epoch_ms, parse_bool, parse_decimal, parse_int, require_fields


class InspectionService:
    @staticmethod
    def severity_for(estimated_repair_cost):
        if estimated_repair_cost is not None and Decimal(estimated_repair_cost) > MAJOR_DAMAGE_THRESHOLD:
            return "major"
        return "minor"

    @staticmethod
    def create_inspection(payload, inspector_id=None):
        require_fields(payload, "booking_id", "inspection_type", message="booking_id and inspection_type are required")
        inspection_type = str(payload["inspection_type"]).strip().lower()
        if inspection_type not in INSPECTION_TYPES:
            raise AppError("inspection_type must be checkin or checkout.", 400)

        booking = db.session.get(Booking, parse_int(payload["booking_id"], "booking_id"))
        if not booking:
            raise AppError("Booking not found", 404)

        damages_found = parse_bool(payload.get("damages_found"))
        repair_cost = parse_decimal(payload.get("estimated_repair_cost"), "estimated_repair_cost")

        inspection = Inspection(
            booking_id=booking.id,
            asset_id=parse_int(payload.get("asset_id"), "asset_id", booking.asset_id),
            inspection_type=inspection_type,
            inspector_id=inspector_id,
            inspection_date=utcnow(),
            mileage=parse_int(payload.get("mileage"), "mileage"),
            fuel_level=payload.get("fuel_level"),
            exterior_condition=payload.get("exterior_condition"),
            interior_condition=payload.get("interior_condition"),
            mechanical_condition=payload.get("mechanical_condition"),
            checklist_items=payload.get("checklist_items") or {},
            damages_found=damages_found,
            damage_description=payload.get("damage_description"),
            estimated_repair_cost=repair_cost,
            notes=payload.get("notes"),
        )
        db.session.add(inspection)
        db.session.flush()

        report = None
        if damages_found:
            report = DamageReport(
                report_number=f"DMG-{epoch_ms()}",
                booking_id=booking.id,
                asset_id=inspection.asset_id,
                inspection_id=inspection.id,
                title=f"Damage found during {inspection_type}",
                description=inspection.damage_description,
                severity=InspectionService.severity_for(repair_cost),
                discovery_date=date.today(),
                estimated_repair_cost=repair_cost,
                status="reported",
            )
            db.session.add(report)

        db.session.commit()
        return inspection, report

    @staticmethod
    def list_inspections(booking_id=None):
        query = Inspection.query.order_by(Inspection.inspection_date.desc(), Inspection.id.desc())
        if booking_id:
            query = query.filter(Inspection.booking_id == booking_id)
        return query.all()

    @staticmethod
    def list_damage_reports(asset_id=None, booking_id=None):
        query = DamageReport.query.order_by(DamageReport.created_at.desc(), DamageReport.id.desc())
        if asset_id:
            query = query.filter(DamageReport.asset_id == asset_id)
        if booking_id:
            query = query.filter(DamageReport.booking_id == booking_id)
        return query.all()
