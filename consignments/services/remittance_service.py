from decimal import Decimal
from io import BytesIO

from flask import current_app
from sqlalchemy.orm import joinedload

from consignments.errors import AppError
from consignments.extensions import db
from consignments.models import Booking, Expense, Owner, Remittance
from consignments.models.base import utcnow
from consignments.models.remittance import REMITTANCE_STATUSES
from consignments.services.common import (
    apply_updates,
    epoch_ms,
    parse_date,
    parse_decimal,
    parse_int,
    random_suffix,
    require_fields,
)

# Platform share deducted from gross income when computing payouts. The
# owner's own platform_fee_percentage column is not consulted here.
REMITTANCE_PLATFORM_RATE = Decimal("0.10")


def _money(value):
    return float(Decimal(value or 0).quantize(Decimal("0.01")))


def _status(value, _label):
    status = (value or "").strip().lower()
    if status not in REMITTANCE_STATUSES:
        raise AppError("Invalid remittance status.", 400)
    return status


class RemittanceService:
    @staticmethod
    def calculate(owner_id, period_start, period_end):
        """Compute an owner's payout breakdown for a period without persisting it."""
        if not owner_id or not period_start or not period_end:
            raise AppError("Owner ID, period start, and period end are required", 400)
        start = parse_date(period_start, "period_start")
        end = parse_date(period_end, "period_end")

        owner = db.session.get(Owner, parse_int(owner_id, "owner_id"))
        if not owner:
            raise AppError("Owner not found", 404)

        bookings = (
            Booking.query.options(joinedload(Booking.asset))
            .filter(Booking.owner_id == owner.id, Booking.status == "completed")
            .filter(Booking.end_date >= start, Booking.end_date <= end)
            .order_by(Booking.end_date.asc(), Booking.id.asc())
            .all()
        )
        expenses = (
            Expense.query.filter(Expense.owner_id == owner.id, Expense.status == "approved")
            .filter(Expense.expense_date >= start, Expense.expense_date <= end)
            .order_by(Expense.expense_date.asc(), Expense.id.asc())
            .all()
        )

        gross_income = sum((Decimal(b.total_amount or 0) for b in bookings), Decimal("0"))
        platform_fees = gross_income * REMITTANCE_PLATFORM_RATE
        cleaning_fees = sum((Decimal(b.cleaning_fee or 0) for b in bookings), Decimal("0"))
        total_expenses = sum((Decimal(e.amount or 0) for e in expenses), Decimal("0"))
        total_deductions = platform_fees + cleaning_fees + total_expenses
        net_income = gross_income - total_deductions
        split = Decimal(owner.revenue_split_percentage or 0)
        owner_payout = net_income * split / Decimal("100")

        return {
            "owner": {
                "id": owner.id,
                "business_name": owner.business_name,
                "revenue_split_percentage": float(split),
            },
            "period": {"start": start.isoformat(), "end": end.isoformat()},
            "gross_income": _money(gross_income),
            "platform_fees": _money(platform_fees),
            "cleaning_fees": _money(cleaning_fees),
            "expenses": _money(total_expenses),
            "total_deductions": _money(total_deductions),
            "net_income": _money(net_income),
            "owner_payout": _money(owner_payout),
            "bookings_count": len(bookings),
            "expenses_count": len(expenses),
            "bookings": [
                {
                    "id": b.id,
                    "booking_number": b.booking_number,
                    "asset_name": b.asset.name if b.asset else None,
                    "start_date": b.start_date.isoformat(),
                    "end_date": b.end_date.isoformat(),
                    "amount": _money(b.total_amount),
                }
                for b in bookings
            ],
            "expense_items": [
                {
                    "id": e.id,
                    "description": e.description,
                    "category": e.category,
                    "amount": _money(e.amount),
                    "date": e.expense_date.isoformat(),
                }
                for e in expenses
            ],
        }

    @staticmethod
    def generate_remittance_number():
        return f"REM-{epoch_ms()}-{random_suffix(5).upper()}"

    @staticmethod
    def send(breakdown):
        """Persist a calculated breakdown as a pending remittance. Not idempotent."""
        if not isinstance(breakdown, dict):
            raise AppError("Remittance data is required", 400)
        owner_data = breakdown.get("owner") or {}
        period = breakdown.get("period") or {}
        if not owner_data.get("id") or not period.get("start") or not period.get("end"):
            raise AppError("Owner and period are required", 400)

        owner = db.session.get(Owner, parse_int(owner_data["id"], "owner.id"))
        if not owner:
            raise AppError("Owner not found", 404)

        def amount(key):
            return parse_decimal(breakdown.get(key), key, Decimal("0"))

        split = parse_decimal(owner_data.get("revenue_split_percentage"), "revenue_split_percentage")
        remittance = Remittance(
            remittance_number=RemittanceService.generate_remittance_number(),
            owner_id=owner.id,
            period_start=parse_date(period["start"], "period.start"),
            period_end=parse_date(period["end"], "period.end"),
            gross_rental_income=amount("gross_income"),
            platform_fees=amount("platform_fees"),
            cleaning_fees=amount("cleaning_fees"),
            maintenance_expenses=amount("expenses"),
            total_deductions=amount("total_deductions"),
            net_income=amount("net_income"),
            owner_split_percentage=split if split is not None else owner.revenue_split_percentage,
            owner_payout_amount=amount("owner_payout"),
            booking_ids=[item.get("id") for item in breakdown.get("bookings") or []],
            expense_ids=[item.get("id") for item in breakdown.get("expense_items") or []],
            status="pending",
            generated_at=utcnow(),
        )
        db.session.add(remittance)
        db.session.commit()
        current_app.logger.info(
            "Remittance %s generated for owner %s: payout %s",
            remittance.remittance_number,
            owner.id,
            remittance.owner_payout_amount,
        )
        return remittance

    @staticmethod
    def list_remittances(owner_id=None, status=None):
        query = Remittance.query.options(joinedload(Remittance.owner)).order_by(
            Remittance.created_at.desc(), Remittance.id.desc()
        )
        if owner_id:
            query = query.filter(Remittance.owner_id == owner_id)
        if status:
            query = query.filter(Remittance.status == status)
        return query.all()

    @staticmethod
    def get_remittance(remittance_id):
        remittance = db.session.get(Remittance, remittance_id)
        if not remittance:
            raise AppError("Remittance not found", 404)
        return remittance

    @staticmethod
    def update_remittance(remittance_id, updates):
        if not remittance_id:
            raise AppError("Remittance ID required", 400)
        remittance = RemittanceService.get_remittance(remittance_id)
        apply_updates(
            remittance,
            updates,
            ("status", "payment_method", "payment_date", "payment_reference", "notes"),
            {"status": _status, "payment_date": parse_date},
        )
        if remittance.status == "paid" and remittance.payment_date is None:
            remittance.payment_date = utcnow().date()
        if updates.get("status") == "pending" and remittance.sent_at is None:
            remittance.sent_at = utcnow()
        db.session.commit()
        return remittance

    @staticmethod
    def statement_from_remittance(remittance):
        return {
            "owner": {
                "id": remittance.owner_id,
                "business_name": remittance.owner.business_name if remittance.owner else None,
                "revenue_split_percentage": float(remittance.owner_split_percentage or 0),
            },
            "period": {"start": remittance.period_start.isoformat(), "end": remittance.period_end.isoformat()},
            "gross_income": _money(remittance.gross_rental_income),
            "platform_fees": _money(remittance.platform_fees),
            "cleaning_fees": _money(remittance.cleaning_fees),
            "expenses": _money(remittance.maintenance_expenses),
            "total_deductions": _money(remittance.total_deductions),
            "net_income": _money(remittance.net_income),
            "owner_payout": _money(remittance.owner_payout_amount),
            "remittance_number": remittance.remittance_number,
            "bookings": [],
            "expense_items": [],
        }

    @staticmethod
    def render_pdf(statement):
        """Render a statement dict (calculate output or saved remittance) to PDF bytes."""
        from reportlab.lib.pagesizes import LETTER
        from reportlab.pdfgen import canvas

        buffer = BytesIO()
        p = canvas.Canvas(buffer, pagesize=LETTER)
        width, height = LETTER
        owner = statement.get("owner") or {}
        period = statement.get("period") or {}

        y = height - 60
        p.setFont("Helvetica-Bold", 20)
        p.drawString(50, y, "Owner Remittance Statement")

        y -= 32
        p.setFont("Helvetica", 11)
        header = [
            f"Owner: {owner.get('business_name') or owner.get('id')}",
            f"Period: {period.get('start')} to {period.get('end')}",
            f"Revenue split: {owner.get('revenue_split_percentage')}%",
        ]
        if statement.get("remittance_number"):
            header.insert(0, f"Statement: {statement['remittance_number']}")
        for line in header:
            p.drawString(50, y, line)
            y -= 18

        y -= 12
        rows = [
            ("Gross rental income", statement.get("gross_income")),
            ("Platform fees", statement.get("platform_fees")),
            ("Cleaning fees", statement.get("cleaning_fees")),
            ("Expenses", statement.get("expenses")),
            ("Total deductions", statement.get("total_deductions")),
            ("Net income", statement.get("net_income")),
            ("Owner payout", statement.get("owner_payout")),
        ]
        for label, value in rows:
            p.drawString(50, y, label)
            p.drawRightString(width - 50, y, f"${float(value or 0):,.2f}")
            y -= 18

        if statement.get("bookings"):
            y -= 12
            p.setFont("Helvetica-Bold", 12)
            p.drawString(50, y, "Bookings")
            p.setFont("Helvetica", 10)
            y -= 16
            for item in statement["bookings"]:
                if y < 60:
                    p.showPage()
                    p.setFont("Helvetica", 10)
                    y = height - 60
                p.drawString(50, y, f"{item.get('booking_number')}  {item.get('asset_name') or ''}")
                p.drawString(300, y, f"{item.get('start_date')} - {item.get('end_date')}")
                p.drawRightString(width - 50, y, f"${float(item.get('amount') or 0):,.2f}")
                y -= 14

        if statement.get("expense_items"):
            y -= 12
            p.setFont("Helvetica-Bold", 12)
            p.drawString(50, y, "Expenses")
            p.setFont("Helvetica", 10)
            y -= 16
            for item in statement["expense_items"]:
                if y < 60:
                    p.showPage()
                    p.setFont("Helvetica", 10)
                    y = height - 60
                p.drawString(50, y, f"{item.get('date')}  {item.get('category')}: {item.get('description') or ''}"[:70])
                p.drawRightString(width - 50, y, f"${float(item.get('amount') or 0):,.2f}")
                y -= 14

        p.showPage()
        p.save()
        return buffer.getvalue()
