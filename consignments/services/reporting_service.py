from datetime import date
from decimal import Decimal

from sqlalchemy import func

from consignments.errors import AppError
from consignments.extensions import db
from consignments.models import Asset, Booking, Expense, MaintenanceRequest, Owner, Remittance, Renter, Transaction
from consignments.models.maintenance import OPEN_MAINTENANCE_STATUSES

PLATFORM_FEE_RATE = Decimal("0.10")


def _sum(column, *criteria):
    value = db.session.query(func.coalesce(func.sum(column), 0)).filter(*criteria).scalar()
    return Decimal(value or 0)


def _float(value):
    return float(Decimal(value).quantize(Decimal("0.01")))


def _month_starts(today, count):
    year, month = today.year, today.month
    months = []
    for _ in range(count):
        months.append(date(year, month, 1))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(months))


class ReportingService:
    @staticmethod
    def dashboard():
        status_counts = dict(db.session.query(Asset.status, func.count(Asset.id)).group_by(Asset.status).all())
        return {
            "assets": {
                "total": sum(status_counts.values()),
                "by_status": status_counts,
                "available": status_counts.get("available", 0),
            },
            "bookings": {
                "total": Booking.query.count(),
                "active": Booking.query.filter(Booking.status.in_(("active", "confirmed"))).count(),
                "completed": Booking.query.filter_by(status="completed").count(),
            },
            "revenue": _float(_sum(Booking.total_amount, Booking.status == "completed")),
            "open_maintenance": MaintenanceRequest.query.filter(
                MaintenanceRequest.status.in_(OPEN_MAINTENANCE_STATUSES)
            ).count(),
            "owners": Owner.query.count(),
        }

    @staticmethod
    def financials(today=None):
        today = today or date.today()
        revenue = _sum(Booking.total_amount, Booking.status == "completed")
        platform_fees = _sum(Booking.platform_fee, Booking.status == "completed")
        expenses = _sum(Expense.amount, Expense.status == "approved")
        paid = _sum(Remittance.owner_payout_amount, Remittance.status == "paid")
        pending = _sum(Remittance.owner_payout_amount, Remittance.status.in_(("pending", "draft")))

        monthly = []
        for month_start in _month_starts(today, 6):
            if month_start.month == 12:
                next_month = date(month_start.year + 1, 1, 1)
            else:
                next_month = date(month_start.year, month_start.month + 1, 1)
            monthly.append(
                {
                    "month": month_start.strftime("%Y-%m"),
                    "revenue": _float(
                        _sum(
                            Booking.total_amount,
                            Booking.status == "completed",
                            Booking.end_date >= month_start,
                            Booking.end_date < next_month,
                        )
                    ),
                }
            )

        recent = Transaction.query.order_by(Transaction.created_at.desc(), Transaction.id.desc()).limit(20).all()
        return {
            "total_revenue": _float(revenue),
            "platform_fees": _float(platform_fees),
            "total_expenses": _float(expenses),
            "paid_remittances": _float(paid),
            "pending_remittances": _float(pending),
            "net_profit": _float(revenue - expenses - paid),
            "monthly_revenue": monthly,
            "recent_transactions": [row.to_dict() for row in recent],
        }

    @staticmethod
    def owner_earnings(owner_id):
        owner = db.session.get(Owner, owner_id) if owner_id else None
        if not owner:
            raise AppError("Owner not found", 404)

        gross = _sum(Booking.total_amount, Booking.owner_id == owner.id, Booking.status == "completed")
        platform_fee = gross * PLATFORM_FEE_RATE
        expenses = _sum(Expense.amount, Expense.owner_id == owner.id, Expense.status == "approved")
        net = gross - platform_fee - expenses
        split = Decimal(owner.revenue_split_percentage or 0)
        return {
            "owner_id": owner.id,
            "business_name": owner.business_name,
            "gross_revenue": _float(gross),
            "platform_fee": _float(platform_fee),
            "expenses": _float(expenses),
            "net_income": _float(net),
            "revenue_split_percentage": float(split),
            "owner_earnings": _float(net * split / Decimal("100")),
            "paid_remittances": _float(
                _sum(Remittance.owner_payout_amount, Remittance.owner_id == owner.id, Remittance.status == "paid")
            ),
            "pending_remittances": _float(
                _sum(
                    Remittance.owner_payout_amount,
                    Remittance.owner_id == owner.id,
                    Remittance.status.in_(("pending", "draft")),
                )
            ),
        }

    @staticmethod
    def platform_stats():
        return {
            "total_rvs": Asset.query.filter_by(status="available").count(),
            "total_owners": Owner.query.count(),
            "total_renters": Renter.query.count(),
            "completed_trips": Booking.query.filter_by(status="completed").count(),
        }
