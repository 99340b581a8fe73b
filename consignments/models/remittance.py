from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money

REMITTANCE_STATUSES = {"draft", "pending", "paid", "cancelled"}


class Remittance(TimestampMixin, db.Model):
    """A payout statement persisted when a manager sends a calculated breakdown."""

    __tablename__ = "remittances"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    remittance_number = db.Column(db.String(48), nullable=False, unique=True, index=True)
    owner_id = db.Column(PKType, db.ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True)

    period_start = db.Column(db.Date, nullable=False)
    period_end = db.Column(db.Date, nullable=False)

    gross_rental_income = db.Column(Money, nullable=False, default=0)
    platform_fees = db.Column(Money, nullable=False, default=0)
    cleaning_fees = db.Column(Money, nullable=False, default=0)
    maintenance_expenses = db.Column(Money, nullable=False, default=0)
    other_expenses = db.Column(Money, nullable=False, default=0)
    total_deductions = db.Column(Money, nullable=False, default=0)
    net_income = db.Column(Money, nullable=False, default=0)
    owner_split_percentage = db.Column(db.Numeric(5, 2), nullable=False)
    owner_payout_amount = db.Column(Money, nullable=False)

    booking_ids = db.Column(db.JSON, nullable=True)
    expense_ids = db.Column(db.JSON, nullable=True)

    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    payment_method = db.Column(db.String(32), nullable=True)
    payment_date = db.Column(db.Date, nullable=True)
    payment_reference = db.Column(db.String(64), nullable=True)

    generated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    sent_at = db.Column(db.DateTime(timezone=True), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    owner = db.relationship("Owner")

    def to_dict(self, include_owner=False):
        data = {
            "id": self.id,
            "remittance_number": self.remittance_number,
            "owner_id": self.owner_id,
            "period_start": iso(self.period_start),
            "period_end": iso(self.period_end),
            "gross_rental_income": money(self.gross_rental_income),
            "platform_fees": money(self.platform_fees),
            "cleaning_fees": money(self.cleaning_fees),
            "maintenance_expenses": money(self.maintenance_expenses),
            "other_expenses": money(self.other_expenses),
            "total_deductions": money(self.total_deductions),
            "net_income": money(self.net_income),
            "owner_split_percentage": money(self.owner_split_percentage),
            "owner_payout_amount": money(self.owner_payout_amount),
            "booking_ids": self.booking_ids or [],
            "expense_ids": self.expense_ids or [],
            "status": self.status,
            "payment_method": self.payment_method,
            "payment_date": iso(self.payment_date),
            "payment_reference": self.payment_reference,
            "generated_at": iso(self.generated_at),
            "sent_at": iso(self.sent_at),
            "notes": self.notes,
            "created_at": iso(self.created_at),
        }
        if include_owner:
            data["owners"] = {"business_name": self.owner.business_name} if self.owner else None
        return data
