from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money

TRANSACTION_TYPES = {
    "rental_income",
    "maintenance",
    "cleaning",
    "insurance",
    "platform_fee",
    "damage",
    "refund",
    "remittance",
}


class Transaction(TimestampMixin, db.Model):
    """Signed ledger entry: income is positive, expenses are negative."""

    __tablename__ = "transactions"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_id = db.Column(PKType, db.ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True)
    asset_id = db.Column(PKType, db.ForeignKey("assets.id", ondelete="SET NULL"), nullable=True, index=True)
    owner_id = db.Column(PKType, db.ForeignKey("owners.id", ondelete="SET NULL"), nullable=True, index=True)
    renter_id = db.Column(PKType, db.ForeignKey("renters.id", ondelete="SET NULL"), nullable=True, index=True)

    transaction_type = db.Column(db.String(32), nullable=False, index=True)
    amount = db.Column(Money, nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(48), nullable=True)
    reference_number = db.Column(db.String(64), nullable=True, index=True)
    payment_method = db.Column(db.String(32), nullable=True)
    status = db.Column(db.String(24), nullable=True, default="pending", index=True)
    transaction_date = db.Column(db.Date, nullable=False)

    booking = db.relationship("Booking", back_populates="transactions")

    def to_dict(self):
        return {
            "id": self.id,
            "booking_id": self.booking_id,
            "asset_id": self.asset_id,
            "owner_id": self.owner_id,
            "renter_id": self.renter_id,
            "transaction_type": self.transaction_type,
            "amount": money(self.amount),
            "description": self.description,
            "category": self.category,
            "reference_number": self.reference_number,
            "payment_method": self.payment_method,
            "status": self.status,
            "transaction_date": iso(self.transaction_date),
            "created_at": iso(self.created_at),
        }
