from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money

BOOKING_STATUSES = {"inquiry", "confirmed", "checked_in", "active", "checked_out", "completed", "cancelled"}


class Booking(TimestampMixin, db.Model):
    __tablename__ = "bookings"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_number = db.Column(db.String(40), nullable=False, unique=True, index=True)

    asset_id = db.Column(PKType, db.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    renter_id = db.Column(PKType, db.ForeignKey("renters.id", ondelete="SET NULL"), nullable=True, index=True)
    owner_id = db.Column(PKType, db.ForeignKey("owners.id", ondelete="SET NULL"), nullable=True, index=True)

    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False, index=True)
    total_nights = db.Column(db.Integer, nullable=False)

    nightly_rate = db.Column(Money, nullable=False)
    subtotal = db.Column(Money, nullable=False)
    cleaning_fee = db.Column(Money, nullable=False, default=0)
    security_deposit = db.Column(Money, nullable=False, default=0)
    platform_fee = db.Column(Money, nullable=False, default=0)
    total_amount = db.Column(Money, nullable=False)

    status = db.Column(db.String(24), nullable=False, default="inquiry", index=True)

    actual_checkin_time = db.Column(db.DateTime(timezone=True), nullable=True)
    actual_checkout_time = db.Column(db.DateTime(timezone=True), nullable=True)
    checkin_mileage = db.Column(db.Integer, nullable=True)
    checkout_mileage = db.Column(db.Integer, nullable=True)

    special_requests = db.Column(db.Text, nullable=True)
    internal_notes = db.Column(db.Text, nullable=True)
    hubspot_deal_id = db.Column(db.String(64), nullable=True)

    asset = db.relationship("Asset", back_populates="bookings")
    renter = db.relationship("Renter", back_populates="bookings")
    owner = db.relationship("Owner")
    transactions = db.relationship("Transaction", back_populates="booking", lazy="dynamic")

    __table_args__ = (
        db.Index("ix_bookings_owner_status", "owner_id", "status"),
        db.Index("ix_bookings_asset_status", "asset_id", "status"),
        db.CheckConstraint("total_nights > 0", name="ck_booking_nights_positive"),
    )

    def to_dict(self, include_relations=False):
        data = {
            "id": self.id,
            "booking_number": self.booking_number,
            "asset_id": self.asset_id,
            "renter_id": self.renter_id,
            "owner_id": self.owner_id,
            "start_date": iso(self.start_date),
            "end_date": iso(self.end_date),
            "total_nights": self.total_nights,
            "nightly_rate": money(self.nightly_rate),
            "subtotal": money(self.subtotal),
            "cleaning_fee": money(self.cleaning_fee),
            "security_deposit": money(self.security_deposit),
            "platform_fee": money(self.platform_fee),
            "total_amount": money(self.total_amount),
            "status": self.status,
            "actual_checkin_time": iso(self.actual_checkin_time),
            "actual_checkout_time": iso(self.actual_checkout_time),
            "checkin_mileage": self.checkin_mileage,
            "checkout_mileage": self.checkout_mileage,
            "special_requests": self.special_requests,
            "internal_notes": self.internal_notes,
            "hubspot_deal_id": self.hubspot_deal_id,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if include_relations:
            data["assets"] = {"name": self.asset.name, "rv_type": self.asset.rv_type} if self.asset else None
            data["renters"] = self.renter.to_dict() if self.renter else None
            data["owners"] = {"business_name": self.owner.business_name} if self.owner else None
        return data
