from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money


class Renter(TimestampMixin, db.Model):
    __tablename__ = "renters"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    user_id = db.Column(PKType, db.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)

    drivers_license_number = db.Column(db.String(64), nullable=True)
    drivers_license_state = db.Column(db.String(8), nullable=True)
    drivers_license_expiry = db.Column(db.Date, nullable=True)
    date_of_birth = db.Column(db.Date, nullable=True)

    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=True)
    state = db.Column(db.String(64), nullable=True)
    zip_code = db.Column(db.String(16), nullable=True)
    emergency_contact_name = db.Column(db.String(120), nullable=True)
    emergency_contact_phone = db.Column(db.String(32), nullable=True)

    total_bookings = db.Column(db.Integer, nullable=False, default=0)
    total_spent = db.Column(Money, nullable=False, default=0)

    user = db.relationship("User", back_populates="renter")
    bookings = db.relationship("Booking", back_populates="renter", lazy="dynamic")

    @property
    def email(self):
        return self.user.email if self.user else None

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "email": self.email,
            "full_name": self.user.full_name if self.user else None,
            "drivers_license_number": self.drivers_license_number,
            "drivers_license_state": self.drivers_license_state,
            "drivers_license_expiry": iso(self.drivers_license_expiry),
            "date_of_birth": iso(self.date_of_birth),
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "emergency_contact_name": self.emergency_contact_name,
            "emergency_contact_phone": self.emergency_contact_phone,
            "total_bookings": self.total_bookings,
            "total_spent": money(self.total_spent),
            "created_at": iso(self.created_at),
        }
