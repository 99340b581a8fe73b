from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money

ASSET_STATUSES = {"available", "in_use", "maintenance", "inactive", "pending_approval"}


class Asset(TimestampMixin, db.Model):
    __tablename__ = "assets"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    owner_id = db.Column(PKType, db.ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(180), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(24), nullable=False, default="pending_approval", index=True)

    year = db.Column(db.Integer, nullable=True)
    make = db.Column(db.String(80), nullable=True)
    model = db.Column(db.String(80), nullable=True)
    vin = db.Column(db.String(32), nullable=True)
    license_plate = db.Column(db.String(24), nullable=True)
    rv_type = db.Column(db.String(48), nullable=True)
    length_feet = db.Column(db.Numeric(6, 2), nullable=True)
    weight_lbs = db.Column(db.Integer, nullable=True)

    sleeps = db.Column(db.Integer, nullable=True)
    bedrooms = db.Column(db.Integer, nullable=True)
    bathrooms = db.Column(db.Numeric(3, 1), nullable=True)
    fuel_type = db.Column(db.String(24), nullable=True)
    mileage = db.Column(db.Integer, nullable=True)
    transmission = db.Column(db.String(24), nullable=True)

    features = db.Column(db.JSON, nullable=True)
    amenities = db.Column(db.JSON, nullable=True)

    storage_location = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=True)
    state = db.Column(db.String(64), nullable=True)
    zip_code = db.Column(db.String(16), nullable=True)

    base_price_per_night = db.Column(Money, nullable=False)
    cleaning_fee = db.Column(Money, nullable=True, default=75)
    security_deposit = db.Column(Money, nullable=True, default=500)
    minimum_rental_nights = db.Column(db.Integer, nullable=True, default=2)

    insurance_policy_number = db.Column(db.String(64), nullable=True)
    primary_image_url = db.Column(db.String(500), nullable=True)
    image_urls = db.Column(db.JSON, nullable=True)

    total_bookings = db.Column(db.Integer, nullable=False, default=0)
    total_revenue = db.Column(Money, nullable=False, default=0)

    owner = db.relationship("Owner", back_populates="assets")
    bookings = db.relationship("Booking", back_populates="asset", lazy="dynamic", passive_deletes=True)

    __table_args__ = (
        db.Index("ix_assets_owner_status", "owner_id", "status"),
        db.Index("ix_assets_created_at", "created_at"),
    )

    def to_dict(self, include_owner=False):
        data = {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "year": self.year,
            "make": self.make,
            "model": self.model,
            "vin": self.vin,
            "license_plate": self.license_plate,
            "rv_type": self.rv_type,
            "length_feet": money(self.length_feet),
            "weight_lbs": self.weight_lbs,
            "sleeps": self.sleeps,
            "bedrooms": self.bedrooms,
            "bathrooms": money(self.bathrooms),
            "fuel_type": self.fuel_type,
            "mileage": self.mileage,
            "transmission": self.transmission,
            "features": self.features,
            "amenities": self.amenities,
            "storage_location": self.storage_location,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "base_price_per_night": money(self.base_price_per_night),
            "cleaning_fee": money(self.cleaning_fee),
            "security_deposit": money(self.security_deposit),
            "minimum_rental_nights": self.minimum_rental_nights,
            "insurance_policy_number": self.insurance_policy_number,
            "primary_image_url": self.primary_image_url,
            "image_urls": self.image_urls or [],
            "total_bookings": self.total_bookings,
            "total_revenue": money(self.total_revenue),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if include_owner:
            data["owners"] = (
                {"id": self.owner.id, "business_name": self.owner.business_name, "user_id": self.owner.user_id}
                if self.owner
                else None
            )
        return data
