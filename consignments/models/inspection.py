from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money

INSPECTION_TYPES = {"checkin", "checkout"}


class Inspection(TimestampMixin, db.Model):
    __tablename__ = "inspections"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    booking_id = db.Column(PKType, db.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    asset_id = db.Column(PKType, db.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    inspection_type = db.Column(db.String(16), nullable=False)
    inspector_id = db.Column(PKType, db.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    inspection_date = db.Column(db.DateTime(timezone=True), nullable=False)

    mileage = db.Column(db.Integer, nullable=True)
    fuel_level = db.Column(db.String(16), nullable=True)
    exterior_condition = db.Column(db.String(32), nullable=True)
    interior_condition = db.Column(db.String(32), nullable=True)
    mechanical_condition = db.Column(db.String(32), nullable=True)
    checklist_items = db.Column(db.JSON, nullable=True)

    damages_found = db.Column(db.Boolean, nullable=False, default=False)
    damage_description = db.Column(db.Text, nullable=True)
    estimated_repair_cost = db.Column(Money, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    booking = db.relationship("Booking")
    damage_report = db.relationship("DamageReport", back_populates="inspection", uselist=False)

    def to_dict(self):
        return {
            "id": self.id,
            "booking_id": self.booking_id,
            "asset_id": self.asset_id,
            "inspection_type": self.inspection_type,
            "inspector_id": self.inspector_id,
            "inspection_date": iso(self.inspection_date),
            "mileage": self.mileage,
            "fuel_level": self.fuel_level,
            "exterior_condition": self.exterior_condition,
            "interior_condition": self.interior_condition,
            "mechanical_condition": self.mechanical_condition,
            "checklist_items": self.checklist_items or {},
            "damages_found": self.damages_found,
            "damage_description": self.damage_description,
            "estimated_repair_cost": money(self.estimated_repair_cost),
            "notes": self.notes,
            "created_at": iso(self.created_at),
        }
