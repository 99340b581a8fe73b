from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money

# Repair estimates strictly above this are reported as major damage.
MAJOR_DAMAGE_THRESHOLD = 500


class DamageReport(TimestampMixin, db.Model):
    __tablename__ = "damage_reports"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    report_number = db.Column(db.String(40), nullable=False, unique=True, index=True)
    booking_id = db.Column(PKType, db.ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True)
    asset_id = db.Column(PKType, db.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    inspection_id = db.Column(
        PKType, db.ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    severity = db.Column(db.String(16), nullable=False, default="minor")
    discovery_date = db.Column(db.Date, nullable=False)
    estimated_repair_cost = db.Column(Money, nullable=True)
    status = db.Column(db.String(24), nullable=False, default="reported")

    inspection = db.relationship("Inspection", back_populates="damage_report")
    asset = db.relationship("Asset")
    booking = db.relationship("Booking")

    def to_dict(self, include_relations=False):
        data = {
            "id": self.id,
            "report_number": self.report_number,
            "booking_id": self.booking_id,
            "asset_id": self.asset_id,
            "inspection_id": self.inspection_id,
            "title": self.title,
            "description": self.description,
            "severity": self.severity,
            "discovery_date": iso(self.discovery_date),
            "estimated_repair_cost": money(self.estimated_repair_cost),
            "status": self.status,
            "created_at": iso(self.created_at),
        }
        if include_relations:
            data["assets"] = {"name": self.asset.name} if self.asset else None
            data["bookings"] = {"booking_number": self.booking.booking_number} if self.booking else None
        return data
