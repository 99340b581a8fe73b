from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money

MAINTENANCE_STATUSES = {"requested", "scheduled", "in_progress", "completed", "cancelled"}
OPEN_MAINTENANCE_STATUSES = ("requested", "scheduled", "in_progress")


class MaintenanceRequest(TimestampMixin, db.Model):
    __tablename__ = "maintenance_requests"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    ticket_number = db.Column(db.String(40), nullable=False, unique=True, index=True)
    asset_id = db.Column(PKType, db.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = db.Column(PKType, db.ForeignKey("owners.id", ondelete="SET NULL"), nullable=True, index=True)
    reported_by = db.Column(PKType, db.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    priority = db.Column(db.String(16), nullable=False, default="MEDIUM")
    category = db.Column(db.String(48), nullable=True)
    status = db.Column(db.String(24), nullable=False, default="requested", index=True)

    scheduled_date = db.Column(db.Date, nullable=True)
    completion_date = db.Column(db.Date, nullable=True)
    estimated_cost = db.Column(Money, nullable=True)
    actual_cost = db.Column(Money, nullable=True)
    vendor_name = db.Column(db.String(180), nullable=True)
    vendor_contact = db.Column(db.String(180), nullable=True)
    resolution_notes = db.Column(db.Text, nullable=True)
    hubspot_ticket_id = db.Column(db.String(64), nullable=True)

    asset = db.relationship("Asset")
    owner = db.relationship("Owner")

    def to_dict(self, include_relations=False):
        data = {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "asset_id": self.asset_id,
            "owner_id": self.owner_id,
            "reported_by": self.reported_by,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "category": self.category,
            "status": self.status,
            "scheduled_date": iso(self.scheduled_date),
            "completion_date": iso(self.completion_date),
            "estimated_cost": money(self.estimated_cost),
            "actual_cost": money(self.actual_cost),
            "vendor_name": self.vendor_name,
            "vendor_contact": self.vendor_contact,
            "resolution_notes": self.resolution_notes,
            "hubspot_ticket_id": self.hubspot_ticket_id,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if include_relations:
            data["assets"] = {"name": self.asset.name} if self.asset else None
            data["owners"] = {"business_name": self.owner.business_name} if self.owner else None
        return data
