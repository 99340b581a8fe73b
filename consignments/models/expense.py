from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money

EXPENSE_CATEGORIES = {"maintenance", "repair", "cleaning", "insurance", "registration", "storage", "fuel", "other"}
EXPENSE_STATUSES = {"pending", "approved", "rejected"}


class Expense(TimestampMixin, db.Model):
    __tablename__ = "expenses"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    asset_id = db.Column(PKType, db.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = db.Column(PKType, db.ForeignKey("owners.id", ondelete="SET NULL"), nullable=True, index=True)
    maintenance_request_id = db.Column(
        PKType, db.ForeignKey("maintenance_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )

    category = db.Column(db.String(24), nullable=False)
    amount = db.Column(Money, nullable=False)
    description = db.Column(db.Text, nullable=False)
    vendor = db.Column(db.String(180), nullable=True)

    status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    approved_by = db.Column(PKType, db.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    deduct_from_owner = db.Column(db.Boolean, nullable=False, default=True)
    owner_responsible_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=100)
    receipt_url = db.Column(db.String(500), nullable=True)
    expense_date = db.Column(db.Date, nullable=False, index=True)

    asset = db.relationship("Asset")
    owner = db.relationship("Owner")
    maintenance_request = db.relationship("MaintenanceRequest")

    def to_dict(self, include_relations=False):
        data = {
            "id": self.id,
            "asset_id": self.asset_id,
            "owner_id": self.owner_id,
            "maintenance_request_id": self.maintenance_request_id,
            "category": self.category,
            "amount": money(self.amount),
            "description": self.description,
            "vendor": self.vendor,
            "status": self.status,
            "approved_by": self.approved_by,
            "approved_at": iso(self.approved_at),
            "deduct_from_owner": self.deduct_from_owner,
            "owner_responsible_percentage": money(self.owner_responsible_percentage),
            "receipt_url": self.receipt_url,
            "expense_date": iso(self.expense_date),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if include_relations:
            data["assets"] = {"name": self.asset.name} if self.asset else None
            data["owners"] = {"business_name": self.owner.business_name} if self.owner else None
            data["maintenance_requests"] = (
                {"ticket_number": self.maintenance_request.ticket_number} if self.maintenance_request else None
            )
        return data
