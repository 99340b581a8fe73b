from consignments.extensions import db
from consignments.models.base import PKType, TimestampMixin, iso

DOCUMENT_TYPES = {
    "rental_receipt",
    "maintenance_receipt",
    "cleaning_invoice",
    "insurance_policy",
    "vehicle_registration",
    "consignment_contract",
    "rental_agreement",
    "inspection_report",
    "damage_report",
    "owner_statement",
    "payment_receipt",
    "other",
}


class Document(TimestampMixin, db.Model):
    __tablename__ = "documents"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    asset_id = db.Column(PKType, db.ForeignKey("assets.id", ondelete="SET NULL"), nullable=True, index=True)
    owner_id = db.Column(PKType, db.ForeignKey("owners.id", ondelete="SET NULL"), nullable=True, index=True)
    booking_id = db.Column(PKType, db.ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True)
    renter_id = db.Column(PKType, db.ForeignKey("renters.id", ondelete="SET NULL"), nullable=True)
    expense_id = db.Column(PKType, db.ForeignKey("expenses.id", ondelete="SET NULL"), nullable=True)

    document_type = db.Column(db.String(40), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    file_name = db.Column(db.String(255), nullable=False)
    file_url = db.Column(db.String(1000), nullable=False)
    storage_key = db.Column(db.String(500), nullable=True)
    file_size = db.Column(db.Integer, nullable=True)
    mime_type = db.Column(db.String(120), nullable=True)

    uploaded_by = db.Column(PKType, db.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    status = db.Column(db.String(24), nullable=False, default="active")

    asset = db.relationship("Asset")
    owner = db.relationship("Owner")
    booking = db.relationship("Booking")

    def to_dict(self, include_relations=False):
        data = {
            "id": self.id,
            "asset_id": self.asset_id,
            "owner_id": self.owner_id,
            "booking_id": self.booking_id,
            "renter_id": self.renter_id,
            "expense_id": self.expense_id,
            "document_type": self.document_type,
            "title": self.title,
            "description": self.description,
            "file_name": self.file_name,
            "file_url": self.file_url,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "uploaded_by": self.uploaded_by,
            "status": self.status,
            "created_at": iso(self.created_at),
        }
        if include_relations:
            data["assets"] = {"name": self.asset.name} if self.asset else None
            data["owners"] = {"business_name": self.owner.business_name} if self.owner else None
            data["bookings"] = {"booking_number": self.booking.booking_number} if self.booking else None
        return data
