from consignments.extensions import db
from consignments.models.base import PKType, TimestampMixin, iso


class Communication(TimestampMixin, db.Model):
    __tablename__ = "communications"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    from_user_id = db.Column(PKType, db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    to_user_id = db.Column(PKType, db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_id = db.Column(PKType, db.ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True)
    asset_id = db.Column(PKType, db.ForeignKey("assets.id", ondelete="SET NULL"), nullable=True, index=True)

    subject = db.Column(db.String(255), nullable=True)
    message = db.Column(db.Text, nullable=False)
    message_type = db.Column(db.String(24), nullable=False, default="general")
    is_read = db.Column(db.Boolean, nullable=False, default=False, index=True)
    read_at = db.Column(db.DateTime(timezone=True), nullable=True)

    sender = db.relationship("User", foreign_keys=[from_user_id])
    receiver = db.relationship("User", foreign_keys=[to_user_id])

    __table_args__ = (
        db.Index("ix_communications_pair_created", "from_user_id", "to_user_id", "created_at"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "from_user_id": self.from_user_id,
            "to_user_id": self.to_user_id,
            "booking_id": self.booking_id,
            "asset_id": self.asset_id,
            "subject": self.subject,
            "message": self.message,
            "message_type": self.message_type,
            "is_read": self.is_read,
            "read_at": iso(self.read_at),
            "created_at": iso(self.created_at),
            "from_user": (
                {"id": self.sender.id, "full_name": self.sender.full_name, "email": self.sender.email}
                if self.sender
                else None
            ),
            "to_user": (
                {"id": self.receiver.id, "full_name": self.receiver.full_name, "email": self.receiver.email}
                if self.receiver
                else None
            ),
        }
