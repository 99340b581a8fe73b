from flask_login import UserMixin

from consignments.extensions import db
from consignments.models.base import PKType, TimestampMixin, iso

USER_ROLES = {"manager", "owner", "renter", "admin"}


class User(UserMixin, TimestampMixin, db.Model):
    """Login profile; ``role`` decides which portal the user lands in."""

    __tablename__ = "profiles"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    full_name = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    role = db.Column(db.String(24), nullable=False, default="renter", index=True)
    avatar_url = db.Column(db.String(500), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active_user = db.Column(db.Boolean, nullable=False, default=True)
    last_login = db.Column(db.DateTime(timezone=True), nullable=True)

    owner = db.relationship("Owner", back_populates="user", uselist=False)
    renter = db.relationship("Renter", back_populates="user", uselist=False)

    @property
    def is_manager(self):
        return self.role in {"manager", "admin"}

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "phone": self.phone,
            "role": self.role,
            "avatar_url": self.avatar_url,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
