from consignments.extensions import db
from consignments.models.base import Money, PKType, TimestampMixin, iso, money


class Owner(TimestampMixin, db.Model):
    __tablename__ = "owners"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    user_id = db.Column(PKType, db.ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    business_name = db.Column(db.String(180), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=True)
    state = db.Column(db.String(64), nullable=True)
    zip_code = db.Column(db.String(16), nullable=True)
    tax_id = db.Column(db.String(64), nullable=True)
    contact_email = db.Column(db.String(255), nullable=True, index=True)
    contact_phone = db.Column(db.String(32), nullable=True)
    preferred_payout_method = db.Column(db.String(64), nullable=True)

    revenue_split_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=70)
    # Stored contract term; remittance math uses a fixed 10% platform rate.
    platform_fee_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=10)
    contract_type = db.Column(db.String(32), nullable=True, default="standard")
    expense_cap_monthly = db.Column(Money, nullable=True)
    minimum_guarantee_monthly = db.Column(Money, nullable=True)

    status = db.Column(db.String(32), nullable=True, default="active", index=True)
    notes = db.Column(db.Text, nullable=True)
    hubspot_contact_id = db.Column(db.String(64), nullable=True)

    user = db.relationship("User", back_populates="owner")
    assets = db.relationship("Asset", back_populates="owner", lazy="dynamic", passive_deletes=True)

    @property
    def email(self):
        if self.user and self.user.email:
            return self.user.email
        return self.contact_email

    def to_dict(self, include_profile=False):
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "business_name": self.business_name,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "tax_id": self.tax_id,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "preferred_payout_method": self.preferred_payout_method,
            "revenue_split_percentage": money(self.revenue_split_percentage),
            "platform_fee_percentage": money(self.platform_fee_percentage),
            "contract_type": self.contract_type,
            "expense_cap_monthly": money(self.expense_cap_monthly),
            "minimum_guarantee_monthly": money(self.minimum_guarantee_monthly),
            "status": self.status,
            "notes": self.notes,
            "hubspot_contact_id": self.hubspot_contact_id,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if include_profile:
            data["profiles"] = (
                {"id": self.user.id, "full_name": self.user.full_name, "email": self.user.email}
                if self.user
                else None
            )
        return data
