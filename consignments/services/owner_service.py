from decimal import Decimal

from sqlalchemy.orm import joinedload

from consignments.errors import AppError
from consignments.extensions import db
from consignments.models import Owner, User
from consignments.services.asset_service import AssetService
from consignments.services.common import apply_updates, parse_decimal, parse_int, require_fields

OWNER_TEXT_FIELDS = (
    "business_name",
    "address",
    "city",
    "state",
    "zip_code",
    "tax_id",
    "contact_email",
    "contact_phone",
    "preferred_payout_method",
    "contract_type",
    "status",
    "notes",
)
OWNER_DECIMAL_FIELDS = (
    "revenue_split_percentage",
    "platform_fee_percentage",
    "expense_cap_monthly",
    "minimum_guarantee_monthly",
)


def _percentage(value, label):
    number = parse_decimal(value, label)
    if number is not None and not Decimal("0") <= number <= Decimal("100"):
        raise AppError(f"{label} must be between 0 and 100.", 400)
    return number


OWNER_CONVERTERS = {
    "revenue_split_percentage": _percentage,
    "platform_fee_percentage": _percentage,
    "expense_cap_monthly": parse_decimal,
    "minimum_guarantee_monthly": parse_decimal,
}


class OwnerService:
    @staticmethod
    def list_owners():
        return Owner.query.options(joinedload(Owner.user)).order_by(Owner.created_at.desc(), Owner.id.desc()).all()

    @staticmethod
    def get_owner(owner_id):
        owner = db.session.get(Owner, owner_id)
        if not owner:
            raise AppError("Owner not found", 404)
        return owner

    @staticmethod
    def owner_for_user(user):
        return Owner.query.filter_by(user_id=user.id).first()

    @staticmethod
    def create_owner(payload):
        require_fields(payload, "business_name", message="business_name is required")
        user_id = parse_int(payload.get("user_id"), "user_id")
        if user_id is not None and not db.session.get(User, user_id):
            raise AppError("Profile not found", 404)

        owner = Owner(
            user_id=user_id,
            revenue_split_percentage=Decimal("70"),
            platform_fee_percentage=Decimal("10"),
            contract_type="standard",
            status="active",
        )
        apply_updates(owner, payload, OWNER_TEXT_FIELDS + OWNER_DECIMAL_FIELDS, OWNER_CONVERTERS)
        db.session.add(owner)
        db.session.commit()
        return owner

    @staticmethod
    def update_owner(owner_id, updates):
        owner = OwnerService.get_owner(owner_id)
        apply_updates(owner, updates, OWNER_TEXT_FIELDS + OWNER_DECIMAL_FIELDS, OWNER_CONVERTERS)
        db.session.commit()
        return owner

    @staticmethod
    def onboard_owner(form):
        """Create an owner and its first RV from the public onboarding form in one commit."""
        require_fields(
            form,
            "firstName",
            "lastName",
            "email",
            "rvYear",
            "rvMake",
            "rvModel",
            "basePrice",
            message="Name, email, RV details and base price are required",
        )
        first_name = form["firstName"].strip()
        last_name = form["lastName"].strip()
        email = form["email"].strip().lower()

        owner = Owner(
            business_name=(form.get("businessName") or "").strip() or f"{first_name} {last_name}",
            address=form.get("address"),
            city=form.get("city"),
            state=form.get("state"),
            zip_code=form.get("zipCode"),
            contact_email=email,
            contact_phone=form.get("phone"),
            revenue_split_percentage=Decimal("70"),
            platform_fee_percentage=Decimal("10"),
            contract_type="standard",
            status="pending_approval",
            notes=f"Onboarded via form. Contact: {email}, Phone: {form.get('phone') or 'n/a'}.",
        )
        existing_user = User.query.filter_by(email=email).first()
        if existing_user and existing_user.owner is None:
            owner.user_id = existing_user.id

        db.session.add(owner)
        db.session.flush()

        asset = AssetService.build_asset(
            owner,
            {
                "name": f"{form['rvYear']} {form['rvMake']} {form['rvModel']}",
                "year": form["rvYear"],
                "make": form["rvMake"],
                "model": form["rvModel"],
                "rv_type": form.get("rvType"),
                "vin": form.get("vin"),
                "license_plate": form.get("licensePlate"),
                "length_feet": form.get("length"),
                "sleeps": form.get("sleeps"),
                "base_price_per_night": form["basePrice"],
                "city": form.get("city"),
                "state": form.get("state"),
                "zip_code": form.get("zipCode"),
                "insurance_policy_number": form.get("policyNumber"),
            },
        )
        db.session.add(asset)
        db.session.commit()
        return owner, asset
