from decimal import Decimal

from sqlalchemy.orm import joinedload

from consignments.errors import AppError
from consignments.extensions import db
from consignments.models import Asset, Owner
from consignments.models.asset import ASSET_STATUSES
from consignments.services.common import apply_updates, parse_decimal, parse_int, require_fields

ASSET_TEXT_FIELDS = (
    "name",
    "description",
    "make",
    "model",
    "vin",
    "license_plate",
    "rv_type",
    "fuel_type",
    "transmission",
    "storage_location",
    "city",
    "state",
    "zip_code",
    "insurance_policy_number",
    "primary_image_url",
)
ASSET_INT_FIELDS = ("year", "weight_lbs", "sleeps", "bedrooms", "mileage", "minimum_rental_nights")
ASSET_DECIMAL_FIELDS = ("length_feet", "bathrooms", "base_price_per_night", "cleaning_fee", "security_deposit")
ASSET_JSON_FIELDS = ("features", "amenities", "image_urls")


def _status(value, _label):
    status = (value or "").strip().lower()
    if status not in ASSET_STATUSES:
        raise AppError("Invalid asset status.", 400)
    return status


ASSET_CONVERTERS = {
    "status": _status,
    **{name: parse_int for name in ASSET_INT_FIELDS},
    **{name: parse_decimal for name in ASSET_DECIMAL_FIELDS},
}


class AssetService:
    @staticmethod
    def list_assets(status=None, owner_id=None):
        query = Asset.query.options(joinedload(Asset.owner)).order_by(Asset.created_at.desc(), Asset.id.desc())
        if status:
            query = query.filter(Asset.status == status)
        if owner_id:
            query = query.filter(Asset.owner_id == owner_id)
        return query.all()

    @staticmethod
    def get_asset(asset_id):
        asset = db.session.get(Asset, asset_id)
        if not asset:
            raise AppError("Asset not found", 404)
        return asset

    @staticmethod
    def build_asset(owner, payload):
        """Construct an unsaved asset for ``owner`` with the standard defaults."""
        asset = Asset(
            owner_id=owner.id,
            status="pending_approval",
            cleaning_fee=Decimal("75"),
            security_deposit=Decimal("500"),
            minimum_rental_nights=2,
            total_bookings=0,
            total_revenue=Decimal("0"),
        )
        fields = ("status",) + ASSET_TEXT_FIELDS + ASSET_INT_FIELDS + ASSET_DECIMAL_FIELDS + ASSET_JSON_FIELDS
        apply_updates(asset, {k: v for k, v in payload.items() if v is not None}, fields, ASSET_CONVERTERS)
        if asset.base_price_per_night is None or asset.base_price_per_night <= 0:
            raise AppError("base_price_per_night must be a positive number.", 400)
        return asset

    @staticmethod
    def create_asset(payload):
        require_fields(
            payload,
            "owner_id",
            "name",
            "base_price_per_night",
            message="owner_id, name and base_price_per_night are required",
        )
        owner = db.session.get(Owner, parse_int(payload["owner_id"], "owner_id"))
        if not owner:
            raise AppError("Owner not found", 404)

        asset = AssetService.build_asset(owner, payload)
        db.session.add(asset)
        db.session.commit()
        return asset

    @staticmethod
    def update_asset(asset_id, updates):
        if not asset_id:
            raise AppError("Asset ID required", 400)
        asset = AssetService.get_asset(asset_id)
        fields = ("status",) + ASSET_TEXT_FIELDS + ASSET_INT_FIELDS + ASSET_DECIMAL_FIELDS + ASSET_JSON_FIELDS
        apply_updates(asset, updates, fields, ASSET_CONVERTERS)
        db.session.commit()
        return asset

    @staticmethod
    def delete_asset(asset_id):
        """Hard delete; deleting an id that is already gone still succeeds."""
        asset = db.session.get(Asset, asset_id)
        if asset is None:
            return False
        db.session.delete(asset)
        db.session.commit()
        return True

    @staticmethod
    def attach_image(asset, url):
        urls = list(asset.image_urls or [])
        urls.append(url)
        asset.image_urls = urls
        if not asset.primary_image_url:
            asset.primary_image_url = url
        db.session.commit()
        return asset
