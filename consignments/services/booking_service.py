import secrets
from decimal import Decimal

from sqlalchemy.orm import joinedload

from consignments.errors import AppError
from consignments.extensions import db
from consignments.models import Asset, Booking, Renter, Transaction
from consignments.models.booking import BOOKING_STATUSES
from consignments.services.common import (
    apply_updates,
    epoch_ms,
    parse_date,
    parse_datetime,
    parse_decimal,
    parse_int,
    quantize,
    require_fields,
)

# Fixed platform share of the nightly subtotal.
PLATFORM_FEE_RATE = Decimal("0.10")

BOOKING_UPDATE_FIELDS = (
    "status",
    "actual_checkin_time",
    "actual_checkout_time",
    "checkin_mileage",
    "checkout_mileage",
    "special_requests",
    "internal_notes",
    "security_deposit",
)


def _status(value, _label):
    status = (value or "").strip().lower()
    if status not in BOOKING_STATUSES:
        raise AppError("Invalid booking status.", 400)
    return status


BOOKING_CONVERTERS = {
    "status": _status,
    "actual_checkin_time": parse_datetime,
    "actual_checkout_time": parse_datetime,
    "checkin_mileage": parse_int,
    "checkout_mileage": parse_int,
    "security_deposit": parse_decimal,
}


class BookingService:
    @staticmethod
    def generate_booking_number(sequence=None):
        suffix = sequence if sequence is not None else secrets.randbelow(9000) + 1000
        return f"BK-{epoch_ms()}-{suffix}"

    @staticmethod
    def price(nightly_rate, total_nights, cleaning_fee):
        """Return ``(subtotal, platform_fee, total_amount)`` for a stay."""
        subtotal = quantize(nightly_rate * Decimal(total_nights))
        platform_fee = quantize(subtotal * PLATFORM_FEE_RATE)
        total = quantize(subtotal + cleaning_fee + platform_fee)
        return subtotal, platform_fee, total

    @staticmethod
    def list_bookings(status=None, asset_id=None, renter_id=None, owner_id=None):
        query = Booking.query.options(
            joinedload(Booking.asset),
            joinedload(Booking.renter).joinedload(Renter.user),
            joinedload(Booking.owner),
        ).order_by(Booking.created_at.desc(), Booking.id.desc())
        if status:
            query = query.filter(Booking.status == status)
        if asset_id:
            query = query.filter(Booking.asset_id == asset_id)
        if renter_id:
            query = query.filter(Booking.renter_id == renter_id)
        if owner_id:
            query = query.filter(Booking.owner_id == owner_id)
        return query.all()

    @staticmethod
    def get_booking(booking_id):
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise AppError("Booking not found", 404)
        return booking

    @staticmethod
    def create_booking(payload, booking_number=None):
        require_fields(
            payload, "asset_id", "start_date", "end_date", message="asset_id, start_date and end_date are required"
        )
        asset = db.session.get(Asset, parse_int(payload["asset_id"], "asset_id"))
        if not asset:
            raise AppError("Asset not found", 404)

        start_date = parse_date(payload["start_date"], "start_date")
        end_date = parse_date(payload["end_date"], "end_date")
        if end_date <= start_date:
            raise AppError("end_date must be after start_date.", 400)

        total_nights = parse_int(payload.get("total_nights"), "total_nights", (end_date - start_date).days)
        if total_nights <= 0:
            raise AppError("total_nights must be positive.", 400)

        nightly_rate = parse_decimal(payload.get("nightly_rate"), "nightly_rate", asset.base_price_per_night)
        cleaning_fee = parse_decimal(payload.get("cleaning_fee"), "cleaning_fee", asset.cleaning_fee or Decimal("0"))
        security_deposit = parse_decimal(payload.get("security_deposit"), "security_deposit", Decimal("0"))
        subtotal, platform_fee, total = BookingService.price(Decimal(nightly_rate), total_nights, Decimal(cleaning_fee))

        renter_id = parse_int(payload.get("renter_id"), "renter_id")
        if renter_id is not None and not db.session.get(Renter, renter_id):
            raise AppError("Renter not found", 404)

        booking = Booking(
            booking_number=booking_number or BookingService.generate_booking_number(),
            asset_id=asset.id,
            renter_id=renter_id,
            owner_id=parse_int(payload.get("owner_id"), "owner_id", asset.owner_id),
            start_date=start_date,
            end_date=end_date,
            total_nights=total_nights,
            nightly_rate=nightly_rate,
            subtotal=subtotal,
            cleaning_fee=cleaning_fee,
            security_deposit=security_deposit,
            platform_fee=platform_fee,
            total_amount=total,
            status=_status(payload.get("status") or "inquiry", "status"),
            special_requests=payload.get("special_requests"),
            internal_notes=payload.get("internal_notes"),
        )
        db.session.add(booking)
        db.session.flush()

        db.session.add(
            Transaction(
                booking_id=booking.id,
                asset_id=booking.asset_id,
                owner_id=booking.owner_id,
                renter_id=booking.renter_id,
                transaction_type="rental_income",
                amount=total,
                description=f"Rental income for booking {booking.booking_number}",
                status="pending",
                transaction_date=start_date,
            )
        )
        db.session.commit()
        return booking

    @staticmethod
    def update_booking(booking_id, updates):
        """Apply a partial update; any status may follow any other."""
        if not booking_id:
            raise AppError("Booking ID required", 400)
        booking = BookingService.get_booking(booking_id)
        apply_updates(booking, updates, BOOKING_UPDATE_FIELDS, BOOKING_CONVERTERS)

        if "status" in updates and booking.status == "completed":
            for row in Transaction.query.filter_by(booking_id=booking.id, transaction_type="rental_income"):
                row.status = "completed"
        db.session.commit()
        return booking

    @staticmethod
    def cancel_booking(booking_id):
        booking = BookingService.get_booking(booking_id)
        booking.status = "cancelled"
        db.session.commit()
        return booking
