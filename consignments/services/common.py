import secrets
import string
import time
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from consignments.errors import AppError

CENTS = Decimal("0.01")


def epoch_ms():
    return int(time.time() * 1000)


def random_suffix(length=6):
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def quantize(value):
    return Decimal(value).quantize(CENTS)


def require_fields(payload, *fields, message=None):
    missing = [name for name in fields if payload.get(name) in (None, "")]
    if missing:
        raise AppError(message or f"Missing required fields: {', '.join(missing)}", 400)


def parse_date(value, label):
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise AppError(f"Invalid {label}; expected YYYY-MM-DD.", 400) from exc


def parse_datetime(value, label):
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    raw = str(value).replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(raw)
    except ValueError as exc:
        raise AppError(f"Invalid {label}.", 400) from exc


def parse_decimal(value, label, default=None):
    if value in (None, ""):
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise AppError(f"{label} must be a number.", 400) from exc


def parse_int(value, label, default=None):
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise AppError(f"{label} must be an integer.", 400) from exc


def parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def apply_updates(row, updates, fields, converters=None):
    """Copy whitelisted keys from ``updates`` onto ``row``, converting where asked."""
    converters = converters or {}
    for name in fields:
        if name not in updates:
            continue
        value = updates[name]
        convert = converters.get(name)
        if convert is not None:
            value = convert(value, name)
        setattr(row, name, value)
