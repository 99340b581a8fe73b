from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from consignments.errors import AppError
from consignments.extensions import bcrypt, db
from consignments.models import Owner, Renter, User

SIGNUP_ROLES = {"owner", "renter", "manager"}


class AuthService:
    @staticmethod
    def hash_password(password):
        return bcrypt.generate_password_hash(password).decode("utf-8")

    @staticmethod
    def register_user(full_name, email, password, role, phone=None, business_name=None):
        """Create a profile plus the matching owner or renter record."""
        role = (role or "renter").strip().lower()
        if role not in SIGNUP_ROLES:
            raise AppError("Invalid role.", 400)

        normalized_email = (email or "").strip().lower()
        if not normalized_email or not password:
            raise AppError("Email and password are required.", 400)
        if len(password) < 6:
            raise AppError("Password must be at least 6 characters.", 400)
        if User.query.filter_by(email=normalized_email).first():
            raise AppError("Email already registered.", 409)

        user = User(
            full_name=(full_name or "").strip() or None,
            email=normalized_email,
            phone=(phone or "").strip() or None,
            role=role,
            password_hash=AuthService.hash_password(password),
        )
        try:
            db.session.add(user)
            db.session.flush()
            if role == "owner":
                db.session.add(
                    Owner(
                        user_id=user.id,
                        business_name=(business_name or "").strip() or user.full_name,
                        contact_email=normalized_email,
                        contact_phone=user.phone,
                        revenue_split_percentage=70,
                        platform_fee_percentage=10,
                        contract_type="standard",
                        status="active",
                    )
                )
            elif role == "renter":
                db.session.add(Renter(user_id=user.id))
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise AppError("Email already registered.", 409) from exc
        return user

    @staticmethod
    def authenticate_user(email, password):
        user = User.query.filter_by(email=(email or "").strip().lower()).first()
        if not user:
            raise AppError("Invalid credentials.", 401)

        try:
            is_valid = bcrypt.check_password_hash(user.password_hash, password or "")
        except ValueError:
            is_valid = False
        if not is_valid:
            raise AppError("Invalid credentials.", 401)
        if not user.is_active_user:
            raise AppError("User account is inactive.", 403)

        user.last_login = datetime.now(timezone.utc)
        db.session.commit()
        return user

    @staticmethod
    def landing_endpoint(user):
        if user.role in {"manager", "admin"}:
            return "web_manager.dashboard"
        if user.role == "owner":
            return "web_dashboard.owner_portal"
        return "web_dashboard.renter_browse"
