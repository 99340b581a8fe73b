from flask import Blueprint

from consignments.extensions import csrf
from consignments.routes.api.assets import api_asset_bp
from consignments.routes.api.auth import api_auth_bp
from consignments.routes.api.bookings import api_booking_bp
from consignments.routes.api.documents import api_document_bp
from consignments.routes.api.expenses import api_expense_bp
from consignments.routes.api.inspections import api_inspection_bp
from consignments.routes.api.maintenance import api_maintenance_bp
from consignments.routes.api.messages import api_message_bp
from consignments.routes.api.owners import api_onboard_bp, api_owner_bp
from consignments.routes.api.remittances import api_remittance_bp
from consignments.routes.api.reports import api_platform_bp, api_report_bp
from consignments.routes.api.sync import api_sync_bp, api_webhook_bp

api_bp = Blueprint("api", __name__)
api_bp.register_blueprint(api_auth_bp, url_prefix="/auth")
api_bp.register_blueprint(api_asset_bp, url_prefix="/assets")
api_bp.register_blueprint(api_booking_bp, url_prefix="/bookings")
api_bp.register_blueprint(api_expense_bp, url_prefix="/expenses")
api_bp.register_blueprint(api_owner_bp, url_prefix="/owners")
api_bp.register_blueprint(api_onboard_bp, url_prefix="/onboard")
api_bp.register_blueprint(api_inspection_bp, url_prefix="/inspections")
api_bp.register_blueprint(api_document_bp, url_prefix="/documents")
api_bp.register_blueprint(api_message_bp, url_prefix="/messages")
api_bp.register_blueprint(api_maintenance_bp, url_prefix="/maintenance")
api_bp.register_blueprint(api_remittance_bp, url_prefix="/remittances")
api_bp.register_blueprint(api_sync_bp, url_prefix="/sync")
api_bp.register_blueprint(api_webhook_bp, url_prefix="/webhooks")
api_bp.register_blueprint(api_report_bp, url_prefix="/reports")
api_bp.register_blueprint(api_platform_bp)

csrf.exempt(api_bp)
