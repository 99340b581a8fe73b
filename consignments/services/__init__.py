from consignments.services.asset_service import AssetService
from consignments.services.auth_service import AuthService
from consignments.services.booking_service import BookingService
from consignments.services.crm_sync_service import CrmSyncService, SyncResult
from consignments.services.expense_service import ExpenseService
from consignments.services.file_service import FileService
from consignments.services.inspection_service import InspectionService
from consignments.services.maintenance_service import MaintenanceService
from consignments.services.message_service import MessageService
from consignments.services.owner_service import OwnerService
from consignments.services.remittance_service import RemittanceService
from consignments.services.reporting_service import ReportingService

__all__ = [
    "AssetService",
    "AuthService",
    "BookingService",
    "CrmSyncService",
    "SyncResult",
    "ExpenseService",
    "FileService",
    "InspectionService",
    "MaintenanceService",
    "MessageService",
    "OwnerService",
    "RemittanceService",
    "ReportingService",
]
