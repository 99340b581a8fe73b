from consignments.models.asset import Asset
from consignments.models.booking import Booking
from consignments.models.communication import Communication
from consignments.models.damage_report import DamageReport
from consignments.models.document import Document
from consignments.models.expense import Expense
from consignments.models.inspection import Inspection
from consignments.models.maintenance import MaintenanceRequest
from consignments.models.owner import Owner
from consignments.models.remittance import Remittance
from consignments.models.renter import Renter
from consignments.models.transaction import Transaction
from consignments.models.user import User

__all__ = [
    "User",
    "Owner",
    "Renter",
    "Asset",
    "Booking",
    "Transaction",
    "Expense",
    "Remittance",
    "Document",
    "MaintenanceRequest",
    "Inspection",
    "DamageReport",
    "Communication",
]
