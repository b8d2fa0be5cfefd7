from enum import Enum


class SupplierStatus(str, Enum):
    """
    Supplier onboarding status.

    PENDING: Application submitted, waiting for admin review
    APPROVED: Supplier may log in and list products
    REJECTED: Application denied by admin
    """
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class BusinessType(str, Enum):
    WHOLESALER = "wholesaler"
    RETAILER = "retailer"
    MANUFACTURER = "manufacturer"
