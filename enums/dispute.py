from enum import Enum


class DisputeStatus(str, Enum):
    PENDING = "Pending"
    IN_REVIEW = "In Review"
    RESOLVED = "Resolved"
    ESCALATED = "Escalated"
    CLOSED = "Closed"


class DisputeType(str, Enum):
    PRODUCT_ISSUE = "Product Issue"
    LATE_DELIVERY = "Late Delivery"
    WRONG_ITEM = "Wrong Item"
    REFUND = "Refund"
    OTHER = "Other"
