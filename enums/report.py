from enum import Enum


class ReportEntityType(str, Enum):
    USER = "User"
    PRODUCT = "Product"


class ReportType(str, Enum):
    SPAM = "Spam"
    ABUSE = "Abuse"
    FRAUD = "Fraud"
    OTHER = "Other"


class ReportStatus(str, Enum):
    PENDING = "Pending"
    RESOLVED = "Resolved"
    IGNORED = "Ignored"
