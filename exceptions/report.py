"""
Report exceptions.
"""

from .base import MarketplaceException


class ReportException(MarketplaceException):
    """Base exception for report errors."""
    pass


class ReportNotFoundException(ReportException):

    def __init__(self, report_id: int):
        super().__init__(
            f"Report {report_id} not found",
            details={'report_id': report_id}
        )
        self.report_id = report_id


class SelfReportException(ReportException):

    def __init__(self, user_id: int):
        super().__init__(
            "You cannot report yourself",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class InvalidReportTransitionException(ReportException):

    def __init__(self, report_id: int, from_status: str, to_status: str):
        super().__init__(
            f"Cannot change report status from '{from_status}' to '{to_status}'",
            details={'report_id': report_id, 'from_status': from_status, 'to_status': to_status}
        )
        self.report_id = report_id
        self.from_status = from_status
        self.to_status = to_status
