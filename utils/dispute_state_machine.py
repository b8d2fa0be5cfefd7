"""
Dispute State Machine.

Admins move disputes through review; Closed is final.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Set

from enums.dispute import DisputeStatus
from exceptions.dispute import InvalidDisputeTransitionException

logger = logging.getLogger(__name__)


class DisputeStateMachine:
    """
    Valid status transitions:
    - Pending -> In Review, Resolved, Escalated, Closed
    - In Review -> Resolved, Escalated, Closed
    - Escalated -> Resolved, Closed
    - Resolved -> Closed
    """

    VALID_TRANSITIONS: Dict[str, Set[str]] = {
        DisputeStatus.PENDING.value: {
            DisputeStatus.IN_REVIEW.value,
            DisputeStatus.RESOLVED.value,
            DisputeStatus.ESCALATED.value,
            DisputeStatus.CLOSED.value,
        },
        DisputeStatus.IN_REVIEW.value: {
            DisputeStatus.RESOLVED.value,
            DisputeStatus.ESCALATED.value,
            DisputeStatus.CLOSED.value,
        },
        DisputeStatus.ESCALATED.value: {
            DisputeStatus.RESOLVED.value,
            DisputeStatus.CLOSED.value,
        },
        DisputeStatus.RESOLVED.value: {DisputeStatus.CLOSED.value},
        DisputeStatus.CLOSED.value: set(),
    }

    # Disputes in these states block escrow release and new disputes on the same order
    OPEN_STATUSES: Set[str] = {
        DisputeStatus.PENDING.value,
        DisputeStatus.IN_REVIEW.value,
        DisputeStatus.ESCALATED.value,
    }

    @staticmethod
    def _value(status) -> str:
        return status.value if isinstance(status, Enum) else status

    @classmethod
    def is_valid_transition(cls, from_status, to_status) -> bool:
        return cls._value(to_status) in cls.VALID_TRANSITIONS.get(cls._value(from_status), set())

    @classmethod
    def is_open(cls, status) -> bool:
        return cls._value(status) in cls.OPEN_STATUSES

    @classmethod
    def get_valid_transitions(cls, from_status) -> List[str]:
        return sorted(cls.VALID_TRANSITIONS.get(cls._value(from_status), set()))

    @classmethod
    def ensure_transition(cls, dispute_id: int, from_status, to_status, admin_id: Optional[int] = None) -> None:
        from_value, to_value = cls._value(from_status), cls._value(to_status)
        if not cls.is_valid_transition(from_value, to_value):
            logger.error(f"Invalid status transition for dispute {dispute_id}: {from_value} -> {to_value}")
            raise InvalidDisputeTransitionException(dispute_id, from_value, to_value)
        performer = f"admin {admin_id}" if admin_id is not None else "system"
        logger.info(f"DISPUTE_STATUS_TRANSITION: Dispute {dispute_id} {from_value} -> {to_value} by {performer}")
