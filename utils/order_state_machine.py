"""
Order State Machine for validating order status transitions and maintaining consistency.

This module implements a finite state machine to ensure valid order status transitions
and provide audit logging for all status changes. Every transition names the actors
allowed to perform it, so a supplier can't refund and a buyer can't ship.

The payment status of an order has its own, smaller machine (PaymentStateMachine).
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from exceptions.order import InvalidOrderTransitionException
from exceptions.payment import InvalidPaymentTransitionException

logger = logging.getLogger(__name__)


class TransitionActor(str, Enum):
    SYSTEM = "system"
    BUYER = "buyer"
    SUPPLIER = "supplier"
    ADMIN = "admin"


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus,
                 actors: Tuple[TransitionActor, ...], description: str = ""):
        self.from_status = from_status.value
        self.to_status = to_status.value
        self.actors = frozenset(actors)
        self.description = description

    def __repr__(self):
        actors = ",".join(sorted(a.value for a in self.actors))
        return f"{self.from_status} -> {self.to_status} ({actors})"


class OrderStateMachine:
    """
    Finite state machine for order status transitions with validation and audit logging.

    Valid status transitions:
    - Pending -> Processing (system on payment, supplier or admin)
    - Pending -> Cancelled (buyer, supplier or admin)
    - Processing -> Shipped (supplier or admin)
    - Processing -> Cancelled (admin only)
    - Processing -> Refunded (admin, refund approval)
    - Shipped -> Delivered (supplier or admin)
    - Delivered -> Refunded (admin, refund approval)

    Cancelled and Refunded are final.
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        # From Pending
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.PROCESSING,
            actors=(TransitionActor.SYSTEM, TransitionActor.SUPPLIER, TransitionActor.ADMIN),
            description="Payment confirmed or order accepted"
        ),
        OrderStatusTransition(
            OrderStatus.PENDING,
            OrderStatus.CANCELLED,
            actors=(TransitionActor.BUYER, TransitionActor.SUPPLIER, TransitionActor.ADMIN),
            description="Order cancelled before processing"
        ),

        # From Processing
        OrderStatusTransition(
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            actors=(TransitionActor.SUPPLIER, TransitionActor.ADMIN),
            description="Order handed to delivery provider"
        ),
        OrderStatusTransition(
            OrderStatus.PROCESSING,
            OrderStatus.CANCELLED,
            actors=(TransitionActor.ADMIN,),
            description="Processing order cancelled by admin"
        ),
        OrderStatusTransition(
            OrderStatus.PROCESSING,
            OrderStatus.REFUNDED,
            actors=(TransitionActor.ADMIN,),
            description="Refund approved before shipping"
        ),

        # From Shipped
        OrderStatusTransition(
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
            actors=(TransitionActor.SUPPLIER, TransitionActor.ADMIN),
            description="Order delivered to buyer"
        ),

        # From Delivered
        OrderStatusTransition(
            OrderStatus.DELIVERED,
            OrderStatus.REFUNDED,
            actors=(TransitionActor.ADMIN,),
            description="Refund approved after delivery"
        ),
    ]

    FINAL_STATUSES: Set[str] = {OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value}

    _transition_map: Dict[str, Set[str]] = {}
    _transition_actors: Dict[tuple, frozenset] = {}
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        if cls._transition_map:
            return

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            key = (transition.from_status, transition.to_status)
            cls._transition_actors[key] = transition.actors
            cls._transition_descriptions[key] = transition.description

    @staticmethod
    def _value(status) -> str:
        return status.value if isinstance(status, Enum) else status

    @classmethod
    def is_valid_transition(cls, from_status, to_status) -> bool:
        """
        Check if a status transition exists in the state machine.

        Staying in the same status is not a transition and is rejected.
        """
        cls._build_transition_map()
        from_status, to_status = cls._value(from_status), cls._value(to_status)
        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def is_allowed(cls, from_status, to_status, actor: TransitionActor) -> bool:
        """Check that the transition is valid and the actor may perform it."""
        if not cls.is_valid_transition(from_status, to_status):
            return False
        key = (cls._value(from_status), cls._value(to_status))
        return actor in cls._transition_actors[key]

    @classmethod
    def get_valid_transitions(cls, from_status, actor: Optional[TransitionActor] = None) -> List[str]:
        """Get the next statuses reachable from the current one, optionally for a given actor."""
        cls._build_transition_map()
        from_status = cls._value(from_status)
        destinations = cls._transition_map.get(from_status, set())
        if actor is None:
            return sorted(destinations)
        return sorted(d for d in destinations if actor in cls._transition_actors[(from_status, d)])

    @classmethod
    def get_transition_description(cls, from_status, to_status) -> str:
        cls._build_transition_map()
        from_status, to_status = cls._value(from_status), cls._value(to_status)
        return cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status} to {to_status}"
        )

    @classmethod
    def is_final_status(cls, status) -> bool:
        return cls._value(status) in cls.FINAL_STATUSES

    @classmethod
    def validate_and_log_transition(cls, order_id: int, from_status, to_status,
                                    actor: TransitionActor, actor_id: Optional[int] = None) -> bool:
        """
        Validate a status transition and create audit log entry.

        Args:
            order_id: ID of the order being transitioned
            from_status: Current order status
            to_status: Desired new status
            actor: Role in which the caller acts on this order
            actor_id: User ID of the caller (None for system)

        Returns:
            True if transition is valid and logged, False otherwise
        """
        from_value, to_value = cls._value(from_status), cls._value(to_status)
        if not cls.is_valid_transition(from_value, to_value):
            logger.error(f"Invalid status transition for order {order_id}: {from_value} -> {to_value}")
            return False

        if not cls.is_allowed(from_value, to_value, actor):
            logger.error(f"Actor {actor.value} may not transition order {order_id}: {from_value} -> {to_value}")
            return False

        transition_desc = cls.get_transition_description(from_value, to_value)
        performer = f"{actor.value} {actor_id}" if actor_id is not None else actor.value
        logger.info(f"ORDER_STATUS_TRANSITION: Order {order_id} {from_value} -> {to_value} by {performer}: {transition_desc}")
        return True

    @classmethod
    def ensure_transition(cls, order_id: int, from_status, to_status,
                          actor: TransitionActor, actor_id: Optional[int] = None) -> None:
        """Same as validate_and_log_transition but raises InvalidOrderTransitionException."""
        if not cls.validate_and_log_transition(order_id, from_status, to_status, actor, actor_id):
            raise InvalidOrderTransitionException(
                order_id, cls._value(from_status), cls._value(to_status), actor.value
            )


class PaymentStateMachine:
    """
    Payment status of an order:
    - unpaid -> paid, unpaid -> failed
    - failed -> paid, failed -> unpaid (retry)
    - paid -> refunded
    """

    VALID_TRANSITIONS: Dict[str, Set[str]] = {
        PaymentStatus.UNPAID.value: {PaymentStatus.PAID.value, PaymentStatus.FAILED.value},
        PaymentStatus.FAILED.value: {PaymentStatus.PAID.value, PaymentStatus.UNPAID.value},
        PaymentStatus.PAID.value: {PaymentStatus.REFUNDED.value},
        PaymentStatus.REFUNDED.value: set(),
    }

    @classmethod
    def is_valid_transition(cls, from_status, to_status) -> bool:
        from_status = from_status.value if isinstance(from_status, Enum) else from_status
        to_status = to_status.value if isinstance(to_status, Enum) else to_status
        return to_status in cls.VALID_TRANSITIONS.get(from_status, set())

    @classmethod
    def ensure_transition(cls, order_id: int, from_status, to_status) -> None:
        from_value = from_status.value if isinstance(from_status, Enum) else from_status
        to_value = to_status.value if isinstance(to_status, Enum) else to_status
        if not cls.is_valid_transition(from_value, to_value):
            logger.error(f"Invalid payment transition for order {order_id}: {from_value} -> {to_value}")
            raise InvalidPaymentTransitionException(order_id, from_value, to_value)
        logger.info(f"PAYMENT_STATUS_TRANSITION: Order {order_id} {from_value} -> {to_value}")
