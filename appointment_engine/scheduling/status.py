"""
Booking status lifecycle as an explicit finite state machine.

Statuses are a closed enumeration; every allowed change is listed in
``TRANSITIONS`` and anything else is rejected with a clear error naming
the transitions that are valid from the current status.

Usage:
    sm = BookingStatusMachine(BookingStatus.PENDING)
    sm.transition(StatusTrigger.CONFIRM)
    assert sm.current_status == BookingStatus.CONFIRMED
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from appointment_engine.errors import InvalidStatusTransition

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """All possible states in a booking lifecycle."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Statuses that occupy the resource's time for conflict purposes.
ACTIVE_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.IN_PROGRESS,
})


class StatusTrigger(str, Enum):
    """Events that move a booking between statuses."""
    CONFIRM = "confirm"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"
    MARK_NO_SHOW = "mark_no_show"


@dataclass(frozen=True)
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    trigger: StatusTrigger


@dataclass(frozen=True)
class StatusEntry:
    """Recorded history entry for a status change."""
    status: BookingStatus
    entered_at: datetime
    trigger: Optional[StatusTrigger] = None
    reason: Optional[str] = None


TRANSITIONS: list[Transition] = [
    Transition(BookingStatus.PENDING, BookingStatus.CONFIRMED, StatusTrigger.CONFIRM),
    Transition(BookingStatus.PENDING, BookingStatus.CANCELLED, StatusTrigger.CANCEL),
    Transition(BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS, StatusTrigger.START),
    Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED, StatusTrigger.CANCEL),
    Transition(BookingStatus.CONFIRMED, BookingStatus.NO_SHOW, StatusTrigger.MARK_NO_SHOW),
    Transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED, StatusTrigger.COMPLETE),
    Transition(BookingStatus.IN_PROGRESS, BookingStatus.NO_SHOW, StatusTrigger.MARK_NO_SHOW),
]


def is_active(status: BookingStatus) -> bool:
    return status in ACTIVE_STATUSES


def initial_status(requires_approval: bool) -> BookingStatus:
    """Status of a freshly created booking for the owner's approval policy."""
    return BookingStatus.PENDING if requires_approval else BookingStatus.CONFIRMED


def trigger_for(current: BookingStatus, target: BookingStatus) -> StatusTrigger:
    """Find the trigger leading from ``current`` to ``target``.

    Raises:
        InvalidStatusTransition: If the table has no such edge.
    """
    for t in TRANSITIONS:
        if t.from_status == current and t.to_status == target:
            return t.trigger
    raise InvalidStatusTransition(
        f"Cannot move booking from '{current.value}' to '{target.value}'. "
        f"Allowed targets: {[s.value for s in allowed_targets(current)]}"
    )


def allowed_targets(current: BookingStatus) -> list[BookingStatus]:
    return [t.to_status for t in TRANSITIONS if t.from_status == current]


class BookingStatusMachine:
    """
    Deterministic status machine for a single booking.

    Terminal statuses (completed, cancelled, no_show) have no outgoing
    transitions.
    """

    def __init__(self, status: BookingStatus = BookingStatus.PENDING) -> None:
        self._current_status = BookingStatus(status)
        self._history: list[StatusEntry] = [
            StatusEntry(status=self._current_status, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_status(self) -> BookingStatus:
        return self._current_status

    def transition(self, trigger: StatusTrigger, reason: Optional[str] = None) -> BookingStatus:
        """
        Execute a status transition.

        Args:
            trigger: The event triggering the transition.
            reason: Optional free-text reason (kept for cancellations).

        Returns:
            The new booking status.

        Raises:
            InvalidStatusTransition: If no valid transition exists.
        """
        for t in TRANSITIONS:
            if t.from_status == self._current_status and t.trigger == trigger:
                old_status = self._current_status
                self._current_status = t.to_status
                self._history.append(StatusEntry(
                    status=self._current_status,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                    reason=reason,
                ))
                logger.debug(
                    "Status transition: %s -> %s (trigger: %s)",
                    old_status.value, self._current_status.value, trigger.value,
                )
                return self._current_status

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidStatusTransition(
            f"No valid transition from '{self._current_status.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[StatusTrigger]:
        """Return all triggers valid from the current status."""
        return [t.trigger for t in TRANSITIONS if t.from_status == self._current_status]

    def get_history(self) -> list[StatusEntry]:
        return list(self._history)

    def is_terminal(self) -> bool:
        return not self.get_valid_triggers()

    def is_active(self) -> bool:
        return is_active(self._current_status)
