"""Working-window resolution for a resource on a given weekday or date."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import TYPE_CHECKING, Optional

from appointment_engine.scheduling.models import OwnerConfig, WorkingWindow
from appointment_engine.scheduling.timeutils import weekday_of

if TYPE_CHECKING:
    from appointment_engine.repositories.base import ResourceRepository

logger = logging.getLogger(__name__)


class WorkingWindowResolver:
    """
    Looks up the time-of-day window a resource works on a day.

    A missing or inactive window means the resource does not work that
    day. When an owner config is supplied the resource window is clipped
    to the owner's opening hours, and a closed owner day yields no window.
    """

    def __init__(self, resources: ResourceRepository) -> None:
        self._resources = resources

    def resolve(self, resource_id: str, weekday: int,
                owner: Optional[OwnerConfig] = None) -> Optional[WorkingWindow]:
        window = self._resources.get_window(resource_id, weekday)
        if window is None or not window.active:
            return None
        if owner is None:
            return window

        parent = owner.parent_window(weekday)
        if parent is None:
            return window
        if not parent.active:
            logger.debug("Owner %s closed on weekday %d", owner.owner_id, weekday)
            return None
        start = max(window.start, parent.start)
        end = min(window.end, parent.end)
        if start >= end:
            return None
        if (start, end) != (window.start, window.end):
            window = replace(window, start=start, end=end)
        return window

    def resolve_for_date(self, resource_id: str, day: date,
                         owner: Optional[OwnerConfig] = None) -> Optional[WorkingWindow]:
        return self.resolve(resource_id, weekday_of(day), owner)

    def resolve_owner(self, owner: OwnerConfig, weekday: int) -> Optional[WorkingWindow]:
        """The owner's own opening window, or None when closed or undefined."""
        parent = owner.parent_window(weekday)
        if parent is None or not parent.active:
            return None
        return parent

    def admits(self, resource_id: str, day: date, start: int, end: int,
               owner: Optional[OwnerConfig] = None) -> bool:
        """True when ``[start, end)`` lies fully inside the resource's window that day."""
        window = self.resolve_for_date(resource_id, day, owner)
        return window is not None and window.admits(start, end)
