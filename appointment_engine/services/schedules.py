"""Management of resource working windows, validated against owner hours."""

import logging
from dataclasses import replace
from typing import Optional

from appointment_engine.errors import WindowNotFound
from appointment_engine.scheduling.models import WorkingWindow
from appointment_engine.scheduling.timeutils import TimeLike, day_name, parse_time
from appointment_engine.schemas.schedule_schema import WorkingWindowInput
from appointment_engine.services.context import EngineContext

logger = logging.getLogger(__name__)


class ScheduleService:
    """Creates, updates and replaces working windows for a resource."""

    def __init__(self, context: EngineContext) -> None:
        self._ctx = context

    def create_window(self, owner_id: str, resource_id: str, weekday: int,
                      start: TimeLike, end: TimeLike) -> WorkingWindow:
        owner = self._ctx.require_owner(owner_id)
        self._ctx.require_resource(resource_id, owner_id)
        window = WorkingWindow.of(resource_id, weekday, start, end)
        self._ctx.validator.validate(
            window, owner.parent_window(weekday), self._ctx.resources.list_windows(resource_id),
        )
        saved = self._ctx.resources.save_window(window)
        logger.info("Working window %s created for %s on %s: %s",
                    saved.id, resource_id, day_name(weekday), saved)
        return saved

    def update_window(self, owner_id: str, resource_id: str, window_id: str,
                      start: Optional[TimeLike] = None, end: Optional[TimeLike] = None,
                      active: Optional[bool] = None) -> WorkingWindow:
        owner = self._ctx.require_owner(owner_id)
        self._ctx.require_resource(resource_id, owner_id)
        existing = self._find_window(resource_id, window_id)

        updated = replace(
            existing,
            start=existing.start if start is None else parse_time(start),
            end=existing.end if end is None else parse_time(end),
            active=existing.active if active is None else active,
        )
        if updated.active:
            self._ctx.validator.validate(
                updated, owner.parent_window(updated.weekday),
                self._ctx.resources.list_windows(resource_id),
            )
        else:
            self._ctx.validator.validate_window(updated)
        saved = self._ctx.resources.save_window(updated)
        logger.info("Working window %s updated: %s (active=%s)", window_id, saved, saved.active)
        return saved

    def remove_window(self, resource_id: str, window_id: str) -> None:
        self._find_window(resource_id, window_id)
        self._ctx.resources.delete_window(window_id)
        logger.info("Working window %s removed from %s", window_id, resource_id)

    def replace_weekly_schedule(self, owner_id: str, resource_id: str,
                                entries: list[WorkingWindowInput]) -> list[WorkingWindow]:
        """Validate a full weekly schedule, then swap it in for the old one.

        Nothing is written unless every entry passes.
        """
        owner = self._ctx.require_owner(owner_id)
        self._ctx.require_resource(resource_id, owner_id)
        windows = [
            WorkingWindow.of(resource_id, e.weekday, e.start_time, e.end_time, e.active)
            for e in entries
        ]
        self._ctx.validator.validate_weekly_schedule(windows)
        for window in windows:
            if window.active:
                self._ctx.validator.validate_containment(window, owner.parent_window(window.weekday))

        for old in self._ctx.resources.list_windows(resource_id):
            self._ctx.resources.delete_window(old.id)
        saved = [self._ctx.resources.save_window(w) for w in windows]
        logger.info("Weekly schedule replaced for %s: %d day(s)", resource_id, len(saved))
        return saved

    def _find_window(self, resource_id: str, window_id: str) -> WorkingWindow:
        for window in self._ctx.resources.list_windows(resource_id):
            if window.id == window_id:
                return window
        raise WindowNotFound(f"Schedule with ID {window_id} not found")
