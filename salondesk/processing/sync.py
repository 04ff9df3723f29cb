"""Fetch/aggregate orchestration with stale-response protection.

Both the auto-sync timer and the manual "Sincronizar" button go through
``SyncController.refresh``. Each refresh gets a generation number; results
belonging to a generation older than one already resolved are discarded,
so a slow fetch cannot overwrite a newer one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Tuple, TypeVar

from salondesk.core.errors import AccessDeniedError, ConfigurationError, WebhookError
from salondesk.core.settings import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")

Feedback = Tuple[Optional[str], Optional[str]]


@dataclass
class ViewState(Generic[T]):
    """What a view renders: last good data plus the current problem, if any."""

    data: Optional[T] = None
    error: Optional[str] = None
    config_error: Optional[str] = None
    access_denied: bool = False
    skipped: int = 0

    @property
    def has_data(self) -> bool:
        return self.data is not None


class SyncController(Generic[T]):
    """Run ``fetch`` then ``aggregate`` and keep the newest successful result."""

    def __init__(
        self,
        fetch: Callable[[], Any],
        aggregate: Callable[[Any], T],
        label: str = "data",
    ) -> None:
        self.fetch = fetch
        self.aggregate = aggregate
        self.label = label
        self.state: ViewState[T] = ViewState()
        self._issued = 0
        self._resolved = 0

    def begin(self) -> int:
        """Reserve a generation number for a new fetch."""

        self._issued += 1
        return self._issued

    def is_stale(self, generation: int) -> bool:
        return generation < self._resolved

    def complete(self, generation: int, data: T, skipped: int = 0) -> bool:
        """Apply a successful result unless a newer generation already resolved."""

        if self.is_stale(generation):
            logger.info("Discarding stale %s result (generation %d < %d)", self.label, generation, self._resolved)
            return False
        self._resolved = generation
        self.state.data = data
        self.state.error = None
        self.state.config_error = None
        self.state.skipped = skipped
        return True

    def fail(self, generation: int, message: str) -> bool:
        """Record an error while keeping the previous data visible."""

        if self.is_stale(generation):
            logger.info("Ignoring stale %s failure (generation %d)", self.label, generation)
            return False
        self._resolved = generation
        self.state.error = message
        return True

    def refresh(self, session: Session, manual: bool = False) -> Feedback:
        """Fetch and aggregate once, returning a ``(message, level)`` toast.

        Initial loads report problems inline through ``state`` and return no
        toast; manual syncs also return a toast.
        """

        try:
            session.require_admin()
        except AccessDeniedError:
            self.state.access_denied = True
            return None, None
        self.state.access_denied = False

        generation = self.begin()
        try:
            data = self.aggregate(self.fetch())
        except ConfigurationError as exc:
            self.state.config_error = str(exc)
            logger.error("Cannot sync %s: %s", self.label, exc)
            return (str(exc), "warning") if manual else (None, None)
        except WebhookError as exc:
            message = f"Error loading {self.label}: {exc}"
            self.fail(generation, message)
            return (message, "error") if manual else (None, None)

        skipped = len(getattr(data, "skipped", []) or [])
        applied = self.complete(generation, data, skipped=skipped)
        if applied and manual:
            return f"Synchronized: the {self.label} list has been updated.", "success"
        return None, None
