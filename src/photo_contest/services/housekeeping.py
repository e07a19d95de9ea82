"""Background housekeeping: session expiry and inactivity purge."""

import logging
from dataclasses import dataclass, field

from photo_contest.services.catalog import SubmissionCatalog
from photo_contest.services.control import ControlService
from photo_contest.services.sessions import SessionService
from photo_contest.services.timers import TimerHandle, TimerService

_logger = logging.getLogger(__name__)


@dataclass
class Housekeeper:
    """Expires abandoned sessions and optionally wipes everything when idle.

    The expiry sweep reschedules itself every ``sweep_interval_seconds``. The
    inactivity purge is a single-shot timer pushed back by each call to
    ``record_activity``; it is disabled when ``inactivity_purge_seconds`` is None.
    """

    timer: TimerService
    session_service: SessionService
    catalog: SubmissionCatalog
    control: ControlService
    session_timeout_seconds: float = 300
    sweep_interval_seconds: float = 60
    inactivity_purge_seconds: float | None = None
    _running: bool = field(default=False, init=False)
    _sweep_handle: TimerHandle | None = field(default=None, init=False)
    _purge_handle: TimerHandle | None = field(default=None, init=False)

    def start(self) -> None:
        """Begin periodic sweeps and arm the inactivity timer."""
        if self._running:
            return
        self._running = True
        self._schedule_sweep()
        self._arm_purge()

    def stop(self) -> None:
        """Cancel all pending timers."""
        self._running = False
        if self._sweep_handle is not None:
            self._sweep_handle.cancel()
            self._sweep_handle = None
        if self._purge_handle is not None:
            self._purge_handle.cancel()
            self._purge_handle = None

    def record_activity(self) -> None:
        """Note user activity and push back the inactivity purge."""
        self.control.flags.last_activity = self.timer.now()
        if self._running:
            self._arm_purge()

    def sweep_sessions(self) -> int:
        """Remove sessions that have been idle past the timeout."""
        expired = self.session_service.expire_stale(
            self.timer.now(), self.session_timeout_seconds
        )
        if expired:
            _logger.info("Expired %s idle sessions", expired)
        return expired

    def purge(self) -> None:
        """Clear the whole catalog and every session."""
        records = self.catalog.clear()
        sessions = self.session_service.clear()
        _logger.info(
            "Inactivity purge removed %s entries and %s sessions", records, sessions
        )

    def _schedule_sweep(self) -> None:
        self._sweep_handle = self.timer.call_later(
            self.sweep_interval_seconds, self._run_sweep
        )

    def _run_sweep(self) -> None:
        try:
            self.sweep_sessions()
        except Exception:
            _logger.exception("Session sweep failed")
        finally:
            if self._running:
                self._schedule_sweep()

    def _arm_purge(self) -> None:
        if self.inactivity_purge_seconds is None:
            return
        if self._purge_handle is not None:
            self._purge_handle.cancel()
        self._purge_handle = self.timer.call_later(
            self.inactivity_purge_seconds, self._run_purge
        )

    def _run_purge(self) -> None:
        self._purge_handle = None
        try:
            self.purge()
        except Exception:
            _logger.exception("Inactivity purge failed")
