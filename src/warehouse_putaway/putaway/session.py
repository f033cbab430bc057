"""
Caller-side request handling for interactive put-away screens.

- SuggestionSession: last request wins; stale results are discarded
- Debouncer: collapses rapid input changes into one call
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from warehouse_putaway.putaway.errors import PutawayError
from warehouse_putaway.putaway.putaway_models import SuggestionRequest, SuggestionResult
from warehouse_putaway.putaway.suggestion_usecase import LocationProvider, suggest_locations
from warehouse_putaway.utils.config import PutawaySettings
from warehouse_putaway.utils.logger import get_logger

logger = get_logger(__name__)


class SuggestionSession:
    def __init__(self, provider: LocationProvider, settings: Optional[PutawaySettings] = None):
        self.provider = provider
        self.settings = settings or PutawaySettings()
        self.current: Optional[SuggestionResult] = None
        self.debouncer = Debouncer(self.settings.debounce_ms)
        self._generation = 0
        self._lock = threading.Lock()

    def next_token(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_latest(self, token: int) -> bool:
        with self._lock:
            return token == self._generation

    def apply(self, token: int, result: SuggestionResult) -> Optional[SuggestionResult]:
        with self._lock:
            if token != self._generation:
                logger.debug("Discarding stale suggestions | token=%d latest=%d", token, self._generation)
                return None
            self.current = result
            return result

    def run(self, request: SuggestionRequest) -> Optional[SuggestionResult]:
        """Compute suggestions; returns None if a newer request superseded this one."""
        token = self.next_token()
        result = suggest_locations(request, self.provider, self.settings)
        return self.apply(token, result)

    def submit(
        self,
        request: SuggestionRequest,
        on_result: Callable[[SuggestionResult], None],
        on_error: Optional[Callable[[PutawayError], None]] = None,
    ) -> None:
        """
        Debounced run for interactive input. on_result only sees results that
        are still current. Failures go to on_error (the screen shows them with
        a refresh action) and are logged when no handler is given.
        """
        def _run():
            try:
                result = self.run(request)
            except PutawayError as e:
                if on_error is None:
                    logger.warning("Debounced suggestion failed: %s", e)
                else:
                    on_error(e)
                return
            if result is not None:
                on_result(result)

        self.debouncer.call(_run)


class Debouncer:
    def __init__(self, interval_ms: int):
        self.interval = interval_ms / 1000.0
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Callable[[], None]] = None
        self._lock = threading.Lock()

    def call(self, fn: Callable, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = lambda: fn(*args, **kwargs)
            self._timer = threading.Timer(self.interval, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            pending, self._pending, self._timer = self._pending, None, None
        if pending is not None:
            pending()

    def flush(self) -> None:
        """Run the pending call now."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
        self._fire()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None
