"""Global loading indicator: debounced show/hide driven by the query cache.

State machine IDLE -> PENDING_SHOW -> SHOWN -> HIDING -> IDLE with two timers:
the show delay (skip the indicator for fast loads) and a hard timeout that
force-hides it if a load never resolves. Hiding never cancels the load.

Timers go through an injectable call_later so tests can fire them by hand.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any, Protocol

from app.domain.enums import IndicatorState
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


def _loop_call_later(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class LoadingIndicator:
    """Debounced visibility of the "something is loading" indicator."""

    def __init__(
        self,
        show_delay: float = 0.3,
        hide_delay: float = 0.2,
        quick_load: float = 0.5,
        max_visible: float = 10.0,
        call_later: CallLater | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize in IDLE.

        Args:
            show_delay: Seconds a load must last before the indicator shows.
            hide_delay: Seconds the indicator lingers after a long load ends.
            quick_load: Loads shorter than this hide immediately.
            max_visible: Hard timeout in seconds after which the indicator is force-hidden.
            call_later: Timer factory (delay, callback) -> handle; asyncio loop by default.
            clock: Time source used to measure load duration.
        """
        self.show_delay = show_delay
        self.hide_delay = hide_delay
        self.quick_load = quick_load
        self.max_visible = max_visible
        self._call_later = call_later or _loop_call_later
        self._clock = clock
        self._state = IndicatorState.IDLE
        self._started_at: float | None = None
        self._show_timer: TimerHandle | None = None
        self._hide_timer: TimerHandle | None = None
        self._timeout_timer: TimerHandle | None = None

    @property
    def state(self) -> IndicatorState:
        return self._state

    @property
    def visible(self) -> bool:
        return self._state in (IndicatorState.SHOWN, IndicatorState.HIDING)

    def set_loading(self, loading: bool) -> None:
        """React to a change of the global loading flag (QueryCache listener)."""
        if loading:
            self._loading_started()
        else:
            self._loading_stopped()

    def reset(self) -> None:
        """Cancel all timers and return to IDLE."""
        self._cancel_timers()
        self._started_at = None
        self._state = IndicatorState.IDLE

    def to_dict(self) -> dict[str, Any]:
        return {"state": self._state.value, "visible": self.visible}

    def _loading_started(self) -> None:
        if self._state == IndicatorState.HIDING:
            self._cancel(self._hide_timer)
            self._hide_timer = None
            self._started_at = self._clock()
            self._restart_timeout()
            self._state = IndicatorState.SHOWN
            return
        if self._state != IndicatorState.IDLE:
            return
        self._started_at = self._clock()
        self._show_timer = self._call_later(self.show_delay, self._on_show_timer)
        self._restart_timeout()
        self._state = IndicatorState.PENDING_SHOW

    def _loading_stopped(self) -> None:
        if self._state == IndicatorState.PENDING_SHOW:
            self.reset()
            return
        if self._state != IndicatorState.SHOWN:
            return
        self._cancel(self._timeout_timer)
        self._timeout_timer = None
        started = self._started_at if self._started_at is not None else self._clock()
        duration = self._clock() - started
        self._started_at = None
        if duration < self.quick_load:
            self._state = IndicatorState.IDLE
            return
        self._hide_timer = self._call_later(self.hide_delay, self._on_hide_timer)
        self._state = IndicatorState.HIDING

    def _on_show_timer(self) -> None:
        self._show_timer = None
        if self._state == IndicatorState.PENDING_SHOW:
            self._state = IndicatorState.SHOWN

    def _on_hide_timer(self) -> None:
        self._hide_timer = None
        if self._state == IndicatorState.HIDING:
            self._state = IndicatorState.IDLE

    def _on_timeout(self) -> None:
        self._timeout_timer = None
        if self._state == IndicatorState.IDLE:
            return
        logger.warning(
            "Loading indicator active for over %s seconds, auto-hiding", self.max_visible
        )
        self.reset()

    def _restart_timeout(self) -> None:
        self._cancel(self._timeout_timer)
        self._timeout_timer = self._call_later(self.max_visible, self._on_timeout)

    def _cancel_timers(self) -> None:
        for handle in (self._show_timer, self._hide_timer, self._timeout_timer):
            self._cancel(handle)
        self._show_timer = self._hide_timer = self._timeout_timer = None

    @staticmethod
    def _cancel(handle: TimerHandle | None) -> None:
        if handle is not None:
            handle.cancel()
