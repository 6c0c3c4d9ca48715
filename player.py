# SPDX-License-Identifier: GPL-3.0-or-later
"""
Playback scheduler.

A playback turns a frozen event list into deferred callbacks on a timer
facility (see timers.py) instead of sleeping between events, so the
thread that drives the timer is never blocked and stop() can revoke
everything that has not fired yet.

Modes and legal transitions:

    IDLE    -> FINITE | LOOPING     play()
    FINITE  -> IDLE                 completion marker or stop()
    LOOPING -> IDLE                 stop()

Finite playbacks schedule every run up front. Looping playbacks schedule
one run at a time and re-arm themselves from a chaining marker that fires
`run + gap` after the run was scheduled.
"""
import enum
import functools
import itertools
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Union

from errors import InvalidTransition
from executor import ActionExecutor
from models import Event
from timers import Timer
from utils import plural, total_duration

logger = logging.getLogger(__name__)

INFINITE = "infinite"

Repeat = Union[int, str]


class PlaybackMode(enum.Enum):
    IDLE = "idle"
    FINITE = "finite"
    LOOPING = "looping"


TRANSITIONS = {
    PlaybackMode.IDLE: {PlaybackMode.FINITE, PlaybackMode.LOOPING},
    PlaybackMode.FINITE: {PlaybackMode.IDLE},
    PlaybackMode.LOOPING: {PlaybackMode.IDLE},
}


@dataclass
class SchedulerState:
    mode: PlaybackMode = PlaybackMode.IDLE
    runs: Optional[int] = None          # requested run count, None while looping
    completed_runs: int = 0
    speed: float = 1.0                  # snapshot taken when the playback started
    run_duration: float = 0.0           # already divided by speed
    gap: float = 0.0                    # already divided by speed
    timers: Dict[int, Any] = field(default_factory=dict)

    @property
    def running(self) -> bool:
        return self.mode is not PlaybackMode.IDLE

    @property
    def looping(self) -> bool:
        return self.mode is PlaybackMode.LOOPING


class Player:
    """
    Plays back recorded events with speed scaling, repeat counts,
    infinite looping and gaps between runs. Only one playback at a time.
    """
    def __init__(self, timer: Timer, executor: ActionExecutor,
                 is_capturing: Callable[[], bool] = lambda: False,
                 speed: float = 1.0,
                 on_status: Callable[[str], None] = lambda _msg: None,
                 on_finished: Optional[Callable[[int], None]] = None) -> None:
        self._timer = timer
        self._executor = executor
        self._is_capturing = is_capturing
        self._ids = itertools.count()
        self.on_status = on_status
        self.on_finished = on_finished
        self.state = SchedulerState()
        self._speed = 1.0
        self.set_speed(speed)

    # ---- properties ----
    @property
    def playing(self) -> bool:
        return self.state.running

    @property
    def looping(self) -> bool:
        return self.state.looping

    @property
    def completed_runs(self) -> int:
        return self.state.completed_runs

    @property
    def speed(self) -> float:
        return self._speed

    def set_speed(self, multiplier: float) -> None:
        """Speed for the next playback; one already running keeps its own."""
        if not math.isfinite(multiplier) or multiplier <= 0:
            raise ValueError(f"speed must be a positive number, got {multiplier!r}")
        self._speed = float(multiplier)
        logger.debug("Playback speed set to %.2fx", self._speed)

    # ---- requests ----
    def play(self, events: Sequence[Event], repeat: Repeat = 1, gap: float = 0.0) -> bool:
        """
        Start playing `events` `repeat` times (or INFINITE) with `gap`
        seconds between runs. Returns False, without touching any state,
        when the request is refused.
        """
        if self._is_capturing():
            return self._reject("Stop recording before playback.")
        if not events:
            return self._reject("No events recorded.")
        if self.playing:
            return self._reject("Playback already running.")
        if not math.isfinite(gap) or gap < 0:
            raise ValueError(f"gap must be a finite number >= 0, got {gap!r}")

        events = tuple(events)
        looping = repeat == INFINITE
        runs = None if looping else max(1, int(repeat))
        speed = self._speed

        self.state = SchedulerState(
            runs=runs,
            speed=speed,
            run_duration=total_duration(events) / speed,
            gap=gap / speed,
            timers=self.state.timers,
        )
        self._transition(PlaybackMode.LOOPING if looping else PlaybackMode.FINITE)
        try:
            self._start(events, runs)
        except Exception:
            # Nothing may stay armed for a playback that never started.
            self._cancel_timers()
            self.state = SchedulerState()
            raise
        return True

    def _start(self, events: Sequence[Event], runs: Optional[int]) -> None:
        if runs is None:
            self._report("Playing (infinite loop)")
            self._schedule_run(events, 0.0)
            self._defer(self.state.run_duration + self.state.gap,
                        functools.partial(self._chain, events))
            return

        self._report(f"Playing {plural(runs, 'time')}")
        step = self.state.run_duration + self.state.gap
        for i in range(runs):
            self._schedule_run(events, i * step)
        # Same arithmetic as the last run's end marker, so it fires right after it.
        self._defer((runs - 1) * step + self.state.run_duration, self._finish)

    def stop(self) -> Optional[int]:
        """Cancel everything still pending. Returns the completed-run count."""
        if not self.playing:
            self._cancel_timers()
            self._report("No playback running.")
            return None
        count = self.state.completed_runs
        self._cancel_timers()
        self._transition(PlaybackMode.IDLE)
        self.state = SchedulerState()
        if count:
            self._report(f"Playback stopped (completed {plural(count, 'run')})")
        else:
            self._report("Playback stopped.")
        return count

    # ---- scheduling ----
    def _defer(self, delay: float, callback: Callable[[], None]) -> None:
        key = next(self._ids)

        def fire() -> None:
            self.state.timers.pop(key, None)
            callback()

        self.state.timers[key] = self._timer.schedule_after(delay, fire)

    def _schedule_run(self, events: Sequence[Event], base: float) -> None:
        speed = self.state.speed
        for ev in events:
            self._defer(ev.t / speed + base, functools.partial(self._fire, ev))
        self._defer(base + self.state.run_duration, self._run_elapsed)

    def _fire(self, ev: Event) -> None:
        self._executor.apply(ev, self.state.speed, self._defer)

    def _run_elapsed(self) -> None:
        if self.playing:
            self.state.completed_runs += 1
            logger.debug("Run %d elapsed", self.state.completed_runs)

    def _chain(self, events: Sequence[Event]) -> None:
        if not self.looping:
            return
        self._schedule_run(events, 0.0)
        self._defer(self.state.run_duration + self.state.gap,
                    functools.partial(self._chain, events))

    def _finish(self) -> None:
        if self.state.mode is not PlaybackMode.FINITE:
            return
        runs = self.state.runs
        self._transition(PlaybackMode.IDLE)
        # Hold releases due at the same instant are still registered; let them fire.
        self.state = SchedulerState(timers=self.state.timers)
        self._report(f"Playback finished ({plural(runs, 'run')})")
        if self.on_finished:
            self.on_finished(runs)

    def _cancel_timers(self) -> None:
        timers = self.state.timers
        self.state.timers = {}
        for handle in timers.values():
            self._timer.cancel(handle)
        if timers:
            logger.debug("Cancelled %d pending playback timers", len(timers))

    # ---- state ----
    def _transition(self, target: PlaybackMode) -> None:
        current = self.state.mode
        if target not in TRANSITIONS[current]:
            raise InvalidTransition(current, target)
        logger.debug("Playback %s -> %s", current.name, target.name)
        self.state.mode = target

    def _reject(self, msg: str) -> bool:
        logger.warning(msg)
        self.on_status(msg)
        return False

    def _report(self, msg: str) -> None:
        logger.info(msg)
        self.on_status(msg)
