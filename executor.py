# SPDX-License-Identifier: GPL-3.0-or-later
import logging
from typing import Callable, FrozenSet, Optional, Protocol, Union

from models import (BUTTON_TRANSITIONS, Event, KeyEvent, MouseEvent, MouseHoldEvent,
                    Point, ScrollEvent)

logger = logging.getLogger(__name__)

Defer = Callable[[float, Callable[[], None]], None]


class ActionSink(Protocol):
    """Primitive synthetic-input operations; implemented by sink.PynputSink."""
    def move_cursor(self, point: Point) -> None: ...
    def post_key_event(self, modifiers: FrozenSet[str], key: Union[str, int], is_down: bool) -> None: ...
    def post_mouse_event(self, kind: str, point: Point) -> None: ...
    def post_scroll(self, point: Point, delta: Point) -> None: ...


class ActionExecutor:
    """
    Performs one recorded event against an action sink.

    Sink failures are logged and swallowed so that one bad event (an
    unknown key, say) never aborts the rest of a run.
    """
    def __init__(self, sink: ActionSink) -> None:
        self.sink = sink

    def apply(self, ev: Event, speed: float = 1.0, defer: Optional[Defer] = None) -> bool:
        """
        Replay `ev`. Hold releases are handed to `defer(delay, callback)` so
        the scheduler can revoke them; without one the release is immediate.
        Returns False if the sink rejected the action.
        """
        try:
            self._perform(ev, speed, defer)
        except Exception as ex:
            logger.warning("Playback error on %s event at t=%.3f: %s", ev.kind, ev.t, ex)
            return False
        return True

    def _perform(self, ev: Event, speed: float, defer: Optional[Defer]) -> None:
        if isinstance(ev, KeyEvent):
            key = ev.key if ev.key else ev.key_code
            self.sink.post_key_event(ev.flags, key, ev.is_down)

        elif isinstance(ev, MouseEvent):
            self.sink.move_cursor(ev.point)
            if ev.is_transition:
                self.sink.post_mouse_event(ev.subtype, ev.point)

        elif isinstance(ev, ScrollEvent):
            self.sink.move_cursor(ev.point)
            self.sink.post_scroll(ev.point, ev.delta)

        elif isinstance(ev, MouseHoldEvent):
            down, up = BUTTON_TRANSITIONS[ev.button]
            self.sink.move_cursor(ev.point)
            self.sink.post_mouse_event(down, ev.point)
            release = lambda: self._release(up, ev.point)
            if ev.duration > 0 and defer is not None:
                defer(ev.duration / speed, release)
            else:
                release()

        else:
            raise TypeError(f"unsupported event {ev!r}")

    def _release(self, kind: str, point: Point) -> None:
        try:
            self.sink.post_mouse_event(kind, point)
        except Exception as ex:
            logger.warning("Playback error releasing %s at %s: %s", kind, point, ex)
