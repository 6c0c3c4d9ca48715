# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Set, Tuple

from pynput import keyboard, mouse

from keys import MODIFIER_FLAGS, button_to_str, key_code, key_to_str
from models import BUTTON_TRANSITIONS, MOVE, KeyEvent, MouseEvent, Recording, ScrollEvent
from utils import RecClock

logger = logging.getLogger(__name__)

_MODIFIER_NAMES = {key_to_str(k) for k in MODIFIER_FLAGS}


def _run_now(fn: Callable[[], None]) -> None:
    fn()


class Recorder:
    """
    Records global mouse/keyboard events using pynput.

    Listener callbacks arrive on pynput's threads; each one timestamps the
    event right away and hands the append to `dispatch`, which the app
    points at the UI thread so that the event list only changes there.
    """
    def __init__(self, move_min_interval: float = 0.01, record_moves: bool = False,
                 dispatch: Callable[[Callable[[], None]], None] = _run_now) -> None:
        self.clock = RecClock()
        self.move_min_interval = move_min_interval  # seconds
        self.record_moves = record_moves
        self.dispatch = dispatch
        self.key_filter: Callable[[object], bool] = lambda _k: False
        self._last_move_t: float = 0.0
        self._last_pos: Optional[Tuple[int, int]] = None
        self._mods: Set[str] = set()
        # written on the keyboard listener thread, read on the mouse one
        self._mods_lock = threading.Lock()
        self._recording: bool = False
        self.captured: Recording = Recording()
        self._m_listener = None
        self._k_listener = None

    # ---- lifecycle ----
    def start(self) -> None:
        if self._recording:
            return
        self.captured = Recording(
            recorded_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            mouse_moves_included=self.record_moves,
        )
        self.clock.start()
        self._last_move_t = 0.0
        self._last_pos = None
        self._recording = True
        logger.info("Capture started (mouse moves %s)", "on" if self.record_moves else "off")

    def stop(self) -> Recording:
        self._recording = False
        # Modifiers held for the stop hotkey were captured but will never be released.
        events = self.captured.events
        while events and isinstance(events[-1], KeyEvent) and events[-1].is_down \
                and events[-1].key in _MODIFIER_NAMES:
            events.pop()
        logger.info("Capture stopped with %d events", self.captured.event_count)
        return self.captured

    @property
    def recording(self) -> bool:
        return self._recording

    # ---- listeners ----
    def attach(self) -> None:
        if self._m_listener or self._k_listener:
            return
        self._m_listener = mouse.Listener(
            on_move=self._on_move, on_click=self._on_click, on_scroll=self._on_scroll
        )
        self._k_listener = keyboard.Listener(
            on_press=self._on_key_press, on_release=self._on_key_release
        )
        self._m_listener.daemon = True
        self._k_listener.daemon = True
        self._m_listener.start()
        self._k_listener.start()

    def detach(self) -> None:
        for listener in (self._m_listener, self._k_listener):
            if listener is not None:
                listener.stop()
        self._m_listener = self._k_listener = None

    # ---- handlers ----
    def _now(self) -> float:
        return self.clock.now_rel()

    def _append(self, ev) -> None:
        events = self.captured.events

        def push() -> None:
            if self._recording:
                events.append(ev)

        self.dispatch(push)

    def _flags(self):
        with self._mods_lock:
            return frozenset(self._mods)

    def _on_move(self, x, y):
        if not self._recording or not self.record_moves:
            return
        t = self._now()
        if (t - self._last_move_t) < self.move_min_interval:
            return
        if self._last_pos == (x, y):
            return
        self._last_move_t = t
        self._last_pos = (x, y)
        self._append(MouseEvent(t=t, subtype=MOVE, point=(x, y), flags=self._flags()))

    def _on_click(self, x, y, button, pressed):
        if not self._recording:
            return
        down, up = BUTTON_TRANSITIONS[button_to_str(button)]
        self._append(MouseEvent(t=self._now(), subtype=down if pressed else up,
                                point=(x, y), flags=self._flags()))

    def _on_scroll(self, x, y, dx, dy):
        if not self._recording:
            return
        self._append(ScrollEvent(t=self._now(), point=(x, y), delta=(dx, dy)))

    def _on_key(self, k, down: bool):
        flag = MODIFIER_FLAGS.get(k)
        if flag is not None:
            with self._mods_lock:
                (self._mods.add if down else self._mods.discard)(flag)
        if not self._recording or self.key_filter(k):
            return
        self._append(KeyEvent(t=self._now(), direction="down" if down else "up",
                              key=key_to_str(k), key_code=key_code(k), flags=self._flags()))

    def _on_key_press(self, k):
        self._on_key(k, True)

    def _on_key_release(self, k):
        self._on_key(k, False)
