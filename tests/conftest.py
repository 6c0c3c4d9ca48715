# SPDX-License-Identifier: GPL-3.0-or-later
"""Shared fixtures: virtual time, a heap timer on top of it, a recording sink."""
import pytest

from errors import ActionSynthesisError
from models import KeyEvent, MouseEvent, ScrollEvent
from timers import HeapTimer


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += max(0.0, seconds)


class FakeSink:
    """Records (time, action, *args) for every primitive it is asked to perform."""
    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.actions = []
        self.bad_keys = set()

    def move_cursor(self, point):
        self.actions.append((self.clock(), "move", point))

    def post_key_event(self, modifiers, key, is_down):
        if key in self.bad_keys:
            raise ActionSynthesisError(f"Failed to post key event: {key!r}")
        self.actions.append((self.clock(), "key", key, is_down, frozenset(modifiers)))

    def post_mouse_event(self, kind, point):
        self.actions.append((self.clock(), "mouse", kind, point))

    def post_scroll(self, point, delta):
        self.actions.append((self.clock(), "scroll", point, delta))

    def of(self, name):
        return [a for a in self.actions if a[1] == name]


class FakeRecorder:
    def __init__(self) -> None:
        self.recording = False
        self.record_moves = False
        self.next_capture = None

    def start(self):
        self.recording = True

    def stop(self):
        self.recording = False
        return self.next_capture


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timer(clock):
    return HeapTimer(clock=clock, sleep=clock.sleep)


@pytest.fixture
def sink(clock):
    return FakeSink(clock)


@pytest.fixture
def recorder():
    return FakeRecorder()


def key(t, direction="down", name="char:a", flags=()):
    return KeyEvent(t=t, direction=direction, key=name, key_code=0, flags=frozenset(flags))


def click(t, subtype, x=10, y=10):
    return MouseEvent(t=t, subtype=subtype, point=(x, y))


def scroll(t, dx=0, dy=-3):
    return ScrollEvent(t=t, point=(5, 5), delta=(dx, dy))
