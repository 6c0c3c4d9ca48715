# SPDX-License-Identifier: GPL-3.0-or-later
from typing import FrozenSet, Set, Union

from pynput import keyboard, mouse

from errors import ActionSynthesisError
from keys import FLAG_KEYS, MODIFIER_FLAGS, code_to_key, str_to_button, str_to_key
from models import BUTTON_TRANSITIONS, Point

# subtype -> (button name, pressed)
_TRANSITIONS = {}
for _button, (_down, _up) in BUTTON_TRANSITIONS.items():
    _TRANSITIONS[_down] = (_button, True)
    _TRANSITIONS[_up] = (_button, False)


class PynputSink:
    """
    Synthesizes input with pynput controllers.

    Modifiers listed on a key event are pressed around it unless they are
    already held (a recording normally carries the modifier key events too).
    """
    def __init__(self) -> None:
        self._mouse = mouse.Controller()
        self._kbd = keyboard.Controller()
        self._held: Set[str] = set()

    def move_cursor(self, point: Point) -> None:
        self._mouse.position = (int(point[0]), int(point[1]))

    def post_key_event(self, modifiers: FrozenSet[str], key: Union[str, int], is_down: bool) -> None:
        if isinstance(key, int):
            k = code_to_key(key)
        else:
            k = str_to_key(key) if key else None
        if k is None:
            raise ActionSynthesisError(f"Failed to post key event: {key!r}")

        flag = MODIFIER_FLAGS.get(k)
        if flag is not None:
            (self._held.add if is_down else self._held.discard)(flag)

        extra = [FLAG_KEYS[m] for m in modifiers if m in FLAG_KEYS and m not in self._held]
        for mk in extra:
            self._kbd.press(mk)
        try:
            if is_down:
                self._kbd.press(k)
            else:
                self._kbd.release(k)
        finally:
            for mk in reversed(extra):
                self._kbd.release(mk)

    def post_mouse_event(self, kind: str, point: Point) -> None:
        try:
            button, pressed = _TRANSITIONS[kind]
        except KeyError:
            raise ActionSynthesisError(f"Unknown mouse event kind {kind!r}") from None
        self.move_cursor(point)
        btn = str_to_button(button)
        if pressed:
            self._mouse.press(btn)
        else:
            self._mouse.release(btn)

    def post_scroll(self, point: Point, delta: Point) -> None:
        self.move_cursor(point)
        self._mouse.scroll(int(delta[0]), int(delta[1]))
