# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import time
import tkinter as tk

from pynput import keyboard

from config import PLAY_TIMES_PREFIX, Settings
from controller import Controller
from keys import MODIFIER_FLAGS
from recorder import Recorder
from sink import PynputSink
from timers import TkTimer
from ui import AppUI

logger = logging.getLogger("tinyreplay")

HYPER_FLAGS = {"ctrl", "alt", "cmd"}


class Squelch:
    """
    Keeps our own hotkeys out of recordings: key events right after a
    hotkey fired, and any key pressed while ctrl+alt+cmd are all held.
    """
    def __init__(self, window: float = 0.18) -> None:
        self.window = window
        self._ignore_until = 0.0
        self._held = set()

    def __call__(self) -> None:
        self._ignore_until = time.monotonic() + self.window

    def track(self, k, down: bool) -> None:
        flag = MODIFIER_FLAGS.get(k)
        if flag is not None:
            (self._held.add if down else self._held.discard)(flag)

    def should_ignore_key(self, k) -> bool:
        if time.monotonic() < self._ignore_until:
            return True
        return HYPER_FLAGS <= self._held and k not in MODIFIER_FLAGS


def build_hotkeys(root: tk.Tk, controller: Controller, squelch: Squelch) -> keyboard.GlobalHotKeys:
    """GlobalHotKeys fire on pynput's thread; hop onto Tk before touching state."""
    def on_ui(fn):
        def fire():
            squelch()
            root.after(0, fn)
        return fire

    keys = controller.settings.hotkeys
    commands = {
        "record": controller.toggle_recording,
        "play": controller.play_once,
        "loop": controller.toggle_loop,
        "stop": controller.stop,
        "save": controller.save,
        "load": controller.load,
        "clear": controller.clear,
        "compress": controller.compress,
        "mouse_moves": controller.toggle_mouse_moves,
        "info": controller.info,
        "help": controller.help_text,
    }
    bindings = {keys[name]: on_ui(fn) for name, fn in commands.items() if keys.get(name)}
    for i in range(1, 10):
        bindings[f"{PLAY_TIMES_PREFIX}+{i}"] = on_ui(lambda n=i: controller.play_times(n))
    return keyboard.GlobalHotKeys(bindings)


def main():
    settings = Settings.load()
    logging.basicConfig(
        level=logging.DEBUG if settings.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    root = tk.Tk()
    squelch = Squelch()
    recorder = Recorder(move_min_interval=settings.move_min_interval,
                        dispatch=lambda fn: root.after(0, fn))
    recorder.key_filter = squelch.should_ignore_key

    controller = Controller(settings, recorder, TkTimer(root), PynputSink())
    ui = AppUI(root, controller)
    controller.on_status = ui.set_status

    recorder.attach()
    # Track hyper modifiers on a separate listener so filtering works while idle too.
    mods = keyboard.Listener(on_press=lambda k: squelch.track(k, True),
                             on_release=lambda k: squelch.track(k, False))
    mods.daemon = True
    mods.start()
    hotkeys = build_hotkeys(root, controller, squelch)
    hotkeys.start()

    controller.set_status("Ready. Grant Accessibility & Input Monitoring.")
    logger.info("TinyReplay ready")
    try:
        ui.run()
    finally:
        hotkeys.stop()
        mods.stop()
        recorder.detach()
        settings.save()


if __name__ == "__main__":
    main()
