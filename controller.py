# SPDX-License-Identifier: GPL-3.0-or-later
"""
User-level commands over the single in-memory recording slot.

Owns the current Recording, the capture collaborator and the Player, and
turns hotkey/button presses into calls on them. Every command reports
back through `on_status`; refused commands leave all state untouched.
"""
import logging
from dataclasses import replace
from typing import Callable, Optional

from compressor import compress_mouse_holds
from config import PLAY_TIMES_PREFIX, Settings
from errors import MalformedRecordingError
from executor import ActionExecutor
from models import Recording
from player import INFINITE, Player, Repeat
from storage import load_recording, save_recording
from timers import Timer
from utils import plural, summarize

logger = logging.getLogger(__name__)


class Controller:
    def __init__(self, settings: Settings, recorder, timer: Timer, sink,
                 on_status: Callable[[str], None] = lambda _msg: None) -> None:
        self.settings = settings
        self.recorder = recorder
        self.on_status = on_status
        self.on_playback_change: Callable[[bool], None] = lambda _playing: None
        self.current = Recording(mouse_moves_included=settings.record_mouse_moves)
        self.current_path = settings.recording_path
        self.recorder.record_moves = settings.record_mouse_moves
        self.player = Player(
            timer,
            ActionExecutor(sink),
            is_capturing=lambda: self.recorder.recording,
            speed=settings.playback_speed,
            on_status=self.set_status,
            on_finished=lambda _runs: self.on_playback_change(False),
        )

    def set_status(self, msg: str) -> None:
        if self.settings.show_alerts:
            self.on_status(msg)

    def _say(self, msg: str) -> None:
        logger.info(msg)
        self.set_status(msg)

    def _refuse(self, msg: str) -> bool:
        logger.warning(msg)
        self.set_status(msg)
        return False

    # ---- recording ----
    @property
    def capturing(self) -> bool:
        return self.recorder.recording

    def toggle_recording(self) -> bool:
        if not self.recorder.recording:
            if self.player.playing:
                return self._refuse("Can't record during playback.")
            self.recorder.start()
            self._say("Recording started")
            return True
        captured = self.recorder.stop()
        captured.name = self.current.name
        self.current = captured
        self._say(f"Recording stopped: {plural(captured.event_count, 'event')}")
        return True

    def toggle_mouse_moves(self) -> bool:
        if self.recorder.recording:
            return self._refuse("Stop recording to change mouse-move setting.")
        self.settings.record_mouse_moves = not self.settings.record_mouse_moves
        self.recorder.record_moves = self.settings.record_mouse_moves
        self._say(f"Mouse moves: {'ON' if self.settings.record_mouse_moves else 'OFF'}")
        return True

    def clear(self) -> bool:
        if self.recorder.recording:
            return self._refuse("Stop recording first.")
        self.current = Recording(mouse_moves_included=self.settings.record_mouse_moves)
        self._say("Recording cleared")
        return True

    def compress(self) -> int:
        """Replace the current recording with its compressed form."""
        if self.recorder.recording:
            self._refuse("Stop recording first.")
            return 0
        before = self.current.event_count
        try:
            events = compress_mouse_holds(self.current.events)
        except ValueError as ex:
            self._refuse(f"Can't compress: {ex}")
            return 0
        self.current = replace(self.current, events=events)
        merged = before - self.current.event_count
        self._say(f"Compressed {plural(merged, 'click')} into holds")
        return merged

    # ---- playback ----
    def play(self, repeat: Repeat = 1, gap: float = 0.0) -> bool:
        try:
            started = self.player.play(self.current.events, repeat=repeat, gap=gap)
        except ValueError as ex:
            return self._refuse(str(ex))
        if started:
            self.on_playback_change(True)
        return started

    def play_once(self) -> bool:
        return self.play(1, 0.0)

    def play_times(self, n: int) -> bool:
        return self.play(n, self.settings.repeat_gap)

    def toggle_loop(self) -> bool:
        if self.player.looping:
            self.stop()
            return False
        return self.play(INFINITE, self.settings.loop_gap)

    def stop(self) -> Optional[int]:
        count = self.player.stop()
        self.on_playback_change(False)
        return count

    def set_speed(self, multiplier: float) -> bool:
        try:
            self.player.set_speed(multiplier)
        except ValueError as ex:
            return self._refuse(str(ex))
        self.settings.playback_speed = self.player.speed
        self._say(f"Speed: {self.player.speed:.1f}x")
        return True

    # ---- files ----
    def save(self, path: Optional[str] = None) -> bool:
        if self.recorder.recording:
            return self._refuse("Stop recording first.")
        if not self.current.events:
            return self._refuse("Nothing to save.")
        path = path or self.current_path
        try:
            save_recording(self.current, path, compress=self.settings.auto_compress_on_save)
        except (OSError, TypeError, ValueError) as ex:
            logger.error("Save to %s failed: %s", path, ex)
            self.set_status("Save failed")
            return False
        self.current_path = path
        self._say(f"Saved to {path}")
        return True

    def load(self, path: Optional[str] = None) -> bool:
        if self.recorder.recording:
            return self._refuse("Stop recording first.")
        path = path or self.current_path
        try:
            recording = load_recording(path)
        except MalformedRecordingError as ex:
            logger.error("Load from %s failed: %s", path, ex)
            self.set_status(str(ex))
            return False
        self.current = recording
        self.current_path = path
        self._say(f"Loaded {plural(recording.event_count, 'event')}")
        return True

    # ---- info ----
    def info(self) -> str:
        # Info and help are shown even with alerts off.
        if not self.current.events:
            text = "No recording"
        else:
            counts = summarize(self.current.events)
            text = (f"Recording: {self.current.name}\n"
                    f"Total events: {self.current.event_count}\n"
                    f"Duration: {self.current.duration:.2f}s\n"
                    f"Keys: {counts['key']} | Mouse: {counts['mouse']} | Scroll: {counts['scroll']}\n"
                    f"Speed: {self.player.speed:.1f}x")
        self.on_status(text)
        return text

    def help_text(self) -> str:
        keys = self.settings.hotkeys
        lines = ["Recording:", f"  {keys['record']}  toggle recording",
                 f"  {keys['mouse_moves']}  toggle mouse moves",
                 "Playback:", f"  {keys['play']}  play once",
                 f"  {keys['loop']}  toggle infinite loop",
                 f"  {PLAY_TIMES_PREFIX}+1..9  play N times",
                 f"  {keys['stop']}  stop playback",
                 "Files:", f"  {keys['save']}  save", f"  {keys['load']}  load",
                 "Other:", f"  {keys['clear']}  clear recording",
                 f"  {keys['compress']}  compress clicks",
                 f"  {keys['info']}  show info", f"  {keys['help']}  show this help"]
        text = "\n".join(lines)
        self.on_status(text)
        return text
