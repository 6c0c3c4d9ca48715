# SPDX-License-Identifier: GPL-3.0-or-later


class TinyReplayError(Exception):
    """Base class for TinyReplay errors."""


class ActionSynthesisError(TinyReplayError):
    """The action sink could not synthesize an input action."""


class MalformedRecordingError(TinyReplayError):
    """A persisted recording could not be read or is missing fields."""


class InvalidTransition(TinyReplayError):
    """The scheduler was asked to move between two states it can't link."""

    def __init__(self, current, target) -> None:
        super().__init__(f"illegal playback transition {current.name} -> {target.name}")
        self.current = current
        self.target = target
