# SPDX-License-Identifier: GPL-3.0-or-later
"""
Recording files.

Current format:
    {"metadata": {"version": "2.0", "name": ..., "eventCount": ...,
                  "duration": ..., "recordedAt": ..., "mouseMovesIncluded": ...},
     "events": [...]}

Older files are a bare JSON array of events; they still load, with
metadata defaulted.
"""
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List

from compressor import compress_mouse_holds
from errors import MalformedRecordingError
from models import Event, Recording, event_from_dict, event_to_dict
from utils import total_duration

logger = logging.getLogger(__name__)

FORMAT_VERSION = "2.0"
LOADED_NAME = "Loaded Recording"


def to_payload(recording: Recording, compress: bool = True) -> Dict[str, Any]:
    events = compress_mouse_holds(recording.events) if compress else list(recording.events)
    metadata = {
        "version": FORMAT_VERSION,
        "name": recording.name,
        "eventCount": len(events),
        "duration": total_duration(events),
        "recordedAt": recording.recorded_at or datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "mouseMovesIncluded": recording.mouse_moves_included,
    }
    return {"metadata": metadata, "events": [event_to_dict(e) for e in events]}


def save_recording(recording: Recording, path: str, compress: bool = True) -> int:
    """Write `recording` to `path`. Returns the number of events written."""
    payload = to_payload(recording, compress=compress)
    path = os.path.expanduser(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    count = payload["metadata"]["eventCount"]
    logger.info("Saved %d events to %s", count, path)
    return count


def _ordered(events: List[Event]) -> List[Event]:
    for prev, ev in zip(events, events[1:]):
        if ev.t < prev.t:
            raise MalformedRecordingError(
                f"event offsets must not decrease (t={ev.t} after t={prev.t})")
    return events


def from_payload(payload: Any) -> Recording:
    if isinstance(payload, dict) and isinstance(payload.get("events"), list):
        meta = payload.get("metadata")
        if meta is None:
            meta = {}
        if not isinstance(meta, dict):
            raise MalformedRecordingError("'metadata' must be an object")
        events = _ordered([event_from_dict(e) for e in payload["events"]])
        return Recording(
            events=events,
            name=meta.get("name") or LOADED_NAME,
            recorded_at=meta.get("recordedAt"),
            mouse_moves_included=bool(meta.get("mouseMovesIncluded", False)),
        )
    if isinstance(payload, list) and payload:
        return Recording(events=_ordered([event_from_dict(e) for e in payload]),
                         name=LOADED_NAME)
    raise MalformedRecordingError("Invalid file format")


def load_recording(path: str) -> Recording:
    """
    Read a recording from `path`.

    Raises MalformedRecordingError if the file can't be read or parsed, or
    if any event is unknown or incomplete, or if offsets go backwards.
    """
    path = os.path.expanduser(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except OSError as ex:
        raise MalformedRecordingError(f"No file to load: {ex}") from ex
    except ValueError as ex:
        raise MalformedRecordingError(f"Failed to parse file: {ex}") from ex
    recording = from_payload(payload)
    logger.info("Loaded %d events from %s", recording.event_count, path)
    return recording
