# SPDX-License-Identifier: GPL-3.0-or-later
"""
Tests for event serialization and recording files.
"""
import json

import pytest

from conftest import click, key, scroll
from errors import MalformedRecordingError
from models import (LEFT_DOWN, LEFT_UP, OTHER_DOWN, KeyEvent, MouseEvent, MouseHoldEvent,
                    Recording, ScrollEvent, event_from_dict, event_to_dict)
from storage import load_recording, save_recording


def write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


class TestEventDicts:
    """Tests for event_to_dict / event_from_dict."""

    def test_key_fields(self):
        ev = KeyEvent(t=0.5, direction="up", key="char:a", key_code=0,
                      flags=frozenset({"shift", "cmd"}))
        d = event_to_dict(ev)
        assert d == {"t": 0.5, "kind": "key", "subtype": "up", "key": "char:a",
                     "keyCode": 0, "flags": ["cmd", "shift"]}
        assert event_from_dict(d) == ev

    def test_hold_fields(self):
        ev = MouseHoldEvent(t=1.0, button="right", point=(3.0, 4.0), duration=0.25)
        d = event_to_dict(ev)
        assert d["kind"] == "mouse_hold"
        assert d["point"] == {"x": 3.0, "y": 4.0}
        assert event_from_dict(d) == ev

    def test_modifier_order_does_not_matter(self):
        a = event_from_dict({"t": 0, "kind": "key", "subtype": "down", "key": "x",
                             "flags": ["shift", "cmd", "shift"]})
        b = event_from_dict({"t": 0, "kind": "key", "subtype": "down", "key": "x",
                             "flags": ["cmd", "shift"]})
        assert a == b

    def test_key_falls_back_to_chars(self):
        ev = event_from_dict({"t": 0, "kind": "key", "subtype": "down", "chars": "q", "keyCode": 12})
        assert ev.key == "q"
        assert ev.key_code == 12

    def test_key_code_only(self):
        ev = event_from_dict({"t": 0, "kind": "key", "subtype": "down", "key": "", "keyCode": 53})
        assert ev.key is None
        assert ev.key_code == 53

    def test_legacy_numeric_mouse_subtype(self):
        ev = event_from_dict({"t": 0.1, "kind": "mouse", "subtype": 25,
                              "point": {"x": 1, "y": 2}, "flags": []})
        assert ev == MouseEvent(t=0.1, subtype=OTHER_DOWN, point=(1.0, 2.0))

    def test_scroll(self):
        ev = event_from_dict({"t": 2, "kind": "scroll", "point": {"x": 0, "y": 0},
                              "delta": {"x": 0, "y": -5}})
        assert ev == ScrollEvent(t=2.0, point=(0.0, 0.0), delta=(0.0, -5.0))

    @pytest.mark.parametrize("raw", [
        {"kind": "key", "subtype": "down", "key": "a"},
        {"t": 0, "subtype": "down"},
        {"t": 0, "kind": "keyboard"},
        {"t": 0, "kind": "key", "subtype": "sideways", "key": "a"},
        {"t": 0, "kind": "key", "subtype": "down"},
        {"t": 0, "kind": "mouse", "subtype": "leftDown"},
        {"t": 0, "kind": "mouse", "subtype": 99, "point": {"x": 0, "y": 0}},
        {"t": 0, "kind": "scroll", "point": {"x": 0, "y": 0}},
        {"t": 0, "kind": "mouse_hold", "button": "left", "point": {"x": 0, "y": 0}, "duration": -1},
        {"t": 0, "kind": "mouse_hold", "button": "middle", "point": {"x": 0, "y": 0}, "duration": 1},
        {"t": "soon", "kind": "scroll", "point": {"x": 0, "y": 0}, "delta": {"x": 0, "y": 0}},
        {"t": 0, "kind": "mouse", "subtype": "move", "point": [1, 2]},
        "not an event",
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedRecordingError):
            event_from_dict(raw)


class TestSaveRecording:
    def test_writes_metadata_and_compresses(self, tmp_path):
        rec = Recording(events=[key(0.0), click(0.2, LEFT_DOWN), click(0.5, LEFT_UP)],
                        name="Demo", recorded_at="2024-01-02 03:04:05")
        path = str(tmp_path / "demo.json")
        assert save_recording(rec, path) == 2
        data = json.loads((tmp_path / "demo.json").read_text())
        assert data["metadata"] == {
            "version": "2.0",
            "name": "Demo",
            "eventCount": 2,
            "duration": pytest.approx(0.5),
            "recordedAt": "2024-01-02 03:04:05",
            "mouseMovesIncluded": False,
        }
        assert [e["kind"] for e in data["events"]] == ["key", "mouse_hold"]
        # the in-memory recording is not compressed by saving
        assert rec.event_count == 3

    def test_without_compression(self, tmp_path):
        rec = Recording(events=[click(0.2, LEFT_DOWN), click(0.5, LEFT_UP)])
        path = str(tmp_path / "raw.json")
        assert save_recording(rec, path, compress=False) == 2

    def test_round_trip(self, tmp_path):
        rec = Recording(events=[key(0.0, flags=["alt"]), click(0.2, LEFT_DOWN),
                                scroll(0.4), click(0.5, LEFT_UP)],
                        name="Round", recorded_at="2024-01-02 03:04:05",
                        mouse_moves_included=True)
        path = str(tmp_path / "r.json")
        save_recording(rec, path)
        loaded = load_recording(path)
        assert loaded == rec


class TestLoadRecording:
    def test_legacy_flat_array(self, tmp_path):
        path = write(tmp_path / "old.json", [
            {"t": 0, "kind": "mouse", "subtype": 1, "point": {"x": 5, "y": 6}, "flags": []},
            {"t": 0.4, "kind": "mouse", "subtype": 2, "point": {"x": 5, "y": 6}, "flags": []},
        ])
        rec = load_recording(path)
        assert rec.name == "Loaded Recording"
        assert rec.event_count == 2
        assert rec.events[0].subtype == LEFT_DOWN
        assert rec.duration == pytest.approx(0.4)

    def test_metadata_defaults(self, tmp_path):
        path = write(tmp_path / "bare.json", {"events": [{"t": 0, "kind": "key",
                                                         "subtype": "down", "key": "a"}]})
        rec = load_recording(path)
        assert rec.name == "Loaded Recording"
        assert rec.mouse_moves_included is False

    @pytest.mark.parametrize("payload", [[], {}, {"events": "nope"}, 42,
                                         {"metadata": [], "events": []}])
    def test_bad_shapes(self, tmp_path, payload):
        with pytest.raises(MalformedRecordingError):
            load_recording(write(tmp_path / "bad.json", payload))

    def test_offsets_going_backwards(self, tmp_path):
        path = write(tmp_path / "backwards.json", {"events": [
            {"t": 0.5, "kind": "mouse", "subtype": "leftDown", "point": {"x": 1, "y": 1}},
            {"t": 0.3, "kind": "mouse", "subtype": "leftUp", "point": {"x": 1, "y": 1}},
        ]})
        with pytest.raises(MalformedRecordingError, match="must not decrease"):
            load_recording(path)

    def test_equal_offsets_are_fine(self, tmp_path):
        path = write(tmp_path / "same.json", [
            {"t": 0.2, "kind": "key", "subtype": "down", "key": "a"},
            {"t": 0.2, "kind": "key", "subtype": "up", "key": "a"},
        ])
        assert load_recording(path).event_count == 2

    def test_not_json(self, tmp_path):
        p = tmp_path / "junk.json"
        p.write_text("{nope", encoding="utf-8")
        with pytest.raises(MalformedRecordingError):
            load_recording(str(p))

    def test_missing_file(self, tmp_path):
        with pytest.raises(MalformedRecordingError):
            load_recording(str(tmp_path / "absent.json"))
