# SPDX-License-Identifier: GPL-3.0-or-later
"""
Tests for Settings persistence.
"""
import json

from config import DEFAULT_HOTKEYS, Settings


class TestSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        s = Settings.load(str(tmp_path / "none.json"))
        assert s == Settings()
        assert s.auto_compress_on_save is True
        assert s.hotkeys == DEFAULT_HOTKEYS

    def test_partial_file_merges(self, tmp_path):
        p = tmp_path / "config.json"
        p.write_text(json.dumps({"playback_speed": 2.0, "bogus": 1,
                                 "hotkeys": {"stop": "<esc>", "launch": "<f1>"}}))
        s = Settings.load(str(p))
        assert s.playback_speed == 2.0
        assert s.hotkeys["stop"] == "<esc>"
        assert "launch" not in s.hotkeys
        assert s.hotkeys["record"] == DEFAULT_HOTKEYS["record"]

    def test_corrupt_file(self, tmp_path):
        p = tmp_path / "config.json"
        p.write_text("{")
        assert Settings.load(str(p)) == Settings()

    def test_bad_speed_falls_back(self, tmp_path):
        p = tmp_path / "config.json"
        p.write_text(json.dumps({"playback_speed": -3}))
        assert Settings.load(str(p)).playback_speed == 1.0

    def test_bad_gaps_fall_back(self, tmp_path):
        p = tmp_path / "config.json"
        p.write_text('{"loop_gap": Infinity, "repeat_gap": NaN, "move_min_interval": -1}')
        s = Settings.load(str(p))
        assert s.loop_gap == 0.25
        assert s.repeat_gap == 0.2
        assert s.move_min_interval == 0.01

    def test_good_gaps_kept(self, tmp_path):
        p = tmp_path / "config.json"
        p.write_text(json.dumps({"loop_gap": 1, "repeat_gap": "0.5"}))
        s = Settings.load(str(p))
        assert s.loop_gap == 1.0
        assert s.repeat_gap == 0.5

    def test_save_round_trip(self, tmp_path):
        p = str(tmp_path / "nested" / "config.json")
        s = Settings(record_mouse_moves=True, loop_gap=0.5)
        s.save(p)
        assert Settings.load(p) == s
