# SPDX-License-Identifier: GPL-3.0-or-later
"""
Tests for pynput key and button (de)serialization.
"""
import pytest

pynput = pytest.importorskip("pynput")
from pynput.keyboard import Key, KeyCode  # noqa: E402
from pynput.mouse import Button  # noqa: E402

from keys import (MODIFIER_FLAGS, button_to_str, code_to_key, key_to_str,  # noqa: E402
                  str_to_button, str_to_key)


class TestKeyToStr:
    def test_char(self):
        assert key_to_str(KeyCode.from_char("q")) == "char:q"

    def test_named(self):
        assert key_to_str(Key.space) == "key:space"

    def test_raw_code(self):
        assert key_to_str(KeyCode.from_vk(53)) == "key53"


class TestStrToKey:
    """Current and legacy identifiers both resolve."""

    def test_char(self):
        assert str_to_key("char:x") == "x"

    def test_named(self):
        assert str_to_key("key:tab") == Key.tab
        assert str_to_key("Key.space") == Key.space

    @pytest.mark.parametrize("name,expected", [
        ("return", Key.enter),
        ("key:escape", Key.esc),
        ("delete", Key.backspace),
        ("forwarddelete", Key.delete),
        ("pageup", Key.page_up),
    ])
    def test_legacy_names(self, name, expected):
        assert str_to_key(name) == expected

    def test_bare_character(self):
        assert str_to_key("a") == "a"

    def test_raw_code(self):
        assert str_to_key("key53") == KeyCode.from_vk(53)
        assert code_to_key(53) == KeyCode.from_vk(53)

    def test_unknown(self):
        assert str_to_key("key:warp") is None
        assert str_to_key("warp") is None


class TestModifiersAndButtons:
    def test_sided_modifiers_share_a_flag(self):
        assert MODIFIER_FLAGS[Key.cmd_r] == "cmd"
        assert MODIFIER_FLAGS[Key.shift_l] == "shift"

    def test_buttons(self):
        assert button_to_str(Button.left) == "left"
        assert button_to_str(Button.right) == "right"
        assert button_to_str(Button.middle) == "other"
        assert str_to_button("other") == Button.middle
        assert str_to_button("bogus") == Button.left
