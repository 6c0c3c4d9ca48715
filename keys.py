# SPDX-License-Identifier: GPL-3.0-or-later
import re
from typing import Any, Optional, Union

from pynput import keyboard, mouse

# ---- Key serialization ----------------------------------------------

# Names written by the old Hammerspoon recorder -> pynput Key names
_LEGACY_KEY_NAMES = {
    "return": "enter",
    "delete": "backspace",
    "forwarddelete": "delete",
    "escape": "esc",
    "pageup": "page_up",
    "pagedown": "page_down",
}

_RAW_CODE = re.compile(r"^key(\d+)$")


def key_to_str(k: Any) -> str:
    """Serialize pynput key/char to a stable string."""
    # character keys
    if getattr(k, "char", None) is not None:
        return f"char:{k.char}"
    # named keys (esc, cmd, shift, etc.)
    name = getattr(k, "name", None)
    if name:
        return f"key:{name}"
    # fallback to the raw code
    vk = getattr(k, "vk", None)
    if vk is not None:
        return f"key{vk}"
    return f"key:{k}"


def key_code(k: Any) -> Optional[int]:
    """Raw platform code of a pynput key, if it has one."""
    value = getattr(k, "value", k)
    vk = getattr(value, "vk", None)
    return int(vk) if vk is not None else None


def _named_key(name: str) -> Optional[keyboard.Key]:
    name = name.split(".", 1)[1] if name.startswith("Key.") else name
    name = _LEGACY_KEY_NAMES.get(name, name)
    try:
        return keyboard.Key[name]
    except KeyError:
        return None


def str_to_key(s: str) -> Union[keyboard.Key, keyboard.KeyCode, str, None]:
    """Deserialize string to pynput key/char. Returns None if unknown."""
    if s.startswith("char:"):
        return s.split(":", 1)[1]
    if s.startswith("key:"):
        return _named_key(s.split(":", 1)[1])
    m = _RAW_CODE.match(s)
    if m:
        return keyboard.KeyCode.from_vk(int(m.group(1)))
    # bare identifiers from older files: 'a', 'space', 'return'
    if len(s) == 1:
        return s
    return _named_key(s)


def code_to_key(code: int) -> keyboard.KeyCode:
    return keyboard.KeyCode.from_vk(int(code))

# ---- Modifiers ------------------------------------------------------

MODIFIER_FLAGS = {
    keyboard.Key.cmd: "cmd", keyboard.Key.cmd_l: "cmd", keyboard.Key.cmd_r: "cmd",
    keyboard.Key.alt: "alt", keyboard.Key.alt_l: "alt", keyboard.Key.alt_r: "alt",
    keyboard.Key.alt_gr: "alt",
    keyboard.Key.ctrl: "ctrl", keyboard.Key.ctrl_l: "ctrl", keyboard.Key.ctrl_r: "ctrl",
    keyboard.Key.shift: "shift", keyboard.Key.shift_l: "shift", keyboard.Key.shift_r: "shift",
}

FLAG_KEYS = {
    "cmd": keyboard.Key.cmd,
    "alt": keyboard.Key.alt,
    "ctrl": keyboard.Key.ctrl,
    "shift": keyboard.Key.shift,
}

# ---- Mouse buttons --------------------------------------------------

def button_to_str(b: mouse.Button) -> str:
    if b == mouse.Button.left:
        return "left"
    if b == mouse.Button.right:
        return "right"
    return "other"


def str_to_button(s: str) -> mouse.Button:
    return {
        "left": mouse.Button.left,
        "right": mouse.Button.right,
        "other": mouse.Button.middle,
    }.get(s, mouse.Button.left)
