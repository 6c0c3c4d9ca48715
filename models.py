# SPDX-License-Identifier: GPL-3.0-or-later
"""
In-memory representation of recorded input.

A recording is an ordered list of events; list order is capture order and
replay order. Events are immutable once captured.

Event kinds:
- 'key'        key down/up with identifier, raw key code and modifiers
- 'mouse'      button transition (or a plain move) at a point
- 'scroll'     scroll delta at a point
- 'mouse_hold' down + up merged by the compressor, never captured directly
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple, Union

from errors import MalformedRecordingError
from utils import flags_to_list, total_duration

Point = Tuple[float, float]

# ---- Mouse subtypes -------------------------------------------------

LEFT_DOWN = "leftDown"
LEFT_UP = "leftUp"
RIGHT_DOWN = "rightDown"
RIGHT_UP = "rightUp"
OTHER_DOWN = "otherDown"
OTHER_UP = "otherUp"
MOVE = "move"

MOUSE_SUBTYPES = (LEFT_DOWN, LEFT_UP, RIGHT_DOWN, RIGHT_UP, OTHER_DOWN, OTHER_UP, MOVE)

BUTTONS = ("left", "right", "other")

# button -> (down subtype, up subtype)
BUTTON_TRANSITIONS: Dict[str, Tuple[str, str]] = {
    "left": (LEFT_DOWN, LEFT_UP),
    "right": (RIGHT_DOWN, RIGHT_UP),
    "other": (OTHER_DOWN, OTHER_UP),
}
DOWN_TO_BUTTON: Dict[str, str] = {down: b for b, (down, _up) in BUTTON_TRANSITIONS.items()}
DOWN_TO_UP: Dict[str, str] = {down: up for down, up in BUTTON_TRANSITIONS.values()}

# Event type numbers written by the old Hammerspoon recorder.
LEGACY_MOUSE_SUBTYPES: Dict[int, str] = {
    1: LEFT_DOWN,
    2: LEFT_UP,
    3: RIGHT_DOWN,
    4: RIGHT_UP,
    5: MOVE,
    25: OTHER_DOWN,
    26: OTHER_UP,
}

# ---- Events ---------------------------------------------------------

@dataclass(frozen=True)
class KeyEvent:
    t: float                            # seconds since the start of recording
    direction: str                      # 'down' | 'up'
    key: Optional[str] = None           # resolved identifier, e.g. 'char:a', 'key:space'
    key_code: Optional[int] = None      # raw platform key code
    flags: FrozenSet[str] = frozenset()
    kind: ClassVar[str] = "key"

    @property
    def is_down(self) -> bool:
        return self.direction == "down"


@dataclass(frozen=True)
class MouseEvent:
    t: float
    subtype: str                        # one of MOUSE_SUBTYPES
    point: Point
    flags: FrozenSet[str] = frozenset()
    kind: ClassVar[str] = "mouse"

    @property
    def is_transition(self) -> bool:
        return self.subtype != MOVE


@dataclass(frozen=True)
class ScrollEvent:
    t: float
    point: Point
    delta: Point
    kind: ClassVar[str] = "scroll"


@dataclass(frozen=True)
class MouseHoldEvent:
    t: float
    button: str                         # 'left' | 'right' | 'other'
    point: Point
    duration: float
    flags: FrozenSet[str] = frozenset()
    kind: ClassVar[str] = "mouse_hold"

    def __post_init__(self) -> None:
        if self.duration < 0:
            raise ValueError(f"hold duration must be >= 0, got {self.duration}")
        if self.button not in BUTTONS:
            raise ValueError(f"unknown mouse button {self.button!r}")


Event = Union[KeyEvent, MouseEvent, ScrollEvent, MouseHoldEvent]


@dataclass
class Recording:
    events: List[Event] = field(default_factory=list)
    name: str = "Untitled"
    recorded_at: Optional[str] = None   # '%Y-%m-%d %H:%M:%S'
    mouse_moves_included: bool = False

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def duration(self) -> float:
        return total_duration(self.events)

# ---- Serialization --------------------------------------------------

def _point_to_dict(p: Point) -> Dict[str, float]:
    return {"x": p[0], "y": p[1]}


def event_to_dict(ev: Event) -> Dict[str, Any]:
    """Serialize an event using the on-disk field names."""
    if isinstance(ev, KeyEvent):
        return {"t": ev.t, "kind": ev.kind, "subtype": ev.direction, "key": ev.key,
                "keyCode": ev.key_code, "flags": flags_to_list(ev.flags)}
    if isinstance(ev, MouseEvent):
        return {"t": ev.t, "kind": ev.kind, "subtype": ev.subtype,
                "point": _point_to_dict(ev.point), "flags": flags_to_list(ev.flags)}
    if isinstance(ev, ScrollEvent):
        return {"t": ev.t, "kind": ev.kind, "point": _point_to_dict(ev.point),
                "delta": _point_to_dict(ev.delta)}
    if isinstance(ev, MouseHoldEvent):
        return {"t": ev.t, "kind": ev.kind, "button": ev.button,
                "point": _point_to_dict(ev.point), "duration": ev.duration,
                "flags": flags_to_list(ev.flags)}
    raise TypeError(f"not an event: {ev!r}")


def _require(d: Dict[str, Any], name: str) -> Any:
    if d.get(name) is None:
        raise MalformedRecordingError(f"{d.get('kind', 'event')} event is missing '{name}'")
    return d[name]


def _point(d: Dict[str, Any], name: str) -> Point:
    raw = _require(d, name)
    try:
        return (float(raw["x"]), float(raw["y"]))
    except (KeyError, TypeError, ValueError):
        raise MalformedRecordingError(f"bad '{name}' value: {raw!r}") from None


def _flags(d: Dict[str, Any]) -> FrozenSet[str]:
    raw = d.get("flags") or []
    if not isinstance(raw, (list, tuple)):
        raise MalformedRecordingError(f"bad 'flags' value: {raw!r}")
    return frozenset(str(f) for f in raw)


def _mouse_subtype(raw: Any) -> str:
    if isinstance(raw, int) and not isinstance(raw, bool):
        if raw in LEGACY_MOUSE_SUBTYPES:
            return LEGACY_MOUSE_SUBTYPES[raw]
    elif raw in MOUSE_SUBTYPES:
        return raw
    raise MalformedRecordingError(f"unknown mouse subtype {raw!r}")


def event_from_dict(d: Dict[str, Any]) -> Event:
    """
    Parse one persisted event.

    Raises MalformedRecordingError for unknown kinds and missing or
    ill-typed fields.
    """
    if not isinstance(d, dict):
        raise MalformedRecordingError(f"event must be an object, got {type(d).__name__}")
    try:
        t = float(_require(d, "t"))
    except (TypeError, ValueError):
        raise MalformedRecordingError(f"bad 't' value: {d.get('t')!r}") from None
    kind = _require(d, "kind")

    if kind == "key":
        direction = _require(d, "subtype")
        if direction not in ("down", "up"):
            raise MalformedRecordingError(f"unknown key direction {direction!r}")
        key = d.get("key") or d.get("chars") or None
        key_code = d.get("keyCode")
        if key is None and key_code is None:
            raise MalformedRecordingError("key event has neither 'key' nor 'keyCode'")
        if key_code is not None:
            try:
                key_code = int(key_code)
            except (TypeError, ValueError):
                raise MalformedRecordingError(f"bad 'keyCode' value: {key_code!r}") from None
        return KeyEvent(t=t, direction=direction, key=key, key_code=key_code, flags=_flags(d))

    if kind == "mouse":
        return MouseEvent(t=t, subtype=_mouse_subtype(_require(d, "subtype")),
                          point=_point(d, "point"), flags=_flags(d))

    if kind == "scroll":
        return ScrollEvent(t=t, point=_point(d, "point"), delta=_point(d, "delta"))

    if kind == "mouse_hold":
        try:
            return MouseHoldEvent(t=t, button=_require(d, "button"), point=_point(d, "point"),
                                  duration=float(_require(d, "duration")), flags=_flags(d))
        except (TypeError, ValueError) as ex:
            raise MalformedRecordingError(f"bad mouse_hold event: {ex}") from None

    raise MalformedRecordingError(f"unknown event kind {kind!r}")
