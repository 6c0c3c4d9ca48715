# SPDX-License-Identifier: GPL-3.0-or-later
import time
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

# ---- Timing helpers -------------------------------------------------

class RecClock:
    """Keeps a relative clock anchored at start()."""
    def __init__(self, clock=time.perf_counter) -> None:
        self._clock = clock
        self._t0: Optional[float] = None

    def start(self) -> None:
        self._t0 = self._clock()

    def now_rel(self) -> float:
        if self._t0 is None:
            self.start()
        return self._clock() - self._t0


def span_end(ev: Any) -> float:
    """Offset at which an event is over: t, or t + duration for holds."""
    if ev.kind == "mouse_hold":
        return ev.t + ev.duration
    return ev.t


def total_duration(events: Iterable[Any]) -> float:
    """
    Wall-clock span of a recording in seconds.

    Holds end at t + duration rather than at their own offset, so a
    trailing hold stretches the run. An empty sequence lasts 0.
    """
    return max((span_end(ev) for ev in events), default=0.0)

# ---- Modifier helpers -----------------------------------------------

# Canonical order used when writing flag lists out.
MODIFIER_ORDER = ("cmd", "alt", "ctrl", "shift", "fn")


def flags_to_list(flags: Iterable[str]) -> List[str]:
    """Order-insensitive modifier set -> stable list for JSON."""
    uniq = set(flags)
    known = [m for m in MODIFIER_ORDER if m in uniq]
    return known + sorted(uniq.difference(MODIFIER_ORDER))

# ---- Reporting helpers ----------------------------------------------

def summarize(events: Iterable[Any]) -> Dict[str, int]:
    """Count events per display bucket (holds count as mouse)."""
    counts = Counter()
    for ev in events:
        if ev.kind == "key":
            counts["key"] += 1
        elif ev.kind in ("mouse", "mouse_hold"):
            counts["mouse"] += 1
        elif ev.kind == "scroll":
            counts["scroll"] += 1
    return {"key": counts["key"], "mouse": counts["mouse"], "scroll": counts["scroll"]}


def plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"
