# SPDX-License-Identifier: GPL-3.0-or-later
from typing import List, Sequence

from models import DOWN_TO_BUTTON, DOWN_TO_UP, Event, MouseEvent, MouseHoldEvent


def _closes(down: Event, nxt: Event) -> bool:
    return (isinstance(nxt, MouseEvent)
            and nxt.subtype == DOWN_TO_UP[down.subtype])


def compress_mouse_holds(events: Sequence[Event]) -> List[Event]:
    """
    Merge each button-down immediately followed by the matching button-up
    into a single 'mouse_hold' event.

    Single left-to-right pass. Only strictly adjacent pairs merge: a down,
    a move, then the up stays as three events. The input is not modified
    and running the result through again changes nothing.
    """
    out: List[Event] = []
    i, n = 0, len(events)
    while i < n:
        e = events[i]
        if (isinstance(e, MouseEvent) and e.subtype in DOWN_TO_UP
                and i + 1 < n and _closes(e, events[i + 1])):
            up = events[i + 1]
            out.append(MouseHoldEvent(
                t=e.t,
                button=DOWN_TO_BUTTON[e.subtype],
                point=e.point,
                duration=up.t - e.t,
                flags=e.flags,
            ))
            i += 2
        else:
            out.append(e)
            i += 1
    return out
