"""Client-side replay list of joined task rooms."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Union

TASK_ROOM_PREFIX = "task-"


def task_room_id(task_id: Union[int, str]) -> str:
    """Canonical room id for a task conversation."""

    return f"{TASK_ROOM_PREFIX}{task_id}"


def task_id_for_room(room_id: str) -> Optional[Union[int, str]]:
    """Recover the task id from a ``task-<id>`` room id, or ``None``."""

    if not room_id.startswith(TASK_ROOM_PREFIX):
        return None
    raw = room_id[len(TASK_ROOM_PREFIX):]
    if not raw:
        return None
    return int(raw) if raw.isdecimal() else raw


@dataclass
class Room:
    room_id: str
    joined_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


class RoomRegistry:
    """Insertion-ordered set of rooms the session has joined.

    Membership is purely client-side: removing a room sends nothing to the
    backend, it only drops the room from the replay list used after a
    reconnect.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))

    def __len__(self) -> int:
        return len(self._rooms)

    def add(self, room_id: str) -> bool:
        """Add a room; returns ``False`` when it was already a member."""

        if room_id in self._rooms:
            return False
        self._rooms[room_id] = Room(room_id=room_id)
        return True

    def discard(self, room_id: str) -> bool:
        return self._rooms.pop(room_id, None) is not None

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def room_ids(self) -> List[str]:
        return list(self._rooms)

    def clear(self) -> None:
        self._rooms.clear()
