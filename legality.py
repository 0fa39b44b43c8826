# legality.py
from typing import Dict, Iterable, Optional

from config import SLOTS_PER_DAY
from data_models import Group, Instructor, Room, RoomType, Session, Subject


def overlaps(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open [start, end) intersection."""
    return start1 < end2 and end1 > start2


def room_fits(room: Room, required_room_type: Optional[RoomType], group: Group) -> bool:
    if required_room_type is not None and room.room_type != required_room_type:
        return False
    return room.capacity >= group.size


def find_violation(day: str,
                   slot: int,
                   duration: int,
                   room: Room,
                   instructor: Instructor,
                   group: Group,
                   placed: Iterable[Session],
                   subjects: Dict[str, Subject],
                   required_room_type: Optional[RoomType] = None,
                   slots_per_day: int = SLOTS_PER_DAY) -> Optional[str]:
    """Return why placing a session at (day, slot, room) is illegal, or None.

    Checks run cheapest first: day bounds, room fit, overlap with the sessions
    already placed, then the instructor's blocked slots.
    """
    end = slot + duration
    if slot < 0 or end > slots_per_day:
        return "out of day bounds"

    if required_room_type is not None and room.room_type != required_room_type:
        return f"room {room.name} is not a {required_room_type.value}"
    if room.capacity < group.size:
        return f"room {room.name} holds {room.capacity}, group {group.name} has {group.size}"

    for existing in placed:
        if existing.day != day:
            continue
        existing_subject = subjects.get(existing.subject_id)
        if existing_subject is None:
            continue
        if not overlaps(existing.slot_index, existing.slot_index + existing_subject.duration, slot, end):
            continue
        if existing.room_id == room.id:
            return f"room {room.name} occupied"
        if existing_subject.instructor_id == instructor.id:
            return f"instructor {instructor.name} occupied"
        if existing_subject.group_id == group.id:
            return f"group {group.name} occupied"

    for s in range(slot, end):
        if not instructor.is_available(day, s):
            return f"instructor {instructor.name} unavailable at {day} slot {s}"

    return None


def is_legal_placement(day: str,
                       slot: int,
                       duration: int,
                       room: Room,
                       instructor: Instructor,
                       group: Group,
                       placed: Iterable[Session],
                       subjects: Dict[str, Subject],
                       required_room_type: Optional[RoomType] = None,
                       slots_per_day: int = SLOTS_PER_DAY) -> bool:
    return find_violation(day, slot, duration, room, instructor, group, placed, subjects,
                          required_room_type=required_room_type, slots_per_day=slots_per_day) is None
