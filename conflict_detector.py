# conflict_detector.py

import logging
from typing import Dict, List, Sequence

from config import DAYS, SLOTS_PER_DAY
from data_models import Conflict, ConflictKind, Group, Instructor, Room, Session, Subject
from legality import overlaps

logger = logging.getLogger(__name__)


def detect_conflicts(sessions: List[Session],
                     subjects: List[Subject],
                     rooms: List[Room],
                     instructors: List[Instructor],
                     groups: List[Group],
                     audit_placement: bool = False,
                     days: Sequence[str] = DAYS,
                     slots_per_day: int = SLOTS_PER_DAY) -> List[Conflict]:
    """Re-scan a finished schedule for double bookings.

    Every same-day pair with overlapping slots yields one finding per shared
    room, instructor and group, referencing the earlier session of the pair.
    With audit_placement=True each session is also checked on its own for day
    bounds, room type/capacity and instructor availability. An empty list means
    the schedule is valid.
    """
    subjects_by_id = {s.id: s for s in subjects}
    rooms_by_id = {r.id: r for r in rooms}
    instructors_by_id = {i.id: i for i in instructors}
    groups_by_id = {g.id: g for g in groups}

    def room_name(room_id):
        room = rooms_by_id.get(room_id)
        return room.name if room else room_id

    def instructor_name(instructor_id):
        instructor = instructors_by_id.get(instructor_id)
        return instructor.name if instructor else instructor_id

    def group_name(group_id):
        group = groups_by_id.get(group_id)
        return group.name if group else group_id

    known = []
    for s in sessions:
        if s.subject_id in subjects_by_id:
            known.append(s)
        else:
            logger.warning("Session %s references unknown subject %s; skipped", s.id, s.subject_id)

    conflicts = []
    for i, s1 in enumerate(known):
        sub1 = subjects_by_id[s1.subject_id]
        start1, end1 = s1.slot_index, s1.slot_index + sub1.duration
        for j in range(i + 1, len(known)):
            s2 = known[j]
            if s1.day != s2.day:
                continue
            sub2 = subjects_by_id[s2.subject_id]
            if not overlaps(start1, end1, s2.slot_index, s2.slot_index + sub2.duration):
                continue
            if s1.room_id == s2.room_id:
                conflicts.append(Conflict(ConflictKind.ROOM,
                                          f"Room {room_name(s1.room_id)} double booked", s1.id))
            if sub1.instructor_id == sub2.instructor_id:
                conflicts.append(Conflict(ConflictKind.INSTRUCTOR,
                                          f"Instructor {instructor_name(sub1.instructor_id)} double booked", s1.id))
            if sub1.group_id == sub2.group_id:
                conflicts.append(Conflict(ConflictKind.GROUP,
                                          f"Group {group_name(sub1.group_id)} double booked", s1.id))

    if audit_placement:
        for s in known:
            conflicts.extend(_audit_session(s, subjects_by_id[s.subject_id], rooms_by_id,
                                            instructors_by_id, groups_by_id, days, slots_per_day))

    return conflicts


def _audit_session(session: Session,
                   subject: Subject,
                   rooms_by_id: Dict[str, Room],
                   instructors_by_id: Dict[str, Instructor],
                   groups_by_id: Dict[str, Group],
                   days: Sequence[str],
                   slots_per_day: int) -> List[Conflict]:
    found = []
    end = session.slot_index + subject.duration
    if session.day not in days:
        found.append(Conflict(ConflictKind.BOUNDS, f"{subject.name} is on unknown day {session.day}", session.id))
    if session.slot_index < 0 or end > slots_per_day:
        found.append(Conflict(ConflictKind.BOUNDS,
                              f"{subject.name} runs past the end of {session.day}", session.id))

    room = rooms_by_id.get(session.room_id)
    group = groups_by_id.get(subject.group_id)
    if room is None:
        found.append(Conflict(ConflictKind.CAPACITY, f"{subject.name} uses unknown room {session.room_id}",
                              session.id))
    else:
        if room.room_type != subject.required_room_type:
            found.append(Conflict(ConflictKind.CAPACITY,
                                  f"Room {room.name} is a {room.room_type.value}, "
                                  f"{subject.name} needs a {subject.required_room_type.value}", session.id))
        if group is not None and room.capacity < group.size:
            found.append(Conflict(ConflictKind.CAPACITY,
                                  f"Room {room.name} holds {room.capacity}, group {group.name} has {group.size}",
                                  session.id))

    instructor = instructors_by_id.get(subject.instructor_id)
    if instructor is not None:
        for sl in range(session.slot_index, end):
            if not instructor.is_available(session.day, sl):
                found.append(Conflict(ConflictKind.INSTRUCTOR,
                                      f"Instructor {instructor.name} unavailable on {session.day} slot {sl}",
                                      session.id))
                break
    return found


def conflicts_by_session(conflicts: List[Conflict]) -> Dict[str, List[Conflict]]:
    grouped: Dict[str, List[Conflict]] = {}
    for c in conflicts:
        grouped.setdefault(c.session_id, []).append(c)
    return grouped
