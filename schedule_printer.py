# schedule_printer.py

import json
import logging
import os
from typing import List, Optional

import pandas as pd

from config import DAYS, OUTPUT_DIR, TIME_SLOTS
from conflict_detector import conflicts_by_session
from data_models import Conflict, Session
from timetable import TimeTable, day_order

logger = logging.getLogger(__name__)

COLUMNS = ['session_id', 'day', 'slot', 'time', 'subject', 'room', 'instructor', 'group', 'duration']


def _sorted_sessions(sessions: List[Session]) -> List[Session]:
    return sorted(sessions, key=lambda s: (day_order(s.day), s.slot_index))


def _slot_label(slot_index: int) -> str:
    if 0 <= slot_index < len(TIME_SLOTS):
        return TIME_SLOTS[slot_index].label
    return f"slot {slot_index}"


def _resolve(timetable: TimeTable, session: Session) -> Optional[dict]:
    subject = timetable.subjects_by_id.get(session.subject_id)
    if subject is None:
        return None
    room = timetable.rooms_by_id.get(session.room_id)
    instructor = timetable.instructors_by_id.get(subject.instructor_id)
    group = timetable.groups_by_id.get(subject.group_id)
    if room is None or instructor is None or group is None:
        return None
    return {
        'session_id': session.id,
        'day': session.day,
        'slot': session.slot_index,
        'time': _slot_label(session.slot_index),
        'subject': subject.name,
        'room': room.name,
        'instructor': instructor.name,
        'group': group.name,
        'duration': subject.duration,
    }


def format_schedule(timetable: TimeTable, sessions: List[Session]) -> str:
    """One line per session; the text handed to report writers as context."""
    lines = []
    for row in _rows(timetable, sessions):
        lines.append(f"[{row['day']} {row['time']}] {row['subject']} in {row['room']} "
                     f"with {row['instructor']} for {row['group']}")
    return "\n".join(lines)


def _rows(timetable: TimeTable, sessions: List[Session]) -> List[dict]:
    rows = []
    for session in _sorted_sessions(sessions):
        row = _resolve(timetable, session)
        if row is None:
            logger.warning("Session %s (subject %s, room %s) has unknown references; left out of the output",
                           session.id, session.subject_id, session.room_id)
            continue
        rows.append(row)
    return rows


def schedule_to_dataframe(timetable: TimeTable, sessions: List[Session]) -> pd.DataFrame:
    return pd.DataFrame(_rows(timetable, sessions), columns=COLUMNS)


def schedule_grid(timetable: TimeTable, sessions: List[Session], group_id: Optional[str] = None,
                  instructor_id: Optional[str] = None, room_id: Optional[str] = None) -> pd.DataFrame:
    """Days x slot labels, each cell naming the subject that starts or continues there.

    group_id, instructor_id and room_id narrow the grid to one group's, one
    instructor's or one room's week. Filters combine.
    """
    grid = pd.DataFrame("", index=DAYS, columns=[ts.label for ts in TIME_SLOTS])
    subjects = timetable.subjects_by_id
    for session in sessions:
        subject = subjects.get(session.subject_id)
        if subject is None or session.day not in grid.index:
            continue
        if group_id is not None and subject.group_id != group_id:
            continue
        if instructor_id is not None and subject.instructor_id != instructor_id:
            continue
        if room_id is not None and session.room_id != room_id:
            continue
        for sl in range(session.slot_index, min(session.slot_index + subject.duration, len(TIME_SLOTS))):
            label = TIME_SLOTS[sl].label
            current = grid.at[session.day, label]
            grid.at[session.day, label] = f"{current} / {subject.name}" if current else subject.name
    return grid


def print_grid(timetable: TimeTable, sessions: List[Session], group_id: Optional[str] = None,
               instructor_id: Optional[str] = None, room_id: Optional[str] = None):
    grid = schedule_grid(timetable, sessions, group_id=group_id, instructor_id=instructor_id, room_id=room_id)
    print("\nWeekly Grid:")
    print("-" * 100)
    print(grid.to_string())


def print_schedule(timetable: TimeTable, sessions: List[Session], output_dir: str = OUTPUT_DIR):
    """Print the generated schedule in a readable format"""
    print("\nGenerated Schedule:")
    print("-" * 100)

    rows = _rows(timetable, sessions)

    current_day = None
    for row in rows:
        # Print day header if new day
        if current_day != row['day']:
            current_day = row['day']
            print(f"\n{current_day}")
            print("-" * 100)

        print(f"Time: {row['time']} | "
              f"Subject: {row['subject']} ({row['duration']} slot(s)) | "
              f"Group: {row['group']} | "
              f"Room: {row['room']} | "
              f"Instructor: {row['instructor']}")

    # Output the schedule to a JSON file
    os.makedirs(output_dir, exist_ok=True)
    output_file = os.path.join(output_dir, 'schedule_output.json')
    with open(output_file, 'w') as f:
        json.dump(rows, f, indent=4)
    return output_file


def print_conflicts(conflicts: List[Conflict]):
    if not conflicts:
        print("No conflicts detected. All constraints satisfied.")
        return
    print(f"\n{len(conflicts)} conflict(s) detected:")
    for session_id, found in conflicts_by_session(conflicts).items():
        for c in found:
            print(f"  [{c.kind.value}] {c.description} (session {session_id})")


def export_sessions(sessions: List[Session], path: str):
    """Write sessions in the format timetable.load_sessions reads."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w') as f:
        json.dump([
            {
                'id': s.id,
                'subject_id': s.subject_id,
                'room_id': s.room_id,
                'day': s.day,
                'slot_index': s.slot_index,
            }
            for s in sessions
        ], f, indent=4)
