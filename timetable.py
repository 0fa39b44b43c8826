# timetable.py
import json
import os
from typing import Dict, FrozenSet, List, Optional, Tuple

import pandas as pd

from config import DAYS, INPUT_DIR
from data_models import Group, Instructor, Room, RoomType, Session, Subject


class CatalogError(ValueError):
    """Raised when catalog input files are missing or malformed."""


def _room_type(value: str) -> RoomType:
    try:
        return RoomType(value)
    except ValueError:
        raise CatalogError(f"Unknown room type '{value}'") from None


def _unavailable_from_days(raw: Dict[str, List[int]]) -> FrozenSet[Tuple[str, int]]:
    # slots are given one-based per day, e.g. {"Monday": [1, 2]}
    # convert to zero-based (day, slot) pairs
    pairs = set()
    for day_str, slots in raw.items():
        for s in slots:
            pairs.add((day_str, int(s) - 1))
    return frozenset(pairs)


def _unavailable_from_text(raw) -> FrozenSet[Tuple[str, int]]:
    # CSV form: "Monday-1;Friday-7"
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return frozenset()
    pairs = set()
    for item in str(raw).split(';'):
        item = item.strip()
        if not item:
            continue
        day_str, _, slot = item.rpartition('-')
        if not day_str or not slot.isdigit():
            raise CatalogError(f"Bad unavailability entry '{item}', expected 'Day-Slot'")
        pairs.add((day_str, int(slot) - 1))
    return frozenset(pairs)


class TimeTable:
    def __init__(self,
                 rooms: Optional[List[Room]] = None,
                 instructors: Optional[List[Instructor]] = None,
                 groups: Optional[List[Group]] = None,
                 subjects: Optional[List[Subject]] = None):
        self.rooms: List[Room] = list(rooms or [])
        self.instructors: List[Instructor] = list(instructors or [])
        self.groups: List[Group] = list(groups or [])
        self.subjects: List[Subject] = list(subjects or [])

    @property
    def rooms_by_id(self) -> Dict[str, Room]:
        return {r.id: r for r in self.rooms}

    @property
    def instructors_by_id(self) -> Dict[str, Instructor]:
        return {i.id: i for i in self.instructors}

    @property
    def groups_by_id(self) -> Dict[str, Group]:
        return {g.id: g for g in self.groups}

    @property
    def subjects_by_id(self) -> Dict[str, Subject]:
        return {s.id: s for s in self.subjects}

    def total_sessions_required(self) -> int:
        return sum(s.sessions_per_week for s in self.subjects)

    def load_data_from_files(self, data_dir: str = INPUT_DIR) -> "TimeTable":
        rooms_data = self._read_json(os.path.join(data_dir, 'rooms.json'))
        instructors_data = self._read_json(os.path.join(data_dir, 'instructors.json'))
        groups_data = self._read_json(os.path.join(data_dir, 'groups.json'))
        subjects_data = self._read_json(os.path.join(data_dir, 'subjects.json'))

        try:
            # Initialize Rooms
            for room in rooms_data:
                self.rooms.append(Room(
                    id=str(room['id']),
                    name=room['name'],
                    capacity=int(room['capacity']),
                    room_type=_room_type(room['room_type'])
                ))

            # Initialize Instructors
            for instr in instructors_data:
                self.instructors.append(Instructor(
                    id=str(instr['id']),
                    name=instr['name'],
                    specialty=instr.get('specialty', ''),
                    unavailable=_unavailable_from_days(instr.get('unavailable', {}))
                ))

            # Initialize Groups
            for group in groups_data:
                self.groups.append(Group(
                    id=str(group['id']),
                    name=group['name'],
                    size=int(group['size'])
                ))

            # Initialize Subjects
            for subject in subjects_data:
                self.subjects.append(Subject(
                    id=str(subject['id']),
                    name=subject['name'],
                    instructor_id=str(subject['instructor_id']),
                    group_id=str(subject['group_id']),
                    duration=int(subject['duration']),
                    required_room_type=_room_type(subject['required_room_type']),
                    sessions_per_week=int(subject['sessions_per_week'])
                ))
        except KeyError as e:
            raise CatalogError(f"Missing field {e} in catalog data under {data_dir}") from e
        except CatalogError:
            raise
        except (ValueError, TypeError, AttributeError) as e:
            raise CatalogError(f"Bad value in catalog data under {data_dir}: {e}") from e

        return self

    def load_data_from_csv(self, data_dir: str) -> "TimeTable":
        rooms_df = self._read_csv(os.path.join(data_dir, 'rooms.csv'))
        instructors_df = self._read_csv(os.path.join(data_dir, 'instructors.csv'))
        groups_df = self._read_csv(os.path.join(data_dir, 'groups.csv'))
        subjects_df = self._read_csv(os.path.join(data_dir, 'subjects.csv'))

        try:
            self.rooms.extend(
                Room(id=str(row['id']), name=row['name'], capacity=int(row['capacity']),
                     room_type=_room_type(row['room_type']))
                for _, row in rooms_df.iterrows()
            )
            self.instructors.extend(
                Instructor(id=str(row['id']), name=row['name'],
                           specialty=row['specialty'] if 'specialty' in row and pd.notna(row['specialty']) else '',
                           unavailable=_unavailable_from_text(row.get('unavailable')))
                for _, row in instructors_df.iterrows()
            )
            self.groups.extend(
                Group(id=str(row['id']), name=row['name'], size=int(row['size']))
                for _, row in groups_df.iterrows()
            )
            self.subjects.extend(
                Subject(id=str(row['id']), name=row['name'],
                        instructor_id=str(row['instructor_id']), group_id=str(row['group_id']),
                        duration=int(row['duration']),
                        required_room_type=_room_type(row['required_room_type']),
                        sessions_per_week=int(row['sessions_per_week']))
                for _, row in subjects_df.iterrows()
            )
        except KeyError as e:
            raise CatalogError(f"Missing column {e} in CSV catalog under {data_dir}") from e
        except CatalogError:
            raise
        except (ValueError, TypeError) as e:
            raise CatalogError(f"Bad value in CSV catalog under {data_dir}: {e}") from e

        return self

    def validate(self) -> List[str]:
        """Return human-readable problems such as duplicate ids or subjects that cannot be placed.

        An empty list does not guarantee the catalog is solvable, only that every
        subject references existing records and has at least one usable room.
        """
        issues = []
        # the *_by_id lookups keep only the last record per id
        for kind, records in (("room", self.rooms), ("instructor", self.instructors),
                              ("group", self.groups), ("subject", self.subjects)):
            seen = set()
            for record in records:
                if record.id in seen:
                    issues.append(f"Duplicate {kind} id {record.id} ({record.name})")
                seen.add(record.id)

        instructors = self.instructors_by_id
        groups = self.groups_by_id
        for subject in self.subjects:
            if subject.instructor_id not in instructors:
                issues.append(f"Subject {subject.id} ({subject.name}) references unknown instructor {subject.instructor_id}")
            group = groups.get(subject.group_id)
            if group is None:
                issues.append(f"Subject {subject.id} ({subject.name}) references unknown group {subject.group_id}")
            typed_rooms = [r for r in self.rooms if r.room_type == subject.required_room_type]
            if not typed_rooms:
                issues.append(f"Subject {subject.id} ({subject.name}) needs a {subject.required_room_type.value} "
                              f"but none exists")
            elif group is not None and not any(r.capacity >= group.size for r in typed_rooms):
                issues.append(f"Subject {subject.id} ({subject.name}): no {subject.required_room_type.value} "
                              f"holds group {group.name} ({group.size} students)")
        return issues

    @staticmethod
    def _read_json(path: str):
        if not os.path.exists(path):
            raise CatalogError(f"Catalog file not found: {path}")
        with open(path, 'r') as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise CatalogError(f"Malformed JSON in {path}: {e}") from e

    @staticmethod
    def _read_csv(path: str) -> pd.DataFrame:
        if not os.path.exists(path):
            raise CatalogError(f"Catalog file not found: {path}")
        try:
            return pd.read_csv(path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise CatalogError(f"Malformed CSV in {path}: {e}") from e


def load_sessions(path: str) -> List[Session]:
    """Read a session list written by schedule_printer.export_sessions."""
    if not os.path.exists(path):
        raise CatalogError(f"Schedule file not found: {path}")
    with open(path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Malformed JSON in {path}: {e}") from e
    try:
        return [
            Session(
                id=str(item['id']),
                subject_id=str(item['subject_id']),
                room_id=str(item['room_id']),
                day=item['day'],
                slot_index=int(item['slot_index'])
            )
            for item in data
        ]
    except KeyError as e:
        raise CatalogError(f"Missing field {e} in schedule {path}") from e
    except (ValueError, TypeError) as e:
        raise CatalogError(f"Bad value in schedule {path}: {e}") from e


def day_order(day: str) -> int:
    return DAYS.index(day) if day in DAYS else len(DAYS)
