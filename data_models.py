# data_models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Tuple


class RoomType(Enum):
    LECTURE_HALL = "Lecture Hall"
    LAB = "Lab"
    CLASSROOM = "Classroom"


class ConflictKind(Enum):
    ROOM = "Room"
    INSTRUCTOR = "Instructor"
    GROUP = "Group"
    CAPACITY = "Capacity"
    BOUNDS = "Bounds"  # only produced by the placement audit


@dataclass(frozen=True)
class TimeSlot:
    index: int
    start_hour: int
    end_hour: int

    @property
    def label(self) -> str:
        return f"{self.start_hour:02d}:00 - {self.end_hour:02d}:00"


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    capacity: int
    room_type: RoomType

    def __post_init__(self):
        if self.capacity < 0:
            raise ValueError(f"Room {self.id}: capacity must be >= 0, got {self.capacity}")


@dataclass(frozen=True)
class Instructor:
    id: str
    name: str
    specialty: str = ""
    unavailable: FrozenSet[Tuple[str, int]] = field(default_factory=frozenset)  # (day, zero-based slot)

    def is_available(self, day: str, slot_index: int) -> bool:
        return (day, slot_index) not in self.unavailable


@dataclass(frozen=True)
class Group:
    id: str
    name: str
    size: int

    def __post_init__(self):
        if self.size < 0:
            raise ValueError(f"Group {self.id}: size must be >= 0, got {self.size}")


@dataclass(frozen=True)
class Subject:
    id: str
    name: str
    instructor_id: str
    group_id: str
    duration: int  # consecutive slots
    required_room_type: RoomType
    sessions_per_week: int

    def __post_init__(self):
        if self.duration < 1:
            raise ValueError(f"Subject {self.id}: duration must be >= 1, got {self.duration}")
        if self.sessions_per_week < 0:
            raise ValueError(f"Subject {self.id}: sessions_per_week must be >= 0, got {self.sessions_per_week}")


@dataclass(frozen=True)
class Task:
    subject_id: str
    duration: int
    task_id: str


@dataclass(frozen=True)
class Session:
    id: str
    subject_id: str
    room_id: str
    day: str
    slot_index: int


@dataclass(frozen=True)
class Conflict:
    kind: ConflictKind
    description: str
    session_id: str
