# backtracking.py

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from config import DAYS, SLOTS_PER_DAY, max_steps_from_env, time_limit_from_env
from data_models import Group, Instructor, Room, Session, Subject, Task
from legality import find_violation, room_fits
from task_expander import expand_tasks
from timetable import TimeTable

logger = logging.getLogger(__name__)


class SearchBudgetExceeded(RuntimeError):
    """The search ran out of steps or time before proving success or failure."""

    def __init__(self, message: str, steps: int, elapsed: float):
        super().__init__(message)
        self.steps = steps
        self.elapsed = elapsed


@dataclass
class _Frame:
    task: Task
    subject: Subject
    instructor: Optional[Instructor]
    group: Optional[Group]
    candidates: List[Tuple[str, int, Room]] = field(default_factory=list)
    position: int = 0


class BacktrackingScheduler:
    """Chronological backtracking over tasks ordered longest-first.

    The search keeps one frame per placed task on an explicit stack instead of
    recursing, so catalog size is not limited by the interpreter's recursion
    depth. The first complete assignment found is returned.
    """

    def __init__(self,
                 timetable: TimeTable,
                 days: Sequence[str] = DAYS,
                 slots_per_day: int = SLOTS_PER_DAY,
                 max_steps: Optional[int] = None,
                 time_limit_seconds: Optional[float] = None):
        self.timetable = timetable
        self.days = list(days)
        self.slots_per_day = slots_per_day
        self.max_steps = max_steps
        self.time_limit_seconds = time_limit_seconds

        self.subjects = timetable.subjects_by_id
        self.instructors = timetable.instructors_by_id
        self.groups = timetable.groups_by_id

        # populated by run()
        self.steps = 0
        self.backtracks = 0
        self.elapsed = 0.0

    def run(self) -> List[Session]:
        tasks = expand_tasks(self.timetable.subjects)
        logger.debug("Scheduling %d tasks from %d subjects", len(tasks), len(self.timetable.subjects))
        for subject in self.timetable.subjects:
            if subject.instructor_id not in self.instructors or subject.group_id not in self.groups:
                logger.warning("Subject %s references a missing instructor or group; it cannot be placed",
                               subject.id)

        self.steps = 0
        self.backtracks = 0
        started = time.perf_counter()

        placed: List[Session] = []
        frames: List[_Frame] = [self._frame(tasks[0])] if tasks else []

        while frames:
            frame = frames[-1]
            if len(placed) == len(frames):
                # the frame above failed; undo this frame's placement and move on
                placed.pop()
                self.backtracks += 1

            session = self._next_placement(frame, placed, len(placed) + 1, started)
            if session is None:
                frames.pop()
                continue

            placed.append(session)
            if len(placed) == len(tasks):
                break
            frames.append(self._frame(tasks[len(placed)]))

        self.elapsed = time.perf_counter() - started

        if len(placed) < len(tasks):
            logger.warning("Could not find a valid schedule for all subjects "
                           "(%d tasks, %d steps, %d backtracks)", len(tasks), self.steps, self.backtracks)
            return []

        logger.info("Placed %d sessions in %.3fs (%d steps, %d backtracks)",
                    len(placed), self.elapsed, self.steps, self.backtracks)
        return placed

    def _frame(self, task: Task) -> _Frame:
        subject = self.subjects[task.subject_id]
        frame = _Frame(task=task,
                       subject=subject,
                       instructor=self.instructors.get(subject.instructor_id),
                       group=self.groups.get(subject.group_id))
        if frame.instructor is None or frame.group is None:
            return frame

        rooms = [r for r in self.timetable.rooms if room_fits(r, subject.required_room_type, frame.group)]
        for day in self.days:
            for slot in range(self.slots_per_day):
                if slot + subject.duration > self.slots_per_day:
                    continue
                for room in rooms:
                    frame.candidates.append((day, slot, room))
        return frame

    def _next_placement(self, frame: _Frame, placed: List[Session], number: int,
                        started: float) -> Optional[Session]:
        while frame.position < len(frame.candidates):
            day, slot, room = frame.candidates[frame.position]
            frame.position += 1
            self._check_budget(started)

            violation = find_violation(day, slot, frame.subject.duration, room, frame.instructor, frame.group,
                                       placed, self.subjects,
                                       required_room_type=frame.subject.required_room_type,
                                       slots_per_day=self.slots_per_day)
            if violation is None:
                return Session(id=f"session-{number}",
                               subject_id=frame.subject.id,
                               room_id=room.id,
                               day=day,
                               slot_index=slot)
        return None

    def _check_budget(self, started: float):
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise SearchBudgetExceeded(f"Search stopped after {self.max_steps} steps without a result",
                                       self.steps, time.perf_counter() - started)
        if self.time_limit_seconds is not None:
            elapsed = time.perf_counter() - started
            if elapsed > self.time_limit_seconds:
                raise SearchBudgetExceeded(f"Search stopped after {self.time_limit_seconds}s without a result",
                                           self.steps, elapsed)


def generate_schedule(rooms: List[Room],
                      instructors: List[Instructor],
                      groups: List[Group],
                      subjects: List[Subject],
                      days: Sequence[str] = DAYS,
                      slots_per_day: int = SLOTS_PER_DAY,
                      max_steps: Optional[int] = None,
                      time_limit_seconds: Optional[float] = None) -> List[Session]:
    """Return a schedule satisfying every hard constraint, or [] if none exists.

    An empty result with a non-empty subject list means the catalog is
    unsatisfiable. Budgets default to SCHEDULER_MAX_STEPS / SCHEDULER_TIME_LIMIT;
    running out raises SearchBudgetExceeded.
    """
    scheduler = BacktrackingScheduler(
        TimeTable(rooms, instructors, groups, subjects),
        days=days,
        slots_per_day=slots_per_day,
        max_steps=max_steps if max_steps is not None else max_steps_from_env(),
        time_limit_seconds=time_limit_seconds if time_limit_seconds is not None else time_limit_from_env(),
    )
    return scheduler.run()
