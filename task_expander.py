# task_expander.py
from typing import Iterable, List

from data_models import Subject, Task


def expand_tasks(subjects: Iterable[Subject]) -> List[Task]:
    """Flatten subjects into one task per weekly session, longest first.

    sorted() is stable, so equal durations keep subject/instance order.
    """
    tasks = []
    for sub in subjects:
        for i in range(sub.sessions_per_week):
            tasks.append(Task(subject_id=sub.id, duration=sub.duration, task_id=f"{sub.id}_instance_{i}"))
    return sorted(tasks, key=lambda t: -t.duration)
