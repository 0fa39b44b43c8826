import logging

import pytest

from data_models import Group, Instructor, Room, RoomType
from timetable import TimeTable


@pytest.fixture(autouse=True)
def _no_env_budget(monkeypatch):
    monkeypatch.delenv("SCHEDULER_MAX_STEPS", raising=False)
    monkeypatch.delenv("SCHEDULER_TIME_LIMIT", raising=False)
    monkeypatch.delenv("SCHEDULER_LOG_LEVEL", raising=False)


@pytest.fixture(autouse=True)
def _reset_root_logger():
    # main.setup_logging attaches a handler to the root logger
    root = logging.getLogger()
    handlers = list(root.handlers)
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)


@pytest.fixture
def seed_timetable():
    return TimeTable().load_data_from_files()


@pytest.fixture
def classroom():
    return Room("r1", "Room 101", 30, RoomType.CLASSROOM)


@pytest.fixture
def lecturer():
    return Instructor("i1", "Dr. Ada Lovelace", "Math")


@pytest.fixture
def group():
    return Group("g1", "CS - Year 1", 25)
