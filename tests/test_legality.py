import pytest

from data_models import Group, Instructor, Room, RoomType
from factories import session, subject
from legality import find_violation, is_legal_placement, overlaps, room_fits


@pytest.fixture
def subjects():
    return {
        "s1": subject("s1", instructor_id="i1", group_id="g1"),
        "s2": subject("s2", instructor_id="i2", group_id="g2", duration=2),
        "s3": subject("s3", instructor_id="i3", group_id="g3"),
    }


@pytest.mark.parametrize("a,b,expected", [
    ((0, 2), (1, 3), True),
    ((0, 1), (1, 2), False),
    ((1, 2), (0, 1), False),
    ((0, 3), (1, 2), True),
    ((2, 3), (2, 3), True),
])
def test_overlaps_is_half_open(a, b, expected):
    assert overlaps(a[0], a[1], b[0], b[1]) is expected


def test_room_fits(classroom, group):
    assert room_fits(classroom, RoomType.CLASSROOM, group)
    assert room_fits(classroom, None, group)
    assert not room_fits(classroom, RoomType.LAB, group)
    assert not room_fits(classroom, RoomType.CLASSROOM, Group("big", "Big", 31))


def test_empty_grid_is_legal(classroom, lecturer, group, subjects):
    assert is_legal_placement("Monday", 0, 1, classroom, lecturer, group, [], subjects)


def test_out_of_day_bounds(classroom, lecturer, group, subjects):
    assert find_violation("Monday", 6, 2, classroom, lecturer, group, [], subjects) == "out of day bounds"
    assert is_legal_placement("Monday", 5, 2, classroom, lecturer, group, [], subjects)
    assert not is_legal_placement("Monday", 0, 2, classroom, lecturer, group, [], subjects, slots_per_day=1)


def test_room_type_and_capacity(classroom, lecturer, subjects):
    small = Group("g9", "Small", 10)
    big = Group("g8", "Big", 40)
    assert "not a Lab" in find_violation("Monday", 0, 1, classroom, lecturer, small, [], subjects,
                                         required_room_type=RoomType.LAB)
    assert "holds 30" in find_violation("Monday", 0, 1, classroom, lecturer, big, [], subjects)


def test_room_occupied(classroom, lecturer, group, subjects):
    placed = [session("x", "s3", room_id="r1", slot=0)]
    assert find_violation("Monday", 0, 1, classroom, lecturer, group, placed, subjects) == "room Room 101 occupied"


def test_instructor_occupied(lecturer, group, subjects):
    other_room = Room("r2", "Room 102", 30, RoomType.CLASSROOM)
    placed = [session("x", "s1", room_id="r1", slot=0)]
    violation = find_violation("Monday", 0, 1, other_room, lecturer, Group("g7", "Other", 10), placed, subjects)
    assert violation == "instructor Dr. Ada Lovelace occupied"


def test_group_occupied(group, subjects):
    other_room = Room("r2", "Room 102", 30, RoomType.CLASSROOM)
    placed = [session("x", "s1", room_id="r1", slot=0)]
    violation = find_violation("Monday", 0, 1, other_room, Instructor("i9", "Other"), group, placed, subjects)
    assert violation == "group CS - Year 1 occupied"


def test_multi_slot_session_blocks_its_whole_range(classroom, lecturer, group, subjects):
    # s2 spans slots 2 and 3
    placed = [session("x", "s2", room_id="r1", slot=2)]
    assert not is_legal_placement("Monday", 3, 1, classroom, lecturer, group, placed, subjects)
    assert not is_legal_placement("Monday", 1, 2, classroom, lecturer, group, placed, subjects)
    assert is_legal_placement("Monday", 1, 1, classroom, lecturer, group, placed, subjects)
    assert is_legal_placement("Monday", 4, 1, classroom, lecturer, group, placed, subjects)


def test_other_days_do_not_interfere(classroom, lecturer, group, subjects):
    placed = [session("x", "s1", room_id="r1", day="Tuesday", slot=0)]
    assert is_legal_placement("Monday", 0, 1, classroom, lecturer, group, placed, subjects)


def test_instructor_unavailability(classroom, group, subjects):
    blocked = Instructor("i1", "Dr. Alan Turing", "CS", frozenset({("Monday", 1)}))
    assert "unavailable" in find_violation("Monday", 1, 1, classroom, blocked, group, [], subjects)
    # a two-slot session starting at 0 also covers slot 1
    assert not is_legal_placement("Monday", 0, 2, classroom, blocked, group, [], subjects)
    assert is_legal_placement("Tuesday", 1, 1, classroom, blocked, group, [], subjects)


def test_sessions_with_unknown_subject_are_ignored(classroom, lecturer, group, subjects):
    placed = [session("x", "ghost", room_id="r1", slot=0)]
    assert is_legal_placement("Monday", 0, 1, classroom, lecturer, group, placed, subjects)


def test_bounds_checked_before_overlap(classroom, lecturer, group, subjects):
    placed = [session("x", "s1", room_id="r1", slot=6)]
    assert find_violation("Monday", 6, 2, classroom, lecturer, group, placed, subjects) == "out of day bounds"
