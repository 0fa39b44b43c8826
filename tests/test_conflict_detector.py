import pytest

from conflict_detector import conflicts_by_session, detect_conflicts
from data_models import ConflictKind, Group, Instructor, Room, RoomType
from factories import session, subject


@pytest.fixture
def catalog():
    rooms = [Room("r1", "Room 101", 30, RoomType.CLASSROOM),
             Room("r2", "Room 102", 30, RoomType.CLASSROOM),
             Room("r3", "Comp Lab 1", 10, RoomType.LAB)]
    instructors = [Instructor("i1", "Dr. Alan Turing", "CS", frozenset({("Monday", 0)})),
                   Instructor("i2", "Dr. Ada Lovelace", "Math")]
    groups = [Group("g1", "CS - Year 1", 25), Group("g2", "Math - Year 2", 20)]
    subjects = [subject("s1", instructor_id="i1", group_id="g1", name="Intro to CS"),
                subject("s2", instructor_id="i2", group_id="g2", name="Calculus I", duration=2),
                subject("s3", instructor_id="i2", group_id="g1", name="Advanced Math")]
    return subjects, rooms, instructors, groups


def detect(sessions, catalog, **kwargs):
    subjects, rooms, instructors, groups = catalog
    return detect_conflicts(sessions, subjects, rooms, instructors, groups, **kwargs)


def test_shared_room_gives_exactly_one_room_finding(catalog):
    sessions = [session("a", "s1", room_id="r1", slot=1), session("b", "s2", room_id="r1", slot=1)]
    conflicts = detect(sessions, catalog)
    assert len(conflicts) == 1
    assert conflicts[0].kind == ConflictKind.ROOM
    assert conflicts[0].description == "Room Room 101 double booked"
    assert conflicts[0].session_id == "a"


def test_one_pair_can_violate_every_dimension(catalog):
    sessions = [session("a", "s1", room_id="r1", slot=2), session("b", "s1", room_id="r1", slot=2)]
    conflicts = detect(sessions, catalog)
    assert [c.kind for c in conflicts] == [ConflictKind.ROOM, ConflictKind.INSTRUCTOR, ConflictKind.GROUP]
    assert {c.session_id for c in conflicts} == {"a"}
    assert conflicts[1].description == "Instructor Dr. Alan Turing double booked"
    assert conflicts[2].description == "Group CS - Year 1 double booked"


def test_shared_instructor_in_different_rooms(catalog):
    # s2 spans slots 1-2, s3 sits in slot 2 with the same instructor
    sessions = [session("a", "s2", room_id="r1", slot=1), session("b", "s3", room_id="r2", slot=2)]
    conflicts = detect(sessions, catalog)
    assert [c.kind for c in conflicts] == [ConflictKind.INSTRUCTOR]


def test_shared_group_in_different_rooms(catalog):
    sessions = [session("a", "s1", room_id="r1", slot=3), session("b", "s3", room_id="r2", slot=3)]
    assert [c.kind for c in detect(sessions, catalog)] == [ConflictKind.GROUP]


def test_back_to_back_and_other_days_are_fine(catalog):
    sessions = [
        session("a", "s2", room_id="r1", slot=1),
        session("b", "s3", room_id="r1", slot=3),
        session("c", "s2", room_id="r1", day="Tuesday", slot=2),
    ]
    assert detect(sessions, catalog) == []


def test_unknown_subject_is_skipped(catalog):
    sessions = [session("a", "ghost", room_id="r1", slot=1), session("b", "s1", room_id="r1", slot=1)]
    assert detect(sessions, catalog) == []


def test_placement_problems_are_only_reported_when_auditing(catalog):
    # Monday slot 0 is blocked for i1; s1 runs in a small lab
    sessions = [session("a", "s1", room_id="r3", slot=0)]
    assert detect(sessions, catalog) == []

    conflicts = detect(sessions, catalog, audit_placement=True)
    kinds = [c.kind for c in conflicts]
    assert kinds.count(ConflictKind.CAPACITY) == 2
    assert ConflictKind.INSTRUCTOR in kinds
    assert any("is a Lab" in c.description for c in conflicts)
    assert any("holds 10" in c.description for c in conflicts)


def test_audit_reports_bounds_and_unknown_rooms(catalog):
    sessions = [
        session("a", "s2", room_id="r1", day="Tuesday", slot=6),
        session("b", "s3", room_id="r9", day="Sunday", slot=0),
    ]
    conflicts = detect(sessions, catalog, audit_placement=True)
    grouped = conflicts_by_session(conflicts)
    assert [c.kind for c in grouped["a"]] == [ConflictKind.BOUNDS]
    assert [c.kind for c in grouped["b"]] == [ConflictKind.BOUNDS, ConflictKind.CAPACITY]
    assert "unknown room r9" in grouped["b"][1].description


def test_pairwise_findings_come_before_audit_findings(catalog):
    sessions = [session("a", "s1", room_id="r3", slot=0), session("b", "s2", room_id="r3", slot=0)]
    conflicts = detect(sessions, catalog, audit_placement=True)
    assert conflicts[0].kind == ConflictKind.ROOM
    assert all(c.kind != ConflictKind.ROOM for c in conflicts[1:])


def test_conflicts_by_session_keeps_order(catalog):
    sessions = [session("a", "s1", room_id="r1", slot=2), session("b", "s1", room_id="r1", slot=2),
                session("c", "s3", room_id="r2", day="Friday", slot=4), session("d", "s3", room_id="r2",
                                                                                day="Friday", slot=4)]
    grouped = conflicts_by_session(detect(sessions, catalog))
    assert list(grouped) == ["a", "c"]
    assert len(grouped["a"]) == 3
