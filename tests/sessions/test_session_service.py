from datetime import datetime, timedelta

import pytest

from src.event_attendance.event_attendance.core.exceptions import ForbiddenError, ValidationError
from src.event_attendance.event_attendance.sessions.service import derive_duration
from tests.fakes import (
    ADMIN,
    DL_NORTH,
    DL_SOUTH,
    NORTH,
    NO_DISTRICT_MEMBER,
    PL_NORTH_TENOR,
    REGIONAL_EVENT,
    SESSION_2H,
    SESSION_4H,
    SOUTH,
    SPRING_EVENT,
    TENOR_NORTH,
)

START = datetime(2026, 4, 6, 19, 0)


def test_derive_duration_rounds_up_partial_minutes():
    assert derive_duration(START, START + timedelta(minutes=90, seconds=20)) == 91


def test_derive_duration_rejects_mismatch_and_empty_windows():
    with pytest.raises(ValidationError):
        derive_duration(START, START + timedelta(hours=2), supplied=100)
    with pytest.raises(ValidationError):
        derive_duration(START, START)


def test_derive_duration_rejects_non_numeric_input():
    with pytest.raises(ValidationError):
        derive_duration(START, START + timedelta(hours=2), supplied="two hours")
    assert derive_duration(START, START + timedelta(hours=2), supplied="120") == 120


def test_district_leader_creates_session_in_own_district(world):
    created = world.container.session_service.create_session(
        world.ctx(DL_NORTH),
        event_id=SPRING_EVENT,
        district_id=NORTH,
        start_time=START,
        end_time=START + timedelta(hours=2),
        duration_minutes=120,
    )

    assert created.duration_minutes == 120
    assert created.created_by_id == DL_NORTH
    assert created.event_id == SPRING_EVENT


def test_session_times_accept_iso_strings(world):
    created = world.container.session_service.create_session(
        world.ctx(DL_NORTH),
        event_id=SPRING_EVENT,
        district_id=NORTH,
        start_time="2026-04-06T19:00:00",
        end_time="2026-04-06T20:30:00",
    )

    assert created.duration_minutes == 90


def test_end_before_start_is_invalid(world):
    with pytest.raises(ValidationError):
        world.container.session_service.create_session(
            world.ctx(DL_NORTH),
            event_id=SPRING_EVENT,
            district_id=NORTH,
            start_time=START,
            end_time=START - timedelta(hours=1),
        )


def test_part_leaders_cannot_create_sessions(world):
    with pytest.raises(ForbiddenError):
        world.container.session_service.create_session(
            world.ctx(PL_NORTH_TENOR),
            event_id=SPRING_EVENT,
            district_id=NORTH,
            start_time=START,
            end_time=START + timedelta(hours=2),
        )


def test_district_leader_cannot_create_in_other_district(world):
    with pytest.raises(ForbiddenError):
        world.container.session_service.create_session(
            world.ctx(DL_NORTH),
            event_id=REGIONAL_EVENT,
            district_id=SOUTH,
            start_time=START,
            end_time=START + timedelta(hours=2),
        )


def test_single_district_event_keeps_sessions_in_its_district(world):
    with pytest.raises(ForbiddenError):
        world.container.session_service.create_session(
            world.ctx(ADMIN),
            event_id=SPRING_EVENT,
            district_id=SOUTH,
            start_time=START,
            end_time=START + timedelta(hours=2),
        )


def test_weekly_constraint_caps_total_session_minutes(world):
    service = world.container.session_service

    with pytest.raises(ValidationError):
        service.create_session(
            world.ctx(ADMIN),
            event_id=REGIONAL_EVENT,
            district_id=SOUTH,
            start_time=START,
            end_time=START + timedelta(hours=3),
        )

    created = service.create_session(
        world.ctx(DL_SOUTH),
        event_id=REGIONAL_EVENT,
        district_id=SOUTH,
        start_time=START,
        end_time=START + timedelta(hours=2),
    )
    assert created.district_id == SOUTH


def test_moving_a_session_rescores_its_attendance(world):
    attendance = world.container.attendance_service
    session_start = datetime(2026, 3, 2, 10, 0)
    attendance.submit(
        world.ctx(TENOR_NORTH),
        TENOR_NORTH,
        SESSION_2H,
        session_start + timedelta(minutes=7),
        now=datetime(2026, 3, 2, 12, 0),
    )
    assert world.summaries.get(TENOR_NORTH, SPRING_EVENT).cumulative == 90.0

    updated = world.container.session_service.update_session(
        world.ctx(DL_NORTH),
        SESSION_2H,
        start_time=session_start + timedelta(minutes=5),
        end_time=session_start + timedelta(minutes=125),
    )

    assert updated.start_time == session_start + timedelta(minutes=5)
    record = world.attendance.get_for_user_and_session(TENOR_NORTH, SESSION_2H)
    assert record.percentage_score == 95
    assert world.summaries.get(TENOR_NORTH, SPRING_EVENT).cumulative == 95.0


def test_only_the_creating_district_leader_may_edit(world):
    service = world.container.session_service

    with pytest.raises(ForbiddenError):
        service.update_session(world.ctx(DL_NORTH), SESSION_4H, end_time=datetime(2026, 3, 9, 13, 0))
    with pytest.raises(ForbiddenError):
        service.update_session(world.ctx(DL_SOUTH), SESSION_2H, end_time=datetime(2026, 3, 2, 11, 0))

    updated = service.update_session(world.ctx(ADMIN), SESSION_4H, end_time=datetime(2026, 3, 9, 13, 0))
    assert updated.duration_minutes == 180


def test_sessions_with_attendance_cannot_be_deleted(world):
    world.container.attendance_service.submit(
        world.ctx(TENOR_NORTH),
        TENOR_NORTH,
        SESSION_2H,
        datetime(2026, 3, 2, 10, 0),
        now=datetime(2026, 3, 2, 12, 0),
    )

    with pytest.raises(ValidationError):
        world.container.session_service.delete_session(world.ctx(DL_NORTH), SESSION_2H)


def test_delete_empty_session(world):
    world.container.session_service.delete_session(world.ctx(ADMIN), SESSION_4H)

    assert world.sessions.get_by_id(SESSION_4H) is None


def test_listing_is_limited_to_own_district(world):
    service = world.container.session_service

    mine = service.list_sessions(world.ctx(TENOR_NORTH), district_id=SOUTH)
    everything = service.list_sessions(world.ctx(ADMIN))

    assert {s.district_id for s in mine} == {NORTH}
    assert len(everything) == 3


def test_member_without_district_lists_no_sessions(world):
    assert world.container.session_service.list_sessions(world.ctx(NO_DISTRICT_MEMBER)) == []


def test_viewing_other_district_session_is_forbidden(world):
    with pytest.raises(ForbiddenError):
        world.container.session_service.get_session(world.ctx(DL_SOUTH), SESSION_2H)
