from datetime import datetime, timedelta, timezone

import pytest

from src.event_attendance.event_attendance.core.enums import EventType
from src.event_attendance.event_attendance.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from src.event_attendance.event_attendance.events.model import Event
from src.event_attendance.event_attendance.sessions.model import Session
from tests.fakes import (
    ADMIN,
    BASS_NORTH,
    DL_NORTH,
    NORTH,
    PL_NORTH_TENOR,
    REGIONAL_EVENT,
    SESSION_2H,
    SESSION_4H,
    SESSION_SOUTH,
    SPRING_EVENT,
    TENOR_NORTH,
    TENOR_SOUTH,
)

SESSION_START = datetime(2026, 3, 2, 10, 0)
NOW = datetime(2026, 3, 2, 12, 30)


def _submit(world, actor, target, session_id=SESSION_2H, arrival=SESSION_START, now=NOW, *, as_user=None):
    ctx = world.ctx(actor, as_user=as_user)
    return world.container.attendance_service.submit(ctx, target, session_id, arrival, now=now)


def test_member_records_own_on_time_attendance(world):
    result = _submit(world, TENOR_NORTH, TENOR_NORTH)

    assert result.breakdown.percentage_score == 100
    assert result.attendance.created_by_id == TENOR_NORTH
    assert result.summary.cumulative == 100.0
    assert result.message == "Attendance recorded at 100%"
    assert world.summaries.get(TENOR_NORTH, SPRING_EVENT).cumulative == 100.0


def test_late_arrival_is_scored_and_summarized(world):
    result = _submit(world, TENOR_NORTH, TENOR_NORTH, arrival=SESSION_START + timedelta(minutes=7))

    assert result.breakdown.percentage_score == 90
    assert result.breakdown.minutes_late == 7
    assert result.summary.cumulative == 90.0


def test_iso_arrival_strings_are_accepted(world):
    result = _submit(world, TENOR_NORTH, TENOR_NORTH, arrival="2026-03-02T10:00:00Z")

    assert result.breakdown.is_on_time


def test_aware_arrival_is_converted_to_utc(world):
    arrival = datetime(2026, 3, 2, 12, 5, tzinfo=timezone(timedelta(hours=2)))

    result = _submit(world, TENOR_NORTH, TENOR_NORTH, arrival=arrival)

    assert result.attendance.arrival_time == datetime(2026, 3, 2, 10, 5)
    assert result.breakdown.percentage_score == 95


def test_future_arrival_is_rejected(world):
    with pytest.raises(ValidationError):
        _submit(world, TENOR_NORTH, TENOR_NORTH, arrival=NOW + timedelta(minutes=1))


def test_unknown_session_is_not_found(world):
    with pytest.raises(NotFoundError):
        _submit(world, TENOR_NORTH, TENOR_NORTH, session_id=999)


def test_second_submission_conflicts_with_pointer_to_existing(world):
    first = _submit(world, TENOR_NORTH, TENOR_NORTH)

    with pytest.raises(ConflictError) as exc:
        _submit(world, TENOR_NORTH, TENOR_NORTH)

    assert exc.value.code == "ATTENDANCE_EXISTS"
    assert exc.value.existing_id == first.attendance.attendance_id
    assert exc.value.can_edit is False
    assert world.attendance.count_for_session(SESSION_2H) == 1


def test_conflict_tells_leaders_they_can_edit(world):
    _submit(world, TENOR_NORTH, TENOR_NORTH)

    with pytest.raises(ConflictError) as exc:
        _submit(world, DL_NORTH, TENOR_NORTH)

    assert exc.value.can_edit is True


def test_member_cannot_record_for_someone_else(world):
    with pytest.raises(ForbiddenError):
        _submit(world, TENOR_NORTH, BASS_NORTH)


def test_part_leader_records_only_for_own_part(world):
    result = _submit(world, PL_NORTH_TENOR, TENOR_NORTH)
    assert result.attendance.created_by_id == PL_NORTH_TENOR

    with pytest.raises(ForbiddenError):
        _submit(world, PL_NORTH_TENOR, BASS_NORTH)


def test_user_outside_session_district_is_rejected(world):
    with pytest.raises(ForbiddenError):
        _submit(world, TENOR_SOUTH, TENOR_SOUTH)


def test_member_window_closes_after_three_days(world):
    late_now = SESSION_START + timedelta(days=3, minutes=1)

    with pytest.raises(ForbiddenError) as exc:
        _submit(world, TENOR_NORTH, TENOR_NORTH, now=late_now)

    assert exc.value.code == "WINDOW_CLOSED"


def test_member_window_not_open_before_session(world):
    early_now = SESSION_START - timedelta(minutes=10)

    with pytest.raises(ForbiddenError) as exc:
        _submit(world, TENOR_NORTH, TENOR_NORTH, arrival=early_now, now=early_now)

    assert exc.value.code == "WINDOW_CLOSED"


def test_leaders_are_bound_by_event_dates_instead(world):
    late_now = SESSION_START + timedelta(days=10)

    result = _submit(world, DL_NORTH, TENOR_NORTH, now=late_now)

    assert result.breakdown.percentage_score == 100


def test_leaders_cannot_submit_before_event_starts(world):
    world.events.add(
        Event(
            event_id=30,
            title="Summer Camp",
            slug="summer-camp",
            event_type=EventType.SINGLE_DISTRICT,
            start_date=datetime(2026, 7, 1),
            end_date=datetime(2026, 7, 10),
            district_id=NORTH,
            creator_id=DL_NORTH,
        )
    )
    world.sessions.add(
        Session(
            session_id=300,
            event_id=30,
            district_id=NORTH,
            start_time=datetime(2026, 7, 2, 10, 0),
            end_time=datetime(2026, 7, 2, 12, 0),
            duration_minutes=120,
            created_by_id=DL_NORTH,
        )
    )

    with pytest.raises(ForbiddenError) as exc:
        _submit(world, DL_NORTH, TENOR_NORTH, session_id=300)

    assert exc.value.code == "EVENT_NOT_STARTED"


def test_leaders_cannot_submit_after_event_ends(world):
    with pytest.raises(ForbiddenError) as exc:
        _submit(world, DL_NORTH, TENOR_NORTH, now=datetime(2026, 7, 1))

    assert exc.value.code == "EVENT_ENDED"


def test_impersonating_admin_keeps_window_bypass_and_is_audited(world):
    late_now = SESSION_START + timedelta(days=5)

    result = _submit(world, ADMIN, TENOR_NORTH, now=late_now, as_user=TENOR_NORTH)

    assert result.attendance.user_id == TENOR_NORTH
    assert result.attendance.created_by_id == ADMIN


def test_skipped_user_cannot_submit(world):
    service = world.container.attendance_service
    summary = service.skip_user(world.ctx(ADMIN), SPRING_EVENT, TENOR_NORTH)

    assert summary.cumulative == 100.0
    assert summary.skip

    with pytest.raises(ForbiddenError) as exc:
        _submit(world, TENOR_NORTH, TENOR_NORTH)
    assert exc.value.code == "USER_SKIPPED"


def test_duplicate_is_reported_before_skip(world):
    _submit(world, TENOR_NORTH, TENOR_NORTH)
    world.container.attendance_service.skip_user(world.ctx(ADMIN), SPRING_EVENT, TENOR_NORTH)

    with pytest.raises(ConflictError):
        _submit(world, TENOR_NORTH, TENOR_NORTH)


def test_skip_twice_conflicts_and_unskip_recomputes(world):
    service = world.container.attendance_service
    _submit(world, TENOR_NORTH, TENOR_NORTH, arrival=SESSION_START + timedelta(minutes=20))
    service.skip_user(world.ctx(ADMIN), SPRING_EVENT, TENOR_NORTH)

    with pytest.raises(ConflictError) as exc:
        service.skip_user(world.ctx(ADMIN), SPRING_EVENT, TENOR_NORTH)
    assert exc.value.code == "ALREADY_SKIPPED"

    summary = service.unskip_user(world.ctx(ADMIN), SPRING_EVENT, TENOR_NORTH)
    assert not summary.skip
    assert summary.cumulative == 80.0
    assert world.summaries.get(TENOR_NORTH, SPRING_EVENT).cumulative == 80.0


def test_only_admin_can_skip(world):
    with pytest.raises(ForbiddenError):
        world.container.attendance_service.skip_user(world.ctx(DL_NORTH), SPRING_EVENT, TENOR_NORTH)


def test_leader_edit_rescores_and_recomputes(world):
    service = world.container.attendance_service
    created = _submit(world, TENOR_NORTH, TENOR_NORTH, arrival=SESSION_START + timedelta(minutes=30))
    assert created.breakdown.percentage_score == 70

    updated = service.update_arrival(
        world.ctx(DL_NORTH), created.attendance.attendance_id, SESSION_START, now=NOW
    )

    assert updated.breakdown.percentage_score == 100
    assert updated.summary.cumulative == 100.0
    assert world.summaries.get(TENOR_NORTH, SPRING_EVENT).cumulative == 100.0


def test_member_cannot_edit_own_attendance(world):
    created = _submit(world, TENOR_NORTH, TENOR_NORTH)

    with pytest.raises(ForbiddenError) as exc:
        world.container.attendance_service.update_arrival(
            world.ctx(TENOR_NORTH), created.attendance.attendance_id, SESSION_START, now=NOW
        )
    assert exc.value.message == "Cannot edit your own attendance"


def test_part_leader_cannot_edit_other_part(world):
    created = _submit(world, BASS_NORTH, BASS_NORTH)

    with pytest.raises(ForbiddenError):
        world.container.attendance_service.update_arrival(
            world.ctx(PL_NORTH_TENOR), created.attendance.attendance_id, SESSION_START, now=NOW
        )


def test_cumulative_averages_across_sessions_and_follows_deletes(world):
    service = world.container.attendance_service
    _submit(world, TENOR_NORTH, TENOR_NORTH)
    second = _submit(
        world,
        DL_NORTH,
        TENOR_NORTH,
        session_id=SESSION_4H,
        arrival=datetime(2026, 3, 9, 10, 0),
        now=datetime(2026, 3, 9, 15, 0),
    )

    assert second.breakdown.percentage_score == 200
    assert second.summary.cumulative == 150.0
    assert second.summary.sessions_attended == 2

    summary = service.delete_attendance(world.ctx(DL_NORTH), second.attendance.attendance_id)

    assert summary.cumulative == 100.0
    assert world.summaries.get(TENOR_NORTH, SPRING_EVENT).cumulative == 100.0
    assert world.attendance.get_by_id(second.attendance.attendance_id) is None


def test_member_cannot_delete_attendance(world):
    created = _submit(world, TENOR_NORTH, TENOR_NORTH)

    with pytest.raises(ForbiddenError):
        world.container.attendance_service.delete_attendance(world.ctx(TENOR_NORTH), created.attendance.attendance_id)


def test_weekly_summary_for_constrained_event(world):
    result = _submit(
        world,
        TENOR_SOUTH,
        TENOR_SOUTH,
        session_id=SESSION_SOUTH,
        arrival=datetime(2026, 3, 3, 18, 0),
        now=datetime(2026, 3, 3, 20, 0),
    )

    summary = world.container.attendance_service.get_summary(world.ctx(TENOR_SOUTH), TENOR_SOUTH, REGIONAL_EVENT)

    assert result.summary.weekly_minutes == 120.0
    assert summary.meets_weekly_requirement is False
    assert summary.meets_pass_mark is True


def test_viewing_someone_elses_attendance_is_scoped(world):
    service = world.container.attendance_service
    created = _submit(world, BASS_NORTH, BASS_NORTH)

    with pytest.raises(ForbiddenError):
        service.get_attendance(world.ctx(TENOR_NORTH), created.attendance.attendance_id)

    assert service.get_attendance(world.ctx(DL_NORTH), created.attendance.attendance_id).user_id == BASS_NORTH
    assert len(service.list_event_attendance(world.ctx(BASS_NORTH), BASS_NORTH, SPRING_EVENT)) == 1
    assert len(service.list_user_summaries(world.ctx(BASS_NORTH), BASS_NORTH)) == 1


def test_recompute_summary_repairs_stale_row(world):
    _submit(world, TENOR_NORTH, TENOR_NORTH)
    world.summaries.upsert_cumulative(user_id=TENOR_NORTH, event_id=SPRING_EVENT, cumulative=3.0)

    result = world.container.attendance_service.recompute_summary(TENOR_NORTH, SPRING_EVENT)

    assert result.cumulative == 100.0
    assert world.summaries.get(TENOR_NORTH, SPRING_EVENT).cumulative == 100.0


def test_window_helpers(world):
    service = world.container.attendance_service

    assert service.is_window_open(SESSION_2H, NOW)
    assert not service.is_window_open(SESSION_2H, SESSION_START + timedelta(days=4))
    assert service.minutes_remaining(SESSION_2H, SESSION_START + timedelta(days=4)) == -1
