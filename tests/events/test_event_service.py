from datetime import datetime

import pytest

from src.event_attendance.event_attendance.core.enums import EventType
from src.event_attendance.event_attendance.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from tests.fakes import (
    ADMIN,
    DL_NORTH,
    DL_SOUTH,
    NORTH,
    NO_DISTRICT_MEMBER,
    REGIONAL_EVENT,
    SPRING_EVENT,
    TENOR_NORTH,
    TENOR_SOUTH,
)


def _create(world, actor, **overrides):
    values = dict(
        title="Autumn Gala",
        event_type="SINGLE_DISTRICT",
        start_date="2026-09-01T00:00:00",
        end_date="2026-11-30T00:00:00",
        district_id=NORTH,
    )
    values.update(overrides)
    return world.container.event_service.create_event(world.ctx(actor), **values)


def test_district_leader_creates_event_with_defaults(world):
    event = _create(world, DL_NORTH)

    assert event.slug == "autumn-gala"
    assert event.creator_id == DL_NORTH
    assert event.pass_mark == 75
    assert event.weekly_constraint is False
    assert event.event_type == EventType.SINGLE_DISTRICT


def test_slug_is_made_unique(world):
    _create(world, DL_NORTH)
    second = _create(world, DL_NORTH)

    assert second.slug == "autumn-gala-2"


def test_single_district_event_needs_a_district(world):
    with pytest.raises(ValidationError):
        _create(world, ADMIN, district_id=None)


def test_multi_district_events_drop_the_district(world):
    event = _create(world, ADMIN, event_type="MULTI_DISTRICT", district_id=NORTH)

    assert event.district_id is None
    assert event.is_multi_district


def test_district_leaders_cannot_create_multi_district_events(world):
    with pytest.raises(ForbiddenError):
        _create(world, DL_NORTH, event_type="MULTI_DISTRICT")


def test_members_cannot_create_events(world):
    with pytest.raises(ForbiddenError):
        _create(world, TENOR_NORTH)


def test_invalid_input(world):
    with pytest.raises(ValidationError):
        _create(world, ADMIN, event_type="WORLD_TOUR")
    with pytest.raises(ValidationError):
        _create(world, ADMIN, end_date="2026-08-01T00:00:00")
    with pytest.raises(ValidationError):
        _create(world, ADMIN, pass_mark=120)
    with pytest.raises(ValidationError):
        _create(world, ADMIN, title="   ")


def test_weekly_minimum_is_kept_when_constrained(world):
    event = _create(world, ADMIN, weekly_constraint=True, minimum_minutes_per_week=180)

    assert event.weekly_constraint
    assert event.minimum_minutes_per_week == 180


def test_weekly_constraint_must_be_a_boolean(world):
    with pytest.raises(ValidationError):
        _create(world, ADMIN, weekly_constraint="false")
    with pytest.raises(ValidationError):
        world.container.event_service.update_event(world.ctx(ADMIN), SPRING_EVENT, weekly_constraint="true")

    assert world.events.get_by_id(SPRING_EVENT).weekly_constraint is False


def test_events_are_found_by_id_or_slug(world):
    service = world.container.event_service

    assert service.get_event(world.ctx(TENOR_NORTH), "spring-concert").event_id == SPRING_EVENT
    assert service.get_event(world.ctx(TENOR_NORTH), str(SPRING_EVENT)).slug == "spring-concert"
    with pytest.raises(NotFoundError):
        service.get_event(world.ctx(TENOR_NORTH), "no-such-event")


def test_members_only_see_their_district_and_multi_district_events(world):
    service = world.container.event_service

    south = {e.event_id for e in service.list_events(world.ctx(TENOR_SOUTH))}
    north = {e.event_id for e in service.list_events(world.ctx(TENOR_NORTH))}

    assert south == {REGIONAL_EVENT}
    assert north == {SPRING_EVENT, REGIONAL_EVENT}
    with pytest.raises(ForbiddenError):
        service.get_event(world.ctx(TENOR_SOUTH), SPRING_EVENT)


def test_member_without_district_sees_only_multi_district_events(world):
    events = world.container.event_service.list_events(world.ctx(NO_DISTRICT_MEMBER))

    assert [e.event_id for e in events] == [REGIONAL_EVENT]


def test_creator_updates_title_and_slug_follows(world):
    event = world.container.event_service.update_event(world.ctx(DL_NORTH), SPRING_EVENT, title="Spring Recital", pass_mark=80)

    assert event.slug == "spring-recital"
    assert event.pass_mark == 80


def test_changing_scope_is_admin_only(world):
    service = world.container.event_service

    with pytest.raises(ForbiddenError):
        service.update_event(world.ctx(DL_NORTH), SPRING_EVENT, event_type="MULTI_DISTRICT")

    event = service.update_event(world.ctx(ADMIN), SPRING_EVENT, event_type="MULTI_DISTRICT")
    assert event.event_type == EventType.MULTI_DISTRICT
    assert event.district_id is None


def test_other_district_leader_cannot_edit(world):
    with pytest.raises(ForbiddenError):
        world.container.event_service.update_event(world.ctx(DL_SOUTH), SPRING_EVENT, title="Mine now")


def test_events_with_attendance_cannot_be_deleted(world):
    world.container.attendance_service.submit(
        world.ctx(TENOR_NORTH),
        TENOR_NORTH,
        100,
        datetime(2026, 3, 2, 10, 0),
        now=datetime(2026, 3, 2, 12, 0),
    )

    with pytest.raises(ValidationError):
        world.container.event_service.delete_event(world.ctx(DL_NORTH), SPRING_EVENT)


def test_delete_event(world):
    world.container.event_service.delete_event(world.ctx(ADMIN), REGIONAL_EVENT)

    assert world.events.get_by_id(REGIONAL_EVENT) is None
