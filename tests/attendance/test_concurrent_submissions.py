import threading
from datetime import datetime, timedelta

from src.event_attendance.event_attendance.core.exceptions import ConflictError
from src.event_attendance.event_attendance.sessions.model import Session
from tests.fakes import DL_NORTH, NORTH, SPRING_EVENT, TENOR_NORTH

NOW = datetime(2026, 3, 20, 12, 0)
FIRST_SESSION = 300


def _add_sessions(world, count):
    ids = []
    for i in range(count):
        start = datetime(2026, 3, 10, 10, 0) + timedelta(hours=3 * i)
        world.sessions.add(
            Session(
                session_id=FIRST_SESSION + i,
                event_id=SPRING_EVENT,
                district_id=NORTH,
                start_time=start,
                end_time=start + timedelta(hours=2),
                duration_minutes=120,
                created_by_id=DL_NORTH,
            )
        )
        ids.append(FIRST_SESSION + i)
    return ids


def _run_together(world, jobs):
    """Start every (session_id, minutes_late) submit at once; collect results and errors."""
    barrier = threading.Barrier(len(jobs))
    results, errors = [], []
    guard = threading.Lock()

    def submit(session_id, minutes_late):
        session = world.sessions.get_by_id(session_id)
        barrier.wait()
        try:
            result = world.container.attendance_service.submit(
                world.ctx(DL_NORTH),
                TENOR_NORTH,
                session_id,
                session.start_time + timedelta(minutes=minutes_late),
                now=NOW,
            )
        except ConflictError as exc:
            with guard:
                errors.append(exc)
        else:
            with guard:
                results.append(result)

    threads = [threading.Thread(target=submit, args=job) for job in jobs]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results, errors


def test_parallel_submits_for_one_event_keep_the_summary_consistent(world):
    session_ids = _add_sessions(world, 8)
    jobs = [(sid, 5 * i) for i, sid in enumerate(session_ids)]

    results, errors = _run_together(world, jobs)

    assert errors == []
    assert len(results) == len(session_ids)
    rows = world.attendance.list_for_user_and_event(TENOR_NORTH, SPRING_EVENT)
    assert len(rows) == len(session_ids)
    expected = round(sum(r.percentage_score for r in rows) / len(rows), 2)
    assert world.summaries.get(TENOR_NORTH, SPRING_EVENT).cumulative == expected


def test_parallel_duplicate_submits_store_one_row(world):
    (session_id,) = _add_sessions(world, 1)

    results, errors = _run_together(world, [(session_id, 0), (session_id, 10)])

    assert len(results) == 1
    assert len(errors) == 1
    assert errors[0].code == "ATTENDANCE_EXISTS"
    assert len(world.attendance.list_for_session(session_id)) == 1
