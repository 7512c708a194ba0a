"""
Activity component tests.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cms.components.activity import LogActivityInput, RecentActivityInput, run_log, run_recent
from tests.fakes import FakeActivityRepo, FakeClock


def test_log_appends_record(activity: FakeActivityRepo, clock: FakeClock) -> None:
    out = run_log(
        LogActivityInput(action=" Blog post created ", actor="Ada", category="blog"),
        repo=activity,
        time=clock,
    )
    assert out.success
    assert out.record is not None
    assert out.record.action == "Blog post created"
    assert out.record.created_at == clock.now
    assert activity.records == [out.record]


def test_blank_action_rejected(activity: FakeActivityRepo, clock: FakeClock) -> None:
    out = run_log(LogActivityInput(action="  ", actor="Ada", category="blog"), repo=activity, time=clock)
    assert not out.success
    assert out.errors[0].code == "action_required"
    assert activity.records == []


def test_blank_actor_is_system(activity: FakeActivityRepo, clock: FakeClock) -> None:
    out = run_log(LogActivityInput(action="x", actor="", category="report"), repo=activity, time=clock)
    assert out.record is not None
    assert out.record.actor == "system"


def test_recent_newest_first_and_limited(activity: FakeActivityRepo, clock: FakeClock) -> None:
    for n in range(15):
        run_log(LogActivityInput(action=f"a{n}", actor="Ada", category="blog"), repo=activity, time=clock)
        clock.advance(seconds=1)

    out = run_recent(RecentActivityInput(), repo=activity)
    assert [r.action for r in out.records][:2] == ["a14", "a13"]
    assert len(out.records) == 10


def test_recent_limit_clamped(activity: FakeActivityRepo) -> None:
    assert run_recent(RecentActivityInput(limit=0), repo=activity).success
    assert run_recent(RecentActivityInput(limit=10_000), repo=activity).success


def test_records_are_immutable(activity: FakeActivityRepo, clock: FakeClock) -> None:
    out = run_log(LogActivityInput(action="x", actor="Ada", category="blog"), repo=activity, time=clock)
    assert out.record is not None
    with pytest.raises(ValidationError):
        out.record.action = "changed"  # type: ignore[misc]
    assert activity.records[0].action == "x"
