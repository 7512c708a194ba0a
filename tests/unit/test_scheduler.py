"""
Scheduled publish sweep tests.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from cms.components.scheduler import SweepInput, run_sweep
from cms.domain.entities import ContentItem, ContentKind
from tests.fakes import NOW, FakeActivityRepo, FakeClock, FakeContentRepo


def scheduled(repo: FakeContentRepo, at: datetime, kind: ContentKind = "blog", title: str = "Soon") -> ContentItem:
    item = ContentItem(
        kind=kind,
        title=title,
        body="b",
        author_id=uuid4(),
        status="scheduled",
        scheduled_at=at,
        created_at=NOW - timedelta(days=1),
    )
    return repo.save(item)


def sweep(repo: FakeContentRepo, activity: FakeActivityRepo, clock: FakeClock, limit: int = 100):
    return run_sweep(SweepInput(limit=limit), repo=repo, activity=activity, time=clock)


class TestSweep:
    def test_publishes_due_item(
        self, repo: FakeContentRepo, activity: FakeActivityRepo, clock: FakeClock
    ) -> None:
        item = scheduled(repo, NOW - timedelta(seconds=1))

        out = sweep(repo, activity, clock)

        assert out.published == 1
        assert out.success
        stored = repo.get_by_id(item.id)
        assert stored is not None
        assert stored.status == "published"
        assert stored.scheduled_at is None
        assert len(activity.records) == 1
        record = activity.records[0]
        assert record.category == "blog"
        assert record.actor == "system"
        assert record.action == "Blog post published"
        assert record.detail == "Published blog: Soon"

    def test_podcast_category(
        self, repo: FakeContentRepo, activity: FakeActivityRepo, clock: FakeClock
    ) -> None:
        scheduled(repo, NOW, kind="podcast")
        sweep(repo, activity, clock)
        assert activity.records[0].category == "podcast"
        assert activity.records[0].action == "Podcast episode published"

    def test_second_sweep_is_noop(
        self, repo: FakeContentRepo, activity: FakeActivityRepo, clock: FakeClock
    ) -> None:
        scheduled(repo, NOW - timedelta(seconds=1))

        first = sweep(repo, activity, clock)
        second = sweep(repo, activity, clock)

        assert (first.published, second.published) == (1, 0)
        assert second.success
        assert len(activity.records) == 1

    def test_future_item_untouched(
        self, repo: FakeContentRepo, activity: FakeActivityRepo, clock: FakeClock
    ) -> None:
        item = scheduled(repo, NOW + timedelta(seconds=1))

        assert sweep(repo, activity, clock).published == 0
        assert repo.get_by_id(item.id).status == "scheduled"

        clock.advance(seconds=1)
        assert sweep(repo, activity, clock).published == 1

    def test_long_overdue_item(
        self, repo: FakeContentRepo, activity: FakeActivityRepo
    ) -> None:
        scheduled(repo, datetime(2026, 1, 1, tzinfo=UTC))
        clock = FakeClock(now=datetime(2026, 1, 2, tzinfo=UTC))
        assert sweep(repo, activity, clock).published == 1

    def test_item_changed_between_query_and_write(
        self, repo: FakeContentRepo, activity: FakeActivityRepo, clock: FakeClock
    ) -> None:
        item = scheduled(repo, NOW - timedelta(minutes=1))

        class RacingRepo(FakeContentRepo):
            def list_due(self, now_utc: datetime, limit: int = 100) -> list[ContentItem]:
                due = super().list_due(now_utc, limit)
                # An editor moves it back to draft right after the query
                self.items[item.id] = item.model_copy(update={"status": "draft", "scheduled_at": None})
                return due

        racing = RacingRepo(items=dict(repo.items))
        out = sweep(racing, activity, clock)

        assert out.published == 0
        assert racing.items[item.id].status == "draft"
        assert activity.records == []

    def test_failure_does_not_stop_batch(
        self, repo: FakeContentRepo, activity: FakeActivityRepo, clock: FakeClock
    ) -> None:
        bad = scheduled(repo, NOW - timedelta(minutes=2), title="Bad")
        good = scheduled(repo, NOW - timedelta(minutes=1), title="Good")

        class FlakyRepo(FakeContentRepo):
            def publish_if_due(self, item_id: UUID, now_utc: datetime) -> bool:
                if item_id == bad.id:
                    raise RuntimeError("disk I/O error")
                return super().publish_if_due(item_id, now_utc)

        flaky = FlakyRepo(items=dict(repo.items))
        out = sweep(flaky, activity, clock)

        assert out.published == 1
        assert not out.success
        assert [f.item_id for f in out.failures] == [bad.id]
        assert flaky.items[good.id].status == "published"
        assert flaky.items[bad.id].status == "scheduled"

    def test_activity_failure_is_reported(
        self, repo: FakeContentRepo, clock: FakeClock
    ) -> None:
        item = scheduled(repo, NOW)
        out = sweep(repo, FakeActivityRepo(fail=True), clock)
        assert out.published == 1
        assert out.failures[0].item_id == item.id
        assert repo.get_by_id(item.id).status == "published"

    def test_batch_limit(
        self, repo: FakeContentRepo, activity: FakeActivityRepo, clock: FakeClock
    ) -> None:
        for n in range(5):
            scheduled(repo, NOW - timedelta(minutes=n), title=f"t{n}")
        assert sweep(repo, activity, clock, limit=2).published == 2
        assert sweep(repo, activity, clock, limit=10).published == 3
