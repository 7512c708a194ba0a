import sqlite3
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path
from uuid import uuid4

import pytest

from cms.adapters.sqlite.migrator import SQLiteMigrator
from cms.adapters.sqlite.repos import SQLiteActivityRepo, SQLiteContentRepo, SQLiteUserRepo
from cms.domain.entities import ActivityRecord, Comment, ContentItem, User
from cms.ports.repo import ContentQuery

NOW = datetime(2026, 6, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "cms.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def content_repo(db_path: str) -> SQLiteContentRepo:
    return SQLiteContentRepo(db_path)


def item(**overrides) -> ContentItem:
    values = {
        "kind": "blog",
        "title": "Hello",
        "body": "World",
        "author_id": uuid4(),
        "created_at": NOW,
        "updated_at": NOW,
    }
    values.update(overrides)
    return ContentItem(**values)


def test_user_roundtrip(db_path: str) -> None:
    repo = SQLiteUserRepo(db_path)
    user = repo.save(User(email="a@example.org", name="Ada", role="admin"))
    loaded = repo.get_by_id(user.id)
    assert loaded is not None
    assert (loaded.name, loaded.role) == ("Ada", "admin")
    assert repo.get_by_id(uuid4()) is None


class TestContentRepo:
    def test_save_and_get(self, content_repo: SQLiteContentRepo) -> None:
        original = item(
            kind="podcast",
            tags=["a", "b"],
            featured=True,
            duration="30:00",
            media={"image": "1-2-i.jpg", "audio": "1-3-a.mp3"},
            status="scheduled",
            scheduled_at=NOW + timedelta(days=1),
        )
        content_repo.save(original)

        loaded = content_repo.get_by_id(original.id)
        assert loaded == original

    def test_update_keeps_views_and_created_at(self, content_repo: SQLiteContentRepo) -> None:
        original = content_repo.save(item())
        content_repo.increment_views(original.id)
        content_repo.save(original.model_copy(update={"title": "Renamed", "views": 0}))

        loaded = content_repo.get_by_id(original.id)
        assert loaded is not None
        assert loaded.title == "Renamed"
        assert loaded.views == 1

    def test_find_by_title_case_insensitive(self, content_repo: SQLiteContentRepo) -> None:
        saved = content_repo.save(item(kind="podcast", title="Episode One"))
        found = content_repo.find_by_title("podcast", " episode ONE ")
        assert found is not None and found.id == saved.id
        assert content_repo.find_by_title("blog", "Episode One") is None

    def test_list_filters_and_sorts(self, content_repo: SQLiteContentRepo) -> None:
        content_repo.save(item(title="banana", status="published", created_at=NOW))
        content_repo.save(
            item(title="Apple", status="published", created_at=NOW + timedelta(minutes=1))
        )
        content_repo.save(item(title="cherry", created_at=NOW + timedelta(minutes=2)))
        content_repo.save(item(kind="podcast", title="pod", status="published"))

        published = ContentQuery(kind="blog", status="published")
        assert [i.title for i in content_repo.list(published)] == ["Apple", "banana"]
        assert content_repo.count(published) == 2

        by_title = ContentQuery(kind="blog", sort="title")
        assert [i.title for i in content_repo.list(by_title)] == ["Apple", "banana", "cherry"]

        paged = ContentQuery(kind="blog", limit=1, offset=1)
        assert [i.title for i in content_repo.list(paged)] == ["Apple"]

    def test_search_treats_wildcards_literally(self, content_repo: SQLiteContentRepo) -> None:
        content_repo.save(item(title="100% safe"))
        content_repo.save(item(title="100 ways", body="plain"))
        found = content_repo.list(ContentQuery(search="100%"))
        assert [i.title for i in found] == ["100% safe"]

    def test_search_covers_excerpt_and_body(self, content_repo: SQLiteContentRepo) -> None:
        content_repo.save(item(title="a", excerpt="Hidden Gem"))
        content_repo.save(item(title="b", body="another gem here"))
        assert content_repo.count(ContentQuery(search="GEM")) == 2

    def test_sort_by_views(self, content_repo: SQLiteContentRepo) -> None:
        low = content_repo.save(item(title="low"))
        high = content_repo.save(item(title="high"))
        for _ in range(3):
            content_repo.increment_views(high.id)
        content_repo.increment_views(low.id)
        assert [i.title for i in content_repo.list(ContentQuery(sort="views"))] == ["high", "low"]

    def test_delete(self, content_repo: SQLiteContentRepo) -> None:
        saved = content_repo.save(item())
        assert content_repo.delete(saved.id) is True
        assert content_repo.delete(saved.id) is False
        assert content_repo.get_by_id(saved.id) is None


class TestPublishIfDue:
    def test_due_listing(self, content_repo: SQLiteContentRepo) -> None:
        due = content_repo.save(item(status="scheduled", scheduled_at=NOW - timedelta(seconds=1)))
        content_repo.save(item(status="scheduled", scheduled_at=NOW + timedelta(seconds=1)))
        content_repo.save(item(status="draft"))

        assert [i.id for i in content_repo.list_due(NOW)] == [due.id]

    def test_conditional_write_applies_once(self, content_repo: SQLiteContentRepo) -> None:
        due = content_repo.save(item(status="scheduled", scheduled_at=NOW - timedelta(seconds=1)))

        assert content_repo.publish_if_due(due.id, NOW) is True
        assert content_repo.publish_if_due(due.id, NOW) is False

        loaded = content_repo.get_by_id(due.id)
        assert loaded is not None
        assert loaded.status == "published"
        assert loaded.scheduled_at is None
        assert loaded.updated_at == NOW

    def test_not_yet_due(self, content_repo: SQLiteContentRepo) -> None:
        later = content_repo.save(item(status="scheduled", scheduled_at=NOW + timedelta(hours=1)))
        assert content_repo.publish_if_due(later.id, NOW) is False

    def test_other_offsets_compare_correctly(self, content_repo: SQLiteContentRepo) -> None:
        # 13:30+02:00 is 11:30 UTC, already due at NOW
        offset_item = item(
            status="scheduled",
            scheduled_at=datetime(2026, 6, 15, 13, 30, tzinfo=timezone(timedelta(hours=2))),
        )
        content_repo.save(offset_item)
        assert content_repo.publish_if_due(offset_item.id, NOW) is True



class TestComments:
    def comment(self, text: str = "Thank you", seconds: int = 0) -> Comment:
        return Comment(
            user_id=uuid4(), name="Rita", text=text, created_at=NOW + timedelta(seconds=seconds)
        )

    def test_add_and_load_in_order(self, content_repo: SQLiteContentRepo) -> None:
        post = content_repo.save(item())
        second = self.comment("second", seconds=5)
        first = self.comment("first")

        assert content_repo.add_comment(post.id, second) is True
        assert content_repo.add_comment(post.id, first) is True

        loaded = content_repo.get_by_id(post.id)
        assert loaded is not None
        assert [c.text for c in loaded.comments] == ["first", "second"]
        assert loaded.comments[0] == first

    def test_listing_carries_comments(self, content_repo: SQLiteContentRepo) -> None:
        post = content_repo.save(item(title="With"))
        content_repo.save(item(title="Without"))
        content_repo.add_comment(post.id, self.comment())

        listed = {i.title: i for i in content_repo.list(ContentQuery(kind="blog", sort="title"))}
        assert len(listed["With"].comments) == 1
        assert listed["Without"].comments == []

    def test_missing_item(self, content_repo: SQLiteContentRepo) -> None:
        assert content_repo.add_comment(uuid4(), self.comment()) is False

    def test_save_keeps_comments(self, content_repo: SQLiteContentRepo) -> None:
        post = content_repo.save(item())
        content_repo.add_comment(post.id, self.comment())

        content_repo.save(post.model_copy(update={"title": "Renamed", "comments": []}))

        loaded = content_repo.get_by_id(post.id)
        assert loaded is not None
        assert loaded.title == "Renamed"
        assert len(loaded.comments) == 1

    def test_get_and_delete_scoped_to_item(self, content_repo: SQLiteContentRepo) -> None:
        post = content_repo.save(item())
        other = content_repo.save(item(title="Other"))
        comment = self.comment()
        content_repo.add_comment(post.id, comment)

        assert content_repo.get_comment(other.id, comment.id) is None
        assert content_repo.delete_comment(other.id, comment.id) is False
        assert content_repo.get_comment(post.id, comment.id) == comment
        assert content_repo.delete_comment(post.id, comment.id) is True
        assert content_repo.delete_comment(post.id, comment.id) is False

    def test_deleting_item_drops_comments(
        self, content_repo: SQLiteContentRepo, db_path: str
    ) -> None:
        post = content_repo.save(item())
        content_repo.add_comment(post.id, self.comment())

        content_repo.delete(post.id)

        conn = sqlite3.connect(db_path)
        assert conn.execute("SELECT COUNT(*) FROM content_comments").fetchone() == (0,)
        conn.close()

def test_activity_recent_newest_first(db_path: str) -> None:
    repo = SQLiteActivityRepo(db_path)
    for n in range(12):
        repo.append(
            ActivityRecord(
                action=f"a{n}", actor="Ada", category="blog", created_at=NOW + timedelta(seconds=n)
            )
        )
    recent = repo.recent(10)
    assert len(recent) == 10
    assert recent[0].action == "a11"
    assert recent[0].created_at == NOW + timedelta(seconds=11)
