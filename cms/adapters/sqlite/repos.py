import builtins
import json
import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from cms.domain.entities import ActivityRecord, Comment, ContentItem, ContentKind, User
from cms.ports.repo import ContentQuery

_SORT_SQL = {
    "newest": "created_at DESC",
    "title": "title COLLATE NOCASE ASC",
    "views": "views DESC, created_at DESC",
}


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def to_db_time(dt: datetime) -> str:
    """Fixed-width UTC ISO string so that text comparison orders by time."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteUserRepo(_SQLiteRepo):
    def save(self, user: User) -> User:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO users (id, email, name, role, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    name=excluded.name,
                    role=excluded.role
                """,
                (str(user.id), user.email, user.name, user.role, to_db_time(user.created_at)),
            )
            conn.commit()
            return user
        finally:
            conn.close()

    def get_by_id(self, user_id: UUID) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
            if not row:
                return None
            return User(
                id=UUID(row["id"]),
                email=row["email"],
                name=row["name"],
                role=row["role"],
                created_at=parse_dt(row["created_at"]) or datetime.min,
            )
        finally:
            conn.close()


class SQLiteContentRepo(_SQLiteRepo):
    def save(self, item: ContentItem) -> ContentItem:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO content_items (
                    id, kind, title, excerpt, body, category, tags_json,
                    featured, duration, media_json, status, scheduled_at,
                    author_id, views, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    excerpt=excluded.excerpt,
                    body=excluded.body,
                    category=excluded.category,
                    tags_json=excluded.tags_json,
                    featured=excluded.featured,
                    duration=excluded.duration,
                    media_json=excluded.media_json,
                    status=excluded.status,
                    scheduled_at=excluded.scheduled_at,
                    author_id=excluded.author_id,
                    updated_at=excluded.updated_at
                """,
                (
                    str(item.id),
                    item.kind,
                    item.title,
                    item.excerpt,
                    item.body,
                    item.category,
                    json.dumps(item.tags),
                    int(item.featured),
                    item.duration,
                    json.dumps(item.media),
                    item.status,
                    to_db_time(item.scheduled_at) if item.scheduled_at else None,
                    str(item.author_id),
                    item.views,
                    to_db_time(item.created_at),
                    to_db_time(item.updated_at),
                ),
            )
            conn.commit()
            return item
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _row_to_item(
        self, row: dict[str, Any], comments: builtins.list[Comment] | None = None
    ) -> ContentItem:
        return ContentItem(
            id=UUID(row["id"]),
            kind=row["kind"],
            title=row["title"],
            excerpt=row["excerpt"],
            body=row["body"],
            category=row["category"],
            tags=json.loads(row["tags_json"]),
            featured=bool(row["featured"]),
            duration=row["duration"],
            media=json.loads(row["media_json"]),
            status=row["status"],
            scheduled_at=parse_dt(row["scheduled_at"]),
            author_id=UUID(row["author_id"]),
            views=row["views"],
            comments=comments or [],
            created_at=parse_dt(row["created_at"]) or datetime.min,
            updated_at=parse_dt(row["updated_at"]) or datetime.min,
        )

    @staticmethod
    def _row_to_comment(row: dict[str, Any]) -> Comment:
        return Comment(
            id=UUID(row["id"]),
            user_id=UUID(row["user_id"]),
            name=row["name"],
            text=row["text"],
            created_at=parse_dt(row["created_at"]) or datetime.min,
        )

    def _load_comments(
        self, conn: sqlite3.Connection, item_ids: builtins.list[str]
    ) -> dict[str, builtins.list[Comment]]:
        """Comments for the given items in one query, oldest first per item."""
        if not item_ids:
            return {}
        marks = ", ".join("?" for _ in item_ids)
        rows = conn.execute(
            f"SELECT * FROM content_comments WHERE item_id IN ({marks}) "
            "ORDER BY created_at ASC",
            item_ids,
        ).fetchall()
        by_item: dict[str, builtins.list[Comment]] = {}
        for r in rows:
            by_item.setdefault(r["item_id"], []).append(self._row_to_comment(r))
        return by_item

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM content_items WHERE id = ?", (str(item_id),)
            ).fetchone()
            if not row:
                return None
            comments = self._load_comments(conn, [row["id"]])
            return self._row_to_item(row, comments.get(row["id"]))
        finally:
            conn.close()

    def find_by_title(self, kind: ContentKind, title: str) -> ContentItem | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM content_items WHERE kind = ? AND LOWER(title) = LOWER(?)",
                (kind, title.strip()),
            ).fetchone()
            return self._row_to_item(row) if row else None
        finally:
            conn.close()

    def _where(self, query: ContentQuery) -> tuple[str, list[Any]]:
        clauses = ["1=1"]
        params: builtins.list[Any] = []
        if query.kind:
            clauses.append("kind = ?")
            params.append(query.kind)
        if query.status:
            clauses.append("status = ?")
            params.append(query.status)
        if query.search:
            term = f"%{_escape_like(query.search.lower())}%"
            clauses.append(
                "(LOWER(title) LIKE ? ESCAPE '\\' OR LOWER(excerpt) LIKE ? ESCAPE '\\'"
                " OR LOWER(body) LIKE ? ESCAPE '\\')"
            )
            params.extend([term, term, term])
        return " AND ".join(clauses), params

    def list(self, query: ContentQuery) -> builtins.list[ContentItem]:
        where, params = self._where(query)
        sql = (
            f"SELECT * FROM content_items WHERE {where} "
            f"ORDER BY {_SORT_SQL[query.sort]} LIMIT ? OFFSET ?"
        )
        conn = self._get_conn()
        try:
            rows = conn.execute(sql, [*params, query.limit, query.offset]).fetchall()
            comments = self._load_comments(
                conn, [r["id"] for r in rows if r["kind"] == "blog"]
            )
            return [self._row_to_item(r, comments.get(r["id"])) for r in rows]
        finally:
            conn.close()

    def count(self, query: ContentQuery) -> int:
        where, params = self._where(query)
        conn = self._get_conn()
        try:
            row = conn.execute(
                f"SELECT COUNT(*) AS n FROM content_items WHERE {where}", params
            ).fetchone()
            return int(row["n"])
        finally:
            conn.close()

    def delete(self, item_id: UUID) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM content_items WHERE id = ?", (str(item_id),))
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def increment_views(self, item_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "UPDATE content_items SET views = views + 1 WHERE id = ?", (str(item_id),)
            )
            conn.commit()
        finally:
            conn.close()

    def list_due(self, now_utc: datetime, limit: int = 100) -> builtins.list[ContentItem]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM content_items
                WHERE status = 'scheduled' AND scheduled_at IS NOT NULL AND scheduled_at <= ?
                ORDER BY scheduled_at ASC
                LIMIT ?
                """,
                (to_db_time(now_utc), limit),
            ).fetchall()
            return [self._row_to_item(r) for r in rows]
        finally:
            conn.close()

    def publish_if_due(self, item_id: UUID, now_utc: datetime) -> bool:
        now = to_db_time(now_utc)
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """
                UPDATE content_items
                SET status = 'published', scheduled_at = NULL, updated_at = ?
                WHERE id = ? AND status = 'scheduled' AND scheduled_at <= ?
                """,
                (now, str(item_id), now),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def add_comment(self, item_id: UUID, comment: Comment) -> bool:
        conn = self._get_conn()
        try:
            # Inserts nothing if the item was deleted in the meantime
            cur = conn.execute(
                """
                INSERT INTO content_comments (id, item_id, user_id, name, text, created_at)
                SELECT ?, id, ?, ?, ?, ? FROM content_items WHERE id = ?
                """,
                (
                    str(comment.id),
                    str(comment.user_id),
                    comment.name,
                    comment.text,
                    to_db_time(comment.created_at),
                    str(item_id),
                ),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def get_comment(self, item_id: UUID, comment_id: UUID) -> Comment | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM content_comments WHERE id = ? AND item_id = ?",
                (str(comment_id), str(item_id)),
            ).fetchone()
            return self._row_to_comment(row) if row else None
        finally:
            conn.close()

    def delete_comment(self, item_id: UUID, comment_id: UUID) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "DELETE FROM content_comments WHERE id = ? AND item_id = ?",
                (str(comment_id), str(item_id)),
            )
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()


class SQLiteActivityRepo(_SQLiteRepo):
    def append(self, record: ActivityRecord) -> ActivityRecord:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO activity_records (id, action, actor, category, detail, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(record.id),
                    record.action,
                    record.actor,
                    record.category,
                    record.detail,
                    to_db_time(record.created_at),
                ),
            )
            conn.commit()
            return record
        finally:
            conn.close()

    def recent(self, limit: int = 10) -> builtins.list[ActivityRecord]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM activity_records ORDER BY created_at DESC LIMIT ?", (limit,)
            ).fetchall()
            return [
                ActivityRecord(
                    id=UUID(r["id"]),
                    action=r["action"],
                    actor=r["actor"],
                    category=r["category"],
                    detail=r["detail"],
                    created_at=parse_dt(r["created_at"]) or datetime.min,
                )
                for r in rows
            ]
        finally:
            conn.close()
