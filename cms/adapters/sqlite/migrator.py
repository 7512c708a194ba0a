"""
Schema migrations shipped with the package.

Each `migrations/NNNN_name.sql` file holds an `-- Up` section and an optional
`-- Down` section; only the up section is ever run. A migration and its
bookkeeping row are written in one IMMEDIATE transaction, so the API process
and a CLI run starting together cannot both apply the same file, and a file
that fails halfway leaves no trace.
"""

import logging
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
LOCK_TIMEOUT_SECONDS = 30.0


class MigrationError(RuntimeError):
    def __init__(self, name: str, cause: Exception):
        super().__init__(f"Migration {name} failed: {cause}")
        self.name = name


@dataclass(frozen=True)
class Migration:
    name: str
    up: str

    @classmethod
    def from_file(cls, path: Path) -> "Migration":
        text = path.read_text(encoding="utf-8")
        up, _, _down = text.partition("-- Down")
        return cls(name=path.name, up=up.replace("-- Up", "", 1).strip())


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class SQLiteMigrator:
    def __init__(self, db_path: str | Path, migrations_dir: str | Path = MIGRATIONS_DIR):
        self.db_path = Path(db_path)
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=LOCK_TIMEOUT_SECONDS)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                filename TEXT PRIMARY KEY,
                applied_at TEXT NOT NULL
            );
        """)
        return conn

    def discover(self) -> list[Migration]:
        """Migration files in the order they apply."""
        return [Migration.from_file(p) for p in sorted(self.migrations_dir.glob("*.sql"))]

    @staticmethod
    def _applied_names(conn: sqlite3.Connection) -> list[str]:
        return [row[0] for row in conn.execute("SELECT filename FROM _migrations ORDER BY filename")]

    def applied(self) -> list[str]:
        if not self.db_path.exists():
            return []
        conn = self._connect()
        try:
            return self._applied_names(conn)
        finally:
            conn.close()

    def pending(self) -> list[str]:
        done = set(self.applied())
        return [m.name for m in self.discover() if m.name not in done]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames this call applied."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        applied_now: list[str] = []
        try:
            done = set(self._applied_names(conn))
            for migration in self.discover():
                if migration.name in done:
                    continue
                if self._apply(conn, migration):
                    applied_now.append(migration.name)
        finally:
            conn.close()
        return applied_now

    def _apply(self, conn: sqlite3.Connection, migration: Migration) -> bool:
        """
        Run one migration. Returns False if another connection applied it first.

        The bookkeeping row goes in before the migration body, so a concurrent
        run fails on the primary key instead of re-running the DDL.
        """
        applied_at = datetime.now(UTC).isoformat(timespec="seconds")
        script = (
            "BEGIN IMMEDIATE;\n"
            f"INSERT INTO _migrations (filename, applied_at) "
            f"VALUES ({_quote(migration.name)}, {_quote(applied_at)});\n"
            f"{migration.up}\n"
            "COMMIT;"
        )
        logger.info("Applying migration: %s", migration.name)
        try:
            conn.executescript(script)
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.rollback()
            if migration.name in self._applied_names(conn):
                logger.info("Migration %s already applied elsewhere", migration.name)
                return False
            raise MigrationError(migration.name, e) from e
        return True
