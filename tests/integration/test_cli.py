from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import uuid4

import pytest

from cms.adapters.sqlite.repos import SQLiteContentRepo
from cms.api.auth_utils import read_subject
from cms.app_shell.cli import main
from cms.domain.entities import ContentItem

RULES_PATH = Path(__file__).resolve().parents[2] / "rules.yaml"


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("CMS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CMS_RULES_PATH", str(RULES_PATH))
    return tmp_path


def test_migrate(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["migrate"]) == 0
    assert "Applied 2 migration(s)" in capsys.readouterr().out
    assert (data_dir / "cms.db").exists()


def test_migrate_status(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["migrate", "--status"]) == 1
    assert "pending  0002_blog_comments.sql" in capsys.readouterr().out

    main(["migrate"])
    capsys.readouterr()

    assert main(["migrate", "--status"]) == 0
    out = capsys.readouterr().out
    assert "applied  0001_initial.sql" in out
    assert "pending" not in out


def test_seed_user_prints_usable_token(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["seed-user", "--email", "ed@example.org", "--name", "Ed"]) == 0
    out = capsys.readouterr().out
    token = out.split("Token: ", 1)[1].strip()
    user_id = read_subject(token)
    assert user_id is not None
    assert str(user_id) in out


def test_sweep(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["migrate"])
    SQLiteContentRepo(str(data_dir / "cms.db")).save(
        ContentItem(
            kind="blog",
            title="Due",
            body="b",
            author_id=uuid4(),
            status="scheduled",
            scheduled_at=datetime.now(UTC) - timedelta(minutes=1),
        )
    )

    assert main(["sweep"]) == 0
    assert main(["sweep"]) == 0
    out = capsys.readouterr().out
    assert "Published 1 items." in out
    assert "Published 0 items." in out
