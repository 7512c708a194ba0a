"""
Rules file loading and mapping tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cms.rules.adapter import RulesAdapter
from cms.rules.loader import load_rules

ROOT_RULES = Path(__file__).resolve().parents[2] / "rules.yaml"

MINIMAL = """
uploads:
  blog:
    image: {max_bytes: 10, mime_types: [IMAGE/PNG], extensions: [png]}
  podcast: {}
"""


def test_project_rules_load() -> None:
    rules = load_rules(ROOT_RULES)
    assert rules.scheduler.interval_seconds == 60
    assert rules.activity.recent_limit == 10
    assert rules.uploads.blog["image"].max_bytes == 5 * 1024 * 1024
    assert set(rules.uploads.podcast) == {"image", "audio"}


def test_defaults_and_normalisation(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(MINIMAL)

    rules = load_rules(path)

    assert rules.scheduler.batch_limit == 100
    assert rules.content.max_page_size == 200
    image = rules.uploads.blog["image"]
    assert image.extensions == [".png"]
    assert image.mime_types == ["image/png"]


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("uploads: [unclosed")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


@pytest.mark.parametrize(
    "body",
    [
        MINIMAL + "scheduler: {interval_seconds: 0}\n",
        MINIMAL + "unknown_section: {}\n",
        "uploads: {blog: {}}\n",
    ],
)
def test_invalid_schema(tmp_path: Path, body: str) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(body)
    with pytest.raises(ValueError, match="Rules validation failed"):
        load_rules(path)


def test_adapter_maps_upload_rules() -> None:
    adapter = RulesAdapter(load_rules(ROOT_RULES))

    podcast = adapter.get_upload_rules("podcast")
    assert podcast["audio"].extensions == (".mp3",)
    assert "audio/mpeg" in podcast["audio"].mime_types
    assert podcast["audio"].max_files == 1
    assert set(adapter.get_upload_rules("blog")) == {"image"}
    assert adapter.get_max_page_size() == 200
