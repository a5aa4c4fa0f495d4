"""Unit tests for core/collection.py"""

import logging
from pathlib import Path

import pytest

from ivpub.core.collection import build_context, build_file_lookup, normalize_tags, to_record
from ivpub.core.models import ParsedDoc


def _doc(rel_path: str, frontmatter: dict = None, slug: str = None) -> ParsedDoc:
    stem = Path(rel_path).stem
    return ParsedDoc(
        path=Path(rel_path),
        rel_path=rel_path,
        slug=slug or "/" + rel_path.lower().removesuffix(".md").replace(" ", "-"),
        title=stem,
        markdown="",
        frontmatter=frontmatter or {},
    )


@pytest.mark.parametrize("raw,expected", [
    (None, []),
    (["quest", "#vow"], ["quest", "vow"]),
    ("quest, #vow other", ["quest", "vow", "other"]),
    (["a", "a"], ["a"]),
])
def test_normalize_tags(raw, expected):
    assert normalize_tags(raw) == expected


def test_to_record_copies_frontmatter():
    record = to_record(_doc("Progress/Vow.md", {"tags": "#quest", "status": "active"}))
    assert record.path == "Progress/Vow.md"
    assert record.tags == ["quest"]
    assert record.fields["status"] == "active"


def test_build_file_lookup_keys_by_lowercased_stem():
    lookup = build_file_lookup([_doc("Characters/Kira Bell.md")])
    assert lookup["kira bell"].slug == "/characters/kira-bell"
    assert lookup["kira bell"].path == "Characters/Kira Bell.md"


def test_build_file_lookup_prefers_shallowest_path(caplog):
    """Basename collisions resolve to the shallowest path regardless of order."""
    deep = _doc("Archive/Old/Vow.md")
    shallow = _doc("Vow.md")
    with caplog.at_level(logging.DEBUG, logger="ivpub.core.collection"):
        forward = build_file_lookup([deep, shallow])
    backward = build_file_lookup([shallow, deep])
    assert forward["vow"].path == backward["vow"].path == "Vow.md"
    assert "shared by 2 files" in caplog.text


def test_build_file_lookup_breaks_depth_ties_lexicographically():
    lookup = build_file_lookup([_doc("B/Vow.md"), _doc("A/Vow.md")])
    assert lookup["vow"].path == "A/Vow.md"


def test_build_context():
    context = build_context([_doc("Vow.md"), _doc("Journal.md")])
    assert set(context.file_lookup) == {"vow", "journal"}
    assert [d.title for d in context.documents] == ["Vow", "Journal"]


def test_to_record_stringifies_non_string_keys():
    """YAML keys parsed as ints or dates become strings in the query fields."""
    record = to_record(_doc("Day.md", {2024: "started", "title": "Day"}))
    assert record.fields["2024"] == "started"
    assert record.fields["title"] == "Day"
