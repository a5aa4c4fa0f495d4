"""Unit tests for mechanics/kinds.py and renderer dispatch coverage"""

import pytest

from ivpub.mechanics.blocks import STATEMENT_RENDERERS
from ivpub.mechanics.inline import INLINE_RENDERERS, inline_kind
from ivpub.mechanics.kinds import InlineKind, StatementKind, statement_kind


def test_every_inline_kind_has_a_renderer():
    """Inline dispatch covers the whole InlineKind enum and nothing else."""
    assert set(INLINE_RENDERERS) == set(InlineKind)


def test_every_statement_kind_has_a_renderer():
    """Block dispatch covers the whole StatementKind enum and nothing else."""
    assert set(STATEMENT_RENDERERS) == set(StatementKind)


@pytest.mark.parametrize("line,expected", [
    ('move "[Face Danger](datasworn:x)" {', StatementKind.move),
    ('oracle-group name="Names" {', StatementKind.oracle_group),
    ('progress-roll name="Vow" score=8 vs1=2 vs2=9', StatementKind.progress_roll),
    ('progress name="[[Vow]]" rank=epic steps=1', StatementKind.progress),
    ('position from="bad spot" to="in control"', StatementKind.initiative),
    ('- "A note"', StatementKind.detail),
    ('dice-expr expr="1d6" result=4', StatementKind.dice_expr),
])
def test_statement_kind(line, expected):
    """statement_kind classifies by leading keyword."""
    assert statement_kind(line) is expected


@pytest.mark.parametrize("line", ["", "}", "unknown thing", "move", "-no-space"])
def test_statement_kind_unrecognised(line):
    """Unknown keywords and bare words are not statements."""
    assert statement_kind(line) is None


@pytest.mark.parametrize("code,expected", [
    ("iv-move:Face Danger|edge|4|3|0|3|5", InlineKind.move),
    ("iv-track-advance:Vow|path|0|4|dangerous|1", InlineKind.track_advance),
    ("iv-ooc:note", InlineKind.ooc),
    ("iv-unknown:thing", None),
    ("iv-move", None),
    ("print('hi')", None),
])
def test_inline_kind(code, expected):
    """inline_kind reads the tag between 'iv-' and the first colon."""
    assert inline_kind(code) is expected
