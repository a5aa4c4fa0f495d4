"""Unit tests for mechanics/inline.py"""

import pytest

from ivpub.core.models import FileInfo
from ivpub.mechanics.inline import initiative_class, parse_inline


def test_move_strong_hit():
    """A move whose score beats both challenge dice is a strong hit."""
    html = parse_inline("iv-move:Face Danger|edge|4|3|0|3|5")
    assert html.startswith('<span class="iv-inline-mechanics strong-hit">')
    assert '<span class="iv-inline-score">7</span>' in html
    assert '<span class="iv-inline-move-name iv-inline-link">Face Danger</span>' in html
    assert '<span class="iv-inline-stat">(edge)</span>' in html
    assert "iv-inline-match" not in html


def test_move_outcome_icon_comes_first():
    """The outcome icon precedes the move name."""
    html = parse_inline("iv-move:Face Danger|edge|4|3|0|3|5")
    assert html.index("iv-inline-outcome-icon") < html.index("iv-inline-move-name")


def test_move_match_and_cap():
    """Equal challenge dice mark a match; the score is capped at 10."""
    html = parse_inline("iv-move:Strike|iron|6|4|3|10|10")
    assert 'class="iv-inline-mechanics miss match"' in html
    assert '<span class="iv-inline-score">10</span>' in html
    assert '<span class="iv-inline-match">match</span>' in html


def test_move_missing_fields_default_to_zero():
    """Absent numeric fields read as zero."""
    html = parse_inline("iv-move:Gather Information")
    assert 'class="iv-inline-mechanics miss match"' in html
    assert '<span class="iv-inline-score">0</span>' in html


def test_meter_increase():
    """A rising meter gets the increase class and shows the change."""
    html = parse_inline("iv-meter:Momentum|2|5")
    assert 'class="iv-inline-mechanics meter-increase"' in html
    assert "2 → 5" in html
    assert '<span class="iv-inline-meter-name">Momentum:</span>' in html


def test_meter_decrease_and_unchanged():
    """Falling meters get the decrease class; unchanged meters get neither."""
    assert "meter-decrease" in parse_inline("iv-meter:Health|5|3")
    unchanged = parse_inline("iv-meter:Spirit|3|3")
    assert 'class="iv-inline-mechanics"' in unchanged


def test_initiative_from_out_of_combat_to_in_control():
    """The new position decides the class."""
    html = parse_inline("iv-initiative:out of combat|in control")
    assert 'class="iv-inline-mechanics initiative-in-control"' in html
    assert "out of combat → in control" in html


@pytest.mark.parametrize("position,expected", [
    ("In Control", "initiative-in-control"),
    ("in a bad spot", "initiative-bad-spot"),
    ("out of combat", "initiative-out-of-combat"),
    ("has initiative", "initiative"),
])
def test_initiative_class(position, expected):
    """Position keywords are checked in priority order."""
    assert initiative_class(position) == expected


def test_initiative_missing_to_repeats_from():
    """With no new position the old one is shown on both sides."""
    assert "in control → in control" in parse_inline("iv-initiative:in control")


def test_oracle():
    html = parse_inline("iv-oracle:Action|42|Bolster")
    assert 'class="iv-inline-mechanics oracle"' in html
    assert "<span>(42)</span>" in html
    assert '<span class="iv-inline-oracle-result">Bolster</span>' in html


def test_burn():
    html = parse_inline("iv-burn:7|2")
    assert 'class="iv-inline-mechanics burn"' in html
    assert "7 → 2" in html


def test_track_advance_boxes_and_link():
    """Track advance shows steps and whole boxes, linking to the track file."""
    html = parse_inline("iv-track-advance:Find the Relic|Progress/Find the Relic.md|4|12|dangerous|1")
    assert '<a href="/progress/find-the-relic" class="iv-inline-track-name iv-inline-link">Find the Relic</a>' in html
    assert " +1 (3/10)" in html


def test_track_advance_missing_steps_defaults_to_zero():
    assert " +0 (0/10)" in parse_inline("iv-track-advance:Vow|Vow.md")


def test_track_create_and_complete():
    assert 'class="iv-inline-mechanics track-create"' in parse_inline("iv-track-create:Vow|Vow.md")
    html = parse_inline("iv-track-complete:Vow|Vow.md")
    assert '<span class="iv-inline-track-status">completed</span>' in html


def test_progress_roll_with_track_link():
    """A progress roll links to its track when a path is given."""
    html = parse_inline("iv-progress:Vow|8|3|9|Progress/Vow.md")
    assert 'class="iv-inline-mechanics weak-hit"' in html
    assert '<a href="/progress/vow" class="iv-inline-progress-track iv-inline-link">(track)</a>' in html


def test_progress_roll_without_path_has_no_link():
    assert "<a " not in parse_inline("iv-progress:Vow|8|3|9")


def test_noroll():
    html = parse_inline("iv-noroll:Begin a Session")
    assert 'class="iv-inline-mechanics no-roll"' in html
    assert "Begin a Session" in html


def test_entity_create_resolves_bare_name_through_lookup():
    """Bare filenames resolve via the lookup table, case-insensitively."""
    lookup = {"kira": FileInfo(slug="/characters/kira", title="Kira", path="Characters/Kira.md")}
    html = parse_inline("iv-entity-create:NPC|Kira|Kira", lookup)
    assert '<span class="iv-inline-entity-type">NPC:</span>' in html
    assert '<a href="/characters/kira" class="iv-inline-entity-name iv-inline-link">Kira</a>' in html


def test_entity_create_unknown_name_is_slugified():
    html = parse_inline("iv-entity-create:NPC|Kira|Kira", {})
    assert 'href="/kira"' in html


def test_clock_codes():
    assert "(0/6)" in parse_inline("iv-clock-create:Doom|6|Clocks/Doom.md")
    assert "2 → 3/6" in parse_inline("iv-clock-advance:Doom|2|3|6|Clocks/Doom.md")
    resolved = parse_inline("iv-clock-resolve:Doom|Clocks/Doom.md")
    assert '<span class="iv-inline-clock-status">resolved</span>' in resolved
    assert 'href="/clocks/doom"' in resolved


def test_missing_path_links_to_hash():
    assert 'href="#"' in parse_inline("iv-clock-create:Doom|6")


def test_dice():
    html = parse_inline("iv-dice:2d6+1|9")
    assert '<span class="iv-inline-dice-expression">2d6+1</span>' in html
    assert '<span class="iv-inline-dice-result">9</span>' in html


def test_ooc_keeps_pipes():
    """Out-of-character text is not split on pipes."""
    html = parse_inline("iv-ooc:this | that")
    assert '<span class="iv-inline-ooc-text">this | that</span>' in html


def test_user_text_is_escaped():
    """Angle brackets, ampersands and quotes in user text are escaped."""
    html = parse_inline('iv-ooc:<b>"A&B"</b>')
    assert "&lt;b&gt;&quot;A&amp;B&quot;&lt;/b&gt;" in html
    assert "<b>" not in html


def test_escaped_slash_is_unescaped():
    assert "and/or" in parse_inline(r"iv-ooc:and\/or")


@pytest.mark.parametrize("code", ["iv-unknown:x", "plain code", "iv-move"])
def test_unrecognised_codes_return_none(code):
    """Codes that are not ours are left for the default renderer."""
    assert parse_inline(code) is None
