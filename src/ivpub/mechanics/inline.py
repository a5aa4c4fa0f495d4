"""Inline mechanics: render `iv-<kind>:field|field|...` codes as styled spans

The outcome icon comes first in roll markup; downstream CSS relies on the
class names and element order below.
"""

import re
from collections.abc import Callable, Mapping

from ivpub.core.models import FileInfo
from ivpub.core.utils.slug import escape_html, resolve_path
from ivpub.mechanics import icons
from ivpub.mechanics.kinds import INLINE_PREFIX, InlineKind
from ivpub.mechanics.outcome import action_score, classify_outcome, is_match, outcome_classes


Lookup = Mapping[str, FileInfo] | None

_INT_RE = re.compile(r'\s*([+-]?\d+)')


class Fields:
    """Positional pipe-delimited fields with string and integer defaults."""

    def __init__(self, content: str):
        self.parts = content.split('|')

    def text(self, index: int, default: str = '') -> str:
        if index < len(self.parts) and self.parts[index]:
            return self.parts[index]
        return default

    def num(self, index: int, default: int = 0) -> int:
        m = _INT_RE.match(self.text(index))
        return int(m.group(1)) if m else default


def _span(classes: str, *children: str) -> str:
    return f'<span class="{classes}">{"".join(children)}</span>'


def _link(href: str, classes: str, text: str) -> str:
    return f'<a href="{escape_html(href)}" class="{classes}">{escape_html(text)}</a>'


def _roll_tail(score: int, vs1: int, vs2: int, match: bool) -> str:
    """Separator, score and challenge dice shared by move and progress rolls."""
    return (
        '<span class="iv-inline-separator">—</span>'
        f'<span class="iv-inline-score">{score}</span>'
        '<span> vs </span>'
        f'<span class="iv-inline-challenge-die vs1">{vs1}</span>'
        '<span>|</span>'
        f'<span class="iv-inline-challenge-die vs2">{vs2}</span>'
        + ('<span class="iv-inline-match">match</span>' if match else '')
    )


def render_move(content: str, file_lookup: Lookup = None) -> str:
    # name|stat|action|statValue|adds|vs1|vs2|moveRef|...
    f = Fields(content)
    score = action_score(f.num(2), f.num(3), f.num(4))
    vs1, vs2 = f.num(5), f.num(6)
    match = is_match(vs1, vs2)
    return _span(
        outcome_classes('iv-inline-mechanics', classify_outcome(score, vs1, vs2), match),
        '<span class="iv-inline-outcome-icon"></span>',
        f'<span class="iv-inline-move-name iv-inline-link">{escape_html(f.text(0))}</span>',
        f'<span class="iv-inline-stat">({escape_html(f.text(1))})</span>',
        _roll_tail(score, vs1, vs2, match),
    )


def render_oracle(content: str, file_lookup: Lookup = None) -> str:
    # name|roll|result|oracleRef
    f = Fields(content)
    return _span(
        'iv-inline-mechanics oracle',
        f'<span class="iv-inline-oracle-icon">{icons.SPARKLES}</span>',
        f'<span class="iv-inline-oracle-name iv-inline-link">{escape_html(f.text(0))}</span>',
        f'<span>({escape_html(f.text(1))})</span>',
        f'<span class="iv-inline-oracle-result">{escape_html(f.text(2))}</span>',
    )


def render_meter(content: str, file_lookup: Lookup = None) -> str:
    # name|from|to
    f = Fields(content)
    start, end = f.num(1), f.num(2)
    delta = end - start
    meter_class = 'meter-increase' if delta > 0 else 'meter-decrease' if delta < 0 else ''
    icon = icons.TRENDING_UP if delta >= 0 else icons.TRENDING_DOWN
    return _span(
        f'iv-inline-mechanics {meter_class}'.rstrip(),
        f'<span class="iv-inline-meter-icon">{icon}</span>',
        f'<span class="iv-inline-meter-name">{escape_html(f.text(0))}:</span>',
        f'<span class="iv-inline-meter-change">{start} → {end}</span>',
    )


def render_burn(content: str, file_lookup: Lookup = None) -> str:
    # from|to
    f = Fields(content)
    return _span(
        'iv-inline-mechanics burn',
        f'<span class="iv-inline-burn-icon">{icons.FLAME}</span>',
        '<span class="iv-inline-burn-label">Burn:</span>',
        f'<span class="iv-inline-burn-change">{f.num(0)} → {f.num(1)}</span>',
    )


def initiative_class(position: str) -> str:
    """Classify the new position: control > bad > out > plain 'initiative'."""
    lowered = position.lower()
    if 'control' in lowered:
        return 'initiative-in-control'
    if 'bad' in lowered:
        return 'initiative-bad-spot'
    if 'out' in lowered:
        return 'initiative-out-of-combat'
    return 'initiative'


def render_initiative(content: str, file_lookup: Lookup = None) -> str:
    # from|to
    f = Fields(content)
    start = f.text(0)
    end = f.text(1, default=start)
    return _span(
        f'iv-inline-mechanics {initiative_class(end)}',
        f'<span class="iv-inline-initiative-icon">{icons.FOOTPRINTS}</span>',
        '<span class="iv-inline-initiative-label">Position:</span>',
        f'<span class="iv-inline-initiative-change">{escape_html(start)} → {escape_html(end)}</span>',
    )


def render_track_create(content: str, file_lookup: Lookup = None) -> str:
    # name|path
    f = Fields(content)
    return _span(
        'iv-inline-mechanics track-create',
        f'<span class="iv-inline-track-icon">{icons.SQUARE_STACK}</span>',
        _link(resolve_path(f.text(1), file_lookup), 'iv-inline-track-name iv-inline-link', f.text(0)),
    )


def render_track_advance(content: str, file_lookup: Lookup = None) -> str:
    # name|path|from|to|rank|steps
    f = Fields(content)
    boxes = f.num(3) // 4
    return _span(
        'iv-inline-mechanics track-advance',
        f'<span class="iv-inline-track-icon">{icons.COPY_CHECK}</span>',
        _link(resolve_path(f.text(1), file_lookup), 'iv-inline-track-name iv-inline-link', f.text(0)),
        f'<span class="iv-inline-track-progress"> +{f.num(5)} ({boxes}/10)</span>',
    )


def render_track_complete(content: str, file_lookup: Lookup = None) -> str:
    # name|path
    f = Fields(content)
    return _span(
        'iv-inline-mechanics track-complete',
        f'<span class="iv-inline-track-icon">{icons.SQUARE_CHECK_BIG}</span>',
        _link(resolve_path(f.text(1), file_lookup), 'iv-inline-track-name iv-inline-link', f.text(0)),
        '<span class="iv-inline-track-status">completed</span>',
    )


def render_progress(content: str, file_lookup: Lookup = None) -> str:
    # name|progress|vs1|vs2|path
    f = Fields(content)
    score, vs1, vs2 = f.num(1), f.num(2), f.num(3)
    match = is_match(vs1, vs2)
    path = f.text(4)
    track = (
        _link(resolve_path(path, file_lookup), 'iv-inline-progress-track iv-inline-link', '(track)')
        if path else ''
    )
    return _span(
        outcome_classes('iv-inline-mechanics', classify_outcome(score, vs1, vs2), match),
        '<span class="iv-inline-outcome-icon"></span>',
        f'<span class="iv-inline-progress-name iv-inline-link">{escape_html(f.text(0))}</span>',
        track,
        _roll_tail(score, vs1, vs2, match),
    )


def render_noroll(content: str, file_lookup: Lookup = None) -> str:
    # name|moveRef
    f = Fields(content)
    return _span(
        'iv-inline-mechanics no-roll',
        f'<span class="iv-inline-noroll-icon">{icons.FILE_PEN_LINE}</span>',
        f'<span class="iv-inline-move-name iv-inline-link">{escape_html(f.text(0))}</span>',
    )


def render_entity_create(content: str, file_lookup: Lookup = None) -> str:
    # type|name|path
    f = Fields(content)
    return _span(
        'iv-inline-mechanics entity-create',
        f'<span class="iv-inline-entity-icon">{icons.FILE_PLUS}</span>',
        f'<span class="iv-inline-entity-type">{escape_html(f.text(0))}:</span>',
        _link(resolve_path(f.text(2), file_lookup), 'iv-inline-entity-name iv-inline-link', f.text(1)),
    )


def render_clock_create(content: str, file_lookup: Lookup = None) -> str:
    # name|segments|path
    f = Fields(content)
    return _span(
        'iv-inline-mechanics clock-create',
        f'<span class="iv-inline-clock-icon">{icons.CLOCK}</span>',
        _link(resolve_path(f.text(2), file_lookup), 'iv-inline-clock-name iv-inline-link', f.text(0)),
        f'<span class="iv-inline-clock-progress">(0/{f.num(1)})</span>',
    )


def render_clock_advance(content: str, file_lookup: Lookup = None) -> str:
    # name|from|to|segments|path
    f = Fields(content)
    return _span(
        'iv-inline-mechanics clock-advance',
        f'<span class="iv-inline-clock-icon">{icons.CLOCK_ARROW_UP}</span>',
        _link(resolve_path(f.text(4), file_lookup), 'iv-inline-clock-name iv-inline-link', f.text(0)),
        f'<span class="iv-inline-clock-progress">{f.num(1)} → {f.num(2)}/{f.num(3)}</span>',
    )


def render_clock_resolve(content: str, file_lookup: Lookup = None) -> str:
    # name|path
    f = Fields(content)
    return _span(
        'iv-inline-mechanics clock-resolve',
        f'<span class="iv-inline-clock-icon">{icons.CIRCLE_CHECK_BIG}</span>',
        _link(resolve_path(f.text(1), file_lookup), 'iv-inline-clock-name iv-inline-link', f.text(0)),
        '<span class="iv-inline-clock-status">resolved</span>',
    )


def render_dice(content: str, file_lookup: Lookup = None) -> str:
    # expression|result
    f = Fields(content)
    return _span(
        'iv-inline-mechanics dice-roll',
        f'<span class="iv-inline-dice-icon">{icons.DICES}</span>',
        f'<span class="iv-inline-dice-expression">{escape_html(f.text(0))}</span>',
        '<span class="iv-inline-dice-arrow">→</span>',
        f'<span class="iv-inline-dice-result">{escape_html(f.text(1))}</span>',
    )


def render_ooc(content: str, file_lookup: Lookup = None) -> str:
    # free text, not split
    return _span(
        'iv-inline-mechanics ooc',
        f'<span class="iv-inline-ooc-icon">{icons.MESSAGE_CIRCLE}</span>',
        f'<span class="iv-inline-ooc-text">{escape_html(content)}</span>',
    )


INLINE_RENDERERS: dict[InlineKind, Callable[[str, Lookup], str]] = {
    InlineKind.move:           render_move,
    InlineKind.oracle:         render_oracle,
    InlineKind.meter:          render_meter,
    InlineKind.burn:           render_burn,
    InlineKind.initiative:     render_initiative,
    InlineKind.track_create:   render_track_create,
    InlineKind.track_advance:  render_track_advance,
    InlineKind.track_complete: render_track_complete,
    InlineKind.progress:       render_progress,
    InlineKind.noroll:         render_noroll,
    InlineKind.entity_create:  render_entity_create,
    InlineKind.clock_create:   render_clock_create,
    InlineKind.clock_advance:  render_clock_advance,
    InlineKind.clock_resolve:  render_clock_resolve,
    InlineKind.dice:           render_dice,
    InlineKind.ooc:            render_ooc,
}


def inline_kind(code: str) -> InlineKind | None:
    """Kind tag of an inline code, or None when the code is not ours."""
    if not code.startswith(INLINE_PREFIX):
        return None
    tag, sep, _ = code[len(INLINE_PREFIX):].partition(':')
    if not sep:
        return None
    try:
        return InlineKind(tag)
    except ValueError:
        return None


def parse_inline(code: str, file_lookup: Lookup = None) -> str | None:
    """Render one inline code's content, or None so the caller keeps the literal code."""
    kind = inline_kind(code)
    if kind is None:
        return None
    content = code.partition(':')[2]
    return INLINE_RENDERERS[kind](content, file_lookup)
