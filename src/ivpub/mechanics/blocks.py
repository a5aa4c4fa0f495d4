"""Mechanics blocks: scan fenced `iron-vault-mechanics` content and render semantic HTML

Scanning turns the block into a tree of Statement nodes. Statements with a
brace-delimited body (move, oracle-group, actor, and oracle when its first line
leaves a brace open) own the statements of that body as children. The props
of a braced statement come from its whole first line.

Brace counting is naive: a '{' or '}' inside a quoted value mis-balances the
scan. Input that never closes consumes the rest of the block.
"""

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from ivpub.core.utils.slug import NO_LINK, escape_html, link_for_path, unescape_path
from ivpub.mechanics.kinds import BRACED_KINDS, StatementKind, statement_kind
from ivpub.mechanics.outcome import action_score, classify_outcome, is_match, outcome_classes
from ivpub.mechanics.props import Props, parse_props


log = logging.getLogger(__name__)

ARTICLE_OPEN = '<article class="iron-vault-mechanics">'
ARTICLE_CLOSE = '</article>'

TICKS_PER_BOX = 4
DEFAULT_TICKS_PER_STEP = 4
TICKS_PER_STEP: dict[str, int] = {
    'troublesome': 12,
    'dangerous':   8,
    'formidable':  4,
    'extreme':     2,
    'epic':        1,
}

_MARKDOWN_LINK = re.compile(r'\[([^\]]+)\]\([^)]+\)')
_WIKILINK = re.compile(r'\[\[([^|\]]+)(?:\|([^\]]+))?\]\]')
_NO_INITIATIVE = re.compile(r'bad.spot|no.initiative', re.IGNORECASE)
_HAS_INITIATIVE = re.compile(r'in.control|initiative', re.IGNORECASE)
_ERROR_EXCERPT = 50


@dataclass
class Statement:
    """One scanned statement; braced statements carry their body as children."""
    kind:     StatementKind
    header:   str                   # first line, braces included
    text:     str                   # full source span
    children: list['Statement'] = field(default_factory=list)

    @property
    def props(self) -> Props:
        return parse_props(self.header)


# --- scanning ---

def _brace_delta(line: str) -> int:
    return line.count('{') - line.count('}')


def _collect(lines: list[str], start: int, kind: StatementKind) -> int:
    """Index of the line that brings the brace count back to zero (or the last line)."""
    depth = _brace_delta(lines[start])
    i = start
    while depth > 0 and i + 1 < len(lines):
        i += 1
        depth += _brace_delta(lines[i])
    if depth > 0:
        log.warning(
            "Unbalanced braces in %s statement %r; consuming the rest of the block",
            kind.value, lines[start].strip()[:_ERROR_EXCERPT],
        )
    return i


def _body(text: str) -> str:
    """Text between the first '{' and the last '}' (or the end when never closed)."""
    start = text.find('{')
    if start == -1:
        return ''
    end = text.rfind('}')
    if end <= start:
        end = len(text)
    return text[start + 1:end].strip()


def scan_statements(lines: list[str]) -> list[Statement]:
    """Scan lines top to bottom into statements, recursing into braced bodies."""
    statements: list[Statement] = []
    i = 0
    while i < len(lines):
        line = lines[i].strip()
        kind = statement_kind(line)
        if kind is None:
            i += 1
            continue

        if kind in BRACED_KINDS or (kind is StatementKind.oracle and _brace_delta(line) > 0):
            end = _collect(lines, i, kind)
            text = '\n'.join(lines[i:end + 1])
            body = _body(text)
            statements.append(Statement(
                kind=kind,
                header=line,
                text=text,
                children=scan_statements(body.split('\n')) if body else [],
            ))
            i = end + 1
        else:
            statements.append(Statement(kind=kind, header=line, text=line))
            i += 1
    return statements


def _walk(statements: list[Statement]) -> Iterator[Statement]:
    for s in statements:
        yield s
        yield from _walk(s.children)


# --- shared formatting ---

def _n(value) -> str:
    """Render a number the way the notation wrote it: 3 not 3.0."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _e(value) -> str:
    return escape_html(_n(value))


def strip_markdown_link(text: str) -> str:
    """'[Face Danger](datasworn:...)' -> 'Face Danger' (one level)."""
    return _MARKDOWN_LINK.sub(r'\1', text, count=1)


def _wikilink(text: str) -> tuple[str, str] | None:
    """(path, display) of a '[[path|display]]' reference, or None."""
    m = _WIKILINK.search(text)
    if not m:
        return None
    path = m.group(1)
    display = m.group(2) or PurePosixPath(unescape_path(path)).stem
    return path, display


def _name(props: Props) -> str:
    """name="..." or, in the positional form, the first quoted argument."""
    return props.text('name') or props.first_text_arg() or ''


def _signed_dd(css: str, value) -> str:
    """dd with a positive/negative class and the absolute value."""
    sign = 'negative' if value < 0 else 'positive'
    return f'<dd class="{css} {sign}">{_n(abs(value))}</dd>'


def _track_link(props: Props) -> tuple[str, str]:
    """(href, display) from name="[[path|display]]", else the plain name and no link."""
    name = props.text('name')
    link = _wikilink(name)
    if link:
        return link_for_path(link[0]), link[1]
    return NO_LINK, name


def _roll_dl(props: Props, always_stat_name: bool = False) -> str:
    stat_name = props.text('stat-name', 'stat_name') or props.first_text_arg() or ''
    action = props.number('action')
    stat = props.number('stat')
    adds = props.number('adds')
    vs1, vs2 = props.number('vs1'), props.number('vs2')
    score = action_score(action, stat, adds)
    outcome = classify_outcome(score, vs1, vs2)
    stat_name_dd = (
        f'<dd class="stat-name">{escape_html(stat_name)}</dd>'
        if stat_name or always_stat_name else ''
    )
    return (
        f'<dl class="{outcome_classes("roll", outcome, is_match(vs1, vs2))}">'
        '<dt>Roll</dt>'
        f'<dd class="action-die">{_n(action)}</dd>'
        f'<dd class="stat">{_n(stat)}</dd>'
        f'{stat_name_dd}'
        f'<dd class="adds">{_n(adds)}</dd>'
        f'<dd class="score">{_n(score)}</dd>'
        f'<dd class="challenge-die vs1">{_n(vs1)}</dd>'
        f'<dd class="challenge-die vs2">{_n(vs2)}</dd>'
        f'<dd class="outcome">{outcome.value}</dd>'
        '</dl>'
    )


def _oracle_dl(props: Props, extras: bool = True) -> str:
    name = strip_markdown_link(props.text('name'))
    parts = [
        '<dl class="oracle"><dt>Oracle</dt>',
        f'<dd class="name">{escape_html(name)}</dd>',
        f'<dd class="roll">{_e(props.get("roll", ""))}</dd>',
        f'<dd class="result">{_e(props.get("result", ""))}</dd>',
    ]
    if extras:
        for key in ('cursed', 'replaced'):
            if props.has(key):
                value = _e(props.get(key))
                parts.append(f'<dd class="{key}" data-value="{value}">{value}</dd>')
    parts.append('</dl>')
    return ''.join(parts)


# --- statement renderers ---

def render_move(stmt: Statement) -> str:
    full_name = stmt.props.first_text_arg()
    if not full_name:
        return f'<p class="error">Could not parse move: {escape_html(stmt.text[:_ERROR_EXCERPT])}</p>'

    summary = f'<summary><span class="move-name">{escape_html(strip_markdown_link(full_name))}</span></summary>'
    roll = next((c for c in stmt.children if c.kind is StatementKind.roll), None)
    rest = render_statements([c for c in stmt.children if c is not roll])
    if roll is None:
        return f'<details class="move" open>{summary}{rest}</details>'

    props = roll.props
    vs1, vs2 = props.number('vs1'), props.number('vs2')
    score = action_score(props.number('action'), props.number('stat'), props.number('adds'))
    classes = outcome_classes('move', classify_outcome(score, vs1, vs2), is_match(vs1, vs2))
    return (
        f'<details class="{classes}" open>{summary}'
        f'{_roll_dl(props, always_stat_name=True)}{rest}'
        '</details>'
    )


def render_roll(stmt: Statement) -> str:
    return _roll_dl(stmt.props)


def render_progress_roll(stmt: Statement) -> str:
    props = stmt.props
    score, vs1, vs2 = props.number('score'), props.number('vs1'), props.number('vs2')
    outcome = classify_outcome(score, vs1, vs2)
    return (
        f'<dl class="{outcome_classes("roll progress", outcome, is_match(vs1, vs2))}">'
        '<dt>Progress Roll</dt>'
        f'<dd class="track-name">{escape_html(props.text("name"))}</dd>'
        f'<dd class="progress-score">{_n(score)}</dd>'
        f'<dd class="challenge-die vs1">{_n(vs1)}</dd>'
        f'<dd class="challenge-die vs2">{_n(vs2)}</dd>'
        f'<dd class="outcome">{outcome.value}</dd>'
        '</dl>'
    )


def render_oracle(stmt: Statement) -> str:
    if not stmt.children:
        return f'<div class="oracle-container">{_oracle_dl(stmt.props)}</div>'

    nested = [_oracle_dl(s.props) for s in _walk(stmt.children) if s.kind is StatementKind.oracle]
    quote = f'<blockquote>{"".join(nested)}</blockquote>' if nested else ''
    return f'<div class="oracle-container">{_oracle_dl(stmt.props, extras=False)}{quote}</div>'


def render_oracle_group(stmt: Statement) -> str:
    name = stmt.props.text('name') or 'Oracle Group'
    oracles = ''.join(
        f'<div class="oracle-container">{_oracle_dl(s.props, extras=False)}</div>'
        for s in _walk(stmt.children)
        if s.kind is StatementKind.oracle
    )
    return (
        '<article class="oracle-group">'
        f'<span class="group-name">{escape_html(name)}</span>'
        f'<blockquote>{oracles}</blockquote>'
        '</article>'
    )


def _delta_dl(css: str, title: str, props: Props, name_dd: str = '') -> str:
    start, end = props.number('from'), props.number('to')
    return (
        f'<dl class="{css}"><dt>{title}</dt>{name_dd}'
        f'{_signed_dd("delta", end - start)}'
        f'<dd class="from">{_n(start)}</dd>'
        f'<dd class="to">{_n(end)}</dd>'
        '</dl>'
    )


def render_meter(stmt: Statement) -> str:
    props = stmt.props
    return _delta_dl('meter', 'Meter', props, f'<dd class="meter-name">{escape_html(_name(props))}</dd>')


def render_xp(stmt: Statement) -> str:
    return _delta_dl('xp', 'XP', stmt.props)


def render_burn(stmt: Statement) -> str:
    props = stmt.props
    return (
        '<dl class="burn"><dt>Burn</dt>'
        f'<dd class="from">{_n(props.number("from"))}</dd>'
        f'<dd class="to">{_n(props.number("to"))}</dd>'
        '</dl>'
    )


def render_track(stmt: Statement) -> str:
    props = stmt.props
    href, display = _track_link(props)
    name_dd = f'<dd class="track-name"><a href="{escape_html(href)}">{escape_html(display)}</a></dd>'
    status = props.text('status')
    if status:
        value = escape_html(status)
        return (
            f'<dl class="track-status"><dt>Track</dt>{name_dd}'
            f'<dd class="track-status" data-value="{value}">{value}</dd>'
            '</dl>'
        )
    return (
        f'<dl class="track"><dt>Track</dt>{name_dd}'
        f'<dd class="from-boxes">{_n(props.number("from-boxes"))}</dd>'
        f'<dd class="from-ticks">{_n(props.number("from-ticks"))}</dd>'
        f'<dd class="to-boxes">{_n(props.number("to-boxes"))}</dd>'
        f'<dd class="to-ticks">{_n(props.number("to-ticks"))}</dd>'
        '</dl>'
    )


def progress_ticks(rank: str, steps: int, start: int) -> tuple[int, int, int, int]:
    """(from_boxes, from_ticks, to_boxes, to_ticks) after marking progress by rank."""
    per_step = TICKS_PER_STEP.get(rank.lower(), DEFAULT_TICKS_PER_STEP)
    end = start + per_step * steps
    return (
        start // TICKS_PER_BOX, start % TICKS_PER_BOX,
        end // TICKS_PER_BOX, end % TICKS_PER_BOX,
    )


def render_progress(stmt: Statement) -> str:
    props = stmt.props
    href, display = _track_link(props)
    rank = props.text('rank', 'level')
    steps = int(props.number('steps'))
    from_boxes, from_ticks, to_boxes, to_ticks = progress_ticks(rank, steps, int(props.number('from')))
    return (
        '<dl class="progress"><dt>Progress</dt>'
        f'<dd class="track-name"><a href="{escape_html(href)}">{escape_html(display)}</a></dd>'
        f'{_signed_dd("steps", steps)}'
        f'<dd class="rank">{escape_html(rank)}</dd>'
        f'<dd class="from-boxes">{from_boxes}</dd>'
        f'<dd class="from-ticks">{from_ticks}</dd>'
        f'<dd class="to-boxes">{to_boxes}</dd>'
        f'<dd class="to-ticks">{to_ticks}</dd>'
        '</dl>'
    )


def render_clock(stmt: Statement) -> str:
    props = stmt.props
    name_dd = f'<dd class="clock-name">{escape_html(props.text("name"))}</dd>'
    status = props.text('status')
    if status:
        value = escape_html(status)
        return (
            f'<dl class="clock-status"><dt>Clock</dt>{name_dd}'
            f'<dd class="clock-status" data-value="{value}">{value}</dd>'
            '</dl>'
        )
    # out-of appears on both sides of 'to'; CSS targets it by position.
    out_of = _n(props.number('out-of', 'segments'))
    return (
        f'<dl class="clock"><dt>Clock</dt>{name_dd}'
        f'<dd class="from">{_n(props.number("from"))}</dd>'
        f'<dd class="out-of">{out_of}</dd>'
        f'<dd class="to">{_n(props.number("to"))}</dd>'
        f'<dd class="out-of">{out_of}</dd>'
        '</dl>'
    )


def render_asset(stmt: Statement) -> str:
    props = stmt.props
    status = escape_html(props.text('status'))
    ability = f'<dd class="asset-ability">{_e(props.get("ability"))}</dd>' if props.has('ability') else ''
    return (
        '<dl class="asset"><dt>Asset</dt>'
        f'<dd class="asset-name">{escape_html(strip_markdown_link(_name(props)))}</dd>'
        f'<dd class="asset-status" data-value="{status}">{status}</dd>'
        f'{ability}'
        '</dl>'
    )


def render_impact(stmt: Statement) -> str:
    props = stmt.props
    marked = escape_html(_n(props.get('marked', '')).lower())
    return (
        '<dl class="impact"><dt>Impact</dt>'
        f'<dd class="impact-name">{escape_html(_name(props))}</dd>'
        f'<dd class="impact-marked" data-value="{marked}">{marked}</dd>'
        '</dl>'
    )


def initiative_state(position: str) -> str:
    if _NO_INITIATIVE.search(position):
        return 'no-initiative'
    if _HAS_INITIATIVE.search(position):
        return 'has-initiative'
    return 'out-of-combat'


def initiative_label(position: str) -> str:
    for pattern, label in (
        (r'bad.spot', 'In a bad spot'),
        (r'no.initiative', 'No initiative'),
        (r'in.control', 'In control'),
        (r'initiative', 'Has initiative'),
    ):
        if re.search(pattern, position, re.IGNORECASE):
            return label
    return 'Out of combat'


def render_initiative(stmt: Statement) -> str:
    props = stmt.props
    start = props.text('from') or 'out-of-combat'
    end = props.text('to') or 'out-of-combat'
    return (
        '<dl class="initiative"><dt>Initiative</dt>'
        f'<dd class="from {initiative_state(start)}">{initiative_label(start)}</dd>'
        f'<dd class="to {initiative_state(end)}">{initiative_label(end)}</dd>'
        '</dl>'
    )


def render_actor(stmt: Statement) -> str:
    name = stmt.props.text('name') or 'Actor'
    link = _wikilink(name)
    if link:
        name_html = f'<a href="{escape_html(link_for_path(link[0]))}">{escape_html(link[1])}</a>'
    else:
        name_html = escape_html(name)
    return (
        '<section class="actor">'
        f'<header><span>{name_html}</span></header>'
        f'<div>{render_statements(stmt.children)}</div>'
        '</section>'
    )


def render_reroll(stmt: Statement) -> str:
    props = stmt.props
    parts = ['<dl class="reroll"><dt>Reroll</dt>']
    for key, css in (('action', 'action-die'), ('vs1', 'challenge-die'), ('vs2', 'challenge-die')):
        if not props.has(key):
            continue
        suffix = '' if key == 'action' else f' {key}'
        parts.append(f'<dd class="{css} from{suffix}">{_e(props.get("old-" + key, "?"))}</dd>')
        parts.append(f'<dd class="{css} to{suffix}">{_e(props.get(key))}</dd>')
    parts.append('</dl>')
    return ''.join(parts)


def render_add(stmt: Statement) -> str:
    props = stmt.props
    amount = props.number('amount')
    reason = props.text('from')
    # A prop-style zero looks like "absent"; the positional form then gets a try.
    if amount == 0 and props.args and not isinstance(props.args[0], str):
        amount = props.args[0]
        reason = props.args[1] if len(props.args) > 1 and isinstance(props.args[1], str) else ''
    reason_dd = f'<dd class="from">{escape_html(reason)}</dd>' if reason else ''
    return f'<dl class="add"><dt>Add</dt>{_signed_dd("amount", amount)}{reason_dd}</dl>'


def render_dice_expr(stmt: Statement) -> str:
    props = stmt.props
    return (
        '<dl class="dice-expr"><dt>Dice</dt>'
        f'<dd class="expr">{escape_html(props.text("expr"))}</dd>'
        f'<dd class="value">{_e(props.get("result", ""))}</dd>'
        '</dl>'
    )


def render_detail(stmt: Statement) -> str:
    return f'<aside class="detail"><p>{escape_html(stmt.header[2:].strip())}</p></aside>'


STATEMENT_RENDERERS: dict[StatementKind, Callable[[Statement], str]] = {
    StatementKind.move:          render_move,
    StatementKind.oracle_group:  render_oracle_group,
    StatementKind.oracle:        render_oracle,
    StatementKind.roll:          render_roll,
    StatementKind.progress_roll: render_progress_roll,
    StatementKind.meter:         render_meter,
    StatementKind.burn:          render_burn,
    StatementKind.xp:            render_xp,
    StatementKind.track:         render_track,
    StatementKind.progress:      render_progress,
    StatementKind.clock:         render_clock,
    StatementKind.asset:         render_asset,
    StatementKind.impact:        render_impact,
    StatementKind.initiative:    render_initiative,
    StatementKind.actor:         render_actor,
    StatementKind.reroll:        render_reroll,
    StatementKind.add:           render_add,
    StatementKind.dice_expr:     render_dice_expr,
    StatementKind.detail:        render_detail,
}


def render_statements(statements: list[Statement]) -> str:
    """Concatenate rendered statements in source order."""
    return ''.join(STATEMENT_RENDERERS[s.kind](s) for s in statements)


def parse_block(content: str) -> str:
    """Render the body of one mechanics fence; unrecognised lines are skipped."""
    statements = scan_statements(content.strip().split('\n'))
    return f'{ARTICLE_OPEN}{render_statements(statements)}{ARTICLE_CLOSE}'
