"""Closed enumerations of inline code kinds and block statement kinds"""

from enum import Enum


INLINE_PREFIX = "iv-"


class InlineKind(str, Enum):
    """Tag between 'iv-' and the first colon of an inline code."""
    move            = "move"
    oracle          = "oracle"
    meter           = "meter"
    burn            = "burn"
    initiative      = "initiative"
    track_create    = "track-create"
    track_advance   = "track-advance"
    track_complete  = "track-complete"
    progress        = "progress"
    noroll          = "noroll"
    entity_create   = "entity-create"
    clock_create    = "clock-create"
    clock_advance   = "clock-advance"
    clock_resolve   = "clock-resolve"
    dice            = "dice"
    ooc             = "ooc"


class StatementKind(str, Enum):
    """Leading keyword of a line inside a mechanics block."""
    move          = "move"
    oracle_group  = "oracle-group"
    oracle        = "oracle"
    roll          = "roll"
    progress_roll = "progress-roll"
    meter         = "meter"
    burn          = "burn"
    xp            = "xp"
    track         = "track"
    progress      = "progress"
    clock         = "clock"
    asset         = "asset"
    impact        = "impact"
    initiative    = "initiative"
    actor         = "actor"
    reroll        = "reroll"
    add           = "add"
    dice_expr     = "dice-expr"
    detail        = "-"


# Keywords accepted in addition to the enum values.
STATEMENT_ALIASES: dict[str, StatementKind] = {
    "position": StatementKind.initiative,
}

# Kinds whose header opens a brace-delimited body. Oracles only when the header has '{'.
BRACED_KINDS = frozenset({StatementKind.move, StatementKind.oracle_group, StatementKind.actor})


def statement_kind(line: str) -> StatementKind | None:
    """Classify a trimmed line by its leading keyword; None when unrecognised."""
    if line.startswith("- "):
        return StatementKind.detail
    keyword, sep, _ = line.partition(" ")
    if not sep or keyword == StatementKind.detail.value:
        return None
    if keyword in STATEMENT_ALIASES:
        return STATEMENT_ALIASES[keyword]
    try:
        return StatementKind(keyword)
    except ValueError:
        return None
