"""Outcome classification for action and progress rolls"""

from enum import Enum


SCORE_CAP = 10


class OutcomeTier(str, Enum):
    strong_hit = "strong-hit"
    weak_hit   = "weak-hit"
    miss       = "miss"


def classify_outcome(score: float, vs1: float, vs2: float) -> OutcomeTier:
    """Beat both challenge dice for a strong hit, one for a weak hit. Ties do not beat."""
    beats_vs1 = score > vs1
    beats_vs2 = score > vs2
    if beats_vs1 and beats_vs2:
        return OutcomeTier.strong_hit
    if beats_vs1 or beats_vs2:
        return OutcomeTier.weak_hit
    return OutcomeTier.miss


def is_match(vs1: float, vs2: float) -> bool:
    """True when both challenge dice show the same value."""
    return vs1 == vs2


def action_score(action: float, stat: float, adds: float) -> float:
    """Action roll score, capped at 10 before classification."""
    return min(SCORE_CAP, action + stat + adds)


def outcome_classes(prefix: str, outcome: OutcomeTier, match: bool) -> str:
    """CSS class list such as 'roll weak-hit match'."""
    classes = f"{prefix} {outcome.value}" if prefix else outcome.value
    return f"{classes} match" if match else classes
