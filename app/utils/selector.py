# =============================================
# File: app/utils/selector.py
# Purpose: Pick final follow-up questions from a prioritized candidate pool
# =============================================
from __future__ import annotations
import random
from typing import List, Optional, Sequence

from .followup_rules import Candidate


def rank(candidates: Sequence[Candidate]) -> List[Candidate]:
    # sorted() is stable: equal priorities keep rule order
    return sorted(candidates, key=lambda c: c.priority, reverse=True)


def top_questions(candidates: Sequence[Candidate], k: int = 3) -> List[str]:
    """Deterministic pick: the first k distinct questions by priority."""
    out: List[str] = []
    for c in rank(candidates):
        if len(out) >= k:
            break
        if c.question not in out:
            out.append(c.question)
    return out


def select(
    candidates: Sequence[Candidate],
    k: int = 3,
    window: int = 7,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """
    Sample up to k distinct questions from the `window` highest-priority candidates.

    Draws without replacement; a drawn duplicate is discarded and the draw does
    not count. Returns fewer than k only when the window holds fewer than k
    distinct questions. Pass a seeded `random.Random` for reproducible picks.
    """
    rng = rng or random.Random()
    pool = [c.question for c in rank(candidates)[:max(0, window)]]
    chosen: List[str] = []
    while len(chosen) < k and pool:
        question = pool.pop(rng.randrange(len(pool)))
        if question not in chosen:
            chosen.append(question)
    return chosen
