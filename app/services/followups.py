# =============================================
# File: app/services/followups.py
# Purpose: Follow-up suggestion pipeline (tags -> candidates -> selection)
# =============================================
from __future__ import annotations
import os
import random
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from ..utils import slog
from ..utils.followup_rules import build_candidates, build_property_candidates
from ..utils.metrics import record_followups
from ..utils.selector import select, top_questions
from ..utils.topics import ConversationTurn, extract_history_tags, extract_tags

DEFAULT_FOLLOW_UPS: Tuple[str, ...] = (
    "What are the steps to buy a property in Singapore?",
    "Can PRs or foreigners buy property in Singapore?",
    "How much downpayment do I need for a condo or HDB?",
)


def _get_limits() -> tuple[int, int, int]:
    """(count, sampling window, history turns); read at call time so env overrides apply."""
    count = int(os.getenv("FOLLOWUP_COUNT", "3"))
    window = int(os.getenv("FOLLOWUP_WINDOW", "7"))
    turns = int(os.getenv("FOLLOWUP_HISTORY_TURNS", "4"))
    return count, window, turns


def suggest(
    latest_reply: str,
    history: Optional[Sequence[ConversationTurn]] = None,
    rng: Optional[random.Random] = None,
    prefer_stable: bool = True,
) -> Tuple[List[str], str]:
    """
    Returns (questions, strategy) where strategy is one of
    "default" | "property" | "sampled".
    """
    k, window, turns = _get_limits()

    if not latest_reply or history is None:
        return list(DEFAULT_FOLLOW_UPS), "default"

    if prefer_stable:
        stable = build_property_candidates(latest_reply, history)
        if stable:
            return top_questions(stable, k=k), "property"

    pool = build_candidates(
        latest_reply,
        extract_history_tags(history, window_size=turns),
        extract_tags(latest_reply),
    )
    return select(pool, k=k, window=window, rng=rng), "sampled"


def follow_ups_with_strategy(
    latest_reply: str,
    history: Optional[Sequence[ConversationTurn]] = None,
    rng: Optional[random.Random] = None,
    prefer_stable: bool = True,
) -> Tuple[List[str], str]:
    questions, strategy = suggest(latest_reply, history, rng=rng, prefer_stable=prefer_stable)
    record_followups(strategy)
    slog.log_event(
        "followups.selected",
        strategy=strategy,
        count=len(questions),
        history_len=len(history) if history is not None else None,
        qhash=slog.qhash(latest_reply or ""),
    )
    logger.debug(f"[followups] strategy={strategy} picks={len(questions)}")
    return questions, strategy


def get_follow_ups(
    latest_reply: str,
    history: Optional[Sequence[ConversationTurn]] = None,
    rng: Optional[random.Random] = None,
    prefer_stable: bool = True,
) -> List[str]:
    return follow_ups_with_strategy(latest_reply, history, rng=rng, prefer_stable=prefer_stable)[0]
