# =============================================
# File: tests/test_followups_service.py
# =============================================
import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import random

from app.services.followups import DEFAULT_FOLLOW_UPS, get_follow_ups, suggest
from app.utils.followup_rules import build_candidates
from app.utils.selector import rank
from app.utils.topics import ConversationTurn, extract_history_tags, extract_tags


def _turn(content, role="user"):
    return ConversationTurn(role=role, content=content)


def test_empty_latest_and_no_history_returns_defaults():
    assert get_follow_ups("", None) == [
        "What are the steps to buy a property in Singapore?",
        "Can PRs or foreigners buy property in Singapore?",
        "How much downpayment do I need for a condo or HDB?",
    ]


def test_missing_history_returns_defaults():
    out, strategy = suggest("Condos in Bishan are pricey", None)
    assert out == list(DEFAULT_FOLLOW_UPS)
    assert strategy == "default"


def test_property_rules_win_when_history_present():
    out, strategy = suggest("BTO flats from HDB are cheaper.", [])
    assert strategy == "property"
    assert out == [
        "How does BTO compare to resale HDB in terms of value?",
        "How much downpayment do I need for a condo or HDB?",
        "How much can I borrow for a home loan in Singapore?",
    ]


def test_undecided_buyer_gets_comparison_questions():
    assert get_follow_ups("Hello there", []) == [
        "Should I buy a condo or HDB?",
        "How much downpayment do I need for a condo or HDB?",
        "What is the difference between HDB, EC, and condo?",
    ]


def test_sampled_strategy_picks_from_top_window():
    history = [_turn("I want a condo in Bishan")]
    latest = "Condo prices near the MRT vary a lot"
    pool = build_candidates(latest, extract_history_tags(history), extract_tags(latest))
    window = {c.question for c in rank(pool)[:7]}

    for seed in range(10):
        out, strategy = suggest(latest, history, rng=random.Random(seed), prefer_stable=False)
        assert strategy == "sampled"
        assert len(out) == 3 and len(set(out)) == 3
        assert set(out) <= window


def test_sampled_strategy_mentions_recent_area():
    history = [_turn("Tell me about Tampines"), _turn("Tampines is a mature town.", "assistant")]
    latest = "Prices there are moderate."
    pool = build_candidates(latest, extract_history_tags(history), extract_tags(latest))
    assert any("tampines" in c.question for c in pool)


def test_count_is_configurable(monkeypatch):
    monkeypatch.setenv("FOLLOWUP_COUNT", "2")
    assert len(get_follow_ups("Hello there", [])) == 2
