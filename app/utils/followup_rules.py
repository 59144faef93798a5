# =============================================
# File: app/utils/followup_rules.py
# Purpose: Rule tables that turn conversation tags into prioritized follow-up candidates
# =============================================
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set

from .topics import (
    ConversationTurn,
    TagSet,
    extract_conversation_concepts,
    mentioned_anywhere,
)


@dataclass(frozen=True)
class Candidate:
    question: str
    priority: int


@dataclass
class RuleContext:
    """Everything a rule predicate may look at."""
    latest: str                                   # lower-cased latest text
    discussed: TagSet = field(default_factory=TagSet)
    concepts: Set[str] = field(default_factory=set)   # conversation-wide vocabulary
    mentioned_hdb: bool = False
    mentioned_condo: bool = False

    @property
    def area(self) -> Optional[str]:
        return self.discussed.recent_area

    def says(self, *terms: str) -> bool:
        return any(t in self.latest for t in terms)

    def lacks(self, *terms: str) -> bool:
        return not self.says(*terms)


Predicate = Callable[[RuleContext], bool]


def _always(ctx: RuleContext) -> bool:
    return True


@dataclass(frozen=True)
class Rule:
    question: str           # may contain "{area}"
    priority: int
    when: Predicate = _always

    def emit(self, ctx: RuleContext) -> Candidate:
        q = self.question.format(area=ctx.area) if "{area}" in self.question else self.question
        return Candidate(q, self.priority)


@dataclass(frozen=True)
class RuleGroup:
    name: str
    rules: Sequence[Rule]
    gate: Predicate = _always

    def apply(self, ctx: RuleContext) -> List[Candidate]:
        if not self.gate(ctx):
            return []
        return [r.emit(ctx) for r in self.rules if r.when(ctx)]


def _has(*tags: str) -> Predicate:
    return lambda ctx: ctx.discussed.has_any(*tags)


def _not(*tags: str) -> Predicate:
    return lambda ctx: not ctx.discussed.has_any(*tags)


def _lacks(*terms: str) -> Predicate:
    return lambda ctx: ctx.lacks(*terms)


def _area_lacks(*suffixes: str) -> Predicate:
    # "tampines price", "tampines mrt", ...
    return lambda ctx: ctx.lacks(*(f"{ctx.area} {s}" for s in suffixes))


# ---------- Generic table (recent-window tags + latest text, sampled) ----------

GENERIC_RULES: List[RuleGroup] = [
    RuleGroup("hdb", gate=_has("hdb"), rules=[
        Rule("How does BTO compare to resale HDB in terms of value?", 8,
             lambda c: "bto" in c.discussed and "resale" not in c.discussed),
        Rule("Should I consider BTO instead of resale?", 8,
             lambda c: "resale" in c.discussed and "bto" not in c.discussed),
        Rule("Which is better for me: BTO or resale HDB?", 7, _not("bto", "resale")),
        Rule("What HDB grants am I eligible for?", 9, _not("grant")),
        Rule("What are the income ceiling requirements?", 6,
             lambda c: "eligibility" in c.discussed and c.lacks("income ceiling")),
        Rule("Can singles buy HDB flats?", 5,
             lambda c: "eligibility" in c.discussed and c.lacks("single")),
    ]),
    RuleGroup("condo", gate=_has("condo"), rules=[
        Rule("Are condos a good investment right now?", 6, _not("investment")),
        Rule("What should I know about condo maintenance fees?", 7, _lacks("maintenance", "fee")),
        Rule("What facilities should I look for in a good condo?", 5, _not("facilities", "amenities")),
        Rule("Which areas have the best value for condos right now?", 8,
             lambda c: not c.discussed.areas),
    ]),
    RuleGroup("financing", gate=_has("loan"), rules=[
        Rule("What are the current interest rates for home loans?", 8, _lacks("interest", "rate")),
        Rule("What loan tenure should I choose?", 6, _lacks("term", "tenure", "duration")),
        Rule("How much down payment will I need?", 9, _lacks("down payment", "downpayment")),
        Rule("How can I best utilize my CPF for property purchase?", 7, _lacks("cpf")),
        Rule("How do TDSR and MSR affect my loan eligibility?", 5, _lacks("tdsr", "msr", "debt")),
    ]),
    RuleGroup("investment", gate=_has("investment"), rules=[
        Rule("Which areas have the best rental yields currently?", 8, _lacks("rental yield", "yield")),
        Rule("Which properties have high rental yield in Singapore?", 7, _lacks("rental yield", "yield")),
        Rule("Which property types have the best capital appreciation?", 7, _lacks("capital", "appreciation")),
        Rule("Which condos have high en bloc potential?", 6, _lacks("capital", "appreciation")),
        Rule("What are the tax implications of property investment?", 6, _not("tax", "absd")),
        Rule("What are the additional buyer's stamp duties (ABSD)?", 7, _not("tax", "absd")),
        Rule("Can I buy a second property without ABSD?", 6, _not("tax", "absd")),
        Rule("Is it a good time to buy property in Singapore 2025?", 8),
        Rule("What is the best property to invest in Singapore?", 7),
        Rule("Will property prices drop in 2025?", 6),
        Rule("Should I wait for the market to cool before buying?", 5),
        Rule("How to calculate rental yield in Singapore?", 6),
    ]),
    RuleGroup("area", gate=lambda c: c.area is not None, rules=[
        Rule("What's the price range for properties in {area}?", 8, _area_lacks("price", "cost")),
        Rule("What amenities are available in {area}?", 6, _area_lacks("amenities", "facilities")),
        Rule("How convenient is public transportation in {area}?", 7, _area_lacks("mrt", "transport")),
        Rule("Where can I find affordable condos near MRT?", 6, _area_lacks("mrt", "transport")),
        Rule("What condo is closest to MRT and mall?", 5, _area_lacks("mrt", "transport")),
        Rule("Which property is near upcoming MRT lines?", 5, _area_lacks("mrt", "transport")),
        Rule("What are the good schools in {area}?", 5, _area_lacks("school")),
        Rule("Which HDB towns have the best schools?", 4, _area_lacks("school")),
    ]),
    RuleGroup("no_area", gate=lambda c: c.area is None, rules=[
        Rule("Which area is best to buy property in Singapore?", 8),
        Rule("Best area to invest in property in Singapore 2025?", 7),
    ]),
    RuleGroup("process", gate=lambda c: c.says("process", "procedure", "steps"), rules=[
        Rule("How long does this process typically take?", 8, _lacks("time", "long", "duration")),
        Rule("What documents do I need to prepare?", 7, _lacks("document", "paperwork")),
        Rule("What fees are involved in this process?", 6, _lacks("fee", "cost")),
    ]),
    RuleGroup("fallback", rules=[
        Rule("What are the current market trends in Singapore?", 3),
        Rule("What common mistakes should I avoid?", 3),
        Rule("What hidden costs should I be aware of?", 4),
        Rule("How can I get the best deal?", 2),
        Rule("What are the next steps I should take?", 2),
        Rule("How will the property market change in the coming year?", 3),
        Rule("What neighborhoods are becoming popular?", 4),
    ]),
]


# ---------- Property-specific table (whole conversation, deterministic top-N) ----------

def _concept(*names: str) -> Predicate:
    return lambda ctx: any(n in ctx.concepts for n in names)


def _no_concept(*names: str) -> Predicate:
    return lambda ctx: not any(n in ctx.concepts for n in names)


PROPERTY_RULES: List[RuleGroup] = [
    RuleGroup("hdb", gate=lambda c: c.mentioned_hdb, rules=[
        Rule("How does BTO compare to resale HDB in terms of value?", 9,
             lambda c: "bto" in c.concepts and "resale" not in c.concepts),
        Rule("Should I consider BTO instead of resale?", 9,
             lambda c: "resale" in c.concepts and "bto" not in c.concepts),
        Rule("Which is better for me: BTO or resale HDB?", 8, _no_concept("bto", "resale")),
        Rule("What HDB grants am I eligible for?", 7, _no_concept("grant")),
        Rule("Can singles buy a HDB flat?", 6, _no_concept("single", "family")),
    ]),
    RuleGroup("condo", gate=lambda c: c.mentioned_condo, rules=[
        Rule("What is Executive Condo (EC) and how is it different from condo?", 8, _no_concept("ec")),
        Rule("Are condos a good investment right now?", 9, _no_concept("investment")),
        Rule("Where can I find affordable condos near MRT?", 7, _no_concept("location")),
        Rule("Is freehold better than leasehold?", 6, _no_concept("freehold", "leasehold")),
    ]),
    RuleGroup("undecided", gate=lambda c: not c.mentioned_hdb and not c.mentioned_condo, rules=[
        Rule("Should I buy a condo or HDB?", 9),
        Rule("What is the difference between HDB, EC, and condo?", 8),
    ]),
    RuleGroup("general", rules=[
        Rule("How much downpayment do I need for a condo or HDB?", 9, _no_concept("downpayment")),
        Rule("How much can I borrow for a home loan in Singapore?", 8, _no_concept("loan")),
        Rule("How do I use my CPF to buy a house?", 7, _no_concept("cpf")),
        Rule("Can PRs or foreigners buy property in Singapore?", 8, _no_concept("pr", "foreigner")),
        Rule("What are the steps to buy a property in Singapore?", 8, _no_concept("process")),
        Rule("Do I need a property agent to buy a house?", 7, _no_concept("agent")),
        Rule("Is it a good time to buy property in Singapore 2025?", 6),
        Rule("Which area is best to buy property in Singapore?", 7, _no_concept("location")),
    ]),
]


def _run(groups: Sequence[RuleGroup], ctx: RuleContext) -> List[Candidate]:
    pool: List[Candidate] = []
    for group in groups:
        pool.extend(group.apply(ctx))
    return pool


def build_candidates(latest_text: str, history_tags: TagSet, latest_tags: TagSet) -> List[Candidate]:
    """
    Candidate pool from the generic table. Tags from the recent history window and
    from the latest text both count as "discussed"; detail checks (fees, MRT, ...)
    look at the latest text only. The result is unsorted and may repeat questions.
    """
    ctx = RuleContext(
        latest=(latest_text or "").lower(),
        discussed=history_tags.union(latest_tags),
    )
    return _run(GENERIC_RULES, ctx)


def build_property_candidates(
    latest_text: str, turns: Optional[Sequence[ConversationTurn]]
) -> List[Candidate]:
    ctx = RuleContext(
        latest=(latest_text or "").lower(),
        concepts=extract_conversation_concepts(turns, latest=latest_text or ""),
        mentioned_hdb=mentioned_anywhere("hdb", latest_text, turns),
        mentioned_condo=mentioned_anywhere("condo", latest_text, turns),
    )
    return _run(PROPERTY_RULES, ctx)
