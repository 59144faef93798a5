# =============================================
# File: app/utils/topics.py
# Purpose: Keyword vocabularies + tag extraction over chat turns
# =============================================
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict


class ConversationTurn(BaseModel):
    """One message of the chat; the history is an ordered list of these."""
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


# tag -> terms that trigger it (the tag name itself is always the first term).
# Matching is plain substring on lower-cased text, so "condominium" hits "condo"
# and any longer word containing a term hits too.
PROPERTY_TYPES: Dict[str, Tuple[str, ...]] = {
    "hdb": ("hdb",),
    "condo": ("condo", "condominium"),
    "landed": ("landed", "bungalow", "terrace"),
}

CONCEPTS: Dict[str, Tuple[str, ...]] = {
    "bto": ("bto",),
    "resale": ("resale",),
    "rental": ("rental", "rent"),
    "loan": ("loan", "mortgage"),
    "financing": ("financing",),
    "price": ("price",),
    "cost": ("cost",),
    "eligibility": ("eligibility",),
    "agent": ("agent",),
    "commission": ("commission",),
    "negotiate": ("negotiate",),
    "grant": ("grant", "subsidy"),
    "tax": ("tax",),
    "stamp duty": ("stamp duty",),
    "absd": ("absd",),
    "bsd": ("bsd",),
    "renovation": ("renovation",),
    "furnishing": ("furnishing",),
    "investment": ("investment", "roi"),
    "return": ("return",),
    "yield": ("yield",),
    "capital gain": ("capital gain",),
    "cash flow": ("cash flow",),
    "lease": ("lease",),
    "freehold": ("freehold",),
    "location": ("location",),
    "neighborhood": ("neighborhood",),
    "schools": ("schools",),
    "transport": ("transport",),
    "amenities": ("amenities",),
    "facilities": ("facilities",),
    "maintenance": ("maintenance",),
    "management fee": ("management fee",),
}

AREAS: Tuple[str, ...] = (
    "punggol", "tampines", "bedok", "jurong", "woodlands", "yishun",
    "ang mo kio", "toa payoh", "central", "east", "west", "north", "south",
    "bishan", "pasir ris", "clementi", "bukit timah", "novena", "queenstown",
    "geylang", "marine parade", "serangoon", "kallang", "tanjong pagar",
    "holland village", "bugis", "orchard", "sentosa", "cbd",
)

# Wider vocabulary used by the property-specific rule group. It is matched over
# the whole conversation, not a recent window, and overlaps CONCEPTS on purpose.
CONVERSATION_CONCEPTS: Dict[str, Tuple[str, ...]] = {
    "bto": ("bto",),
    "resale": ("resale",),
    "ec": ("executive condo", "ec "),
    "freehold": ("freehold",),
    "leasehold": ("leasehold",),
    "loan": ("loan", "mortgage"),
    "downpayment": ("downpayment", "down payment"),
    "cpf": ("cpf",),
    "grant": ("grant", "subsidy"),
    "stamp_duty": ("absd", "stamp duty"),
    "pr": ("pr", "permanent resident"),
    "foreigner": ("foreigner",),
    "single": ("single",),
    "family": ("married", "family"),
    "location": ("location", "area", "district"),
    "price": ("price", "cost", "afford"),
    "investment": ("invest", "roi", "yield"),
    "agent": ("agent", "commission"),
    "process": ("process", "procedure", "step"),
    "selling": ("sell", "selling"),
    "renting": ("rent", "lease", "tenant"),
}


@dataclass
class TagSet:
    """Tags found in some text, one ordered list per vocabulary."""
    property_types: List[str] = field(default_factory=list)
    concepts: List[str] = field(default_factory=list)
    areas: List[str] = field(default_factory=list)

    def __contains__(self, tag: str) -> bool:
        return tag in self.property_types or tag in self.concepts or tag in self.areas

    def __len__(self) -> int:
        return len(self.property_types) + len(self.concepts) + len(self.areas)

    def has_any(self, *tags: str) -> bool:
        return any(t in self for t in tags)

    def tags(self) -> Set[str]:
        return set(self.property_types) | set(self.concepts) | set(self.areas)

    @property
    def recent_area(self) -> Optional[str]:
        return self.areas[-1] if self.areas else None

    def update(self, other: "TagSet") -> "TagSet":
        """Append the tags of `other` not seen yet, keeping first-seen order."""
        for mine, theirs in (
            (self.property_types, other.property_types),
            (self.concepts, other.concepts),
            (self.areas, other.areas),
        ):
            for t in theirs:
                if t not in mine:
                    mine.append(t)
        return self

    def union(self, other: "TagSet") -> "TagSet":
        merged = TagSet(list(self.property_types), list(self.concepts), list(self.areas))
        return merged.update(other)


def _matches(text_l: str, terms: Iterable[str]) -> bool:
    return any(t in text_l for t in terms)


def extract_tags(text: Optional[str]) -> TagSet:
    text_l = (text or "").lower()
    found = TagSet()
    if not text_l:
        return found
    found.property_types = [tag for tag, terms in PROPERTY_TYPES.items() if _matches(text_l, terms)]
    found.concepts = [tag for tag, terms in CONCEPTS.items() if _matches(text_l, terms)]
    found.areas = [a for a in AREAS if a in text_l]
    return found


def extract_history_tags(turns: Optional[Sequence[ConversationTurn]], window_size: int = 4) -> TagSet:
    """
    Tags of the last `window_size` turns, accumulated oldest first so that
    `areas[-1]` is the area introduced most recently.
    """
    acc = TagSet()
    if not turns or window_size <= 0:
        return acc
    for turn in list(turns)[-window_size:]:
        acc.update(extract_tags(turn.content))
    return acc


def extract_conversation_concepts(
    turns: Optional[Sequence[ConversationTurn]], latest: str = ""
) -> Set[str]:
    parts = [t.content.lower() for t in (turns or [])]
    if latest:
        parts.append(latest.lower())
    content = " ".join(parts)
    return {tag for tag, terms in CONVERSATION_CONCEPTS.items() if _matches(content, terms)}


def mentioned_anywhere(term: str, latest: str, turns: Optional[Sequence[ConversationTurn]]) -> bool:
    term = term.lower()
    if term in (latest or "").lower():
        return True
    return any(term in t.content.lower() for t in (turns or []))
