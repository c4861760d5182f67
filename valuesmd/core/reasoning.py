"""Keyword heuristics over the free-text reasoning field.

Everything here is best-effort: the indicator tables are hand-picked word
lists, not a validated instrument. Tables are ordered tuples so that every
derived list comes out in the same order for the same input.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import ReasoningSignals, Response

ETHICAL_TERMS = re.compile(
    r"\b(principle|consequence|harm|benefit|right|duty|fair|just|moral|ethical|value|because|consider|balance|important)\b",
    re.IGNORECASE,
)

PATTERN_INDICATORS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Stakeholder-First", ("people", "person", "individual", "family", "community", "relationship")),
    ("Evidence-Based", ("data", "evidence", "research", "facts", "statistics", "proven")),
    ("Principle-Driven", ("rule", "principle", "right", "wrong", "should", "ought", "duty")),
    ("Outcome-Focused", ("result", "consequence", "impact", "effect", "outcome", "benefit")),
    ("Process-Oriented", ("fair", "process", "procedure", "systematic", "consistent", "transparent")),
    ("Context-Sensitive", ("depends", "situation", "context", "circumstance", "case-by-case", "nuanced")),
)

STYLE_INDICATORS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("analytical reasoning", ("because", "therefore")),
    ("intuitive assessment", ("feel", "sense")),
    ("deliberative evaluation", ("consider", "weigh")),
    ("integrative thinking", ("balance", "both")),
)

FACTOR_INDICATORS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("human impact", ("people", "person")),
    ("outcome consideration", ("consequence", "result")),
    ("fairness principle", ("fair", "just")),
    ("moral clarity", ("right", "wrong")),
    ("future impact", ("long-term", "future")),
)

VALUE_PHRASE_MARKERS = ("important to me", "i believe", "i value", "matters to me", "i think")

TRADEOFF_MARKERS = (
    "difficult choice", "trade-off", "tradeoff", "competing", "balance", "weigh",
    "on one hand", "however", "but also", "tension", "prioritize",
)

MAX_STYLES = 3
MAX_FACTORS = 4
MAX_VALUE_PHRASES = 5


def _has_term(text: str, term: str) -> bool:
    return re.search(r"(?<![\w-])" + re.escape(term) + r"(?![\w-])", text) is not None


def _matches(text: str, terms: Iterable[str]) -> int:
    return sum(1 for t in terms if _has_term(text, t))


def reasoning_depth(text: Optional[str]) -> float:
    """Score 0..1 from length, word count and ethical vocabulary.

    Saturates at 150 characters, 25 words and 3 ethical terms; empty text
    scores 0.
    """
    text = (text or "").strip()
    if not text:
        return 0.0
    length_score = min(1.0, len(text) / 150)
    word_score = min(1.0, len(text.split()) / 25)
    terminology_score = min(1.0, len(ETHICAL_TERMS.findall(text)) / 3)
    return 0.3 + 0.7 * math.sqrt(length_score * word_score * (0.3 + 0.7 * terminology_score))


def dominant_pattern(texts: Sequence[str]) -> Optional[str]:
    """The reasoning pattern most responses fall into, or None when nothing matches."""
    tallies = {name: 0 for name, _ in PATTERN_INDICATORS}
    for text in texts:
        best, best_score = None, 0
        for name, terms in PATTERN_INDICATORS:
            score = _matches(text, terms)
            if score > best_score:
                best, best_score = name, score
        if best:
            tallies[best] += 1
    top = max(tallies.values(), default=0)
    if top == 0:
        return None
    # first in table order among the tied
    return next(name for name, _ in PATTERN_INDICATORS if tallies[name] == top)


def _present_labels(texts: Sequence[str], table, limit: int) -> Tuple[str, ...]:
    found = [label for label, terms in table if any(_matches(t, terms) for t in texts)]
    return tuple(found[:limit])


def value_phrases(raw_texts: Sequence[str]) -> Tuple[str, ...]:
    """Sentences where the respondent states a value in their own words."""
    phrases: List[str] = []
    for text in raw_texts:
        for sentence in re.split(r"[.!?]+", text):
            sentence = sentence.strip()
            if len(sentence) <= 20:
                continue
            lower = sentence.lower()
            if any(marker in lower for marker in VALUE_PHRASE_MARKERS) and sentence not in phrases:
                phrases.append(sentence)
    # longest first, stable for equal lengths
    ordered = sorted(enumerate(phrases), key=lambda p: (-len(p[1]), p[0]))
    return tuple(p for _, p in ordered[:MAX_VALUE_PHRASES])


def analyze_reasoning(responses: Sequence[Response]) -> ReasoningSignals:
    raw = [r.reasoning.strip() for r in responses if r.reasoning and r.reasoning.strip()]
    if not raw:
        return ReasoningSignals()
    lowered = [t.lower() for t in raw]
    depth = sum(reasoning_depth(t) for t in raw) / len(raw)
    return ReasoningSignals(
        responses_with_reasoning=len(raw),
        depth=round(depth, 2),
        dominant_pattern=dominant_pattern(lowered),
        styles=_present_labels(lowered, STYLE_INDICATORS, MAX_STYLES),
        decision_factors=_present_labels(lowered, FACTOR_INDICATORS, MAX_FACTORS),
        value_phrases=value_phrases(raw),
        acknowledges_tradeoffs=sum(1 for t in lowered if any(m in t for m in TRADEOFF_MARKERS)),
    )
