from __future__ import annotations

import math
from fractions import Fraction
from typing import Dict, List, Mapping, Optional, Sequence

from ..catalog import Catalog
from ..config import get_settings
from ..errors import DataIntegrityError, EmptyInputError
from ..observability import get_logger
from .models import (
    DecisionStats,
    EthicalProfile,
    FrameworkShare,
    MotifFrequency,
    ReasoningExample,
    Response,
)
from .reasoning import analyze_reasoning
from .session import resolve_choice

log = get_logger(__name__)

# How many answered dilemmas are quoted as examples
EXAMPLE_COUNT = 3


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def _raw_shares(weights: Mapping[str, Fraction], order: Sequence[str]) -> Dict[str, Fraction]:
    total = sum(weights.values(), Fraction(0))
    if total <= 0:
        raise ValueError("cannot normalise weights that sum to zero")
    return {key: Fraction(weights.get(key, 0)) * 100 / total for key in order}


def _largest_remainder(raw: Mapping[str, Fraction], order: Sequence[str]) -> Dict[str, int]:
    floors = {key: math.floor(raw[key]) for key in order}
    leftover = 100 - sum(floors.values())
    by_remainder = sorted(order, key=lambda k: (-(raw[k] - floors[k]), order.index(k)))
    for key in by_remainder[:leftover]:
        floors[key] += 1
    return floors


def normalize_percentages(weights: Mapping[str, Fraction], order: Sequence[str]) -> Dict[str, int]:
    """Integer percentages that always sum to exactly 100.

    Each share is rounded half-up and the key with the largest raw share
    (first in ``order`` among equals) absorbs the rounding difference. When
    that would leave it negative or below another bucket, as happens with
    many equal buckets, the points are apportioned by largest remainder
    instead. Arithmetic is exact, so the result depends only on the inputs.
    """
    raw = _raw_shares(weights, order)
    rounded = {key: _round_half_up(share) for key, share in raw.items()}
    largest = max(order, key=lambda k: (raw[k], -order.index(k)))
    absorbed = rounded[largest] + 100 - sum(rounded.values())
    others = [rounded[k] for k in order if k != largest]
    if absorbed >= 0 and all(absorbed >= v for v in others):
        rounded[largest] = absorbed
        return rounded
    return _largest_remainder(raw, order)


def motif_shares(counts: Mapping[str, int], order: Sequence[str]) -> Dict[str, int]:
    """Each motif's share of responses, rounded half-up on its own.

    Equal counts always get equal shares and shares never grow down the
    ranking; unlike framework alignment the total need not be exactly 100.
    """
    raw = _raw_shares({k: Fraction(v) for k, v in counts.items()}, order)
    return {key: _round_half_up(share) for key, share in raw.items()}


def _frequency(catalog: Catalog, motif_id: str, count: int, percentage: int,
               domains: List[str]) -> MotifFrequency:
    motif = catalog.motif(motif_id)
    return MotifFrequency(
        motif_id=motif_id,
        name=motif.name,
        count=count,
        percentage=percentage,
        domains=tuple(domains),
        category=motif.category,
        description=motif.description,
        weight=motif.weight,
        ai_guidance=motif.ai_guidance,
        logical_pattern=motif.logical_pattern,
        conflicts_with=tuple(sorted(motif.conflicts_with, key=catalog.motif_order)),
        synergies_with=tuple(sorted(motif.synergies_with, key=catalog.motif_order)),
        behavioral_indicators=motif.behavioral_indicators,
    )


def analyze(responses: Sequence[Response], catalog: Catalog,
            primary_count: Optional[int] = None,
            include_reasoning: bool = True) -> EthicalProfile:
    """Aggregate a session's responses into an ``EthicalProfile``.

    Every response must resolve to a catalog motif; nothing is skipped or
    defaulted. Motifs are ranked by count, ties broken by catalog declaration
    order, and the first ``primary_count`` are the primary motifs.
    """
    if not responses:
        raise EmptyInputError("no responses supplied")
    if primary_count is None:
        primary_count = get_settings().primary_motif_count

    counts: Dict[str, int] = {}
    motif_domains: Dict[str, List[str]] = {}
    domains: Dict[str, List[str]] = {}
    framework_weights: Dict[str, Fraction] = {fid: Fraction(0) for fid in catalog.framework_ids}
    seen_dilemmas = set()
    examples: List[ReasoningExample] = []

    for response in responses:
        dilemma, motif_id = resolve_choice(response, catalog)
        if dilemma.dilemma_id in seen_dilemmas:
            raise DataIntegrityError(
                f"dilemma {dilemma.dilemma_id} answered more than once",
                dilemma_id=dilemma.dilemma_id,
            )
        seen_dilemmas.add(dilemma.dilemma_id)
        if len(examples) < EXAMPLE_COUNT:
            examples.append(ReasoningExample(
                dilemma_id=dilemma.dilemma_id,
                title=dilemma.title,
                chosen_option=response.chosen_option,
                choice=dilemma.choices[response.chosen_option],
                motif_id=motif_id,
                reasoning=(response.reasoning or "").strip() or None,
            ))

        counts[motif_id] = counts.get(motif_id, 0) + 1
        seen_in = motif_domains.setdefault(motif_id, [])
        if dilemma.domain not in seen_in:
            seen_in.append(dilemma.domain)
        chosen_here = domains.setdefault(dilemma.domain, [])
        if motif_id not in chosen_here:
            chosen_here.append(motif_id)

        motif = catalog.motif(motif_id)
        for framework_id, weight in motif.frameworks.items():
            # str() keeps the declared decimal exactly, e.g. 0.1 stays 1/10
            framework_weights[framework_id] += Fraction(str(weight))

    ranked_ids = sorted(counts, key=lambda m: (-counts[m], catalog.motif_order(m)))
    shares = motif_shares({m: counts[m] for m in ranked_ids}, ranked_ids)
    ranked = tuple(_frequency(catalog, m, counts[m], shares[m], motif_domains[m]) for m in ranked_ids)
    alignment = normalize_percentages(framework_weights, catalog.framework_ids)
    frameworks = tuple(
        FrameworkShare(
            framework_id=f.framework_id,
            name=f.name,
            percentage=alignment[f.framework_id],
            tradition=f.tradition,
            key_principle=f.key_principle,
        )
        for f in catalog.frameworks
    )

    total = len(responses)
    difficulties = [r.perceived_difficulty for r in responses if r.perceived_difficulty is not None]
    times = [r.response_time for r in responses if r.response_time is not None]
    stats = DecisionStats(
        consistency=round(counts[ranked_ids[0]] / total, 2),
        average_difficulty=round(sum(difficulties) / len(difficulties), 1) if difficulties else None,
        average_response_time=round(sum(times) / len(times)) if times else None,
    )

    profile = EthicalProfile(
        total_responses=total,
        motif_counts={m: counts[m] for m in ranked_ids},
        ranked_motifs=ranked,
        primary_motifs=tuple(ranked_ids[:primary_count]),
        framework_alignment=alignment,
        frameworks=frameworks,
        domains={d: tuple(ms) for d, ms in domains.items()},
        decision_stats=stats,
        reasoning=analyze_reasoning(responses) if include_reasoning else None,
        examples=tuple(examples),
    )
    log.debug(
        "profile_analyzed",
        responses=total,
        primary=list(profile.primary_motifs),
        alignment=alignment,
    )
    return profile
