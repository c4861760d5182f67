from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Response(BaseModel):
    """One answered dilemma.

    ``chosen_option`` is only normalised here. Whether it names a mapped
    choice is a catalog question, answered by ``Session.record`` and
    ``analyze`` with a ``DataIntegrityError``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dilemma_id: str = Field(alias="dilemmaId")
    chosen_option: str = Field(alias="chosenOption")
    reasoning: Optional[str] = None
    response_time: Optional[int] = Field(default=None, ge=0, alias="responseTime")
    perceived_difficulty: Optional[int] = Field(default=None, ge=1, le=10, alias="perceivedDifficulty")

    @field_validator("chosen_option")
    @classmethod
    def _normalise_option(cls, v: str) -> str:
        return v.strip().upper()


class MotifFrequency(BaseModel):
    model_config = ConfigDict(frozen=True)

    motif_id: str
    name: str
    count: int
    percentage: int
    domains: Tuple[str, ...] = ()
    # Copied from the catalog so documents can be rendered from the profile alone
    category: str = ""
    description: str = ""
    weight: float = 1.0
    ai_guidance: Optional[str] = None
    logical_pattern: Optional[str] = None
    conflicts_with: Tuple[str, ...] = ()
    synergies_with: Tuple[str, ...] = ()
    behavioral_indicators: Tuple[str, ...] = ()


class FrameworkShare(BaseModel):
    model_config = ConfigDict(frozen=True)

    framework_id: str
    name: str
    percentage: int
    tradition: Optional[str] = None
    key_principle: Optional[str] = None


class ReasoningExample(BaseModel):
    """One answered dilemma quoted in the document, with the user's own reasoning if given."""

    model_config = ConfigDict(frozen=True)

    dilemma_id: str
    title: str
    chosen_option: str
    choice: str
    motif_id: str
    reasoning: Optional[str] = None


class ReasoningSignals(BaseModel):
    """Best-effort reading of the free-text reasoning.

    These are keyword heuristics, not validated psychometrics; they only
    decorate the document and never affect motif counts.
    """

    model_config = ConfigDict(frozen=True)

    best_effort: bool = True
    responses_with_reasoning: int = 0
    depth: float = 0.0
    dominant_pattern: Optional[str] = None
    styles: Tuple[str, ...] = ()
    decision_factors: Tuple[str, ...] = ()
    value_phrases: Tuple[str, ...] = ()
    acknowledges_tradeoffs: int = 0


class DecisionStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    consistency: float
    average_difficulty: Optional[float] = None
    average_response_time: Optional[int] = None


class EthicalProfile(BaseModel):
    """Derived, read-only result of ``analyze``."""

    model_config = ConfigDict(frozen=True)

    total_responses: int
    # motif_id -> count, in rank order
    motif_counts: Dict[str, int]
    ranked_motifs: Tuple[MotifFrequency, ...]
    primary_motifs: Tuple[str, ...]
    # framework_id -> integer percent, declaration order, sums to 100
    framework_alignment: Dict[str, int]
    # domain -> motif ids chosen in that domain, first-seen order
    domains: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)
    # framework_alignment with catalog names and principles, same order
    frameworks: Tuple[FrameworkShare, ...] = ()
    decision_stats: DecisionStats
    reasoning: Optional[ReasoningSignals] = None
    # the first answered dilemmas, in response order
    examples: Tuple[ReasoningExample, ...] = ()

    @property
    def primary(self) -> List[MotifFrequency]:
        wanted = set(self.primary_motifs)
        return [m for m in self.ranked_motifs if m.motif_id in wanted]
