from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

CHOICES: Tuple[str, ...] = ("A", "B", "C", "D")


class Framework(BaseModel):
    """A named ethical tradition bucket that motifs contribute to."""

    model_config = ConfigDict(frozen=True)

    framework_id: str
    name: str
    tradition: Optional[str] = None
    key_principle: Optional[str] = None


class Motif(BaseModel):
    model_config = ConfigDict(frozen=True)

    motif_id: str
    name: str
    category: str
    subcategory: Optional[str] = None
    description: str
    weight: float = Field(default=1.0, ge=0.0)
    conflicts_with: FrozenSet[str] = frozenset()
    synergies_with: FrozenSet[str] = frozenset()
    # framework_id -> contribution weight
    frameworks: Dict[str, float] = Field(default_factory=dict)
    behavioral_indicators: Tuple[str, ...] = ()
    logical_pattern: Optional[str] = None
    ai_guidance: Optional[str] = None

    @field_validator("conflicts_with", "synergies_with", mode="before")
    @classmethod
    def _relations_as_set(cls, v):
        if v is None:
            return frozenset()
        if isinstance(v, str):
            raise ValueError("relations must be a list of motif ids, not a delimited string")
        return v

    @field_validator("frameworks")
    @classmethod
    def _positive_contributions(cls, v: Dict[str, float]) -> Dict[str, float]:
        for framework_id, weight in v.items():
            if weight <= 0:
                raise ValueError(f"framework contribution {framework_id!r} must be positive, got {weight}")
        return v


class Dilemma(BaseModel):
    model_config = ConfigDict(frozen=True)

    dilemma_id: str
    title: str
    scenario: str
    domain: str = "general"
    difficulty: Optional[int] = Field(default=None, ge=1, le=10)
    choices: Dict[str, str]
    # choice letter -> motif id; a letter may be left unmapped
    motifs: Dict[str, str] = Field(default_factory=dict)
    stakeholders: Tuple[str, ...] = ()

    @field_validator("choices", "motifs", mode="before")
    @classmethod
    def _upper_letters(cls, v):
        if isinstance(v, dict):
            return {str(k).upper(): val for k, val in v.items() if val}
        return v

    @model_validator(mode="after")
    def _four_choices(self) -> "Dilemma":
        if set(self.choices) != set(CHOICES):
            raise ValueError(f"dilemma {self.dilemma_id} must define exactly choices A-D")
        stray = set(self.motifs) - set(CHOICES)
        if stray:
            raise ValueError(f"dilemma {self.dilemma_id} maps unknown choices {sorted(stray)}")
        return self

    def motif_for(self, option: str) -> Optional[str]:
        return self.motifs.get(option.upper())


class Catalog(BaseModel):
    """Immutable reference data. List order is declaration order."""

    model_config = ConfigDict(frozen=True)

    frameworks: Tuple[Framework, ...]
    motifs: Tuple[Motif, ...]
    dilemmas: Tuple[Dilemma, ...]

    @model_validator(mode="after")
    def _check_references(self) -> "Catalog":
        framework_ids = [f.framework_id for f in self.frameworks]
        motif_ids = [m.motif_id for m in self.motifs]
        dilemma_ids = [d.dilemma_id for d in self.dilemmas]
        for label, ids in (("framework", framework_ids), ("motif", motif_ids), ("dilemma", dilemma_ids)):
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            if dupes:
                raise ValueError(f"duplicate {label} ids: {dupes}")

        known_frameworks = set(framework_ids)
        known_motifs = set(motif_ids)
        for motif in self.motifs:
            if not motif.frameworks:
                raise ValueError(f"motif {motif.motif_id} contributes to no framework")
            unknown = set(motif.frameworks) - known_frameworks
            if unknown:
                raise ValueError(f"motif {motif.motif_id} references unknown frameworks {sorted(unknown)}")
            related = motif.conflicts_with | motif.synergies_with
            if motif.motif_id in related:
                raise ValueError(f"motif {motif.motif_id} cannot relate to itself")
            unknown = related - known_motifs
            if unknown:
                raise ValueError(f"motif {motif.motif_id} relates to unknown motifs {sorted(unknown)}")
        for dilemma in self.dilemmas:
            unknown = set(dilemma.motifs.values()) - known_motifs
            if unknown:
                raise ValueError(f"dilemma {dilemma.dilemma_id} maps to unknown motifs {sorted(unknown)}")
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "Catalog":
        return cls.model_validate({
            "frameworks": data.get("frameworks", []),
            "motifs": data.get("motifs", []),
            "dilemmas": data.get("dilemmas", []),
        })

    # Lookups are rebuilt on demand; the catalog is small and frozen.

    def motif(self, motif_id: str) -> Optional[Motif]:
        for m in self.motifs:
            if m.motif_id == motif_id:
                return m
        return None

    def dilemma(self, dilemma_id: str) -> Optional[Dilemma]:
        for d in self.dilemmas:
            if d.dilemma_id == dilemma_id:
                return d
        return None

    def motif_order(self, motif_id: str) -> int:
        for i, m in enumerate(self.motifs):
            if m.motif_id == motif_id:
                return i
        raise KeyError(motif_id)

    @property
    def framework_ids(self) -> List[str]:
        return [f.framework_id for f in self.frameworks]
