from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import EthicalProfile, MotifFrequency


class GenerationConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    target_audience: Literal["personal", "technical"] = Field(default="personal", alias="targetAudience")
    complexity_level: Literal["essential", "nuanced", "comprehensive"] = Field(
        default="nuanced", alias="complexityLevel"
    )
    include_framework_alignment: bool = Field(default=True, alias="includeFrameworkAlignment")
    include_decision_patterns: bool = Field(default=True, alias="includeDecisionPatterns")

    def cache_key(self) -> tuple:
        return (
            self.target_audience,
            self.complexity_level,
            self.include_framework_alignment,
            self.include_decision_patterns,
        )


@dataclass(frozen=True)
class Template:
    template_id: str
    name: str
    description: str
    focus_areas: List[str]
    render: Callable[[EthicalProfile, GenerationConfig], List[str]]


# How many primary motifs each complexity level shows; None means all of them
MOTIFS_SHOWN: Dict[str, Optional[int]] = {"essential": 1, "nuanced": 3, "comprehensive": None}

BEST_EFFORT_NOTE = (
    "*Read from the wording of my written reasoning with keyword heuristics. "
    "Treat it as a rough signal, not a validated assessment.*"
)


# --- shared pieces ------------------------------------------------------------

def _framework_label(framework_id: str) -> str:
    return framework_id.replace("_", " ").title()


def _shown(profile: EthicalProfile, config: GenerationConfig) -> List[MotifFrequency]:
    limit = MOTIFS_SHOWN[config.complexity_level]
    primary = profile.primary
    return primary if limit is None else primary[:limit]


def _names(profile: EthicalProfile) -> Dict[str, str]:
    return {m.motif_id: m.name for m in profile.ranked_motifs}


def _tensions(motifs: List[MotifFrequency]):
    """Conflicting and reinforcing pairs among the given motifs, in rank order."""
    conflicts, synergies = [], []
    for i, first in enumerate(motifs):
        for second in motifs[i + 1:]:
            if second.motif_id in first.conflicts_with or first.motif_id in second.conflicts_with:
                conflicts.append((first, second))
            elif second.motif_id in first.synergies_with or first.motif_id in second.synergies_with:
                synergies.append((first, second))
    return conflicts, synergies


def _ranked_list(profile: EthicalProfile, config: GenerationConfig) -> str:
    lines = []
    for i, m in enumerate(_shown(profile, config), start=1):
        noun = "response" if m.count == 1 else "responses"
        lines.append(f"{i}. **{m.name}** ({m.percentage}% - {m.count} {noun})")
        lines.append(f"   {m.description}")
        if config.complexity_level != "essential" and m.domains:
            lines.append(f"   *Applied across: {', '.join(d.replace('_', ' ') for d in m.domains)}*")
        lines.append("")
    return "\n".join(lines).rstrip()


def _framework_names(profile: EthicalProfile) -> Dict[str, str]:
    names = {fid: _framework_label(fid) for fid in profile.framework_alignment}
    names.update({f.framework_id: f.name for f in profile.frameworks})
    return names


def _framework_lines(profile: EthicalProfile, config: GenerationConfig) -> str:
    names = _framework_names(profile)
    details = {f.framework_id: f for f in profile.frameworks}
    ordered = sorted(
        enumerate(profile.framework_alignment.items()),
        key=lambda item: (-item[1][1], item[0]),
    )
    lines = []
    for _, (fid, pct) in ordered:
        if pct <= 0:
            continue
        lines.append(f"- **{names[fid]}**: {pct}%")
        detail = details.get(fid)
        if config.complexity_level != "essential" and detail and detail.key_principle:
            source = f" ({detail.tradition})" if detail.tradition else ""
            lines.append(f"  *{detail.key_principle}*{source}")
    return "\n".join(lines)


def _key_principles(profile: EthicalProfile, config: GenerationConfig) -> str:
    """Behaviours of the leading motif; empty at essential level or when the catalog lists none."""
    top = profile.primary[0]
    if config.complexity_level == "essential" or not top.behavioral_indicators:
        return ""
    return "When making decisions, I tend to:\n\n" + "\n".join(f"- {b}" for b in top.behavioral_indicators)


def _reasoning_examples(profile: EthicalProfile, config: GenerationConfig) -> str:
    if config.complexity_level != "comprehensive" or not profile.examples:
        return ""
    blocks = []
    for i, ex in enumerate(profile.examples, start=1):
        lines = [f"### Dilemma {i}: {ex.title}", f"- **Choice:** Option {ex.chosen_option} - {ex.choice}"]
        if ex.reasoning:
            lines.append(f"- **Reasoning:** {ex.reasoning}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _decision_patterns(profile: EthicalProfile) -> str:
    stats = profile.decision_stats
    names = _names(profile)
    lines = [f"- **Consistency**: {round(stats.consistency * 100)}% of my choices share my leading motif"]
    if stats.average_difficulty is not None:
        lines.append(f"- **Average difficulty**: {stats.average_difficulty}/10")
    if stats.average_response_time is not None:
        lines.append(f"- **Average time to decide**: {round(stats.average_response_time / 1000)} seconds")
    if profile.reasoning and profile.reasoning.styles:
        lines.append(f"- **Reasoning style**: {', '.join(profile.reasoning.styles)}")
    if profile.domains:
        lines.append("- **By domain**:")
        for domain, motif_ids in profile.domains.items():
            lines.append(f"  - {domain.replace('_', ' ')}: {', '.join(names[m] for m in motif_ids)}")
    return "\n".join(lines)


def _contextual(profile: EthicalProfile) -> str:
    parts = []
    signals = profile.reasoning
    if signals and signals.responses_with_reasoning:
        lines = [BEST_EFFORT_NOTE, ""]
        if signals.dominant_pattern:
            lines.append(f"- **Dominant reasoning pattern**: {signals.dominant_pattern}")
        lines.append(f"- **Reasoning depth**: {signals.depth:.2f} across {signals.responses_with_reasoning} written explanations")
        if signals.decision_factors:
            lines.append(f"- **Factors I mention**: {', '.join(signals.decision_factors)}")
        if signals.acknowledges_tradeoffs:
            lines.append(f"- **Trade-offs acknowledged**: in {signals.acknowledges_tradeoffs} explanations")
        for phrase in signals.value_phrases:
            lines.append(f"> {phrase}")
        parts.append("### In My Own Words\n\n" + "\n".join(lines))

    conflicts, synergies = _tensions(profile.primary)
    if conflicts or synergies:
        lines = []
        for a, b in conflicts:
            lines.append(f"- **{a.name}** and **{b.name}** pull in different directions ({a.percentage}% vs {b.percentage}%)")
        for a, b in synergies:
            lines.append(f"- **{a.name}** reinforces **{b.name}**")
        parts.append("### Value Tensions\n\n" + "\n".join(lines))
    return "\n\n".join(parts)


def _instructions(profile: EthicalProfile, config: GenerationConfig, limit: Optional[int] = None) -> List[str]:
    shown = _shown(profile, config)
    bullets = []
    for m in shown[:limit] if limit else shown:
        guidance = m.ai_guidance or "Apply this approach when it is relevant to the decision."
        bullets.append(f"**Prioritize {m.name}**: {guidance}")
    conflicts, _ = _tensions(shown)
    for a, b in conflicts:
        bullets.append(
            f"**Resolve {a.name} vs {b.name}** by my demonstrated preference: "
            f"{a.percentage}% against {b.percentage}%."
        )
    if limit is None:
        bullets.append("**Be transparent** about your reasoning and the trade-offs you considered.")
    bullets.append("**Ask for clarification** when a dilemma is not covered by these patterns.")
    return bullets


def _lead_in(config: GenerationConfig) -> str:
    if config.target_audience == "technical":
        return "When acting on this user's behalf:"
    return "When assisting me, please:"


# --- templates ----------------------------------------------------------------

def render_standard(profile: EthicalProfile, config: GenerationConfig) -> List[str]:
    top = profile.primary[0]
    sections = [
        "# My Values",
        "## Core Ethical Framework\n\n"
        f"Based on my responses to {profile.total_responses} ethical dilemmas, my decision-making "
        f"is primarily guided by **{top.name}**.\n\n{top.description}",
        "## Primary Moral Motifs\n\n" + _ranked_list(profile, config),
    ]
    principles = _key_principles(profile, config)
    if principles:
        sections.append("## Key Principles\n\n" + principles)
    if config.include_framework_alignment:
        sections.append("## Framework Alignment\n\n" + _framework_lines(profile, config))
    if config.include_decision_patterns:
        sections.append("## Decision Patterns\n\n" + _decision_patterns(profile))
    examples = _reasoning_examples(profile, config)
    if examples:
        sections.append("## Reasoning Examples\n\n" + examples)
    if config.complexity_level == "comprehensive":
        contextual = _contextual(profile)
        if contextual:
            sections.append("## Contextual Analysis\n\n" + contextual)
    bullets = _instructions(profile, config)
    sections.append(
        "## Instructions for AI Systems\n\n" + _lead_in(config) + "\n\n"
        + "\n".join(f"{i}. {b}" for i, b in enumerate(bullets, start=1))
    )
    return sections


def render_narrative(profile: EthicalProfile, config: GenerationConfig) -> List[str]:
    top = profile.primary[0]
    shown = _shown(profile, config)
    sections = [
        "# My Ethical Journey",
        "## Who I Am\n\n"
        f"Through {profile.total_responses} moral choices, I've found that my ethical compass points "
        f"toward **{top.name}**. In {top.percentage}% of my decisions I was drawn to it.\n\n{top.description}",
    ]
    story = ["## The Values I Hold", ""]
    for m in shown:
        story.append(f"**{m.name}** ({m.percentage}% of decisions): {m.description}")
        story.append("")
    if len(shown) > 1 and config.complexity_level != "essential":
        story.append(
            "When these values conflict, I don't abandon one for another. I look for a path that "
            "honors several commitments, even when that means accepting a difficult trade-off."
        )
    sections.append("\n".join(story).rstrip())
    principles = _key_principles(profile, config)
    if principles:
        sections.append("## Key Principles\n\n" + principles)
    if config.include_framework_alignment:
        sections.append("## The Traditions I Echo\n\n" + _framework_lines(profile, config))
    if config.include_decision_patterns:
        sections.append("## How I Decide\n\n" + _decision_patterns(profile))
    examples = _reasoning_examples(profile, config)
    if examples:
        sections.append("## Choices I Have Made\n\n" + examples)
    if config.complexity_level == "comprehensive":
        contextual = _contextual(profile)
        if contextual:
            sections.append("## Beneath the Choices\n\n" + contextual)
    bullets = _instructions(profile, config)
    sections.append(
        "## Guidance for AI Partners\n\n" + _lead_in(config) + "\n\n"
        + "\n".join(f"- {b}" for b in bullets)
    )
    return sections


def render_minimal(profile: EthicalProfile, config: GenerationConfig) -> List[str]:
    top = profile.primary[0]
    names = _framework_names(profile)
    core = f"## Core Principle\n\n**{top.name}** - {top.description}"
    if config.complexity_level != "essential" and top.behavioral_indicators:
        core += "\n\n**I tend to**: " + "; ".join(top.behavioral_indicators)
    framework = ""
    if config.include_framework_alignment:
        framework = "\n\n**Frameworks**: " + ", ".join(
            f"{names[fid]} {pct}%"
            for fid, pct in sorted(profile.framework_alignment.items(), key=lambda kv: -kv[1])
            if pct > 0
        )
    decision = ""
    if config.include_decision_patterns:
        decision = f"\n\n**Consistency**: {round(profile.decision_stats.consistency * 100)}%"
    sections = [
        "# My Values",
        core,
        "## Decision Framework\n\n" + "\n".join(
            f"{i}. **{m.name}** ({m.percentage}%): {m.description}"
            for i, m in enumerate(_shown(profile, config), start=1)
        ) + framework + decision,
    ]
    examples = _reasoning_examples(profile, config)
    if examples:
        sections.append("## Examples\n\n" + examples)
    sections.append("## AI Instructions\n\n" + "\n".join(f"- {b}" for b in _instructions(profile, config, limit=1)))
    return sections


def render_technical(profile: EthicalProfile, config: GenerationConfig) -> List[str]:
    rows = ["| Rank | Motif | Category | Count | Share |", "| --- | --- | --- | --- | --- |"]
    for i, m in enumerate(_shown(profile, config), start=1):
        rows.append(f"| {i} | {m.name} (`{m.motif_id}`) | {m.category} | {m.count} | {m.percentage}% |")
    descriptions = "\n".join(f"- **{m.motif_id}**: {m.description}" for m in _shown(profile, config))
    sections = [
        "# Values Specification",
        "## Profile\n\n"
        f"- Responses analyzed: {profile.total_responses}\n"
        f"- Leading motif: `{profile.primary[0].motif_id}`\n"
        f"- Consistency: {profile.decision_stats.consistency:.2f}",
        "## Motif Ranking\n\n" + "\n".join(rows) + "\n\n" + descriptions,
    ]
    principles = _key_principles(profile, config)
    if principles:
        sections.append("## Key Principles\n\n" + principles)
    if config.include_framework_alignment:
        names = _framework_names(profile)
        principles_by_id = {f.framework_id: f.key_principle or "" for f in profile.frameworks}
        table = ["| Framework | Alignment | Key principle |", "| --- | --- | --- |"]
        for fid, pct in profile.framework_alignment.items():
            table.append(f"| {names[fid]} (`{fid}`) | {pct}% | {principles_by_id.get(fid, '')} |")
        sections.append("## Framework Alignment\n\n" + "\n".join(table))
    if config.include_decision_patterns:
        sections.append("## Decision Patterns\n\n" + _decision_patterns(profile))
    if config.complexity_level == "comprehensive":
        patterns = "\n".join(
            f"- `{m.motif_id}`: {m.logical_pattern}" for m in _shown(profile, config) if m.logical_pattern
        )
        if patterns:
            sections.append("## Decision Logic\n\n" + patterns)
        examples = _reasoning_examples(profile, config)
        if examples:
            sections.append("## Reasoning Examples\n\n" + examples)
        contextual = _contextual(profile)
        if contextual:
            sections.append("## Contextual Analysis\n\n" + contextual)
    bullets = _instructions(profile, config)
    sections.append(
        "## Operating Instructions\n\n" + _lead_in(config) + "\n\n"
        + "\n".join(f"{i}. {b}" for i, b in enumerate(bullets, start=1))
    )
    return sections


TEMPLATES: Dict[str, Template] = {
    t.template_id: t
    for t in (
        Template(
            template_id="standard",
            name="Standard",
            description="Ranked motifs, framework alignment and numbered AI instructions",
            focus_areas=["motifs", "frameworks", "ai-instructions"],
            render=render_standard,
        ),
        Template(
            template_id="narrative",
            name="Narrative",
            description="First-person story of the values behind the choices",
            focus_areas=["storytelling", "character", "ai-instructions"],
            render=render_narrative,
        ),
        Template(
            template_id="minimal",
            name="Minimal",
            description="Short directive block for tight system prompts",
            focus_areas=["brevity", "actionability"],
            render=render_minimal,
        ),
        Template(
            template_id="technical",
            name="Technical",
            description="Tables and motif ids for developers wiring values into an agent",
            focus_areas=["tables", "identifiers", "decision-logic"],
            render=render_technical,
        ),
    )
}
