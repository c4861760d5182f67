from .models import (
    DecisionStats,
    EthicalProfile,
    FrameworkShare,
    MotifFrequency,
    ReasoningExample,
    ReasoningSignals,
    Response,
)
from .session import Session, resolve_choice
from .analyzer import analyze, motif_shares, normalize_percentages
from .templates import TEMPLATES, GenerationConfig
from .generator import generate, list_templates, resolve_config, resolve_template
from .cache import WriteOnceCache

__all__ = [
    "DecisionStats",
    "EthicalProfile",
    "FrameworkShare",
    "MotifFrequency",
    "ReasoningExample",
    "ReasoningSignals",
    "Response",
    "Session",
    "resolve_choice",
    "analyze",
    "motif_shares",
    "normalize_percentages",
    "TEMPLATES",
    "GenerationConfig",
    "generate",
    "list_templates",
    "resolve_config",
    "resolve_template",
    "WriteOnceCache",
]
