from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from valuesmd.core import Response

CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# --- Catalog views ---

class DilemmaView(BaseModel):
    """A dilemma as shown to the user; the choice-to-motif mapping stays server side."""
    dilemma_id: str
    title: str
    scenario: str
    domain: str
    difficulty: Optional[int] = None
    choices: Dict[str, str]
    stakeholders: List[str] = []

    model_config = CAMEL

class MotifView(BaseModel):
    motif_id: str
    name: str
    category: str
    subcategory: Optional[str] = None
    description: str
    frameworks: Dict[str, float]
    conflicts_with: List[str] = []
    synergies_with: List[str] = []

    model_config = CAMEL

class TemplateView(BaseModel):
    id: str
    name: str
    description: str
    focus_areas: List[str]

    model_config = CAMEL

# --- Values generation ---

class GenerateValuesRequest(BaseModel):
    responses: Optional[List[Response]] = None
    session_id: Optional[str] = None
    template: Optional[str] = None
    # Validated by the generator so bad options surface as configuration errors
    config: Optional[Dict[str, Any]] = None

    model_config = CAMEL

class PrimaryMotif(BaseModel):
    id: str
    name: str
    count: int
    percentage: int

    model_config = CAMEL

class ValuesMetadata(BaseModel):
    primary_motifs: List[PrimaryMotif]
    framework_alignment: Dict[str, int]
    total_responses: int
    generated_at: str
    template: str
    config: Dict[str, Any]
    session_id: Optional[str] = None
    cached: bool = False

    model_config = CAMEL

class GenerateValuesResponse(BaseModel):
    success: bool = True
    values_markdown: str
    metadata: ValuesMetadata

    model_config = CAMEL
