import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from valuesmd.core.models import Response

# Wire format is camelCase; Python code uses the snake_case field names.
CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class StoredResponse(BaseModel):
    dilemma_id: str
    chosen_option: str
    reasoning: Optional[str] = None
    response_time: Optional[int] = None
    perceived_difficulty: Optional[int] = None
    created_at: Optional[datetime.datetime] = None

    model_config = CAMEL

    def to_core(self) -> Response:
        return Response(
            dilemma_id=self.dilemma_id,
            chosen_option=self.chosen_option,
            reasoning=self.reasoning,
            response_time=self.response_time,
            perceived_difficulty=self.perceived_difficulty,
        )

class SessionCreate(BaseModel):
    session_id: Optional[str] = Field(default=None, min_length=1, max_length=64)

    model_config = CAMEL

class SessionView(BaseModel):
    session_id: str
    completed: bool
    expected_count: int
    created_at: Optional[datetime.datetime] = None
    completed_at: Optional[datetime.datetime] = None
    responses: List[StoredResponse] = []

    model_config = CAMEL

class RecordResult(BaseModel):
    session: SessionView
    just_completed: bool

    model_config = CAMEL

class BulkResponsesRequest(BaseModel):
    session_id: str = Field(min_length=1, max_length=64)
    responses: List[Response] = Field(min_length=1)

    model_config = CAMEL

class BulkResponsesResult(BaseModel):
    success: bool = True
    session_id: str
    inserted: int
    existing: int = 0
    completed: bool

    model_config = CAMEL
