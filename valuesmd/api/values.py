import datetime
from typing import List, Tuple

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from valuesmd.catalog import Catalog, get_catalog
from valuesmd.config import get_settings
from valuesmd.core import (
    EthicalProfile,
    GenerationConfig,
    Response,
    WriteOnceCache,
    analyze,
    generate,
    resolve_config,
    resolve_template,
)
from valuesmd.database import crud
from valuesmd.database.database import get_db
from valuesmd.errors import EmptyInputError
from valuesmd.observability import get_logger
from . import schemas

log = get_logger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["values"],
)

# (session_id, template_id, config key) -> (profile, markdown); completed sessions only
profile_cache: "WriteOnceCache[Tuple[EthicalProfile, str]]" = WriteOnceCache(get_settings().profile_cache_size)

def _render(responses: List[Response], catalog: Catalog, template_id: str,
            config: GenerationConfig) -> Tuple[EthicalProfile, str]:
    profile = analyze(responses, catalog)
    return profile, generate(profile, template_id, config)

async def _responses_for(db: AsyncSession, session_id: str):
    db_session = await crud.get_session(db, session_id)
    if db_session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return db_session, crud.stored_responses(db_session)

@router.post("/generate-values", response_model=schemas.GenerateValuesResponse)
async def generate_values_endpoint(
    req: schemas.GenerateValuesRequest,
    db: AsyncSession = Depends(get_db),
    catalog: Catalog = Depends(get_catalog),
):
    """
    Build a VALUES.md document from submitted responses, or from the stored
    responses of a session when none are submitted.
    """
    # Template and options are rejected before any analysis happens
    template = resolve_template(req.template)
    config = resolve_config(req.config)

    cached = False
    if req.responses is not None:
        profile, markdown = _render(req.responses, catalog, template.template_id, config)
    elif req.session_id:
        db_session, responses = await _responses_for(db, req.session_id)
        if not responses:
            raise EmptyInputError(f"session {req.session_id} has no responses yet", session_id=req.session_id)
        if db_session.completed:
            key = (db_session.id, template.template_id, config.cache_key())

            async def _produce():
                return _render(responses, catalog, template.template_id, config)

            (profile, markdown), cached = await profile_cache.get_or_compute(key, _produce)
        else:
            profile, markdown = _render(responses, catalog, template.template_id, config)
    else:
        raise EmptyInputError("provide responses or a sessionId")

    log.info(
        "values_document_served",
        session_id=req.session_id,
        template=template.template_id,
        responses=profile.total_responses,
        cached=cached,
    )
    return schemas.GenerateValuesResponse(
        values_markdown=markdown,
        metadata=schemas.ValuesMetadata(
            primary_motifs=[
                schemas.PrimaryMotif(id=m.motif_id, name=m.name, count=m.count, percentage=m.percentage)
                for m in profile.primary
            ],
            framework_alignment=profile.framework_alignment,
            total_responses=profile.total_responses,
            generated_at=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            template=template.template_id,
            config=config.model_dump(by_alias=True),
            session_id=req.session_id,
            cached=cached,
        ),
    )
