from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from valuesmd.catalog import Catalog, get_catalog
from valuesmd.config import get_settings
from valuesmd.core import Response
from valuesmd.database import crud, schemas
from valuesmd.database.database import get_db
from valuesmd.errors import DataIntegrityError
from valuesmd.observability import get_logger

log = get_logger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["sessions"],
)

def expected_count(catalog: Catalog) -> int:
    """Responses needed to complete a session; never more than the catalog holds."""
    return min(get_settings().dilemma_count, len(catalog.dilemmas))

async def _store(db: AsyncSession, db_session, responses, catalog: Catalog, expected: int) -> bool:
    """Validate, insert and commit; returns True when the session became complete."""
    session_id = db_session.id
    try:
        completed_now = await crud.record_responses(db, db_session, responses, catalog, expected)
        await db.commit()
    except IntegrityError:
        # Another request stored the same dilemma for this session first
        await db.rollback()
        raise DataIntegrityError(
            f"session {session_id} already has a response for one of these dilemmas",
            session_id=session_id,
        )
    return completed_now

@router.post("/sessions", response_model=schemas.SessionView, status_code=status.HTTP_201_CREATED)
async def create_session_endpoint(
    body: Optional[schemas.SessionCreate] = None,
    db: AsyncSession = Depends(get_db),
    catalog: Catalog = Depends(get_catalog),
):
    """
    Open a new session. The client may supply its own session id.
    """
    session_id = body.session_id if body else None
    if session_id and await crud.get_session(db, session_id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Session already exists")
    db_session = await crud.create_session(db, session_id=session_id)
    await db.commit()
    log.info("session_created", session_id=db_session.id)
    return crud.session_view(db_session, expected_count(catalog))

@router.get("/sessions/{session_id}", response_model=schemas.SessionView)
async def read_session_endpoint(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    catalog: Catalog = Depends(get_catalog),
):
    db_session = await crud.get_session(db, session_id)
    if db_session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return crud.session_view(db_session, expected_count(catalog))

@router.post("/sessions/{session_id}/responses", response_model=schemas.RecordResult)
async def record_response_endpoint(
    session_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db),
    catalog: Catalog = Depends(get_catalog),
):
    """
    Record one answer. Rejected with 409 once the session is complete.
    """
    db_session = await crud.get_session(db, session_id)
    if db_session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

    expected = expected_count(catalog)
    completed_now = await _store(db, db_session, [response], catalog, expected)

    log.info(
        "response_recorded",
        session_id=session_id,
        dilemma_id=response.dilemma_id,
        answered=len(db_session.responses),
    )
    if completed_now:
        log.info("session_completed", session_id=session_id, responses=len(db_session.responses))
    return schemas.RecordResult(
        session=crud.session_view(db_session, expected),
        just_completed=completed_now,
    )

@router.post("/responses", response_model=schemas.BulkResponsesResult)
async def submit_responses_endpoint(
    body: schemas.BulkResponsesRequest,
    db: AsyncSession = Depends(get_db),
    catalog: Catalog = Depends(get_catalog),
):
    """
    Store a whole run at once. Idempotent per session: if the session already
    has responses nothing is inserted.
    """
    expected = expected_count(catalog)
    db_session = await crud.get_session(db, body.session_id)
    if db_session is not None and db_session.responses:
        log.info("responses_already_stored", session_id=body.session_id, existing=len(db_session.responses))
        return schemas.BulkResponsesResult(
            session_id=db_session.id,
            inserted=0,
            existing=len(db_session.responses),
            completed=db_session.completed,
        )

    if db_session is None:
        db_session = await crud.create_session(db, session_id=body.session_id)
    completed_now = await _store(db, db_session, body.responses, catalog, expected)

    log.info("response_recorded", session_id=body.session_id, inserted=len(body.responses))
    if completed_now:
        log.info("session_completed", session_id=body.session_id, responses=len(db_session.responses))
    return schemas.BulkResponsesResult(
        session_id=db_session.id,
        inserted=len(body.responses),
        completed=db_session.completed,
    )
