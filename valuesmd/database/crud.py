import datetime
import uuid
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from valuesmd.catalog import Catalog
from valuesmd.core import Response, Session
from valuesmd.errors import SessionClosedError, SessionConflictError
from . import models, schemas

async def get_session(db: AsyncSession, session_id: str) -> Optional[models.ResponseSession]:
    query = (
        select(models.ResponseSession)
        .options(selectinload(models.ResponseSession.responses))
        .filter(models.ResponseSession.id == session_id)
    )
    result = await db.execute(query)
    return result.scalars().first()

async def create_session(db: AsyncSession, session_id: Optional[str] = None) -> models.ResponseSession:
    """Creates a new, open session. Does not commit."""
    db_session = models.ResponseSession(id=session_id or str(uuid.uuid4()), completed=False, response_count=0, responses=[])
    db.add(db_session)
    await db.flush()
    return db_session

def stored_response(row: models.UserResponse) -> schemas.StoredResponse:
    return schemas.StoredResponse(
        dilemma_id=row.dilemma_id,
        chosen_option=row.chosen_option,
        reasoning=row.reasoning,
        response_time=row.response_time,
        perceived_difficulty=row.perceived_difficulty,
        created_at=row.created_at,
    )

def stored_responses(db_session: models.ResponseSession) -> List[Response]:
    return [stored_response(r).to_core() for r in db_session.responses]

def session_view(db_session: models.ResponseSession, expected_count: int) -> schemas.SessionView:
    return schemas.SessionView(
        session_id=db_session.id,
        completed=db_session.completed,
        expected_count=expected_count,
        created_at=db_session.created_at,
        completed_at=db_session.completed_at,
        responses=[stored_response(r) for r in db_session.responses],
    )

async def record_responses(
    db: AsyncSession,
    db_session: models.ResponseSession,
    responses: Sequence[Response],
    catalog: Catalog,
    expected_count: int,
) -> bool:
    """
    Validates responses through the domain Session and adds them in order.
    Returns True if the session became complete. Nothing is added when any
    response is rejected. Does not commit.

    The session row is claimed with a conditional UPDATE on the response
    count that was read, so two requests racing for the same slots cannot
    both succeed: the loser sees zero affected rows and gets
    SessionClosedError (session finished meanwhile) or SessionConflictError.
    """
    domain = Session(
        db_session.id,
        expected_count,
        responses=stored_responses(db_session),
        completed=db_session.completed,
    )
    start = len(domain.snapshot())
    completed_now = False
    for response in responses:
        completed_now = domain.record(response, catalog) or completed_now

    count = start + len(responses)
    completed_at = datetime.datetime.now(datetime.timezone.utc) if completed_now else db_session.completed_at
    claim = (
        update(models.ResponseSession)
        .where(
            models.ResponseSession.id == db_session.id,
            models.ResponseSession.completed.is_(False),
            models.ResponseSession.response_count == start,
        )
        .values(response_count=count, completed=completed_now, completed_at=completed_at)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(claim)
    if result.rowcount == 0:
        completed = await db.scalar(
            select(models.ResponseSession.completed).where(models.ResponseSession.id == db_session.id)
        )
        if completed:
            raise SessionClosedError(f"session {db_session.id} is already complete", session_id=db_session.id)
        raise SessionConflictError(
            f"session {db_session.id} was changed by another request; reload and retry",
            session_id=db_session.id,
        )
    set_committed_value(db_session, "response_count", count)
    set_committed_value(db_session, "completed", completed_now)
    set_committed_value(db_session, "completed_at", completed_at)

    for offset, response in enumerate(responses):
        # appending keeps the loaded collection current for the caller
        db_session.responses.append(models.UserResponse(
            position=start + offset,
            dilemma_id=response.dilemma_id,
            chosen_option=response.chosen_option,
            reasoning=response.reasoning,
            response_time=response.response_time,
            perceived_difficulty=response.perceived_difficulty,
        ))
    await db.flush()
    return completed_now
