import pytest
import pytest_asyncio

from valuesmd.database import crud
from valuesmd.database.database import Base, SessionLocal, engine
from valuesmd.errors import SessionClosedError, SessionConflictError


@pytest_asyncio.fixture
async def tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


async def _open_session() -> str:
    async with SessionLocal() as db:
        db_session = await crud.create_session(db)
        await db.commit()
        return db_session.id


@pytest.mark.asyncio
async def test_record_claims_row_and_counts(tables, small_catalog, make_answers):
    session_id = await _open_session()

    async with SessionLocal() as db:
        db_session = await crud.get_session(db, session_id)
        completed = await crud.record_responses(
            db, db_session, make_answers(("D1", "A"), ("D2", "B")), small_catalog, 3
        )
        await db.commit()

    assert completed is False
    async with SessionLocal() as db:
        stored = await crud.get_session(db, session_id)
        assert stored.response_count == 2
        assert [r.position for r in stored.responses] == [0, 1]
        assert stored.completed is False


@pytest.mark.asyncio
async def test_second_writer_for_last_slot_gets_session_closed(tables, small_catalog, make_answers):
    """
    Two requests read the same open session with one slot left. The first to
    write completes it; the other must not add a response to the completed session.
    """
    session_id = await _open_session()

    async with SessionLocal() as first, SessionLocal() as second:
        mine = await crud.get_session(first, session_id)
        theirs = await crud.get_session(second, session_id)

        assert await crud.record_responses(first, mine, make_answers(("D1", "A")), small_catalog, 1) is True
        await first.commit()

        with pytest.raises(SessionClosedError):
            await crud.record_responses(second, theirs, make_answers(("D2", "B")), small_catalog, 1)
        await second.rollback()

    async with SessionLocal() as db:
        stored = await crud.get_session(db, session_id)
        assert stored.completed is True
        assert stored.completed_at is not None
        assert [r.dilemma_id for r in stored.responses] == ["D1"]


@pytest.mark.asyncio
async def test_stale_writer_on_open_session_gets_conflict(tables, small_catalog, make_answers):
    session_id = await _open_session()

    async with SessionLocal() as first, SessionLocal() as second:
        mine = await crud.get_session(first, session_id)
        theirs = await crud.get_session(second, session_id)

        await crud.record_responses(first, mine, make_answers(("D1", "A")), small_catalog, 3)
        await first.commit()

        with pytest.raises(SessionConflictError) as excinfo:
            await crud.record_responses(second, theirs, make_answers(("D2", "B")), small_catalog, 3)
        await second.rollback()

    assert excinfo.value.status_code == 409
    assert excinfo.value.kind == "session_conflict_error"
    async with SessionLocal() as db:
        stored = await crud.get_session(db, session_id)
        assert stored.response_count == 1
        assert [r.dilemma_id for r in stored.responses] == ["D1"]
