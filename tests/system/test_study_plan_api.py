"""
System test: study plan API in-process with SQLite.

Uses a temp file DB so the app's per-call sessions and the fixtures share
one database.
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from learnpath.api.deps import get_study_plan_service
from learnpath.database import build_engine, build_session_maker, get_session_maker
from learnpath.engines.study_plan.service import StudyPlanService
from learnpath.kernel.models import Base, Category, Skill, Tutorial, TutorialProgress, generate_uuid
from learnpath.main import app
from tests.fakes import EmptySkillTagger, FakeContentRepository, FakeProgressRepository

API = "/api/v1"


@pytest_asyncio.fixture
async def session_maker():
    with tempfile.TemporaryDirectory() as tmp:
        engine = build_engine(f"sqlite+aiosqlite:///{Path(tmp) / 'api.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        yield build_session_maker(engine)
        await engine.dispose()


@pytest_asyncio.fixture
async def client(session_maker):
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    app.state.study_plan_service = None
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_session_maker, None)
        app.state.study_plan_service = None


@pytest_asyncio.fixture
async def tutorial_ids(session_maker):
    html = Category(id=generate_uuid(), slug="html", title="HTML")
    async with session_maker() as session:
        session.add(html)
        session.add(Skill(slug="html-basics", name="HTML Basics", category="html", keywords=["html"]))
        await session.commit()

    intro = Tutorial(id=generate_uuid(), slug="html-intro", title="Intro to HTML", order=1, category_id=html.id)
    forms = Tutorial(id=generate_uuid(), slug="html-forms", title="HTML Forms", order=2, category_id=html.id)
    async with session_maker() as session:
        session.add_all([intro, forms])
        await session.commit()
    return {"intro": intro.id, "forms": forms.id}


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_get_study_plan(client, tutorial_ids):
    response = await client.get(f"{API}/study-plan")

    assert response.status_code == 200
    body = response.json()
    assert len(body["phases"]) == 8
    html = body["phases"][0]
    assert html["id"] == "html-foundations"
    assert [s["id"] for s in html["steps"]] == ["tutorial-html-intro", "tutorial-html-forms"]
    assert html["steps"][1]["prerequisites"] == ["tutorial-html-intro"]
    assert html["steps"][0]["skills"] == ["HTML Basics"]
    assert html["steps"][0]["difficulty"] == "beginner"
    assert body["total_steps"] == 2
    assert body["total_hours"] == 6.0
    assert body["total_weeks"] == 1


@pytest.mark.asyncio
async def test_progress_before_sync_is_404(client, tutorial_ids):
    response = await client.get(f"{API}/users/u1/study-plan/progress")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_sync_then_read_progress(client, session_maker, tutorial_ids):
    async with session_maker() as session:
        session.add(TutorialProgress(user_id="u1", tutorial_id=tutorial_ids["intro"], status="COMPLETED"))
        await session.commit()

    synced = await client.post(f"{API}/users/u1/study-plan/sync")

    assert synced.status_code == 200
    body = synced.json()
    assert body["completed_steps"] == ["tutorial-html-intro"]
    assert body["current_step_id"] == "tutorial-html-forms"
    assert body["current_phase_id"] == "html-foundations"
    assert body["total_progress_percentage"] == 50
    assert body["is_complete"] is False
    assert body["skills_learned"] == ["HTML Basics"]
    assert body["phases"][0] == {"phase_id": "html-foundations", "progress": 50.0, "completed": False}

    stored = await client.get(f"{API}/users/u1/study-plan/progress")
    assert stored.status_code == 200
    assert stored.json()["completed_steps"] == ["tutorial-html-intro"]
    assert stored.json()["started_at"] == body["started_at"]


@pytest.mark.asyncio
async def test_overlong_user_id_rejected(client):
    response = await client.post(f"{API}/users/{'x' * 65}/study-plan/sync")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_content_failure_is_503(client):
    class BrokenContent(FakeContentRepository):
        async def list_projects(self):
            raise ConnectionError("content store down")

    service = StudyPlanService(
        BrokenContent(), FakeProgressRepository(), EmptySkillTagger(), plan_id="p", title="P"
    )
    app.dependency_overrides[get_study_plan_service] = lambda: service
    try:
        plan_response = await client.get(f"{API}/study-plan")
        sync_response = await client.post(f"{API}/users/u1/study-plan/sync")
    finally:
        app.dependency_overrides.pop(get_study_plan_service, None)

    assert plan_response.status_code == 503
    assert plan_response.json()["detail"] == "Curriculum temporarily unavailable"
    assert sync_response.status_code == 503


@pytest.mark.asyncio
async def test_progress_write_failure_is_503(client):
    class BrokenProgress(FakeProgressRepository):
        async def upsert_progress(self, record):
            raise ConnectionError("write failed")

    service = StudyPlanService(
        FakeContentRepository(), BrokenProgress(), EmptySkillTagger(), plan_id="p", title="P"
    )
    app.dependency_overrides[get_study_plan_service] = lambda: service
    try:
        response = await client.post(f"{API}/users/u1/study-plan/sync")
    finally:
        app.dependency_overrides.pop(get_study_plan_service, None)

    assert response.status_code == 503
    assert response.json()["detail"] == "Progress not saved, please retry"
