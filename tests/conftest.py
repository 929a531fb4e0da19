"""
Pytest fixtures for LearnPath tests.

Unit tests run against the in-memory repositories in tests/fakes.py;
integration and system tests use SQLite files through aiosqlite.
"""

import os
import tempfile

# Point the application at a throwaway SQLite file before anything reads settings
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp.name}"

import pytest

from learnpath.config import get_settings
from learnpath.engines.study_plan.phase_builder import PhaseBuilder
from learnpath.engines.study_plan.skill_tagger import CatalogSkillTagger, SkillDefinition
from learnpath.engines.study_plan.types import PhaseSpec
from tests.fakes import FakeProgressRepository

get_settings.cache_clear()


@pytest.fixture
def skill_tagger() -> CatalogSkillTagger:
    return CatalogSkillTagger([
        SkillDefinition(name="HTML Basics", category="html", keywords=("html", "element")),
        SkillDefinition(name="Forms", category="html", keywords=("form", "input")),
        SkillDefinition(name="Flexbox", category="css", keywords=("flex",)),
        SkillDefinition(name="Loops", category="javascript", keywords=("loop", "iteration")),
    ])


@pytest.fixture
def phase_builder(skill_tagger) -> PhaseBuilder:
    return PhaseBuilder(skill_tagger)


@pytest.fixture
def html_spec() -> PhaseSpec:
    return PhaseSpec(id="html-foundations", title="HTML Foundations", category_slug="html")


@pytest.fixture
def js_spec() -> PhaseSpec:
    return PhaseSpec(
        id="javascript-fundamentals",
        title="JavaScript Fundamentals",
        category_slug="javascript",
        keywords=("variables", "loops"),
    )


@pytest.fixture
def progress_repository() -> FakeProgressRepository:
    return FakeProgressRepository()
