"""Shared fixtures: a sample student, a well-formed LLM answer, offline clients."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from learnplan.config import clear_config_cache
from learnplan.core.models import StudentProfile
from learnplan.search.client import ResourceSearchClient

FIXED_NOW = "2025-01-06T09:00:00+00:00"

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Keep real API keys and cached config out of every test."""
    for var in (
        "GROQ_API_KEY",
        "TAVILY_API_KEY",
        "MEM0_API_KEY",
        "MEM0_COLLECTION_ID",
        "DATABASE_URL",
        "USE_MOCK_DATA",
        "LEARNPLAN_CONFIG",
        "APP_ENV",
        "PORT",
    ):
        monkeypatch.delenv(var, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def alex_data() -> dict[str, Any]:
    """Student form data as the UI submits it."""
    return {
        "name": "Alex",
        "age": 10,
        "grade": 5,
        "diagnosis": "ADHD",
        "strengths": "Verbal reasoning, creativity",
        "struggles": "Sustained attention, handwriting",
        "learningStyle": "visual",
        "attentionSpan": "short",
        "triggers": "Loud noises",
        "interests": "dinosaurs, space",
        "currentAccommodations": "Extra time on tests",
    }


@pytest.fixture
def alex(alex_data) -> StudentProfile:
    return StudentProfile.from_dict(alex_data)


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same timestamp."""
    return lambda: FIXED_NOW


@pytest.fixture
def offline_search() -> ResourceSearchClient:
    """Search client without an API key: always returns the fallback lists."""
    client = ResourceSearchClient()
    yield client
    client.close()


def _day_text(number: int) -> str:
    return f"""### Day {number}: {DAY_NAMES[number - 1]}
9:00-9:20: Morning Meeting
Review the visual schedule.
Approach: Visual schedule cards
Materials: Schedule board

9:25-9:45: Math - Dinosaur number patterns
Approach: Manipulatives with a dinosaur theme
Materials: Pattern blocks, fossil cards

Notes: Keep a visual timer in sight during day {number}.
"""


@pytest.fixture
def plan_response() -> str:
    """A well-formed completion with all five sections and seven days."""
    days = "\n".join(_day_text(n) for n in range(1, 8))
    return f"""<think>Let me plan for Alex.</think>
## Student Profile
Alex is a 10-year-old fifth grader with ADHD who loves dinosaurs.

## Learning Approach
Short, visual lessons with frequent movement breaks.

## Daily Plans

{days}
## Accommodations
- Visual schedule on the desk
- Movement breaks every 20 minutes
- Extended time for written work

## Progress Monitoring
Weekly checklists and self-ratings after each activity.
"""


@pytest.fixture
def llm_client(plan_response):
    """Configured LLM client stub returning ``plan_response``."""
    client = MagicMock()
    client.is_configured = True
    client.simple_chat.return_value = plan_response
    return client
