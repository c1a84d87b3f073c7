# tests/conftest.py
import sys
from pathlib import Path

# --- Path Setup ---
# Must run before any application import so `agents`, `common`, `db` resolve.
REPO_ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for p in (REPO_ROOT, TESTS_DIR):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

# --- Environment Loading ---
from dotenv import load_dotenv
load_dotenv(REPO_ROOT / ".env.local")
load_dotenv(REPO_ROOT / ".env")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from db.models import Base
from services.worker_roster import WorkerRoster


# ---------- canonical oracle payloads ----------

@pytest.fixture
def leak_analysis():
    return {
        "trades": [{"trade": "Plumber", "confidence": 0.92, "specialties": ["Leak Detection"], "reasoning": "Water leak under sink"}],
        "urgency": "soon",
        "urgencyReasoning": "Active but contained leak",
        "problemDetails": {"category": "plumbing", "complexity": "simple", "timeEstimate": "1-2 hours"},
        "location": {"extracted": "Austin, TX", "needed": False},
        "followUpQuestions": [],
        "needsMoreInfo": False,
        "summary": "Leak under the kitchen sink",
        "confidence": 0.9,
    }


@pytest.fixture
def roster():
    return WorkerRoster.default()


# ---------- database ----------

@pytest_asyncio.fixture(scope="function")
async def engine():
    """In-memory sqlite shared across sessions of one test (StaticPool keeps a single connection)."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
