"""
tests/conftest.py

Test fixtures for API integration and unit tests.
Includes async clients, fake users, schema mock data, and dependency overrides.
"""
import os
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-sessions")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("EMAILS_ENABLED", "false")
os.environ.setdefault("LOG_TO_FILE", "false")

# --- Imports ---
from collections.abc import AsyncGenerator, Generator
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from main import app
from app.auth.schemas import AuthSuccessResponse, AuthUserResponse, SessionResult
from app.core.dependencies import get_current_user
from app.database.enums import UserRole
from app.database.models import User
from app.database.session import get_db
from app.evaluation.schemas import CategoryScore, EvaluationResult, EvaluationSummary
from app.question.schemas import AnswerRead, QuestionRead


# --- Core Test Fixtures ---


@pytest.fixture(scope="session")
def transport() -> ASGITransport:
    """Fixture for ASGI transport."""
    return ASGITransport(app=app)


@pytest_asyncio.fixture(scope="function")
async def async_client(transport: ASGITransport) -> AsyncGenerator[AsyncClient, None]:
    """Fixture for HTTP async client."""
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# --- Fake User Fixtures ---


def _make_user(email: str, name: str, role: UserRole) -> User:
    return User(
        id=uuid4(),
        email=email,
        name=name,
        role=role,
        hashed_password="fakehashedpassword",
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
        deleted_at=None,
    )


@pytest.fixture
def fake_admin_user() -> User:
    """Fixture for a fake admin user."""
    return _make_user("admin.test@example.com", "Admin Test", UserRole.ADMIN)


@pytest.fixture
def fake_owner_user() -> User:
    """Fixture for a fake owner (catalog admin without import rights)."""
    return _make_user("owner.test@example.com", "Owner Test", UserRole.OWNER)


@pytest.fixture
def fake_member_user() -> User:
    """Fixture for a fake regular member."""
    return _make_user("member.test@example.com", "Member Test", UserRole.MEMBER)


# --- Dependency Override Fixtures ---


@pytest_asyncio.fixture
async def override_get_db() -> AsyncGenerator[None, None]:
    """Override for the database dependency."""

    async def _override() -> AsyncGenerator[AsyncMock, None]:
        yield AsyncMock()

    app.dependency_overrides[get_db] = _override
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest_asyncio.fixture
async def mock_current_admin_user(fake_admin_user: User) -> AsyncGenerator[User, None]:
    """Mock the current user as an admin."""
    app.dependency_overrides[get_current_user] = lambda: fake_admin_user
    yield fake_admin_user
    app.dependency_overrides.pop(get_current_user, None)


@pytest_asyncio.fixture
async def mock_current_owner_user(fake_owner_user: User) -> AsyncGenerator[User, None]:
    """Mock the current user as an owner."""
    app.dependency_overrides[get_current_user] = lambda: fake_owner_user
    yield fake_owner_user
    app.dependency_overrides.pop(get_current_user, None)


@pytest_asyncio.fixture
async def mock_current_member_user(fake_member_user: User) -> AsyncGenerator[User, None]:
    """Mock the current user as a member."""
    app.dependency_overrides[get_current_user] = lambda: fake_member_user
    yield fake_member_user
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def clear_overrides() -> Generator[None, None, None]:
    """Makes sure no override leaks into tests that exercise the real dependencies."""
    app.dependency_overrides.clear()
    yield
    app.dependency_overrides.clear()


# --- Fake Redis ---


class FakeRedis:
    """In-memory stand-in for the few redis.asyncio calls the sign-in throttle makes."""

    def __init__(self) -> None:
        self.values: dict[str, str | int] = {}
        self.ttls: dict[str, int] = {}

    async def exists(self, key: str) -> int:
        return int(key in self.values)

    async def incr(self, key: str) -> int:
        self.values[key] = int(self.values.get(key, 0)) + 1
        return self.values[key]

    async def ttl(self, key: str) -> int:
        if key not in self.values:
            return -2
        return self.ttls.get(key, -1)

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return True

    async def setex(self, key: str, seconds: int, value: str) -> bool:
        self.values[key] = value
        self.ttls[key] = seconds
        return True

    async def delete(self, key: str) -> int:
        self.ttls.pop(key, None)
        return int(self.values.pop(key, None) is not None)


@pytest.fixture
def fake_redis() -> Generator[FakeRedis, None, None]:
    """Swaps the throttle's Redis client for an in-memory one."""
    fake = FakeRedis()
    with patch("app.core.security.redis_client", fake):
        yield fake


# --- Fake Data Fixtures (Schema Instances) ---


@pytest.fixture
def fake_auth_user_response(fake_member_user: User) -> AuthUserResponse:
    """Fixture for fake AuthUserResponse."""
    return AuthUserResponse.model_validate(fake_member_user)


@pytest.fixture
def fake_token() -> str:
    """Fixture for a fake session token."""
    return "fake-session-token"


@pytest.fixture
def fake_session_result(
    fake_auth_user_response: AuthUserResponse, fake_token: str
) -> SessionResult:
    """Fixture for a fake sign-up / sign-in result."""
    return SessionResult(
        token=fake_token,
        response=AuthSuccessResponse(
            message="Signed in successfully", user=fake_auth_user_response
        ),
    )


@pytest.fixture
def fake_question_read() -> QuestionRead:
    """Fixture for a question with two answers."""
    return QuestionRead(
        id=1,
        text_ro="Este terenul racordat la apă, canal, curent și gaz?",
        text_en="Is the land connected to water, sewage, electricity and gas?",
        weight=10,
        category_id=1,
        answers=[
            AnswerRead(id=1, text_ro="Da", text_en="Yes", weight=10, question_id=1),
            AnswerRead(id=2, text_ro="Nu", text_en="No", weight=0, question_id=1),
        ],
    )


@pytest.fixture
def fake_evaluation_result() -> EvaluationResult:
    """Fixture for a scored evaluation."""
    return EvaluationResult(
        total_score=150,
        max_possible_score=200,
        percentage=75.0,
        category_scores=[
            CategoryScore(
                category_id=1,
                category_name="Utilități",
                score=150,
                max_score=200,
                percentage=75.0,
                questions_answered=2,
                total_questions=2,
            )
        ],
        level="Good",
        badge="⭐ Property Expert",
        completion_rate=100.0,
    )


@pytest.fixture
def fake_evaluation_summary() -> EvaluationSummary:
    """Fixture for a stored evaluation as listed in the history."""
    return EvaluationSummary(
        id=1,
        property_type_id=1,
        property_type_name="Casă",
        property_name="Casa Popescu",
        property_location="Cluj-Napoca",
        property_surface=120,
        property_floors="P+1",
        property_construction_year=2015,
        total_score=15000,
        max_possible_score=20000,
        percentage=75,
        level="Good",
        badge="⭐ Property Expert",
        completion_rate=100,
        completed_at=datetime.now(timezone.utc),
    )


# --- Catalog Tree Builders (plain objects shaped like loaded ORM rows) ---


def _answer(answer_id: int, weight: int, text_ro: str = "Răspuns", text_en: str | None = None):
    return SimpleNamespace(id=answer_id, weight=weight, text_ro=text_ro, text_en=text_en)


def _question(question_id: int, weight: int, answers: list, text_ro: str = "Întrebare"):
    return SimpleNamespace(
        id=question_id,
        weight=weight,
        text_ro=text_ro,
        text_en=None,
        answers=answers,
        max_answer_weight=max((a.weight for a in answers), default=0),
    )


def _category(category_id: int, name_ro: str, questions: list, name_en: str | None = None):
    return SimpleNamespace(id=category_id, name_ro=name_ro, name_en=name_en, questions=questions)


@pytest.fixture
def house_tree() -> SimpleNamespace:
    """
    Two categories, three questions:
    - Utilities: q1 (weight 10, answers 10/5/0), q2 (weight 8, answers 10/7/0)
    - Windows:   q3 (weight 5, answers 4/2)
    """
    utilities = _category(
        1,
        "Utilități",
        [
            _question(1, 10, [_answer(1, 10), _answer(2, 5), _answer(3, 0)]),
            _question(2, 8, [_answer(4, 10), _answer(5, 7), _answer(6, 0)]),
        ],
        name_en="Utilities",
    )
    windows = _category(
        2, "Ferestre", [_question(3, 5, [_answer(7, 4), _answer(8, 2)])], "Windows"
    )
    return SimpleNamespace(id=1, name_ro="Casă", name_en="House", categories=[utilities, windows])
