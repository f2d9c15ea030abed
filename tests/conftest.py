from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from edustats.api.dependencies import (
    event_store,
    material_store,
    practice_store,
    reaction_store,
)
from edustats.api.ratelimit import _rate_limiter
from edustats.main import app
from edustats.models.material import Material
from edustats.services import token_service

# Ensure repo root is on sys.path so `import edustats` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_stores() -> None:
    """Empty the in-memory event log and catalogs between tests."""
    event_store._events.clear()
    material_store._by_id.clear()
    practice_store._practices.clear()
    reaction_store._by_key.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if hasattr(_rate_limiter, "_buckets"):
        _rate_limiter._buckets.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(user_id: str | UUID | None = None, role: str = "student") -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=str(user_id or uuid4()), role=role)


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_id() -> UUID:
    return uuid4()


@pytest.fixture
def student_token(student_id: UUID) -> str:
    return mint_token(student_id, role="student")


@pytest.fixture
def teacher_token() -> str:
    return mint_token(role="teacher")


@pytest.fixture
def admin_token() -> str:
    return mint_token(role="admin")


# ---------------------------------------------------------------------------
# Catalog helpers
# ---------------------------------------------------------------------------


def seed_material(title: str = "Derivatives") -> Material:
    """Create and persist a material in the in-memory catalog."""
    material = Material.new(
        title=title,
        description=f"{title} explained",
        formula="f'(x)",
        example="d/dx x^2 = 2x",
    )
    asyncio.run(material_store.add(material))
    return material
