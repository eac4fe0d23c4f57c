"""
Pytest configuration and fixtures for contract engine tests.
"""

from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import UUID, uuid4

import pytest
from pydantic import BaseModel, EmailStr, Field

from crud_contracts.config.settings import settings as engine_settings
from crud_contracts.operations import StandardOperations


# =============================================================================
# Sample entities
# =============================================================================


class User(BaseModel):
    id: UUID
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    age: int = Field(ge=0)
    role: Literal["admin", "member"] = "member"
    createdAt: datetime
    updatedAt: datetime


class Document(BaseModel):
    """Entity with a soft-delete marker and an integer key."""

    id: int = Field(ge=1)
    title: str
    tags: list[str] = Field(default_factory=list)
    createdAt: datetime
    updatedAt: datetime
    deletedAt: Optional[datetime] = None


class Tag(BaseModel):
    """Entity without an id field or timestamps."""

    label: str
    color: str = "gray"


def make_user(**overrides) -> dict:
    """Valid User payload."""
    now = datetime.now(timezone.utc)
    data = {
        "id": str(uuid4()),
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "age": 36,
        "createdAt": now.isoformat(),
        "updatedAt": now.isoformat(),
    }
    data.update(overrides)
    return data


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def user_model():
    return User


@pytest.fixture
def document_model():
    return Document


@pytest.fixture
def tag_model():
    return Tag


@pytest.fixture
def user_payload():
    """Factory of valid User payloads."""
    return make_user


@pytest.fixture
def users():
    """Standard operations for User."""
    return StandardOperations(User, "user")


@pytest.fixture
def documents():
    """Standard operations for Document with soft delete on."""
    return StandardOperations(Document, "document", soft_delete=True)


@pytest.fixture
def loose_fields(monkeypatch):
    """Switch the engine to loose field name handling for one test."""
    monkeypatch.setattr(engine_settings, "strict_field_names", False)
    return engine_settings


@pytest.fixture
def engine_config(monkeypatch):
    """
    The shared settings instance, restored after the test.

    Tests change values with ``engine_config.<name> = value``; monkeypatch
    puts the originals back.
    """
    class _Patch:
        def __setattr__(self, name, value):
            monkeypatch.setattr(engine_settings, name, value)

        def __getattr__(self, name):
            return getattr(engine_settings, name)

    return _Patch()
