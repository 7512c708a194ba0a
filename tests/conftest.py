"""
Shared fixtures built on the in-memory fakes in tests.fakes.
"""

from __future__ import annotations

import pytest

from cms.domain.entities import Identity, User
from tests.fakes import (
    FakeActivityRepo,
    FakeClock,
    FakeContentRepo,
    FakeFileStore,
    FakeRules,
    FakeUserRepo,
)

# --- Fixtures ---


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def users() -> FakeUserRepo:
    return FakeUserRepo()


@pytest.fixture
def repo() -> FakeContentRepo:
    return FakeContentRepo()


@pytest.fixture
def activity() -> FakeActivityRepo:
    return FakeActivityRepo()


@pytest.fixture
def store() -> FakeFileStore:
    return FakeFileStore()


@pytest.fixture
def rules() -> FakeRules:
    return FakeRules()


@pytest.fixture
def author(users: FakeUserRepo) -> User:
    return users.save(User(email="author@example.org", name="Ada Author", role="admin"))


@pytest.fixture
def admin(author: User) -> Identity:
    return Identity(user_id=author.id, name=author.name, role="admin")


@pytest.fixture
def member(users: FakeUserRepo) -> Identity:
    user = users.save(User(email="reader@example.org", name="Rita Reader", role="user"))
    return Identity(user_id=user.id, name=user.name, role="user")
