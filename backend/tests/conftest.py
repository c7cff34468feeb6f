"""
Shared fixtures: an in-memory store and the core components wired to it.
"""
import os
import sys
import uuid

import pytest

# Add src to path for import
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from marketplace.discovery import DiscoveryEngine  # noqa: E402
from marketplace.jobs import JobStore  # noqa: E402
from marketplace.models import USERS  # noqa: E402
from marketplace.store import MemoryDocumentStore  # noqa: E402
from marketplace.workers import WorkerDirectory  # noqa: E402


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def directory(store):
    return WorkerDirectory(store)


@pytest.fixture
def jobs(store, directory):
    return JobStore(store, directory)


@pytest.fixture
def engine(store):
    return DiscoveryEngine(store)


@pytest.fixture
def make_user(store):
    """Insert a user document directly, bypassing registration rules."""
    def _make_user(**overrides):
        user_id = overrides.pop('userId', None) or str(uuid.uuid4())
        user = {
            'userId': user_id,
            'name': f'user-{user_id[:8]}',
            'email': f'{user_id}@example.com',
            'image': '',
            'role': 'worker',
            'isWizard': True,
            'isDisabled': False,
            'subjects': ['Math'],
            'languages': ['English'],
            'experience': {'title': 'Teacher', 'origin': 'UBA', 'expYears': 3, 'expJobs': 0},
            'reviews': 0,
            'calendar': {},
        }
        user.update(overrides)
        return store.insert(USERS, user)
    return _make_user
