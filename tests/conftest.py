"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from limits.storage import MemoryStorage

# Add project root to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app import create_app
from core.results import StoredRecord
from core.template_engine import EmailTemplateEngine


@pytest.fixture
def store():
    """Persistence collaborator returning a fixed record."""
    store = Mock()
    store.create.return_value = StoredRecord(
        id='record-123',
        created_at=datetime(2026, 1, 11, tzinfo=timezone.utc)
    )
    return store


@pytest.fixture
def notifier():
    """Notification collaborator that always succeeds."""
    notifier = Mock()
    notifier.send.return_value = {'success': True, 'message_id': '<test@example.com>'}
    return notifier


@pytest.fixture
def templates():
    return EmailTemplateEngine('https://www.example.com', 'CIUS')


@pytest.fixture
def memory_storage():
    """In-process sliding window counter store."""
    return MemoryStorage()


@pytest.fixture
def app(store, notifier):
    """Application with mocked collaborators and rate limiting disabled."""
    return create_app('testing', store=store, notifier=notifier)


@pytest.fixture
def limited_app(store, notifier, memory_storage):
    """Application with rate limiting backed by in-memory storage."""
    return create_app(
        'testing',
        store=store,
        notifier=notifier,
        rate_limit_storage=memory_storage,
        config_overrides={'RATELIMIT_CONTACT': 2, 'RATELIMIT_CAREERS': 1, 'RATELIMIT_REPORT': 3}
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def valid_contact():
    return {'name': 'Jane Smith', 'email': 'jane@example.com', 'message': 'I would like to learn more.'}


@pytest.fixture
def valid_career():
    return {
        'name': 'Jane Smith',
        'email': 'jane@example.com',
        'position': 'Senior Developer',
        'message': 'I have 5 years of experience'
    }
