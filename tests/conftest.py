"""
Root conftest.py - Sets environment variables before any module imports.

This file is loaded by pytest before any test modules, ensuring environment
variables are set before the settings module is read.
"""

import os
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("SEARCH_BACKEND_URL", "http://search.test:9200")

from conditional_count.app.config import Settings  # noqa: E402
from conditional_count.core.alerts.models import (  # noqa: E402
    CountResult,
    ResultMessage,
    SearchResult,
)


STREAM_ID = "000000000000000000000001"


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        environment="development",
        search_backend_url="http://search.test:9200",
        search_index_prefix="graylog",
    )


@pytest.fixture
def now():
    """Fixed evaluation time."""
    return datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def stream_id():
    return STREAM_ID


@pytest.fixture
def base_parameters():
    """Parameters of scenario A: more than 10 'error' messages in 5 minutes."""
    return {
        "query": "error",
        "time": 5,
        "threshold_type": "MORE",
        "threshold": 10,
        "grace": 2,
        "backlog": 0,
        "repeat_notifications": False,
    }


@pytest.fixture
def make_result_messages():
    """Factory for newest-first result messages."""
    def _make(n: int, index: str = "graylog_0"):
        return [
            ResultMessage(
                index=index,
                message={
                    "_id": f"msg-{i}",
                    "message": f"error number {i}",
                    "source": "web-01",
                    "timestamp": f"2024-03-01 11:5{9 - i}:00.000",
                },
            )
            for i in range(n)
        ]
    return _make


@pytest.fixture
def mock_searches():
    """Mock search backend returning no matches."""
    searches = MagicMock()
    searches.count.return_value = CountResult(count=0)
    searches.search.return_value = SearchResult(results=[], total_results=0)
    return searches
