"""
Global pytest configuration and fixtures.
"""
import datetime as dt
import os
from typing import Dict

import pytest

from timelog.config import TimeLogConfig, reload_config
from timelog.models import Actor, TimeEntry, WorkType

# Settings read from the environment; cleared so a developer's shell does not leak in
_SETTING_ENV_VARS = [
    "WEBHOOK_URL",
    "WEBHOOK_API_KEY",
    "WEBHOOK_ENABLED",
    "DELIVERY_MAX_ATTEMPTS",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
    "REQUEST_TIMEOUT",
    "MATTERS",
    "COST_CENTRES",
    "BUSINESS_AREAS",
    "SUBCATEGORIES",
    "OPENAI_API_KEY",
    "LLM_MODEL",
    "LLM_BASE_URL",
    "LLM_TEMPERATURE",
    "LLM_MAX_TOKENS",
    "SESSION_FILE",
    "ENVIRONMENT",
    "DEBUG",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
]


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'WEBHOOK_URL': 'https://hooks.example.com/timelog',
        'WEBHOOK_API_KEY': 'test-api-key',
        'DELIVERY_MAX_ATTEMPTS': '3',
        'RETRY_BASE_DELAY': '0.01',
        'RETRY_MAX_DELAY': '0.05',
        'ENVIRONMENT': 'testing',
        'DEBUG': 'true',
        'LOG_LEVEL': 'DEBUG'
    }


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Environment without any timelog settings, run from an empty directory."""
    for key in _SETTING_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    # No .env file in an empty working directory
    monkeypatch.chdir(tmp_path)

    import timelog.config.settings
    timelog.config.settings._config = None

    yield

    timelog.config.settings._config = None


@pytest.fixture
def mock_env(test_env_vars, clean_env, monkeypatch, tmp_path):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv('SESSION_FILE', str(tmp_path / 'session.json'))

    yield test_env_vars


@pytest.fixture
def test_config(mock_env) -> TimeLogConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def fixed_now() -> dt.datetime:
    return dt.datetime(2024, 10, 15, 9, 30, tzinfo=dt.timezone.utc)


@pytest.fixture
def sample_actor() -> Actor:
    """User the sample entries are reported for."""
    return Actor(id='u-123', name='Jane Doe', email='jane@example.com')


@pytest.fixture
def billable_entry(fixed_now) -> TimeEntry:
    """Complete billable time entry."""
    return TimeEntry(
        task_description='Contract review',
        duration_minutes=90,
        start_time=fixed_now,
        work_type=WorkType.BILLABLE,
        matter_name='Client A - Project Alpha',
        cost_centre_name='Development',
        enjoyment_level='Like it/Good at it',
        energy_impact='Neutral',
        task_goal='Keep doing it',
    )


@pytest.fixture
def non_billable_entry(fixed_now) -> TimeEntry:
    """Complete non-billable time entry."""
    return TimeEntry(
        task_description='Team training',
        duration_minutes=60,
        start_time=fixed_now,
        work_type=WorkType.NON_BILLABLE,
        business_area_name='Training & Education',
        subcategory_name='Training',
        enjoyment_level='Love it/Great at it',
        energy_impact='Gave me energy',
        task_goal='Delegate to person',
    )


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "network: mark test as exercising HTTP clients (always mocked)"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        # Add unit marker for tests in tests/unit/
        if "tests/unit/" in str(item.fspath).replace(os.sep, "/"):
            item.add_marker(pytest.mark.unit)

        # Delivery and text-generation tests mock requests
        if "webhook" in item.name.lower() or "delivery" in item.name.lower():
            item.add_marker(pytest.mark.network)
