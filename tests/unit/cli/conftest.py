"""Fixtures shared by the CLI command tests."""

from unittest.mock import Mock, patch

import pytest
import requests
from click.testing import CliRunner


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep commands from reconfiguring the root logger."""
    with patch("timelog.cli.utils.runtime.configure_logging") as mock_configure:
        yield mock_configure


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def http_session():
    """Mocked requests session answering 200, used by every DeliveryService."""
    session = Mock(spec=requests.Session)
    response = Mock()
    response.status_code = 200
    response.text = "ok"
    session.post.return_value = response
    with patch("timelog.services.delivery_service.requests.Session", return_value=session):
        yield session
