"""Shared fixtures for all tests."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def make_response():
    """Factory fixture returning a builder for fake requests responses."""

    def _make(status_code=200, json_data=None, text='', cookies=None, json_error=False):
        response = MagicMock()
        response.status_code = status_code
        response.text = text
        response.cookies = cookies if cookies is not None else {}
        if json_error:
            response.json.side_effect = ValueError('No JSON object could be decoded')
        else:
            response.json.return_value = json_data
        return response

    return _make


@pytest.fixture
def make_config(tmp_path):
    """Factory fixture returning a builder for config namespaces."""
    from sim_monitor.config import TrackedUser

    def _make(**overrides):
        values = dict(
            SIM_URL='https://sim.example.com',
            SIM_USERNAME='watcher',
            SIM_PASSWORD='hunter2',
            DISCORD_API_URL='https://discord.example.com/api',
            DISCORD_TOKEN='bot-token',
            DISCORD_CHANNEL_ID='42',
            DISCORD_REACTION='✅',
            TRACKED_CONTESTS=[5],
            TRACKED_USERS=[TrackedUser('bob', 'he/him'), TrackedUser('alice', 'she/her')],
            POLLING_INTERVAL=60,
            REQUEST_TIMEOUT=10,
            STATE_PATH=str(tmp_path / 'data' / 'state.json'),
            AT_LEAST_ONCE_DELIVERY=False,
            LOG_DIR=str(tmp_path / 'logs'),
            DEBUG=False,
        )
        values.update(overrides)
        return SimpleNamespace(**values)

    return _make


@pytest.fixture
def session_handle():
    from sim_monitor.ranking import SessionHandle

    return SessionHandle('sess', 'csrf', 7)
