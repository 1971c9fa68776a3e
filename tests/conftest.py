"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys

import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from core.config import AppSettings  # noqa: E402
from core.domain.models import DomainEntry  # noqa: E402
from core.interfaces.probe import ProbeOutcome  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep developer .env files and REGISTRY_CLEANUP_* variables out of tests."""
    for key in list(os.environ):
        if key.startswith('REGISTRY_CLEANUP_'):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'config'))
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def settings():
    return AppSettings(
        _env_file=None,
        github_token='test-token',
        github_username='cleanup-bot',
        fork_poll_interval_seconds=0,
    )


def make_entry(subdomain, owner='alice', **records):
    """Build a DomainEntry the way the registry API returns it."""
    return DomainEntry.model_validate({
        'domain': f'{subdomain}.is-a.dev',
        'subdomain': subdomain,
        'owner': {'username': owner, 'email': f'{owner}@example.com'},
        'record': records,
    })


class FakeProbe:
    """Probe double: outcomes per URL, every call recorded."""

    def __init__(self, outcomes=None, default=None):
        self.outcomes = outcomes or {}
        self.default = default or ProbeOutcome(reachable=True, attempts=1)
        self.calls = []

    async def check(self, url):
        self.calls.append(url)
        return self.outcomes.get(url, self.default)


@pytest.fixture
def fake_probe():
    return FakeProbe()
