"""
Tests for fetching the registry dataset.
"""

import asyncio
import json

import httpx
import pytest

from adapters.registry_fetcher import fetch_registry, parse_registry
from core.domain.errors import FetchError

SAMPLE = [
    {
        'domain': 'alice.is-a.dev',
        'subdomain': 'alice',
        'owner': {'username': 'alice'},
        'record': {'CNAME': 'alice.github.io'},
    },
    {
        'domain': 'mail.alice.is-a.dev',
        'subdomain': 'mail.alice',
        'owner': {'username': 'alice'},
        'record': {'MX': ['mx1.example.com']},
    },
]


def fetch_with(handler, settings):
    return asyncio.run(fetch_registry(settings, transport=httpx.MockTransport(handler)))


class TestFetchRegistry:
    """Test the single GET against the registry endpoint."""

    def test_fetch_success(self, settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=SAMPLE)

        entries = fetch_with(handler, settings)

        assert [e.subdomain for e in entries] == ['alice', 'mail.alice']
        assert len(seen) == 1
        assert str(seen[0].url).rstrip('/') == settings.registry_url
        assert seen[0].headers['accept'] == 'application/json'

    def test_server_error_raises_fetch_error(self, settings):
        with pytest.raises(FetchError, match='HTTP 502'):
            fetch_with(lambda request: httpx.Response(502), settings)

    def test_transport_error_raises_fetch_error(self, settings):
        def handler(request):
            raise httpx.ConnectError('Name or service not known')

        with pytest.raises(FetchError, match='Name or service not known'):
            fetch_with(handler, settings)

    def test_invalid_json_raises_fetch_error(self, settings):
        with pytest.raises(FetchError, match='not valid JSON'):
            fetch_with(lambda request: httpx.Response(200, content=b'<html>oops</html>'), settings)

    def test_no_retry_on_failure(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        with pytest.raises(FetchError):
            fetch_with(handler, settings)
        assert len(calls) == 1


class TestParseRegistry:
    """Test payload validation."""

    def test_non_array_payload_rejected(self):
        with pytest.raises(FetchError, match='not a JSON array'):
            parse_registry({'domains': SAMPLE}, base_domain='is-a.dev')

    def test_entry_without_owner_rejected(self):
        payload = json.loads(json.dumps(SAMPLE))
        del payload[1]['owner']
        with pytest.raises(FetchError, match='index 1'):
            parse_registry(payload, base_domain='is-a.dev')

    def test_duplicate_domain_rejected(self):
        with pytest.raises(FetchError, match='Duplicate domain'):
            parse_registry([SAMPLE[0], SAMPLE[0]], base_domain='is-a.dev')

    def test_empty_array_is_valid(self):
        assert parse_registry([], base_domain='is-a.dev') == []
