"""
Tests for the HEAD reachability probe.
"""

import asyncio
import ssl

import httpx

from adapters.http_probe import HttpReachabilityProbe, describe_error, is_tls_hostname_mismatch, open_probe

TLS_MISMATCH = (
    "[SSL: CERTIFICATE_VERIFY_FAILED] certificate verify failed: Hostname mismatch, "
    "certificate is not valid for 'site.is-a.dev'. (_ssl.c:1006)"
)


class ScriptedHandler:
    """MockTransport handler replaying a list of results (exceptions or status codes)."""

    def __init__(self, script):
        self.script = list(script)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        step = self.script.pop(0) if self.script else 200
        if isinstance(step, Exception):
            raise step
        return httpx.Response(step)


def check(handler, url='https://site.is-a.dev', **kwargs):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            probe = HttpReachabilityProbe(client, timeout=5.0, **kwargs)
            return await probe.check(url)

    return asyncio.run(go())


class TestHttpReachabilityProbe:
    """Test retry and status handling."""

    def test_success_on_first_attempt(self):
        handler = ScriptedHandler([200])
        outcome = check(handler)

        assert outcome.reachable
        assert outcome.attempts == 1
        assert handler.requests[0].method == 'HEAD'

    def test_error_status_counts_as_reachable(self):
        for status in (404, 500, 503):
            outcome = check(ScriptedHandler([status]))
            assert outcome.reachable

    def test_retry_recovers_transient_failure(self):
        handler = ScriptedHandler([httpx.ConnectError('Connection refused'), 200])
        outcome = check(handler)

        assert outcome.reachable
        assert outcome.attempts == 2
        assert len(handler.requests) == 2

    def test_two_failures_make_exactly_two_attempts(self):
        handler = ScriptedHandler([
            httpx.ConnectError('first failure'),
            httpx.ConnectError('getaddrinfo ENOTFOUND site.is-a.dev'),
            200,
        ])
        outcome = check(handler)

        assert not outcome.reachable
        assert outcome.attempts == 2
        assert outcome.error == 'getaddrinfo ENOTFOUND site.is-a.dev'
        assert len(handler.requests) == 2

    def test_timeout_without_message_uses_exception_name(self):
        handler = ScriptedHandler([httpx.ReadTimeout(''), httpx.ReadTimeout('')])
        outcome = check(handler)

        assert not outcome.reachable
        assert outcome.error == 'ReadTimeout'

    def test_tls_mismatch_suppressed_by_default(self):
        handler = ScriptedHandler([httpx.ConnectError(TLS_MISMATCH)])
        outcome = check(handler)

        assert outcome.reachable
        assert len(handler.requests) == 1

    def test_tls_mismatch_counts_as_failure_when_not_suppressed(self):
        handler = ScriptedHandler([httpx.ConnectError(TLS_MISMATCH), httpx.ConnectError(TLS_MISMATCH)])
        outcome = check(handler, suppress_tls_hostname_mismatch=False)

        assert not outcome.reachable
        assert outcome.attempts == 2
        assert 'Hostname mismatch' in outcome.error

    def test_open_probe_uses_settings(self, settings):
        settings.probe_timeout_seconds = 1.5
        settings.suppress_tls_hostname_mismatch = False
        handler = ScriptedHandler([200])

        async def go():
            async with open_probe(settings, transport=httpx.MockTransport(handler)) as probe:
                return probe, await probe.check('https://x.is-a.dev')

        probe, outcome = asyncio.run(go())

        assert outcome.reachable
        assert probe._timeout == 1.5
        assert probe._suppress_tls_mismatch is False


class TestErrorHelpers:
    """Test TLS mismatch detection and error descriptions."""

    def test_detects_mismatch_in_cause_chain(self):
        cause = ssl.SSLCertVerificationError(1, 'certificate verify failed')
        cause.verify_message = "Hostname mismatch, certificate is not valid for 'x'."
        try:
            try:
                raise cause
            except ssl.SSLError as exc:
                raise httpx.ConnectError('TLS handshake failed') from exc
        except httpx.ConnectError as wrapped:
            assert is_tls_hostname_mismatch(wrapped)

    def test_other_tls_errors_are_not_mismatch(self):
        exc = httpx.ConnectError('[SSL: CERTIFICATE_VERIFY_FAILED] certificate has expired')
        assert not is_tls_hostname_mismatch(exc)

    def test_describe_error(self):
        assert describe_error(httpx.ConnectError('  refused ')) == 'refused'
        assert describe_error(httpx.ConnectTimeout('')) == 'ConnectTimeout'
