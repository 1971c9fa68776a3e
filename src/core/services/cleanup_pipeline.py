"""Cleanup run orchestration.

Fetcher → Validator → Publisher, strictly one way. The CLI delegates the
whole flow to these helpers, which keeps side-effects (printing, exit codes)
out of the core logic and makes the pipeline reusable from tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import httpx

from adapters.github_publisher import GitHubPublisher
from adapters.http_probe import open_probe
from adapters.json_exporter import export_report_json
from adapters.registry_fetcher import HttpRegistrySource
from core.config import AppSettings
from core.domain.models import PullRequestHandle, RunContext, ValidationReport
from core.interfaces.probe import ReachabilityProbe
from core.interfaces.remediation import RegistrySource, RemediationPublisher
from core.logging_utils import log_event
from core.services.validator import ValidationPolicy, validate

logger = logging.getLogger(__name__)


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers."""

    fetched: Callable[[int], None] | None = None
    validated: Callable[[ValidationReport], None] | None = None


@dataclass
class CleanupResult:
    """Output of a cleanup run."""

    report: ValidationReport
    context: RunContext
    pull_request: PullRequestHandle | None = None
    report_path: Path | None = None
    notes: list[str] = field(default_factory=list)

    @property
    def published(self) -> bool:
        return self.pull_request is not None


async def run_cleanup(
    *,
    source: RegistrySource,
    probe: ReachabilityProbe,
    publisher: RemediationPublisher,
    policy: ValidationPolicy,
    context: RunContext | None = None,
    dry_run: bool = False,
    report_path: Path | None = None,
    hooks: PipelineHooks | None = None,
) -> CleanupResult:
    """Run one audit pass.

    `FetchError` and `PublishError` propagate to the caller. The report is
    written to `report_path` (when given) before publishing, so a failed
    publish can be retried from the file.
    """

    hooks = hooks or PipelineHooks()
    context = context or RunContext()

    entries = await source.fetch()
    if hooks.fetched:
        hooks.fetched(len(entries))

    report = await validate(entries, policy=policy, probe=probe)
    report.started_at = context.started_at
    if hooks.validated:
        hooks.validated(report)

    result = CleanupResult(report=report, context=context)
    if report_path is not None:
        result.report_path = export_report_json(report=report, output_path=report_path)
        log_event(logger, logging.INFO, "report_written", path=str(report_path))

    if not report.invalid:
        log_event(logger, logging.INFO, "no_invalid_domains", scanned=report.scanned)
        result.notes.append("No invalid domains found.")
        return result

    if dry_run:
        result.notes.append("Dry run: pull request not opened.")
        return result

    result.pull_request = await publisher.publish(report, context=context)
    return result


async def run_default_cleanup(
    settings: AppSettings,
    *,
    policy: ValidationPolicy | None = None,
    dry_run: bool = False,
    report_path: Path | None = None,
    hooks: PipelineHooks | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CleanupResult:
    """Wire the HTTP adapters from settings and run the pipeline."""

    policy = policy or ValidationPolicy.from_settings(settings)
    async with open_probe(settings, transport=transport) as probe:
        return await run_cleanup(
            source=HttpRegistrySource(settings, transport=transport),
            probe=probe,
            publisher=GitHubPublisher(settings, transport=transport),
            policy=policy,
            dry_run=dry_run,
            report_path=report_path,
            hooks=hooks,
        )
