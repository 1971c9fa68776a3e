"""Validation pass over the registry dataset.

Every entry goes through the same ordered rules and the first match decides
its fate: skip lists, non-website, delegated services, nested-subdomain
structure and, last, the live reachability probe. The input sequence is never
mutated; findings are accumulated into a separate `ValidationReport`.

Root lookups for nested subdomains scan the *whole* dataset, so a root listed
after its dependents still counts.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from core.config import AppSettings
from core.domain.errors import StructuralError
from core.domain.models import (
    DomainEntry,
    InvalidEntry,
    InvalidKind,
    SkippedEntry,
    SkipReason,
    ValidationReport,
)
from core.interfaces.probe import ReachabilityProbe
from core.logging_utils import log_event

logger = logging.getLogger(__name__)

ROOT_MISSING = "Root subdomain does not exist"
ROOT_DELEGATED = "Root subdomain has delegated nameservers"


@dataclass
class ValidationPolicy:
    """Explicit configuration for the Validator."""

    domain_skip_list: set[str] = field(default_factory=set)
    owner_skip_list: set[str] = field(default_factory=set)
    skip_delegated_services: bool = True
    probe_concurrency: int = 1

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "ValidationPolicy":
        return cls(
            domain_skip_list=set(settings.domain_skip_list),
            owner_skip_list=set(settings.owner_skip_list),
            skip_delegated_services=settings.skip_delegated_services,
            probe_concurrency=settings.probe_concurrency,
        )


def skip_reason(entry: DomainEntry, policy: ValidationPolicy) -> SkipReason | None:
    """Rules 1-3: return why the entry is excluded, or None to keep checking."""

    if entry.subdomain in policy.domain_skip_list:
        return SkipReason.DOMAIN_SKIP_LIST
    if entry.owner.username in policy.owner_skip_list:
        return SkipReason.OWNER_SKIP_LIST
    if not entry.is_website:
        return SkipReason.NOT_A_WEBSITE
    if policy.skip_delegated_services and entry.has_delegated_services:
        return SkipReason.DELEGATED_SERVICES
    return None


def check_structure(entry: DomainEntry, index: dict[str, DomainEntry]) -> None:
    """Rule 4: a nested `a.b` needs an existing, non-delegated root `b`.

    Raises `StructuralError` with the human-readable reason.
    """

    if not entry.is_nested:
        return
    root = index.get(entry.root_subdomain)
    if root is None:
        raise StructuralError(ROOT_MISSING)
    if root.has_nameservers:
        raise StructuralError(ROOT_DELEGATED)


def build_index(entries: Sequence[DomainEntry]) -> dict[str, DomainEntry]:
    index: dict[str, DomainEntry] = {}
    for entry in entries:
        index.setdefault(entry.subdomain, entry)
    return index


async def validate(
    entries: Sequence[DomainEntry],
    *,
    policy: ValidationPolicy,
    probe: ReachabilityProbe,
) -> ValidationReport:
    report = ValidationReport(scanned=len(entries))
    index = build_index(entries)

    log_event(logger, logging.INFO, "scan_started", total=len(entries))

    # Slot per entry keeps dataset order even when probes run concurrently.
    verdicts: list[InvalidEntry | None] = [None] * len(entries)
    to_probe: list[int] = []

    for position, entry in enumerate(entries):
        reason = skip_reason(entry, policy)
        if reason is not None:
            report.skipped.append(SkippedEntry(entry=entry, reason=reason))
            log_event(logger, logging.INFO, "skipped", domain=entry.domain, reason=reason.value)
            continue

        try:
            check_structure(entry, index)
        except StructuralError as exc:
            verdicts[position] = InvalidEntry(entry=entry, reason=str(exc), kind=InvalidKind.STRUCTURAL)
            log_event(logger, logging.WARNING, "invalid", domain=entry.domain, reason=str(exc))
            continue

        to_probe.append(position)

    sem = asyncio.Semaphore(max(1, policy.probe_concurrency))

    async def probe_one(position: int) -> None:
        entry = entries[position]
        async with sem:
            log_event(logger, logging.DEBUG, "probing", domain=entry.domain, url=entry.probe_url)
            outcome = await probe.check(entry.probe_url)
        if outcome.reachable:
            log_event(logger, logging.INFO, "reachable", domain=entry.domain, attempts=outcome.attempts)
            return
        reason = outcome.error or "unreachable"
        verdicts[position] = InvalidEntry(entry=entry, reason=reason, kind=InvalidKind.UNREACHABLE)
        log_event(
            logger,
            logging.WARNING,
            "invalid",
            domain=entry.domain,
            reason=reason,
            attempts=outcome.attempts,
        )

    report.probed = [entries[position].subdomain for position in to_probe]
    if policy.probe_concurrency <= 1:
        for position in to_probe:
            await probe_one(position)
    else:
        await asyncio.gather(*(probe_one(position) for position in to_probe))

    report.invalid = [verdict for verdict in verdicts if verdict is not None]
    log_event(
        logger,
        logging.INFO,
        "scan_finished",
        total=report.scanned,
        invalid=len(report.invalid),
        skipped=len(report.skipped),
        probed=len(report.probed),
    )
    return report
