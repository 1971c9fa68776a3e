"""Publicación de la limpieza como pull request en GitHub.

Secuencia (cada paso corta el resto si falla, sin rollback):
1. Fork del repo upstream bajo la cuenta autenticada; espera a que su rama
   base sea legible.
2. Rama `cleanup-<timestamp>` (o la rama base del fork con estrategia fija).
3. Borrado de `domains/<subdominio>.json` uno a uno (best-effort).
4. Pull request contra la rama base del upstream.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from adapters.github_api import GitHubAPIError, GitHubClient
from adapters.http_client import build_github_client
from adapters.report_exporter import render_pull_request_body
from core.config import AppSettings, BranchStrategy
from core.domain.errors import DeleteFileError, PublishError
from core.domain.models import InvalidEntry, PullRequestHandle, RunContext, ValidationReport
from core.logging_utils import log_event

logger = logging.getLogger(__name__)


class GitHubPublisher:
    """Implementa `RemediationPublisher` contra la API REST de GitHub."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport
        self._sleep = sleep

    async def publish(self, report: ValidationReport, *, context: RunContext) -> PullRequestHandle:
        settings = self._settings
        if not report.invalid:
            raise PublishError("No invalid domains to publish")
        if not settings.github_token:
            raise PublishError("GitHub token is not configured (REGISTRY_CLEANUP_GITHUB_TOKEN)")

        async with build_github_client(settings, transport=self._transport) as http:
            api = GitHubClient(http)

            fork_owner, fork_repo = await self._fork(api)
            await self._wait_for_fork(api, fork_owner, fork_repo)
            await self._sync_fork(api, fork_owner, fork_repo)
            branch = await self._prepare_branch(api, fork_owner, fork_repo, context)

            log_event(logger, logging.INFO, "deleting_files", count=len(report.invalid), branch=branch)
            removed, failed = await self._delete_files(api, fork_owner, fork_repo, branch, report.invalid)

            rows: list[InvalidEntry] = report.invalid
            if settings.report_only_removed:
                removed_set = set(removed)
                rows = [item for item in report.invalid if item.entry.subdomain in removed_set]
                if not rows:
                    raise PublishError("No files were removed; refusing to open an empty pull request")

            body = render_pull_request_body(report=report, rows=rows)
            try:
                pr = await api.create_pull_request(
                    settings.upstream_owner,
                    settings.upstream_repo,
                    title=settings.pr_title,
                    body=body,
                    head=f"{fork_owner}:{branch}",
                    base=settings.base_branch,
                )
            except GitHubAPIError as exc:
                raise PublishError(f"Opening pull request failed: {exc}") from exc

        handle = PullRequestHandle(
            number=int(pr.get("number", 0)),
            url=str(pr.get("html_url", "")),
            branch=branch,
            removed=removed,
            failed=failed,
        )
        log_event(logger, logging.INFO, "pull_request_opened", url=handle.url, removed=len(removed), failed=len(failed))
        return handle

    async def _fork(self, api: GitHubClient) -> tuple[str, str]:
        settings = self._settings
        try:
            fork = await api.create_fork(settings.upstream_owner, settings.upstream_repo)
        except GitHubAPIError as exc:
            raise PublishError(f"Forking {settings.upstream_owner}/{settings.upstream_repo} failed: {exc}") from exc

        owner = (fork.get("owner") or {}).get("login") or settings.github_username
        name = fork.get("name") or settings.upstream_repo
        if not owner:
            raise PublishError("Could not determine the fork owner")
        log_event(logger, logging.INFO, "forked", fork=f"{owner}/{name}")
        return owner, name

    async def _wait_for_fork(self, api: GitHubClient, owner: str, repo: str) -> None:
        # El repo existe apenas llega el 202, pero los datos git se copian después:
        # hasta entonces la ref base responde 404 o 409 ("Git Repository is empty").
        settings = self._settings
        for attempt in range(settings.fork_poll_attempts):
            try:
                await api.get_branch_sha(owner, repo, settings.base_branch)
                return
            except GitHubAPIError as exc:
                if exc.status_code not in (404, 409):
                    raise PublishError(f"Checking fork {owner}/{repo} failed: {exc}") from exc
            logger.debug("Fork %s/%s not ready yet (attempt %d)", owner, repo, attempt + 1)
            await self._sleep(settings.fork_poll_interval_seconds)

        raise PublishError(f"Fork {owner}/{repo} did not become available")

    async def _sync_fork(self, api: GitHubClient, owner: str, repo: str) -> None:
        # Un fork desactualizado haría fallar los borrados; no es fatal.
        try:
            await api.merge_upstream(owner, repo, self._settings.base_branch)
        except GitHubAPIError as exc:
            logger.warning("Could not sync fork %s/%s with upstream: %s", owner, repo, exc)

    async def _prepare_branch(self, api: GitHubClient, owner: str, repo: str, context: RunContext) -> str:
        base = self._settings.base_branch
        if self._settings.branch_strategy is BranchStrategy.FIXED:
            return base

        branch = context.branch_name()
        try:
            sha = await api.get_branch_sha(owner, repo, base)
            await api.create_branch(owner, repo, branch, sha)
        except GitHubAPIError as exc:
            raise PublishError(f"Creating branch {branch} failed: {exc}") from exc
        log_event(logger, logging.INFO, "branch_created", branch=branch, base=base)
        return branch

    async def _delete_one(self, api: GitHubClient, owner: str, repo: str, branch: str, item: InvalidEntry) -> None:
        subdomain = item.entry.subdomain
        path = f"{self._settings.domains_dir}/{subdomain}.json"
        try:
            sha = await api.get_file_sha(owner, repo, path, ref=branch)
            await api.delete_file(
                owner,
                repo,
                path,
                sha=sha,
                branch=branch,
                message=f"chore: remove {item.entry.domain}",
            )
        except GitHubAPIError as exc:
            raise DeleteFileError(subdomain, str(exc)) from exc

    async def _delete_files(
        self,
        api: GitHubClient,
        owner: str,
        repo: str,
        branch: str,
        items: list[InvalidEntry],
    ) -> tuple[list[str], list[str]]:
        removed: list[str] = []
        failed: list[str] = []
        # Secuencial: cada commit cambia la punta de la rama.
        for item in items:
            try:
                await self._delete_one(api, owner, repo, branch, item)
            except DeleteFileError as exc:
                failed.append(exc.subdomain)
                log_event(logger, logging.ERROR, "delete_failed", domain=item.entry.domain, error=str(exc))
                continue
            removed.append(item.entry.subdomain)
            log_event(logger, logging.INFO, "deleted", domain=item.entry.domain)
        return removed, failed
