"""Cliente mínimo de la API REST de GitHub.

Solo cubre lo que necesita la publicación: fork, refs, contents y pulls.
Las respuestas no exitosas se convierten en `GitHubAPIError`; el publisher
decide cuáles son fatales.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx


class GitHubAPIError(Exception):
    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(f"{message} (HTTP {status_code})" if status_code else message)
        self.status_code = status_code


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip() or resp.reason_phrase
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return resp.reason_phrase


class GitHubClient:
    """Wrapper fino sobre un `httpx.AsyncClient` con base_url de la API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise GitHubAPIError(None, f"{method} {path} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise GitHubAPIError(resp.status_code, _error_message(resp))
        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    async def get_authenticated_user(self) -> dict[str, Any]:
        return await self._request("GET", "/user")

    async def create_fork(self, owner: str, repo: str) -> dict[str, Any]:
        # GitHub devuelve 202 y crea el fork de forma asíncrona.
        return await self._request("POST", f"/repos/{owner}/{repo}/forks")

    async def merge_upstream(self, owner: str, repo: str, branch: str) -> dict[str, Any]:
        return await self._request("POST", f"/repos/{owner}/{repo}/merge-upstream", json={"branch": branch})

    async def get_branch_sha(self, owner: str, repo: str, branch: str) -> str:
        data = await self._request("GET", f"/repos/{owner}/{repo}/git/ref/heads/{quote(branch)}")
        return data["object"]["sha"]

    async def create_branch(self, owner: str, repo: str, branch: str, sha: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/git/refs",
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )

    async def get_file_sha(self, owner: str, repo: str, path: str, *, ref: str) -> str:
        data = await self._request("GET", f"/repos/{owner}/{repo}/contents/{quote(path)}", params={"ref": ref})
        if not isinstance(data, dict) or "sha" not in data:
            raise GitHubAPIError(None, f"{path} is not a file")
        return data["sha"]

    async def delete_file(
        self,
        owner: str,
        repo: str,
        path: str,
        *,
        sha: str,
        branch: str,
        message: str,
    ) -> dict[str, Any]:
        return await self._request(
            "DELETE",
            f"/repos/{owner}/{repo}/contents/{quote(path)}",
            json={"message": message, "sha": sha, "branch": branch},
        )

    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        *,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )
