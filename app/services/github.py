import logging
from collections import Counter
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError as SchemaError

from app.config import DEFAULT_GITHUB_API_URL, DEFAULT_GITHUB_RAW_URL
from app.errors import UpstreamError
from app.schemas.github import GitHubRepo

logger = logging.getLogger(__name__)

TOP_TOPICS = 10


class GitHubClient:
    """Read-only GitHub REST calls behind the profile pages.

    ``token`` is optional on the public lookups; when given it is sent as a
    Bearer token so private data and the higher rate limit apply.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_GITHUB_API_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        raw_url: str = DEFAULT_GITHUB_RAW_URL,
    ) -> None:
        self._client = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)
        self._raw = httpx.Client(base_url=raw_url.rstrip("/"), timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()
        self._raw.close()

    def list_repos(self, token: str) -> List[GitHubRepo]:
        # Single page only; GitHub caps per_page at 100.
        failure = "Failed to fetch repositories"
        response = self._get("/user/repos", failure, token, params={"per_page": 100, "sort": "updated"})
        if response.is_error:
            logger.error("GitHub API error: %s", response.status_code)
            raise UpstreamError(failure, details=f"GitHub API error: {response.status_code}")

        try:
            return [GitHubRepo.model_validate(repo) for repo in response.json()]
        except (ValueError, TypeError, SchemaError) as exc:
            raise UpstreamError(failure, details=str(exc)) from exc

    def get_user(self, username: str, token: Optional[str] = None) -> Dict[str, Any]:
        failure = "Failed to fetch user"
        response = self._get(f"/users/{quote(username, safe='')}", failure, token)
        if response.is_error:
            raise UpstreamError(failure, status_code=response.status_code)
        return self._json(response, failure)

    def list_orgs(self, username: str, token: Optional[str] = None) -> List[Dict[str, Any]]:
        """Organisations of ``username``, each merged with its full ``/orgs/{login}`` record."""
        failure = "Failed to fetch organizations"
        response = self._get(f"/users/{quote(username, safe='')}/orgs", failure, token)
        if response.is_error:
            raise UpstreamError(failure, status_code=response.status_code)

        detailed = []
        for org in self._json(response, failure):
            detailed.append({**org, **self._org_details(org.get("login"), token)})
        return detailed

    def top_topics(self, username: str, token: Optional[str] = None) -> List[str]:
        """Up to ten topics used across the user's public repos, most frequent first."""
        failure = "Failed to fetch topics"
        response = self._get(
            f"/users/{quote(username, safe='')}/repos", failure, token, params={"per_page": 100}
        )
        if response.is_error:
            raise UpstreamError(failure, status_code=response.status_code)

        counts = Counter(
            str(topic) for repo in self._json(response, failure) for topic in (repo.get("topics") or [])
        )
        # most_common keeps first-seen order among equal counts
        return [topic for topic, _ in counts.most_common(TOP_TOPICS)]

    def get_profile_readme(self, username: str, token: Optional[str] = None) -> str:
        """The profile README, i.e. ``README.md`` on ``main`` of the ``username/username`` repo."""
        name = quote(username, safe="")
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            response = self._raw.get(f"/{name}/{name}/main/README.md", headers=headers)
        except httpx.HTTPError as exc:
            logger.error("README request failed: %s", exc)
            raise UpstreamError("Failed to fetch README", details=str(exc)) from exc
        if response.is_error:
            raise UpstreamError("README not found", status_code=404)
        return response.text

    def _org_details(self, login: Optional[str], token: Optional[str]) -> Dict[str, Any]:
        if not login:
            return {}
        try:
            response = self._client.get(f"/orgs/{quote(login, safe='')}", headers=self._headers(token))
        except httpx.HTTPError as exc:
            logger.warning("Org details for %s failed: %s", login, exc)
            return {}
        if response.is_error:
            return {}
        try:
            details = response.json()
        except ValueError:
            return {}
        return details if isinstance(details, dict) else {}

    def _headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _get(self, path: str, failure: str, token: Optional[str], **kwargs: Any) -> httpx.Response:
        try:
            return self._client.get(path, headers=self._headers(token), **kwargs)
        except httpx.HTTPError as exc:
            logger.error("GitHub request %s failed: %s", path, exc)
            raise UpstreamError(failure, details=str(exc)) from exc

    def _json(self, response: httpx.Response, failure: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(failure, details=str(exc)) from exc
