import json
import logging
from typing import Any, List, Optional
from urllib.parse import quote

import httpx

from app.errors import UpstreamError
from app.schemas.pinned import PinnedRepository

logger = logging.getLogger(__name__)


class PinServiceClient:
    """Talks to a pin service (``/user/{username}/pinned``) over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def get_pinned(self, username: str) -> List[dict]:
        failure = "Failed to fetch pinned repositories"
        response = self._request("GET", self._pinned_path(username), failure)
        if response.status_code == 404:
            return []
        return self._json(response, failure)

    def pin(self, username: str, repo: PinnedRepository) -> List[dict]:
        failure = "Failed to pin repository"
        logger.info("Pinning repo %s for %s via pin service", repo.key, username)
        response = self._request("POST", self._pinned_path(username), failure, json={"repo": repo.to_json()})
        return self._json(response, failure)

    def unpin(self, username: str, repo_id: str) -> List[dict]:
        failure = "Failed to unpin repository"
        logger.info("Unpinning repo %s for %s via pin service", repo_id, username)
        response = self._request("DELETE", self._pinned_path(username), failure, params={"id": repo_id})
        return self._json(response, failure)

    def reorder(self, username: str, repo_ids: List[Any], token: str) -> dict:
        failure = "Failed to reorder repositories"
        response = self._request(
            "POST",
            f"/user/{quote(username, safe='')}/reorder",
            failure,
            json={"repoIds": repo_ids},
            headers={"Authorization": f"Bearer {token}"},
        )
        return self._json(response, failure)

    def _pinned_path(self, username: str) -> str:
        return f"/user/{quote(username, safe='')}/pinned"

    def _request(self, method: str, path: str, failure: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise UpstreamError(failure, details=str(exc)) from exc

    def _json(self, response: httpx.Response, failure: str) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            text = response.text
            logger.error("Non-JSON response from pin service: %s", text[:200])
            raise UpstreamError(
                "Invalid response from pin service",
                details=text[:100],
                status_code=502,
                upstream_status=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Invalid response from pin service",
                details=str(exc),
                status_code=502,
                upstream_status=response.status_code,
            ) from exc
        if response.is_error:
            raise UpstreamError(failure, details=f"Pin service error: {response.status_code} - {json.dumps(data)}")
        return data
