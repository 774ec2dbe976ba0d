"""GitHub REST client for the pull request being described."""

import logging
from typing import Any, Optional

import requests

from prnote.github.exceptions import PublishError, publish_error_kind

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30


class PullRequestClient:
    """Reads, comments on and updates pull requests of one repository."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        api_url: str = DEFAULT_API_URL,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            token: GitHub token with pull-requests and issues write access.
            owner: Repository owner.
            repo: Repository name.
            api_url: REST API root ($GITHUB_API_URL on GitHub Enterprise).
            timeout: Request timeout in seconds.
            session: Session to use. A new one is created when omitted.
        """
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "prnote",
        })

    def _url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}/{path}"

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        url = self._url(path)
        try:
            response = self.session.request(method, url, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            raise PublishError(publish_error_kind(None), f"{method} {url} failed: {e}") from e

        if not response.ok:
            message = response.text[:500]
            if "json" in response.headers.get("Content-Type", ""):
                try:
                    payload = response.json()
                except ValueError:
                    payload = None
                if isinstance(payload, dict):
                    message = payload.get("message", message)
            raise PublishError(
                publish_error_kind(response.status_code),
                f"{method} {url} returned HTTP {response.status_code}: {message}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise PublishError(
                publish_error_kind(None),
                f"{method} {url} returned a malformed JSON body: {e}",
                status_code=response.status_code,
            ) from e

    def get_pull_request(self, number: int) -> dict:
        """Fetch a pull request.

        Returns:
            The pull request object; "title" and "body" are what prnote uses.

        Raises:
            PublishError: If the request fails.
        """
        logger.info(f"Fetching pull request #{number}")
        return self._request("GET", f"pulls/{number}")

    def create_comment(self, number: int, body: str) -> dict:
        """Post a comment on the pull request's conversation.

        Raises:
            PublishError: If the request fails.
        """
        logger.info(f"Commenting on pull request #{number}")
        return self._request("POST", f"issues/{number}/comments", json={"body": body})

    def update_pull_request(
        self,
        number: int,
        body: Optional[str] = None,
        title: Optional[str] = None,
    ) -> dict:
        """Update the body and/or title of a pull request.

        Fields passed as None are left untouched.

        Raises:
            PublishError: If the request fails.
        """
        fields = {}
        if body is not None:
            fields["body"] = body
        if title is not None:
            fields["title"] = title
        if not fields:
            return {}

        logger.info(f"Updating {', '.join(fields)} of pull request #{number}")
        return self._request("PATCH", f"pulls/{number}", json=fields)
