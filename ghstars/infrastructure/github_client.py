"""GitHub REST API client for walking the authenticated user's stars."""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional
from urllib.parse import parse_qs, urlparse

import requests

from ghstars.domain.repository import StarredRepo

logger = logging.getLogger(__name__)

API_ROOT = "https://api.github.com"
STARRED_URL = f"{API_ROOT}/user/starred?per_page=100"
STAR_MEDIA_TYPE = "application/vnd.github.star+json"
RAW_MEDIA_TYPE = "application/vnd.github.v3.raw"


class GitHubAPIError(Exception):
    """Raised when a GitHub request fails or returns an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


@dataclass
class StarredPage:
    """One page of starred repositories."""

    number: int
    total: Optional[int]
    repos: List[StarredRepo]

    def __iter__(self) -> Iterator[StarredRepo]:
        return iter(self.repos)

    def __len__(self) -> int:
        return len(self.repos)


def page_count_from_link(url: Optional[str]) -> Optional[int]:
    """Read the ``page`` query parameter of a pagination URL."""
    if not url:
        return None
    pages = parse_qs(urlparse(url).query).get("page")
    if not pages:
        return None
    try:
        return int(pages[0])
    except ValueError:
        return None


class GitHubClient:
    """Client for the GitHub REST API. One attempt per request, no retries."""

    DEFAULT_TIMEOUT_SECONDS = 10

    def __init__(
        self,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token
            session: Optional pre-built session (used by tests)
            timeout: Per-request timeout in seconds
        """
        self.token = token
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {self.token}"})

    def close(self):
        self.session.close()

    def get(self, url: str, accept: str) -> requests.Response:
        """
        Issue a single authenticated GET.

        Args:
            url: Absolute request URL
            accept: Media type for the Accept header

        Returns:
            The response, whatever its status code

        Raises:
            GitHubAPIError: On connection or timeout failure
        """
        try:
            return self.session.get(url, headers={"Accept": accept}, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise GitHubAPIError(f"Request to {url} failed: {e}", url=url) from e

    def iter_starred_pages(self, url: str = STARRED_URL) -> Iterator[StarredPage]:
        """
        Walk the starred collection following Link header cursors.

        Pages are yielded in server order and the walk stops when the
        response carries no ``next`` relation. Any failure aborts the walk.

        Args:
            url: First page URL

        Yields:
            StarredPage for each fetched page

        Raises:
            GitHubAPIError: On transport failure, non-200 status or undecodable body
        """
        next_url: Optional[str] = url
        number = 1

        while next_url:
            logger.debug(f"Page URL {next_url}")
            response = self.get(next_url, accept=STAR_MEDIA_TYPE)

            if response.status_code != 200:
                raise GitHubAPIError(
                    f"Fetching stars failed with status {response.status_code}: {response.text[:200]}",
                    status_code=response.status_code,
                    url=next_url,
                )

            try:
                items = response.json()
                if not isinstance(items, list):
                    raise ValueError(f"expected a JSON array, got {type(items).__name__}")
                repos = [StarredRepo.from_api(item) for item in items]
            except ValueError as e:
                raise GitHubAPIError(f"Could not decode starred page {number}: {e}", url=next_url) from e

            links = response.links
            total = page_count_from_link(links.get("last", {}).get("url"))
            logger.info(f"Fetching stars... (page {number}/{total or number})")

            yield StarredPage(number=number, total=total, repos=repos)

            next_url = links.get("next", {}).get("url")
            number += 1
