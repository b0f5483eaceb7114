"""README lookup by probing common file names."""

import logging
from typing import Optional, Sequence

from ghstars.infrastructure.github_client import API_ROOT, RAW_MEDIA_TYPE, GitHubAPIError, GitHubClient

logger = logging.getLogger(__name__)

# Probed in order; the first path that exists wins.
README_CANDIDATES = (
    "README.md",
    "README.rst",
    "docs/README.md",
    ".github/README.md",
    "README.adoc",
    "README.markdown",
    "README.rdoc",
    "README.txt",
    "README",
    "readme.md",
    "Readme.md",
    "README.MD",
    "readme",
    "Readme",
    "readme.rst",
    "Readme.rst",
    "README.org",
    "Readme.org",
    "readme.org",
    "docs/Readme.md",
    "docs/readme.md",
)


class ReadmeResolver:
    """Finds the README of a repository through the contents endpoint."""

    def __init__(self, client: GitHubClient, candidates: Sequence[str] = README_CANDIDATES):
        self.client = client
        self.candidates = tuple(candidates)

    def content_url(self, full_name: str, path: str) -> str:
        return f"{API_ROOT}/repos/{full_name}/contents/{path}"

    def resolve(self, full_name: str) -> Optional[str]:
        """
        Return the raw body of the first candidate that exists.

        A failed or non-200 probe moves on to the next candidate.

        Args:
            full_name: Repository in ``owner/name`` form

        Returns:
            README body, or None if no candidate could be fetched
        """
        for path in self.candidates:
            url = self.content_url(full_name, path)
            try:
                response = self.client.get(url, accept=RAW_MEDIA_TYPE)
            except GitHubAPIError as e:
                logger.debug(f"Fetching {path} for {full_name} failed: {e}")
                continue

            if response.status_code == 200:
                logger.debug(f"Found {path} for {full_name}")
                return response.content.decode("utf-8", errors="replace")

            logger.debug(f"No {path} in {full_name} (status {response.status_code})")

        logger.warning(f"Failed to fetch README for {full_name}: no candidate found")
        return None
