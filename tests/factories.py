"""Builders for GitHub API payloads and fake HTTP responses."""

from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

from requests.utils import parse_header_links


def make_repo_payload(
    repo_id: int,
    name: Optional[str] = None,
    owner: str = "octo",
    private: bool = False,
    topics: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Helper to build a GitHub repository object."""
    name = name or f"repo-{repo_id}"
    return {
        "id": repo_id,
        "name": name,
        "full_name": f"{owner}/{name}",
        "html_url": f"https://github.com/{owner}/{name}",
        "description": f"Description of {name}",
        "created_at": "2020-01-01T00:00:00Z",
        "updated_at": "2024-05-01T12:00:00Z",
        "pushed_at": "2024-04-30T08:30:00Z",
        "stargazers_count": repo_id * 10,
        "language": "Python",
        "topics": topics if topics is not None else ["cli", "sync"],
        "is_template": False,
        "private": private,
    }


def make_starred_item(repo_id: int, starred_at: str = "2024-06-01T10:00:00Z", **kwargs) -> Dict[str, Any]:
    """Helper to build one item of the star+json media type."""
    return {"starred_at": starred_at, "repo": make_repo_payload(repo_id, **kwargs)}


def make_response(status_code: int = 200, json_data: Any = None, text: str = "", headers=None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.content = text.encode("utf-8")
    response.headers = headers or {}
    # Same shape as requests.Response.links
    response.links = {
        link.get("rel") or link.get("url"): link
        for link in parse_header_links(response.headers.get("Link", ""))
    }
    response.json.return_value = json_data
    return response


def link_header(**rels: str) -> str:
    """Build a Link header, e.g. link_header(next=url, last=url)."""
    return ", ".join(f'<{url}>; rel="{rel}"' for rel, url in rels.items())
