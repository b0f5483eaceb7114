"""Domain entities for starred GitHub repositories."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

TOPIC_DELIMITER = ","
_ESCAPE = "\\"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp (``2024-01-01T00:00:00Z``)."""
    if not value:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Expected a timestamp string, got {value!r}")
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def encode_topics(topics: List[str]) -> str:
    """
    Join topic labels into their stored form.

    Labels are comma-joined. A comma or backslash inside a label is
    escaped with a backslash, so labels without either character encode
    exactly as a plain comma join.
    """
    escaped = [
        topic.replace(_ESCAPE, _ESCAPE * 2).replace(TOPIC_DELIMITER, _ESCAPE + TOPIC_DELIMITER)
        for topic in topics
    ]
    return TOPIC_DELIMITER.join(escaped)


def _parse_topics(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(topic, str) for topic in value):
        raise ValueError(f"Expected a list of topic strings, got {value!r}")
    return list(value)


def decode_topics(value: Optional[str]) -> List[str]:
    """Split a stored topic string back into labels."""
    if not value:
        return []

    topics: List[str] = []
    current: List[str] = []
    chars = iter(value)
    for char in chars:
        if char == _ESCAPE:
            current.append(next(chars, _ESCAPE))
        elif char == TOPIC_DELIMITER:
            topics.append("".join(current))
            current = []
        else:
            current.append(char)
    topics.append("".join(current))
    return topics


@dataclass(frozen=True)
class Repository:
    """Immutable starred repository entity."""

    id: int
    name: str
    html_url: str
    full_name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None
    stargazers_count: int = 0
    language: Optional[str] = None
    topics: List[str] = field(default_factory=list)
    is_template: bool = False
    private: bool = False
    starred_at: Optional[datetime] = None
    readme: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any], starred_at: Optional[datetime] = None) -> "Repository":
        """
        Build a repository from a GitHub REST API repository object.

        Args:
            payload: Decoded JSON repository object
            starred_at: When the authenticated user starred it, if known

        Raises:
            ValueError: If a required field is missing or malformed
        """
        try:
            return cls(
                id=int(payload["id"]),
                name=payload["name"],
                html_url=payload["html_url"],
                full_name=payload["full_name"],
                description=payload.get("description"),
                created_at=parse_timestamp(payload.get("created_at")),
                updated_at=parse_timestamp(payload.get("updated_at")),
                pushed_at=parse_timestamp(payload.get("pushed_at")),
                stargazers_count=int(payload.get("stargazers_count") or 0),
                language=payload.get("language"),
                topics=_parse_topics(payload.get("topics")),
                is_template=bool(payload.get("is_template", False)),
                private=bool(payload.get("private", False)),
                starred_at=starred_at,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed repository payload: {e!r}") from e

    @property
    def has_readme(self) -> bool:
        return bool(self.readme)

    def with_readme(self, readme: str) -> "Repository":
        return replace(self, readme=readme)

    def to_export_dict(self) -> Dict[str, Any]:
        """Serializable representation with a fixed field order."""
        return {
            "id": self.id,
            "name": self.name,
            "html_url": self.html_url,
            "description": self.description,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
            "pushed_at": format_timestamp(self.pushed_at),
            "stargazers_count": self.stargazers_count,
            "language": self.language,
            "full_name": self.full_name,
            "topics": list(self.topics),
            "is_template": self.is_template,
            "private": self.private,
            "starred_at": format_timestamp(self.starred_at),
            "readme": self.readme,
        }


@dataclass(frozen=True)
class StarredRepo:
    """A repository paired with the time it was starred, as returned by /user/starred."""

    repo: Repository
    starred_at: Optional[datetime]

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "StarredRepo":
        if not isinstance(payload, dict) or "repo" not in payload:
            raise ValueError("Starred item is missing the 'repo' object")
        starred_at = parse_timestamp(payload.get("starred_at"))
        return cls(repo=Repository.from_api(payload["repo"]), starred_at=starred_at)

    def to_repository(self) -> Repository:
        return replace(self.repo, starred_at=self.starred_at)
