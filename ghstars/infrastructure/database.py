"""SQLite storage for starred repositories."""

import logging
import sqlite3
from typing import List, Optional

from ghstars.domain.repository import (
    Repository,
    decode_topics,
    encode_topics,
    format_timestamp,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "data.ghstars"

# Forward-only schema migrations; entry N brings the schema to user_version N.
MIGRATIONS = (
    """
    CREATE TABLE IF NOT EXISTS starred_repos (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        html_url TEXT NOT NULL,
        description TEXT,
        created_at DATETIME,
        updated_at DATETIME,
        pushed_at DATETIME,
        stargazers_count INTEGER,
        language TEXT,
        full_name TEXT,
        topics TEXT,
        is_template BOOLEAN,
        private BOOLEAN,
        starred_at DATETIME
    );
    """,
    "ALTER TABLE starred_repos ADD COLUMN readme TEXT;",
)

COLUMNS = (
    "id",
    "name",
    "html_url",
    "description",
    "created_at",
    "updated_at",
    "pushed_at",
    "stargazers_count",
    "language",
    "full_name",
    "topics",
    "is_template",
    "private",
    "starred_at",
    "readme",
)


def _row_to_repository(row: sqlite3.Row) -> Repository:
    return Repository(
        id=row["id"],
        name=row["name"],
        html_url=row["html_url"],
        full_name=row["full_name"],
        description=row["description"],
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
        pushed_at=parse_timestamp(row["pushed_at"]),
        stargazers_count=row["stargazers_count"] or 0,
        language=row["language"],
        topics=decode_topics(row["topics"]),
        is_template=bool(row["is_template"]),
        private=bool(row["private"]),
        starred_at=parse_timestamp(row["starred_at"]),
        readme=row["readme"],
    )


class DatabaseRepository:
    """Repository for storing starred GitHub repositories in a SQLite file."""

    def __init__(self, path: str = DEFAULT_DB_PATH):
        """
        Initialize database repository.

        Args:
            path: SQLite database file (``:memory:`` works for throwaway stores)
        """
        self.path = path
        self.conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "DatabaseRepository":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def connect(self):
        """Open the database file."""
        try:
            self.conn = sqlite3.connect(self.path)
            self.conn.row_factory = sqlite3.Row
            logger.debug(f"Opened database {self.path}")
        except sqlite3.Error as e:
            logger.error(f"Error opening database {self.path}: {e}")
            raise

    def close(self):
        """Close the database."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug(f"Closed database {self.path}")

    def _get_connection(self) -> sqlite3.Connection:
        if not self.conn:
            self.connect()
        return self.conn

    def schema_version(self) -> int:
        conn = self._get_connection()
        return conn.execute("PRAGMA user_version").fetchone()[0]

    def initialize_schema(self):
        """Apply pending migrations."""
        conn = self._get_connection()
        version = self.schema_version()
        if version >= len(MIGRATIONS):
            logger.debug(f"Database schema up to date (version {version})")
            return

        logger.debug("Migrating database...")
        try:
            for target, statement in enumerate(MIGRATIONS[version:], start=version + 1):
                conn.executescript(statement)
                conn.execute(f"PRAGMA user_version = {target}")
                conn.commit()
                logger.debug(f"Applied migration {target}")
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Error migrating database: {e}")
            raise

    def get_repository(self, repo_id: int) -> Optional[Repository]:
        """Look up one repository by id."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                f"SELECT {', '.join(COLUMNS)} FROM starred_repos WHERE id = ?",
                (repo_id,),
            ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error looking up repository {repo_id}: {e}")
            raise
        return _row_to_repository(row) if row else None

    def insert_repository(self, repo: Repository):
        """
        Insert a new repository.

        Args:
            repo: Repository entity, starred_at and readme included

        Raises:
            sqlite3.IntegrityError: If the id is already stored
        """
        conn = self._get_connection()
        values = (
            repo.id,
            repo.name,
            repo.html_url,
            repo.description,
            format_timestamp(repo.created_at),
            format_timestamp(repo.updated_at),
            format_timestamp(repo.pushed_at),
            repo.stargazers_count,
            repo.language,
            repo.full_name,
            encode_topics(repo.topics),
            repo.is_template,
            repo.private,
            format_timestamp(repo.starred_at),
            repo.readme,
        )
        placeholders = ", ".join("?" for _ in COLUMNS)
        try:
            conn.execute(
                f"INSERT INTO starred_repos ({', '.join(COLUMNS)}) VALUES ({placeholders})",
                values,
            )
            conn.commit()
            logger.debug(f"Inserted {repo.full_name}")
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Error inserting repository {repo.full_name}: {e}")
            raise

    def update_readme(self, repo_id: int, readme: str) -> bool:
        """
        Attach a README to a stored repository that has none yet.

        Returns:
            True if a row was updated, False if the row is missing or already has a README
        """
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "UPDATE starred_repos SET readme = ? "
                "WHERE id = ? AND (readme IS NULL OR readme = '')",
                (readme, repo_id),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Error updating README for repository {repo_id}: {e}")
            raise
        return cursor.rowcount > 0

    def get_all_repositories(self) -> List[Repository]:
        """Every stored repository, most recently starred first."""
        conn = self._get_connection()
        try:
            rows = conn.execute(
                f"SELECT {', '.join(COLUMNS)} FROM starred_repos ORDER BY starred_at DESC, id"
            ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error reading repositories: {e}")
            raise
        return [_row_to_repository(row) for row in rows]

    def get_repository_count(self) -> int:
        """Get the total number of repositories in the database."""
        conn = self._get_connection()
        try:
            return conn.execute("SELECT COUNT(*) FROM starred_repos").fetchone()[0]
        except sqlite3.Error as e:
            logger.error(f"Error getting repository count: {e}")
            raise
