"""Application service mirroring starred repositories into the local store."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ghstars.domain.repository import Repository, StarredRepo
from ghstars.infrastructure.database import DatabaseRepository
from ghstars.infrastructure.github_client import GitHubClient
from ghstars.infrastructure.readme_resolver import ReadmeResolver

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Tallies for one synchronization run."""

    new: int = 0
    updated: int = 0
    skipped: int = 0
    skipped_private: int = 0
    pages: int = 0


class SyncService:
    """Reconciles the remote starred collection with the local store."""

    def __init__(
        self,
        github_client: GitHubClient,
        database_repository: DatabaseRepository,
        readme_resolver: Optional[ReadmeResolver] = None,
        store_private: bool = False,
        fetch_readme: bool = False,
    ):
        """
        Initialize sync service.

        Args:
            github_client: Source of starred pages
            database_repository: Local store
            readme_resolver: Required when fetch_readme is set
            store_private: Keep private repositories instead of skipping them
            fetch_readme: Attach READMEs to new and README-less records
        """
        if fetch_readme and readme_resolver is None:
            raise ValueError("fetch_readme requires a readme_resolver")

        self.github_client = github_client
        self.database_repository = database_repository
        self.readme_resolver = readme_resolver
        self.store_private = store_private
        self.fetch_readme = fetch_readme

    def sync(self, pages: Optional[Iterable[Iterable[StarredRepo]]] = None) -> SyncResult:
        """
        Walk every page and insert, README-complete or skip each record.

        Each write is committed as it happens, so an aborted run keeps what
        it already stored and the next run picks up from there.

        Args:
            pages: Pages of starred repositories; defaults to walking the API

        Returns:
            Tallies for this run

        Raises:
            GitHubAPIError: If a page cannot be fetched or decoded
            sqlite3.Error: If a lookup or write fails
        """
        if pages is None:
            pages = self.github_client.iter_starred_pages()

        result = SyncResult()
        for page in pages:
            result.pages += 1
            for starred in page:
                self.reconcile(starred, result)

        logger.info(f"New stars: {result.new}")
        logger.info(f"Updated stars: {result.updated}")
        return result

    def reconcile(self, starred: StarredRepo, result: SyncResult):
        """Apply the insert/update/skip policy to one starred repository."""
        repo = starred.to_repository()

        if repo.private and not self.store_private:
            logger.warning(f"Skipping private repository {repo.full_name}")
            result.skipped_private += 1
            return

        stored = self.database_repository.get_repository(repo.id)
        if stored is None:
            self._add_new_repo(repo)
            result.new += 1
        elif self._update_readme(stored):
            result.updated += 1
        else:
            result.skipped += 1

    def _add_new_repo(self, repo: Repository):
        if self.fetch_readme:
            readme = self.readme_resolver.resolve(repo.full_name)
            if readme is not None:
                repo = repo.with_readme(readme)

        self.database_repository.insert_repository(repo)

    def _update_readme(self, stored: Repository) -> bool:
        logger.debug(f"Repository {stored.full_name} already exists in the database")

        if not self.fetch_readme:
            return False
        if stored.has_readme:
            logger.debug("README already exists")
            return False

        logger.debug(f"Updating README for {stored.full_name}")
        readme = self.readme_resolver.resolve(stored.full_name)
        if not readme:
            return False

        updated = self.database_repository.update_readme(stored.id, readme)
        if updated:
            logger.debug(f"Updated README for {stored.full_name}")
        return updated
