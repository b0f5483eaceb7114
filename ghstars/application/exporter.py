"""JSON export of the local store."""

import json
import logging
import sys
from typing import Optional, TextIO

from ghstars.infrastructure.database import DatabaseRepository

logger = logging.getLogger(__name__)


class JsonExporter:
    """Writes every stored repository as a pretty-printed JSON array."""

    def __init__(self, database_repository: DatabaseRepository):
        self.database_repository = database_repository

    def export(self, stream: Optional[TextIO] = None) -> int:
        """
        Dump the store to a text stream.

        Args:
            stream: Destination, stdout when omitted

        Returns:
            Number of repositories written
        """
        if stream is None:
            stream = sys.stdout

        data = [repo.to_export_dict() for repo in self.database_repository.get_all_repositories()]
        stream.write(json.dumps(data, indent=2, ensure_ascii=False))
        stream.write("\n")
        stream.flush()

        logger.debug(f"Exported {len(data)} repositories")
        return len(data)
