"""Runtime configuration assembled from command-line flags and the environment."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ghstars.infrastructure.database import DEFAULT_DB_PATH


class ConfigurationError(Exception):
    """Raised when the run cannot start with the given configuration."""
    pass


@dataclass
class Config:
    db_path: str = DEFAULT_DB_PATH
    token: Optional[str] = None
    debug: bool = False
    skip_update: bool = False
    json_export: bool = False
    fetch_readme: bool = False
    store_private: bool = False

    @classmethod
    def from_args(cls, args, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build configuration from parsed arguments.

        Args:
            args: argparse namespace
            environ: Environment mapping, defaults to os.environ

        GITHUB_TOKEN supplies the credential. GHSTARS_DB is used when --db
        is not given.
        """
        if environ is None:
            environ = os.environ

        db_path = args.db or environ.get("GHSTARS_DB") or DEFAULT_DB_PATH
        return cls(
            db_path=db_path,
            token=environ.get("GITHUB_TOKEN") or None,
            debug=args.debug,
            skip_update=args.skip_update,
            json_export=args.json,
            fetch_readme=args.get_readme,
            store_private=args.store_private,
        )

    def validate(self):
        """
        Check preconditions before touching the store or the network.

        Raises:
            ConfigurationError: If the token is missing for an update, or an
                offline export is requested against a missing database
        """
        if self.skip_update and self.json_export and not os.path.exists(self.db_path):
            raise ConfigurationError(
                f"Database file {self.db_path} not found, "
                "use the exporter without --skip-update at least once."
            )
        if not self.skip_update and not self.token:
            raise ConfigurationError("GITHUB_TOKEN is required")
