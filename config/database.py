# config/database.py
from __future__ import annotations

import os
from typing import Optional
from urllib.parse import quote_plus

from pymongo import MongoClient
from pymongo.server_api import ServerApi

from middleware.errors import ConfigurationError


def _build_mongo_uri() -> str:
    """
    Build the MongoDB URI.
    Precedence:
      1. TEST_MONGODB_URI (for CI/tests)
      2. MONGODB_URI (full connection string)
      3. Individual parts: DB_USER / DB_PASSWORD / DB_HOST / DB_NAME
    """
    test_uri = os.getenv("TEST_MONGODB_URI")
    if test_uri:
        return test_uri

    uri = os.getenv("MONGODB_URI")
    if uri:
        return uri

    user = os.getenv("DB_USER", "").strip()
    pwd = os.getenv("DB_PASSWORD", "").strip()
    host = os.getenv("DB_HOST", "").strip()
    dbname = os.getenv("DB_NAME", "program_roster").strip()

    if not (user and pwd and host):
        raise ConfigurationError(
            "Missing Mongo credentials. Set TEST_MONGODB_URI, MONGODB_URI or "
            "DB_USER/DB_PASSWORD/DB_HOST (and optionally DB_NAME)."
        )

    return (
        f"mongodb+srv://{user}:{quote_plus(pwd)}@{host}/{dbname}"
        f"?retryWrites=true&w=majority&tls=true"
    )


class MongoConnection:
    """
    Singleton MongoDB client & DB accessor.
    - Holds a single pooled client for the process.
    - The client is opened on first use, not at import time.
    """

    _instance: Optional["MongoConnection"] = None

    def __new__(cls) -> "MongoConnection":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._client = None
            cls._instance._db_name = os.getenv("DB_NAME", "program_roster")
        return cls._instance

    def _init_client(self) -> None:
        uri = _build_mongo_uri()
        self._client = MongoClient(uri, server_api=ServerApi("1"))
        # Fail fast if credentials/URI are wrong
        self._client.admin.command("ping")

    @property
    def client(self) -> MongoClient:
        """Return the shared MongoClient instance."""
        if self._client is None:
            self._init_client()
        return self._client

    def db(self):
        """Return the default database handle."""
        return self.client[self._db_name]

    def collection(self, name: str):
        """Return a collection handle from the default DB."""
        return self.db()[name]

    def close(self) -> None:
        """Close the client and reset the singleton (used in tests/shutdown)."""
        if getattr(self, "_client", None) is not None:
            self._client.close()
        type(self)._instance = None


# Module-level singleton accessor
mongodb = MongoConnection()


def bootstrap_indexes() -> None:
    """
    Create the unique indexes the bulk importer relies on.
    Opt-in via DB_BOOTSTRAP_INDEXES=1.
    """
    if os.getenv("DB_BOOTSTRAP_INDEXES", "0") != "1":
        return

    from repositories.delegate_repository import DelegateRepository
    from repositories.parent_repository import ParentRepository
    from repositories.program_repository import ProgramAssignmentRepository
    from repositories.staff_repository import StaffRepository
    from repositories.users_repository import UserRepository

    for repo in (
        UserRepository(),
        DelegateRepository(),
        StaffRepository(),
        ParentRepository(),
        ProgramAssignmentRepository(),
    ):
        repo.ensure_indexes()
