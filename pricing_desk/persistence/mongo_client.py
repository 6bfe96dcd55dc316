"""
Mongo Client — raw database connection management.
In mock mode, no actual connection is created and callers use their
in-memory stores.
"""

from __future__ import annotations

import logging
from typing import Any

from pricing_desk.config import get_settings

logger = logging.getLogger(__name__)


class MongoClient:
    """
    Thin wrapper around pymongo.
    In mock mode this is a no-op placeholder.
    """

    def __init__(self):
        self.settings = get_settings()
        self._client: Any = None
        self._db: Any = None

    def connect(self) -> None:
        """Establish the MongoDB connection (no-op in mock mode)."""
        if self.settings.mock_mode:
            logger.info("[MOCK] MongoDB connection simulated")
            return

        from pymongo import MongoClient as PyMongoClient

        self._client = PyMongoClient(self.settings.mongodb_uri)
        self._db = self._client[self.settings.mongodb_database]
        logger.info(f"Connected to MongoDB: {self.settings.mongodb_database}")

    def get_database(self) -> Any:
        """Return the database handle (None in mock mode)."""
        if self._db is None and not self.settings.mock_mode:
            self.connect()
        return self._db

    def close(self) -> None:
        """Close the connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None
            logger.info("MongoDB connection closed")
