# stylist/utils/db_setup.py
# MongoDB connection handle and index setup

import logging
from typing import Callable, Optional

import pymongo
from pymongo.collection import Collection
from pymongo.database import Database as MongoDatabase

logger = logging.getLogger(__name__)


class Database:
    """
    Owns the MongoClient for one application instance.

    ``connect`` is idempotent and runs lazily on first use; ``close`` is called
    on application shutdown.
    """

    def __init__(
        self,
        uri: str,
        name: str,
        client_factory: Callable[..., pymongo.MongoClient] = pymongo.MongoClient,
    ):
        self.uri = uri
        self.name = name
        self._client_factory = client_factory
        self._client: Optional[pymongo.MongoClient] = None

    def connect(self) -> MongoDatabase:
        if self._client is None:
            client = self._client_factory(self.uri)
            try:
                client.server_info()  # Test connection
            except Exception as e:
                client.close()
                logger.error(f"Failed to connect to MongoDB: {str(e)}")
                raise
            self._client = client
            logger.info("Successfully connected to MongoDB")
            setup_db_indexes(self._client[self.name])
        return self._client[self.name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("MongoDB connection closed")

    def ping(self) -> bool:
        try:
            self.connect()
            self._client.server_info()
            return True
        except Exception as e:
            logger.error(f"MongoDB health check failed: {str(e)}")
            return False

    @property
    def users(self) -> Collection:
        return self.connect()["users"]


def setup_db_indexes(db: MongoDatabase) -> None:
    """
    Set up the indexes the account core relies on.

    The unique email index is what rejects concurrent duplicate signups.
    """
    db.users.create_index([("email", pymongo.ASCENDING)], name="email_1", unique=True)
    logger.info("Created unique email index")

    db.users.create_index(
        [("verification_token", pymongo.ASCENDING)], name="verification_token_1"
    )
    db.users.create_index(
        [("password_reset_token", pymongo.ASCENDING)], name="password_reset_token_1"
    )
    logger.info("Database indexes set up successfully")
