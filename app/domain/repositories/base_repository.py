"""
Shared MongoDB connection handling for repositories.
"""

from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from app.core.config import get_mongodb_database_name, get_mongodb_url
from app.core.exceptions import DatabaseError
from app.core.logging import get_logger

logger = get_logger(__name__)


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a string id; None when it is not a valid ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class MongoRepository:
    """Base class for repositories backed by one MongoDB collection."""

    collection_name: str = ""

    def __init__(self):
        """Initialize the repository."""
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.collection: Optional[AsyncIOMotorCollection] = None
        self._initialized = False

    async def initialize(self):
        """Initialize MongoDB connection and collection."""
        if self._initialized:
            return

        try:
            database_name = get_mongodb_database_name()

            self.client = AsyncIOMotorClient(get_mongodb_url())
            self.database = self.client[database_name]
            self.collection = self.database[self.collection_name]

            await self._create_indexes()

            self._initialized = True
            logger.info(
                f"{self.__class__.__name__} initialized with database: {database_name}"
            )

        except Exception as e:
            logger.error(f"Failed to initialize {self.__class__.__name__}: {e}")
            raise DatabaseError(f"Could not connect to {self.collection_name} collection") from e

    async def _create_indexes(self):
        """Create collection indexes. Subclasses override."""

    async def close(self):
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            self._initialized = False
            logger.info(f"{self.__class__.__name__} connection closed")

    @staticmethod
    def _with_id(doc: dict) -> dict:
        """Expose the ObjectId as a string ``id`` field."""
        doc["id"] = str(doc.pop("_id"))
        return doc
