"""
MongoDB repository for posts.
"""

from typing import List, Optional

from pymongo import ASCENDING, DESCENDING

from app.core.logging import get_logger
from app.domain.models.post import PostModel
from app.domain.repositories.base_repository import MongoRepository, to_object_id

logger = get_logger(__name__)


class PostRepository(MongoRepository):
    """Repository for posts in MongoDB."""

    collection_name = "posts"

    async def _create_indexes(self):
        """Create database indexes for optimal performance."""
        try:
            await self.collection.create_index(
                [("user_id", ASCENDING), ("created_at", DESCENDING)],
                name="user_created_index",
            )
            await self.collection.create_index(
                [("created_at", DESCENDING)], name="created_at_index"
            )
            logger.info("Post indexes created successfully")
        except Exception as e:
            logger.error(f"Failed to create indexes: {e}")

    async def get(self, post_id: str) -> Optional[PostModel]:
        """Get a post by ID."""
        await self.initialize()

        object_id = to_object_id(post_id)
        if object_id is None:
            return None

        doc = await self.collection.find_one({"_id": object_id})
        if doc:
            return PostModel(**self._with_id(doc))
        return None

    async def list_latest(self, skip: int = 0, limit: int = 20) -> List[PostModel]:
        """Newest posts across all users."""
        await self.initialize()

        cursor = (
            self.collection.find({})
            .sort("created_at", DESCENDING)
            .skip(skip)
            .limit(limit)
        )
        docs = await cursor.to_list(length=None)
        return [PostModel(**self._with_id(doc)) for doc in docs]

    async def list_for_user(self, user_id: str) -> List[PostModel]:
        """All posts of one user, newest first."""
        await self.initialize()

        cursor = self.collection.find({"user_id": user_id}).sort("created_at", DESCENDING)
        docs = await cursor.to_list(length=None)
        return [PostModel(**self._with_id(doc)) for doc in docs]

    async def count_for_user(self, user_id: str) -> int:
        """Number of posts of one user."""
        await self.initialize()

        return await self.collection.count_documents({"user_id": user_id})

    async def delete(self, post_id: str) -> bool:
        """Delete a post."""
        await self.initialize()

        object_id = to_object_id(post_id)
        if object_id is None:
            return False

        result = await self.collection.delete_one({"_id": object_id})
        return result.deleted_count > 0

    async def delete_for_user(self, user_id: str) -> List[PostModel]:
        """Delete every post of a user and return what was removed."""
        posts = await self.list_for_user(user_id)
        if posts:
            await self.collection.delete_many({"user_id": user_id})
        return posts


# Global repository instance
post_repository = PostRepository()
