"""
MongoDB repository for profile links.
"""

from datetime import datetime, timezone
from typing import List

from pymongo import ASCENDING

from app.core.logging import get_logger
from app.domain.models.link import LinkType, ProfileLinkModel
from app.domain.repositories.base_repository import MongoRepository, to_object_id

logger = get_logger(__name__)


class LinkRepository(MongoRepository):
    """Repository for profile links in MongoDB."""

    collection_name = "links"

    async def _create_indexes(self):
        """Create database indexes for optimal performance."""
        try:
            # Not unique: a user may add several links of the same type
            await self.collection.create_index(
                [("user_id", ASCENDING), ("created_at", ASCENDING)],
                name="user_created_index",
            )
            logger.info("Link indexes created successfully")
        except Exception as e:
            logger.error(f"Failed to create indexes: {e}")

    async def create(self, user_id: str, url: str, link_type: LinkType) -> ProfileLinkModel:
        """Store a new link for a user."""
        await self.initialize()

        link = ProfileLinkModel(
            user_id=user_id,
            url=url,
            type=link_type,
            created_at=datetime.now(timezone.utc),
        )
        link_data = link.model_dump(exclude={"id"})
        link_data["type"] = link_type.value

        result = await self.collection.insert_one(link_data)
        return link.model_copy(update={"id": str(result.inserted_id)})

    async def list_for_user(self, user_id: str) -> List[ProfileLinkModel]:
        """All links of a user, in creation order."""
        await self.initialize()

        cursor = self.collection.find({"user_id": user_id}).sort("created_at", ASCENDING)
        docs = await cursor.to_list(length=None)
        return [ProfileLinkModel(**self._with_id(doc)) for doc in docs]

    async def delete(self, user_id: str, link_id: str) -> bool:
        """Delete one of the user's links."""
        await self.initialize()

        object_id = to_object_id(link_id)
        if object_id is None:
            return False

        result = await self.collection.delete_one({"_id": object_id, "user_id": user_id})
        return result.deleted_count > 0

    async def delete_for_user(self, user_id: str) -> int:
        """Delete every link of a user."""
        await self.initialize()

        result = await self.collection.delete_many({"user_id": user_id})
        return result.deleted_count


# Global repository instance
link_repository = LinkRepository()
