"""
MongoDB repository for profile likes and moderation reports.
"""

from datetime import datetime, timezone
from typing import List

from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from app.core.logging import get_logger
from app.domain.models.post import ProfileLikeModel, ReportModel
from app.domain.repositories.base_repository import MongoRepository

logger = get_logger(__name__)


class LikeRepository(MongoRepository):
    """Repository for profile likes in MongoDB."""

    collection_name = "profile_likes"

    async def _create_indexes(self):
        """Create database indexes for optimal performance."""
        try:
            await self.collection.create_index(
                [("user_id", ASCENDING), ("target_id", ASCENDING)],
                unique=True,
                name="user_target_unique",
            )
            await self.collection.create_index(
                [("target_id", ASCENDING)], name="target_index"
            )
            logger.info("Like indexes created successfully")
        except Exception as e:
            logger.error(f"Failed to create indexes: {e}")

    async def has_liked(self, user_id: str, target_id: str) -> bool:
        """Whether a user currently likes a profile."""
        await self.initialize()

        doc = await self.collection.find_one({"user_id": user_id, "target_id": target_id})
        return doc is not None

    async def count(self, target_id: str) -> int:
        """Number of likes a profile has."""
        await self.initialize()

        return await self.collection.count_documents({"target_id": target_id})

    async def toggle(self, user_id: str, target_id: str) -> bool:
        """
        Flip a like.

        Returns:
            True if the profile is liked after the call, False otherwise
        """
        await self.initialize()

        result = await self.collection.delete_one(
            {"user_id": user_id, "target_id": target_id}
        )
        if result.deleted_count:
            return False

        like = ProfileLikeModel(user_id=user_id, target_id=target_id)
        try:
            await self.collection.insert_one(like.model_dump())
        except DuplicateKeyError:
            # A concurrent toggle inserted the same like first
            logger.warning(f"Like already present for {user_id} -> {target_id}")
        return True

    async def targets_liked_by(self, user_id: str) -> List[str]:
        """IDs of the profiles a user currently likes."""
        await self.initialize()

        cursor = self.collection.find({"user_id": user_id}, {"target_id": 1})
        docs = await cursor.to_list(length=None)
        return [doc["target_id"] for doc in docs]

    async def delete_for_user(self, user_id: str) -> int:
        """Remove likes given by and given to a user."""
        await self.initialize()

        result = await self.collection.delete_many(
            {"$or": [{"user_id": user_id}, {"target_id": user_id}]}
        )
        return result.deleted_count


class ReportRepository(MongoRepository):
    """Repository for moderation reports in MongoDB."""

    collection_name = "reports"

    async def _create_indexes(self):
        """Create database indexes for optimal performance."""
        try:
            await self.collection.create_index(
                [("type", ASCENDING), ("target_id", ASCENDING)], name="target_index"
            )
        except Exception as e:
            logger.error(f"Failed to create indexes: {e}")

    async def create(self, report: ReportModel) -> str:
        """Store a report and return its ID."""
        await self.initialize()

        report_data = report.model_dump()
        report_data["type"] = report.type.value
        report_data["created_at"] = datetime.now(timezone.utc)
        result = await self.collection.insert_one(report_data)
        return str(result.inserted_id)


# Global repository instances
like_repository = LikeRepository()
report_repository = ReportRepository()
