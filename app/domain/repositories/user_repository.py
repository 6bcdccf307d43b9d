"""
MongoDB repository for user identities.
"""

from datetime import datetime, timezone
from typing import Optional

from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import EmailAlreadyRegisteredError, UsernameAlreadyTakenError
from app.core.logging import get_logger
from app.domain.models.user import (
    IdentityCreateModel,
    IdentityModel,
    IdentityUpdateModel,
)
from app.domain.repositories.base_repository import MongoRepository, to_object_id

logger = get_logger(__name__)


def _raise_duplicate(error: DuplicateKeyError, username: Optional[str]):
    """Translate a unique-index violation into the matching domain error."""
    key_pattern = (error.details or {}).get("keyPattern", {})
    if "email" in key_pattern:
        raise EmailAlreadyRegisteredError()
    raise UsernameAlreadyTakenError(username or "")


class UserRepository(MongoRepository):
    """Repository for user identities in MongoDB."""

    collection_name = "users"

    async def _create_indexes(self):
        """Create database indexes for optimal performance."""
        try:
            await self.collection.create_index(
                [("email", ASCENDING)], unique=True, name="email_unique"
            )
            await self.collection.create_index(
                [("username", ASCENDING)], unique=True, name="username_unique"
            )
            logger.info("User indexes created successfully")
        except Exception as e:
            logger.error(f"Failed to create indexes: {e}")

    async def get_by_email(self, email: str) -> Optional[IdentityModel]:
        """
        Get a user by email, including the stored password hash.

        Only the authentication adapter should read the hash off the result.
        """
        await self.initialize()

        doc = await self.collection.find_one({"email": email})
        if doc:
            return IdentityModel(**self._with_id(doc))
        return None

    async def get_by_id(self, user_id: str) -> Optional[IdentityModel]:
        """Get a user by ID."""
        await self.initialize()

        object_id = to_object_id(user_id)
        if object_id is None:
            return None

        doc = await self.collection.find_one({"_id": object_id})
        if doc:
            return IdentityModel(**self._with_id(doc))
        return None

    async def get_by_username(self, username: str) -> Optional[IdentityModel]:
        """Get a user by username."""
        await self.initialize()

        doc = await self.collection.find_one({"username": username})
        if doc:
            return IdentityModel(**self._with_id(doc))
        return None

    async def create(self, user: IdentityCreateModel) -> IdentityModel:
        """
        Insert a new user.

        Raises:
            UsernameAlreadyTakenError: Username is in use
            EmailAlreadyRegisteredError: Email is in use
        """
        await self.initialize()

        now = datetime.now(timezone.utc)
        user_data = user.model_dump()
        user_data.update(
            {"image": None, "tagline": None, "created_at": now, "updated_at": now}
        )

        try:
            result = await self.collection.insert_one(user_data)
        except DuplicateKeyError as e:
            _raise_duplicate(e, user.username)

        created_doc = await self.collection.find_one({"_id": result.inserted_id})
        return IdentityModel(**self._with_id(created_doc))

    async def update(
        self, user_id: str, update_data: IdentityUpdateModel
    ) -> Optional[IdentityModel]:
        """
        Update profile fields that were explicitly set.

        Returns:
            Updated user or None if not found
        """
        await self.initialize()

        object_id = to_object_id(user_id)
        if object_id is None:
            return None

        update_doc = update_data.model_dump(exclude_unset=True)
        update_doc["updated_at"] = datetime.now(timezone.utc)

        try:
            updated_doc = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": update_doc},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            _raise_duplicate(e, update_data.username)

        if updated_doc:
            return IdentityModel(**self._with_id(updated_doc))
        return None

    async def delete(self, user_id: str) -> bool:
        """Delete a user record."""
        await self.initialize()

        object_id = to_object_id(user_id)
        if object_id is None:
            return False

        result = await self.collection.delete_one({"_id": object_id})
        return result.deleted_count > 0


# Global repository instance
user_repository = UserRepository()
