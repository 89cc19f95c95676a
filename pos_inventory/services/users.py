"""
Admin user service.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, get_args

from ..models import User, UserRole
from .cache_aware import CacheAwareDBService
from .collections import USERS


class UserService:
    collection_data = USERS

    def __init__(self, db: CacheAwareDBService):
        self.db = db

    async def get_users(self, force_refresh: bool = False) -> list[User]:
        return await self.db.fetch_documents(self.collection_data, force_refresh=force_refresh)

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return await self.db.find_by_id(self.collection_data, user_id)

    async def create_user(self, name: str, email: str, role: UserRole = "user") -> User:
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            role=role,
            active=True,
            created_date=datetime.now(timezone.utc),
        )
        return await self.db.save_document(self.collection_data, user)

    async def set_user_active(self, user_id: str, active: bool) -> Optional[User]:
        return await self.db.update_document(self.collection_data, user_id, {"active": active})

    async def set_user_role(self, user_id: str, role: str) -> Optional[User]:
        """
        Raises:
            ValueError: If role is not a known user role
        """
        if role not in get_args(UserRole):
            raise ValueError(f"Unknown user role: {role}")
        return await self.db.update_document(self.collection_data, user_id, {"role": role})
