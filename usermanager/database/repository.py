"""User persistence."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError
from ..models.user import User

SORT_COLUMNS = {
    "name": User.name,
    "createdAt": User.created_at,
}


class UserRepository:
    """CRUD and filtered queries over the users table.

    Every write commits, so each call is atomic on its own.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, **fields: Any) -> User:
        """Insert a user; a duplicate email raises ConflictError."""
        user = User(**fields)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("User already exists")
        await self.db.refresh(user)
        return user

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_all_filtered(
        self,
        role: Optional[str] = None,
        sort_by: Optional[str] = None,
        order: Optional[str] = None
    ) -> List[User]:
        """Users with an optional role filter, ordered by `sort_by`."""
        stmt = select(User)
        if role:
            stmt = stmt.where(User.role == role)

        column = SORT_COLUMNS.get(sort_by or "name", User.name)
        ordering = column.desc() if order == "desc" else column.asc()
        stmt = stmt.order_by(ordering, User.id.asc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_inactive_since(self, cutoff: datetime) -> List[User]:
        """Users that never logged in or last logged in before `cutoff`."""
        stmt = (
            select(User)
            .where(or_(User.last_login.is_(None), User.last_login < cutoff))
            .order_by(User.id.asc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update(self, user: User, fields: Dict[str, Any]) -> User:
        for name, value in fields.items():
            setattr(user, name, value)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.commit()

    async def touch_last_login(self, user_id: int) -> Optional[User]:
        user = await self.find_by_id(user_id)
        if user is None:
            return None
        return await self.update(user, {"last_login": datetime.now(timezone.utc)})
