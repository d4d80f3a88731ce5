"""
RecipeShare API: Recipe Record Store
=====================================

What:  Data-access layer for recipes on top of an AsyncSession.
How:   Small async methods, one round trip each, every one bounded by
       settings.db_timeout. SQLAlchemy errors and timeouts are wrapped in
       PersistenceError; a missing id is returned as None.
Who:   ListingService (find, count) and RecipeService (find_by_id, create,
       save, remove).

Filter:
    name_pattern is an already-escaped regular expression matched
    case-insensitively against Recipe.name (`name ~* :pattern` on
    PostgreSQL). None matches every recipe.
"""

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from recipeshare.config import settings
from recipeshare.exceptions import PersistenceError
from recipeshare.models.recipe import Recipe

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _name_filter(query, name_pattern: Optional[str]):
    if name_pattern is None:
        return query
    return query.where(Recipe.name.regexp_match(name_pattern, flags="i"))


class RecipeStore:
    """Record store for Recipe rows, scoped to one request's session."""

    def __init__(self, db: AsyncSession, timeout: Optional[float] = None):
        self.db = db
        self.timeout = timeout if timeout is not None else settings.db_timeout

    async def _run(self, operation: str, awaitable: Awaitable[T], **context: Any) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("Record store %s timed out after %.1fs", operation, self.timeout)
            raise PersistenceError(
                message="The database took too long to respond. Please try again.",
                context={"operation": operation, "timeout": self.timeout, **context},
            )
        except SQLAlchemyError as e:
            logger.error("Record store %s failed: %s", operation, str(e))
            raise PersistenceError(
                context={"operation": operation, "error_type": type(e).__name__, **context},
            )

    async def find(self, name_pattern: Optional[str], skip: int, limit: int) -> List[Recipe]:
        """Returns up to `limit` matching recipes after skipping `skip`."""
        query = _name_filter(select(Recipe), name_pattern).offset(skip).limit(limit)
        try:
            result = await self._run("find", self.db.execute(query), skip=skip, limit=limit)
        except PersistenceError:
            # Leave the transaction usable for the follow-up count query
            await self.db.rollback()
            raise
        return list(result.scalars().all())

    async def count(self, name_pattern: Optional[str]) -> int:
        """Counts every recipe matching the filter (ignores paging)."""
        query = _name_filter(select(func.count(Recipe.id)), name_pattern)
        result = await self._run("count", self.db.execute(query))
        return result.scalar() or 0

    async def find_by_id(self, recipe_id: UUID, with_comments: bool = False) -> Optional[Recipe]:
        query = select(Recipe).where(Recipe.id == recipe_id)
        if with_comments:
            query = query.options(selectinload(Recipe.comments))
        result = await self._run("find_by_id", self.db.execute(query), recipe_id=str(recipe_id))
        return result.scalar_one_or_none()

    async def create(self, fields: Dict[str, Any]) -> Recipe:
        """Inserts a new recipe; id and created_at are assigned on flush."""
        recipe = Recipe(**fields)
        self.db.add(recipe)
        await self._run("create", self.db.flush())
        logger.info("Recipe record created: %s", recipe.id)
        return recipe

    async def save(self, recipe: Recipe) -> None:
        await self._run("save", self.db.flush(), recipe_id=str(recipe.id))

    async def remove(self, recipe: Recipe) -> None:
        await self._run("remove", self.db.delete(recipe), recipe_id=str(recipe.id))
        await self._run("remove", self.db.flush(), recipe_id=str(recipe.id))
