"""
Stargazer Backend — Star Service (Persistence Operations)
==========================================================

What:  List / get / create / update / delete for stars.
Why:   Keeps SQL and error translation out of the route handlers.
How:   Each method receives the request's AsyncSession, runs its statement,
       flushes writes (the session dependency commits), and converts
       database outcomes into application exceptions.
Who:   Called by the /stars route handlers.

Error Translation:
    no matching row          → NotFoundError  (404)
    UNIQUE(name) violation   → ConflictError  (409)
    blank name on create     → ValidationError (400)
    any other SQLAlchemyError → DatabaseError (500, details logged only)

Design Decision:
    StarService is stateless. It receives the session for each call, so
    concurrent requests never share mutable state here; serialization of
    writes is left to the database and its UNIQUE constraint.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stargazer.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from stargazer.models.star import Star

logger = logging.getLogger(__name__)


class StarService:
    """
    Business logic layer for star operations.

    Responsibilities:
        - list_stars(): all stars, in id order
        - get_star(): single star by name with not-found handling
        - create_star(): insert with duplicate-name detection
        - update_star(): overwrite description/url, optional rename
        - delete_star(): remove by name
    """

    async def list_stars(self, db: AsyncSession) -> List[Star]:
        """
        Return every star.

        Ordered by id so clients see a stable insertion order; no other
        ordering is promised.
        """
        try:
            result = await db.execute(select(Star).order_by(Star.id))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing stars: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve stars. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_star(self, db: AsyncSession, name: str) -> Star:
        """
        Retrieve the first star whose name equals `name`.

        Raises:
            NotFoundError: no star has that name (→ 404)
            DatabaseError: query execution failed (→ 500)
        """
        try:
            result = await db.execute(select(Star).where(Star.name == name).limit(1))
            star = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Database error fetching star %s: %s", name, str(e))
            raise DatabaseError(
                message="Could not retrieve the star. Please try again.",
                context={"name": name},
            )

        if star is None:
            raise NotFoundError(resource="star", resource_id=name)
        return star

    async def create_star(
        self,
        db: AsyncSession,
        name: str,
        description: str = "",
        url: str = "",
    ) -> Star:
        """
        Insert a new star.

        The flush assigns the id and surfaces the UNIQUE(name) violation
        immediately, so a duplicate is reported to the caller rather than
        discovered at commit time.

        Raises:
            ValidationError: name is empty or whitespace
            ConflictError: a star with this name already exists
            DatabaseError: the insert failed for another reason
        """
        if not name or not name.strip():
            raise ValidationError(message="Star name must not be blank", field="name")

        star = Star(name=name, description=description, url=url)
        db.add(star)

        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Rejected duplicate star name: %s", name)
            raise ConflictError(resource="star", resource_id=name) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating star %s: %s", name, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the star. Please try again.",
                context={"name": name, "error_type": type(e).__name__},
            )

        logger.info("Star created: %s (id=%s)", star.name, star.id)
        return star

    async def update_star(
        self,
        db: AsyncSession,
        name: str,
        description: str = "",
        url: str = "",
        new_name: Optional[str] = None,
    ) -> Star:
        """
        Overwrite description and url of the star called `name`.

        `new_name`, when given, non-blank and different, renames the star.
        The id is never touched.

        Raises:
            NotFoundError: no star has that name
            ConflictError: the rename target is already taken
            DatabaseError: the update failed for another reason
        """
        star = await self.get_star(db, name)

        star.description = description
        star.url = url
        if new_name and new_name.strip() and new_name != star.name:
            star.name = new_name

        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Rejected rename of star %s to existing name %s", name, new_name)
            raise ConflictError(resource="star", resource_id=new_name) from e
        except SQLAlchemyError as e:
            logger.error("Database error updating star %s: %s", name, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the star. Please try again.",
                context={"name": name, "error_type": type(e).__name__},
            )

        logger.info("Star updated: %s (id=%s)", star.name, star.id)
        return star

    async def delete_star(self, db: AsyncSession, name: str) -> int:
        """
        Remove every star whose name equals `name`.

        Returns:
            Number of rows deleted (at most one while the UNIQUE index holds).

        Raises:
            NotFoundError: nothing matched
        """
        try:
            result = await db.execute(delete(Star).where(Star.name == name))
        except SQLAlchemyError as e:
            logger.error("Database error deleting star %s: %s", name, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the star. Please try again.",
                context={"name": name, "error_type": type(e).__name__},
            )

        deleted = result.rowcount or 0
        if deleted == 0:
            raise NotFoundError(resource="star", resource_id=name)

        logger.info("Star deleted: %s", name)
        return deleted


# ── Singleton Instance ────────────────────────────────────────────────────
star_service = StarService()
