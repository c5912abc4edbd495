"""
Database helper functions to reduce code duplication in routes and services.
"""

import logging
from typing import Any, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

from llm_admin.utils.exceptions import raise_conflict, raise_not_found

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=DeclarativeBase)


async def get_or_404(
    session: AsyncSession,
    model: Type[T],
    id: Any,
    resource: Optional[str] = None,
) -> T:
    """
    Fetch a record by primary key or raise 404.

    Args:
        session: Database session
        model: SQLAlchemy model class
        id: Primary key value to fetch
        resource: Resource name for the error message (default: class name)

    Returns:
        The fetched record

    Raises:
        HTTPException: 404 if record not found
    """
    obj = await session.get(model, id)

    if obj is None:
        raise_not_found(resource or model.__name__, id)

    return obj


async def get_by_field(
    session: AsyncSession,
    model: Type[T],
    field: Any,
    value: Any,
) -> Optional[T]:
    """Fetch a record by a specific field value."""
    stmt = select(model).where(field == value)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def check_duplicate(
    session: AsyncSession,
    model: Type[T],
    field: Any,
    value: Any,
    detail: Optional[str] = None,
) -> None:
    """
    Raise 409 Conflict if a record with the given field value already exists.

    Raises:
        HTTPException: 409 if duplicate found
    """
    if await get_by_field(session, model, field, value) is not None:
        raise_conflict(detail or f"{model.__name__} already exists")
