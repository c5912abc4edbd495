"""
Admin routes for user groups and the models they grant.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from llm_admin.database import Group, GroupModel, LlmModel, User, get_session
from llm_admin.models.accounts import (
    GroupCreate,
    GroupModelsUpdate,
    GroupResponse,
    GroupUpdate,
)
from llm_admin.utils.auth import require_admin_auth
from llm_admin.utils.db_helpers import check_duplicate, get_or_404
from llm_admin.utils.exceptions import raise_bad_request

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_group(session: AsyncSession, group_id: int) -> Group:
    """Load a group with its model links; 404 if missing."""
    await get_or_404(session, Group, group_id, "Group")
    stmt = (
        select(Group)
        .where(Group.id == group_id)
        .options(selectinload(Group.model_links))
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one()


async def _replace_links(session: AsyncSession, group_id: int, model_ids: List[int]) -> None:
    """Replace a group's model links with ``model_ids`` (unknown ids rejected)."""
    wanted = set(model_ids)
    if wanted:
        result = await session.execute(select(LlmModel.id).where(LlmModel.id.in_(wanted)))
        missing = wanted - set(result.scalars().all())
        if missing:
            raise_bad_request(f"Unknown model ids: {sorted(missing)}")

    await session.execute(delete(GroupModel).where(GroupModel.group_id == group_id))
    for model_id in sorted(wanted):
        session.add(GroupModel(group_id=group_id, model_id=model_id))


# ============================================================================
# Group CRUD Endpoints
# ============================================================================


@router.get("/groups", response_model=List[GroupResponse])
async def list_groups(
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    stmt = select(Group).options(selectinload(Group.model_links)).order_by(Group.name)
    result = await session.execute(stmt)
    return [GroupResponse.from_db(g) for g in result.scalars().all()]


@router.post("/groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    data: GroupCreate,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    await check_duplicate(
        session, Group, Group.name, data.name,
        f"Group with name '{data.name}' already exists",
    )

    group = Group(name=data.name, model_type=data.model_type)
    session.add(group)
    await session.flush()
    await _replace_links(session, group.id, data.model_ids)
    await session.commit()

    logger.info(f"Created group: {group.name} (model_type={group.model_type}, models={len(data.model_ids)})")

    return GroupResponse.from_db(await _load_group(session, group.id))


@router.get("/groups/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: int,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    return GroupResponse.from_db(await _load_group(session, group_id))


@router.put("/groups/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: int,
    data: GroupUpdate,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    group = await get_or_404(session, Group, group_id, "Group")

    if data.name is not None and data.name != group.name:
        await check_duplicate(
            session, Group, Group.name, data.name,
            f"Group with name '{data.name}' already exists",
        )
        group.name = data.name
    if data.model_type is not None:
        group.model_type = data.model_type

    await session.commit()

    logger.info(f"Updated group: {group.name} (id={group_id})")

    return GroupResponse.from_db(await _load_group(session, group_id))


@router.put("/groups/{group_id}/models", response_model=GroupResponse)
async def set_group_models(
    group_id: int,
    data: GroupModelsUpdate,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Replace the models granted to a group."""
    await get_or_404(session, Group, group_id, "Group")
    await _replace_links(session, group_id, data.model_ids)
    await session.commit()

    logger.info(f"Set {len(set(data.model_ids))} models for group id={group_id}")

    return GroupResponse.from_db(await _load_group(session, group_id))


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    group_id: int,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Delete a group. Its members fall back to seeing every model."""
    group = await get_or_404(session, Group, group_id, "Group")

    group_name = group.name
    # SQLite does not enforce ON DELETE SET NULL without the foreign_keys pragma
    stmt = select(User).where(User.group_id == group_id)
    for member in (await session.execute(stmt)).scalars().all():
        member.group_id = None
    await session.delete(group)
    await session.commit()

    logger.info(f"Deleted group: {group_name} (id={group_id})")
