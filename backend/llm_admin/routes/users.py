"""
Account routes: administrator-managed accounts plus login/logout for everyone.

An account's group decides which models /api/models/visible returns for it.
"""

import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from llm_admin.config import settings
from llm_admin.database import Group, User, UserSession, get_session
from llm_admin.models.accounts import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    LoginRequest,
    LoginResponse,
)
from llm_admin.utils.auth import (
    create_session,
    get_token_from_request,
    hash_password,
    invalidate_token,
    require_admin_auth,
    require_user_auth,
    verify_password,
)
from llm_admin.utils.db_helpers import check_duplicate, get_or_404
from llm_admin.utils.exceptions import raise_bad_request, raise_forbidden, raise_unauthorized

logger = logging.getLogger(__name__)

router = APIRouter()


async def _ensure_group_exists(session: AsyncSession, group_id: Optional[int]) -> None:
    if group_id is not None and await session.get(Group, group_id) is None:
        raise_bad_request(f"Group {group_id} does not exist")


async def _revoke_sessions(session: AsyncSession, account_id: int) -> None:
    await session.execute(delete(UserSession).where(UserSession.user_id == account_id))


# ============================================================================
# Account Administration
# ============================================================================


@router.get("/admin/users", response_model=List[AccountResponse])
async def list_accounts(
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(select(User).order_by(User.username))
    return [AccountResponse.from_db(account) for account in result.scalars()]


@router.post("/admin/users", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    data: AccountCreate,
    _: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    await check_duplicate(
        session, User, User.username, data.username,
        f"Username '{data.username}' already exists",
    )
    await _ensure_group_exists(session, data.group_id)

    account = User(
        **data.model_dump(exclude={"password"}),
        password_hash=hash_password(data.password),
    )
    session.add(account)
    await session.commit()
    await session.refresh(account)

    logger.info(f"Created account '{account.username}' (admin={account.is_admin}, group={account.group_id})")
    return AccountResponse.from_db(account)


@router.put("/admin/users/{user_id}", response_model=AccountResponse)
async def update_account(
    user_id: int,
    data: AccountUpdate,
    admin: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    """Update an account. Deactivating it also ends its open sessions."""
    account = await get_or_404(session, User, user_id, "User")
    changes = data.model_dump(exclude_unset=True)

    if account.id == admin.id and changes.get("is_admin") is False:
        raise_bad_request("Administrators cannot revoke their own admin flag")
    if "group_id" in changes:
        await _ensure_group_exists(session, changes["group_id"])

    password = changes.pop("password", None)
    if password is not None:
        account.password_hash = hash_password(password)

    for field, value in changes.items():
        if value is None and field != "group_id":
            continue
        setattr(account, field, value)

    if changes.get("is_active") is False:
        await _revoke_sessions(session, account.id)

    await session.commit()
    await session.refresh(account)

    logger.info(f"Updated account '{account.username}': {', '.join(sorted(data.model_fields_set))}")
    return AccountResponse.from_db(account)


@router.delete("/admin/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    user_id: int,
    admin: User = Depends(require_admin_auth),
    session: AsyncSession = Depends(get_session),
):
    account = await get_or_404(session, User, user_id, "User")
    if account.id == admin.id:
        raise_bad_request("Administrators cannot delete their own account")

    username = account.username
    await session.delete(account)
    await session.commit()

    logger.info(f"Deleted account '{username}' (id={user_id})")


# ============================================================================
# Sessions
# ============================================================================


@router.post("/users/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    """Exchange username and password for a bearer token."""
    result = await session.execute(select(User).where(User.username == credentials.username))
    account = result.scalar_one_or_none()

    if account is None or not verify_password(credentials.password, account.password_hash):
        logger.warning(f"Failed login for '{credentials.username}'")
        raise_unauthorized("Invalid username or password")
    if not account.is_active:
        raise_forbidden("Account is disabled")

    return LoginResponse(
        token=await create_session(session, account),
        expires_in=settings.session_expiry_hours * 3600,
        user=AccountResponse.from_db(account),
    )


@router.post("/users/logout")
async def logout(
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    token = get_token_from_request(request)
    if token:
        await invalidate_token(token, session)
    return {"message": "Logged out successfully"}


@router.get("/users/verify")
async def verify_token(
    auth: Tuple[str, User] = Depends(require_user_auth),
):
    _, account = auth
    return {"valid": True, "user": AccountResponse.from_db(account)}
