"""
Schemas for accounts and the groups that scope which models they can pick.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

GroupModelType = Literal["all", "specific"]


# ============================================================================
# Users
# ============================================================================


class AccountCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_.-]+$")
    password: str = Field(..., min_length=8)
    display_name: Optional[str] = Field(None, max_length=100)
    is_admin: bool = False
    group_id: Optional[int] = None


class AccountUpdate(BaseModel):
    """Partial account update.

    ``group_id`` is only applied when sent; an explicit null detaches the
    account from its group.
    """

    display_name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, min_length=8)
    is_active: Optional[bool] = None
    is_admin: Optional[bool] = None
    group_id: Optional[int] = None


class AccountResponse(BaseModel):
    id: int
    username: str
    display_name: Optional[str] = None
    is_admin: bool
    is_active: bool
    group_id: Optional[int] = None
    created_at: str

    @classmethod
    def from_db(cls, account) -> "AccountResponse":
        return cls(
            id=account.id,
            username=account.username,
            display_name=account.display_name,
            is_admin=account.is_admin,
            is_active=account.is_active,
            group_id=account.group_id,
            created_at=account.created_at.isoformat(),
        )


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str
    expires_in: int  # seconds
    user: AccountResponse


# ============================================================================
# Groups
# ============================================================================


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    model_type: GroupModelType = "all"
    model_ids: List[int] = Field(default_factory=list, description="Models granted when model_type is 'specific'")

    model_config = ConfigDict(protected_namespaces=())


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    model_type: Optional[GroupModelType] = None

    model_config = ConfigDict(protected_namespaces=())


class GroupModelsUpdate(BaseModel):
    model_ids: List[int]

    model_config = ConfigDict(protected_namespaces=())


class GroupResponse(BaseModel):
    id: int
    name: str
    model_type: str
    model_ids: List[int] = []

    model_config = ConfigDict(protected_namespaces=())

    @classmethod
    def from_db(cls, group) -> "GroupResponse":
        """Build from a Group with model_links loaded."""
        return cls(
            id=group.id,
            name=group.name,
            model_type=group.model_type,
            model_ids=sorted(link.model_id for link in group.model_links),
        )
