"""Module: auth."""

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from vetclinic.api.v1.routes.deps import get_caller, get_db, get_token_value
from vetclinic.core.errors import AuthenticationError
from vetclinic.core.identity import Caller, check_password, find_by_username, roles_of
from vetclinic.core.security import issue_token, revoke_token
from vetclinic.db.models.owner import Owner
from vetclinic.db.models.user import ROLE_STANDARD, User
from vetclinic.services.accounts import register_owner_account

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=6)
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    phone_number: str | None = None


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str
    email: str
    role: str
    owner_id: str | None = None


class MePayload(BaseModel):
    username: str
    roles: list[str]
    is_administrator: bool
    owner_id: str | None = None


def _primary_role(user: User) -> str:
    roles = roles_of(user)
    return roles[0] if roles else ROLE_STANDARD


@router.post("/register", response_model=AuthResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user, owner = register_owner_account(
        db,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone_number=payload.phone_number,
    )
    return AuthResponse(
        access_token=issue_token(user.user_id),
        username=user.username,
        email=user.email,
        role=ROLE_STANDARD,
        owner_id=str(owner.owner_id),
    )


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = find_by_username(db, payload.username)
    if not user or not check_password(user, payload.password):
        raise AuthenticationError("Invalid username or password")

    # Administrators may have no owner profile.
    owner_id = db.execute(select(Owner.owner_id).where(Owner.user_id == user.user_id)).scalar_one_or_none()

    return AuthResponse(
        access_token=issue_token(user.user_id),
        username=user.username,
        email=user.email,
        role=_primary_role(user),
        owner_id=str(owner_id) if owner_id else None,
    )


@router.get("/me", response_model=MePayload)
def me(caller: Caller = Depends(get_caller)):
    return MePayload(
        username=caller.username,
        roles=list(caller.roles),
        is_administrator=caller.is_administrator,
        owner_id=str(caller.owner_id) if caller.owner_id else None,
    )


@router.post("/logout", status_code=204)
def logout(
    authorization: str | None = Header(default=None),
    caller: Caller = Depends(get_caller),
):
    revoke_token(get_token_value(authorization))
